"""
Parsed option values.

- OptionValue: immutable record handed to callers, one per option.
- OptionValues: read-only lookup table keyed by long option name; an unknown name
  yields the empty record instead of raising, so callers can probe freely.
"""
from collections import namedtuple

from rich.table import Table


class OptionValue(namedtuple("OptionValue", ("defined", "flag", "str", "ival", "real"), defaults=(False, False, "", 0, 0.0))):
    """
    Resolved value of one option.

    - defined: set explicitly, by default or by environment variable.
    - flag: flag options.
    - str: string options, and the literal of enumeration options.
    - ival: integer options, and the ordinal of enumeration options.
    - real: real options.

    Only the field matching the option kind is meaningful; the others keep
    their empty values.
    """
    __slots__ = ()


class OptionValues:
    """
    Read-only snapshot of the values produced by one Parser.process() call.

    >>> values["count"].ival
    4
    >>> values["misspelled"]
    OptionValue(defined=False, flag=False, str='', ival=0, real=0.0)
    """
    __slots__ = ("_values",)

    def __init__(self, values=(), /):
        self._values = dict(values)

    def __getitem__(self, name):
        try:
            return self._values[name]
        except KeyError:
            return OptionValue()

    def get(self, name, default=None, /):
        return self._values.get(name, default)

    def __contains__(self, name):
        return name in self._values

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def items(self):
        return self._values.items()

    def __eq__(self, other):
        if not isinstance(other, OptionValues):
            return NotImplemented
        return self._values == other._values

    __hash__ = None

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self._values)

    def __rich__(self):
        table = Table("option", "defined", "flag", "ival", "real", "str")
        for name, value in self._values.items():
            table.add_row(
                name,
                "defined" if value.defined else "not defined",
                "set" if value.flag else "unset",
                str(value.ival),
                str(value.real),
                repr(value.str),
            )
        return table


__all__ = (
    "OptionValue",
    "OptionValues",
)
