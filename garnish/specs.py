r"""
Garnish option specifications and factories.

Overview
- Kinds
  • OptionKind: closed set of option kinds (flag, string, enumeration, integer, real).
    The kind decides which value field is meaningful and which qualifiers are legal.

- Specs
  • OptionSpec: immutable descriptor of one option: names, description, requiredness,
    singleton behavior, enumeration choices and the optional qualifiers (default value,
    numeric range, environment variable).

- Factories
  • flag_spec(...), str_spec(...), enum_spec(...), int_spec(...), real_spec(...)
  • help_spec(), version_spec(): the conventional -h/--help and -V/--version singletons.

- Qualifiers (copy-on-write; each returns a new spec)
  • def_str(value): default for string and enumeration options.
  • def_int(value) / def_real(value): default for integer / real options.
  • int_range(min, max) / real_range(min, max): inclusive range for numeric options.
  • env_var(name): environment variable able to supply the value.

Qualifier policy (warn and continue)
- Each qualifier may be applied at most once. A second application, or a qualifier
  that does not fit the kind, emits a SpecWarning and the qualifier is dropped.
- A numeric default and a range are checked against each other by whichever comes
  second; a mismatch only warns, both are kept.
- An enumeration default must be one of the choices, otherwise it is dropped.
- Wrong Python types (e.g. def_int("3")) are programmer errors and raise TypeError.

Quick example:
    >>> from garnish.specs import int_spec
    >>> count = int_spec("count", "c", "Number of widgets.").int_range(1, 20).def_int(4).env_var("WIDGETS")
    >>> count.range, count.default, count.envvar
    ((1, 20), 4, 'WIDGETS')

Public API
- Types: OptionKind, OptionSpec
- Factories: flag_spec, str_spec, enum_spec, int_spec, real_spec, help_spec, version_spec
"""
import functools
import operator
import re
from enum import Enum

from .faults import *
from .utils import *


class OptionKind(Enum):
    """
    Closed set of option kinds; the value is the image used in diagnostics.
    """
    FLAG = "flag"
    STRING = "string"
    ENUM = "enumeration"
    INTEGER = "integer"
    REAL = "real"

    @property
    def numeric(self):
        return self in (OptionKind.INTEGER, OptionKind.REAL)


class SpecType(type):
    """
    Metaclass that turns specs into read-only, introspectable descriptors.

    Responsibilities
    - Expose every field listed in __introspectable__ as a read-only property
      mirroring the private backing attribute (see mirror()).
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics and interactive inspection.
    - Seal spec classes against subclassing to keep semantics predictable.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option-spec(kind=<OptionKind.FLAG: 'flag'>, long='verbose', ...)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        def __rich_repr__(self):
            """
            Yield (name, object) pairs for pretty printers, skipping absent qualifiers.
            """
            for name in type(self).__introspectable__:
                if (value := getattr(self, name)) is not None:
                    yield name, value
        self.__rich_repr__ = __rich_repr__

        if options.get("sealed", False):
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_names(long, short, /):
    """
    Internal: validate the long and short names of a spec.

    - long: non-empty string, no whitespace, must not start with '-'.
    - short: None or a single character that is neither whitespace nor '-'.

    Raises
    - TypeError: when a name is not a string (or None for short).
    - ValueError: when a name has the wrong shape.
    """
    if not isinstance(long, str):
        raise TypeError("option long name must be a string")
    elif not long:
        raise ValueError("option long name cannot be empty")
    elif long.startswith("-") or re.search(r"\s", long):
        raise ValueError(f"option long name {long!r} must not start with '-' nor contain whitespace")

    if short is None:
        return
    if not isinstance(short, str):
        raise TypeError("option short name must be a single character string or None")
    elif len(short) != 1 or short == "-" or short.isspace():
        raise ValueError(f"option short name {short!r} must be a single character other than '-'")


def _sanitize_choices(choices, /):
    """
    Internal: validate enumeration choices into a tuple (order preserved, duplicates rejected).
    """
    if isinstance(choices, str):
        raise TypeError("enumeration choices must be an iterable of strings, not a string")
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError("enumeration choices must be strings")
        if choice in sanitized:
            raise ValueError(f"enumeration choices cannot contain duplicates ({choice!r})")
        sanitized.append(choice)
    if not sanitized:
        raise ValueError("enumeration choices cannot be empty")
    return tuple(sanitized)


class OptionSpec(metaclass=SpecType, sealed=True):
    """
    Immutable descriptor of one command line option.

    Instances are built by the module factories and refined by the qualifier
    methods, each of which returns a new spec (copy.replace-style); a spec held
    elsewhere is never modified.

    Properties
    - The names listed in __introspectable__ are exposed as read-only attributes.
      Absent qualifiers (default, range, envvar) read back as None.
    """

    __introspectable__ = (
        "kind",
        "long",
        "short",
        "descr",
        "required",
        "singleton",
        "choices",
        "default",
        "range",
        "envvar",
    )

    def __new__(
            cls,
            kind,
            long,
            short=None,
            descr="",
            /,
            required=False,
            *,
            singleton=False,
            choices=(),
            default=Unset,
    ):
        """
        Construct a spec. Prefer the module factories; this is their common backend.

        Parameters
        - kind: OptionKind
        - long: str; long name used as --long and as the key of parsed values.
        - short: str | None; one character used as -x.
        - descr: str; help text. A leading '!' selects verbatim multi-line output.
        - required: bool; a defined default always satisfies the requirement.
        - singleton: bool; when given on the command line, parsing stops and succeeds.
        - choices: Iterable[str]; enumeration literals (ENUM only, mandatory there).
        - default: implicit default installed by the factory (flags use False).
        """
        if not isinstance(kind, OptionKind):
            raise TypeError("option kind must be an OptionKind")
        _sanitize_names(long, short)
        if not isinstance(descr, str):
            raise TypeError("option description must be a string")
        if kind is OptionKind.ENUM:
            choices = _sanitize_choices(choices)
        elif tuple(choices):
            raise TypeError(f"only enumeration options accept choices, not {kind.value} options")

        self = super().__new__(cls)
        self._kind = kind
        self._long = long
        self._short = short
        self._descr = descr
        self._required = bool(required)
        self._singleton = bool(singleton)
        self._choices = choices
        self._default = default
        self._range = Unset
        self._envvar = Unset
        return self

    def __replace__(self, /, **overrides):
        """
        Return a copy with the given backing fields replaced (copy.replace protocol).
        """
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        for name, value in overrides.items():
            if name not in type(self).__introspectable__:
                raise TypeError(f"{type(self).__typename__} has no field {name!r}")
            setattr(clone, "_" + name, value)
        return clone

    def __eq__(self, other):
        if not isinstance(other, OptionSpec):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __hash__(self):
        return hash((self._kind, self._long, self._short))

    @property
    def has_default(self):
        return self._default is not Unset

    @property
    def name(self):
        """
        Display name used in messages and help: "-x, --long" or "--long".
        """
        if self._short is not None:
            return f"-{self._short}, --{self._long}"
        return f"--{self._long}"

    @property
    def info(self):
        """
        Phrase naming this spec in authoring warnings: "the integer option 'count'".
        """
        return f"the {self._kind.value} option '{self._long}'"

    @property
    def span(self):
        """
        The configured range rendered as "min to max", or "" when there is none.
        """
        if not self._kind.numeric or self._range is Unset:
            return ""
        return "%s to %s" % tuple(map(self.format, self._range))

    @property
    def choice_set(self):
        """
        The enumeration choices rendered as "(a, b, c)", or "(nil)" for other kinds.
        """
        if self._kind is not OptionKind.ENUM:
            return "(nil)"
        return "(" + join(self._choices, ", ") + ")"

    def format(self, value, /):
        """
        Stringify a value of this kind the way messages and help show it.
        """
        match self._kind:
            case OptionKind.INTEGER:
                return int2str(value)
            case OptionKind.REAL:
                return real2str(value)
            case OptionKind.FLAG | OptionKind.STRING | OptionKind.ENUM:
                return str(value)

    def _dropped(self, warning, message, code, title):
        # the spec stays as it was, only the qualifier is lost
        trigger(warning(message, code=code, title=title, spec=self), stacklevel=2)
        return self.__replace__()

    def _outside(self, default, range, /):
        return default is not Unset and range is not Unset and not range[0] <= default <= range[1]

    def def_str(self, value, /):
        """
        Return a copy with a default value for a string or enumeration option.
        """
        if not isinstance(value, str):
            raise TypeError("def_str() argument must be a string")
        if self._kind not in (OptionKind.STRING, OptionKind.ENUM):
            return self._dropped(
                QualifierKindWarning,
                f"default string value for {self.info} ignored.",
                FaultCode.QUALIFIER_KIND,
                "qualifier does not fit the option kind",
            )
        if self._default is not Unset:
            return self._dropped(
                DuplicateQualifierWarning,
                f"secondary default value for {self.info} ignored.",
                FaultCode.DUPLICATE_QUALIFIER,
                "qualifier already set",
            )
        if self._kind is OptionKind.ENUM and index_of(self._choices, value) < 0:
            return self._dropped(
                DefaultValueWarning,
                f"the default value for {self.info} is not an allowed value.",
                FaultCode.DEFAULT_VALUE,
                "default value not allowed",
            )
        return self.__replace__(default=value)

    def def_int(self, value, /):
        """
        Return a copy with a default value for an integer option.
        """
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError("def_int() argument must be an integer")
        return self._def_number(OptionKind.INTEGER, value)

    def def_real(self, value, /):
        """
        Return a copy with a default value for a real option.
        """
        if not isinstance(value, int | float) or isinstance(value, bool):
            raise TypeError("def_real() argument must be a real number")
        return self._def_number(OptionKind.REAL, float(value))

    def _def_number(self, kind, value, /):
        if self._kind is not kind:
            return self._dropped(
                QualifierKindWarning,
                f"default {kind.value} value for {self.info} ignored.",
                FaultCode.QUALIFIER_KIND,
                "qualifier does not fit the option kind",
            )
        if self._default is not Unset:
            return self._dropped(
                DuplicateQualifierWarning,
                f"secondary default value for {self.info} ignored.",
                FaultCode.DUPLICATE_QUALIFIER,
                "qualifier already set",
            )
        if self._outside(value, self._range):
            # kept anyway: an unusable default only matters if it is ever used
            trigger(DefaultValueWarning(
                f"the default value for {self.info} is out of range.",
                code=FaultCode.DEFAULT_VALUE,
                title="default value out of range",
                spec=self,
            ), stacklevel=2)
        return self.__replace__(default=value)

    def int_range(self, min, max, /):
        """
        Return a copy constrained to the inclusive integer range [min, max].
        """
        if any(not isinstance(x, int) or isinstance(x, bool) for x in (min, max)):
            raise TypeError("int_range() arguments must be integers")
        return self._range_of(OptionKind.INTEGER, min, max)

    def real_range(self, min, max, /):
        """
        Return a copy constrained to the inclusive real range [min, max].
        """
        if any(not isinstance(x, int | float) or isinstance(x, bool) for x in (min, max)):
            raise TypeError("real_range() arguments must be real numbers")
        return self._range_of(OptionKind.REAL, float(min), float(max))

    def _range_of(self, kind, min, max, /):
        if self._kind is not kind:
            return self._dropped(
                QualifierKindWarning,
                f"{kind.value} range constraint for {self.info} ignored.",
                FaultCode.QUALIFIER_KIND,
                "qualifier does not fit the option kind",
            )
        if self._range is not Unset:
            return self._dropped(
                DuplicateQualifierWarning,
                f"secondary range constraint for {self.info} ignored.",
                FaultCode.DUPLICATE_QUALIFIER,
                "qualifier already set",
            )
        if min > max:
            return self._dropped(
                EmptyRangeWarning,
                f"the range constraint for {self.info} is empty.",
                FaultCode.EMPTY_RANGE,
                "empty range",
            )
        if self._outside(self._default, (min, max)):
            trigger(DefaultValueWarning(
                f"the default value for {self.info} is out of range.",
                code=FaultCode.DEFAULT_VALUE,
                title="default value out of range",
                spec=self,
            ), stacklevel=2)
        return self.__replace__(range=(min, max))

    def env_var(self, name, /):
        """
        Return a copy whose value may be supplied by the named environment variable.

        An empty name leaves the option without environment variable.
        """
        if not isinstance(name, str):
            raise TypeError("env_var() argument must be a string")
        if self._envvar is not Unset:
            return self._dropped(
                DuplicateQualifierWarning,
                f"secondary environment variable for {self.info} ignored.",
                FaultCode.DUPLICATE_QUALIFIER,
                "qualifier already set",
            )
        return self.__replace__(envvar=name or Unset)


def flag_spec(long, short=None, descr="", /, singleton=False):
    """
    Build a flag (presence-only) option. Flags are implicitly optional and default to False.
    """
    return OptionSpec(OptionKind.FLAG, long, short, descr, singleton=singleton, default=False)


def str_spec(long, short=None, descr="", /, required=False):
    """
    Build a string option taking one argument.
    """
    return OptionSpec(OptionKind.STRING, long, short, descr, required)


def enum_spec(long, short=None, descr="", choices=(), /, required=False):
    """
    Build an enumeration option whose argument must be one of `choices` (case-sensitive).
    """
    return OptionSpec(OptionKind.ENUM, long, short, descr, required, choices=choices)


def int_spec(long, short=None, descr="", /, required=False):
    """
    Build an integer option taking one argument.
    """
    return OptionSpec(OptionKind.INTEGER, long, short, descr, required)


def real_spec(long, short=None, descr="", /, required=False):
    """
    Build a real (floating point) option taking one argument.
    """
    return OptionSpec(OptionKind.REAL, long, short, descr, required)


def help_spec():
    """
    The -h, --help singleton flag: parsing succeeds as soon as it is seen.
    """
    return flag_spec("help", "h", "Show this message and exit.", singleton=True)


def version_spec():
    """
    The -V, --version singleton flag: parsing succeeds as soon as it is seen.
    """
    return flag_spec("version", "V", "Show version and exit.", singleton=True)


__all__ = (
    "OptionKind",
    "OptionSpec",
    "flag_spec",
    "str_spec",
    "enum_spec",
    "int_spec",
    "real_spec",
    "help_spec",
    "version_spec",
)
