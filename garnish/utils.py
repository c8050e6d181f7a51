"""
Garnish utilities (internal helpers, carefully exposed)

Scope
- Building blocks shared by the specs, parsers and help layers.
- Public-but-internal leaning: the numeric converters are useful on their own,
  the sentinel and property helpers exist mainly for the package itself.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like ""/0.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr), frozen
    for containers and coalesced for Unset.

- Numeric text conversion
  • str2real / str2int: strict, whole-string parsing; None on failure (never raise).
  • real2str / int2str: stable stringification for defaults, ranges and messages.

- Misc
  • join(items, with_=" "), index_of(choices, value), form_arguments(argv=None).

Quick examples
    >>> str2int(" 42 ")
    42
    >>> str2int("12x") is None
    True
    >>> real2str(4.0), real2str(0.25)
    ('4.0', '0.25')
"""
import functools
import re
import sys
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    Used where None could be confused with a real value: a spec qualifier that
    was never applied is Unset, a qualifier applied with "" is "".

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in annotations (e.g., str | UnsetType).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        """
        Support reversed PEP 604 unions when UnsetType appears on the right.
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        """
        Ensure a single instance for this sentinel type.
        """
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __init_subclass__(cls, **options):
        """
        Disallow subclassing to preserve sentinel semantics.
        """
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve the Unset sentinel to a concrete default.

    Falsey values like "", 0 or False are preserved as-is; only Unset is replaced.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce("", "fallback")     -> ""
    """
    return object if object is not Unset else default


def _freeze(object):
    """
    Shallow read-only snapshot of container values.

    - Sequence (non-string) → tuple
    - Mapping → MappingProxyType over a copy
    - Set → frozenset
    - Unset → None
    - Anything else → returned as-is
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(object))
    elif isinstance(object, Set):
        return frozenset(object)
    return coalesce(object)


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance. Containers come back
    frozen and the Unset sentinel comes back as None, so callers never see
    internal state nor the sentinel.

    Example
    - Given self._choices, declare choices = mirror("choices") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    def getter(self):
        return _freeze(getattr(self, "_" + name))

    getter.__name__ = getter.__qualname__ = name
    return property(getter)


# Limits of the integer option kind (signed 32 bits).
INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

# Reserved marker: never accepted inside numeric text.
_MARKER = "!!"

_REAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)
_INT = re.compile(r"[+-]?\d+", re.ASCII)


def str2real(text, /):
    """
    Convert text into a float, or return None when it is not a number.

    The text is stripped of surrounding whitespace and the remainder must be a
    complete base-10 floating literal: "3.14", "-2", ".5", "1e3". Trailing
    characters ("3.14abc"), special names ("inf", "nan"), digit separators
    ("1_000") and anything containing the reserved "!!" marker are rejected.
    """
    if not isinstance(text, str):
        raise TypeError("str2real() argument must be a string")
    if _MARKER in text:
        return None
    if not _REAL.fullmatch(text := text.strip()):
        return None
    return float(text)


def str2int(text, /):
    """
    Convert text into an int, or return None when it is not an integer.

    The text is first read as a real so that values outside INT_MIN..INT_MAX are
    refused before any integer conversion, then the stripped text must be a
    complete base-10 integer literal ("12", "+7", "-3"; not "12.0", "1e3").
    """
    if (real := str2real(text)) is None:
        return None
    if real < INT_MIN or real > INT_MAX:
        return None
    if not _INT.fullmatch(text := text.strip()):
        return None
    return int(text)


def real2str(x, /):
    """
    Stringify a real: whole numbers keep one decimal ("4.0"), others use the
    general compact format ("0.25", "1e-07").
    """
    x = float(x)
    if x.is_integer():
        return "%.1f" % x
    return "%g" % x


def int2str(i, /):
    """
    Stringify an integer in plain base 10.
    """
    return "%d" % i


def join(items, with_=" ", /):
    """
    Concatenate string items separated by with_ (a single space by default).
    """
    return with_.join(items)


def index_of(choices, value, /):
    """
    Return the position of value within choices (exact, case-sensitive match), or -1.
    """
    for index, choice in enumerate(choices):
        if choice == value:
            return index
    return -1


def form_arguments(argv=None, /):
    """
    Return a fresh list of the given argument vector (sys.argv when omitted).
    """
    return list(sys.argv if argv is None else argv)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


__all__ = (
    # Functions
    "coalesce",
    "mirror",
    "str2real",
    "str2int",
    "real2str",
    "int2str",
    "join",
    "index_of",
    "form_arguments",

    # Types
    "UnsetType",

    # Constants
    "Unset",
    "INT_MIN",
    "INT_MAX",
)
