"""
Garnish faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (parse errors and specification warnings). Codes are grouped by domain to keep
  copy consistent and make logs/searches predictable.
- OptionFault / SpecWarning: base types that carry message + options and know
  how to render themselves through rich, plain or colorful.
- trigger(): central entry point to surface any fault (raise errors, warn warnings).

Two severities
- Specification warnings (22xxx) come from authoring mistakes: a qualifier that
  does not fit the option kind, a qualifier applied twice, a default outside the
  range or the choices, conflicting option names. They go through the standard
  warnings machinery, so callers decide whether to show, record or silence them
  (warnings.catch_warnings, filters, -W). Construction always continues.
- Parse errors (21xxx) come from interpreting actual input (environment or
  command line). Parser.process raises them internally and turns the first one
  into a False result plus a single message; they never escape process().
"""
import warnings
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Group
from rich.text import Text

from .utils import Unset


class FaultCode(IntEnum):
    """
    canonical fault codes used across the library (stable identifiers).

    grouping (by high-level domain)
    - registry (2100x)
      • SPECIFICATION_ERRORS
    - tokens (2101x)
      • MALFORMED_OPTION, UNKNOWN_OPTION, DUPLICATE_OPTION, MISSING_ARGUMENT
    - values (2102x)
      • INVALID_NUMBER, OUT_OF_RANGE, INVALID_CHOICE, REQUIRED_VALUE
    - specification warnings (22xxx)
      • QUALIFIER_KIND, DUPLICATE_QUALIFIER, DEFAULT_VALUE, EMPTY_RANGE,
        CONFLICTING_NAMES

    rationale
    - codes are discoverable (searchable in logs and docs) and normalized to a string
      via normalize() so hosts can remap them if desired.
    """
    # --- registry errors (21xxx) ---
    SPECIFICATION_ERRORS        = 21001

    # --- token errors (21xxx) ---
    MALFORMED_OPTION            = 21011
    UNKNOWN_OPTION              = 21012
    DUPLICATE_OPTION            = 21013
    MISSING_ARGUMENT            = 21014

    # --- value errors (21xxx) ---
    INVALID_NUMBER              = 21021
    OUT_OF_RANGE                = 21022
    INVALID_CHOICE              = 21023
    REQUIRED_VALUE              = 21024

    # --- specification warnings (22xxx) ---
    QUALIFIER_KIND              = 22001
    DUPLICATE_QUALIFIER         = 22002
    DEFAULT_VALUE               = 22003
    EMPTY_RANGE                 = 22004
    CONFLICTING_NAMES           = 22011

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, kind):
    main = __import__("__main__")

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    renders = []

    if code := fault.options.get("code"):
        renders.append(Text.assemble(
            "[ ",
            text(code.normalize(), styler("code")),
            " | ",
            text(fault.options.get("title", "").title(), styler(f"{kind}-title")),
            " ]"
        ))

    renders.append(text(fault.message, styler(f"{kind}-message")))

    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    return Group(*renders)


class OptionFault(Exception):
    """
    Base parse error: a human-readable message plus read-only context options.

    str(fault) is the message alone; that is what Parser.error reports.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error")

    def __trigger__(self):
        raise self

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class SpecificationError(OptionFault): ...
class MalformedOptionError(OptionFault): ...
class UnknownOptionError(OptionFault): ...
class DuplicateOptionError(OptionFault): ...
class MissingArgumentError(OptionFault): ...
class InvalidNumberError(OptionFault): ...
class OutOfRangeError(OptionFault): ...
class InvalidChoiceError(OptionFault): ...
class RequiredValueError(OptionFault): ...


class SpecWarning(Warning):
    """
    Base specification warning: emitted while building specs or a parser,
    never fatal. The offending qualifier is simply dropped.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning")

    def __trigger__(self, stacklevel=1):
        warnings.warn(self, stacklevel=stacklevel + 1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class QualifierKindWarning(SpecWarning): ...
class DuplicateQualifierWarning(SpecWarning): ...
class DefaultValueWarning(SpecWarning): ...
class EmptyRangeWarning(SpecWarning): ...
class ConflictingNamesWarning(SpecWarning): ...


def trigger(fault, /, *, stacklevel=1, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - errors are raised; warnings go through warnings.warn, attributed to the
      frame `stacklevel` levels above the caller of trigger().
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    if options:
        fault = fault.__replace__(**options)
    if isinstance(fault, Warning):
        return fault.__trigger__(stacklevel + 2)
    fault.__trigger__()


__all__ = (
    "FaultCode",
    "OptionFault",
    "SpecificationError",
    "MalformedOptionError",
    "UnknownOptionError",
    "DuplicateOptionError",
    "MissingArgumentError",
    "InvalidNumberError",
    "OutOfRangeError",
    "InvalidChoiceError",
    "RequiredValueError",
    "SpecWarning",
    "QualifierKindWarning",
    "DuplicateQualifierWarning",
    "DefaultValueWarning",
    "EmptyRangeWarning",
    "ConflictingNamesWarning",
    "trigger",
)
