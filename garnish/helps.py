"""
Help text generated from option specifications.

render() is a pure function over an ordered collection of OptionSpec: it never
looks at parsed values nor the environment, only at the declared specs.

Layout
- "Options:" header.
- One block per option: the name column ("-x, --long" or "--long") padded to a
  fixed gap, then the description word-wrapped to the line width with continuation
  lines re-indented to the gap. A name too wide for the gap is followed by a single
  space and the description goes on from there, or starts on the next line when
  not even its first word fits.
- A description starting with "!" is emitted verbatim, line by line, without
  re-wrapping (usage banners, examples).
- A summary line built from the spec: "Required.", allowed values, range, default
  value and environment variable notes.
- Optionally a blank line after every block, and a final entry describing "--".

Palette keys
- header, option-name, flag-name, terminator-name, description, summary

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed and the result is plain text.
"""
from collections import defaultdict

from rich.console import Console
from rich.text import Text

from .specs import OptionKind
from .utils import join

# Column where descriptions start.
GAP = 20
# Narrowest and default line widths.
MIN_WIDTH = 40
DEFAULT_WIDTH = 92
# Leading marker of verbatim descriptions.
VERBATIM = "!"

TERMINATOR = (
    "The null option indicating no more options. "
    "This is useful if/when the initial parameters \"look like\" options."
)

console = Console(width=DEFAULT_WIDTH)


def _constraint(spec):
    match spec.kind:
        case OptionKind.ENUM:
            return f"Allowed values: {spec.choice_set}."
        case OptionKind.INTEGER | OptionKind.REAL:
            return f"Range: {spec.span}." if spec.range else ""
        case OptionKind.FLAG | OptionKind.STRING:
            return ""


def _default(spec):
    if not spec.has_default:
        return ""
    match spec.kind:
        case OptionKind.STRING | OptionKind.ENUM:
            return f"Default value: '{spec.default}'."
        case OptionKind.INTEGER | OptionKind.REAL:
            return f"Default value: {spec.format(spec.default)}."


def _environment(spec):
    if not spec.envvar:
        return ""
    if spec.has_default:
        return f"Use the {spec.envvar} environment variable to override the default value."
    return f"Use the {spec.envvar} environment variable to provide a default value."


def summary(spec, /):
    """
    The generated line following an option description, or "" when there is nothing to say.

    >>> summary(int_spec("count", "c", "...").int_range(1, 10).def_int(4))
    'Range: 1 to 10. Default value: 4.'
    """
    parts = []
    if spec.required and not spec.has_default:
        # a default satisfies the requirement
        parts.append("Required.")

    match spec.kind:
        case OptionKind.FLAG:
            if spec.envvar:
                parts.append(
                    f"Use the {spec.envvar} environment variable set to 'Y', 'YES' or '1' to set flag on."
                )
        case OptionKind.STRING:
            parts.extend((_default(spec), _environment(spec)))
        case OptionKind.ENUM | OptionKind.INTEGER | OptionKind.REAL:
            parts.extend((_constraint(spec), _default(spec), _environment(spec)))

    return join(filter(None, parts), " ")


def _section(head, lines):
    """
    Stitch a name column and description lines into a hanging-indent block.

    An empty first line leaves the name alone on its line.
    """
    section = Text()
    section.append(head)
    if not lines:
        return section.append("\n")

    if lines[0]:
        # always at least one space between the name column and the description
        section.append(" " * max(GAP - len(head), 1)).append(lines[0])
    for line in lines[1:]:
        section.append("\n")
        if line:
            section.append(" " * GAP).append(line)
    return section.append("\n")


def _fill(text, width):
    lines = list(text.wrap(console, width))
    for line in lines:
        line.rstrip()
    return [line for line in lines if line]


def _wrap(text, width, column=0):
    """
    Word-wrap a description following a name column `column` characters wide.

    Continuation lines always start at the gap. After a name wider than the gap,
    the first line only gets the room left behind the name.
    """
    if column + 1 <= GAP:
        return _fill(text, width - GAP)

    room = width - column - 1
    words = text.plain.split()
    if not words or len(words[0]) > room:
        return [Text()] + _fill(text, width - GAP)

    first = text.wrap(console, room)[0]
    plain = text.plain
    offset = len(first.plain)
    offset += len(plain[offset:]) - len(plain[offset:].lstrip())
    first.rstrip()
    return [first] + _fill(text[offset:], width - GAP)


def render(specs, /, width=DEFAULT_WIDTH, blank_lines=False, terminator=False, *, colorful=False):
    """
    Render the help text of the given specs as a rich Text (use .plain for a str).

    Parameters
    - specs: Iterable[OptionSpec], rendered in order.
    - width: characters per line; values under MIN_WIDTH are raised to it.
    - blank_lines: add an empty line after each option block.
    - terminator: append an entry describing the "--" no-more-options marker.
    - colorful: apply the palette; otherwise produce unstyled text.
    """
    width = max(width, MIN_WIDTH)

    styles = defaultdict(str, {
        "header": "bold #FFFFFF",  # Pure white header
        "option-name": "bold #00E6FF",  # CYAN for value-bearing options
        "flag-name": "bold #22C55E",  # GREEN for flags
        "terminator-name": "bold #FF4D94",  # MAGENTA for "--"
        "description": "#9CA3AF",  # Muted gray
        "summary": "italic #FFD600",  # AMBER for constraints/defaults
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        # Normalize to Rich Text. In non-colorful mode, strip styles.
        if not colorful:
            return Text(str(fragment))
        return Text(str(fragment), styler(style))

    result = Text()
    result.append(text("Options:", "header")).append("\n")

    for spec in specs:
        head = text(spec.name, "flag-name" if spec.kind is OptionKind.FLAG else "option-name")

        if spec.descr.startswith(VERBATIM):
            lines = [text(line, "description") for line in spec.descr[len(VERBATIM):].split("\n")]
        else:
            lines = _wrap(text(spec.descr, "description"), width, len(head))
        result.append(_section(head, lines))

        if extra := summary(spec):
            result.append(_section(Text(), _fill(text(extra, "summary"), width - GAP)))

        if blank_lines:
            result.append("\n")

    if terminator:
        result.append(_section(text("--", "terminator-name"), _wrap(text(TERMINATOR, "description"), width, 2)))

    return result


__all__ = (
    "GAP",
    "MIN_WIDTH",
    "DEFAULT_WIDTH",
    "VERBATIM",
    "TERMINATOR",
    "summary",
    "render",
)
