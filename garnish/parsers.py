"""
Garnish parser layer: validate a spec collection, then turn argument vectors into values.

What this module provides
- Parser: owns an ordered, immutable collection of OptionSpec and exposes
  • process(arguments, skip=True) -> bool: parse one argument vector.
  • error / fault: the first problem found by the last process() call.
  • options / parameters: the typed values and the leftover positional parameters.
  • help() / print_help(): generated help text (see garnish.helps).
  • parse() / abort(): conventional CLI flow (print error and help, exit with status).

Processing phases
- A (defaults and environment): every option starts from its default; a configured
  environment variable that is set overrides it. Invalid environment values abort
  before any token is read.
- B (tokens): left to right, "--" ends option parsing, the first token that does not
  start with '-' is the first parameter (and ends option parsing too), "-x" is a short
  option, "--name" a long option, anything else starting with '-' is malformed.
  Each option may appear once. A singleton option (help/version style) ends the
  processing successfully right away.
- C (requiredness): every required option must have resolved to a defined value.

Errors
- Parse problems are raised internally as garnish.faults exceptions and caught at the
  process() boundary: the call returns False, `error` holds the message and `fault`
  the exception. Nothing escapes process() for bad input.
- Name conflicts among the specs are reported once, as warnings, when the parser is
  built; the parser is then invalid and every process() call fails with
  "option specification errors".

Quick start
    from garnish import Parser, str_spec, int_spec, help_spec

    parser = Parser([
        str_spec("name", "n", "Who to greet.", True),
        int_spec("count", "c", "How many times.").int_range(1, 10).def_int(1),
        help_spec(),
    ])

    if not parser.process(["prog", "-n", "world"]):
        print(parser.error)
    parser.options["count"].ival   # 1
"""
import os
import sys

from rich.console import Console

from . import helps
from .faults import *
from .specs import OptionKind
from .utils import *
from .values import OptionValue, OptionValues

# Terminator token: everything after it is a parameter.
NO_MORE_OPTIONS = "--"

# Environment values that switch a flag on.
TRUTHY = frozenset({"1", "Y", "YES"})


class _Working:
    """
    Per-call working record of one option: the value being resolved plus the
    "already given on the command line" marker used for duplicate detection.
    """
    __slots__ = ("spec", "seen", "defined", "flag", "str", "ival", "real")

    def __init__(self, spec):
        self.spec = spec
        self.seen = False
        self.defined = spec.has_default
        self.flag = False
        self.str = ""
        self.ival = 0
        self.real = 0.0

    def freeze(self):
        return OptionValue(self.defined, self.flag, self.str, self.ival, self.real)


class Parser:
    """
    Option registry and argument processor.

    Parameters
    - specs: Iterable[OptionSpec]; order is kept for help output and requiredness checks.
    - width: help characters per line (minimum 40, default 92).
    - blank_lines: separate help blocks with an empty line.
    - terminator: describe the "--" marker at the end of the help.

    The parser keeps no state between process() calls besides its results: the
    working values are rebuilt at every call. It is not meant to be shared by
    overlapping calls from several threads.
    """

    def __init__(self, specs=(), /, width=helps.DEFAULT_WIDTH, blank_lines=False, terminator=False):
        self._specs = tuple(specs)
        self._longs = {}
        self._shorts = {}
        self._valid = True

        self.width = width
        self.blank_lines = blank_lines
        self.terminator = terminator

        for index, spec in enumerate(self._specs):
            for other in self._specs[index + 1:]:
                if spec.long == other.long or (spec.short is not None and spec.short == other.short):
                    self._valid = False
                    trigger(ConflictingNamesWarning(
                        f"conflicting option names: {spec.name} and {other.name}",
                        code=FaultCode.CONFLICTING_NAMES,
                        title="conflicting option names",
                        specs=(spec, other),
                    ))
            # first declaration wins; the parser is unusable on conflicts anyway
            self._longs.setdefault(spec.long, index)
            if spec.short is not None:
                self._shorts.setdefault(spec.short, index)

        self._error = ""
        self._fault = None
        self._options = OptionValues()
        self._parameters = []

    def __rich_repr__(self):
        yield "specs", self._specs
        yield "valid", self._valid
        yield "width", self._width
        yield "blank_lines", self.blank_lines, False
        yield "terminator", self.terminator, False

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ", ".join("%s=%r" % (name, value) for name, value, *_ in self.__rich_repr__()))

    @property
    def specs(self):
        return self._specs

    @property
    def valid(self):
        """
        False when the specs have conflicting names; process() then always fails.
        """
        return self._valid

    @property
    def width(self):
        return self._width

    @width.setter
    def width(self, width):
        if not isinstance(width, int) or isinstance(width, bool):
            raise TypeError("help width must be an integer")
        self._width = max(width, helps.MIN_WIDTH)

    @property
    def error(self):
        """
        Message of the first error found by the last process() call ("" if none).
        """
        return self._error

    @property
    def fault(self):
        """
        The OptionFault behind `error`, or None.
        """
        return self._fault

    @property
    def options(self):
        """
        Values of the last process() call, keyed by long name (empty until a call succeeds).
        """
        return self._options

    @property
    def parameters(self):
        """
        Arguments not consumed as options, in their original order.
        """
        return list(self._parameters)

    def process(self, arguments=Unset, /, skip=True):
        """
        Process an argument vector against the specs.

        Parameters
        - arguments: Sequence[str]; defaults to sys.argv.
        - skip: ignore the first argument (the program name).

        Returns
        - True on success (see options and parameters), False otherwise (see error).
        """
        self._error = ""
        self._fault = None
        self._options = OptionValues()
        self._parameters = []

        arguments = form_arguments(coalesce(arguments, sys.argv))
        try:
            working = self._resolve()
            self._scan(working, arguments[1:] if skip else arguments)
        except OptionFault as fault:
            self._fault = fault
            self._error = fault.message
            return False

        self._options = OptionValues((record.spec.long, record.freeze()) for record in working)
        return True

    def _resolve(self):
        """
        Phase A: seed every working record from its default and environment variable.
        """
        if not self._valid:
            trigger(SpecificationError(
                "option specification errors",
                code=FaultCode.SPECIFICATION_ERRORS,
                title="option specification errors",
                hint="fix the conflicting option names reported when the parser was built",
            ))

        working = []
        for spec in self._specs:
            record = _Working(spec)
            source = "default"

            value = Unset
            if spec.envvar is not None:
                value = os.environ.get(spec.envvar, Unset)

            match spec.kind:
                case OptionKind.FLAG:
                    record.flag = value in TRUTHY

                case OptionKind.STRING:
                    record.str = spec.default if spec.has_default else ""
                    if value is not Unset:
                        record.str = value
                        record.defined = True

                case OptionKind.ENUM:
                    record.str = spec.default if spec.has_default else ""
                    if value is not Unset:
                        source = f"environment variable {spec.envvar}"
                        record.str = value
                        record.defined = True
                    if record.defined:
                        record.ival = self._choose(spec, record.str, source)

                case OptionKind.INTEGER:
                    record.ival = spec.default if spec.has_default else 0
                    if value is not Unset:
                        record.ival = self._convert(spec, value, f"environment variable {spec.envvar}")
                        record.defined = True

                case OptionKind.REAL:
                    record.real = spec.default if spec.has_default else 0.0
                    if value is not Unset:
                        record.real = self._convert(spec, value, f"environment variable {spec.envvar}")
                        record.defined = True

            working.append(record)
        return working

    def _scan(self, working, tokens):
        """
        Phases B and C: consume the tokens, then check requiredness.
        """
        complete = False
        tokens = iter(tokens)

        for token in tokens:
            if complete:
                self._parameters.append(token)
                continue

            if token == NO_MORE_OPTIONS:
                complete = True
                continue

            if not token.startswith("-"):
                # first parameter; everything after it is a parameter too
                self._parameters.append(token)
                complete = True
                continue

            record = working[self._lookup(token)]
            spec = record.spec

            if record.seen:
                trigger(DuplicateOptionError(
                    f"duplicate option: {spec.name}",
                    code=FaultCode.DUPLICATE_OPTION,
                    title="duplicate option",
                    hint="each option may be given at most once",
                    token=token,
                    spec=spec,
                ))
            record.seen = True

            match spec.kind:
                case OptionKind.FLAG:
                    record.flag = True

                case OptionKind.STRING:
                    record.str = self._argument(spec, tokens)

                case OptionKind.ENUM:
                    record.str = self._argument(spec, tokens)
                    record.ival = self._choose(spec, record.str)

                case OptionKind.INTEGER:
                    record.ival = self._convert(spec, self._argument(spec, tokens))

                case OptionKind.REAL:
                    record.real = self._convert(spec, self._argument(spec, tokens))

            record.defined = True

            if spec.singleton:
                # help/version style: nothing else matters
                return

        for record in working:
            if record.spec.required and not record.defined:
                trigger(RequiredValueError(
                    f"a value is required for: {record.spec.name}",
                    code=FaultCode.REQUIRED_VALUE,
                    title="missing required option",
                    hint=f"add {record.spec.name.split(', ')[-1]} <value>",
                    spec=record.spec,
                ))

    def _lookup(self, token):
        """
        Map an option token ("-x" or "--name") to the index of its spec.
        """
        if len(token) == 2:
            index = self._shorts.get(token[1])
        elif len(token) >= 3 and token.startswith("--"):
            index = self._longs.get(token[2:])
        else:
            # bundled short options or a single dash: "-xy", "-"
            trigger(MalformedOptionError(
                f"invalid option format: {token}",
                code=FaultCode.MALFORMED_OPTION,
                title="malformed option",
                hint="use -x or --name, one option per token; put '--' before parameters starting with '-'",
                token=token,
            ))

        if index is None:
            trigger(UnknownOptionError(
                f"no such option: {token}",
                code=FaultCode.UNKNOWN_OPTION,
                title="unknown option",
                hint="see the help for the available options",
                token=token,
            ))
        return index

    @staticmethod
    def _argument(spec, tokens):
        try:
            return next(tokens)
        except StopIteration:
            trigger(MissingArgumentError(
                f"option {spec.name} requires an argument.",
                code=FaultCode.MISSING_ARGUMENT,
                title="missing option argument",
                hint=f"add a value after {spec.name.split(', ')[-1]}",
                spec=spec,
            ))

    @staticmethod
    def _choose(spec, value, source=Unset):
        """
        Ordinal of an enumeration literal; the source names where it came from.
        """
        if (index := index_of(spec.choices, value)) < 0:
            origin = "" if source is Unset else source + " "
            trigger(InvalidChoiceError(
                f"invalid {origin}value for {spec.name} : {value} is not one of {spec.choice_set}",
                code=FaultCode.INVALID_CHOICE,
                title="invalid choice",
                hint=f"choose one of {spec.choice_set} (case-sensitive)",
                spec=spec,
                value=value,
            ))
        return index

    @staticmethod
    def _convert(spec, text, source=Unset):
        """
        Parse a numeric argument of the spec kind and check it against the spec range.
        """
        origin = "" if source is Unset else source + " "

        match spec.kind:
            case OptionKind.INTEGER:
                value, what = str2int(text), "a valid integer"
            case OptionKind.REAL:
                value, what = str2real(text), "a valid floating point number"
            case OptionKind.FLAG | OptionKind.STRING | OptionKind.ENUM:
                raise TypeError(f"{spec.kind.value} options are not numeric")

        if value is None:
            trigger(InvalidNumberError(
                f"invalid {origin}value for {spec.name} : '{text}' is not {what}.",
                code=FaultCode.INVALID_NUMBER,
                title="invalid number",
                hint=f"{spec.name.split(', ')[-1]} expects {what}",
                spec=spec,
                value=text,
            ))

        if spec.range is not None and not spec.range[0] <= value <= spec.range[1]:
            trigger(OutOfRangeError(
                f"invalid {origin}value for {spec.name} : {spec.format(value)} is out of range {spec.span}.",
                code=FaultCode.OUT_OF_RANGE,
                title="value out of range",
                hint=f"use a value from {spec.span}",
                spec=spec,
                value=value,
            ))
        return value

    def help(self, *, colorful=False):
        """
        The generated help text as a string (plain unless colorful, see garnish.helps).
        """
        text = helps.render(self._specs, self._width, self.blank_lines, self.terminator, colorful=colorful)
        if not colorful:
            return text.plain
        with (console := Console(width=self._width, force_terminal=True, color_system="truecolor")).capture() as capture:
            console.print(text, end="", soft_wrap=True)
        return capture.get()

    def print_help(self, file=None, /, *, colorful=Unset):
        """
        Write the help to file (stdout by default) through a rich console.

        colorful defaults to whether the target is a terminal.
        """
        console = Console(file=file, highlight=False)
        if colorful is Unset:
            colorful = console.is_terminal
        console.print(
            helps.render(self._specs, self._width, self.blank_lines, self.terminator, colorful=colorful),
            end="",
            soft_wrap=True,
        )

    def abort(self, status=2, /):
        """
        Report the last fault and the help on stderr, then exit with status.

        The fault is rendered through rich ("[ code | Title ]", message, hint),
        colorful when stderr is a terminal.
        """
        console = Console(stderr=True, highlight=False)
        fault = self._fault or OptionFault(self._error)
        console.print(fault.__replace__(colorful=console.is_terminal), soft_wrap=True)
        console.print()
        self.print_help(sys.stderr)
        console.print()
        sys.exit(status)

    def parse(self, arguments=Unset, /, *, skip=True, version=None, status=2):
        """
        Conventional command line flow around process().

        - On error: print the message and the help on stderr, exit with `status`.
        - With --help given (a "help" option set): print the help on stdout, exit 0.
        - With --version given and a `version` string: print it on stdout, exit 0.
        - Otherwise return (options, parameters).
        """
        if not self.process(arguments, skip):
            self.abort(status)

        if self._options["help"].flag:
            self.print_help()
            sys.exit(0)

        if version is not None and self._options["version"].flag:
            Console(highlight=False).print(version, markup=False, emoji=False, soft_wrap=True)
            sys.exit(0)

        return self._options, self.parameters


__all__ = (
    "NO_MORE_OPTIONS",
    "TRUTHY",
    "Parser",
)
