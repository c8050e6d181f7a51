"""
Parser behavioral tests.

Scope
- Processing: defaults, tokens, parameters, singletons, requiredness.
- Errors: one message per failed call, with the matching fault type.
- Environment variables: defaults overridden, validated before the tokens.
- Registry: name conflicts, reuse across calls, help width.
- CLI flow: parse() and abort() exit with the expected status and output.

Conventions
- Test method names follow CamelCase per project convention.
- Environment changes are scoped with mock.patch.dict.
"""
import contextlib
import io
import os
import unittest
from unittest import TestCase, mock

from garnish import *


def widgets():
    """Parser used by most tests."""
    return Parser([
        flag_spec("verbose", "v", "Print more."),
        str_spec("name", "n", "Who to greet."),
        enum_spec("mode", "m", "Processing mode.", ["aaa", "bbb", "ccc"]),
        int_spec("count", "c", "Number of widgets.").int_range(1, 10),
        real_spec("ratio", "r", "Mixing ratio.").real_range(0, 1),
        help_spec(),
    ])


class TestProcessing(TestCase):
    """Behavioral tests for successful processing."""

    def testNoArguments(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.error, "")
        self.assertIsNone(parser.fault)
        self.assertEqual(parser.parameters, [])
        self.assertEqual(len(parser.options), 6)

    def testFlagsAreAlwaysDefined(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["verbose"], OptionValue(True, False))
        self.assertTrue(parser.process(["prog", "-v"]))
        self.assertEqual(parser.options["verbose"], OptionValue(True, True))

    def testUndefinedOptionsKeepEmptyValues(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"], OptionValue())
        self.assertEqual(parser.options["count"], OptionValue())
        self.assertEqual(parser.options["mode"], OptionValue())

    def testUndefinedFieldsKeepTheirTypes(self):
        parser = Parser([str_spec("name", "n"), int_spec("count", "c"), real_spec("ratio", "r")])
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"].str, "")
        self.assertIsInstance(parser.options["name"].str, str)
        self.assertEqual(parser.options["count"].ival, 0)
        self.assertIsInstance(parser.options["count"].ival, int)
        self.assertEqual(parser.options["ratio"].real, 0.0)
        self.assertIsInstance(parser.options["ratio"].real, float)
        self.assertEqual(parser.options["count"].ival + 1, 1)

    def testUnknownNameYieldsEmptyRecord(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["misspelled"], OptionValue())

    def testEveryKind(self):
        parser = widgets()
        self.assertTrue(parser.process([
            "prog", "-v", "--name", "world", "-m", "ccc", "--count", "7", "-r", "0.25",
        ]))
        options = parser.options
        self.assertTrue(options["verbose"].flag)
        self.assertEqual(options["name"], OptionValue(True, str="world"))
        self.assertEqual(options["mode"], OptionValue(True, str="ccc", ival=2))
        self.assertEqual(options["count"], OptionValue(True, ival=7))
        self.assertEqual(options["ratio"], OptionValue(True, real=0.25))

    def testDefaults(self):
        parser = Parser([
            str_spec("name", "n").def_str("one"),
            enum_spec("mode", "m", "", ["aaa", "bbb", "ccc"]).def_str("bbb"),
            int_spec("count", "c").def_int(4),
            real_spec("ratio", "r").def_real(31.6227),
        ])
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"], OptionValue(True, str="one"))
        self.assertEqual(parser.options["mode"], OptionValue(True, str="bbb", ival=1))
        self.assertEqual(parser.options["count"], OptionValue(True, ival=4))
        self.assertEqual(parser.options["ratio"], OptionValue(True, real=31.6227))

    def testCommandLineOverridesDefault(self):
        parser = Parser([int_spec("count", "c").def_int(4)])
        self.assertTrue(parser.process(["prog", "-c", "9"]))
        self.assertEqual(parser.options["count"].ival, 9)

    def testRangeBoundsAreInclusive(self):
        parser = widgets()
        for text, value in (("1", 1), ("10", 10)):
            with self.subTest(text=text):
                self.assertTrue(parser.process(["prog", "-c", text]))
                self.assertEqual(parser.options["count"].ival, value)
        self.assertTrue(parser.process(["prog", "-r", "1"]))
        self.assertEqual(parser.options["ratio"].real, 1.0)

    def testArgumentMayStartWithDash(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "-n", "-x"]))
        self.assertEqual(parser.options["name"].str, "-x")

    def testNegativeNumbers(self):
        parser = Parser([int_spec("offset", "o"), real_spec("shift", "s")])
        self.assertTrue(parser.process(["prog", "-o", "-3", "--shift", "-0.5"]))
        self.assertEqual(parser.options["offset"].ival, -3)
        self.assertEqual(parser.options["shift"].real, -0.5)

    def testNoSkip(self):
        parser = widgets()
        self.assertTrue(parser.process(["-n", "world"], skip=False))
        self.assertEqual(parser.options["name"].str, "world")

    def testDefaultsToSysArgv(self):
        parser = widgets()
        with mock.patch("sys.argv", ["prog", "-n", "argv"]):
            self.assertTrue(parser.process())
        self.assertEqual(parser.options["name"].str, "argv")


class TestParameters(TestCase):
    """Behavioral tests for positional parameters."""

    def testFirstParameterEndsOptions(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "-v", "file1", "-n", "x", "--", "file2"]))
        self.assertEqual(parser.parameters, ["file1", "-n", "x", "--", "file2"])
        self.assertTrue(parser.options["verbose"].flag)
        self.assertFalse(parser.options["name"].defined)

    def testTerminator(self):
        parser = Parser()
        self.assertTrue(parser.process(["prog", "--", "--looks-like-option"]))
        self.assertEqual(parser.parameters, ["--looks-like-option"])
        self.assertEqual(len(parser.options), 0)

    def testTerminatorIsConsumedOnce(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "-v", "--", "--", "-n"]))
        self.assertEqual(parser.parameters, ["--", "-n"])

    def testEmptyTokenIsAParameter(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "", "-v"]))
        self.assertEqual(parser.parameters, ["", "-v"])
        self.assertFalse(parser.options["verbose"].flag)

    def testParametersAreACopy(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "file"]))
        parser.parameters.append("other")
        self.assertEqual(parser.parameters, ["file"])


class TestSingletons(TestCase):
    """Behavioral tests for help/version style options."""

    def testSingletonSkipsRequiredness(self):
        parser = Parser([str_spec("name", "n", "", True), help_spec()])
        self.assertTrue(parser.process(["prog", "--help"]))
        self.assertEqual(parser.options["help"], OptionValue(True, True))
        self.assertFalse(parser.options["name"].defined)

    def testSingletonLeavesEmptyValues(self):
        parser = Parser([
            int_spec("count", "c", "", True),
            real_spec("ratio", "r"),
            enum_spec("mode", "m", "", ["aaa", "bbb"]),
            help_spec(),
        ])
        self.assertTrue(parser.process(["prog", "-h"]))
        self.assertEqual(parser.options["count"], OptionValue())
        self.assertIsInstance(parser.options["count"].ival, int)
        self.assertIsInstance(parser.options["ratio"].real, float)
        self.assertEqual(parser.options["mode"].str, "")
        self.assertEqual(parser.options["mode"].ival, 0)

    def testSingletonIgnoresRemainingTokens(self):
        parser = Parser([str_spec("name", "n", "", True), help_spec(), version_spec()])
        self.assertTrue(parser.process(["prog", "-n", "x", "-V", "--bogus", "-xyz"]))
        self.assertTrue(parser.options["version"].flag)
        self.assertFalse(parser.options["help"].flag)
        self.assertEqual(parser.options["name"].str, "x")
        self.assertEqual(parser.parameters, [])

    def testErrorsBeforeTheSingletonStillCount(self):
        parser = Parser([str_spec("name", "n"), help_spec()])
        self.assertFalse(parser.process(["prog", "--bogus", "-h"]))
        self.assertEqual(parser.error, "no such option: --bogus")


class TestErrors(TestCase):
    """Behavioral tests for processing errors."""

    def assertFails(self, parser, arguments, error, fault):
        self.assertFalse(parser.process(arguments))
        self.assertEqual(parser.error, error)
        self.assertIsInstance(parser.fault, fault)
        self.assertEqual(str(parser.fault), error)
        self.assertEqual(len(parser.options), 0)

    def testRequired(self):
        parser = Parser([str_spec("name", "n", "Who to greet.", True)])
        self.assertFails(parser, ["prog"], "a value is required for: -n, --name", RequiredValueError)
        self.assertIs(parser.fault.options["code"], FaultCode.REQUIRED_VALUE)

    def testRequiredCheckFollowsDeclarationOrder(self):
        parser = Parser([int_spec("first", None, "", True), str_spec("second", "s", "", True)])
        self.assertFails(parser, ["prog"], "a value is required for: --first", RequiredValueError)

    def testRequiredSatisfiedByDefault(self):
        parser = Parser([int_spec("count", "c", "", True).def_int(3)])
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["count"].ival, 3)

    def testOutOfRange(self):
        self.assertFails(
            widgets(),
            ["prog", "-c", "15"],
            "invalid value for -c, --count : 15 is out of range 1 to 10.",
            OutOfRangeError,
        )
        self.assertFails(
            widgets(),
            ["prog", "--ratio", "1.5"],
            "invalid value for -r, --ratio : 1.5 is out of range 0.0 to 1.0.",
            OutOfRangeError,
        )

    def testInvalidChoice(self):
        self.assertFails(
            widgets(),
            ["prog", "-m", "zzz"],
            "invalid value for -m, --mode : zzz is not one of (aaa, bbb, ccc)",
            InvalidChoiceError,
        )

    def testChoicesAreCaseSensitive(self):
        self.assertFails(
            widgets(),
            ["prog", "-m", "AAA"],
            "invalid value for -m, --mode : AAA is not one of (aaa, bbb, ccc)",
            InvalidChoiceError,
        )

    def testInvalidNumbers(self):
        self.assertFails(
            widgets(),
            ["prog", "-c", "12x"],
            "invalid value for -c, --count : '12x' is not a valid integer.",
            InvalidNumberError,
        )
        self.assertFails(
            widgets(),
            ["prog", "-c", "2.5"],
            "invalid value for -c, --count : '2.5' is not a valid integer.",
            InvalidNumberError,
        )
        self.assertFails(
            widgets(),
            ["prog", "-r", "3.14abc"],
            "invalid value for -r, --ratio : '3.14abc' is not a valid floating point number.",
            InvalidNumberError,
        )

    def testIntegerLimits(self):
        parser = Parser([int_spec("count", "c")])
        self.assertTrue(parser.process(["prog", "-c", "2147483647"]))
        self.assertEqual(parser.options["count"].ival, 2147483647)
        self.assertFails(
            parser,
            ["prog", "-c", "2147483648"],
            "invalid value for -c, --count : '2147483648' is not a valid integer.",
            InvalidNumberError,
        )

    def testMissingArgument(self):
        self.assertFails(
            widgets(),
            ["prog", "--name"],
            "option -n, --name requires an argument.",
            MissingArgumentError,
        )

    def testDuplicate(self):
        self.assertFails(
            widgets(),
            ["prog", "-n", "a", "--name", "b"],
            "duplicate option: -n, --name",
            DuplicateOptionError,
        )
        self.assertFails(widgets(), ["prog", "-v", "-v"], "duplicate option: -v, --verbose", DuplicateOptionError)

    def testUnknown(self):
        self.assertFails(widgets(), ["prog", "--nope"], "no such option: --nope", UnknownOptionError)
        self.assertFails(widgets(), ["prog", "-z"], "no such option: -z", UnknownOptionError)

    def testMalformed(self):
        for token in ("-vn", "-"):
            with self.subTest(token=token):
                self.assertFails(widgets(), ["prog", token], f"invalid option format: {token}", MalformedOptionError)

    def testFirstErrorWins(self):
        self.assertFails(widgets(), ["prog", "--nope", "-c", "15"], "no such option: --nope", UnknownOptionError)

    def testErrorIsResetOnSuccess(self):
        parser = widgets()
        self.assertFalse(parser.process(["prog", "--nope"]))
        self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.error, "")
        self.assertIsNone(parser.fault)


class TestEnvironment(TestCase):
    """Behavioral tests for environment variable overrides."""

    def environment(self, **variables):
        return mock.patch.dict(os.environ, variables)

    def testFlag(self):
        parser = Parser([flag_spec("quiet", "q").env_var("GARNISH_TEST_QUIET")])
        for value, expected in (("1", True), ("Y", True), ("YES", True), ("yes", False), ("0", False), ("", False)):
            with self.subTest(value=value):
                with self.environment(GARNISH_TEST_QUIET=value):
                    self.assertTrue(parser.process(["prog"]))
                self.assertEqual(parser.options["quiet"], OptionValue(True, expected))

    def testUnsetVariableLeavesDefault(self):
        parser = Parser([int_spec("count", "c").def_int(4).env_var("GARNISH_TEST_COUNT")])
        with mock.patch.dict(os.environ):
            os.environ.pop("GARNISH_TEST_COUNT", None)
            self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["count"].ival, 4)

    def testOverridesDefault(self):
        parser = Parser([
            str_spec("name", "n").def_str("one").env_var("GARNISH_TEST_NAME"),
            enum_spec("mode", "m", "", ["aaa", "bbb", "ccc"]).def_str("aaa").env_var("GARNISH_TEST_MODE"),
            int_spec("count", "c").def_int(4).env_var("GARNISH_TEST_COUNT"),
            real_spec("ratio", "r").env_var("GARNISH_TEST_RATIO"),
        ])
        with self.environment(
            GARNISH_TEST_NAME="two",
            GARNISH_TEST_MODE="ccc",
            GARNISH_TEST_COUNT="8",
            GARNISH_TEST_RATIO="0.5",
        ):
            self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"], OptionValue(True, str="two"))
        self.assertEqual(parser.options["mode"], OptionValue(True, str="ccc", ival=2))
        self.assertEqual(parser.options["count"], OptionValue(True, ival=8))
        self.assertEqual(parser.options["ratio"], OptionValue(True, real=0.5))

    def testEmptyStringValue(self):
        parser = Parser([str_spec("name", "n").env_var("GARNISH_TEST_NAME")])
        with self.environment(GARNISH_TEST_NAME=""):
            self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"], OptionValue(True))

    def testCommandLineWins(self):
        parser = Parser([int_spec("count", "c").env_var("GARNISH_TEST_COUNT")])
        with self.environment(GARNISH_TEST_COUNT="5"):
            self.assertTrue(parser.process(["prog", "-c", "7"]))
        self.assertEqual(parser.options["count"].ival, 7)

    def testSatisfiesRequired(self):
        parser = Parser([str_spec("name", "n", "", True).env_var("GARNISH_TEST_NAME")])
        with self.environment(GARNISH_TEST_NAME="env"):
            self.assertTrue(parser.process(["prog"]))
        self.assertEqual(parser.options["name"].str, "env")

    def testInvalidChoice(self):
        parser = Parser([enum_spec("mode", "m", "", ["aaa", "bbb", "ccc"]).env_var("GARNISH_TEST_MODE")])
        with self.environment(GARNISH_TEST_MODE="zzz"):
            self.assertFalse(parser.process(["prog", "-m", "aaa"]))
        self.assertEqual(
            parser.error,
            "invalid environment variable GARNISH_TEST_MODE value for -m, --mode : zzz is not one of (aaa, bbb, ccc)",
        )
        self.assertIsInstance(parser.fault, InvalidChoiceError)

    def testInvalidNumber(self):
        parser = Parser([int_spec("count", "c").env_var("GARNISH_TEST_COUNT")])
        with self.environment(GARNISH_TEST_COUNT="abc"):
            self.assertFalse(parser.process(["prog"]))
        self.assertEqual(
            parser.error,
            "invalid environment variable GARNISH_TEST_COUNT value for -c, --count : 'abc' is not a valid integer.",
        )

    def testOutOfRange(self):
        parser = Parser([int_spec("count", "c").int_range(1, 10).env_var("GARNISH_TEST_COUNT")])
        with self.environment(GARNISH_TEST_COUNT="50"):
            self.assertFalse(parser.process(["prog"]))
        self.assertEqual(
            parser.error,
            "invalid environment variable GARNISH_TEST_COUNT value for -c, --count : 50 is out of range 1 to 10.",
        )

    def testCheckedBeforeTokens(self):
        parser = Parser([real_spec("ratio", "r").env_var("GARNISH_TEST_RATIO")])
        with self.environment(GARNISH_TEST_RATIO="nan"):
            self.assertFalse(parser.process(["prog", "--nope"]))
        self.assertIsInstance(parser.fault, InvalidNumberError)


class TestRegistry(TestCase):
    """Behavioral tests for the parser as a spec registry."""

    def testConflictingShortNames(self):
        with self.assertWarns(ConflictingNamesWarning) as context:
            parser = Parser([flag_spec("alpha", "x"), flag_spec("beta", "x")])
        self.assertEqual(str(context.warning), "conflicting option names: -x, --alpha and -x, --beta")
        self.assertEqual(os.path.basename(context.filename), os.path.basename(__file__))
        self.assertFalse(parser.valid)
        for _ in range(2):
            self.assertFalse(parser.process(["prog"]))
            self.assertEqual(parser.error, "option specification errors")
            self.assertIsInstance(parser.fault, SpecificationError)

    def testConflictingLongNames(self):
        with self.assertWarns(ConflictingNamesWarning):
            parser = Parser([str_spec("name", "n"), int_spec("name", "c")])
        self.assertFalse(parser.valid)
        self.assertFalse(parser.process(["prog", "-c", "1"]))
        self.assertEqual(parser.error, "option specification errors")

    def testValid(self):
        parser = widgets()
        self.assertTrue(parser.valid)
        self.assertEqual(len(parser.specs), 6)
        self.assertEqual(parser.specs[0].long, "verbose")

    def testReusableAcrossCalls(self):
        parser = widgets()
        self.assertTrue(parser.process(["prog", "-n", "a"]))
        first = parser.options
        self.assertTrue(parser.process(["prog", "-n", "b"]))
        self.assertEqual(parser.options["name"].str, "b")
        self.assertEqual(first["name"].str, "a")
        self.assertTrue(parser.process(["prog"]))
        self.assertFalse(parser.options["name"].defined)

    def testWidth(self):
        self.assertEqual(Parser().width, 92)
        self.assertEqual(Parser(width=10).width, 40)
        parser = Parser()
        parser.width = 120
        self.assertEqual(parser.width, 120)
        with self.assertRaises(TypeError):
            parser.width = "80"
        with self.assertRaises(TypeError):
            parser.width = True

    def testRepr(self):
        self.assertTrue(repr(Parser()).startswith("Parser(specs=()"))


class TestCommandLine(TestCase):
    """Behavioral tests for parse() and abort()."""

    def parser(self):
        return Parser([str_spec("name", "n", "Who to greet.", True), help_spec(), version_spec()])

    def testSuccess(self):
        options, parameters = self.parser().parse(["prog", "-n", "world", "file"])
        self.assertEqual(options["name"].str, "world")
        self.assertEqual(parameters, ["file"])

    def testErrorExits(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            self.parser().parse(["prog"])
        self.assertEqual(context.exception.code, 2)
        output = stderr.getvalue()
        self.assertIn("21024", output)
        self.assertIn("Missing Required Option", output)
        self.assertIn("a value is required for: -n, --name", output)
        self.assertIn("add --name <value>", output)
        self.assertIn("Options:", output)
        self.assertIn("Who to greet.", output)
        self.assertLess(output.index("a value is required"), output.index("Options:"))

    def testAbortWithoutFault(self):
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            self.parser().abort(3)
        self.assertEqual(context.exception.code, 3)
        self.assertIn("Options:", stderr.getvalue())

    def testCustomStatus(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as context:
            self.parser().parse(["prog", "--nope"], status=64)
        self.assertEqual(context.exception.code, 64)

    def testHelpExits(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            self.parser().parse(["prog", "-h"])
        self.assertEqual(context.exception.code, 0)
        self.assertIn("Options:", stdout.getvalue())
        self.assertIn("Show this message and exit.", stdout.getvalue())

    def testVersionExits(self):
        stdout = io.StringIO()
        with contextlib.redirect_stdout(stdout), self.assertRaises(SystemExit) as context:
            self.parser().parse(["prog", "--version"], version="greet 1.0")
        self.assertEqual(context.exception.code, 0)
        self.assertEqual(stdout.getvalue().strip(), "greet 1.0")

    def testVersionWithoutStringReturns(self):
        options, parameters = self.parser().parse(["prog", "-V"])
        self.assertTrue(options["version"].flag)
        self.assertEqual(parameters, [])


if __name__ == "__main__":
    unittest.main()
