"""
Grammar tests (usage normalization, options sections, usage parsing, argv parsing).

Scope
- Validate section lookup and the single-usage rule.
- Validate the normalized alternation built from usage lines.
- Validate options-section parsing (names, arguments, defaults, continuation lines).
- Validate the recursive-descent parser: groups, alternation, repetition, shortcuts,
  option resolution and language faults.
- Validate argv parsing: clusters, attached values, '--', options_first and input faults.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from sextant.faults import *
from sextant.grammar import *
from sextant.patterns import *
from sextant.tokens import Tokens

OPTIONS = """
Options:
  -h --help     Show this screen.
  -v            Verbose.
  -o FILE       Output file.
  --verbose     Loud.
  --version     Show version.
  --speed=<kn>  Speed in knots
                on the sea [default: 10].
"""


class TestSections(TestCase):
    """Behavioral tests for section lookup and usage normalization."""

    def testParseSectionIsCaseInsensitive(self):
        doc = "Usage: prog a\n\nOPTIONS:\n  -v  Verbose.\n"
        self.assertEqual(parse_section("usage:", doc), ["Usage: prog a"])
        self.assertEqual(parse_section("options:", doc), ["OPTIONS:\n  -v  Verbose."])

    def testParseSectionTakesIndentedContinuation(self):
        doc = "usage:\n  prog a\n  prog b\n\nother"
        self.assertEqual(parse_section("usage:", doc), ["usage:\n  prog a\n  prog b"])

    def testUsageSectionMissing(self):
        with self.assertRaises(UsageNotFoundError) as context:
            usage_section("Options:\n  -v  Verbose.\n")
        self.assertIs(context.exception.code, FaultCode.USAGE_NOT_FOUND)
        self.assertIsInstance(context.exception, LanguageError)

    def testUsageSectionDuplicated(self):
        with self.assertRaises(DuplicatedUsageError) as context:
            usage_section("Usage: prog a\n\nusage: prog b\n")
        self.assertIs(context.exception.code, FaultCode.DUPLICATED_USAGE)

    def testFormalUsageAlternatesLines(self):
        section = "Usage: prog add <x>\n       prog rm <x>"
        self.assertEqual(formal_usage(section), "( add <x> ) | ( rm <x> )")

    def testFormalUsageGroupPerLine(self):
        section = "usage:\n  prog a\n  prog b [c]\n  prog\n  prog d..."
        formal = formal_usage(section)
        self.assertEqual(formal, "( a ) | ( b [c] ) | ( ) | ( d... )")
        self.assertEqual(formal.count(") | ("), 3)


class TestDefaults(TestCase):
    """Behavioral tests for options-section parsing."""

    def testEntriesInDeclarationOrder(self):
        registry = parse_defaults(OPTIONS)
        self.assertEqual(
            [(option.short, option.long) for option in registry],
            [("-h", "--help"), ("-v", None), ("-o", None), (None, "--verbose"), (None, "--version"), (None, "--speed")]
        )

    def testArgumentsAndDefaults(self):
        registry = {option.name: option for option in parse_defaults(OPTIONS)}
        self.assertEqual((registry["--help"].argcount, registry["--help"].value), (0, False))
        self.assertEqual((registry["-o"].argcount, registry["-o"].value), (1, None))
        self.assertEqual((registry["--speed"].argcount, registry["--speed"].value), (1, "10"))

    def testSeveralSectionsAreMerged(self):
        doc = "Usage: prog\n\nOptions:\n  -a  A.\n\nMore options:\n  -b  B.\n"
        self.assertEqual([option.short for option in parse_defaults(doc)], ["-a", "-b"])

    def testNoSectionGivesEmptyRegistry(self):
        self.assertEqual(len(parse_defaults("Usage: prog")), 0)


class TestPatternParsing(TestCase):
    """Behavioral tests for the recursive-descent usage parser."""

    def testAlternationOfRequiredSequences(self):
        pattern = parse_pattern("( add <x> ) | ( rm <x> )", Registry())
        self.assertEqual(pattern, Required(Either(
            Required(Command("add"), Argument("<x>")),
            Required(Command("rm"), Argument("<x>")),
        )))

    def testArgumentsAndCommands(self):
        pattern = parse_pattern("go FILE <dir> Go", Registry())
        self.assertEqual(pattern, Required(Command("go"), Argument("FILE"), Argument("<dir>"), Command("Go")))

    def testOptionalGroup(self):
        pattern = parse_pattern("[ a | b ]", Registry())
        self.assertEqual(pattern, Required(Optional(Either(Command("a"), Command("b")))))

    def testDuplicateAlternativesCollapse(self):
        self.assertEqual(parse_pattern("a | a", Registry()), Required(Command("a")))

    def testEllipsisWrapsPrecedingAtom(self):
        pattern = parse_pattern("cp <dst> <src>...", Registry())
        self.assertEqual(pattern, Required(Command("cp"), Argument("<dst>"), OneOrMore(Argument("<src>"))))

    def testEllipsisEndsTheSequence(self):
        with self.assertRaises(LanguageError) as context:
            parse_pattern("( cp <src>... <dst> )", Registry())
        self.assertIs(context.exception.code, FaultCode.UNMATCHED_DELIMITER)
        with self.assertRaises(LanguageError) as context:
            parse_pattern("cp <src>... <dst>", Registry())
        self.assertIs(context.exception.code, FaultCode.UNEXPECTED_ENDING)

    def testEllipsisBeforeAlternative(self):
        pattern = parse_pattern("a... | b", Registry())
        self.assertEqual(pattern, Required(Either(OneOrMore(Command("a")), Command("b"))))

    def testEllipsisAfterGroup(self):
        pattern = parse_pattern("( <k> <v> )...", Registry())
        self.assertEqual(pattern, Required(OneOrMore(Required(Argument("<k>"), Argument("<v>")))))

    def testOptionsShortcut(self):
        pattern = parse_pattern("[ options ] <f>", Registry())
        self.assertEqual(pattern, Required(Optional(OptionsShortcut()), Argument("<f>")))

    def testUnknownShortIsRegistered(self):
        registry = Registry()
        pattern = parse_pattern("[ -x ]", registry)
        self.assertEqual(pattern, Required(Optional(Option("-x"))))
        self.assertEqual([option.short for option in registry], ["-x"])

    def testUnknownLongArgumentFromEquals(self):
        registry = Registry()
        parse_pattern("--out=<f> --quiet", registry)
        self.assertEqual([(option.long, option.argcount) for option in registry], [("--out", 1), ("--quiet", 0)])

    def testKnownOptionSwallowsPlaceholder(self):
        pattern = parse_pattern("-o FILE --speed <kn>", parse_defaults(OPTIONS))
        self.assertEqual(pattern, Required(Option("-o"), Option(None, "--speed")))
        self.assertEqual(pattern.children[1].value, "10")

    def testShortAndLongNamesResolveToOneOption(self):
        pattern = parse_pattern("( -h | --help )", parse_defaults(OPTIONS))
        self.assertEqual(pattern, Required(Required(Option("-h", "--help"))))

    def testUnmatchedOpening(self):
        with self.assertRaises(LanguageError) as context:
            parse_pattern("( a", Registry())
        self.assertIs(context.exception.code, FaultCode.UNMATCHED_DELIMITER)

    def testUnexpectedEnding(self):
        with self.assertRaises(LanguageError) as context:
            parse_pattern("a ) b", Registry())
        self.assertIs(context.exception.code, FaultCode.UNEXPECTED_ENDING)

    def testAmbiguousShortDefinition(self):
        registry = Registry([Option("-v"), Option("-v", "--verbose")])
        with self.assertRaises(LanguageError) as context:
            parse_pattern("-v", registry)
        self.assertIs(context.exception.code, FaultCode.AMBIGUOUS_SWITCH)

    def testLongPrefixIsNotResolvedInUsage(self):
        registry = parse_defaults(OPTIONS)
        pattern = parse_pattern("--verb", registry)
        self.assertEqual(pattern, Required(Option(None, "--verb")))

    def testFlagGivenValueInUsage(self):
        with self.assertRaises(LanguageError) as context:
            parse_pattern("--verbose=<x>", parse_defaults(OPTIONS))
        self.assertIs(context.exception.code, FaultCode.FLAG_ASSIGNMENT)

    def testParsingIsIdempotent(self):
        source = formal_usage("Usage: prog ship <name> move [--speed=<kn>]\n  prog [options] (a|b)...")
        self.assertEqual(
            parse_pattern(source, parse_defaults(OPTIONS)),
            parse_pattern(source, parse_defaults(OPTIONS))
        )

    def testResolveShortcutsAddsUnmentionedOptions(self):
        doc = "Usage: prog [options] -v\n\nOptions:\n  -v  Verbose.\n  -q  Quiet.\n  -x  Extra.\n"
        pattern = resolve_shortcuts(parse_pattern("( [ options ] -v )", parse_defaults(doc)), doc)
        shortcut, = pattern.flat(OptionsShortcut)
        self.assertEqual(shortcut.children, [Option("-q"), Option("-x")])


class TestArgvParsing(TestCase):
    """Behavioral tests for argument vector parsing."""

    def setUp(self):
        self.registry = parse_defaults(OPTIONS)

    def testClusterWithAttachedValue(self):
        parsed = parse_argv(Tokens(["-voFILE"]), self.registry)
        self.assertEqual(parsed, [Option("-v"), Option("-o")])
        self.assertEqual([option.value for option in parsed], [True, "FILE"])

    def testShortValueFromNextToken(self):
        parsed = parse_argv(Tokens(["-o", "out.txt", "x"]), self.registry)
        self.assertEqual([leaf.value for leaf in parsed], ["out.txt", "x"])
        self.assertIsInstance(parsed[1], Argument)
        self.assertIsNone(parsed[1].name)

    def testLongValueForms(self):
        inline, = parse_argv(Tokens(["--speed=20"]), self.registry)
        spaced, = parse_argv(Tokens(["--speed", "30"]), self.registry)
        self.assertEqual((inline.value, spaced.value), ("20", "30"))

    def testLongFlagBindsTrue(self):
        option, = parse_argv(Tokens(["--help"]), self.registry)
        self.assertEqual((option.short, option.long, option.value), ("-h", "--help", True))

    def testUniquePrefix(self):
        option, = parse_argv(Tokens(["--verb"]), self.registry)
        self.assertEqual((option.long, option.value), ("--verbose", True))

    def testAmbiguousPrefixNamesCandidates(self):
        with self.assertRaises(InputError) as context:
            parse_argv(Tokens(["--ver"]), self.registry)
        fault = context.exception
        self.assertIs(fault.code, FaultCode.NOT_UNIQUE_PREFIX)
        self.assertEqual(fault.options["candidates"], ("--verbose", "--version"))
        self.assertIn("--verbose", fault.message)
        self.assertIn("--version", fault.message)

    def testUnknownLongOption(self):
        with self.assertRaises(InputError) as context:
            parse_argv(Tokens(["--nope"]), self.registry)
        self.assertIs(context.exception.code, FaultCode.UNKNOWN_SWITCH)

    def testUnknownShortOption(self):
        with self.assertRaises(InputError) as context:
            parse_argv(Tokens(["-vz"]), self.registry)
        self.assertIs(context.exception.code, FaultCode.UNKNOWN_SWITCH)

    def testFlagWithValue(self):
        with self.assertRaises(InputError) as context:
            parse_argv(Tokens(["--verbose=yes"]), self.registry)
        self.assertIs(context.exception.code, FaultCode.FLAG_ASSIGNMENT)

    def testMissingValue(self):
        for argv in (["-o"], ["--speed"], ["-o", "--"]):
            with self.subTest(argv=argv), self.assertRaises(InputError) as context:
                parse_argv(Tokens(argv), self.registry)
            self.assertIs(context.exception.code, FaultCode.OPTION_VALUE_REQUIRED)

    def testDoubleDashEndsOptions(self):
        parsed = parse_argv(Tokens(["-v", "--", "-o", "x"]), self.registry)
        self.assertEqual(parsed[0], Option("-v"))
        self.assertEqual([leaf.value for leaf in parsed[1:]], ["--", "-o", "x"])
        self.assertTrue(all(type(leaf) is Argument for leaf in parsed[1:]))

    def testSingleDashIsPositional(self):
        parsed = parse_argv(Tokens(["-"]), self.registry)
        self.assertEqual([(type(leaf), leaf.value) for leaf in parsed], [(Argument, "-")])

    def testOptionsFirst(self):
        parsed = parse_argv(Tokens(["-v", "run", "-x", "--nope"]), self.registry, options_first=True)
        self.assertEqual(parsed[0], Option("-v"))
        self.assertEqual([leaf.value for leaf in parsed[1:]], ["run", "-x", "--nope"])

    def testRegistryIsNotExtendedByArgv(self):
        before = len(self.registry)
        parse_argv(Tokens(["-v", "x"]), self.registry)
        self.assertEqual(len(self.registry), before)


if __name__ == "__main__":
    unittest.main()
