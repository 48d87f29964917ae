"""
Schema module behavioral tests (entries, buckets, positional lists, definition errors).

Scope
- Validate entry compilation: aliases, hints, sigils, |type suffixes, required markers.
- Validate schema records: one bucket per type, alias map, defaults, required list.
- Validate positional lists: bracketed strings and entry sequences.
- Validate every definition error kind.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from terse import (
    DefinitionError,
    DuplicatedNameError,
    MalformedDefinitionError,
    MisplacedVariadicError,
    MissingNameError,
    Option,
    OptionType,
    UnknownTypeError,
    compile_entry,
    compile_params,
    compile_schema,
)
from terse.utils import Unset


class TestCompileEntry(TestCase):
    """Behavioral tests for single entry compilation."""

    def testBooleanWithAlias(self):
        option = compile_entry(["r, !recursive", "copy directories", False])
        self.assertEqual(option.name, "recursive")
        self.assertEqual(option.aliases, ("r",))
        self.assertIs(option.type, OptionType.BOOLEAN)
        self.assertEqual(option.descr, "copy directories")
        self.assertIs(option.default, False)
        self.assertFalse(option.required)

    def testRequiredStringWithHint(self):
        option = compile_entry(["o, output! <file>", "where to write"])
        self.assertEqual(option.name, "output")
        self.assertTrue(option.required)
        self.assertEqual(option.hint, "file")
        self.assertIs(option.type, OptionType.STRING)
        self.assertIs(option.default, Unset)

    def testExplicitTypeSuffix(self):
        option = compile_entry(["d, depth <levels>|number"])
        self.assertIs(option.type, OptionType.NUMBER)
        self.assertEqual(option.hint, "levels")
        self.assertEqual(option.descr, "")

    def testExplicitTypeSuffixIsCaseInsensitive(self):
        self.assertIs(compile_entry(["verbose|BOOLEAN"]).type, OptionType.BOOLEAN)

    def testArraySigil(self):
        option = compile_entry(["f, ...files", "input files", ["a.txt"]])
        self.assertIs(option.type, OptionType.ARRAY)
        self.assertEqual(option.default, ["a.txt"])

    def testHintCommasDoNotSplitAliases(self):
        option = compile_entry(["t,ta, target <a,b>"])
        self.assertEqual(option.name, "target")
        self.assertEqual(option.aliases, ("t", "ta"))
        self.assertEqual(option.hint, "a,b")

    def testColourCodesAreStrippedButLabelIsKept(self):
        label = "\x1b[34mm, !mean\x1b[39m"
        option = compile_entry([label, "styled"])
        self.assertEqual(option.name, "mean")
        self.assertEqual(option.aliases, ("m",))
        self.assertEqual(option.label, label)

    def testEmptyAliasSegmentsAreIgnored(self):
        self.assertEqual(compile_entry(["v,, !verbose"]).aliases, ("v",))

    def testDefaultIsCopied(self):
        option = compile_entry(["...files", "", ["a"]])
        option.default.append("b")
        self.assertEqual(option.default, ["a"])

    def testOptionRepr(self):
        self.assertTrue(repr(compile_entry(["!verbose"])).startswith("option("))


class TestCompileEntryErrors(TestCase):
    """Behavioral tests for definition errors raised by entries."""

    def testNonStringFlagsRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_entry([123, "not a string"])

    def testNonStringFlagsIsDefinitionError(self):
        with self.assertRaises(DefinitionError):
            compile_schema([[None, "not a string"]])

    def testTooManyItemsRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_entry(["a", "b", "c", "d"])

    def testEmptyEntryRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_entry([])

    def testNonStringDescriptionRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_entry(["name", 42])

    def testMissingNameRaises(self):
        with self.assertRaises(MissingNameError):
            compile_entry(["!", "nothing left"])

    def testMissingNameAfterAliasesRaises(self):
        with self.assertRaises(MissingNameError):
            compile_entry(["v, <hint>"])

    def testUnknownTypeRaises(self):
        with self.assertRaises(UnknownTypeError):
            compile_entry(["count|integer"])

    def testErrorQuotesDefinition(self):
        with self.assertRaises(UnknownTypeError) as context:
            compile_entry(["count|integer"])
        self.assertEqual(context.exception.options["definition"], "count|integer")
        self.assertIn("count|integer", str(context.exception))


class TestSchema(TestCase):
    """Behavioral tests for compiled schema records."""

    def setUp(self):
        self.schema = compile_schema([
            ["r, !recursive", "recurse", False],
            ["d, -depth", "maximum depth"],
            ["o, output! <file>", "output path"],
            ["i, ...include", "include patterns", ["*.py"]],
        ])

    def testBuckets(self):
        self.assertEqual(self.schema.boolean_names, ("recursive",))
        self.assertEqual(self.schema.number_names, ("depth",))
        self.assertEqual(self.schema.string_names, ("output",))
        self.assertEqual(self.schema.array_names, ("include",))

    def testAliases(self):
        self.assertEqual(self.schema.aliases, {"r": "recursive", "d": "depth", "o": "output", "i": "include"})
        self.assertEqual(self.schema.resolve("r"), "recursive")
        self.assertEqual(self.schema.resolve("unknown"), "unknown")

    def testDescriptionsAndHints(self):
        self.assertEqual(self.schema.descrs["depth"], "maximum depth")
        self.assertEqual(self.schema.hints["output"], "file")

    def testDefaultsOnlyWhenSupplied(self):
        self.assertEqual(set(self.schema.defaults), {"recursive", "include"})

    def testRequired(self):
        self.assertEqual(self.schema.required, ("output",))

    def testTypeof(self):
        self.assertIs(self.schema.typeof("depth"), OptionType.NUMBER)
        self.assertIs(self.schema.typeof("missing"), Unset)

    def testContainsNamesAndAliases(self):
        self.assertIn("recursive", self.schema)
        self.assertIn("r", self.schema)
        self.assertNotIn("x", self.schema)

    def testIterationFollowsDeclarationOrder(self):
        self.assertEqual([option.name for option in self.schema], ["recursive", "depth", "output", "include"])
        self.assertEqual(len(self.schema), 4)

    def testDefaultsCopyIsFresh(self):
        defaults = self.schema.defaults_copy()
        defaults["include"].append("*.md")
        self.assertEqual(self.schema.defaults_copy()["include"], ["*.py"])

    def testRegisterRejectsNonOptions(self):
        with self.assertRaises(TypeError):
            self.schema.register("verbose")

    def testRegisterOption(self):
        self.schema.register(Option("verbose", type="boolean", aliases=("V",)))
        self.assertIn("V", self.schema)
        self.assertIn("verbose", self.schema.boolean_names)


class TestSchemaErrors(TestCase):
    """Behavioral tests for schema-level definition errors."""

    def testDuplicatedCanonicalNameRaises(self):
        with self.assertRaises(DuplicatedNameError):
            compile_schema([["verbose"], ["!verbose"]])

    def testAliasCollidingWithAliasRaises(self):
        with self.assertRaises(DuplicatedNameError):
            compile_schema([["v, !verbose"], ["v, version"]])

    def testAliasCollidingWithNameRaises(self):
        with self.assertRaises(DuplicatedNameError):
            compile_schema([["!verbose"], ["verbose, loud"]])

    def testEntriesMustBeASequence(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_schema("r, !recursive")


class TestCompileParams(TestCase):
    """Behavioral tests for positional parameter lists."""

    def testBracketedString(self):
        pkg, files = compile_params("[pkg!, ...files]")
        self.assertEqual(pkg.name, "pkg")
        self.assertTrue(pkg.required)
        self.assertIs(pkg.type, OptionType.STRING)
        self.assertEqual(files.name, "files")
        self.assertTrue(files.variadic)
        self.assertEqual(files.aliases, ())

    def testBracketsAreOptional(self):
        self.assertEqual([param.name for param in compile_params("src, dst")], ["src", "dst"])

    def testEmptyList(self):
        self.assertEqual(compile_params("[]"), ())

    def testEntrySequence(self):
        pkg, files = compile_params([["pkg!", "package name"], ["...files", "files", ["a.js"]]])
        self.assertEqual(pkg.descr, "package name")
        self.assertEqual(files.default, ["a.js"])

    def testTypedParameters(self):
        count, = compile_params("[count <n>|number]")
        self.assertIs(count.type, OptionType.NUMBER)
        self.assertEqual(count.hint, "n")

    def testVariadicNotLastRaises(self):
        with self.assertRaises(MisplacedVariadicError):
            compile_params("[...files, pkg]")

    def testTwoVariadicsRaise(self):
        with self.assertRaises(MisplacedVariadicError):
            compile_params("[...a, ...b]")

    def testRepeatedNamesRaise(self):
        with self.assertRaises(DuplicatedNameError):
            compile_params("[src, src]")

    def testAliasesAreRejected(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_params([["p, pkg", "no aliases here"]])

    def testEmptyPieceRaises(self):
        with self.assertRaises(MissingNameError):
            compile_params("[pkg, ]")

    def testTrailingTextAfterListRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_params("[a, b] extra")

    def testUnclosedListRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_params("[a, b")

    def testNonStringSourceRaises(self):
        with self.assertRaises(MalformedDefinitionError):
            compile_params(42)


if __name__ == "__main__":
    unittest.main()
