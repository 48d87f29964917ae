"""
Binder module behavioral tests (flags, bundles, positionals, passthrough, defaults).

Scope
- Validate long and short flag binding for every option type.
- Validate bundles, attached short values and unknown flags.
- Validate positional assignment, variadic absorption and leftovers.
- Validate the '--' passthrough, default application and required reporting.
- Validate that binding never mutates its inputs and is repeatable.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from terse import Bound, bind, compile_params, compile_schema


class TestFlags(TestCase):
    """Behavioral tests for flag binding."""

    def setUp(self):
        self.schema = compile_schema([
            ["r, !recursive", "recurse"],
            ["o, output <file>", "output path"],
            ["d, -depth", "maximum depth"],
            ["i, ...include", "include patterns"],
        ])

    def testShortBooleanAlias(self):
        flags, _, _ = bind(compile_schema([["r,!recursive"]]), ["-r"])
        self.assertEqual(flags, {"_": [], "--": [], "recursive": True})

    def testLongBooleanName(self):
        flags, _, _ = bind(self.schema, ["--recursive"])
        self.assertIs(flags["recursive"], True)

    def testBooleanInlineFalse(self):
        flags, _, _ = bind(self.schema, ["--recursive=false"])
        self.assertIs(flags["recursive"], False)

    def testBooleanFollowingLiteral(self):
        flags, _, _ = bind(self.schema, ["--recursive", "false", "x"])
        self.assertIs(flags["recursive"], False)
        self.assertEqual(flags["_"], ["x"])

    def testBooleanFollowingLiteralIsCaseInsensitive(self):
        flags, _, _ = bind(self.schema, ["--recursive", "FALSE"])
        self.assertIs(flags["recursive"], False)
        self.assertEqual(flags["_"], [])

    def testBooleanDoesNotConsumeOtherValues(self):
        flags, _, _ = bind(self.schema, ["-r", "src"])
        self.assertIs(flags["recursive"], True)
        self.assertEqual(flags["_"], ["src"])

    def testStringInlineAndSpaced(self):
        self.assertEqual(bind(self.schema, ["--output=a.txt"]).flags["output"], "a.txt")
        self.assertEqual(bind(self.schema, ["--output", "b.txt"]).flags["output"], "b.txt")
        self.assertEqual(bind(self.schema, ["-o", "c.txt"]).flags["output"], "c.txt")

    def testStringWithoutValueStaysUnbound(self):
        flags, _, _ = bind(self.schema, ["--output", "--recursive"])
        self.assertNotIn("output", flags)
        self.assertIs(flags["recursive"], True)

    def testLastOccurrenceWins(self):
        self.assertEqual(bind(self.schema, ["-o", "a", "-o", "b"]).flags["output"], "b")

    def testNumberCoercion(self):
        self.assertEqual(bind(self.schema, ["--depth", "3"]).flags["depth"], 3)
        self.assertEqual(bind(self.schema, ["--depth=2.5"]).flags["depth"], 2.5)
        self.assertEqual(bind(self.schema, ["-d", "-4"]).flags["depth"], -4)

    def testUnparseableNumberKeepsText(self):
        self.assertEqual(bind(self.schema, ["--depth", "deep"]).flags["depth"], "deep")

    def testArrayTakesOneValuePerOccurrence(self):
        schema = compile_schema([["i, ...include"]])
        flags, params, missing = bind(schema, ["--include", "a", "axios"], compile_params("[pkg!]"))
        self.assertEqual(flags["include"], ["a"])
        self.assertEqual(params, {"pkg": "axios"})
        self.assertEqual(missing, ())

    def testArrayRepeatedShortFlags(self):
        flags, _, _ = bind(self.schema, ["-i", "a", "-i", "b", "c"])
        self.assertEqual(flags["include"], ["a", "b"])
        self.assertEqual(flags["_"], ["c"])

    def testArrayAccumulates(self):
        flags, _, _ = bind(self.schema, ["-i", "a", "--include=b"])
        self.assertEqual(flags["include"], ["a", "b"])

    def testArrayWithoutValuesStaysUnbound(self):
        self.assertNotIn("include", bind(self.schema, ["--include"]).flags)

    def testKeysAreExactlyBoundNames(self):
        flags, _, _ = bind(self.schema, ["-o", "x", "--depth", "1"])
        self.assertEqual(set(flags), {"_", "--", "output", "depth"})


class TestShortBundles(TestCase):
    """Behavioral tests for bundled and attached short flags."""

    def setUp(self):
        self.schema = compile_schema([
            ["a, !all"],
            ["b, !brief"],
            ["c, !color"],
            ["o, output"],
        ])

    def testBundleOfBooleans(self):
        flags, _, _ = bind(self.schema, ["-abc"])
        self.assertEqual(flags, {"_": [], "--": [], "all": True, "brief": True, "color": True})

    def testAttachedValue(self):
        self.assertEqual(bind(self.schema, ["-ofile.txt"]).flags["output"], "file.txt")

    def testInlineValueOnShortFlag(self):
        self.assertEqual(bind(self.schema, ["-o=file.txt"]).flags["output"], "file.txt")

    def testBundleEndingWithValueFlag(self):
        flags, _, _ = bind(self.schema, ["-abo", "file.txt"])
        self.assertIs(flags["all"], True)
        self.assertIs(flags["brief"], True)
        self.assertEqual(flags["output"], "file.txt")

    def testWholeBodyNameIsNotSplit(self):
        schema = compile_schema([["rf, !force"], ["r, !recursive"]])
        flags, _, _ = bind(schema, ["-rf"])
        self.assertIs(flags["force"], True)
        self.assertNotIn("recursive", flags)


class TestUnknownFlags(TestCase):
    """Behavioral tests for flags missing from the schema."""

    def testUnknownShortFlagDoesNotConsume(self):
        flags, _, _ = bind(compile_schema(), ["-n", "xxx"])
        self.assertIs(flags["n"], True)
        self.assertEqual(flags["_"], ["xxx"])

    def testUnknownLongFlagKeepsInlineText(self):
        self.assertEqual(bind(compile_schema(), ["--name=value"]).flags["name"], "value")


class TestPositionals(TestCase):
    """Behavioral tests for positional parameters and leftovers."""

    def testVariadicAbsorption(self):
        _, params, missing = bind(compile_schema(), ["axios", "a.ts", "a.js"], compile_params("[pkg!, ...files]"))
        self.assertEqual(params, {"pkg": "axios", "files": ["a.ts", "a.js"]})
        self.assertEqual(missing, ())

    def testSurplusGoesToLeftovers(self):
        flags, params, _ = bind(compile_schema(), ["a", "b", "c"], compile_params("[src, dst]"))
        self.assertEqual(params, {"src": "a", "dst": "b"})
        self.assertEqual(flags["_"], ["c"])

    def testLoneDashAndNegativeNumbersArePositional(self):
        flags, _, _ = bind(compile_schema(), ["-", "-5", "-0.5"])
        self.assertEqual(flags["_"], ["-", "-5", "-0.5"])

    def testNumberParameterCoercion(self):
        _, params, _ = bind(compile_schema(), ["7"], compile_params("[count|number]"))
        self.assertEqual(params, {"count": 7})

    def testFlagsAndPositionalsInterleave(self):
        schema = compile_schema([["flag!", "", "x"], ["r, !recursive", "", False]])
        params = compile_params([["pkg!"], ["yu"], ["file"]])
        tokens = ["axios", "x", "f1", "f2", "-r", "--flag", "test", "-n", "xxx"]
        flags, bound, missing = bind(schema, tokens, params)
        self.assertEqual(flags, {"_": ["f2", "xxx"], "--": [], "recursive": True, "flag": "test", "n": True})
        self.assertEqual(bound, {"pkg": "axios", "yu": "x", "file": "f1"})
        self.assertEqual(missing, ())

    def testVariadicAbsorbsAcrossFlags(self):
        schema = compile_schema([["!flag!", "", False], ["r, !recursive", "", False]])
        tokens = ["axios", "f1", "f2", "-r", "--flag", "true", "-n", "xxx"]
        flags, params, _ = bind(schema, tokens, compile_params("[pkg!, ...files]"))
        self.assertEqual(flags, {"_": [], "--": [], "flag": True, "recursive": True, "n": True})
        self.assertEqual(params, {"pkg": "axios", "files": ["f1", "f2", "xxx"]})


class TestPassthrough(TestCase):
    """Behavioral tests for the '--' separator."""

    def testSeparatorPassthrough(self):
        flags, _, _ = bind(compile_schema(), ["a", "--", "b", "c"])
        self.assertEqual(flags, {"_": ["a"], "--": ["b", "c"]})

    def testFlagsAfterSeparatorAreVerbatim(self):
        flags, _, _ = bind(compile_schema([["!verbose"]]), ["--", "--verbose", "-x"])
        self.assertNotIn("verbose", flags)
        self.assertEqual(flags["--"], ["--verbose", "-x"])


class TestDefaultsAndRequired(TestCase):
    """Behavioral tests for defaults, required names and repeatability."""

    def setUp(self):
        self.schema = compile_schema([
            ["o, output <file>", "", "out.txt"],
            ["i, ...include", "", ["*.py"]],
            ["t, token!", "api token"],
        ])

    def testDefaultAppliesWhenAbsent(self):
        flags, _, _ = bind(self.schema, [])
        self.assertEqual(flags["output"], "out.txt")
        self.assertEqual(flags["include"], ["*.py"])
        self.assertNotIn("token", flags)

    def testDefaultDoesNotApplyWhenPresent(self):
        self.assertEqual(bind(self.schema, ["-o", "x"]).flags["output"], "x")

    def testParameterDefault(self):
        _, params, _ = bind(compile_schema(), [], compile_params([["mode", "", "fast"]]))
        self.assertEqual(params, {"mode": "fast"})

    def testMissingRequiredNames(self):
        _, _, missing = bind(self.schema, [], compile_params("[pkg!]"))
        self.assertEqual(missing, ("token", "pkg"))

    def testRequiredSatisfied(self):
        self.assertEqual(bind(self.schema, ["--token", "abc"]).missing, ())

    def testBindingTwiceIsIdentical(self):
        tokens = ["-o", "x", "a", "--", "b"]
        self.assertEqual(bind(self.schema, tokens), bind(self.schema, tokens))

    def testDefaultsAreNotShared(self):
        first = bind(self.schema, [])
        first.flags["include"].append("*.md")
        self.assertEqual(bind(self.schema, []).flags["include"], ["*.py"])

    def testTokensAreNotMutated(self):
        tokens = ["-o", "x", "y"]
        bind(self.schema, tokens)
        self.assertEqual(tokens, ["-o", "x", "y"])

    def testResultIsBound(self):
        self.assertIsInstance(bind(self.schema, []), Bound)


if __name__ == "__main__":
    unittest.main()
