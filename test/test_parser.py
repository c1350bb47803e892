# python
"""
Matching engine behavioral tests (token classification and binding).

Scope
- Validate long options (declared valued, declared flag, undeclared lenient form).
- Validate short aliases (canonical keys, strict rejection of unknown aliases).
- Validate positional binding, default backfill and overflow.
- Validate scan() early stop used for command routing.

Conventions
- Test method names follow CamelCase per project convention.
- Schemas are plain lists of Arg unless the command layer is under test.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from snapcli import (
    Arg,
    Command,
    match,
    scan,
    MissingValueError,
    UnknownArgumentError,
    UnexpectedArgumentError,
)


class TestLongOptions(TestCase):
    """--name forms."""

    def testDeclaredValuedBindsNextToken(self):
        matches = match([Arg("text")], ["--text", "hi"])
        self.assertEqual(dict(matches), {"text": "hi"})

    def testDeclaredValuedConsumesNextTokenVerbatim(self):
        matches = match([Arg("text"), Arg("verbose", flag=True)], ["--text", "--verbose"])
        self.assertEqual(dict(matches), {"text": "--verbose"})

    def testDeclaredValuedLastTokenFallsBackToDefault(self):
        matches = match([Arg("text", default="Hello, world!")], ["--text"])
        self.assertEqual(matches["text"], "Hello, world!")

    def testDeclaredValuedLastTokenWithoutDefaultRaises(self):
        with self.assertRaises(MissingValueError) as context:
            match([Arg("text")], ["--text"])
        self.assertEqual(context.exception.key, "text")

    def testDeclaredValuedNotSuppliedStaysAbsent(self):
        matches = match([Arg("text", default="Hello, world!")], [])
        self.assertFalse(matches.is_present("text"))

    def testFlagResolvesToTrue(self):
        matches = match([Arg("verbose", flag=True)], ["--verbose"])
        self.assertEqual(matches["verbose"], "true")

    def testFlagIsIdempotent(self):
        matches = match([Arg("verbose", flag=True)], ["--verbose", "--verbose"])
        self.assertEqual(dict(matches), {"verbose": "true"})

    def testFlagNeverConsumesValue(self):
        schema = [Arg("verbose", flag=True), Arg("file", positional=True)]
        matches = match(schema, ["--verbose", "notes.txt"])
        self.assertEqual(dict(matches), {"verbose": "true", "file": "notes.txt"})

    def testUndeclaredBindsNextToken(self):
        matches = match([], ["--color", "red"])
        self.assertEqual(dict(matches), {"color": "red"})

    def testUndeclaredBeforeLongOptionIsFlag(self):
        matches = match([], ["--color", "--bold"])
        self.assertEqual(dict(matches), {"color": "true", "bold": "true"})

    def testUndeclaredLastTokenIsFlag(self):
        matches = match([], ["--color"])
        self.assertEqual(dict(matches), {"color": "true"})

    def testUndeclaredBeforeShortAliasTakesIt(self):
        matches = match([Arg("verbose", "v", flag=True)], ["--color", "-v"])
        self.assertEqual(dict(matches), {"color": "-v"})

    def testLastWriteWins(self):
        matches = match([Arg("text")], ["--text", "a", "--text", "b"])
        self.assertEqual(matches["text"], "b")

    def testDoubleDashIsEmptyUndeclaredKey(self):
        matches = match([], ["--"])
        self.assertEqual(dict(matches), {"": "true"})


class TestShortAliases(TestCase):
    """-alias forms."""

    def testShortFlagKeyedByCanonicalName(self):
        matches = match([Arg("verbose", "v", flag=True)], ["-v"])
        self.assertEqual(dict(matches), {"verbose": "true"})
        self.assertFalse(matches.is_present("v"))

    def testShortValuedBindsNextToken(self):
        matches = match([Arg("text", "t")], ["-t", "hi"])
        self.assertEqual(dict(matches), {"text": "hi"})

    def testShortValuedLastTokenFallsBackToDefault(self):
        matches = match([Arg("text", "t", default="x")], ["-t"])
        self.assertEqual(matches["text"], "x")

    def testShortValuedLastTokenWithoutDefaultRaises(self):
        with self.assertRaises(MissingValueError):
            match([Arg("text", "t")], ["-t"])

    def testUnknownShortFailsRegardlessOfTrailingTokens(self):
        for tokens in (["-x"], ["-x", "value"], ["-x", "--other"]):
            with self.subTest(tokens=tokens), self.assertRaises(UnknownArgumentError) as context:
                match([Arg("verbose", "v", flag=True)], tokens)
            self.assertEqual(context.exception.key, "x")

    def testLongNameIsNotAShortAlias(self):
        with self.assertRaises(UnknownArgumentError):
            match([Arg("verbose", flag=True)], ["-verbose"])

    def testLoneHyphenIsUnknownShort(self):
        with self.assertRaises(UnknownArgumentError) as context:
            match([], ["-"])
        self.assertEqual(context.exception.key, "")


class TestPositionals(TestCase):
    """Bare tokens, defaults and overflow."""

    def setUp(self):
        self.schema = [
            Arg("a", about="add a", positional=True, default="0"),
            Arg("b", about="add b", positional=True, default="0"),
        ]

    def testBindInDeclarationOrder(self):
        matches = match(self.schema, ["3", "4"])
        self.assertEqual(matches.as_int("a") + matches.as_int("b"), 7)

    def testDefaultsBackfilled(self):
        matches = match(self.schema, [])
        self.assertEqual(dict(matches), {"a": "0", "b": "0"})

    def testPartialBindingBackfillsRest(self):
        matches = match(self.schema, ["3"])
        self.assertEqual(dict(matches), {"a": "3", "b": "0"})

    def testWithoutDefaultStaysAbsent(self):
        matches = match([Arg("file", positional=True)], [])
        self.assertFalse(matches.is_present("file"))
        with self.assertRaises(MissingValueError):
            matches.require("file")

    def testOverflowRaises(self):
        with self.assertRaises(UnexpectedArgumentError) as context:
            match(self.schema, ["1", "2", "3"])
        self.assertEqual(context.exception.token, "3")

    def testBareTokenWithoutPositionalsRaises(self):
        with self.assertRaises(UnexpectedArgumentError):
            match([Arg("verbose", flag=True)], ["stray"])

    def testPositionalIsNotReachableByName(self):
        with self.assertRaises(UnknownArgumentError):
            match([Arg("a", "x", positional=True)], ["-x", "1"])

    def testOptionsAndPositionalsInterleave(self):
        schema = self.schema + [Arg("verbose", "v", flag=True)]
        matches = match(schema, ["3", "-v", "4"])
        self.assertEqual(dict(matches), {"a": "3", "verbose": "true", "b": "4"})


class TestScanAndSchemas(TestCase):
    """Early stop, schema forms and input validation."""

    def testScanStopsAtUnboundBareToken(self):
        matches, index = scan([Arg("verbose", flag=True)], ["--verbose", "run", "--fast"], interspersed=False)
        self.assertEqual(dict(matches), {"verbose": "true"})
        self.assertEqual(index, 1)

    def testScanConsumesEverything(self):
        matches, index = scan([Arg("verbose", flag=True)], ["--verbose"], interspersed=False)
        self.assertEqual(index, 1)

    def testScanInterspersedRaises(self):
        with self.assertRaises(UnexpectedArgumentError):
            scan([], ["run"])

    def testCommandAsSchema(self):
        command = Command("sub", args=[Arg("a", default="0"), Arg("b", default="0")])
        matches = match(command, ["--a", "3", "--b", "4"])
        self.assertEqual(matches.as_int("a", 0) + matches.as_int("b", 0), 7)

    def testSchemaIsNotMutated(self):
        command = Command("sub", args=[Arg("a", positional=True, default="0")])
        before = command.args
        match(command, ["1"])
        match(command, [])
        self.assertEqual(command.args, before)

    def testEachCallOwnsItsTable(self):
        schema = [Arg("a", positional=True)]
        first = match(schema, ["1"])
        second = match(schema, [])
        self.assertEqual(dict(first), {"a": "1"})
        self.assertEqual(dict(second), {})

    def testDuplicateNamesRejected(self):
        with self.assertRaises(ValueError):
            match([Arg("a"), Arg("a", flag=True)], [])

    def testDuplicateShortsRejected(self):
        with self.assertRaises(ValueError):
            match([Arg("a", "x"), Arg("b", "x")], [])

    def testTokensMustBeStrings(self):
        with self.assertRaises(TypeError):
            match([], "--verbose")
        with self.assertRaises(TypeError):
            match([], ["--count", 3])

    def testSchemaMustHoldArgs(self):
        with self.assertRaises(TypeError):
            match(["verbose"], [])


if __name__ == "__main__":
    unittest.main()
