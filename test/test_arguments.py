# python
"""
Arguments module behavioral tests (construction, validation, immutability).

Scope
- Validate Arg construction defaults and metadata normalization.
- Validate identifier constraints (name/short: non-empty, no whitespace, no leading '-').
- Validate immutability and derivation through copy.replace().

Conventions
- Test method names follow CamelCase per project convention.
- Never pass explicit None for any parameter; omit instead.
"""

from __future__ import annotations

import copy
import unittest
from unittest import TestCase

from rich.text import Text

from snapcli import Arg


class TestArgConstruction(TestCase):
    """Behavioral tests for Arg metadata."""

    def testArgDefaults(self):
        arg = Arg("verbose")
        self.assertEqual(arg.name, "verbose")
        self.assertIsNone(arg.short)
        self.assertIsNone(arg.about)
        self.assertFalse(arg.flag)
        self.assertFalse(arg.positional)
        self.assertIsNone(arg.default)

    def testArgFullMetadata(self):
        arg = Arg("text", "t", "The text to print", default="Hello, world!")
        self.assertEqual(arg.short, "t")
        self.assertEqual(arg.about, "The text to print")
        self.assertEqual(arg.default, "Hello, world!")

    def testArgNameIsTrimmed(self):
        self.assertEqual(Arg("  text ").name, "text")

    def testArgAboutIsTrimmed(self):
        self.assertEqual(Arg("text", about="  The text  ").about, "The text")

    def testArgAboutAcceptsRichText(self):
        about = Text("The text", style="bold")
        self.assertIs(Arg("text", about=about).about, about)

    def testArgEmptyDefaultIsAValue(self):
        self.assertEqual(Arg("text", default="").default, "")

    def testArgFlagAndPositionalAreBooleans(self):
        arg = Arg("a", flag=1, positional=0)
        self.assertIs(arg.flag, True)
        self.assertIs(arg.positional, False)

    def testArgValuedProperty(self):
        self.assertTrue(Arg("text").valued)
        self.assertFalse(Arg("verbose", flag=True).valued)
        self.assertFalse(Arg("a", positional=True).valued)


class TestArgValidation(TestCase):
    """Identifier and metadata constraints."""

    def testArgNameMustBeString(self):
        with self.assertRaises(TypeError):
            Arg(1)

    def testArgNameMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Arg("   ")

    def testArgNameRejectsWhitespace(self):
        with self.assertRaises(ValueError):
            Arg("dry run")

    def testArgNameRejectsLeadingHyphen(self):
        with self.assertRaises(ValueError):
            Arg("--verbose")

    def testArgShortExplicitNoneRejected(self):
        with self.assertRaises(TypeError):
            Arg("verbose", None)

    def testArgShortMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Arg("verbose", "")

    def testArgShortRejectsLeadingHyphen(self):
        with self.assertRaises(ValueError):
            Arg("verbose", "-v")

    def testArgAboutMustBeNonEmpty(self):
        with self.assertRaises(ValueError):
            Arg("verbose", about=" ")

    def testArgDefaultMustBeString(self):
        with self.assertRaises(TypeError):
            Arg("count", default=0)


class TestArgImmutability(TestCase):
    """Specs never change after construction."""

    def testArgAttributesAreReadOnly(self):
        arg = Arg("verbose")
        with self.assertRaises(AttributeError):
            arg.name = "quiet"
        with self.assertRaises(AttributeError):
            arg.flag = True

    def testArgAttributesCannotBeDeleted(self):
        arg = Arg("verbose")
        with self.assertRaises(AttributeError):
            del arg.name

    def testArgReplaceReturnsNewSpec(self):
        text = Arg("text", about="The text to print")
        derived = copy.replace(text, default="Hello, world!")
        self.assertIsNot(derived, text)
        self.assertEqual(derived.default, "Hello, world!")
        self.assertEqual(derived.about, "The text to print")
        self.assertIsNone(text.default)

    def testArgReplaceRevalidates(self):
        with self.assertRaises(ValueError):
            copy.replace(Arg("text"), name="")

    def testArgEquality(self):
        self.assertEqual(Arg("a", "x", flag=True), Arg("a", "x", flag=True))
        self.assertNotEqual(Arg("a"), Arg("a", flag=True))
        self.assertEqual(len({Arg("a"), Arg("a")}), 1)

    def testArgRepr(self):
        self.assertEqual(
            repr(Arg("verbose", "v", flag=True)),
            "arg(name='verbose', short='v', about=None, flag=True, positional=False, default=None)"
        )


if __name__ == "__main__":
    unittest.main()
