# python
"""
Value resolver behavioral tests.

Scope
- Literal, variable (with [index] chains and NAME_FILE fallback) and file references.
- Strictness: unbound references resolve to None unless strict; optional wins.
- Collection splitting rules (trailing separator, empty input) and trimming.
- Lazy forms: chunked reads and incremental splitting.

Conventions
- Test method names follow CamelCase per project convention.
- Files live in a per-test temporary directory; standard input is an io.StringIO.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from unittest import TestCase, mock

from jason import EncodingError, FaultCode, MissingResourceError, UnboundReferenceError
from jason.references import Reference, basename, iterate, lookup, read_chunks, resolve, split


def literal(text):
    return Reference("literal", text)


def variable(text):
    return Reference("variable", text)


class TestLiterals(TestCase):

    def testScalar(self):
        self.assertEqual(resolve(literal("a,b")), ["a,b"])

    def testSplit(self):
        self.assertEqual(resolve(literal("a,b"), split=","), ["a", "b"])

    def testTrailingSeparatorIgnored(self):
        self.assertEqual(resolve(literal("a,b,"), split=","), ["a", "b"])

    def testInnerEmptyElementsKept(self):
        self.assertEqual(resolve(literal("a,,b"), split=","), ["a", "", "b"])

    def testEmptyInputHasNoElements(self):
        self.assertEqual(resolve(literal(""), split=","), [])
        self.assertEqual(resolve(literal(""), split=None), [])

    def testUnsplitCollection(self):
        self.assertEqual(resolve(literal("a,b"), split=None), ["a,b"])

    def testTrim(self):
        self.assertEqual(resolve(literal("1 \n"), trim=True), ["1"])
        self.assertEqual(resolve(literal("1 \n")), ["1 \n"])


class TestVariables(TestCase):

    def testString(self):
        self.assertEqual(resolve(variable("A"), env={"A": "x"}), ["x"])

    def testStringifiedValues(self):
        env = {"T": True, "F": False, "N": None, "I": 3, "R": 1.5}
        self.assertEqual(
            [resolve(variable(name), env=env)[0] for name in "TFNIR"],
            ["true", "false", "null", "3", "1.5"],
        )

    def testUnsupportedValue(self):
        with self.assertRaises(EncodingError):
            resolve(variable("O"), env={"O": object()})

    def testUnboundLenient(self):
        self.assertIsNone(resolve(variable("MISSING"), env={}))

    def testUnboundStrict(self):
        with self.assertRaises(UnboundReferenceError) as context:
            resolve(variable("MISSING"), env={}, strict=True)
        self.assertEqual(context.exception.status, 3)
        self.assertEqual(context.exception.options["code"], FaultCode.UNBOUND_REFERENCE)

    def testOptionalWinsOverStrict(self):
        self.assertIsNone(resolve(variable("MISSING"), env={}, strict=True, optional=True))

    def testSequence(self):
        self.assertEqual(resolve(variable("L"), env={"L": [1, "a", None]}, split=None), ["1", "a", "null"])

    def testSequenceElementsAreNotSplit(self):
        self.assertEqual(resolve(variable("L"), env={"L": ["a,b"]}, split=","), ["a,b"])

    def testSequenceInScalarContext(self):
        with self.assertRaises(EncodingError) as context:
            resolve(variable("L"), env={"L": ["a", "b"]})
        self.assertEqual(context.exception.options["count"], 2)

    def testMapping(self):
        self.assertEqual(resolve(variable("M"), env={"M": {"a": 1, "b": " x "}}, split=None), {"a": "1", "b": " x "})
        self.assertEqual(resolve(variable("M"), env={"M": {"b": " x "}}, split=None, trim=True), {"b": " x"})

    def testIndexing(self):
        env = {"L": ["a", "b"], "M": {"k": [10, 20]}}
        self.assertEqual(resolve(variable("L[1]"), env=env), ["b"])
        self.assertEqual(resolve(variable("L[-1]"), env=env), ["b"])
        self.assertEqual(resolve(variable("M[k][0]"), env=env), ["10"])

    def testIndexOutOfRangeIsUnbound(self):
        env = {"L": ["a"], "M": {}}
        self.assertIsNone(resolve(variable("L[5]"), env=env))
        self.assertIsNone(resolve(variable("M[k]"), env=env))

    def testInvalidIndex(self):
        env = {"L": ["a"], "S": "text"}
        for name in ("L[x]", "S[0]"):
            with self.subTest(name=name):
                with self.assertRaises(UnboundReferenceError) as context:
                    resolve(variable(name), env=env)
                self.assertEqual(context.exception.options["code"], FaultCode.INVALID_INDEX)

    def testLookup(self):
        self.assertEqual(lookup("L[0]", {"L": ["a"]}), "a")
        self.assertFalse(lookup("X", {}))


class TestFiles(TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)

    def write(self, name, content):
        path = os.path.join(self.directory.name, name)
        with open(path, "w", encoding="utf-8", newline="") as file:
            file.write(content)
        return path

    def testScalarKeepsContent(self):
        path = self.write("a.txt", "hello\r\nworld\n")
        self.assertEqual(resolve(Reference("file", path)), ["hello\r\nworld\n"])

    def testScalarTrim(self):
        path = self.write("n.txt", "42\n")
        self.assertEqual(resolve(Reference("file", path), trim=True), ["42"])

    def testLinesByDefault(self):
        path = self.write("l.txt", "a\nb\n")
        self.assertEqual(resolve(Reference("file", path), split=None), ["a", "b"])

    def testCustomSplit(self):
        path = self.write("c.txt", "a;b;")
        self.assertEqual(resolve(Reference("file", path), split=";"), ["a", "b"])

    def testEmptyFile(self):
        path = self.write("e.txt", "")
        self.assertEqual(resolve(Reference("file", path), split=None), [])
        self.assertEqual(resolve(Reference("file", path)), [""])

    def testMissing(self):
        path = os.path.join(self.directory.name, "nope")
        with self.assertRaises(MissingResourceError) as context:
            resolve(Reference("file", path))
        self.assertEqual(context.exception.status, 4)
        self.assertEqual(context.exception.options["path"], path)

    def testMissingOptional(self):
        path = os.path.join(self.directory.name, "nope")
        self.assertIsNone(resolve(Reference("file", path), optional=True))

    def testDirectory(self):
        with self.assertRaises(MissingResourceError):
            resolve(Reference("file", self.directory.name))

    def testFileFallback(self):
        path = self.write("secret", "s3cr3t")
        self.assertEqual(resolve(variable("TOKEN"), env={"TOKEN_FILE": path}), ["s3cr3t"])

    def testVariableBeatsFileFallback(self):
        path = self.write("secret", "s3cr3t")
        self.assertEqual(resolve(variable("TOKEN"), env={"TOKEN": "x", "TOKEN_FILE": path}), ["x"])

    def testStdin(self):
        self.assertEqual(resolve(Reference("file", "-"), stdin=io.StringIO("a\nb\n"), split=None), ["a", "b"])

    def testChunkedIteration(self):
        path = self.write("big.txt", "abc\ndef\nghi")
        values = iterate(Reference("file", path), split=None, chunk_size=2)
        self.assertEqual(list(values), ["abc", "def", "ghi"])

    def testReadChunks(self):
        path = self.write("s.txt", "abcde")
        self.assertEqual(list(read_chunks(Reference("file", path), chunk_size=2)), ["ab", "cd", "e"])

    def testFileOpenedOnFirstRead(self):
        path = self.write("lazy.txt", "abc")
        with mock.patch("builtins.open", wraps=open) as opened:
            chunks = read_chunks(Reference("file", path), chunk_size=2)
            opened.assert_not_called()
            self.assertEqual(next(chunks), "ab")
            opened.assert_called_once()
            chunks.close()

    def testMissingDetectedBeforeReading(self):
        path = os.path.join(self.directory.name, "nope")
        with self.assertRaises(MissingResourceError):
            read_chunks(Reference("file", path))


class TestHelpers(TestCase):

    def testSplitAcrossChunks(self):
        self.assertEqual(list(split(["a,b", ",c,"], ",")), ["a", "b", "c"])
        self.assertEqual(list(split(["a,", ",b"], ",")), ["a", "", "b"])

    def testSplitLongRunWithoutSeparator(self):
        chunks = ["x" * 8] * 1000 + ["y,z"]
        self.assertEqual(list(split(chunks, ",")), ["x" * 8000 + "y", "z"])

    def testSplitEmptyChunks(self):
        self.assertEqual(list(split(["", "a", "", ",", ""], ",")), ["a"])

    def testBasename(self):
        self.assertEqual(basename("./dir/x.txt"), "x.txt")
        self.assertEqual(basename("/tmp/dir/"), "dir")
        self.assertEqual(basename("-"), "stdin")


if __name__ == "__main__":
    unittest.main()
