# python
"""
Command line wrapper behavioral tests.

Scope
- Tokens in, JSON text plus newline out; the '--' separator.
- Environment configuration (JASON_SHAPE, JASON_TYPE, JASON_STREAM, sizes) and
  the array entry point.
- Faults end the process with the status of their class and one line on stderr.
- Help and version screens.

Conventions
- Test method names follow CamelCase per project convention.
- os.environ is replaced per test; stdout/stderr are redirected to io.StringIO.
"""

from __future__ import annotations

import io
import os
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import TestCase, mock

from jason import __version__
from jason.__main__ import main


class CommandLineTestCase(TestCase):

    def run_main(self, argv, environ=None, **options):
        stdout, stderr = io.StringIO(), io.StringIO()
        status = None
        with mock.patch.dict(os.environ, environ or {}, clear=True):
            with redirect_stdout(stdout), redirect_stderr(stderr):
                try:
                    status = main(argv, **options)
                except SystemExit as exit:
                    status = exit.code
        return status, stdout.getvalue(), stderr.getvalue()


class TestOutput(CommandLineTestCase):

    def testObject(self):
        status, out, err = self.run_main(["msg=hi", "n:number=1"])
        self.assertEqual((status, out, err), (0, '{"msg":"hi","n":1}\n', ""))

    def testNoArguments(self):
        self.assertEqual(self.run_main([])[1], "{}\n")

    def testDoubleDash(self):
        self.assertEqual(self.run_main(["--", "-h=1"])[1], '{"-h":"1"}\n')

    def testEnvironmentVariables(self):
        status, out, _ = self.run_main(["name@NAME"], {"NAME": "ada"})
        self.assertEqual(out, '{"name":"ada"}\n')

    def testArrayEntryPoint(self):
        status, out, _ = self.run_main(["1:number", "hi"], shape="array")
        self.assertEqual((status, out), (0, '[1,"hi"]\n'))

    def testShapeFromEnvironment(self):
        self.assertEqual(self.run_main(["a"], {"JASON_SHAPE": "array"})[1], '["a"]\n')

    def testTypeFromEnvironment(self):
        self.assertEqual(self.run_main(["a=1"], {"JASON_TYPE": "auto"})[1], '{"a":1}\n')

    def testStreaming(self):
        environ = {"JASON_STREAM": "true", "JASON_BATCH_SIZE": "1"}
        self.assertEqual(self.run_main(["xs:number[,]=1,2"], environ)[1], '{"xs":[1,2]}\n')


class TestFaults(CommandLineTestCase):

    def testEncodingFailure(self):
        status, out, err = self.run_main(["a=1", "n:number=x"])
        self.assertEqual(status, 1)
        self.assertEqual(out, "")
        self.assertEqual(err, "jason: encoders: second argument 'n:number=x': not all inputs are numbers: 'x'\n")

    def testSyntaxFailure(self):
        status, out, err = self.run_main(["a:integer=1"])
        self.assertEqual(status, 2)
        self.assertTrue(err.startswith("jason: arguments: "))

    def testUnboundStrict(self):
        status, _, err = self.run_main(["a@NOPE"], {"JASON_STRICT": "1"})
        self.assertEqual(status, 3)
        self.assertIn("'NOPE'", err)

    def testMissingFile(self):
        self.assertEqual(self.run_main(["a@./no/such/file"])[0], 4)

    def testStreamedFailurePoisonsOutput(self):
        status, out, _ = self.run_main(["a=1", "n:number=x"], {"JASON_STREAM": "yes"})
        self.assertEqual(status, 1)
        self.assertTrue(out.endswith("\x18"))

    def testInvalidConfiguration(self):
        for environ in ({"JASON_STREAM": "maybe"}, {"JASON_CHUNK_SIZE": "0"}, {"JASON_SHAPE": "tuple"}):
            with self.subTest(environ=environ):
                status, _, err = self.run_main(["a=1"], environ)
                self.assertEqual(status, 2)
                self.assertTrue(err.startswith("jason: defaults: "))

    def testArrayProgramName(self):
        _, _, err = self.run_main(["n:number=x"], shape="array")
        self.assertTrue(err.startswith("jason-array: "))


class TestScreens(CommandLineTestCase):

    def testHelp(self):
        status, out, _ = self.run_main(["--help"])
        self.assertEqual(status, 0)
        self.assertIn("usage", out)
        self.assertIn("jason msg=hi", out)

    def testVersion(self):
        status, out, _ = self.run_main(["--version"])
        self.assertEqual((status, out), (0, f"jason {__version__}\n"))


if __name__ == "__main__":
    unittest.main()
