import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest import mock

from vsl.main import main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp_dir.cleanup()

    def write(self, content):
        path = os.path.join(self.tmp_dir.name, "prog.vsl")
        with open(path, "w", encoding="utf-8") as file:
            file.write(content)
        return path

    def run_main(self, *args, stdin=""):
        """Runs main with args. Returns (exit code, stdout, stderr)."""
        stdout = io.StringIO()
        stderr = io.StringIO()
        code = 0

        with mock.patch("sys.argv", ["vsl", *args]), mock.patch("sys.stdin", io.StringIO(stdin)):
            with redirect_stdout(stdout), redirect_stderr(stderr):
                try:
                    main()
                except SystemExit as exc:
                    code = exc.code

        return code, stdout.getvalue(), stderr.getvalue()

    def test_usage(self):
        code, stdout, __ = self.run_main()
        self.assertEqual(0, code)
        self.assertIn("usage", stdout)

    def test_run_file(self):
        path = self.write("let x = 2 + 3 * 4;\nprint(x);\nprint(10 - 3 - 2);\nprint(\"a\" + 1);\n")
        code, stdout, stderr = self.run_main(path)

        self.assertEqual(0, code)
        self.assertEqual("14\n5\na1\n", stdout)
        self.assertEqual("", stderr)

    def test_run_file_with_input(self):
        path = self.write("let n = read(); while (n > 0) { print(n); n = n - 1; }")
        code, stdout, __ = self.run_main(path, stdin="3\n")

        self.assertEqual(0, code)
        self.assertEqual("3\n2\n1\n", stdout)

    def test_errors_exit_with_status_1(self):
        cases = {
            "print(1);\nprint(y);\n": "runtime error",
            "print(1 / 0);": "division by zero",
            "print(1)": "parse error",
            "let x = 1 $ 2;": "lex error",
            "read();": "end of input",
        }
        for source, expected in cases.items():
            code, __, stderr = self.run_main(self.write(source))
            self.assertEqual(1, code, source)
            self.assertIn(expected, stderr, source)

    def test_missing_file(self):
        code, __, stderr = self.run_main(os.path.join(self.tmp_dir.name, "nope.vsl"))
        self.assertEqual(1, code)
        self.assertIn("could not be opened", stderr)

    def test_tokens(self):
        code, stdout, __ = self.run_main(self.write("let x = 1;"), "--tokens")

        self.assertEqual(0, code)
        self.assertIn("1:1\tToken(LET, 'let')", stdout)
        self.assertIn("Token(EOF, '')", stdout)

    def test_ast(self):
        code, stdout, __ = self.run_main(self.write("print(1 + 2);"), "--ast")

        self.assertEqual(0, code)
        self.assertTrue(stdout.startswith("Program("))
        self.assertIn("BinaryOp(op='+',", stdout)
        self.assertNotIn("3", stdout)

    def test_interactive_after_file(self):
        code, stdout, __ = self.run_main(self.write("let x = 41;"), "-i", stdin="print(x + 1);\n")

        self.assertEqual(0, code)
        self.assertIn("42", stdout)

    def test_dump_flags_require_file(self):
        for flag in ("--tokens", "--ast"):
            for args in ([flag], [flag, "-i"]):
                code, stdout, stderr = self.run_main(*args)
                self.assertEqual(2, code, args)
                self.assertIn("require a file", stderr, args)
                self.assertEqual("", stdout, args)

    def test_dump_flags_are_exclusive(self):
        code, __, stderr = self.run_main(self.write("print(1);"), "--tokens", "--ast")
        self.assertEqual(2, code)
        self.assertIn("not allowed", stderr)


if __name__ == '__main__':
    unittest.main()
