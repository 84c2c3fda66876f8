import io
import re
import unittest

from vsl.lang.error import ErrorHandler, GenericException, LexException, ParseException, RuntimeException
from vsl.lang.lexical import Position


def strip_ansi(text):
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class GenericExceptionTestCase(unittest.TestCase):

    def test_plain_message(self):
        cases = {
            ("undefined variable '{}'", "y"): "undefined variable 'y'",
            ("expected {} but found {}", ("';'", "end of input")): "expected ';' but found end of input",
            ("division by zero", None): "division by zero",
            ("integer {} out of range", 5): "integer 5 out of range",
        }
        for (msg, exprs), expected in cases.items():
            error = GenericException(msg, exprs)
            self.assertEqual(expected, error.plain, msg)
            self.assertEqual(expected, str(error), msg)

    def test_user_text_is_not_a_template(self):
        error = RuntimeException("undefined variable '{}'", "{0}")
        self.assertEqual("undefined variable '{0}'", error.plain)

    def test_kinds(self):
        cases = {
            LexException("unexpected character {}", "'@'"): "lex error",
            ParseException("';'", "end of input"): "parse error",
            RuntimeException("division by zero"): "runtime error",
            GenericException("keyboard interrupt"): "error",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, case.kind, case)
            self.assertIsInstance(case, GenericException)

    def test_parse_exception_fields(self):
        error = ParseException("';'", "identifier 'x'", Position(3, 1, 4))
        self.assertEqual("';'", error.expected)
        self.assertEqual("identifier 'x'", error.found)
        self.assertEqual(Position(3, 1, 4), error.position)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()

    def test_throw_fatal_exits(self):
        handler = ErrorHandler(stream=self.stream)
        with self.assertRaises(SystemExit) as context:
            handler.throw(RuntimeException("division by zero"))

        self.assertEqual(1, context.exception.code)
        self.assertIn("division by zero", self.stream.getvalue())

    def test_throw_non_fatal_continues(self):
        handler = ErrorHandler(fatal=False, stream=self.stream)
        handler.throw(RuntimeException("division by zero"))
        self.assertIn("runtime error", self.stream.getvalue())

    def test_report_location_and_diagnosis(self):
        handler = ErrorHandler(fatal=False, stream=self.stream)
        handler.register_file("prog.vsl", "let x = 1;\nprint(y);\n")
        handler.throw(RuntimeException("undefined variable '{}'", "y", Position(17, 2, 7), 1))

        lines = strip_ansi(self.stream.getvalue()).splitlines()
        self.assertEqual("prog.vsl:2:7: runtime error: undefined variable 'y'", lines[0])
        self.assertEqual("  print(y);", lines[1])
        self.assertEqual("        ^", lines[2])

    def test_diagnose(self):
        error = ParseException("';'", "identifier 'x'", Position(8, 1, 9), 3)
        diagnosis = ErrorHandler.diagnose(error, "print(1)abc")
        line, caret = diagnosis.split("\n")

        self.assertTrue(line.startswith("  print(1)"))
        self.assertIn("abc", line)
        self.assertIn("^~~", caret)
        self.assertTrue(caret.startswith("  " + " " * 8))

    def test_diagnose_outside_source(self):
        error = RuntimeException("division by zero", position=Position(50, 9, 1))
        self.assertIsNone(ErrorHandler.diagnose(error, "one line"))

    def test_diagnose_end_of_input(self):
        error = ParseException("';'", "end of input", Position(9, 1, 10))
        diagnosis = ErrorHandler.diagnose(error, "let x = 1")
        self.assertIn("^", diagnosis)

    def test_warn_never_exits(self):
        handler = ErrorHandler(stream=self.stream)
        handler.register_file("prog.vsl", 'print("abc')
        handler.warn(LexException("unterminated string literal", position=Position(6, 1, 7), length=4))
        handler.warn("plain {}", "warning")

        output = self.stream.getvalue()
        self.assertIn("warning", output)
        self.assertIn("unterminated string literal", output)
        self.assertIn("plain", output)

    def test_most_recent_file_is_current(self):
        handler = ErrorHandler()
        self.assertEqual((None, None), handler.current())

        handler.register_file("a.vsl", "a")
        handler.register_file("b.vsl", "b")
        self.assertEqual(("b.vsl", "b"), handler.current())

        handler.register_file("a.vsl", "a2")
        self.assertEqual(("a.vsl", "a2"), handler.current())

        handler.remove_file("a.vsl")
        self.assertEqual(("b.vsl", "b"), handler.current())

    def test_context_manager_suppresses_language_errors(self):
        with ErrorHandler(fatal=False, stream=self.stream):
            raise ParseException("';'", "end of input")
        self.assertIn("expected", self.stream.getvalue())

    def test_context_manager_exits_on_language_errors(self):
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=self.stream):
                raise LexException("unexpected character {}", "'@'")
        self.assertEqual(1, context.exception.code)

    def test_context_manager_special_errors(self):
        cases = {
            KeyboardInterrupt: "keyboard interrupt",
            RecursionError: "maximum nesting depth exceeded",
        }
        for exc_type, expected in cases.items():
            stream = io.StringIO()
            with ErrorHandler(fatal=False, stream=stream):
                raise exc_type()
            self.assertIn(expected, stream.getvalue(), exc_type)

    def test_context_manager_internal_errors(self):
        with self.assertRaises(SystemExit):
            with ErrorHandler(stream=self.stream):
                raise ValueError("{boom}")

        output = self.stream.getvalue()
        self.assertIn("[internal]", output)
        self.assertIn("ValueError", output)

        stream = io.StringIO()
        with ErrorHandler(fatal=False, stream=stream):
            raise ValueError("boom")
        self.assertEqual(1, stream.getvalue().count("[internal]"))

    def test_context_manager_passes_system_exit(self):
        with self.assertRaises(SystemExit) as context:
            with ErrorHandler(stream=self.stream):
                raise SystemExit(3)
        self.assertEqual(3, context.exception.code)
        self.assertEqual("", self.stream.getvalue())


if __name__ == '__main__':
    unittest.main()
