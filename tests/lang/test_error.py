import io
import re
import unittest
from contextlib import redirect_stdout

from lcbind.lang.error import (
    DivergenceError, ErrorHandler, GenericException, InternalBindingError, LambdaSyntaxError, ShapeError,
    UnboundVariableError
)


def plain(text):
    """Strips termcolor's ANSI escapes."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class GenericExceptionTestCase(unittest.TestCase):

    def test_init(self):
        error = GenericException("'{}' has mismatched parentheses", "(x", start=0, end=1)
        self.assertEqual("'(x' has mismatched parentheses", str(error))
        self.assertEqual("(x", error.expr)
        self.assertEqual((0, 1), (error.start, error.end))
        self.assertFalse(error.internal)

        error = GenericException("'{}' uses '{}'", ("a b", "b"))
        self.assertEqual("'a b' uses 'b'", str(error))
        self.assertEqual("a b", error.expr)
        self.assertEqual(3, error.end)

        error = GenericException("keyboard interrupt")
        self.assertEqual("keyboard interrupt", str(error))
        self.assertEqual("", error.expr)

        self.assertEqual("'3' is not a valid input name", str(GenericException("'{}' is not a valid input name", 3)))

    def test_kinds(self):
        cases = {
            LambdaSyntaxError: "syntax",
            UnboundVariableError: "unbound-variable",
            DivergenceError: "divergence",
            ShapeError: "shape",
            InternalBindingError: "internal-binding",
        }
        for cls, kind in cases.items():
            error = cls("message")
            self.assertIsInstance(error, GenericException)
            self.assertEqual(kind, error.kind)

    def test_context(self):
        self.assertEqual("b", UnboundVariableError("'{}'", "b", identifier="b").identifier)
        self.assertEqual(12, DivergenceError("diverges", steps=12).steps)
        self.assertEqual("λx.x", ShapeError("shape", term="λx.x").term)

        error = InternalBindingError("'{}'", "y₁", identifier="y₁")
        self.assertTrue(error.internal)
        self.assertEqual("y₁", error.identifier)


class ErrorHandlerTestCase(unittest.TestCase):

    def test_diagnose(self):
        cases = {
            ("x)", 1, 2): "  x)\n   ^",
            ("(a b", 0, 1): "  (a b\n  ^",
            ("a xyz b", 2, 5): "  a xyz b\n    ^~~",
            ("a\n(b", 2, 3): "  (b\n  ^",
            ("ab", 2, 3): "  ab\n    ^",
        }
        for (expr, start, end), expected in cases.items():
            error = LambdaSyntaxError("'{}'", expr, start=start, end=end)
            self.assertEqual(expected, plain(ErrorHandler.diagnose(error)), expr)

    def test_throw_not_fatal(self):
        output = io.StringIO()
        with redirect_stdout(output):
            with ErrorHandler(fatal=False):
                raise LambdaSyntaxError("'{}' has mismatched parentheses", "x)", start=1, end=2)

        text = plain(output.getvalue())
        self.assertIn("syntax error: 'x)' has mismatched parentheses", text)
        self.assertIn("   ^", text)

    def test_throw_fatal(self):
        output = io.StringIO()
        with redirect_stdout(output), self.assertRaises(SystemExit) as context:
            with ErrorHandler():
                raise ShapeError("expression reduced to '{}'", "λx.x", diagnosis=False)

        self.assertEqual(1, context.exception.code)
        self.assertIn("shape error: expression reduced to 'λx.x'", plain(output.getvalue()))

    def test_internal(self):
        output = io.StringIO()
        with redirect_stdout(output):
            with ErrorHandler(fatal=False):
                raise InternalBindingError("'{}' has no bound value", "y₁")
        self.assertIn("[internal] internal-binding error: 'y₁' has no bound value", plain(output.getvalue()))

    def test_unknown_error(self):
        output = io.StringIO()
        with redirect_stdout(output), self.assertRaises(ZeroDivisionError):
            with ErrorHandler(fatal=False):
                raise ZeroDivisionError("division by zero")
        self.assertIn("[internal] error: unknown error: 'ZeroDivisionError: division by zero'", plain(output.getvalue()))

    def test_recursion_error(self):
        output = io.StringIO()
        with redirect_stdout(output):
            with ErrorHandler(fatal=False):
                raise RecursionError()
        self.assertIn("maximum recursion depth exceeded", plain(output.getvalue()))

    def test_file_prefix(self):
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_file("swap.lc")

        output = io.StringIO()
        with redirect_stdout(output):
            error_handler.throw(LambdaSyntaxError("'{}' has mismatched parentheses", "a\n(b", start=2, end=3))
        self.assertIn("swap.lc:2:1: syntax error: ", plain(output.getvalue()))
        self.assertEqual({}, error_handler.traceback)

    def test_traceback(self):
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_line("<in>", "(a", 3)

        output = io.StringIO()
        with redirect_stdout(output):
            error_handler.throw(LambdaSyntaxError("'{}' has mismatched parentheses", "(a", start=0, end=1))
        self.assertIn("  File '<in>', line 3:\n    (a\n", plain(output.getvalue()))

        error_handler.register_line("<in>", "a", 4)
        error_handler.remove_line("<in>")
        self.assertEqual({"<in>": (None, None)}, error_handler.traceback)

    def test_warn(self):
        output = io.StringIO()
        with redirect_stdout(output):
            ErrorHandler().warn("input '{}' is never used in '{}'", ("b", "a"), diagnosis=False)
        self.assertEqual("warning: input 'b' is never used in 'a'\n", plain(output.getvalue()))

    def test_register_step(self):
        output = io.StringIO()
        with redirect_stdout(output):
            ErrorHandler().register_step("β", "a b")
            ErrorHandler(verbose=True).register_step("β", "b a")
        self.assertEqual("β: b a\n", plain(output.getvalue()))


if __name__ == '__main__':
    unittest.main()
