import io
import unittest

from hydra.lang.error import ErrorHandler, EvalError, GenericException, ParseError, TokenizeError


class GenericExceptionTestCase(unittest.TestCase):

    def test_message(self):
        error = GenericException("use of undeclared variable '{}', declare it using 'var {} = ...'", ("x", "x"))
        self.assertEqual("use of undeclared variable 'x', declare it using 'var x = ...'", error.raw_msg)
        self.assertEqual(error.raw_msg, str(error))
        self.assertEqual("x", error.expr)
        self.assertEqual((0, 1), (error.start, error.end))
        self.assertIsNone(error.line_number)

    def test_subclasses(self):
        for cls in [TokenizeError, ParseError, EvalError]:
            self.assertTrue(issubclass(cls, GenericException), cls)
            self.assertEqual(3, cls("unknown function: '{}'", "foo", line_number=3).line_number)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(fatal=False, stream=self.stream)
        self.error_handler.register_file("a.hy")

    def test_diagnose(self):
        error = GenericException("missing bracket for '{1}'", ("line(", "("), start=4, end=5)
        lines = ErrorHandler.diagnose(error).split("\n")
        self.assertEqual(2, len(lines))
        self.assertIn("line", lines[0])
        self.assertTrue(lines[1].startswith("      "))
        self.assertIn("^", lines[1])

    def test_throw(self):
        self.error_handler.register_line("a.hy", "var x = y", 4)
        self.error_handler.throw(EvalError("use of undeclared variable '{}'", "y"))

        output = self.stream.getvalue()
        self.assertIn("File 'a.hy', line 4:", output)
        self.assertIn("var x = y", output)
        self.assertIn("error: ", output)
        self.assertEqual({"a.hy": (None, None)}, self.error_handler.traceback)

    def test_fatal(self):
        self.error_handler.fatal = True
        with self.assertRaises(SystemExit):
            self.error_handler.throw(ParseError("unknown function: '{}'", "foo"))

    def test_warn(self):
        self.error_handler.register_line("a.hy", "line(", 2)
        self.error_handler.warn("missing bracket", diagnosis=False)
        self.assertIn("a.hy:2: ", self.stream.getvalue())
        self.assertIn("warning: ", self.stream.getvalue())

    def test_context_manager(self):
        with self.error_handler:
            raise EvalError("redefinition of '{}'", "x")
        self.assertIn("redefinition of", self.stream.getvalue())

        with self.error_handler:
            raise RecursionError()
        self.assertIn("maximum recursion depth exceeded", self.stream.getvalue())

        with self.assertRaises(ValueError):
            with self.error_handler:
                raise ValueError("oops")
        self.assertIn("[internal] ", self.stream.getvalue())


if __name__ == '__main__':
    unittest.main()
