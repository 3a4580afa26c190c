import io
import os
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch

from minifunc.lang.error import ErrorHandler, EvalError, GenericException, ParseError
from minifunc.pure.expression import Int
from minifunc.pure.parser import parse


class GenericExceptionTestCase(unittest.TestCase):

    def test_message(self):
        error = GenericException("'{}' could not be opened", "prog.mf")
        self.assertIn("could not be opened", str(error))
        self.assertIn("prog.mf", str(error))
        self.assertEqual("prog.mf", error.expr)
        self.assertEqual((0, 7), (error.start, error.end))

    def test_parse_error_within(self):
        error = ParseError("Blank program", "", 0)
        self.assertIs(error, error.within("if"))
        self.assertEqual("Failed to parse 'if': Blank program", str(error))

    def test_eval_error(self):
        context = parse("+(T, 1)")
        error = EvalError("integer", "Integer operation '+(e,e)' given non-integer", context)
        self.assertEqual("integer", error.kind)
        self.assertIs(context, error.context)
        self.assertEqual("T + 1", error.expr)
        self.assertRaises(ValueError, EvalError, "type", "bad kind", Int(1))


class ErrorHandlerTestCase(unittest.TestCase):

    def test_fatal(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(SystemExit) as context:
                with ErrorHandler():
                    parse("+(1; 2)")
        self.assertEqual(1, context.exception.code)
        self.assertIn("but found", out.getvalue())

    def test_not_fatal(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("<in>")
        handler.register_line("<in>", "apply(1, 2)", 3)

        with redirect_stdout(io.StringIO()) as out:
            with handler:
                parse("apply(1, 2)").evaluate()

        output = out.getvalue()
        self.assertIn("Traceback:", output)
        self.assertIn("File '<in>', line 3:", output)
        self.assertIn("given non-'func'", output)
        self.assertEqual({"<in>": (None, None)}, handler.traceback)

    def test_recursion_error(self):
        with redirect_stdout(io.StringIO()) as out:
            with ErrorHandler(fatal=False):
                raise RecursionError()
        self.assertIn("maximum recursion depth exceeded", out.getvalue())

    def test_internal_error_propagates(self):
        with redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(ValueError):
                with ErrorHandler(fatal=False):
                    raise ValueError("boom")
        self.assertIn("[internal]", out.getvalue())
        self.assertIn("unknown error", out.getvalue())
        self.assertIn("ValueError: boom", out.getvalue())

    def test_diagnose(self):
        try:
            parse("+(1; 2)")
        except ParseError as error:
            diagnosis = ErrorHandler.diagnose(error)
        lines = diagnosis.split("\n")
        self.assertEqual(2, len(lines))
        self.assertIn("^", lines[1])
        self.assertTrue(lines[1].startswith(" " * 5))
        self.assertIn("+(1", lines[0])

    def test_register_step(self):
        with redirect_stdout(io.StringIO()) as out:
            ErrorHandler(verbose=False).register_step("β", Int(1))
        self.assertEqual("", out.getvalue())

        with redirect_stdout(io.StringIO()) as out:
            ErrorHandler(verbose=True).register_step("β", Int(1))
        self.assertIn("β", out.getvalue())
        self.assertTrue(out.getvalue().rstrip().endswith("1"))

    def test_messages_stay_plain(self):
        with patch.dict(os.environ, {"FORCE_COLOR": "1"}):
            with self.assertRaises(ParseError) as context:
                parse("+(1; 2)")
            error = context.exception

            self.assertEqual("Expected ',' but found ';'", str(error))
            self.assertNotIn("\x1b", error.msg)
            self.assertIn("';'", error.highlighted())


if __name__ == '__main__':
    unittest.main()
