import io
import re
import unittest
from contextlib import redirect_stderr

from basic_compiler.lang.error import ErrorHandler, GenericException, LexicalError, ParseError, SemanticError

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(text):
    return ANSI.sub("", text)


class GenericExceptionTestCase(unittest.TestCase):

    def test_msg(self):
        cases = {
            GenericException("keyboard interrupt"): "keyboard interrupt",
            GenericException("label {} already exists", "a"): "label a already exists",
            GenericException("{} should be followed by {}", ("IF", "THEN")): "IF should be followed by THEN",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, str(case))
            self.assertEqual(expected, plain(case.msg))

    def test_kinds(self):
        cases = {
            LexicalError: "lexical error",
            ParseError: "syntax error",
            SemanticError: "semantic error",
            GenericException: "error",
        }
        for case, expected in cases.items():
            self.assertEqual(expected, case.kind)
            self.assertTrue(issubclass(case, GenericException))

    def test_locate(self):
        source = "LET a = 1\nPRINT b\n"

        error = SemanticError("variable {} referenced before assignment", "b", line_num=2, start=6, end=7)
        error.locate(source)
        self.assertEqual("PRINT b", error.expr)
        self.assertEqual((6, 7), (error.start, error.end))

        error = ParseError("expected newline", line_num=1, start=4)
        error.locate(source)
        self.assertEqual("LET a = 1", error.expr)
        self.assertEqual(9, error.end)

        should_stay_unlocated = [GenericException("no line"), GenericException("past the end", line_num=10)]
        for case in should_stay_unlocated:
            case.locate(source)
            self.assertEqual("", case.expr)


class ErrorHandlerTestCase(unittest.TestCase):

    def throw(self, handler, error):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            handler.throw(error)
        return plain(stderr.getvalue())

    def test_diagnose(self):
        error = SemanticError("variable {} referenced before assignment", "b", line_num=2, start=6, end=7)
        error.expr = "PRINT b"
        self.assertEqual("  PRINT b\n        ^", plain(ErrorHandler.diagnose(error)))

        error = ParseError("got {}", "'REPEAT'", line_num=1, start=9, end=15)
        error.expr = "IF a > 0 REPEAT"
        self.assertEqual("  IF a > 0 REPEAT\n" + " " * 11 + "^~~~~~", plain(ErrorHandler.diagnose(error)))

    def test_throw(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("prog.bas")
        handler.register_line("prog.bas", "PRINT b", 2)

        error = SemanticError("variable {} referenced before assignment", "b", line_num=2, start=6, end=7)
        error.expr = "PRINT b"
        output = self.throw(handler, error)

        self.assertEqual(
            "  File 'prog.bas', line 2:\n"
            "    PRINT b\n"
            "semantic error: variable b referenced before assignment\n"
            "  PRINT b\n"
            "        ^\n",
            output
        )
        self.assertEqual({}, handler.traceback)

    def test_throw_without_location(self):
        handler = ErrorHandler(fatal=False)
        handler.register_file("prog.bas")

        output = self.throw(handler, GenericException("'{}' could not be opened", "prog.bas", diagnosis=False))
        self.assertEqual("error: 'prog.bas' could not be opened\n", output)

        output = self.throw(handler, GenericException("boom", internal=True))
        self.assertEqual("[internal] error: boom\n", output)

    def test_fatal(self):
        with self.assertRaises(SystemExit) as context:
            self.throw(ErrorHandler(), ParseError("expected a statement"))
        self.assertEqual(1, context.exception.code)

    def test_context_manager(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr):
            with ErrorHandler(fatal=False):
                raise LexicalError("unrecognized character {}", "'@'")
        self.assertEqual("lexical error: unrecognized character '@'\n", plain(stderr.getvalue()))

        stderr = io.StringIO()
        with redirect_stderr(stderr):
            with ErrorHandler(fatal=False):
                raise RecursionError("maximum recursion depth exceeded")
        self.assertEqual("error: program is too deeply nested to compile, maximum recursion depth exceeded\n",
                         plain(stderr.getvalue()))

        with redirect_stderr(io.StringIO()):
            with self.assertRaises(ValueError):
                with ErrorHandler(fatal=False):
                    raise ValueError("not a compiler error")

        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False):
                raise SystemExit(2)


if __name__ == '__main__':
    unittest.main()
