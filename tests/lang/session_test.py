import os
import tempfile
import unittest

from basic_compiler.lang.error import ErrorHandler, GenericException, ParseError, SemanticError
from basic_compiler.lang.session import Session


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "prog.bas")
        self.handler = ErrorHandler(fatal=False)

    def tearDown(self):
        self.tmp.cleanup()

    def write_source(self, source):
        with open(self.path, "w", encoding="utf-8") as file:
            file.write(source)

    def test_default_output(self):
        cases = {
            "prog.bas": "prog.c",
            "dir/prog.bas": os.path.join("dir", "prog.c"),
            "noext": "noext.c",
        }
        for case, expected in cases.items():
            self.assertEqual(os.path.normpath(expected), os.path.normpath(Session.default_output(case)))

    def test_run(self):
        self.write_source("LET a = 1\nPRINT a\n")
        sess = Session(self.handler, self.path)
        result = sess.run()

        with open(os.path.join(self.tmp.name, "prog.c"), encoding="utf-8") as file:
            self.assertEqual(result, file.read())
        self.assertIn("    float a = 1;\n", result)
        self.assertIn(self.path, self.handler.traceback)

    def test_output(self):
        self.write_source("PRINT \"hi\"\n")
        output = os.path.join(self.tmp.name, "out.c")
        Session(self.handler, self.path, output).run()

        self.assertTrue(os.path.exists(output))
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, "prog.c")))

    def test_compile_error(self):
        self.write_source("LET a = 1\nPRINT b\n")
        sess = Session(self.handler, self.path)

        with self.assertRaises(SemanticError) as context:
            sess.run()

        self.assertEqual("PRINT b", context.exception.expr)
        self.assertEqual(("PRINT b", 2), self.handler.traceback[self.path])
        self.assertFalse(os.path.exists(sess.output))

    def test_compile_error_at_end(self):
        self.write_source("IF 1 THEN\n")
        with self.assertRaises(ParseError) as context:
            Session(self.handler, self.path).run()

        # the error points past the last newline, at an empty line
        self.assertEqual("", context.exception.expr)
        self.assertEqual(("", 2), self.handler.traceback[self.path])

    def test_missing_file(self):
        sess = Session(self.handler, os.path.join(self.tmp.name, "missing.bas"))

        with self.assertRaises(GenericException) as context:
            sess.run()

        self.assertIn("could not be opened", str(context.exception))
        self.assertIsInstance(context.exception.__cause__, OSError)
        self.assertFalse(context.exception.diagnosis)

    def test_unwritable_output(self):
        self.write_source("PRINT 1\n")
        sess = Session(self.handler, self.path, os.path.join(self.tmp.name, "no", "such", "dir", "out.c"))

        with self.assertRaises(GenericException) as context:
            sess.run()
        self.assertIn("could not be written", str(context.exception))


if __name__ == '__main__':
    unittest.main()
