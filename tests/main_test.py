import io
import logging
import os
import tempfile
import unittest
from contextlib import redirect_stderr

from basic_compiler.main import configure_logging, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "prog.bas")

    def tearDown(self):
        configure_logging(False)
        self.tmp.cleanup()

    def write_source(self, source):
        with open(self.path, "w", encoding="utf-8") as file:
            file.write(source)

    def test_main(self):
        self.write_source("LET a = 1\nPRINT a\n")
        main([self.path])

        with open(os.path.join(self.tmp.name, "prog.c"), encoding="utf-8") as file:
            self.assertIn("float a = 1;", file.read())

    def test_output_flag(self):
        self.write_source("PRINT 1\n")
        output = os.path.join(self.tmp.name, "other.c")
        main([self.path, "-o", output])

        self.assertTrue(os.path.exists(output))

    def test_compile_error(self):
        self.write_source("PRINT 1\nGOTO nowhere\n")

        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            main([self.path])

        self.assertEqual(1, context.exception.code)
        self.assertIn("line 2", stderr.getvalue())
        self.assertIn("nowhere", stderr.getvalue())
        self.assertFalse(os.path.exists(os.path.join(self.tmp.name, "prog.c")))

    def test_missing_file(self):
        stderr = io.StringIO()
        with redirect_stderr(stderr), self.assertRaises(SystemExit) as context:
            main([os.path.join(self.tmp.name, "missing.bas")])

        self.assertEqual(1, context.exception.code)
        self.assertIn("could not be opened", stderr.getvalue())

    def test_bad_arguments(self):
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as context:
            main([])
        self.assertEqual(2, context.exception.code)

    def test_configure_logging(self):
        logger = logging.getLogger("basic_compiler")

        configure_logging(True)
        self.assertEqual(logging.DEBUG, logger.level)
        self.assertFalse(logger.propagate)

        configure_logging(False)
        self.assertEqual(logging.WARNING, logger.level)
        self.assertEqual(1, len(logger.handlers))

    def test_debug(self):
        self.write_source("LET a = 1\nPRINT a\n")

        with self.assertLogs("basic_compiler", level="DEBUG") as logs:
            main([self.path, "--debug"])

        output = "\n".join(logs.output)
        self.assertIn("scanned", output)
        self.assertIn("grammar tree", output)
        self.assertIn("Let(name='a'", output)


if __name__ == '__main__':
    unittest.main()
