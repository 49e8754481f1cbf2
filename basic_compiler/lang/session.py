"""Session control for the compiler: file-level wrapper around compile_source. Reads a BASIC file, compiles it,
registers the offending line with the error handler if compilation fails, and writes the generated C file.
"""

import logging
import os

from basic_compiler.compiler import compile_source
from basic_compiler.lang.error import GenericException

logger = logging.getLogger(__name__)


class Session:
    """Governs the compilation of one source file."""
    SUFFIX = ".c"

    def __init__(self, error_handler, path, output=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                                        # used for error messages
        self.output = output or Session.default_output(path)   # where the generated C goes
        self.source = None
        self.result = None

    @staticmethod
    def default_output(path):
        """prog.bas -> prog.c"""
        return os.path.splitext(path)[0] + Session.SUFFIX

    def read(self):
        try:
            with open(self.path, "r", encoding="utf-8") as file:
                self.source = file.read()
        except (OSError, UnicodeDecodeError) as error:
            raise GenericException("'{}' could not be opened: {}", (self.path, error), diagnosis=False) from error
        return self.source

    def compile(self):
        """Compiles self.source. On failure, the offending line is registered in the error handler's traceback before
        the error is re-raised.
        """
        try:
            self.result = compile_source(self.source)
        except GenericException as error:
            error.locate(self.source)
            if error.expr or error.line_num is not None:
                self.error_handler.register_line(self.path, error.expr, error.line_num)
            raise

        return self.result

    def write(self):
        try:
            with open(self.output, "w", encoding="utf-8") as file:
                file.write(self.result)
        except OSError as error:
            raise GenericException("'{}' could not be written: {}", (self.output, error), diagnosis=False) from error

        logger.info("wrote %s", self.output)

    def run(self):
        """Reads, compiles and writes. Nothing is written if compilation fails. Returns the generated C."""
        self.read()
        self.compile()
        self.write()
        return self.result
