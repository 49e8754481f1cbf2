"""Error handling for the BASIC compiler. Only GenericExceptions should be encountered during compilation: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Error taxonomy:
    - LexicalError: unrecognized character, malformed numeric literal, unterminated string
    - ParseError: expected-token mismatch (IF not followed by THEN, missing newline, ...)
    - SemanticError: undeclared variable read, duplicate label, GOTO to an undeclared label

Every error is fatal to the current compilation: there is no recovery and no batching.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a compiler error. exprs are formatted (and bolded)
    into msg; line_num/start/end locate the fault in the source so ErrorHandler can point at it.
    """
    kind = "error"

    def __init__(self, msg, exprs=None, line_num=None, start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(str(expr), attrs=["bold"]) for expr in exprs))  # color expr snippets

        self.expr = ""  # offending source line, see locate
        self.line_num = line_num
        self.start = start
        self.end = end

        self.diagnosis = diagnosis
        self.internal = internal

    def locate(self, source):
        """Attaches the offending line of source to this error. No-op if the error has no line number."""
        lines = source.split("\n")
        if self.line_num is None or not 0 < self.line_num <= len(lines):
            return

        self.expr = lines[self.line_num - 1].rstrip("\r")
        if self.end == -1 or self.end > len(self.expr):
            self.end = len(self.expr)


class LexicalError(GenericException):
    """Raised by the scanner."""
    kind = "lexical error"


class ParseError(GenericException):
    """Raised by the parser when the token sequence does not match the grammar."""
    kind = "syntax error"


class SemanticError(GenericException):
    """Raised by the parser when a grammatically valid program refers to undeclared variables or labels."""
    kind = "semantic error"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom compiler errors."""
    ERROR = "red"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Called by Session once the faulty line is known."""
        self.traceback[path] = (line, line_num)

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded."""
        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], ErrorHandler.ERROR, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), ErrorHandler.ERROR, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():
            if line is not None:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg, file=sys.stderr)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error), file=sys.stderr)

        if self.fatal:
            sys.exit(1)
        self.traceback = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("program is too deeply nested to compile, maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
