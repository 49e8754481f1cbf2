"""Command-line entry point: compiles a .bas file into a .c file. Uses the error handling context manager so that
compiler errors are reported as diagnostics instead of Python tracebacks. Installed as the basicc script.
"""

import argparse
import logging
import sys

from basic_compiler.lang.error import ErrorHandler
from basic_compiler.lang.session import Session


def configure_logging(debug):
    """Configures the basic_compiler logger: DEBUG traces the scanner, parser and emitter, otherwise only warnings."""
    logger = logging.getLogger("basic_compiler")
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(handler)
        logger.propagate = False  # avoid duplicate messages through the root logger


def main(argv=None):
    """Runs the compiler. Called from the basicc script."""
    assert sys.version_info >= (3, 7), "basicc cannot be run with python < 3.7"

    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="basicc", description="Compile a BASIC program into C.")
        parser.add_argument("file", help="BASIC source file to compile")
        parser.add_argument("-o", "--output", help="path of the generated C file (default: FILE with a .c suffix)")
        parser.add_argument("--debug", action="store_true", help="trace scanning, parsing and code generation")
        args = parser.parse_args(argv)

        configure_logging(args.debug)

        sess = Session(error_handler, args.file, args.output)
        sess.run()


if __name__ == "__main__":
    main()
