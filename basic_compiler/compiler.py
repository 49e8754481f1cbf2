"""BASIC to C compiler.

Basic program flow:
    1. Scanner: turns the source text into a flat list of tokens (see basic_compiler/lang/lexical.py)
    2. Parser: builds a grammar tree by recursive descent over the tokens, resolving variables and labels as it goes
        - Grammar rules are documented in basic_compiler/lang/parser.py
        - Will fail on the first invalid statement, undeclared variable or unknown label
    3. Emitter: walks the grammar tree and writes the equivalent C program (see basic_compiler/lang/emitter.py)

compile_source is a pure function of its input: it never touches the filesystem. See basic_compiler/lang/session.py
for compiling files.
"""

import logging

from basic_compiler.lang.emitter import Emitter
from basic_compiler.lang.lexical import Scanner
from basic_compiler.lang.parser import Parser

logger = logging.getLogger(__name__)


def compile_source(source):
    """Compiles BASIC source text into C source text. Raises the first GenericException encountered."""
    tokens = Scanner(source).scan()

    parser = Parser(tokens)
    tree = parser.parse()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("grammar tree:\n%s", tree.display())

    return Emitter(tree, parser.variables).emit()
