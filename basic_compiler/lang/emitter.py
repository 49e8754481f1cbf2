"""C code generation from a grammar tree. A straight structural translation: every statement becomes one C statement
(or block), and expressions are written back out in source order without added parentheses, since the tree already
encodes BASIC precedence and C's precedence agrees with it.

Every variable is a C float, declared exactly once at the first place its name appears in the generated code.
"""

import logging

from basic_compiler.lang.tree import (Float, Goto, If, Input, Integer, Label, Let, Print, PrintString, Sequence,
                                      Variable, While)

logger = logging.getLogger(__name__)


class Emitter:
    """Walks a grammar tree and produces C source text."""
    TYPE = "float"
    INDENT = "    "

    def __init__(self, tree, variables):
        """tree is the program Sequence returned by Parser.parse and variables is the parser's declared-variable set
        at the end of parsing.
        """
        self.tree = tree
        self.variables = variables

        self.pending = set()  # variables that still need their declaration
        self.header = []
        self.code = []
        self.depth = 0

    def emit(self):
        """Returns the C translation of self.tree."""
        self.pending = set(self.variables)
        self.header, self.code, self.depth = [], [], 1

        self.emit_header("#include <stdio.h>")
        self.emit_header("int main(void){")

        self.statements(self.tree)

        self.emit_line("return 0;")
        self.depth = 0
        self.emit_line("}")

        if self.pending:
            logger.debug("declared but never emitted: %s", sorted(self.pending))
        return "\n".join(self.header + self.code) + "\n"

    def emit_line(self, code):
        self.code.append(Emitter.INDENT * self.depth + code)

    def emit_header(self, header):
        self.header.append(header)

    def variable(self, name):
        """Renders name, prefixed with its declaration the first time it is rendered."""
        if name in self.pending:
            self.pending.remove(name)
            return f"{Emitter.TYPE} {name}"
        return name

    # ------------------------------------------------------------------------------------------------------------------
    # Statements

    def statements(self, sequence):
        """Emits every statement of sequence, iterating over the chain rather than recursing through it."""
        handlers = {
            Print: self.statement_print,
            PrintString: self.statement_print_string,
            Let: self.statement_let,
            Input: self.statement_input,
            If: self.statement_if,
            While: self.statement_while,
            Label: self.statement_label,
            Goto: self.statement_goto,
            Sequence: self.statements,
        }

        for statement in sequence:
            handlers[type(statement)](statement)

    def statement_print(self, statement):
        self.emit_line(f"printf(\"%.2f\\n\", (float)({self.expression(statement.expression)}));")

    def statement_print_string(self, statement):
        self.emit_line(f"printf(\"%s\\n\", \"{statement.text}\");")

    def statement_let(self, statement):
        target = self.variable(statement.name)  # rendered before the expression: it comes first textually
        self.emit_line(f"{target} = {self.expression(statement.expression)};")

    def statement_input(self, statement):
        """Reads a float; on a non-numeric input, the variable is set to 0 and the offending word is discarded."""
        declaration = self.variable(statement.name)
        if declaration != statement.name:
            self.emit_line(f"{declaration};")

        self.emit_line(f"if(0 == scanf(\"%f\", &{statement.name})) {{")
        self.depth += 1
        self.emit_line(f"{statement.name} = 0;")
        self.emit_line("scanf(\"%*s\");")
        self.depth -= 1
        self.emit_line("}")

    def statement_if(self, statement):
        self.block("if", statement)

    def statement_while(self, statement):
        self.block("while", statement)

    def block(self, keyword, statement):
        self.emit_line(f"{keyword}({self.comparison(statement.comparison)}){{")
        self.depth += 1
        self.statements(statement.body)
        self.depth -= 1
        self.emit_line("}")

    def statement_label(self, statement):
        self.emit_line(f"{statement.name}:;")

    def statement_goto(self, statement):
        self.emit_line(f"goto {statement.name};")

    # ------------------------------------------------------------------------------------------------------------------
    # Expressions

    def comparison(self, comparison):
        parts = [self.expression(comparison.left)]
        while comparison.operator is not None:
            parts.append(comparison.operator.value)
            comparison = comparison.right
            parts.append(self.expression(comparison.left))
        return " ".join(parts)

    def expression(self, expression):
        parts = [self.term(expression.term)]
        while expression.operator is not None:
            parts.append(expression.operator.value)
            expression = expression.rest
            parts.append(self.term(expression.term))
        return " ".join(parts)

    def term(self, term):
        parts = [self.unary(term.unary)]
        while term.operator is not None:
            parts.append(term.operator.value)
            term = term.rest
            parts.append(self.unary(term.unary))
        return " ".join(parts)

    def unary(self, unary):
        sign = unary.operator.value if unary.operator is not None else ""
        return sign + self.primary(unary.primary)

    def primary(self, primary):
        if isinstance(primary, Integer):
            return str(primary.value)
        elif isinstance(primary, Float):
            return repr(primary.value)
        elif isinstance(primary, Variable):
            return self.variable(primary.name)
        raise TypeError(f"not a primary: {primary!r}")
