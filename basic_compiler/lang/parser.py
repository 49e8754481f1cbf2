"""Recursive-descent parser for the BASIC language. Each grammar rule is one method, and semantic checks (variable and
label resolution) happen inline while the tree is built.

```
program    ::= {statement}
statement  ::= PRINT (expression | string) nl
             | IF comparison THEN nl {statement} ENDIF nl
             | WHILE comparison REPEAT nl {statement} ENDWHILE nl
             | LABEL ident nl
             | GOTO ident nl
             | LET ident "=" expression nl
             | INPUT ident nl
comparison ::= expression (("==" | "!=" | ">" | ">=" | "<" | "<=") expression)*
expression ::= term {("+" | "-") term}
term       ::= unary {("*" | "/") unary}
unary      ::= ["+" | "-"] primary
primary    ::= INTEGER | FLOAT | ident
```

Chains of operators are nested to the right: `a - b - c` is Expression(a, -, Expression(b, -, c)). The emitter writes
them back out in source order, so the target language's own precedence and associativity apply. Chains are read with a
loop and folded afterwards (see Parser.chain), so only IF/WHILE nesting grows the Python stack.
"""

import logging

from basic_compiler.lang.error import ParseError, SemanticError
from basic_compiler.lang.lexical import Token, TokenType
from basic_compiler.lang.tree import (Comparison, Expression, Float, Goto, If, Input, Integer, Label, Let, Print,
                                      PrintString, Sequence, Term, Unary, Variable, While)

logger = logging.getLogger(__name__)


class Parser:
    """Parses a list of Tokens into a grammar tree. State that would otherwise be global lives on the instance:

    - variables: names declared so far by LET or INPUT
    - labels_declared: names declared so far by LABEL
    - labels_gotoed: GOTO targets, in order of first reference, mapped to the token of that reference
    """
    RELATIONAL = (TokenType.EQEQ, TokenType.NOTEQ, TokenType.GT, TokenType.GTEQ, TokenType.LT, TokenType.LTEQ)
    ADDITIVE = (TokenType.PLUS, TokenType.MINUS)
    MULTIPLICATIVE = (TokenType.ASTERISK, TokenType.SLASH)

    def __init__(self, tokens):
        if not tokens or tokens[-1].type is not TokenType.EOF:
            tokens = list(tokens) + [Token(TokenType.EOF)]
        self.tokens = tokens
        self.pos = 0

        self.tree = None
        self.variables = set()
        self.labels_declared = set()
        self.labels_gotoed = {}

    def peek(self):
        return self.tokens[self.pos]

    def advance(self):
        """Consumes and returns the current token. EOF is never consumed."""
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    @staticmethod
    def error(error_type, msg, exprs, token):
        """Builds an error of type error_type pointing at token."""
        start = max(token.column - 1, 0)
        return error_type(msg, exprs, line_num=token.line or None, start=start, end=start + max(len(token.lexeme), 1))

    def expect(self, token_type, after):
        """Consumes a token of token_type, or raises a ParseError naming what was expected after `after`."""
        token = self.advance()
        if token.type is not token_type:
            raise Parser.error(ParseError, "{} should be followed by {}, got {}", (after, token_type.value, token), token)
        return token

    def skip_newlines(self):
        while self.peek().type is TokenType.NEWLINE:
            self.advance()

    # ------------------------------------------------------------------------------------------------------------------
    # Statements

    def parse(self):
        """program ::= {statement}

        Parses the whole token list and returns the program's Sequence. GOTO targets are checked once everything is
        parsed, since a label may be declared after the GOTO that jumps to it.
        """
        self.pos = 0
        self.variables, self.labels_declared, self.labels_gotoed = set(), set(), {}

        statements = []
        self.skip_newlines()
        while self.peek().type is not TokenType.EOF:
            statements.append(self.statement())
            self.skip_newlines()

        for label, token in self.labels_gotoed.items():
            if label not in self.labels_declared:
                raise Parser.error(SemanticError, "attempt to GOTO undeclared label {}", label, token)

        self.tree = Sequence.of(statements)
        logger.debug("parsed %d top-level statements, variables: %s", len(statements), sorted(self.variables))
        return self.tree

    def statement(self):
        """statement ::= PRINT (expression | string) nl
                       | IF comparison THEN nl {statement} ENDIF nl
                       | WHILE comparison REPEAT nl {statement} ENDWHILE nl
                       | LABEL ident nl
                       | GOTO ident nl
                       | LET ident "=" expression nl
                       | INPUT ident nl

        Blank lines in front of a statement are skipped.
        """
        self.skip_newlines()
        logger.debug("statement: current token %r", self.peek())

        productions = {
            TokenType.PRINT: self.statement_print,
            TokenType.IF: self.statement_if,
            TokenType.WHILE: self.statement_while,
            TokenType.LABEL: self.statement_label,
            TokenType.GOTO: self.statement_goto,
            TokenType.LET: self.statement_let,
            TokenType.INPUT: self.statement_input,
        }

        token = self.peek()
        if token.type not in productions:
            raise Parser.error(ParseError, "expected a statement, got {}", token, token)

        self.advance()
        return productions[token.type]()

    def block(self, opener, closer):
        """{statement} closer nl. Stops as soon as the lookahead is closer."""
        statements = []
        while True:
            self.skip_newlines()
            token = self.peek()

            if token.type is closer:
                self.advance()
                self.nl(closer.value)
                return Sequence.of(statements)

            if token.type is TokenType.EOF:
                raise Parser.error(ParseError, "{} block is missing {}", (opener.value, closer.value), token)

            statements.append(self.statement())

    def ident(self, after):
        token = self.advance()
        if token.type is not TokenType.IDENT:
            raise Parser.error(ParseError, "{} should be followed by an identifier, got {}", (after, token), token)
        return token.value

    def nl(self, after):
        """Every statement ends with a newline, the last one included."""
        token = self.advance()
        if token.type is not TokenType.NEWLINE:
            raise Parser.error(ParseError, "expected newline after {}, got {}", (after, token), token)

    def statement_print(self):
        """PRINT (expression | string) nl"""
        token = self.peek()
        if token.type is TokenType.STRING:
            self.advance()
            statement = PrintString(token.value)
        else:
            statement = Print(self.expression())

        self.nl("PRINT")
        return statement

    def statement_if(self):
        """IF comparison THEN nl {statement} ENDIF nl"""
        comparison = self.comparison()
        self.expect(TokenType.THEN, "IF")
        self.nl("THEN")

        return If(comparison, self.block(TokenType.IF, TokenType.ENDIF))

    def statement_while(self):
        """WHILE comparison REPEAT nl {statement} ENDWHILE nl"""
        comparison = self.comparison()
        self.expect(TokenType.REPEAT, "WHILE")
        self.nl("REPEAT")

        return While(comparison, self.block(TokenType.WHILE, TokenType.ENDWHILE))

    def statement_label(self):
        """LABEL ident nl. Declaring the same label twice is an error."""
        token = self.peek()
        name = self.ident("LABEL")

        if name in self.labels_declared:
            raise Parser.error(SemanticError, "label {} already exists", name, token)
        self.labels_declared.add(name)

        self.nl("LABEL")
        return Label(name)

    def statement_goto(self):
        """GOTO ident nl. The target is only checked at the end of parse."""
        token = self.peek()
        name = self.ident("GOTO")
        self.labels_gotoed.setdefault(name, token)

        self.nl("GOTO")
        return Goto(name)

    def statement_let(self):
        """LET ident "=" expression nl. The variable is declared before its expression is parsed."""
        name = self.ident("LET")
        self.variables.add(name)

        self.expect(TokenType.EQ, f"LET {name}")
        expression = self.expression()

        self.nl("LET")
        return Let(name, expression)

    def statement_input(self):
        """INPUT ident nl"""
        name = self.ident("INPUT")
        self.variables.add(name)

        self.nl("INPUT")
        return Input(name)

    # ------------------------------------------------------------------------------------------------------------------
    # Expressions

    @staticmethod
    def chain(node_type, operands, operators):
        """Nests operands to the right: [a, b, c] with [-, -] is node_type(a, -, node_type(b, -, node_type(c)))."""
        node = node_type(operands[-1])
        for operand, operator in zip(reversed(operands[:-1]), reversed(operators)):
            node = node_type(operand, operator, node)
        return node

    def comparison(self):
        """comparison ::= expression (("==" | "!=" | ">" | ">=" | "<" | "<=") expression)*

        Nested to the right: a == b == c is Comparison(a, ==, Comparison(b, ==, Comparison(c))).
        """
        logger.debug("comparison: current token %r", self.peek())
        operands, operators = [self.expression()], []

        while self.peek().type in Parser.RELATIONAL:
            operators.append(self.advance().type)
            operands.append(self.expression())
        return Parser.chain(Comparison, operands, operators)

    def expression(self):
        """expression ::= term {("+" | "-") term}"""
        operands, operators = [self.term()], []

        while self.peek().type in Parser.ADDITIVE:
            operators.append(self.advance().type)
            operands.append(self.term())
        return Parser.chain(Expression, operands, operators)

    def term(self):
        """term ::= unary {("*" | "/") unary}"""
        operands, operators = [self.unary()], []

        while self.peek().type in Parser.MULTIPLICATIVE:
            operators.append(self.advance().type)
            operands.append(self.unary())
        return Parser.chain(Term, operands, operators)

    def unary(self):
        """unary ::= ["+" | "-"] primary"""
        if self.peek().type in Parser.ADDITIVE:
            operator = self.advance().type
            return Unary(self.primary(), operator)
        return Unary(self.primary())

    def primary(self):
        """primary ::= INTEGER | FLOAT | ident. Reading a variable that no LET/INPUT has declared is an error."""
        logger.debug("primary: current token %r", self.peek())
        token = self.advance()

        if token.type is TokenType.INTEGER:
            return Integer(token.value)
        elif token.type is TokenType.FLOAT:
            return Float(token.value)
        elif token.type is TokenType.IDENT:
            if token.value not in self.variables:
                raise Parser.error(SemanticError, "variable {} referenced before assignment", token.value, token)
            return Variable(token.value)

        raise Parser.error(ParseError, "expected a number or variable, got {}", token, token)
