"""Lexical analysis for the BASIC language. Converts raw source text into a flat list of Tokens; the parser never
looks at characters directly.

Lexical rules can be loosely defined as follows:

```
<newline>  ::= "\n"                              ; always a token: it terminates every statement
<comment>  ::= "#" <char>*                       ; skipped up to (not including) the newline
<string>   ::= '"' <char>* '"'                   ; verbatim, no escapes, must close on the same line
<number>   ::= <digit>+ ["." <digit>*]           ; a "." makes it a float, otherwise a 64-bit integer
<word>     ::= <letter> (<letter> | <digit> | "_")*   ; keyword if exact match, identifier otherwise
<operator> ::= "==" | "!=" | "<=" | ">=" | "=" | "+" | "-" | "*" | "/" | "<" | ">"
```

Two-character operators are always tried before one-character ones, since "=" is a prefix of "==".
"""

import logging
import math
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from basic_compiler.lang.error import LexicalError

logger = logging.getLogger(__name__)


class TokenType(Enum):
    """Every token variant. Keyword and operator values are their source spelling."""
    EOF = "end of input"
    NEWLINE = "newline"
    IDENT = "identifier"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"

    # keywords
    PRINT = "PRINT"
    LABEL = "LABEL"
    GOTO = "GOTO"
    INPUT = "INPUT"
    LET = "LET"
    IF = "IF"
    THEN = "THEN"
    ENDIF = "ENDIF"
    WHILE = "WHILE"
    REPEAT = "REPEAT"
    ENDWHILE = "ENDWHILE"

    # operators
    EQ = "="
    PLUS = "+"
    MINUS = "-"
    ASTERISK = "*"
    SLASH = "/"
    EQEQ = "=="
    NOTEQ = "!="
    LT = "<"
    LTEQ = "<="
    GT = ">"
    GTEQ = ">="


KEYWORDS = {token_type.value: token_type for token_type in [
    TokenType.PRINT, TokenType.LABEL, TokenType.GOTO, TokenType.INPUT, TokenType.LET, TokenType.IF, TokenType.THEN,
    TokenType.ENDIF, TokenType.WHILE, TokenType.REPEAT, TokenType.ENDWHILE,
]}

OPERATORS = {token_type.value: token_type for token_type in [
    TokenType.EQ, TokenType.PLUS, TokenType.MINUS, TokenType.ASTERISK, TokenType.SLASH, TokenType.EQEQ,
    TokenType.NOTEQ, TokenType.LT, TokenType.LTEQ, TokenType.GT, TokenType.GTEQ,
]}

INT_MIN, INT_MAX = -2 ** 63, 2 ** 63 - 1


@dataclass(frozen=True, repr=False)
class Token:
    """A single lexical unit. Position fields are ignored by ==, so Token(TokenType.IDENT, "a") equals any scanned
    identifier 'a' regardless of where it was found.
    """
    type: TokenType
    value: Union[str, int, float, None] = None
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)  # 1-based
    lexeme: str = field(default="", compare=False)

    def __repr__(self):
        if self.value is None:
            return self.type.name
        return f"{self.type.name}({self.value!r})"

    def __str__(self):
        if self.type in (TokenType.EOF, TokenType.NEWLINE):
            return self.type.value
        if self.lexeme:
            return f"'{self.lexeme}'"
        return f"'{self.type.value if self.value is None else self.value}'"


class Scanner:
    """Turns a source string into a list of Tokens, terminated by a single EOF token. Scanning is a pure function of
    the source: calling scan twice gives equal results.
    """
    WHITESPACE = " \t\r"
    LETTERS = string.ascii_letters
    DIGITS = string.digits

    def __init__(self, source):
        self.source = source

        self.pos = 0
        self.line = 1
        self.line_start = 0  # index of the first character of the current line

    @property
    def column(self):
        return self.pos - self.line_start + 1

    def peek(self, offset=0):
        """Returns the character offset places ahead, or "" past the end of the source."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def scan(self):
        """Scans self.source into a list of Tokens. Raises LexicalError on the first character that cannot start a
        token.
        """
        self.pos, self.line, self.line_start = 0, 1, 0
        tokens = []

        while self.pos < len(self.source):
            char = self.peek()

            if char == "\n":
                tokens.append(self._token(TokenType.NEWLINE, lexeme=char))
                self.pos += 1
                self.line += 1
                self.line_start = self.pos

            elif char in Scanner.WHITESPACE:
                self.pos += 1

            elif char == "#":
                self._skip_comment()

            elif char == "\"":
                tokens.append(self._string())

            elif char in Scanner.DIGITS:
                tokens.append(self._number())

            elif char in Scanner.LETTERS:
                tokens.append(self._word())

            else:
                tokens.append(self._operator())

        tokens.append(self._token(TokenType.EOF))
        logger.debug("scanned %d tokens: %s", len(tokens), tokens)
        return tokens

    def _token(self, token_type, value=None, lexeme=""):
        """Token of token_type starting at the current position."""
        return Token(token_type, value, self.line, self.column, lexeme)

    def _error(self, msg, exprs, length=1):
        start = self.pos - self.line_start
        return LexicalError(msg, exprs, line_num=self.line, start=start, end=start + length)

    def _skip_comment(self):
        end = self.source.find("\n", self.pos)
        self.pos = end if end != -1 else len(self.source)

    def _string(self):
        """'"' <char>* '"'. Text is kept verbatim. Reaching a newline or the end of the source first is an error."""
        close = self.source.find("\"", self.pos + 1)
        newline = self.source.find("\n", self.pos + 1)

        if close == -1 or newline != -1 and newline < close:
            end = newline if newline != -1 else len(self.source)
            raise self._error("unterminated string literal {}", self.source[self.pos:end], end - self.pos)

        lexeme = self.source[self.pos:close + 1]
        token = self._token(TokenType.STRING, lexeme[1:-1], lexeme)
        self.pos = close + 1
        return token

    def _number(self):
        """<digit>+ ["." <digit>*]. Only the first "." belongs to the literal."""
        start = self.pos
        is_float = False

        while self.peek() and (self.peek() in Scanner.DIGITS or self.peek() == "." and not is_float):
            is_float = is_float or self.peek() == "."
            self.pos += 1

        lexeme = self.source[start:self.pos]
        self.pos = start  # so errors and the token point at the start of the literal

        try:
            value = float(lexeme) if is_float else int(lexeme)
        except ValueError:
            raise self._error("malformed numeric literal '{}'", lexeme, len(lexeme))

        if is_float and math.isinf(value):
            raise self._error("float literal '{}' is out of range", lexeme, len(lexeme))
        elif not is_float and not INT_MIN <= value <= INT_MAX:
            raise self._error("integer literal '{}' does not fit in 64 bits", lexeme, len(lexeme))

        token = self._token(TokenType.FLOAT if is_float else TokenType.INTEGER, value, lexeme)
        self.pos += len(lexeme)
        return token

    def _word(self):
        """Keyword if the whole word is one (case-sensitive), identifier otherwise."""
        start = self.pos
        while self.peek() and (self.peek() in Scanner.LETTERS or self.peek() in Scanner.DIGITS or self.peek() == "_"):
            self.pos += 1

        word = self.source[start:self.pos]
        self.pos = start

        if word in KEYWORDS:
            token = self._token(KEYWORDS[word], lexeme=word)
        else:
            token = self._token(TokenType.IDENT, word, word)

        self.pos += len(word)
        return token

    def _operator(self):
        """Two-character operators are matched before one-character ones."""
        for length in (2, 1):
            candidate = self.source[self.pos:self.pos + length]
            if len(candidate) == length and candidate in OPERATORS:
                token = self._token(OPERATORS[candidate], lexeme=candidate)
                self.pos += length
                return token

        raise self._error("unrecognized character {}", repr(self.peek()))
