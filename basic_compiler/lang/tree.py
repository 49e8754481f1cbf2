"""Grammar tree produced by the parser and consumed by the emitter. Nodes are immutable and own their children: there
is no sharing and there are no back-references.

```
<program>    ::= Sequence                    ; statements chained as Sequence(first, rest) ... End()
<statement>  ::= Print | PrintString | Let | If | While | Label | Goto | Input
<comparison> ::= Comparison(expression [operator comparison])        ; a == b == c nests to the right
<expression> ::= Expression(term [("+" | "-") expression])
<term>       ::= Term(unary [("*" | "/") term])
<unary>      ::= Unary(primary ["+" | "-"])
<primary>    ::= Integer | Float | Variable
```

Every chain is right-recursive: each node holds its operand and the remainder of the chain, never a flat list.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional, Union

from basic_compiler.lang.lexical import TokenType


class Node:
    """Superclass of every grammar tree node."""

    def display(self, indents=0):
        """Recursively displays the tree with a readable format.

        Format:
        <Node>(<attr>=<value>, nodes=[
            <Node>(<attr>=<value>, nodes=[
                ...
                <Node>(<attr>=<value>)  # <-- if node has no children
            ])
        ])
        """
        attrs, nodes = [], []
        for attr in fields(self):
            value = getattr(self, attr.name)
            if isinstance(value, Node):
                nodes.append(value)
            elif isinstance(value, Enum):
                attrs.append(f"{attr.name}='{value.value}'")
            elif value is not None:
                attrs.append(f"{attr.name}={value!r}")
        return Node._display(f"{type(self).__name__}({', '.join(attrs)}", nodes, indents)

    @staticmethod
    def _display(header, nodes, indents):
        result = "    " * indents + header
        if nodes:
            result += ", nodes=[" if not header.endswith("(") else "nodes=["
            for node in nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"


# ----------------------------------------------------------------------------------------------------------------------
# Primaries


@dataclass(frozen=True)
class Integer(Node):
    value: int


@dataclass(frozen=True)
class Float(Node):
    value: float


@dataclass(frozen=True)
class Variable(Node):
    name: str


Primary = Union[Integer, Float, Variable]


# ----------------------------------------------------------------------------------------------------------------------
# Expression chain: Expression -> Term -> Unary -> Primary


@dataclass(frozen=True)
class Unary(Node):
    """["+" | "-"] primary. operator is None when there is no sign."""
    primary: Primary
    operator: Optional[TokenType] = None


@dataclass(frozen=True)
class Term(Node):
    """unary [("*" | "/") term]"""
    unary: Unary
    operator: Optional[TokenType] = None
    rest: Optional["Term"] = None


@dataclass(frozen=True)
class Expression(Node):
    """term [("+" | "-") expression]"""
    term: Term
    operator: Optional[TokenType] = None
    rest: Optional["Expression"] = None


@dataclass(frozen=True)
class Comparison(Node):
    """expression [relational-operator comparison]. A bare expression when operator is None."""
    left: Expression
    operator: Optional[TokenType] = None
    right: Optional["Comparison"] = None


# ----------------------------------------------------------------------------------------------------------------------
# Statements


@dataclass(frozen=True)
class Print(Node):
    expression: Expression


@dataclass(frozen=True)
class PrintString(Node):
    text: str


@dataclass(frozen=True)
class Let(Node):
    name: str
    expression: Expression


@dataclass(frozen=True)
class Input(Node):
    name: str


@dataclass(frozen=True)
class Label(Node):
    name: str


@dataclass(frozen=True)
class Goto(Node):
    name: str


@dataclass(frozen=True)
class End(Node):
    """Marks the end of a statement sequence."""

    def __iter__(self):
        return iter(())


@dataclass(frozen=True)
class Sequence(Node):
    """first statement followed by the rest of the sequence (another Sequence, or End)."""
    first: Node
    rest: Union["Sequence", End]

    @classmethod
    def of(cls, statements):
        """Chains a list of statements into Sequence(s0, Sequence(s1, ... End())). Empty lists give End()."""
        chain = End()
        for statement in reversed(statements):
            chain = cls(statement, chain)
        return chain

    def __iter__(self):
        """Iterates over the statements of the chain without recursing into it."""
        node = self
        while isinstance(node, Sequence):
            yield node.first
            node = node.rest

    def display(self, indents=0):
        return Node._display("Sequence(", list(self), indents)


@dataclass(frozen=True)
class If(Node):
    comparison: Comparison
    body: Union[Sequence, End]


@dataclass(frozen=True)
class While(Node):
    comparison: Comparison
    body: Union[Sequence, End]


Statement = Union[Print, PrintString, Let, Input, Label, Goto, If, While, Sequence, End]
