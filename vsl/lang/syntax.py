"""Syntax tree of the VSL language, built once by the parser and never mutated afterwards.

```
Program    ::= Statement*
Statement  ::= Let(name, expr) | Print(expr) | While(condition, body) | ExprStatement(expr)
Expression ::= Number(value) | StringLiteral(text) | Variable(name)
             | BinaryOp(left, op, right) | Call(name, args, builtin)
```

Every node records the Position of the token it starts at (BinaryOp: its operator) for diagnostics; positions are
ignored by equality.
"""

import enum
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from vsl.lang.lexical import Position


class Builtin(enum.Enum):
    """Closed set of callable functions. There are no user-defined functions."""
    READ = "read"
    LEN = "len"
    SUBSTRING = "substring"

    @classmethod
    def resolve(cls, name):
        """Returns the Builtin called name (aliases included), or None if there is none."""
        return BUILTIN_NAMES.get(name)

    @property
    def arity(self):
        return ARITIES[self]


BUILTIN_NAMES = {
    "read": Builtin.READ,
    "len": Builtin.LEN,
    "substring": Builtin.SUBSTRING,
    "substr": Builtin.SUBSTRING,
}

ARITIES = {
    Builtin.READ: 0,
    Builtin.LEN: 1,
    Builtin.SUBSTRING: 3,
}


class Node:
    """Superclass of every syntax tree node."""

    def display(self, indents=0):
        """Recursively displays the tree rooted at this node with readable format.

        Format:
        <Node>(<field>=<value>, ...,
            <field>=<Node>(...),
            <field>=[
                <Node>(...),
                ...
            ])
        """
        pad = "    " * indents
        inline = []
        nested = []

        for node_field in fields(self):
            if not node_field.compare:
                continue

            value = getattr(self, node_field.name)
            if isinstance(value, Node):
                nested.append(f"{pad}    {node_field.name}=" + value.display(indents + 1).lstrip())
            elif isinstance(value, tuple) and value:
                items = ",\n".join(node.display(indents + 2) for node in value)
                nested.append(f"{pad}    {node_field.name}=[\n{items}\n{pad}    ]")
            elif isinstance(value, tuple):
                inline.append(f"{node_field.name}=[]")
            elif isinstance(value, Builtin):
                inline.append(f"{node_field.name}={value.name}")
            else:
                inline.append(f"{node_field.name}={value!r}")

        result = f"{pad}{type(self).__name__}(" + ", ".join(inline)
        if nested:
            result += ("," if inline else "") + "\n" + ",\n".join(nested)
        return result + ")"


class Statement(Node):
    """Superclass of statement nodes."""


class Expression(Node):
    """Superclass of expression nodes."""


@dataclass(frozen=True)
class Program(Node):
    statements: Tuple[Statement, ...]
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Let(Statement):
    """Binds (or rebinds) name. Bare assignments `name = expr;` parse to this node too."""
    name: str
    expr: Expression
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Print(Statement):
    expr: Expression
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class While(Statement):
    condition: Expression
    body: Tuple[Statement, ...]
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ExprStatement(Statement):
    """Expression evaluated for its side effects only."""
    expr: Expression
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Number(Expression):
    value: int
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class StringLiteral(Expression):
    text: str
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Variable(Expression):
    name: str
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryOp(Expression):
    left: Expression
    op: str
    right: Expression
    position: Optional[Position] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Call(Expression):
    """Call of a builtin. builtin is resolved from name by the parser and is None for unknown names, which only fail
    once evaluated.
    """
    name: str
    args: Tuple[Expression, ...]
    builtin: Optional[Builtin] = None
    position: Optional[Position] = field(default=None, compare=False, repr=False)
