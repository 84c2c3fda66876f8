"""Lexical analysis for the VSL language: a single left-to-right scan that turns source text into a flat list of
Tokens, always terminated by exactly one EOF token.

Token grammar, in priority order at each position:

```
<le_ge>   ::= "<=" | ">="                 ; checked before the single character "<" / ">"
<blank>   ::= any whitespace character    ; skipped
<word>    ::= <letter>+                   ; "let", "print", "while" are keywords, anything else an identifier
<integer> ::= <digit>+                    ; ASCII digits only, no sign, must fit in a signed 64-bit integer
<string>  ::= '"' <char>* ('"' | <eof>)   ; no escape sequences; unterminated strings run to end of input
<punct>   ::= "(" | ")" | "{" | "}" | ";" | "," | "+" | "-" | "*" | "/" | "=" | "<" | ">"
```

Any other character is a LexException.
"""

import enum
from dataclasses import dataclass, field

from vsl.lang.error import LexException


INT_MAX = 2 ** 63 - 1


class TokenType(enum.Enum):
    """Closed vocabulary of token tags. Values are the spellings used in diagnostics."""
    EOF = "end of input"
    IDENT = "identifier"
    INT = "integer"
    STRING = "string"

    # keywords
    LET = "let"
    PRINT = "print"
    WHILE = "while"

    # punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    SEMICOLON = ";"
    COMMA = ","

    # operators
    PLUS = "+"
    MINUS = "-"
    STAR = "*"
    SLASH = "/"
    EQ = "="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="

    def __str__(self):
        if self in (TokenType.EOF, TokenType.IDENT, TokenType.INT, TokenType.STRING):
            return self.value
        return f"'{self.value}'"


KEYWORDS = {
    "let": TokenType.LET,
    "print": TokenType.PRINT,
    "while": TokenType.WHILE,
}

DOUBLE_CHARS = {
    "<=": TokenType.LE,
    ">=": TokenType.GE,
}

SINGLE_CHARS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    ";": TokenType.SEMICOLON,
    ",": TokenType.COMMA,
    "+": TokenType.PLUS,
    "-": TokenType.MINUS,
    "*": TokenType.STAR,
    "/": TokenType.SLASH,
    "=": TokenType.EQ,
    "<": TokenType.LT,
    ">": TokenType.GT,
}


def is_digit(char):
    """Whether or not char is an ASCII decimal digit. str.isdigit would also accept superscripts and other scripts."""
    return "0" <= char <= "9"


def integer_value(digits):
    """Returns the value of a run of ASCII digits, or None if it does not fit in a signed 64-bit integer. Leading zeros
    are ignored, so a run of any length is checked without converting it whole.
    """
    significant = digits.lstrip("0") or "0"
    if len(significant) > len(str(INT_MAX)):
        return None

    value = int(significant)
    return value if value <= INT_MAX else None


@dataclass(frozen=True)
class Position:
    """Location of a character in source text. offset is 0-based, line and column are 1-based."""
    offset: int
    line: int
    column: int

    def __str__(self):
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Token:
    """A classified lexeme. text is the matched text (string contents without quotes); position does not take part
    in equality.
    """
    type: TokenType
    text: str
    position: Position = field(default=None, compare=False)

    @property
    def canonical(self):
        """Source text that lexes back to this token."""
        if self.type in (TokenType.IDENT, TokenType.INT):
            return self.text
        elif self.type is TokenType.STRING:
            return f'"{self.text}"'
        elif self.type is TokenType.EOF:
            return ""
        return self.type.value

    def describe(self):
        """Human-readable description used in parse errors."""
        if self.type is TokenType.EOF:
            return str(self.type)
        elif self.type in (TokenType.IDENT, TokenType.INT):
            return f"{self.type} '{self.text}'"
        elif self.type is TokenType.STRING:
            return f'{self.type} "{self.text}"'
        return str(self.type)

    def __repr__(self):
        return f"Token({self.type.name}, {self.text!r})"


class Lexer:
    """Scans source text into Tokens. Non-fatal problems (unterminated strings) are collected in self.warnings as
    LexExceptions instead of being raised.
    """

    def __init__(self, source):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.warnings = []

    def position(self):
        return Position(self.pos, self.line, self.column)

    def peek(self, offset=0):
        """Returns the character offset characters ahead, or '' past the end of input."""
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def advance(self):
        """Consumes and returns the current character, keeping line/column up to date."""
        char = self.peek()
        if char:
            self.pos += 1
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return char

    def take_while(self, predicate):
        """Consumes the maximal run of characters satisfying predicate and returns it."""
        start = self.pos
        while self.peek() and predicate(self.peek()):
            self.advance()
        return self.source[start:self.pos]

    def tokenize(self):
        """Returns the list of Tokens in self.source. Raises LexException on an unrecognized character."""
        tokens = []

        while True:
            start = self.position()
            char = self.peek()

            pair = char + self.peek(1)
            if pair in DOUBLE_CHARS:
                self.advance()
                self.advance()
                tokens.append(Token(DOUBLE_CHARS[pair], pair, start))

            elif not char:
                tokens.append(Token(TokenType.EOF, "", start))
                return tokens

            elif char.isspace():
                self.advance()

            elif char.isalpha():
                word = self.take_while(str.isalpha)
                tokens.append(Token(KEYWORDS.get(word, TokenType.IDENT), word, start))

            elif is_digit(char):
                tokens.append(self.lex_integer(start))

            elif char == '"':
                tokens.append(self.lex_string(start))

            elif char in SINGLE_CHARS:
                self.advance()
                tokens.append(Token(SINGLE_CHARS[char], char, start))

            else:
                raise LexException("unexpected character {}", repr(char), position=start)

    def lex_integer(self, start):
        digits = self.take_while(is_digit)
        if integer_value(digits) is None:
            raise LexException("integer literal {} out of range", digits, position=start, length=len(digits))
        return Token(TokenType.INT, digits, start)

    def lex_string(self, start):
        self.advance()  # opening quote
        text = self.take_while(lambda char: char != '"')

        if self.peek():
            self.advance()  # closing quote
        else:
            self.warnings.append(LexException("unterminated string literal", position=start, length=len(text) + 1))

        return Token(TokenType.STRING, text, start)


def tokenize(source):
    """Returns the Tokens of source, ending in exactly one EOF token."""
    return Lexer(source).tokenize()


def render(tokens):
    """Renders tokens back into source text. Lexing the result yields tokens of the same types."""
    return " ".join(token.canonical for token in tokens if token.type is not TokenType.EOF)
