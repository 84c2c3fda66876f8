"""Recursive-descent parser for the VSL language: Tokens in, Program out.

```
Program    ::= Statement* EOF
Statement  ::= "let" IDENT "=" Expr ";"
             | "print" "(" Expr ")" ";"
             | "while" "(" Expr ")" "{" Statement* "}"
             | IDENT "=" Expr ";"                              ; bare assignment, parsed as Let
             | Expr ";"
Expr       ::= Term (("+" | "-" | "<" | ">" | "<=" | ">=") Term)*  ; one precedence level, left-associative
Term       ::= Factor (("*" | "/") Factor)*                        ; left-associative
Factor     ::= INT | STRING | IDENT "(" (Expr ("," Expr)*)? ")" | IDENT | "(" Expr ")"
```

The first token that does not fit raises a ParseException; there is no recovery.
"""

from vsl.lang.error import ParseException
from vsl.lang.lexical import Token, TokenType, integer_value
from vsl.lang.syntax import (
    BinaryOp, Builtin, Call, ExprStatement, Let, Number, Print, Program, StringLiteral, Variable, While
)


class Parser:
    """Parses a token list that ends in an EOF token."""
    ADDITIVE = (TokenType.PLUS, TokenType.MINUS, TokenType.LT, TokenType.GT, TokenType.LE, TokenType.GE)
    MULTIPLICATIVE = (TokenType.STAR, TokenType.SLASH)

    def __init__(self, tokens):
        self.tokens = list(tokens)
        if not self.tokens or self.tokens[-1].type is not TokenType.EOF:
            position = self.tokens[-1].position if self.tokens else None
            self.tokens.append(Token(TokenType.EOF, "", position))
        self.pos = 0

        self.statement_parse_map = {
            TokenType.LET: self.parse_let,
            TokenType.PRINT: self.parse_print,
            TokenType.WHILE: self.parse_while,
        }
        self.factor_parse_map = {
            TokenType.INT: self.parse_number,
            TokenType.STRING: self.parse_string,
            TokenType.IDENT: self.parse_identifier,
            TokenType.LPAREN: self.parse_parenthesized,
        }

    def current_token(self):
        return self.tokens[min(self.pos, len(self.tokens) - 1)]

    def peek(self, offset=1):
        return self.tokens[min(self.pos + offset, len(self.tokens) - 1)]

    def match(self, *token_types):
        return self.current_token().type in token_types

    def advance(self):
        token = self.current_token()
        self.pos += 1
        return token

    def error(self, expected):
        """Returns a ParseException for the current token, which is not expected."""
        token = self.current_token()
        return ParseException(expected, token.describe(), token.position, len(token.canonical))

    def consume_token(self, token_type):
        if self.match(token_type):
            return self.advance()
        raise self.error(str(token_type))

    def parse(self):
        return self.parse_program()

    def parse_program(self):
        start = self.current_token().position
        statements = []
        while not self.match(TokenType.EOF):
            statements.append(self.parse_statement())
        return Program(tuple(statements), start)

    def parse_statement(self):
        parse_func = self.statement_parse_map.get(self.current_token().type)
        if parse_func is not None:
            return parse_func()
        elif self.match(TokenType.IDENT) and self.peek().type is TokenType.EQ:
            return self.parse_assignment()
        return self.parse_expression_statement()

    def parse_let(self):
        start = self.consume_token(TokenType.LET).position
        name = self.consume_token(TokenType.IDENT).text
        self.consume_token(TokenType.EQ)
        expr = self.parse_expression()
        self.consume_token(TokenType.SEMICOLON)
        return Let(name, expr, start)

    def parse_assignment(self):
        name_token = self.consume_token(TokenType.IDENT)
        self.consume_token(TokenType.EQ)
        expr = self.parse_expression()
        self.consume_token(TokenType.SEMICOLON)
        return Let(name_token.text, expr, name_token.position)

    def parse_print(self):
        start = self.consume_token(TokenType.PRINT).position
        expr = self.parse_parenthesized()
        self.consume_token(TokenType.SEMICOLON)
        return Print(expr, start)

    def parse_while(self):
        start = self.consume_token(TokenType.WHILE).position
        condition = self.parse_parenthesized()
        body = self.parse_block()
        return While(condition, body, start)

    def parse_block(self):
        self.consume_token(TokenType.LBRACE)
        statements = []
        while not self.match(TokenType.RBRACE, TokenType.EOF):
            statements.append(self.parse_statement())
        self.consume_token(TokenType.RBRACE)
        return tuple(statements)

    def parse_expression_statement(self):
        start = self.current_token().position
        expr = self.parse_expression()
        self.consume_token(TokenType.SEMICOLON)
        return ExprStatement(expr, start)

    def parse_binary(self, operators, parse_operand):
        """Parses a left-associative chain of parse_operand separated by any of operators."""
        left = parse_operand()
        while self.match(*operators):
            op = self.advance()
            right = parse_operand()
            left = BinaryOp(left, op.text, right, op.position)
        return left

    def parse_expression(self):
        return self.parse_binary(Parser.ADDITIVE, self.parse_term)

    def parse_term(self):
        return self.parse_binary(Parser.MULTIPLICATIVE, self.parse_factor)

    def parse_factor(self):
        parse_func = self.factor_parse_map.get(self.current_token().type)
        if parse_func is None:
            raise self.error("expression")
        return parse_func()

    def parse_number(self):
        token = self.consume_token(TokenType.INT)
        return Number(integer_value(token.text), token.position)

    def parse_string(self):
        token = self.consume_token(TokenType.STRING)
        return StringLiteral(token.text, token.position)

    def parse_identifier(self):
        if self.peek().type is TokenType.LPAREN:
            return self.parse_call()
        token = self.consume_token(TokenType.IDENT)
        return Variable(token.text, token.position)

    def parse_call(self):
        name_token = self.consume_token(TokenType.IDENT)
        self.consume_token(TokenType.LPAREN)
        args = self.parse_delimited_list(TokenType.RPAREN, TokenType.COMMA, self.parse_expression)
        self.consume_token(TokenType.RPAREN)
        return Call(name_token.text, tuple(args), Builtin.resolve(name_token.text), name_token.position)

    def parse_delimited_list(self, end_token, delimiter_token, parse_func):
        result = []
        if not self.match(end_token):
            result.append(parse_func())
            while self.match(delimiter_token):
                self.consume_token(delimiter_token)
                result.append(parse_func())
        return result

    def parse_parenthesized(self):
        self.consume_token(TokenType.LPAREN)
        expr = self.parse_expression()
        self.consume_token(TokenType.RPAREN)
        return expr


def parse(tokens):
    """Returns the Program the tokens spell. Raises ParseException on malformed input."""
    return Parser(tokens).parse()
