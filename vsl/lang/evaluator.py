"""Tree-walking evaluator for the VSL language.

Runtime values are either Integers (Python ints kept within signed 64-bit range, wrapping on overflow) or Text (Python
strs). There is no boolean type: comparisons yield 1 or 0, and `while` tests truthiness (nonzero Integer, non-empty
Text). All variables live in a single environment owned by the Evaluator.
"""

import re

from vsl.lang.console import Console
from vsl.lang.error import GenericException, RuntimeException
from vsl.lang.lexical import INT_MAX, integer_value
from vsl.lang.syntax import (
    BinaryOp, Builtin, Call, ExprStatement, Let, Number, Print, StringLiteral, Variable, While
)


DIGITS = re.compile("[0-9]+")
COMPARISONS = {
    "<": lambda left, right: left < right,
    ">": lambda left, right: left > right,
    "<=": lambda left, right: left <= right,
    ">=": lambda left, right: left >= right,
}


def is_integer(value):
    return isinstance(value, int) and not isinstance(value, bool)


def is_text(value):
    return isinstance(value, str)


def wrap(number):
    """Wraps number into the signed 64-bit two's complement range."""
    number &= 2 ** 64 - 1
    return number - 2 ** 64 if number > INT_MAX else number


def truncated_div(left, right):
    """Integer division rounding toward zero. right must be nonzero."""
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def render_value(value):
    """Textual rendering of a value: decimal digits for Integers, Text verbatim."""
    if is_integer(value):
        return str(value)
    elif is_text(value):
        return value
    raise GenericException("'{}' is not a runtime value", repr(value), internal=True)


def truthy(value):
    if is_integer(value):
        return value != 0
    elif is_text(value):
        return value != ""
    raise GenericException("'{}' is not a runtime value", repr(value), internal=True)


class Evaluator:
    """Executes Programs against one environment. Every Program evaluated by the same Evaluator shares it."""

    def __init__(self, console=None):
        self.console = console if console is not None else Console()
        self.environment = {}

        self.statement_handlers = {
            Let: self.execute_let,
            Print: self.execute_print,
            While: self.execute_while,
            ExprStatement: self.execute_expr_statement,
        }
        self.expression_handlers = {
            Number: self.eval_number,
            StringLiteral: self.eval_string,
            Variable: self.eval_variable,
            BinaryOp: self.eval_binary_op,
            Call: self.eval_call,
        }
        self.builtin_handlers = {
            Builtin.READ: self.call_read,
            Builtin.LEN: self.call_len,
            Builtin.SUBSTRING: self.call_substring,
        }

    def evaluate(self, program):
        """Runs the statements of program in order. Raises RuntimeException on the first failure."""
        for statement in program.statements:
            self.execute(statement)

    def execute(self, statement):
        handler = self.statement_handlers.get(type(statement))
        if handler is None:
            raise GenericException("no handler for statement '{}'", type(statement).__name__, internal=True)
        handler(statement)

    def eval(self, expr):
        handler = self.expression_handlers.get(type(expr))
        if handler is None:
            raise GenericException("no handler for expression '{}'", type(expr).__name__, internal=True)
        return handler(expr)

    # statements

    def execute_let(self, stmt):
        self.environment[stmt.name] = self.eval(stmt.expr)

    def execute_print(self, stmt):
        self.console.write_line(render_value(self.eval(stmt.expr)))

    def execute_while(self, stmt):
        while truthy(self.eval(stmt.condition)):
            for body_stmt in stmt.body:
                self.execute(body_stmt)

    def execute_expr_statement(self, stmt):
        self.eval(stmt.expr)

    # expressions

    def eval_number(self, expr):
        return expr.value

    def eval_string(self, expr):
        return expr.text

    def eval_variable(self, expr):
        try:
            return self.environment[expr.name]
        except KeyError:
            raise RuntimeException("undefined variable '{}'", expr.name, expr.position, len(expr.name)) from None

    def eval_binary_op(self, expr):
        left = self.eval(expr.left)
        right = self.eval(expr.right)

        if is_integer(left) and is_integer(right):
            return self.integer_op(expr, left, right)
        elif expr.op == "+":
            return render_value(left) + render_value(right)
        raise RuntimeException("type error in binary operation '{}'", expr.op, expr.position, len(expr.op))

    @staticmethod
    def integer_op(expr, left, right):
        if expr.op in COMPARISONS:
            return 1 if COMPARISONS[expr.op](left, right) else 0
        elif expr.op == "+":
            return wrap(left + right)
        elif expr.op == "-":
            return wrap(left - right)
        elif expr.op == "*":
            return wrap(left * right)
        elif expr.op == "/":
            if right == 0:
                raise RuntimeException("division by zero", position=expr.position)
            return wrap(truncated_div(left, right))
        raise GenericException("unknown operator '{}'", expr.op, expr.position, internal=True)

    def eval_call(self, expr):
        if expr.builtin is None:
            raise RuntimeException("unknown function '{}'", expr.name, expr.position, len(expr.name))

        args = [self.eval(arg) for arg in expr.args]
        if len(args) != expr.builtin.arity:
            plural = "" if expr.builtin.arity == 1 else "s"
            msg = "{} expects " + f"{expr.builtin.arity} argument{plural}, got {len(args)}"
            raise RuntimeException(msg, expr.name, expr.position, len(expr.name))

        return self.builtin_handlers[expr.builtin](expr, *args)

    # builtins

    def call_read(self, expr):
        line = self.console.read_line()
        if line is None:
            raise RuntimeException("end of input", position=expr.position, length=len(expr.name))

        if DIGITS.fullmatch(line):
            number = integer_value(line)
            if number is None:
                raise RuntimeException("integer {} out of range", line, expr.position, len(expr.name))
            return number
        return line

    def call_len(self, expr, text):
        if not is_text(text):
            raise RuntimeException("len expects Text", position=expr.position, length=len(expr.name))
        return len(text)

    def call_substring(self, expr, text, start, count):
        if not (is_text(text) and is_integer(start) and is_integer(count)):
            msg = "{} expects (Text, Integer, Integer)"
            raise RuntimeException(msg, expr.name, expr.position, len(expr.name))

        if start < 0 or start > len(text) or count < 0:
            raise RuntimeException("substring index out of range", position=expr.position, length=len(expr.name))
        return text[start:start + min(count, len(text) - start)]


def evaluate(program, console=None):
    """Evaluates program with a fresh environment and returns the Evaluator that ran it."""
    evaluator = Evaluator(console)
    evaluator.evaluate(program)
    return evaluator
