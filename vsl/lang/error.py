"""Error handling for the VSL language. Only GenericExceptions should be encountered during a run: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Three kinds of language errors exist, all of them fatal to the program being run:
- LexException: an unrecognized character (or an out-of-range integer literal) in the source text
- ParseException: a token did not match what the grammar required
- RuntimeException: raised during evaluation (undefined variable, type error, bad builtin call, division by zero...)
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a VSL error/warning. msg is a format string
    whose placeholders are filled (in bold) with exprs.
    """
    kind = "error"

    def __init__(self, msg, exprs=None, position=None, length=1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning. position is the Position of the offending source text and
        length the number of characters it spans.
        """
        if exprs is None:
            exprs = []
        if isinstance(exprs, (str, int)):
            exprs = [exprs]

        self.template = msg
        self.exprs = [str(expr) for expr in exprs]
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))  # color expr snippets

        self.position = position
        self.length = max(length, 1)
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.plain)

    @property
    def plain(self):
        """The message without any coloring."""
        return self.template.format(*self.exprs)


class LexException(GenericException):
    """Raised by the lexer on a character that cannot start any token."""
    kind = "lex error"


class ParseException(GenericException):
    """Raised by the parser when the current token is not the one the grammar requires."""
    kind = "parse error"

    def __init__(self, expected, found, position=None, length=1):
        super().__init__("expected {} but found {}", (expected, found), position, length)
        self.expected = expected
        self.found = found


class RuntimeException(GenericException):
    """Raised by the evaluator. Named so that it does not shadow Python's builtin RuntimeError."""
    kind = "runtime error"


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom VSL errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.sources = {}  # dict of path: source text, most recent registration last

    def register_file(self, path, source=None):
        """Registers path (and the text read from it) so that errors can point into it."""
        self.sources.pop(path, None)
        self.sources[path] = source

    def remove_file(self, path):
        """Removes path. Should be called after the text registered for path ran successfully."""
        self.sources.pop(path, None)

    def current(self):
        """Returns (path, source) of the most recently registered file, or (None, None)."""
        if not self.sources:
            return None, None
        path = next(reversed(self.sources))
        return path, self.sources[path]

    @staticmethod
    def diagnose(error, source, warning=False):
        """Returns the offending line of source with the offending part of it highlighted and underlined, or None if
        error cannot be located in source.
        """
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        lines = source.split("\n")
        if not 0 < error.position.line <= len(lines):
            return None

        line = lines[error.position.line - 1].rstrip("\r")
        start = min(error.position.column - 1, len(line))
        end = max(min(start + error.length, len(line)), start + 1)

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def report(self, error, warning=False):
        """Prints error (or warning) in the format 'path:line:col: error: message', followed by a diagnosis."""
        path, source = self.current()

        location = ""
        if path is not None:
            location = path
            if error.position is not None:
                location += f":{error.position}"
            location += ": "

        msg = colored(location, attrs=["bold"]) if location else ""
        if error.internal:
            msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        if warning:
            msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"])
        else:
            msg += colored(f"{error.kind}: ", ErrorHandler.ERROR, attrs=["bold"])
        msg += error.msg

        stream = self.stream if self.stream is not None else sys.stderr
        print(msg, file=stream)

        if not error.internal and error.diagnosis and error.position is not None and source:
            diagnosis = ErrorHandler.diagnose(error, source, warning)
            if diagnosis:
                print(diagnosis, file=stream)

    def warn(self, *args, **kwargs):
        """Prints a warning. Accepts either a GenericException or the args to build one. Never aborts."""
        if args and isinstance(args[0], GenericException):
            warning = args[0]
        else:
            warning = GenericException(*args, **kwargs)
        self.report(warning, warning=True)

    def throw(self, error):
        """Prints error, then exits with status 1 if this handler is fatal."""
        self.report(error)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum nesting depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            # fatal: throw exits with 1. Non-fatal (shell): reported once, then the caller carries on
            self.throw(GenericException("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True))

        return not do_exit
