"""Session control for the VSL language. Runs the lexer, parser and evaluator over a source file, or over lines typed
in command-line mode, against one shared environment.
"""

from vsl.lang.error import GenericException
from vsl.lang.evaluator import Evaluator
from vsl.lang.lexical import Lexer
from vsl.lang.parser import Parser


class Session:
    """Governs a VSL session, with control over the environment every program run in it shares."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, console=None, cmd_line=False):
        self.error_handler = error_handler

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.source = None        # text of path, if path is a file

        self.evaluator = Evaluator(console)

        if path != Session.SH_FILE:
            try:
                with open(path, "rb") as file:
                    self.source = file.read().decode("utf-8", errors="replace")
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.error_handler.register_file(path, self.source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @property
    def environment(self):
        return self.evaluator.environment

    def tokenize(self, source=None, path=None):
        """Returns the tokens of source (default: this session's file). Lexer warnings are reported, not raised."""
        source, path = self._resolve(source, path)

        self.error_handler.register_file(path, source)
        lexer = Lexer(source)
        tokens = lexer.tokenize()

        for warning in lexer.warnings:
            self.error_handler.warn(warning)

        return tokens

    def parse(self, source=None, path=None):
        """Returns the Program in source (default: this session's file)."""
        return Parser(self.tokenize(source, path)).parse()

    def execute(self, source=None, path=None):
        """Lexes, parses and evaluates source (default: this session's file) in this session's environment. Will raise
        any errors that are encountered.
        """
        source, path = self._resolve(source, path)

        program = self.parse(source, path)
        self.evaluator.evaluate(program)

        self.error_handler.remove_file(path)  # error was not raised

    def run(self):
        """Runs this session's file."""
        if self.source is None:
            raise GenericException("no file to run in command-line mode", diagnosis=False)
        self.execute()

    def _resolve(self, source, path):
        if source is None:
            source = self.source
        if path is None:
            path = self.path
        if source is None:
            raise GenericException("'{}' has no source text", path, diagnosis=False, internal=True)
        return source, path
