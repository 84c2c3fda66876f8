"""Handles interactive/command-line mode for the VSL interpreter. Uses cmd as backend."""

import cmd

from vsl.lang.error import LexException
from vsl.lang.lexical import TokenType, tokenize
from vsl.lang.session import Session


class Shell(cmd.Cmd):
    """VSL interpreter shell. Every line runs in the same session, so variables persist between lines."""
    intro = "VSL interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    OPENERS = (TokenType.LPAREN, TokenType.LBRACE)
    CLOSERS = (TokenType.RPAREN, TokenType.RBRACE)

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.sess.error_handler.fatal = False  # errors are reported, the shell keeps going

        self._tmp_line = ""

    @staticmethod
    def is_open(text):
        """Whether or not text has more opening than closing parentheses/braces, i.e. needs a continuation."""
        try:
            tokens = tokenize(text)
        except LexException:
            return False  # let the session report it

        depth = 0
        for token in tokens:
            if token.type in Shell.OPENERS:
                depth += 1
            elif token.type in Shell.CLOSERS:
                depth -= 1
        return depth > 0

    def default(self, line):
        """Executes arbitrary VSL statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line = self._tmp_line + line

            if Shell.is_open(line):
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line.strip():
                self.sess.execute(line, Session.SH_FILE)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg or self._tmp_line:
            return self.default(self.lastcmd)  # e.g. `help = 1;`

        self.stdout.write("Welcome to the VSL interpreter!\n\n"
                          "Statements are run as soon as they are complete and share one set of variables.\n"
                          "Try `let x = 2 + 3 * 4;` followed by `print(x);`. Builtins: read(), len(text),\n"
                          "substring(text, start, count). Type 'exit' to leave.\n")

    def emptyline(self):
        """Do not repeat previous command on empty line, but keep collecting a continued statement."""
        if self._tmp_line:
            self.default("")

    def do_EOF(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(self.lastcmd)

        self.stdout.write("\n")
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg or self._tmp_line:
            return self.default(self.lastcmd)
        return True
