"""Line-oriented console I/O used by the evaluator: print writes through write_line, read() through read_line."""

import sys


class Console:
    """Reads lines from stdin and writes lines to stdout. Either stream may be any text stream; None means the
    process's sys.stdin/sys.stdout at the time of the call.
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin
        self.stdout = stdout

    def read_line(self):
        """Returns the next input line without its terminator, or None at end of input."""
        stream = self.stdin if self.stdin is not None else sys.stdin
        line = stream.readline()
        if not line:
            return None

        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        return line

    def write_line(self, text):
        stream = self.stdout if self.stdout is not None else sys.stdout
        print(text, file=stream)
