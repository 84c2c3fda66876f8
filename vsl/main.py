"""VSL interpreter: runs .vsl files, or lines typed in command-line mode. Also uses the error handling context manager.
Installed as the `vsl` executable.

Basic program flow:
    1. Lexer (vsl/lang/lexical.py): source text -> tokens, ending in a single EOF token
    2. Parser (vsl/lang/parser.py): tokens -> Program, by recursive descent
    3. Evaluator (vsl/lang/evaluator.py): walks the Program, executing statements against a single environment

The first lex/parse/runtime error aborts the run with exit status 1.
"""

import argparse

from vsl.lang.error import ErrorHandler
from vsl.lang.session import Session
from vsl.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="vsl", description="Tree-walking interpreter for the VSL language.")
    parser.add_argument("file", help="file to interpret and run", nargs="?")
    parser.add_argument("-i", "--interactive", action="store_true",
                        help="go to command-line mode (after running file, in the same session, if given)")

    dumps = parser.add_mutually_exclusive_group()
    dumps.add_argument("--tokens", action="store_true", help="print the tokens of file instead of running it")
    dumps.add_argument("--ast", action="store_true", help="print the syntax tree of file instead of running it")
    return parser


def main():
    """Runs the VSL interpreter. Called from the vsl executable script."""
    with ErrorHandler() as error_handler:
        parser = build_parser()
        args = parser.parse_args()

        if args.file is None and (args.tokens or args.ast):
            parser.error("--tokens/--ast require a file")

        if args.file is None and not args.interactive:
            parser.print_usage()
            return

        sess = Session(error_handler, args.file or Session.SH_FILE, cmd_line=args.file is None)

        if args.file is not None:
            if args.tokens:
                for token in sess.tokenize():
                    print(f"{token.position}\t{token!r}")
            elif args.ast:
                print(sess.parse().display())
            else:
                sess.run()

        if args.interactive:
            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
