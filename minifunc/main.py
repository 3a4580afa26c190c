"""Runs minifunc programs from a file or in command-line mode. Also uses the error handling context manager. Called from
the minifunc console script.
"""

import argparse
import sys

from minifunc.lang.error import ErrorHandler
from minifunc.lang.session import Session
from minifunc.lang.shell import Shell


def main(argv=None):
    """Runs minifunc interpreter."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="minifunc")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--trace", action="store_true", help="print every beta reduction while evaluating")
        parser.add_argument("--tree", action="store_true", help="print syntax trees instead of evaluating")
        parser.add_argument("--recursion-limit", type=int, help="raise Python's recursion limit for deep programs")
        args = parser.parse_args(argv)

        error_handler.verbose = args.trace
        if args.recursion_limit is not None:
            sys.setrecursionlimit(args.recursion_limit)

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False)

            if args.tree:
                for __, __, expr in sess.to_exec:
                    print(expr.display())
                return

            sess.run()

            for result in sess.results:
                print(result)

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
