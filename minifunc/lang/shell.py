"""Handles interactive/command-line mode for the minifunc interpreter. Uses cmd as backend."""

import cmd

from minifunc.lang.error import GenericException
from minifunc.lang.session import Session
from minifunc.pure.parser import Parser


class Shell(cmd.Cmd):
    """minifunc interpreter shell."""
    intro = "minifunc interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self.line_num = 0

    def default(self, line):
        """Evaluates arbitrary minifunc expression(s)."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if self._tmp_line:
                line = f"{self._tmp_line} {line}"
            line, add_to_prev = self.sess.preprocess_line(line, self.line_num, bool(self._tmp_line))

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.add(line, self.line_num)
                    self.sess.run()
                finally:
                    while self.sess.results:
                        print(self.sess.pop())

    def do_tree(self, arg):
        """Prints the syntax tree of an expression without evaluating it: tree EXPR"""
        with self.sess.error_handler:
            parser = Parser(arg)
            print(parser.parse().display())
            for expr in parser.parse_all():
                print(expr.display())

    def do_trace(self, arg):
        """Turns printing of evaluation steps on or off: trace [on|off]"""
        with self.sess.error_handler:
            arg = arg.strip()
            if arg not in ("", "on", "off"):
                raise GenericException("trace expects 'on' or 'off', got '{}'", arg, diagnosis=False)

            if arg:
                self.sess.error_handler.verbose = arg == "on"
            print(f"trace is {'on' if self.sess.error_handler.verbose else 'off'}")

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return super().do_help(arg)
        print("Welcome to the minifunc interpreter!\n\n"
              "minifunc is a small expression language: integers, booleans, prefix operators \n"
              "like '+(1, 2)', 'if c then a else b', and functions with 'func x => e' and \n"
              "'apply(f, e)'. Variables are single lowercase letters.\n\n"
              "Try it out by typing 'apply(func x => *(x, x), 7)'. Type 'tree EXPR' to see \n"
              "how an expression is parsed and 'trace on' to watch it being reduced.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
