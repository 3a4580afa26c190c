"""Session control for the minifunc language. Parses statements into expressions and evaluates them, either from a
program file or line by line from the interactive shell.

A program file is a sequence of expressions:

```
;; comments run to the end of the line
+(1, 1)
apply(func x => *(x, x),
      7)                ; a statement continues while its parentheses are unbalanced
```
"""

from minifunc.lang.error import GenericException
from minifunc.pure.parser import Parser


class Session:
    """Governs a minifunc session: the expressions waiting to be evaluated and the results that have not been read."""
    SH_FILE = "<in>"  # command-line interpreter filename
    COMMENT = ";;"

    def __init__(self, error_handler, path, cmd_line):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.to_exec = []  # list of (line num, statement, Expression) to evaluate
        self.results = []  # values that have been evaluated but not popped

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            stmts = []
            add_to_prev = False

            try:
                with open(path, "r") as file:
                    for line_num, line in enumerate(file):
                        __, add_to_prev = self.preprocess_line(line, line_num + 1, add_to_prev, stmts)
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            for stmt in stmts:
                self.add(*stmt)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, line_num, add_to_prev, stmts=None):
        """Preprocesses a line from a file or command-line. In command-line mode, stmts can be ignored (used to keep
        track of file's statements), but add_to_prev will indicate whether a line continuation is necessary. Returns
        updated value of line and add_to_prev.
        """
        if Session.COMMENT in line:
            line = line[:line.index(Session.COMMENT)]  # get rid of comments
        line = line.strip()

        if stmts is not None:
            if line and not add_to_prev:
                stmts.append((line, line_num))
            elif add_to_prev:
                prev, prev_num = stmts.pop()
                line = f"{prev} {line}" if line else prev
                stmts.append((line, prev_num))

        return line, line.count("(") > line.count(")")

    def add(self, stmt, line_num=None):
        """Parses every expression in stmt and queues them. Evaluation is delayed until run is called. Nothing is queued
        if any expression in stmt fails to parse.
        """
        self.error_handler.register_line(self.path, stmt, line_num)  # in case error is raised

        exprs = list(Parser(stmt).parse_all())
        self.to_exec.extend((line_num, stmt, expr) for expr in exprs)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Evaluates this session's queued expressions in order, appending their values to results. Will raise any
        errors that are encountered. In command-line mode, the rest of the queue is discarded on error.
        """
        try:
            while self.to_exec:
                line_num, stmt, expr = self.to_exec.pop(0)
                self.error_handler.register_line(self.path, stmt, line_num)

                self.results.append(expr.evaluate(self.error_handler.register_step))

                self.error_handler.remove_line(self.path)
        finally:
            if self.cmd_line:
                self.to_exec.clear()

    def pop(self):
        """Returns the oldest result that has not been popped yet."""
        return self.results.pop(0)
