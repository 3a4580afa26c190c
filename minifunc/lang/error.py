"""Error handling for the minifunc language. Only GenericExceptions should be encountered during running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Integer overflow/underflow and division by zero are reported as EvalErrors. Exhausting the Python call stack is not: a
RecursionError is left to propagate out of the evaluator and is only turned into a message here, at the outermost
layer.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error message so that it can be used to throw a minifunc error. msg is plain text; the expr
    snippets are only bolded when ErrorHandler prints the error.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.template = msg
        self.exprs = list(exprs)
        self.msg = msg.format(*exprs)
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.msg)

    def highlighted(self):
        """Returns msg with its expr snippets bolded."""
        return self.template.format(*(colored(expr, attrs=["bold"]) for expr in self.exprs))

    def __str__(self):
        return self.msg


class ParseError(GenericException):
    """Raised by the parser. expr is the whole program and start is the offset of the offending character."""

    def __init__(self, msg, program, pos, args=()):
        super().__init__(msg, list(args) if args else None)
        self.expr = program
        self.start = pos
        self.end = pos + 1
        self.pos = pos

    def within(self, keyword):
        """Prefixes msg with the keyword production that was being parsed. Returns self so it can be re-raised."""
        self.template = f"Failed to parse '{keyword}': {self.template}"
        self.msg = f"Failed to parse '{keyword}': {self.msg}"
        self.args = (self.msg,)
        return self


class EvalError(GenericException):
    """Raised by the evaluator when an operation is given a value of the wrong kind (or, for arithmetic, an operand
    that would leave the unsigned 32-bit range). context is the Expression that could not be evaluated.
    """
    KINDS = ("integer", "boolean", "func", "apply", "if", "arithmetic")

    def __init__(self, kind, msg, context):
        if kind not in EvalError.KINDS:
            raise ValueError(f"{kind} not a valid EvalError kind")
        super().__init__(msg + ": '{}'", str(context))
        self.kind = kind
        self.context = context


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom minifunc errors. Also reports
    evaluation steps when verbose.
    """
    ERROR = "red"
    STEP = "cyan"

    def __init__(self, fatal=True, verbose=False):
        self.fatal = fatal
        self.verbose = verbose
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    def register_step(self, step, expr):
        """Prints an evaluation step if verbose. Passed to Expression.evaluate as its trace callback."""
        if self.verbose:
            print(colored(f"  {step} ", ErrorHandler.STEP, attrs=["bold"]) + str(expr))

    @staticmethod
    def diagnose(error):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.highlighted()
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.remove_line(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded (try --recursion-limit)", diagnosis=False))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
