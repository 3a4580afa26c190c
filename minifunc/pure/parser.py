"""Recursive-descent parser for the minifunc language.

```
<expr> ::= "T" | "F"
         | "!" <expr>
         | <binop> "(" <expr> "," <expr> ")"          ; <binop> is one of < = + - * / & |
         | "if" <expr> "then" <expr> "else" <expr>
         | "apply" "(" <expr> "," <expr> ")"
         | "func" <var> "=>" <expr>
         | <digit>+                                   ; unsigned 32-bit integer
         | <var>                                      ; single lowercase letter
```

Whitespace is skipped before every token, but not inside keywords ("ap ply" is not "apply").

`i`, `a` and `f` start both a Variable and a keyword. The parser looks at the character after them: `if` when it is `f`,
`apply` when it is `p`, `func` when it is `u`, otherwise the single letter is a Variable. This never backtracks, so
something like `ix` is the Variable `i` followed by unparsed input, and `fun` is a failed `func`.
"""

from minifunc.lang.error import ParseError
from minifunc.pure.expression import (Add, And, Apply, Divide, Equals, FALSE, Func, If, Int, LessThan, Multiply, Not,
                                      Or, Subtract, TRUE, Variable)


class Parser:
    """Cursor over a program. Each call to parse consumes exactly one expression, leaving anything after it (closing
    punctuation, sibling expressions) for the caller.
    """
    BINARY_OPS = {
        "<": LessThan,
        "=": Equals,
        "+": Add,
        "-": Subtract,
        "*": Multiply,
        "/": Divide,
        "&": And,
        "|": Or,
    }

    def __init__(self, program):
        self.program = program
        self.pos = 0

    @property
    def exhausted(self):
        """Whether or not only whitespace is left."""
        return not self.program[self.pos:].strip()

    def parse(self):
        """Parses the next expression. Raises a ParseError if there is nothing left to parse."""
        self.pop_whitespace()
        if self.peek() is None:
            raise self.error("Blank program")
        return self.parse_expr()

    def parse_all(self):
        """Yields expressions until the program is exhausted."""
        while not self.exhausted:
            yield self.parse()

    def parse_expr(self):
        self.pop_whitespace()
        char = self.pop()

        if char is None:
            raise self.error("Expected expression but reached end of program")
        elif char == "T":
            return TRUE
        elif char == "F":
            return FALSE
        elif char == "!":
            return Not(self.parse_expr())
        elif char in Parser.BINARY_OPS:
            return self.parse_binary_op(Parser.BINARY_OPS[char])

        elif char == "i" and self.peek() == "f":
            try:
                return self.parse_if()
            except ParseError as error:
                raise error.within("if")
        elif char == "a" and self.peek() == "p":
            try:
                return self.parse_apply()
            except ParseError as error:
                raise error.within("apply")
        elif char == "f" and self.peek() == "u":
            try:
                return self.parse_func()
            except ParseError as error:
                raise error.within("func")

        elif Parser.is_digit(char):
            return self.parse_int(char)
        elif Parser.is_var(char):
            return Variable(char)

        raise self.error("Unknown token '{}'", char, pos=self.pos - 1)

    def parse_binary_op(self, cls):
        self.pop_next_token("(")
        left = self.parse_expr()
        self.pop_next_token(",")
        right = self.parse_expr()
        self.pop_next_token(")")
        return cls(left, right)

    def parse_if(self):
        self.pop()  # known to be 'f'
        cond = self.parse_expr()
        self.pop_next_string("then")
        then = self.parse_expr()
        self.pop_next_string("else")
        otherwise = self.parse_expr()
        return If(cond, then, otherwise)

    def parse_apply(self):
        self.pop()  # known to be 'p'
        self.pop_string("ply")
        self.pop_next_token("(")
        func = self.parse_expr()
        self.pop_next_token(",")
        arg = self.parse_expr()
        self.pop_next_token(")")
        return Apply(func, arg)

    def parse_func(self):
        self.pop()  # known to be 'u'
        self.pop_string("nc")
        self.pop_whitespace()

        char = self.pop()
        if char is None:
            raise self.error("'func' expected Variable but reached end of program")
        elif not Parser.is_var(char):
            raise self.error("'func' expected Variable but found '{}'", char, pos=self.pos - 1)

        self.pop_next_string("=>")
        return Func(Variable(char), self.parse_expr())

    def parse_int(self, first_digit):
        start = self.pos - 1
        value = int(first_digit)
        while self.peek() is not None and Parser.is_digit(self.peek()):
            value = value * 10 + int(self.pop())

        if value > Int.MAX:
            raise self.error("Integer literal '{}' is out of range", self.program[start:self.pos], pos=start)
        return Int(value)

    def pop_next_string(self, expected):
        self.pop_whitespace()
        self.pop_string(expected)

    def pop_string(self, expected):
        for char in expected:
            self.pop_token(char)

    def pop_next_token(self, expected):
        self.pop_whitespace()
        self.pop_token(expected)

    def pop_token(self, expected):
        char = self.pop()
        if char is None:
            raise self.error("Expected '{}' but reached end of program", expected)
        elif char != expected:
            raise self.error("Expected '{}' but found '{}'", expected, char, pos=self.pos - 1)

    def pop_whitespace(self):
        while self.peek() is not None and self.peek().isspace():
            self.pos += 1

    def peek(self):
        """Returns the next unconsumed character, or None at the end of the program."""
        if self.pos < len(self.program):
            return self.program[self.pos]
        return None

    def pop(self):
        char = self.peek()
        if char is not None:
            self.pos += 1
        return char

    def error(self, msg, *args, pos=None):
        return ParseError(msg, self.program, self.pos if pos is None else pos, args)

    @staticmethod
    def is_var(char):
        return "a" <= char <= "z"

    @staticmethod
    def is_digit(char):
        return "0" <= char <= "9"


def parse(program):
    """Parses the first expression in program. Anything after it is ignored; use Parser.parse_all to read them all."""
    return Parser(program).parse()
