"""Abstract syntax tree for the minifunc language, along with its rendering, substitution and evaluation.

The `pure` directory contains everything that is side-effect free: the tree, the parser that builds it and the
evaluator that reduces it. Nothing here prints or reads files; see `lang` for that.

Every syntactic form is a subclass of Expression:

```
Variable        x                       ; a single lowercase letter
Int             123                     ; unsigned 32-bit integer
Boolean         T | F
LessThan ...    <(e, e) =(e, e)         ; integer comparison -> Boolean
Add ...         +(e, e) -(e, e) *(e, e) /(e, e)
And, Or         &(e, e) |(e, e)         ; boolean connectives
Not             !e
Func            func x => e             ; first node must be a Variable
Apply           apply(e, e)             ; first node must evaluate to a Func
If              if e then e else e
```

Evaluation is call-by-value, and beta reduction is done by rewriting the tree: there is no environment. A Func is a value
whose body has not been evaluated. Applying it evaluates the argument, substitutes it for every free occurrence of the
parameter in the body (see Expression.sub) and evaluates the result.

Substitution stops at a Func that rebinds the same Variable (shadowing), but it does not alpha-convert: a free variable
inside the argument can still be captured by an inner Func with the same parameter, e.g.
`apply(func y => func x => y, x)` evaluates to `func x => x`.

Evaluation and substitution recurse on the structure of the tree, so very deep or non-terminating programs exhaust the
Python call stack and raise RecursionError.
"""

from abc import abstractmethod, ABC
from copy import deepcopy

from minifunc.lang.error import EvalError


class Expression(ABC):
    """Superclass of every node in the syntax tree. Nodes are immutable: sub and evaluate always build new trees."""

    def __init__(self, *nodes):
        self.nodes = tuple(nodes)
        self._cls = type(self).__name__

    @abstractmethod
    def evaluate(self, trace=None):
        """This method should reduce self to a value and return it, raising an EvalError if an operation is given an
        operand of the wrong kind. trace, if given, is called as trace(step, expr) around every beta reduction.
        """

    @abstractmethod
    def sub(self, var, new_term):
        """Given a Variable var, this method should return a copy of self in which every free occurrence of var has been
        replaced by new_term.
        """

    @abstractmethod
    def __str__(self):
        """Canonical rendering of self, e.g. '1 + 1' or 'func x => x'."""

    @property
    def is_value(self):
        """Whether or not self is fully evaluated (Int, Boolean or Func)."""
        return False

    def rebuild(self, nodes):
        """Returns a new node of the same type as self with nodes as its children."""
        return type(self)(*nodes)

    def display(self, indents=0):
        """Recursively displays the syntax tree with readable format.

        Format:
        <Expression>('<expr>', nodes=[
            <Expression>('<expr>', nodes=[
                ...
                <Expression>('<expr>')  # <-- if nodes is empty
            ])
        ])
        """
        result = f"{'    ' * indents}{self._cls}('{self}'"
        children = [node for node in self.nodes if isinstance(node, Expression)]
        if children:
            result += ", nodes=["
            for node in children:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __repr__(self):
        return f"{self._cls}('{self}')"

    def __eq__(self, other):
        return type(other) is type(self) and self.nodes == other.nodes

    def __hash__(self):
        return hash((self._cls, self.nodes))


class Variable(Expression):
    """Identifier reference. Evaluates to itself, so a free Variable is a legitimate result."""

    def __init__(self, char):
        if not isinstance(char, str) or len(char) != 1 or not "a" <= char <= "z":
            raise ValueError(f"{char!r} not a valid Variable")
        super().__init__(char)
        self.char = char

    def evaluate(self, trace=None):
        return self

    def sub(self, var, new_term):
        if self == var:
            return deepcopy(new_term)  # each occurrence gets its own copy
        return self

    def __str__(self):
        return self.char


class Int(Expression):
    """Unsigned 32-bit integer."""
    MAX = 2 ** 32 - 1

    def __init__(self, value):
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError("only integers supported")
        if not 0 <= value <= Int.MAX:
            raise ValueError("only unsigned 32-bit integers supported")
        super().__init__(value)
        self.value = value

    def evaluate(self, trace=None):
        return self

    def sub(self, var, new_term):
        return self

    def __str__(self):
        return str(self.value)

    @property
    def is_value(self):
        return True


class Boolean(Expression):
    """T or F. Use the TRUE and FALSE constants rather than instantiating."""

    def __init__(self, value):
        if not isinstance(value, bool):
            raise ValueError("only bools supported")
        super().__init__(value)
        self.value = value

    def evaluate(self, trace=None):
        return self

    def sub(self, var, new_term):
        return self

    def __str__(self):
        return "T" if self.value else "F"

    @property
    def is_value(self):
        return True


TRUE = Boolean(True)
FALSE = Boolean(False)


class BinaryOp(Expression):
    """Operator applied to two operands, written as <symbol>(left, right)."""
    symbol = None

    def __init__(self, left, right):
        super().__init__(left, right)

    @property
    def left(self):
        return self.nodes[0]

    @property
    def right(self):
        return self.nodes[1]

    def sub(self, var, new_term):
        return self.rebuild(node.sub(var, new_term) for node in self.nodes)

    def __str__(self):
        return f"{self.left} {self.symbol} {self.right}"


class IntegerOp(BinaryOp):
    """Binary operator over two Ints. Both operands are evaluated left to right before operate is called."""

    def evaluate(self, trace=None):
        left, right = self.left.evaluate(trace), self.right.evaluate(trace)
        if not isinstance(left, Int) or not isinstance(right, Int):
            raise EvalError("integer", f"Integer operation '{self.symbol}(e,e)' given non-integer", self)
        return self.operate(left.value, right.value)

    @abstractmethod
    def operate(self, left, right):
        """Returns the result of the operator on two python ints, wrapped in an Expression."""

    def checked(self, value):
        """Returns Int(value), raising an EvalError if value is outside the unsigned 32-bit range."""
        if value < 0:
            raise EvalError("arithmetic", f"Integer operation '{self.symbol}(e,e)' underflowed", self)
        if value > Int.MAX:
            raise EvalError("arithmetic", f"Integer operation '{self.symbol}(e,e)' overflowed", self)
        return Int(value)


class LessThan(IntegerOp):
    symbol = "<"

    def operate(self, left, right):
        return TRUE if left < right else FALSE


class Equals(IntegerOp):
    symbol = "="

    def operate(self, left, right):
        return TRUE if left == right else FALSE


class Add(IntegerOp):
    symbol = "+"

    def operate(self, left, right):
        return self.checked(left + right)


class Subtract(IntegerOp):
    symbol = "-"

    def operate(self, left, right):
        return self.checked(left - right)


class Multiply(IntegerOp):
    symbol = "*"

    def operate(self, left, right):
        return self.checked(left * right)


class Divide(IntegerOp):
    """Truncating division."""
    symbol = "/"

    def operate(self, left, right):
        if right == 0:
            raise EvalError("arithmetic", "Integer operation '/(e,e)' divided by zero", self)
        return Int(left // right)


class BooleanOp(BinaryOp):
    """Binary operator over two Booleans. Both operands are always evaluated: there is no short-circuiting."""

    def evaluate(self, trace=None):
        left, right = self.left.evaluate(trace), self.right.evaluate(trace)
        result = self.operate(left, right)
        if result is None:
            raise EvalError("boolean", f"Boolean operation '{self.symbol}(e,e)' given non-boolean", self)
        return result

    @abstractmethod
    def operate(self, left, right):
        """Returns TRUE, FALSE or None if the operands do not determine a result."""


class And(BooleanOp):
    """F as soon as either operand is F, even if the other one is not a Boolean."""
    symbol = "&"

    def operate(self, left, right):
        if left == FALSE or right == FALSE:
            return FALSE
        if left == TRUE and right == TRUE:
            return TRUE


class Or(BooleanOp):
    """T as soon as either operand is T, even if the other one is not a Boolean."""
    symbol = "|"

    def operate(self, left, right):
        if left == TRUE or right == TRUE:
            return TRUE
        if left == FALSE and right == FALSE:
            return FALSE


class Not(Expression):

    def __init__(self, expr):
        super().__init__(expr)

    @property
    def expr(self):
        return self.nodes[0]

    def evaluate(self, trace=None):
        value = self.expr.evaluate(trace)
        if not isinstance(value, Boolean):
            raise EvalError("boolean", "Boolean operation '!e' given non-boolean", self)
        return FALSE if value.value else TRUE

    def sub(self, var, new_term):
        return Not(self.expr.sub(var, new_term))

    def __str__(self):
        return f"!{self.expr}"


class Func(Expression):
    """Function abstraction. The parameter is checked to be a Variable when parsed and again when evaluated, but the
    constructor itself accepts any Expression.
    """

    def __init__(self, param, body):
        super().__init__(param, body)

    @property
    def param(self):
        return self.nodes[0]

    @property
    def body(self):
        return self.nodes[1]

    def evaluate(self, trace=None):
        param = self.param.evaluate(trace)
        if not isinstance(param, Variable):
            raise EvalError("func", "Variable operation 'func' given non-variable", self)
        return Func(param, self.body)  # body is not evaluated until applied

    def sub(self, var, new_term):
        if self.param == var:
            return self  # shadowed
        return Func(self.param, self.body.sub(var, new_term))

    def __str__(self):
        return f"func {self.param} => {self.body}"

    @property
    def is_value(self):
        return True


class Apply(Expression):

    def __init__(self, func, arg):
        super().__init__(func, arg)

    @property
    def func(self):
        return self.nodes[0]

    @property
    def arg(self):
        return self.nodes[1]

    def evaluate(self, trace=None):
        func = self.func.evaluate(trace)
        if not isinstance(func, Func):
            raise EvalError("apply", "'func' operation 'apply' given non-'func'", self)
        arg = self.arg.evaluate(trace)

        if trace is not None:
            trace("β", Apply(func, arg))
        reduced = func.body.sub(func.param, arg)
        if trace is not None:
            trace("→", reduced)

        return reduced.evaluate(trace)

    def sub(self, var, new_term):
        return Apply(self.func.sub(var, new_term), self.arg.sub(var, new_term))

    def __str__(self):
        return f"{self.func} ({self.arg})"


class If(Expression):
    """Conditional. Only the branch that is chosen gets evaluated."""

    def __init__(self, cond, then, otherwise):
        super().__init__(cond, then, otherwise)

    @property
    def cond(self):
        return self.nodes[0]

    @property
    def then(self):
        return self.nodes[1]

    @property
    def otherwise(self):
        return self.nodes[2]

    def evaluate(self, trace=None):
        cond = self.cond.evaluate(trace)
        if not isinstance(cond, Boolean):
            raise EvalError("if", "Boolean condition in 'if' given non-boolean", self)
        return (self.then if cond.value else self.otherwise).evaluate(trace)

    def sub(self, var, new_term):
        return If(*(node.sub(var, new_term) for node in self.nodes))

    def __str__(self):
        return f"if {self.cond} then {self.then} else {self.otherwise}"


def evaluate(expr, trace=None):
    """Reduces expr to a value. See Expression.evaluate."""
    return expr.evaluate(trace)
