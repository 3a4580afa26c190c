"""minifunc interpreter.

minifunc is a small expression language: booleans, unsigned integers, prefix arithmetic/relational/boolean operators,
and untyped lambda calculus (func, apply) plus a conditional. Basic program flow:
    1. Parser: reads one expression at a time from the source text by recursive descent
        - For the grammar, see minifunc/pure/parser.py
    2. Evaluator: reduces the syntax tree to a value (Int, Boolean or Func) with call-by-value semantics
        - Functions are applied by substituting into their body, see minifunc/pure/expression.py
    3. Renderer: str() of the value is the output

Parse and evaluation errors are ParseErrors and EvalErrors (minifunc/lang/error.py).
"""

from minifunc.pure.parser import parse


def interpret(program, trace=None):
    """Parses and evaluates the first expression in program and returns the rendered value."""
    return str(parse(program).evaluate(trace))
