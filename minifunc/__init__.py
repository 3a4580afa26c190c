from minifunc.interpreter import interpret
from minifunc.pure.expression import evaluate
from minifunc.pure.parser import parse
