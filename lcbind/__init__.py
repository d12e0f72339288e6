"""lcbind: reduce a small lambda calculus expression over named host values and get the result back as nested pairs.

Basic program flow:
    1. Parser: tokenizes the expression and builds an immutable λ-term, checking that every free variable is a
       declared input (see lcbind/pure/lexical.py)
    2. Reducer: normal-order beta reduction to normal form, bounded by a maximum number of steps
       (see lcbind/pure/reducer.py)
    3. Output: the normal form, which must be an application of inputs, becomes nested pairs of the inputs' values
       (see lcbind/lang/output.py)

>>> evaluate("(Lx.Ly.y x) a b", {"a": 1, "b": 2})
(2, 1)
"""

from lcbind.lang.error import (
    DivergenceError, GenericException, InternalBindingError, LambdaSyntaxError, ShapeError, UnboundVariableError
)
from lcbind.lang.session import Session, evaluate, lam
from lcbind.pure.lexical import generate_tree
from lcbind.pure.reducer import NormalOrderReducer
from lcbind.pure.term import Abstraction, Application, Variable, substitute

__all__ = [
    "Abstraction", "Application", "DivergenceError", "GenericException", "InternalBindingError", "LambdaSyntaxError",
    "NormalOrderReducer", "Session", "ShapeError", "UnboundVariableError", "Variable", "evaluate", "generate_tree",
    "lam", "substitute",
]
