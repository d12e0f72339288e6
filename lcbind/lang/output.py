"""Conversion of a beta normal form into a host value.

Only normal forms built from applications of inputs are accepted:

```
<output> ::= "(" <output> "," <output> ")"   ; Application(function, argument) -> (function, argument)
           | <input>                         ; Variable -> its host value
```

so `b a` becomes `(b, a)`, `b a c` becomes `((b, a), c)` and a lone `a` is just the value of `a`.
"""

from lcbind.lang.error import InternalBindingError, ShapeError
from lcbind.pure.term import Abstraction, Application, Variable


def construct_output(tree, bindings):
    """Returns tree as nested pairs of the values in bindings. Raises ShapeError if tree contains an Abstraction."""

    def _leaf(node):
        if isinstance(node, Variable):
            try:
                return bindings[node.name]
            except KeyError:
                msg = "expression reduction contains '{}', which has no bound value"
                raise InternalBindingError(msg, node.name, identifier=node.name) from None

        elif isinstance(node, Abstraction):
            msg = "expression reduced to '{}', which is not a valid output ('{}' is an abstraction)"
            raise ShapeError(msg, (tree, node), diagnosis=False, term=node)

        raise TypeError(f"expected a LambdaTerm, got '{type(node).__name__}'")

    def _construct(node):
        arguments = []
        while isinstance(node, Application):  # left spine, so long chains like a b c ... don't recurse
            arguments.append(node.argument)
            node = node.function

        output = _leaf(node)
        for argument in reversed(arguments):
            output = output, _construct(argument)
        return output

    return _construct(tree)
