"""Normal-order beta reduction.

Each step contracts the leftmost outermost redex, i.e. the first Application-of-Abstraction met by a pre-order,
left-to-right walk of the tree. Normal order is the only strategy that reaches a beta normal form whenever one exists,
and it fixes which input ends up in which position of the result (see lang/output.py).

Source: http://pages.cs.wisc.edu/~horwitz/CS704-NOTES/1.LAMBDA-CALCULUS.html#NOR
"""

import time

from lcbind.lang.error import DivergenceError
from lcbind.pure.term import substitute


def left_outer_redex(tree):
    """Returns the leftmost outermost redex of tree and the index path to it, or (None, None) if tree is in beta
    normal form.
    """
    stack = [(tree, [])]
    while stack:
        node, path = stack.pop()
        if node.is_redex:
            return node, path
        for idx in reversed(range(len(node.nodes))):  # leftmost child is visited first
            stack.append((node.nodes[idx], path + [idx]))
    return None, None


def contract(redex):
    """(λx.M) N -> M[x := N]"""
    abstraction, new_term = redex.nodes
    return substitute(abstraction.body, abstraction.bound, new_term)


class NormalOrderReducer:
    """Implements step-bounded normal-order beta reduction of a syntax tree.

    max_steps bounds the number of beta steps; timeout (seconds, optional) additionally bounds wall-clock time. Both
    raise DivergenceError. If an ErrorHandler is given, every step is registered with it.
    """
    STEP_LIMIT = 1000

    def __init__(self, tree, max_steps=None, timeout=None, error_handler=None):
        self.tree = tree
        self.max_steps = NormalOrderReducer.STEP_LIMIT if max_steps is None else max_steps
        self.timeout = timeout
        self.error_handler = error_handler

        if self.max_steps < 0:
            raise ValueError("max_steps must be non-negative")

        self.steps = 0
        self.reduced = False

    def step(self):
        """Contracts the leftmost outermost redex of self.tree. Returns False if self.tree was already normal."""
        redex, redex_path = left_outer_redex(self.tree)
        if redex_path is None:
            return False

        self.tree = self.tree.set(redex_path, contract(redex))
        self.steps += 1

        if self.error_handler is not None:
            self.error_handler.register_step("β", self.tree)
        return True

    def beta_reduce(self):
        """Reduces self.tree to beta normal form and returns it."""
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        try:
            while True:
                if self.steps >= self.max_steps:
                    if left_outer_redex(self.tree)[1] is None:
                        break
                    raise DivergenceError("'{}' has no beta normal form within {} steps", (self.tree, self.max_steps),
                                          diagnosis=False, steps=self.steps, term=self.tree)

                if deadline is not None and time.monotonic() > deadline:
                    raise DivergenceError("'{}' has no beta normal form within {} seconds", (self.tree, self.timeout),
                                          diagnosis=False, steps=self.steps, term=self.tree)

                if not self.step():
                    break

        except RecursionError:
            raise DivergenceError("beta normal form might exist, but maximum recursion depth exceeded after {} steps",
                                  str(self.steps), diagnosis=False, steps=self.steps, term=self.tree) from None

        self.reduced = True
        return self.tree

    def __repr__(self):
        return f"NormalOrderReducer({self.tree!r})"

    def __str__(self):
        return str(self.tree)


def reduce(tree, max_steps=None, timeout=None):
    """Convenience wrapper: returns the beta normal form of tree."""
    return NormalOrderReducer(tree, max_steps, timeout).beta_reduce()
