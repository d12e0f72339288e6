"""Pure lambda calculus terms: the immutable syntax tree that the reducer rewrites.

Formally, the terms handled here are

```
<λ-term> ::= <var>                      ; "variable"
           | "λ" <var> "." <λ-term>     ; "abstraction" (exactly one bound variable per abstraction)
           | <λ-term> <λ-term>          ; "application" (associating by left: abcd = (((a b) c) d))
```

Terms are frozen: every operation that "changes" a term returns a new one, sharing any subtree it did not touch.
Bound variables keep their names. Substitution is capture-avoiding: when a binder would capture a free variable of
the substituted term, the binder is renamed to a subscripted name (x -> x₁). Subscripts are never valid surface
identifiers, so a renamed binder can never collide with a declared input.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from functools import cached_property


SUBS = ["₀", "₁", "₂", "₃", "₄", "₅", "₆", "₇", "₈", "₉"]


def subscript(var, num):
    """Returns var with subscript of num."""
    return var + "".join(SUBS[int(digit)] for digit in str(num))


def split(name):
    """Splits name into var and subscript (-1 if there is none)."""
    digits = []
    while name and name[-1] in SUBS:
        digits.insert(0, str(SUBS.index(name[-1])))
        name = name[:-1]
    return name, int("".join(digits)) if digits else -1


def fresh_name(name, used):
    """Returns the next subscripted variant of name that isn't in used."""
    var, num = split(name)
    num = max(num, 0) + 1
    while subscript(var, num) in used:
        num += 1
    return subscript(var, num)


class LambdaTerm(ABC):
    """Superclass of Variable, Abstraction and Application."""

    @property
    @abstractmethod
    def nodes(self):
        """Child terms, left to right. Paths used by the reducer index into this tuple."""

    @abstractmethod
    def with_nodes(self, *nodes):
        """Returns a copy of this term with its children replaced by nodes."""

    @abstractmethod
    def sub(self, var, new_term):
        """Given a redex (λvar.M) new_term, returns M with every free occurrence of var replaced by new_term. Never
        mutates self or new_term.
        """

    @abstractmethod
    def debruijn(self, scope=()):
        """Nameless view of this term. Bound variables become their binder depth (0 = innermost), free variables
        keep their names. scope is the tuple of enclosing binders, innermost first.
        """

    @property
    def free_vars(self):
        """Frozen set of the names occurring free in this term."""
        if "_free_vars" not in self.__dict__:
            # fill uncached subterm caches children first, so deep trees don't exhaust the stack
            pending, order = [self], []
            while pending:
                node = pending.pop()
                if "_free_vars" not in node.__dict__:
                    order.append(node)
                    pending.extend(node.nodes)
            for node in reversed(order):
                node._free_vars
        return self._free_vars

    @property
    def is_redex(self):
        """Only an Application whose left child is an Abstraction can be contracted."""
        return False

    @property
    def tokenizable(self):
        """Whether this term needs parentheses when it appears as an argument."""
        return True

    def alpha_equals(self, other):
        """Whether or not two LambdaTerms are equal up to the renaming of bound variables."""
        return isinstance(other, LambdaTerm) and self.debruijn() == other.debruijn()

    def get(self, idxs):
        """Gets node at positions specified by idxs. idxs=[] will return self."""
        node = self
        for idx in idxs:
            node = node.nodes[idx]
        return node

    def set(self, idxs, new_node):
        """Returns a copy of self with the node at idxs replaced by new_node. idxs=[] returns new_node."""
        if not idxs:
            return new_node

        this, *others = idxs
        nodes = list(self.nodes)
        nodes[this] = nodes[this].set(others, new_node)
        return self.with_nodes(*nodes)

    def __str__(self):
        return self.expr


@dataclass(frozen=True)
class Variable(LambdaTerm):
    """Variable in lambda calculus. start/end locate the variable in the parsed text and are ignored by ==."""
    name: str
    start: int = field(default=-1, compare=False, repr=False)
    end: int = field(default=-1, compare=False, repr=False)

    @property
    def nodes(self):
        return ()

    def with_nodes(self, *nodes):
        return self

    @cached_property
    def _free_vars(self):
        return frozenset([self.name])

    def sub(self, var, new_term):
        if self.name == var:
            return new_term
        return self

    def debruijn(self, scope=()):
        if self.name in scope:
            return scope.index(self.name)
        return self.name

    @property
    def tokenizable(self):
        return False

    @property
    def expr(self):
        return self.name


@dataclass(frozen=True)
class Abstraction(LambdaTerm):
    """Abstraction binding exactly one variable: λbound.body"""
    bound: str
    body: LambdaTerm

    @property
    def nodes(self):
        return (self.body,)

    def with_nodes(self, body):
        if body is self.body:
            return self
        return Abstraction(self.bound, body)

    @cached_property
    def _free_vars(self):
        return self.body.free_vars - {self.bound}

    def sub(self, var, new_term):
        if var == self.bound or var not in self.body.free_vars:
            return self

        bound, body = self.bound, self.body
        if bound in new_term.free_vars:
            # rename the binder before it can capture a free variable of new_term
            bound = fresh_name(bound, new_term.free_vars | body.free_vars | {var})
            body = body.sub(self.bound, Variable(bound))

        return Abstraction(bound, body.sub(var, new_term))

    def rename(self, new_bound):
        """Alpha conversion: returns an equivalent Abstraction binding new_bound. new_bound must not be free in body.
        """
        if new_bound != self.bound and new_bound in self.body.free_vars:
            raise ValueError(f"'{new_bound}' is free in '{self.body}' and would be captured")
        return Abstraction(new_bound, self.body.sub(self.bound, Variable(new_bound)))

    def debruijn(self, scope=()):
        return ("λ", self.body.debruijn((self.bound,) + scope))

    @property
    def expr(self):
        return f"λ{self.bound}.{self.body.expr}"


@dataclass(frozen=True)
class Application(LambdaTerm):
    """Application of function to argument."""
    function: LambdaTerm
    argument: LambdaTerm

    @property
    def nodes(self):
        return (self.function, self.argument)

    def with_nodes(self, function, argument):
        if function is self.function and argument is self.argument:
            return self
        return Application(function, argument)

    @cached_property
    def _free_vars(self):
        return self.function.free_vars | self.argument.free_vars

    def sub(self, var, new_term):
        return self.with_nodes(self.function.sub(var, new_term), self.argument.sub(var, new_term))

    def debruijn(self, scope=()):
        return (self.function.debruijn(scope), self.argument.debruijn(scope))

    @property
    def is_redex(self):
        return isinstance(self.function, Abstraction)

    @property
    def expr(self):
        node, arguments = self, []
        while isinstance(node, Application):  # a b c = ((a b) c), so walk down the left spine
            arguments.append(node.argument)
            node = node.function

        function = node.expr
        if isinstance(node, Abstraction):
            function = f"({function})"

        parts = [function]
        for argument in reversed(arguments):
            parts.append(f"({argument.expr})" if argument.tokenizable else argument.expr)
        return " ".join(parts)


def substitute(target, name, replacement):
    """Capture-avoiding substitution of replacement for every free occurrence of name in target."""
    return target.sub(name, replacement)


def apply(*terms):
    """Left-associated application of terms: apply(a, b, c) == ((a b) c)."""
    if not terms:
        raise ValueError("apply expects at least one term")

    result, *rest = terms
    for term in rest:
        result = Application(result, term)
    return result
