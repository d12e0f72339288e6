"""Session control for lcbind: one Session is one evaluation request, i.e. a set of declared inputs with their host
values plus an expression over them. Sessions keep no state between runs; every run parses, reduces and extracts
from scratch.

Inputs can be declared in the expression text itself with a header, as in

```
@input(a, b)
(Lx.Ly.y x) a b   ;; swap
```

lam reads such a header and takes the values of the declared inputs from the calling scope.
"""

import ast
import inspect
import re

from lcbind.lang.error import GenericException, LambdaSyntaxError, UnboundVariableError
from lcbind.lang.output import construct_output
from lcbind.pure.lexical import generate_tree, is_identifier
from lcbind.pure.reducer import NormalOrderReducer


HEADER = re.compile(r"\s*@(?P<decorator>\w*)\s*(?:\((?P<inputs>[^()]*)\))?")
LEADING_COMMENTS = re.compile(r"(?:\s*;;[^\n]*)*")


def split_header(source):
    """Splits source into (declared input names, expression). The header (and any ";;" comment lines before it) is
    blanked out rather than removed, so positions in the expression still match positions in source.
    """
    skip = LEADING_COMMENTS.match(source).end()
    if not source[skip:].lstrip().startswith("@"):
        return (), source

    match = HEADER.match(source, skip)
    decorator = match.group("decorator")
    if decorator != "input":
        start = match.start("decorator") - 1  # position of "@"
        msg = "'{}' has invalid decorator '{}'"
        raise LambdaSyntaxError(msg, (source, "@" + decorator), start=start, end=match.end("decorator"))

    inputs = match.group("inputs")
    if inputs is None:
        start = match.end("decorator")
        raise LambdaSyntaxError("'{}' expects @input(NAME, ...)", source, start=start, end=start + 1)

    declared = []
    offset = match.start("inputs")
    if inputs.strip():
        for name in inputs.split(","):
            start = offset + len(name) - len(name.lstrip())
            offset += len(name) + 1
            name = name.strip()

            if not is_identifier(name):
                msg = "'{}' declares invalid input '{}'"
                raise LambdaSyntaxError(msg, (source, name), start=start, end=start + max(len(name), 1))
            elif name in declared:
                msg = "'{}' declares input '{}' more than once"
                raise LambdaSyntaxError(msg, (source, name), start=start, end=start + len(name))
            declared.append(name)

    header = re.sub(r"[^\n]", " ", source[:match.end()])
    return tuple(declared), header + source[match.end():]


def parse_binding(arg):
    """Parses a NAME[=VALUE] command-line binding. VALUE is read as a Python literal if possible, else kept as a
    string; a bare NAME is bound to its own name.
    """
    name, sep, value = arg.partition("=")
    name = name.strip()
    if not is_identifier(name):
        raise LambdaSyntaxError("'{}' is not a valid input name", name, diagnosis=False)

    if not sep:
        return name, name
    try:
        return name, ast.literal_eval(value.strip())
    except (ValueError, SyntaxError):
        return name, value


def read_source(path):
    """Returns the contents of the file at path."""
    try:
        with open(path, "r", encoding="utf-8") as file:
            return file.read()
    except OSError:
        raise GenericException("'{}' could not be opened", path, diagnosis=False) from None


class Session:
    """Governs one evaluation: bindings (name: host value) declares the inputs, expr is the λ-term over them."""

    def __init__(self, bindings, expr, max_steps=None, timeout=None, error_handler=None):
        for name in bindings:
            if not is_identifier(name):
                raise LambdaSyntaxError("'{}' is not a valid input name", name, diagnosis=False)

        self.bindings = dict(bindings)  # insertion order is kept for diagnostics
        self.expr = expr
        self.max_steps = max_steps
        self.timeout = timeout
        self.error_handler = error_handler

        self.tree = None         # parsed λ-term
        self.normal_form = None  # beta normal form of self.tree
        self.steps = 0

    def run(self):
        """Parses, reduces and extracts self.expr. Returns the output value or raises a GenericException."""
        self.tree = generate_tree(self.expr, self.bindings)

        if self.error_handler is not None:
            for name in self.bindings:
                if name not in self.tree.free_vars:
                    self.error_handler.warn("input '{}' is never used in '{}'", (name, self.expr.strip()),
                                            diagnosis=False)

        reducer = NormalOrderReducer(self.tree, self.max_steps, self.timeout, self.error_handler)
        try:
            self.normal_form = reducer.beta_reduce()
        finally:
            self.steps = reducer.steps

        return construct_output(self.normal_form, self.bindings)

    def __repr__(self):
        return f"Session(bindings={self.bindings!r}, expr={self.expr!r})"


def evaluate(source, bindings=None, max_steps=None, timeout=None, error_handler=None):
    """Evaluates source (with an optional @input header) against bindings. Every input declared in the header must
    have a value in bindings.
    """
    declared, expr = split_header(source)
    bindings = dict(bindings or {})

    for name in declared:
        if name not in bindings:
            raise UnboundVariableError("input '{}' is declared, but has no value", name, diagnosis=False,
                                       identifier=name)

    return Session(bindings, expr, max_steps, timeout, error_handler).run()


def lam(source, max_steps=None, timeout=None, **values):
    """Evaluates source, taking the value of every input declared in its @input header from values, else from the
    caller's locals, else from the caller's globals. Keyword values are also declared as inputs.

    max_steps and timeout are options, never inputs: an input named timeout can't be passed as a keyword value, so
    declare it in the header and define it in the calling scope instead. (max_steps is not a valid input name.)

    >>> a, b = "aaa", "bbb"
    >>> lam("@input(a, b) (Lx.Ly.y x) a b")
    ('bbb', 'aaa')
    """
    declared, expr = split_header(source)

    frame = inspect.currentframe().f_back
    try:
        bindings = {}
        for name in declared:
            if name in values:
                bindings[name] = values[name]
            elif name in frame.f_locals:
                bindings[name] = frame.f_locals[name]
            elif name in frame.f_globals:
                bindings[name] = frame.f_globals[name]
            else:
                raise UnboundVariableError("input '{}' is declared, but is not defined in the calling scope", name,
                                           diagnosis=False, identifier=name)
    finally:
        del frame

    for name, value in values.items():
        bindings.setdefault(name, value)

    return Session(bindings, expr, max_steps, timeout).run()
