"""Pure lambda calculus token generator and parser.

The `pure` directory contains pure lambda calculus AST generation and reduction- the host-facing pieces (input
declarations, result extraction, error reporting) live in `lang`.

Formally, the accepted grammar is

```
<expr>        ::= <atom>+                      ; "application", associating by left: a b c = ((a b) c)
<atom>        ::= <var>
                | <abstraction>
                | "(" <expr> ")"
<abstraction> ::= "L" <var> "." <expr>         ; also "λ" or "\" instead of "L"
                                               ; - abstraction bodies are greedy: Lx.x y = Lx.(x y) != (Lx.x) y
                                               ; - currying is not supported (*)
<var>         ::= <letter>+
```

";;" starts a comment that runs until the end of the line.

------------------------------------------------------------------------------------------------------------------------

(*) Why is currying not supported? Because it makes the use of multi-character variables ambiguous. For example, if
currying is allowed, what does the expression `Lvar.x` mean? Should it be resolved to `Lv.La.Lr.x`, or is `var` a
variable name? This implementation favors multi-character variables over currying: `Lxyz.xyz` binds `xyz`. Relatedly,
function application must be separated by spaces or parentheses, and a variable cannot start with an uppercase "L".
"""

from collections import namedtuple

from lcbind.lang.error import LambdaSyntaxError, UnboundVariableError
from lcbind.pure.term import Abstraction, Application, Variable


LAMBDA, DOT, LPAREN, RPAREN, IDENT, EOF = "λ", ".", "(", ")", "IDENT", "EOF"
LAMBDA_TOKEN = "L"
LAMBDA_ALIASES = ["λ", "\\"]
COMMENT = ";;"

Token = namedtuple("Token", ["type", "value", "start", "end"])


def is_identifier(name):
    """Whether or not name can be written as a variable in an expression."""
    return isinstance(name, str) and name.isalpha() and name.isascii() and not name.startswith(LAMBDA_TOKEN)


def tokenize(expr):
    """Splits expr into a list of Tokens, always terminated by an EOF token. An identifier starting with "L" is split
    into a LAMBDA token and the (possibly empty) identifier that follows it.
    """
    tokens = []
    idx = 0
    while idx < len(expr):
        char = expr[idx]

        if expr.startswith(COMMENT, idx):
            newline = expr.find("\n", idx)
            idx = len(expr) if newline == -1 else newline

        elif char.isspace():
            idx += 1

        elif char in LAMBDA_ALIASES:
            tokens.append(Token(LAMBDA, char, idx, idx + 1))
            idx += 1

        elif char in (DOT, LPAREN, RPAREN):
            tokens.append(Token(char, char, idx, idx + 1))
            idx += 1

        elif char.isascii() and char.isalpha():
            start = idx
            while idx < len(expr) and expr[idx].isascii() and expr[idx].isalpha():
                idx += 1

            word = expr[start:idx]
            if word.startswith(LAMBDA_TOKEN):
                tokens.append(Token(LAMBDA, LAMBDA_TOKEN, start, start + 1))
                word, start = word[1:], start + 1
            if word:
                tokens.append(Token(IDENT, word, start, idx))

        else:
            raise LambdaSyntaxError("'{}' contains illegal character '{}'", (expr, char), start=idx, end=idx + 1)

    tokens.append(Token(EOF, None, len(expr), len(expr)))
    return tokens


class Parser:
    """Recursive descent parser over the output of tokenize. If declared is not None, every free variable must be in
    declared.
    """

    def __init__(self, expr, declared=None):
        self.expr = expr
        self.tokens = tokenize(expr)
        self.declared = None if declared is None else frozenset(declared)

        self.pos = 0
        self.bound = []  # binders enclosing the current position, innermost last

    @property
    def peek(self):
        return self.tokens[self.pos]

    def advance(self):
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def error(self, msg, token, exprs=None, cls=LambdaSyntaxError, **kwargs):
        end = max(token.end, token.start + 1)
        return cls(msg, exprs or self.expr, start=token.start, end=end, **kwargs)

    def parse(self):
        if self.peek.type == EOF:
            raise LambdaSyntaxError("λ-term cannot be empty", self.expr)

        try:
            tree = self.application()
        except RecursionError:
            raise LambdaSyntaxError("'{}' is nested too deeply", self.expr, diagnosis=False) from None

        token = self.peek
        if token.type == RPAREN:
            raise self.error("'{}' has mismatched parentheses", token)
        elif token.type == DOT:
            raise self.error("'{}' has stray declarator", token)
        return tree

    def application(self):
        tree = None
        while self.peek.type in (IDENT, LAMBDA, LPAREN):
            atom = self.atom()
            tree = atom if tree is None else Application(tree, atom)

        if tree is None:
            token = self.peek
            if token.type == DOT:
                raise self.error("'{}' has stray declarator", token)
            elif token.type == RPAREN:
                raise self.error("'{}' contains an empty λ-term", token)
            raise self.error("'{}' ends where a λ-term was expected", token)
        return tree

    def atom(self):
        token = self.peek
        if token.type == LAMBDA:
            return self.abstraction()

        elif token.type == LPAREN:
            self.advance()
            tree = self.application()
            if self.peek.type != RPAREN:
                raise self.error("'{}' has mismatched parentheses", token)
            self.advance()
            return tree

        return self.variable(self.advance())

    def abstraction(self):
        bind = self.advance()

        arg = self.peek
        if arg.type != IDENT:
            raise self.error("'{}' has a bind without a variable", bind)
        self.advance()

        if self.peek.type != DOT:
            raise self.error("'{}' is missing a declarator after bound variable", arg)
        decl = self.advance()

        if self.peek.type not in (IDENT, LAMBDA, LPAREN):
            raise self.error("'{}' contains an illegal abstraction body", decl)

        self.bound.append(arg.value)
        try:
            body = self.application()
        finally:
            self.bound.pop()

        return Abstraction(arg.value, body)

    def variable(self, token):
        name = token.value
        if self.declared is not None and name not in self.bound and name not in self.declared:
            raise self.error("'{}' uses '{}', which is not declared as an input", token, (self.expr, name),
                             UnboundVariableError, identifier=name)
        return Variable(name, token.start, token.end)


def generate_tree(expr, declared=None):
    """Converts expr to a LambdaTerm. Raises LambdaSyntaxError if expr is not valid λ-term grammar and
    UnboundVariableError if a free variable of expr is not in declared (skipped when declared is None).
    """
    return Parser(expr, declared).parse()
