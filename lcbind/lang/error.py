"""Error handling for lcbind. Every failure of an evaluation is a GenericException; the subclass (and its `kind`)
tells which stage rejected the request. If another type of error makes it all the way to ErrorHandler, it is assumed
to be an internal issue.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a lcbind error/warning. exprs[0] should be
    the offending expression; start/end locate the offending part of it.
    """
    kind = "generic"

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if not isinstance(exprs, (list, tuple)):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0] if exprs else ""
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal


class LambdaSyntaxError(GenericException):
    """Malformed expression text or input declaration."""
    kind = "syntax"


class UnboundVariableError(GenericException):
    """A free variable of the expression is not a declared input."""
    kind = "unbound-variable"

    def __init__(self, *args, identifier=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.identifier = identifier


class DivergenceError(GenericException):
    """Reduction gave up before reaching beta normal form. steps is the number of beta steps taken, term the last
    term reached.
    """
    kind = "divergence"

    def __init__(self, *args, steps=0, term=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.steps = steps
        self.term = term


class ShapeError(GenericException):
    """The normal form can't be turned into nested pairs of inputs."""
    kind = "shape"

    def __init__(self, *args, term=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.term = term


class InternalBindingError(GenericException):
    """A variable of the normal form has no host value. Indicates a bug in the reducer, not in the input."""
    kind = "internal-binding"

    def __init__(self, *args, identifier=None, **kwargs):
        kwargs.setdefault("internal", True)
        super().__init__(*args, **kwargs)
        self.identifier = identifier


class ErrorHandler:
    """Context manager that reports lcbind errors/warnings instead of letting Python tracebacks through. With
    verbose, reduction steps registered by the reducer are printed as they happen.
    """
    ERROR = "red"
    WARNING = "magenta"
    STEP = "cyan"

    def __init__(self, fatal=True, verbose=False):
        self.fatal = fatal
        self.verbose = verbose
        self.traceback = {}
        self.steps = []

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session run."""
        self.traceback[path] = (None, None)

    def register_step(self, kind, expr):
        """Registers a reduction step. kind is "β" for beta reduction."""
        self.steps.append((kind, expr))
        if self.verbose:
            print(colored(f"{kind}: ", ErrorHandler.STEP, attrs=["bold"]) + str(expr))

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        line_start = error.expr.rfind("\n", 0, error.start) + 1
        line_end = error.expr.find("\n", error.start)
        if line_end == -1:
            line_end = len(error.expr)

        start = error.start - line_start
        end = max(min(error.end, line_end) - line_start, start + 1)
        line = error.expr[line_start:line_end]

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self):
        """Formats traceback as a "File '...', line N:" block."""
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg
        return error_msg

    def _prefix(self, error):
        """Returns a "file:line:col: " prefix if error.expr is the contents of a registered file."""
        files = [file for file, (line, __) in self.traceback.items() if line is None]
        if not files or not error.expr or not error.diagnosis:
            return ""

        line_num = error.expr.count("\n", 0, error.start) + 1
        col = error.start - error.expr.rfind("\n", 0, error.start)
        return colored(f"{files[-1]}:{line_num}:{col}: ", attrs=["bold"])

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = self._prefix(error) + colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = self._location() + self._prefix(error)

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        label = "error: " if error.kind == GenericException.kind else f"{error.kind} error: "
        error_msg += colored(label, ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        self.traceback = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt", diagnosis=False))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("beta normal form might exist, but maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
