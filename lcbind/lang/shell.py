"""Handles interactive/command-line mode for lcbind. Uses cmd as backend."""

import cmd

from lcbind.lang.error import GenericException
from lcbind.lang.session import Session, parse_binding, split_header
from lcbind.pure.reducer import NormalOrderReducer


class Shell(cmd.Cmd):
    """λ-term reducer shell."""
    intro = "lcbind :: λ-term reducer\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    SH_FILE = "<in>"         # command-line interpreter filename

    def __init__(self, error_handler, bindings=None, max_steps=None, timeout=None, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.error_handler = error_handler
        self.error_handler.fatal = False

        self.bindings = dict(bindings or {})
        self.max_steps = NormalOrderReducer.STEP_LIMIT if max_steps is None else max_steps
        self.timeout = timeout

        self._tmp_line = ""
        self.line_num = 0

    @staticmethod
    def preprocess_line(line):
        """Strips comments and trailing whitespace from line. Returns line and whether or not it continues on the next
        line (more "(" than ")").
        """
        if ";;" in line:
            line = line[:line.index(";;")]  # get rid of comments
        line = line.rstrip()
        return line, line.count("(") > line.count(")")

    def default(self, line):
        """Reduces an arbitrary λ-term (optionally starting with its own @input header) and prints the output."""
        with self.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            line, add_to_prev = self.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + " "
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            if not line:
                return

            self.error_handler.register_line(Shell.SH_FILE, line, self.line_num)

            declared, expr = split_header(line)
            bindings = dict(self.bindings)
            for name in declared:
                bindings.setdefault(name, name)

            print(repr(Session(bindings, expr, self.max_steps, self.timeout, self.error_handler).run()))
            self.error_handler.remove_line(Shell.SH_FILE)

    def do_input(self, arg):
        """input NAME[=VALUE] ...: declares inputs for the following expressions. Without arguments, lists them."""
        with self.error_handler:
            if not arg.strip():
                for name, value in self.bindings.items():
                    print(f"{name} = {value!r}")
                return

            self.bindings.update(parse_binding(binding) for binding in arg.split())

    def do_steps(self, arg):
        """steps N: sets the maximum number of beta reductions. Without arguments, shows it."""
        with self.error_handler:
            if not arg.strip():
                print(self.max_steps)
                return

            try:
                max_steps = int(arg)
            except ValueError:
                max_steps = -1
            if max_steps < 0:
                raise GenericException("expected natural number, got '{}'", arg.strip(), diagnosis=False)
            self.max_steps = max_steps

    def do_trace(self, arg):
        """trace on|off: prints every beta reduction while reducing."""
        with self.error_handler:
            if arg.strip() not in ("on", "off"):
                raise GenericException("trace expects 'on' or 'off', got '{}'", arg.strip(), diagnosis=False)
            self.error_handler.verbose = arg.strip() == "on"

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return super().do_help(arg)

        print("Welcome to lcbind!\n\n"
              "Expressions are pure lambda calculus: 'Lx.x' is the identity function, 'f a' \n"
              "applies f to a. Declare inputs with 'input a b' (or 'input a=1 b=2' to give \n"
              "them values), then type '(Lx.Ly.y x) a b'. The expression is reduced to \n"
              "normal form and printed as nested pairs of inputs: ('b', 'a').\n\n"
              "Other commands: 'steps N' (reduction step limit), 'trace on|off', 'exit'.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
