"""Reduces a λ-term from a file or from the command line, or runs in interactive mode. Uses error handling context
manager. Called from the lcbind console script.
"""

import argparse

from lcbind.lang.error import ErrorHandler
from lcbind.lang.session import Session, parse_binding, read_source, split_header
from lcbind.lang.shell import Shell
from lcbind.pure.reducer import NormalOrderReducer


def run_source(source, bindings, error_handler, max_steps=None, timeout=None):
    """Evaluates source. Inputs declared in its @input header without a value in bindings are bound to their own
    name.
    """
    declared, expr = split_header(source)
    bindings = dict(bindings)
    for name in declared:
        bindings.setdefault(name, name)

    return Session(bindings, expr, max_steps, timeout, error_handler).run()


def main(argv=None):
    """Runs lcbind. Called from lcbind console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lcbind", description="Reduce a λ-term and print it as nested pairs.")
        parser.add_argument("file", help="file to reduce (if empty and no -e, goes to command-line mode)", nargs="?")
        parser.add_argument("-e", "--expr", help="expression to reduce instead of a file")
        parser.add_argument("-i", "--input", action="append", default=[], metavar="NAME[=VALUE]",
                            help="declare an input, optionally with a Python literal value (repeatable)")
        parser.add_argument("--max-steps", type=int, default=NormalOrderReducer.STEP_LIMIT,
                            help="maximum number of beta reductions (default: %(default)s)")
        parser.add_argument("--timeout", type=float, help="maximum number of seconds spent reducing")
        parser.add_argument("--trace", action="store_true", help="print every beta reduction")
        args = parser.parse_args(argv)

        if args.file is not None and args.expr is not None:
            parser.error("a file and -e/--expr cannot be used together")
        if args.max_steps < 0:
            parser.error("--max-steps must be non-negative")

        error_handler.verbose = args.trace
        bindings = dict(parse_binding(arg) for arg in args.input)

        if args.file is None and args.expr is None:
            Shell(ErrorHandler(fatal=False, verbose=args.trace), bindings, args.max_steps, args.timeout).cmdloop()
            return

        if args.file is not None:
            path, source = args.file, read_source(args.file)
        else:
            path, source = "<expr>", args.expr

        error_handler.register_file(path)
        print(repr(run_source(source, bindings, error_handler, args.max_steps, args.timeout)))


if __name__ == "__main__":
    main()
