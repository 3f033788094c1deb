"""Uses the hydra language implementation to interpret .hy files/run in command-line mode. Also uses error handling
context manager. Called from the hydra executable script.

Python version must be >=3.7, because error handling requires that dicts are insertion-ordered.
"""

import argparse
import logging
import sys

from hydra.config import Config
from hydra.lang.error import ErrorHandler
from hydra.lang.interpreter import Interpreter
from hydra.lang.session import Session
from hydra.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="hydra", description="Interpreter for hyperbolic geometry constructions.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--resolution", type=int, default=Config.resolution,
                        help="number of samples taken along a curve (default: %(default)s)")
    parser.add_argument("--seed", type=int, default=None, help="seed of the random number generator")
    parser.add_argument("--debug", action="store_true", help="print debug log messages to stderr")
    return parser


def main(argv=None):
    """Runs hydra interpreter. Called from hydra executable script."""
    assert sys.version_info >= (3, 7), "hydra cannot be run with python < 3.7"

    parser = build_parser()
    args = parser.parse_args(argv)
    if args.resolution < 1:
        parser.error("--resolution must be at least 1")

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    with ErrorHandler() as error_handler:
        interpreter = Interpreter(config=Config.from_args(args))

        if args.file is not None:
            sess = Session(error_handler, args.file, interpreter)
            sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, interpreter, cmd_line=True)).cmdloop()


if __name__ == "__main__":
    main()
