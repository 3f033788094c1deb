"""Error handling for the hydra language. Only GenericExceptions (and their subclasses) should be encountered during
running: if another type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal
issue.

The three stages of the pipeline raise their own subclass:

- TokenizeError: unmatched brackets/quotes, malformed string escapes
- ParseError: wrong arity, unexpected tokens, unknown functions, malformed argument lists/loop headers, unterminated
  loops
- EvalError: undeclared/redeclared/reserved variables, non-numeric operands, unknown builtins, scope underflow
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a hydra error/warning."""

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False, line_number=None):
        """Parses args for GenericException or warning. Each '{}' in msg is filled with the matching expr in exprs,
        bolded. exprs[0] should be the offending expr, start and end mark the offending span within it.
        """
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.raw_msg = msg.format(*exprs)
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal
        self.line_number = line_number  # set by the interpreter/session if not known at raise time

        super().__init__(self.raw_msg)


class TokenizeError(GenericException):
    """Raised when a source line cannot be split into tokens."""


class ParseError(GenericException):
    """Raised when a token tree does not form a valid statement."""


class EvalError(GenericException):
    """Raised when a valid statement cannot be interpreted."""


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom hydra errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream
        self.traceback = {}

    def register_file(self, path):
        """Registers path in traceback."""
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Registers line in traceback given path. Should be called prior to Session add/run."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after successful Session add/run."""
        self.traceback[path] = (None, None)

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending part of error.expr highlighted and bolded."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def _print(self, msg):
        print(msg, file=self.stream if self.stream is not None else sys.stderr)

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        location = ""
        for file, (line, line_num) in self.traceback.items():
            if line is not None:
                location = f"{file}:{line_num}: "

        error_msg = colored(location, attrs=["bold"])
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            self._print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing origination of error.
        """
        error_msg = ""
        lines = 0
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line is not None:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line}\n"
                lines += 1

        if lines > 1:
            error_msg = "Traceback:\n" + error_msg

        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        self._print(error_msg)

        if not error.internal and error.expr and error.diagnosis:
            self._print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        for file in self.traceback:  # if error occurred, reset traceback (no need if error is fatal)
            self.traceback[file] = (None, None)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded, statement is nested too deeply"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
