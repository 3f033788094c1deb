"""The hydra system: node kinds, the keyword table and the registry of builtin functions/initializers.

A System object is created per program and handed to the tokenizer, parser and interpreter, so registering a builtin
in one program never leaks into another.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class Kind(enum.Enum):
    """Syntactic category of a token or parse node."""
    ARGUMENT = "Argument"
    ARGUMENT_LIST = "ArgumentList"
    ASSIGNMENT = "Assignment"
    EMPTY = "Empty"
    ERROR = "Error"
    EXPRESSION = "Expression"
    FUNCTION = "Function"
    FUNCTION_DEFINITION = "FunctionDefinition"
    LOOP = "Loop"
    INITIALIZATION = "Initialization"
    NUMBER = "Number"
    OPERATOR = "Operator"
    BRACES = "Braces"
    PARAMETER = "Parameter"
    PARAMETER_LIST = "ParameterList"
    PROPERTY = "Property"
    RANGE = "Range"
    STRING = "String"
    STRING_ESCAPE = "StringEscape"
    UNKNOWN = "Unknown"
    VARIABLE = "Variable"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class Signature:
    """Name and ordered parameter names of a builtin. Arguments are matched by name and position, never reordered."""
    name: str
    parameters: Tuple[str, ...]
    kind: Kind = Kind.FUNCTION

    @property
    def usage(self):
        """Usage string used in error messages, e.g. 'line(from: ..., to: ...)'."""
        return f"{self.name}({', '.join(f'{param}: ...' for param in self.parameters)})"


@dataclass(frozen=True)
class Builtin:
    """A registered builtin. function is called as function(interpreter, arguments, call) where arguments maps
    parameter names to evaluated values. If eager is set, only those parameters are evaluated up front; the builtin
    evaluates the rest itself (see Interpreter.evaluate_arguments).
    """
    signature: Signature
    function: Callable
    eager: Optional[Tuple[str, ...]] = None


class System:
    """Keyword and builtin registry of one hydra program."""
    ERROR_STRING = "__ERROR__"
    PI = "M_PI"

    KEYWORDS = {
        "for": Kind.LOOP,
        "in": Kind.RANGE,
        "var": Kind.ASSIGNMENT,
        "=": Kind.ASSIGNMENT,
        "+": Kind.OPERATOR,
        "-": Kind.OPERATOR,
        "*": Kind.OPERATOR,
        "/": Kind.OPERATOR,
        "{": Kind.BRACES,
        "}": Kind.BRACES,
    }

    def __init__(self, builtins=None):
        """Creates a registry holding the default keywords. builtins is an iterable of Builtin objects to register,
        defaulting to hydra.lang.builtins.BUILTINS.
        """
        self.types_for_keywords = dict(System.KEYWORDS)
        self.builtins = {}

        if builtins is None:
            from hydra.lang.builtins import BUILTINS
            builtins = BUILTINS

        for builtin in builtins:
            self.add(builtin)

    def add(self, builtin):
        """Registers builtin under its name, making the name a keyword of the builtin's kind."""
        name = builtin.signature.name
        if name in self.builtins:
            logger.debug("Overwriting builtin '%s'", name)

        self.builtins[name] = builtin
        self.types_for_keywords[name] = builtin.signature.kind

    def register(self, name, parameters, function, kind=Kind.FUNCTION, eager=None):
        """Convenience wrapper around add."""
        self.add(Builtin(Signature(name, tuple(parameters), kind), function, tuple(eager) if eager else None))

    def kind_of_keyword(self, text):
        """Returns the Kind registered for text, or None."""
        return self.types_for_keywords.get(text)

    def signature(self, name):
        """Returns the Signature of the builtin called name, or None."""
        builtin = self.builtins.get(name)
        return builtin.signature if builtin else None

    def builtin(self, name):
        """Returns the Builtin called name, or None."""
        return self.builtins.get(name)
