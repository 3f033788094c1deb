"""Tree-walking interpreter for hydra parse trees.

Values are plain Python objects: float for numbers, str for strings and hydra.pol.Pol for coordinates. None stands
for "no value", which is what drawing functions like line() return.
"""

import logging
import math
import random
import sys

from hydra.canvas import Canvas
from hydra.config import Config
from hydra.lang.error import EvalError, GenericException
from hydra.lang.parser import ParseNode
from hydra.lang.scope import ScopeStack
from hydra.lang.system import Kind, System
from hydra.pol import Pol

logger = logging.getLogger(__name__)


def is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def representation(value):
    """Returns the string representation of value used for printing and string interpolation."""
    if is_number(value):
        return f"{value:f}"
    if isinstance(value, str):
        return value
    if isinstance(value, Pol):
        return str(value)
    raise EvalError("value of type '{}' has no string representation", type(value).__name__, diagnosis=False)


class Interpreter:
    """Interprets parse trees, keeping the variables of one program in its scope stack."""
    TYPE_NAMES = {float: "number", str: "string", Pol: "Pol"}

    def __init__(self, system=None, canvas=None, out=None, config=None, rng=None):
        self.system = system if system is not None else System()
        self.canvas = canvas if canvas is not None else Canvas()
        self.config = config if config is not None else Config()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.out = out  # stream print() writes to, stdout if None

        self.scopes = ScopeStack()

        self.known_interpretations = {
            Kind.ASSIGNMENT: self.interpret_assignment,
            Kind.BRACES: self.interpret_nothing,
            Kind.EMPTY: self.interpret_nothing,
            Kind.EXPRESSION: self.interpret_expression,
            Kind.FUNCTION: self.interpret_function,
            Kind.INITIALIZATION: self.interpret_initialization,
            Kind.LOOP: self.interpret_loop,
            Kind.NUMBER: self.interpret_number,
            Kind.STRING: self.interpret_string,
            Kind.STRING_ESCAPE: self.interpret_string_escape,
            Kind.UNKNOWN: self.interpret_variable,
            Kind.VARIABLE: self.interpret_variable,
        }

    def write(self, text):
        """Writes text to the output stream of this program."""
        (self.out if self.out is not None else sys.stdout).write(text)

    def interpret_code(self, statements):
        """Interprets statements one after another and returns the value of the last one."""
        result = None
        for statement in statements:
            result = self.interpret(statement)
        return result

    def interpret(self, node):
        """Interprets a complete statement. Statements containing Error nodes are rejected before anything runs."""
        if not node.is_valid():
            error = node.error if node.kind is Kind.ERROR else None
            msg = "cannot interpret statement, an error occurred while parsing"
            if error is not None:
                msg += ": " + error.raw_msg.replace("{", "{{").replace("}", "}}")
            raise EvalError(msg, diagnosis=False, line_number=node.line_number)

        return self._interpret(node)

    def _interpret(self, node):
        logger.debug("Interpreting parse result of type '%s': '%s'", node.kind, node.text)

        interpretation = self.known_interpretations.get(node.kind)
        if interpretation is None:
            raise EvalError("interpretation failed, no interpretation defined for input of type '{}'", str(node.kind),
                            diagnosis=False, line_number=node.line_number)

        try:
            return interpretation(node)
        except GenericException as error:
            if error.line_number is None:  # innermost statement wins
                error.line_number = node.line_number
            raise

    def interpret_nothing(self, node):
        return None

    def interpret_assignment(self, node):
        """Interprets 'var name = value' (declaration in the current scope) or 'name = value' (reassignment in the
        scope the name resolves to). Returns the assigned value.
        """
        if node.children and node.children[0].kind is Kind.ASSIGNMENT:
            if len(node.children) != 3 or node.children[1].kind is not Kind.VARIABLE:
                raise EvalError("invalid assignment, use 'var a = 5.0' instead", diagnosis=False)

            name = node.children[1].text
            if not name:
                raise EvalError("invalid assignment, the variable name must not be empty", diagnosis=False)
            if name.startswith("_"):
                raise EvalError("invalid assignment, variables starting with '_' cannot be assigned to: '{}'", name,
                                diagnosis=False)

            value = self._assigned_value(name, node.children[2])
            self.scopes.declare(name, value)

        else:
            if len(node.children) != 2:
                raise EvalError("invalid assignment, use 'a = 5.0' instead", diagnosis=False)

            name = node.children[0].text
            value = self._assigned_value(name, node.children[1])
            self.scopes.assign(name, value)

        logger.debug("Assigned '%s' = %r", name, value)
        return value

    def _assigned_value(self, name, node):
        value = self._interpret(node)
        if value is None:
            raise EvalError("could not define '{}', right hand side of assignment did not have a value", name,
                            diagnosis=False)
        return value

    def interpret_number(self, node):
        if node.text == System.PI:
            return math.pi
        try:
            return float(node.text)
        except ValueError:
            raise EvalError("interpretation failed, '{}' is not a number", node.text, diagnosis=False) from None

    def interpret_string(self, node):
        """A string without children is a literal, otherwise its children are interpreted and concatenated."""
        if not node.children:
            return node.text

        parts = []
        for part in node.children:
            value = part.text if part.kind is Kind.STRING else self._interpret(part)
            try:
                parts.append(representation(value))
            except EvalError:
                raise EvalError("interpretation failed, '{}' in '{}' could not be interpreted as string",
                                (part.display().strip(), node.text), diagnosis=False) from None
        return "".join(parts)

    def interpret_string_escape(self, node):
        if len(node.children) != 1:
            raise EvalError("invalid string interpolation in '{}'", node.text, diagnosis=False)
        return self._interpret(node.children[0])

    def interpret_variable(self, node):
        """Interprets an unknown leaf as a reference to a variable."""
        if node.children:
            raise EvalError("could not interpret '{}' as a variable", node.text, diagnosis=False)
        return self.scopes.lookup(node.text)

    @staticmethod
    def _describe(item):
        if isinstance(item, ParseNode):
            return item.text if item.text else str(item.kind)
        return representation(item)

    def _operand(self, item, operation):
        """Numeric value of an operand, which is either an already reduced number or a ParseNode."""
        value = item if is_number(item) else self._interpret(item)
        if not is_number(value):
            raise EvalError("interpretation failed, operand '{}' of '{}' could not be interpreted as number",
                            (Interpreter._describe(item), operation), diagnosis=False)
        return float(value)

    def interpret_expression(self, node):
        """Evaluates alternating terms and operators. '*' and '/' are applied first (left to right), the remaining
        '+' and '-' are then folded left to right, starting from 0.
        """
        children = node.children
        remaining = []  # terms (ParseNodes or reduced numbers) and '+'/'-' operators

        idx = 0
        while idx < len(children):
            child = children[idx]
            if child.kind is Kind.OPERATOR:
                if idx % 2 != 1:
                    raise EvalError("unexpected operator '{}' found at an even index in the expression", child.text,
                                    diagnosis=False)

                if child.text in ("*", "/"):
                    if idx + 1 >= len(children):
                        raise EvalError("missing right hand side of operation '{}'", child.text, diagnosis=False)

                    lhs = self._operand(remaining.pop(), child.text)
                    rhs = self._operand(children[idx + 1], child.text)

                    if child.text == "*":
                        remaining.append(lhs * rhs)
                    elif rhs == 0.0:
                        raise EvalError("division by zero in '{}'", Interpreter._describe(children[idx + 1]),
                                        diagnosis=False)
                    else:
                        remaining.append(lhs / rhs)

                    logger.debug("Intermediate result of expression: %r %s %r = %r", lhs, child.text, rhs,
                                 remaining[-1])
                    idx += 2
                    continue

            remaining.append(child)
            idx += 1

        if not remaining:
            raise EvalError("could not evaluate empty expression", diagnosis=False)

        if len(remaining) == 1:
            term = remaining[0]
            return term if is_number(term) else self._interpret(term)

        result = 0.0
        operation = "+"
        for idx, item in enumerate(remaining):
            if idx % 2 == 0:
                value = self._operand(item, operation)
                result = result + value if operation == "+" else result - value
            elif isinstance(item, ParseNode) and item.kind is Kind.OPERATOR and item.text in ("+", "-"):
                operation = item.text
            else:
                raise EvalError("expected operator but found '{}' instead", Interpreter._describe(item),
                                diagnosis=False)

        return result

    def _call(self, node, kind):
        builtin = self.system.builtin(node.text)
        if builtin is None or builtin.signature.kind is not kind:
            what = "initialization" if kind is Kind.INITIALIZATION else "function"
            raise EvalError("could not interpret '{}', no {} definition found", (node.text, what), diagnosis=False)

        arguments = self.evaluate_arguments(node, only=builtin.eager)
        logger.debug("Calling '%s' with %r", node.text, arguments)
        return builtin.function(self, arguments, node)

    def interpret_function(self, node):
        return self._call(node, Kind.FUNCTION)

    def interpret_initialization(self, node):
        return self._call(node, Kind.INITIALIZATION)

    def evaluate_arguments(self, call, only=None):
        """Interprets the arguments of a function call/initialization into a dict of parameter name: value. If only
        is given, arguments for other parameters are skipped.
        """
        if len(call.children) != 1 or call.children[0].kind is not Kind.ARGUMENT_LIST:
            raise EvalError("could not interpret '{}', expected an argument list", call.text, diagnosis=False)

        arguments = {}
        for argument in call.children[0].children:
            if argument.kind is not Kind.ARGUMENT or len(argument.children) != 1:
                raise EvalError("in call of '{}': expected argument but found '{}' instead",
                                (call.text, str(argument.kind)), diagnosis=False)

            if only is None or argument.text in only:
                arguments[argument.text] = self._interpret(argument.children[0])
            else:
                logger.debug("Skipping interpretation of argument for parameter '%s'", argument.text)

        return arguments

    def argument(self, call, arguments, parameter, expected=float):
        """Returns arguments[parameter], checking that it is of type expected (float, str or Pol)."""
        if parameter not in arguments:
            raise EvalError("could not interpret '{}', argument for parameter '{}' could not be found",
                            (call.text, parameter), diagnosis=False)

        value = arguments[parameter]
        if expected is float and is_number(value):
            return float(value)
        if expected is not float and isinstance(value, expected):
            return value

        raise EvalError("could not interpret '{}', argument for parameter '{}' could not be interpreted as {}",
                        (call.text, parameter, Interpreter.TYPE_NAMES.get(expected, expected.__name__)),
                        diagnosis=False)

    def _bound(self, node, what):
        value = self._interpret(node)
        if not is_number(value):
            raise EvalError("interpretation failed, could not interpret {} of range as number", what, diagnosis=False)
        return float(value)

    def interpret_loop(self, node):
        """Runs the loop body for each value of the loop variable in [lower, upper], in steps of step. The loop variable
        and everything the body declares live in one scope, opened for the whole loop, so a declaration in the body
        fails on the second iteration. The body may rebind the loop variable; the step is added to its current value.
        """
        if len(node.children) < 2:
            raise EvalError("invalid number of arguments for loop", diagnosis=False)

        variable, range_node, *body = node.children
        if variable.kind not in (Kind.UNKNOWN, Kind.VARIABLE):
            raise EvalError("invalid loop definition, expected variable name but found '{}' instead", str(variable.kind),
                            diagnosis=False)
        if range_node.kind is not Kind.RANGE or len(range_node.children) != 3:
            raise EvalError("invalid range definition, expected 3 arguments but found {}",
                            str(len(range_node.children)), diagnosis=False)

        name = variable.text
        with self.scopes.scoped():
            lower, step, upper = (self._bound(child, what) for child, what in
                                  zip(range_node.children, ("lower bound", "step size", "upper bound")))
            if step <= 0.0 and lower <= upper:
                raise EvalError("loop over '{}' would never terminate, the step size must be positive", name,
                                diagnosis=False)

            self.scopes.declare(name, lower)
            value = lower
            logger.debug("Loop variable is %r, upper bound is %r", value, upper)

            while value <= upper:
                for statement in body:
                    self._interpret(statement)

                value = self.scopes.lookup_local(name)
                if not is_number(value):
                    raise EvalError("could not interpret loop, loop variable '{}' could not be interpreted as number",
                                    name, diagnosis=False)
                value += step
                self.scopes.current[name] = value

        return None

    def describe_scopes(self):
        """Returns all open scopes, innermost first, with their variables sorted by name."""
        lines = []
        for idx in range(len(self.scopes.scopes) - 1, -1, -1):
            scope = self.scopes.scopes[idx]
            lines.append(f"Scope {idx}: ({len(scope)} variables)")
            for position, name in enumerate(sorted(scope)):
                lines.append(f"  [{position}] {name} = '{representation(scope[name])}'")
        return "\n".join(lines)
