"""Builtin functions and initializers of the hydra language.

Each builtin is called as function(interpreter, arguments, call): arguments maps parameter names to the evaluated
argument values, call is the Function/Initialization ParseNode. A builtin returns a value or None.
"""

import logging
import math

from hydra.lang.error import EvalError
from hydra.lang.interpreter import representation
from hydra.lang.system import Builtin, Kind, Signature
from hydra.pol import Pol

logger = logging.getLogger(__name__)


# ========================= math =========================
def math_function(name, function):
    """Wraps a float -> float function from math as a builtin taking a single parameter 'x'."""
    def builtin(interpreter, arguments, call):
        x = interpreter.argument(call, arguments, "x")
        try:
            return function(x)
        except (ValueError, OverflowError):
            raise EvalError("math error in '{}', argument {} is out of domain", (name, f"{x:f}"),
                            diagnosis=False) from None

    builtin.__name__ = f"builtin_{name}"
    return builtin


def builtin_theta(interpreter, arguments, call):
    r_1 = interpreter.argument(call, arguments, "r1")
    r_2 = interpreter.argument(call, arguments, "r2")
    distance = interpreter.argument(call, arguments, "R")
    return Pol.theta(r_1, r_2, distance)


def builtin_random(interpreter, arguments, call):
    lower = interpreter.argument(call, arguments, "from")
    upper = interpreter.argument(call, arguments, "to")
    if upper < lower:
        raise EvalError("could not interpret '{}', argument 'from' must not be larger than 'to'", call.text,
                        diagnosis=False)
    return interpreter.rng.uniform(lower, upper)


# ========================= values/output =========================
def builtin_pol(interpreter, arguments, call):
    r = interpreter.argument(call, arguments, "r")
    phi = interpreter.argument(call, arguments, "phi")
    return Pol(r, phi)


def builtin_print(interpreter, arguments, call):
    if "message" not in arguments:
        raise EvalError("could not interpret '{}', argument for parameter '{}' could not be found",
                        (call.text, "message"), diagnosis=False)
    interpreter.write(representation(arguments["message"]))


# ========================= canvas =========================
def builtin_line(interpreter, arguments, call):
    start = interpreter.argument(call, arguments, "from", Pol)
    end = interpreter.argument(call, arguments, "to", Pol)
    interpreter.canvas.add_path([start, end])


def mark_function(filled):
    def builtin(interpreter, arguments, call):
        center = interpreter.argument(call, arguments, "center", Pol)
        radius = interpreter.argument(call, arguments, "radius")
        if radius < 0.0:
            raise EvalError("could not interpret '{}', radius must not be negative", call.text, diagnosis=False)
        interpreter.canvas.add_mark(center, radius, filled)

    return builtin


def builtin_clear(interpreter, arguments, call):
    interpreter.canvas.clear()


def builtin_save(interpreter, arguments, call):
    file_name = interpreter.argument(call, arguments, "file", str)
    try:
        interpreter.canvas.save(file_name)
    except OSError as error:
        raise EvalError("could not save canvas to '{}': {}", (file_name, error.strerror or str(error)),
                        diagnosis=False) from None


def curve_function(hidden, point):
    """Builds a builtin that samples a curve: the hidden variable runs from 'from' to 'to' in config.resolution
    steps, and for each value the lazy third argument is evaluated again and turned into a point by point(hidden,
    value). The samples form one path on the canvas.
    """
    def builtin(interpreter, arguments, call):
        lower = interpreter.argument(call, arguments, "from")
        upper = interpreter.argument(call, arguments, "to")
        parameter = interpreter.system.signature(call.text).parameters[2]
        resolution = interpreter.config.resolution

        points = []
        with interpreter.scopes.scoped() as scope:
            for sample in range(resolution + 1):
                scope[hidden] = lower + (upper - lower) * sample / resolution
                value = interpreter.argument(call, interpreter.evaluate_arguments(call, only=(parameter,)), parameter)
                points.append(point(scope[hidden], value))

        logger.debug("Sampled %d points for '%s'", len(points), call.text)
        interpreter.canvas.add_path(points)

    return builtin


BUILTINS = [
    Builtin(Signature("Pol", ("r", "phi"), Kind.INITIALIZATION), builtin_pol),

    Builtin(Signature("sin", ("x",)), math_function("sin", math.sin)),
    Builtin(Signature("cos", ("x",)), math_function("cos", math.cos)),
    Builtin(Signature("sinh", ("x",)), math_function("sinh", math.sinh)),
    Builtin(Signature("cosh", ("x",)), math_function("cosh", math.cosh)),
    Builtin(Signature("exp", ("x",)), math_function("exp", math.exp)),
    Builtin(Signature("log", ("x",)), math_function("log", math.log)),
    Builtin(Signature("theta", ("r1", "r2", "R")), builtin_theta),
    Builtin(Signature("random", ("from", "to")), builtin_random),

    Builtin(Signature("print", ("message",)), builtin_print),

    Builtin(Signature("line", ("from", "to")), builtin_line),
    Builtin(Signature("circle", ("center", "radius")), mark_function(filled=False)),
    Builtin(Signature("mark", ("center", "radius")), mark_function(filled=True)),
    Builtin(Signature("curve_distance", ("from", "to", "distance")),
            curve_function("_phi", lambda phi, distance: Pol(distance, phi)), eager=("from", "to")),
    Builtin(Signature("curve_angle", ("from", "to", "angle")),
            curve_function("_r", lambda r, angle: Pol(r, angle)), eager=("from", "to")),
    Builtin(Signature("clear", ()), builtin_clear),
    Builtin(Signature("save", ("file",)), builtin_save),
]
