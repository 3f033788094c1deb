import io
import math
import os
import tempfile
import unittest

from hydra.config import Config
from hydra.lang.error import EvalError
from hydra.lang.interpreter import Interpreter
from hydra.lang.parser import Parser
from hydra.lang.system import Kind, System
from hydra.pol import Pol


class BuiltinsTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.interpreter = Interpreter(out=self.out, config=Config(resolution=4, seed=7))
        self.parser = Parser(self.interpreter.system)

    def run_line(self, line):
        return self.interpreter.interpret(self.parser.parse_string_line(line))

    def test_registry(self):
        system = System()
        for name in ["sin", "cos", "sinh", "cosh", "exp", "log", "theta", "random", "print", "line", "circle", "mark",
                     "curve_distance", "curve_angle", "clear", "save"]:
            self.assertEqual(Kind.FUNCTION, system.kind_of_keyword(name), name)
        self.assertEqual(Kind.INITIALIZATION, system.kind_of_keyword("Pol"))
        self.assertEqual(("r1", "r2", "R"), system.signature("theta").parameters)
        self.assertIsNone(system.signature("arc"))

    def test_math(self):
        cases = {
            "sin(x: M_PI / 2)": 1.0,
            "cos(x: 0.0)": 1.0,
            "sinh(x: 0.0)": 0.0,
            "cosh(x: 0.0)": 1.0,
            "exp(x: 1.0)": math.e,
            "log(x: exp(x: 2.0))": 2.0,
            "1 + sin(x: 0.0) * 2": 1.0,
        }
        for case, result in cases.items():
            self.assertAlmostEqual(result, self.run_line(case), msg=case)

        should_fail = ["log(x: 0.0)", "log(x: -1.0)", "exp(x: 1000.0)", 'sin(x: "a")']
        for case in should_fail:
            self.assertRaises(EvalError, self.run_line, case)

    def test_theta(self):
        expected = math.acos((math.cosh(1.0) ** 2 - math.cosh(1.0)) / math.sinh(1.0) ** 2)
        self.assertAlmostEqual(expected, self.run_line("theta(r1: 1.0, r2: 1.0, R: 1.0)"))
        self.assertEqual(-1.0, self.run_line("theta(r1: 1.0, r2: 1.0, R: 5.0)"))
        self.assertEqual(-1.0, self.run_line("theta(r1: 0.0, r2: 1.0, R: 1.0)"))

    def test_random(self):
        values = [self.run_line("random(from: 1.0, to: 2.0)") for __ in range(20)]
        for value in values:
            self.assertTrue(1.0 <= value <= 2.0, value)

        seeded = Interpreter(config=Config(seed=7))
        parser = Parser(seeded.system)
        self.assertEqual(values[:5], [seeded.interpret(parser.parse_string_line("random(from: 1.0, to: 2.0)"))
                                      for __ in range(5)])

        self.assertEqual(3.0, self.run_line("random(from: 3.0, to: 3.0)"))
        self.assertRaises(EvalError, self.run_line, "random(from: 2.0, to: 1.0)")

    def test_pol(self):
        self.assertEqual(Pol(1.0, math.pi), self.run_line("Pol(r: 1.0, phi: M_PI)"))
        self.assertAlmostEqual(math.pi, self.run_line("Pol(r: 1.0, phi: -M_PI)").phi)
        self.assertRaises(EvalError, self.run_line, 'Pol(r: "a", phi: 0.0)')

    def test_print(self):
        self.assertIsNone(self.run_line('print(message: "a")'))
        self.run_line("print(message: 1.5)")
        self.run_line("print(message: Pol(r: 1.0, phi: 0.0))")
        self.assertEqual("a1.500000Pol(r: 1.000000, phi: 0.000000)", self.out.getvalue())

        self.assertRaises(EvalError, self.run_line, "print(message: clear())")

    def test_drawing(self):
        canvas = self.interpreter.canvas
        self.run_line("var p = Pol(r: 1.0, phi: 0.0)")

        self.assertIsNone(self.run_line("line(from: p, to: Pol(r: 2.0, phi: 1.0))"))
        self.assertEqual([[Pol(1.0, 0.0), Pol(2.0, 1.0)]], [path.points for path in canvas.paths])

        self.run_line("circle(center: p, radius: 0.5)")
        self.run_line("mark(center: p, radius: 0.1)")
        self.assertEqual([(p.center, p.radius, p.filled) for p in canvas.marks],
                         [(Pol(1.0, 0.0), 0.5, False), (Pol(1.0, 0.0), 0.1, True)])

        should_fail = ["line(from: 1.0, to: p)", "circle(center: p, radius: -1.0)", "mark(center: 1.0, radius: 1.0)"]
        for case in should_fail:
            self.assertRaises(EvalError, self.run_line, case)

        self.run_line("clear()")
        self.assertEqual(([], []), (canvas.paths, canvas.marks))

    def test_curve_distance(self):
        self.run_line("curve_distance(from: 0.0, to: M_PI, distance: 1.0 + _phi)")
        points = self.interpreter.canvas.paths[0].points

        self.assertEqual(5, len(points))
        for idx, point in enumerate(points):
            phi = math.pi * idx / 4
            self.assertAlmostEqual(phi, point.phi)
            self.assertAlmostEqual(1.0 + phi, point.r)

        self.assertNotIn("_phi", self.interpreter.scopes)
        self.assertEqual(1, self.interpreter.scopes.depth)

    def test_curve_angle(self):
        self.run_line("var a = 0.5")
        self.run_line("curve_angle(from: 0.0, to: 2.0, angle: a)")
        points = self.interpreter.canvas.paths[0].points

        self.assertEqual([0.0, 0.5, 1.0, 1.5, 2.0], [point.r for point in points])
        self.assertEqual({0.5}, {point.phi for point in points})
        self.assertNotIn("_r", self.interpreter.scopes)

        self.assertRaises(EvalError, self.run_line, 'curve_angle(from: 0.0, to: 1.0, angle: "a")')
        self.assertEqual(1, self.interpreter.scopes.depth)

    def test_save(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "out.ipe")
            self.run_line("mark(center: Pol(r: 1.0, phi: 0.0), radius: 0.1)")
            self.run_line(f'save(file: "{path}")')

            with open(path) as file:
                self.assertIn("<ipe", file.read())

            missing = os.path.join(directory, "missing", "out.ipe")
            self.assertRaises(EvalError, self.run_line, f'save(file: "{missing}")')

        self.assertRaises(EvalError, self.run_line, "save(file: 1.0)")


if __name__ == '__main__':
    unittest.main()
