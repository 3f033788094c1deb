import unittest
import warnings

from hydra.lang import lexical
from hydra.lang.error import TokenizeError
from hydra.lang.lexical import Token, Tokenizer
from hydra.lang.system import Kind, System


class TokenizerTestCase(unittest.TestCase):

    def setUp(self):
        self.tokenizer = Tokenizer(System())

    def test_matching_bracket(self):
        cases = {
            ("(a(b)c)", 0): 6,
            ("(a(b)c)", 2): 4,
            ("[1, [2], 3]", 0): 10,
            ('(")")', 0): 4,
            ("(a(b)", 0): -1,
        }
        for (text, position), result in cases.items():
            self.assertEqual(result, Tokenizer.matching_bracket(text, position), text)

    def test_matching_quote(self):
        cases = {
            ('"abc"', 0): 4,
            ('"a\\("b")"', 0): 8,
            ('"abc', 0): -1,
        }
        for (text, position), result in cases.items():
            self.assertEqual(result, Tokenizer.matching_quote(text, position), text)

    def test_clean(self):
        cases = {
            "  var x = 1.0  ": "var x = 1.0",
            "var x = 1.0 // the answer": "var x = 1.0",
            "// only a comment": "",
            'print(message: "a // b") // c': 'print(message: "a // b")',
        }
        for case, result in cases.items():
            self.assertEqual(result, Tokenizer.clean(case), case)

    def test_kind_of(self):
        cases = {
            "for": Kind.LOOP,
            "in": Kind.RANGE,
            "var": Kind.ASSIGNMENT,
            "=": Kind.ASSIGNMENT,
            "*": Kind.OPERATOR,
            "}": Kind.BRACES,
            "line": Kind.FUNCTION,
            "Pol": Kind.INITIALIZATION,
            "1.5": Kind.NUMBER,
            "-2": Kind.NUMBER,
            "1e-3": Kind.NUMBER,
            "M_PI": Kind.NUMBER,
            "__ERROR__": Kind.ERROR,
            "x": Kind.UNKNOWN,
            "1.2.3": Kind.UNKNOWN,
        }
        for case, kind in cases.items():
            self.assertEqual(kind, self.tokenizer.kind_of(case), case)

    def test_tokenize(self):
        should_fail = ["line(from: Pol(r: 0, phi: 0)", '"abc', "a)", "[1, 2", '"\\(1"']
        for case in should_fail:
            self.assertRaises(TokenizeError, self.tokenizer.tokenize, case)

        cases = {
            "": [],
            "var x = 1.0": [Token("var", Kind.ASSIGNMENT), Token("x", Kind.UNKNOWN), Token("=", Kind.ASSIGNMENT),
                            Token("1.0", Kind.NUMBER)],
            "a-1": [Token("a", Kind.UNKNOWN), Token("-", Kind.OPERATOR), Token("1", Kind.NUMBER)],
            "a = -1": [Token("a", Kind.UNKNOWN), Token("=", Kind.ASSIGNMENT), Token("-1", Kind.NUMBER)],
            "2.5e-1*x": [Token("2.5e-1", Kind.NUMBER), Token("*", Kind.OPERATOR), Token("x", Kind.UNKNOWN)],
            "(1 + 2) * 3": [
                Token("(", Kind.EXPRESSION, [Token("1", Kind.NUMBER), Token("+", Kind.OPERATOR),
                                             Token("2", Kind.NUMBER)]),
                Token("*", Kind.OPERATOR),
                Token("3", Kind.NUMBER),
            ],
            "sin(x: y)": [Token("sin", Kind.FUNCTION, [Token("x", Kind.UNKNOWN), Token(":", Kind.UNKNOWN),
                                                       Token("y", Kind.UNKNOWN)])],
            "for i in [0.0, 1.0, -1.0] {": [
                Token("for", Kind.LOOP),
                Token("i", Kind.UNKNOWN),
                Token("in", Kind.RANGE),
                Token("[", Kind.RANGE, [Token("0.0", Kind.NUMBER), Token(",", Kind.UNKNOWN),
                                        Token("1.0", Kind.NUMBER), Token(",", Kind.UNKNOWN),
                                        Token("-1.0", Kind.NUMBER)]),
                Token("{", Kind.BRACES),
            ],
        }
        for case, result in cases.items():
            self.assertEqual(result, self.tokenizer.tokenize(case), case)

    def test_tokenize_string(self):
        cases = {
            '"abc"': Token("abc", Kind.STRING),
            '"a (b) ]"': Token("a (b) ]", Kind.STRING),
            '"x\\(1)y"': Token("x\\(1)y", Kind.STRING, [
                Token("x", Kind.STRING),
                Token("\\(", Kind.STRING_ESCAPE, [Token("1", Kind.NUMBER)]),
                Token("y", Kind.STRING),
            ]),
            '"\\(a + b)"': Token("\\(a + b)", Kind.STRING, [
                Token("\\(", Kind.STRING_ESCAPE, [Token("a", Kind.UNKNOWN), Token("+", Kind.OPERATOR),
                                                  Token("b", Kind.UNKNOWN)]),
            ]),
        }
        for case, result in cases.items():
            self.assertEqual([result], self.tokenizer.tokenize(case), case)

    def test_unmatched_message(self):
        try:
            self.tokenizer.tokenize("line(from: Pol(r: 0, phi: 0)")
        except TokenizeError as error:
            self.assertIn("'('", error.raw_msg)
            self.assertIn("index 4", error.raw_msg)
            self.assertEqual(4, error.start)
        else:
            self.fail("unmatched bracket was not reported")


    def test_is_symbol(self):
        self.assertTrue(Token(",", Kind.UNKNOWN).is_symbol(","))
        self.assertFalse(Token(",", Kind.STRING).is_symbol(","))
        self.assertFalse(Token("=", Kind.OPERATOR).is_symbol(","))

    def test_source_compiles_without_warnings(self):
        with open(lexical.__file__) as file:
            source = file.read()
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            compile(source, lexical.__file__, "exec")

if __name__ == '__main__':
    unittest.main()
