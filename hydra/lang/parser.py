"""Parsing for the hydra language: token trees (see lexical.py) become parse trees, one per source line.

The statement grammar, on top of the tokens:

```
<statement>   ::= ""                                        ; Empty (blank line or comment)
                | ["var"] <name> "=" <statement>            ; Assignment (declaration with 'var')
                | <term> (<operator> <term>)*               ; Expression, operators: + - * /
                | <function> "(" <arguments> ")"            ; Function call
                | <initializer> "(" <arguments> ")"         ; Initialization, e.g. Pol(r: 1.0, phi: 0.0)
                | "for" <name> "in" "[" <lower> "," <step> "," <upper> "]" "{"
                | "}"                                       ; closes the innermost loop
                | <number> | <string> | <name>
<arguments>   ::= [<param> ":" <statement> ("," <param> ":" <statement>)*]
```

A leading '+' or '-' is accepted only before the first term of an expression ('- x' reads as '0 - x'). After an
operator, only a number literal may carry a sign ('3 * -1.5'), so write '3 * (0 - x)' for anything else.

Arguments must name the parameters of the function in their declared order. Loop bodies span multiple lines and are
attached to their loop by the session (see session.py), not by the parser.
"""

import logging

from hydra.lang.error import GenericException, ParseError
from hydra.lang.lexical import Token, Tokenizer
from hydra.lang.system import Kind

logger = logging.getLogger(__name__)


class ParseNode:
    """Node of a parse tree. text holds the source text that produced the node (operator, number, name, ...)."""

    def __init__(self, kind, text="", children=None, line_number=-1):
        self.kind = kind
        self.text = text
        self.children = children if children is not None else []
        self.line_number = line_number
        self.closed = False  # loops only: body closed on the header line
        self.error = None    # Error nodes only: the exception that produced the node

    def is_valid(self):
        """Whether no node in this tree is an Error node."""
        return self.kind is not Kind.ERROR and all(child.is_valid() for child in self.children)

    def set_line_number(self, line_number):
        """Sets line_number on this node and all of its descendants."""
        self.line_number = line_number
        for child in self.children:
            child.set_line_number(line_number)

    def display(self, indents=0):
        """Recursively displays the parse tree.

        Format:
        <Kind>: <text>
            <Kind>: <text>
            ...
        """
        result = f"{'    ' * indents}{self.kind}: {self.text}"
        for child in self.children:
            result += "\n" + child.display(indents + 1)
        return result

    def __repr__(self):
        if self.children:
            return f"ParseNode({self.kind}, {self.text!r}, {self.children!r})"
        return f"ParseNode({self.kind}, {self.text!r})"

    def __eq__(self, other):
        return (isinstance(other, ParseNode) and self.kind == other.kind and self.text == other.text
                and self.children == other.children)


class Parser:
    """Recursive descent parser, validating statements against the keywords and builtins known to system."""

    def __init__(self, system):
        self.system = system
        self.tokenizer = Tokenizer(system)

        self.known_parsers = {
            Kind.ASSIGNMENT: self.parse_assignment,
            Kind.BRACES: self.parse_braces,
            Kind.EMPTY: self.parse_empty,
            Kind.EXPRESSION: self.parse_expression,
            Kind.FUNCTION: self.parse_function,
            Kind.INITIALIZATION: self.parse_initialization,
            Kind.LOOP: self.parse_loop,
            Kind.NUMBER: self.parse_number,
            Kind.STRING: self.parse_string,
            Kind.UNKNOWN: self.parse_unknown,
        }

    def parse_string_line(self, line, line_number=-1):
        """Tokenizes and parses a single source line."""
        logger.debug("Parsing string: '%s'", line)
        try:
            result = self.parse_line(self.tokenizer.tokenize(line))
        except GenericException as error:
            if error.line_number is None:
                error.line_number = line_number
            raise

        result.set_line_number(line_number)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Parse result:\n%s", result.display(1))
        return result

    def parse_or_error(self, line, line_number=-1):
        """Like parse_string_line, but returns an Error node holding the message instead of raising."""
        try:
            return self.parse_string_line(line, line_number)
        except GenericException as error:
            node = ParseNode(Kind.ERROR, error.raw_msg, line_number=line_number)
            node.error = error
            logger.debug("Line %d did not parse: %s", line_number, error.raw_msg)
            return node

    @staticmethod
    def classify(tokens):
        """Returns the Kind of statement that tokens form."""
        if not tokens:
            return Kind.EMPTY
        if any(token.is_symbol("=") for token in tokens):
            return Kind.ASSIGNMENT
        if any(token.kind is Kind.OPERATOR for token in tokens):
            return Kind.EXPRESSION
        return tokens[0].kind

    def parse_line(self, tokens):
        """Parses a list of tokens into a ParseNode."""
        kind = Parser.classify(tokens)
        parser = self.known_parsers.get(kind)
        if parser is None:
            raise ParseError("could not parse '{}', type of statement '{}' unclear", (tokens[0].text, str(kind)))
        return parser(tokens)

    def parse_empty(self, tokens):
        return ParseNode(Kind.EMPTY)

    def parse_braces(self, tokens):
        """A closing brace on a line of its own ends the innermost loop."""
        if len(tokens) != 1 or not tokens[0].is_symbol("}"):
            raise ParseError("unexpected '{}', braces may only open a loop or close it on a line of their own",
                             tokens[0].text)
        return ParseNode(Kind.BRACES, "}")

    def parse_assignment(self, tokens):
        """Parses 'var name = statement' (declaration) or 'name = statement' (reassignment)."""
        equals = [idx for idx, token in enumerate(tokens) if token.is_symbol("=")]
        if len(equals) != 1:
            raise ParseError("invalid assignment, there must only be one '{}' per statement", "=")

        lhs, rhs = tokens[:equals[0]], tokens[equals[0] + 1:]
        usage = "use 'a = 10.0' or 'var a = 10.0' to assign a variable"

        if len(lhs) == 1:
            if lhs[0].kind is not Kind.UNKNOWN or lhs[0].children:
                raise ParseError("invalid assignment, expected variable name but found '{}', " + usage, lhs[0].text)
            children = [ParseNode(Kind.VARIABLE, lhs[0].text)]

        elif len(lhs) == 2 and lhs[0].is_symbol("var"):
            if lhs[1].kind is not Kind.UNKNOWN or lhs[1].children:
                raise ParseError("invalid assignment, expected variable name but found '{}', " + usage, lhs[1].text)
            if lhs[1].text.startswith("_"):
                raise ParseError("invalid assignment, variables starting with '_' are reserved: '{}'", lhs[1].text)
            children = [ParseNode(Kind.ASSIGNMENT, "var"), ParseNode(Kind.VARIABLE, lhs[1].text)]

        else:
            raise ParseError("invalid assignment, " + usage, lhs[0].text if lhs else "=")

        if not rhs:
            raise ParseError("missing right hand side of assignment to '{}'", children[-1].text)

        children.append(self.parse_line(rhs))
        return ParseNode(Kind.ASSIGNMENT, "=", children)

    def parse_expression(self, tokens):
        """Parses alternating terms and operators. A single token is unwrapped: parenthesized tokens are parsed as an
        expression of their own, anything else as a statement.
        """
        if not tokens:
            raise ParseError("unexpectedly found empty expression")

        if len(tokens) == 1:
            token = tokens[0]
            if token.kind is Kind.EXPRESSION:
                if not token.children:
                    raise ParseError("invalid or empty expression '{}'", "()")
                return self.parse_expression(token.children)
            if token.kind is Kind.OPERATOR:
                raise ParseError("invalid syntax, operator '{}' is missing its operands", token.text)
            return self.parse_line(tokens)

        if len(tokens) % 2 == 0:
            if tokens[0].kind is Kind.OPERATOR and tokens[0].text in ("+", "-"):
                return self._parse_terms([Token("0", Kind.NUMBER)] + tokens)
            raise ParseError("invalid number of terms in expression near '{}'", tokens[0].text)

        return self._parse_terms(tokens)

    def _parse_terms(self, tokens):
        children = []
        for idx, token in enumerate(tokens):
            if idx % 2 == 0:
                if token.kind is Kind.OPERATOR:
                    raise ParseError("invalid syntax, unexpectedly found operator '{}'", token.text)
                children.append(self.parse_expression([token]))
            else:
                if token.kind is not Kind.OPERATOR:
                    raise ParseError("invalid syntax, expected operator but found '{}' instead", token.text)
                children.append(ParseNode(Kind.OPERATOR, token.text))

        return ParseNode(Kind.EXPRESSION, "", children)

    def _callable(self, tokens, kind):
        """Checks the shape of a function call/initialization and returns its signature."""
        if len(tokens) != 1:
            raise ParseError("invalid number of statements near '{}', use only one function call per line",
                             tokens[0].text)

        token = tokens[0]
        if token.kind is not kind:
            raise ParseError("invalid syntax, expected {1} but found '{0}'", (token.text, str(kind)))

        signature = self.system.signature(token.text)
        if signature is None:
            raise ParseError("unknown function: '{}'", token.text)
        return signature

    def parse_function(self, tokens):
        signature = self._callable(tokens, Kind.FUNCTION)
        arguments = self.parse_argument_list(tokens[0].children, signature)
        return ParseNode(Kind.FUNCTION, signature.name, [arguments])

    def parse_initialization(self, tokens):
        signature = self._callable(tokens, Kind.INITIALIZATION)
        if not tokens[0].children:
            raise ParseError("missing arguments during initialization of '{}', usage: {}",
                             (signature.name, signature.usage))
        arguments = self.parse_argument_list(tokens[0].children, signature)
        return ParseNode(Kind.INITIALIZATION, signature.name, [arguments])

    def parse_argument_list(self, tokens, signature):
        """Parses 'param: value, param: value, ...' where the params must match signature.parameters in order."""
        expected = signature.parameters
        result = ParseNode(Kind.ARGUMENT_LIST, signature.name)

        def fail(msg, exprs=None):
            return ParseError(f"{msg} (usage: {signature.usage})", exprs)

        idx = 0
        while idx < len(tokens):
            found = len(result.children)
            if found >= len(expected):
                raise fail("extraneous argument '{}' in call of '{}'", (tokens[idx].text, signature.name))

            name = tokens[idx].text
            if not tokens[idx].is_symbol(expected[found]):
                raise fail("invalid argument in call of '{1}', expected '{2}' but found '{0}'",
                           (name, signature.name, expected[found]))

            idx += 1
            if idx >= len(tokens):
                raise fail("missing argument value for '{}'", name)
            if not tokens[idx].is_symbol(":"):
                raise fail("invalid syntax in call of '{1}', expected ':' but found '{0}'",
                           (tokens[idx].text, signature.name))

            idx += 1
            value = []
            while idx < len(tokens) and not tokens[idx].is_symbol(","):
                if tokens[idx].is_symbol(":"):
                    raise fail("invalid syntax in call of '{1}', expected ',' but found '{0}'", (":", signature.name))
                value.append(tokens[idx])
                idx += 1

            if not value:
                raise fail("missing argument value for '{}'", name)

            result.children.append(ParseNode(Kind.ARGUMENT, name, [self.parse_line(value)]))

            if idx < len(tokens):  # at a ','
                idx += 1
                if idx >= len(tokens):
                    raise fail("trailing '{}' in call of '{}'", (",", signature.name))

        if len(result.children) < len(expected):
            missing = expected[len(result.children)]
            raise fail("missing argument '{}' in call of '{}'", (missing, signature.name))

        return result

    def parse_loop(self, tokens):
        """Parses a loop header 'for i in [lower, step, upper] {'. The body is attached by the session."""
        usage = "use 'for i in [0.0, 1.0, 10.0] {' to define a loop"

        closed = len(tokens) == 6 and tokens[5].is_symbol("}")
        if len(tokens) != 5 and not closed:
            raise ParseError("invalid loop definition, " + usage, tokens[0].text)

        keyword, variable, in_keyword, range_token, brace = tokens[:5]
        if not (keyword.is_symbol("for") and in_keyword.is_symbol("in") and brace.is_symbol("{")):
            raise ParseError("invalid loop definition, " + usage, keyword.text)
        if variable.kind is not Kind.UNKNOWN or variable.children:
            raise ParseError("invalid loop definition, expected variable name but found '{}'", variable.text)
        if range_token.kind is not Kind.RANGE or range_token.text != "[":
            raise ParseError("invalid loop definition, expected range but found '{}'", range_token.text)

        loop = ParseNode(Kind.LOOP, "for", [ParseNode(Kind.VARIABLE, variable.text), self.parse_range(range_token)])
        loop.closed = closed
        return loop

    def parse_range(self, token):
        """Parses the contents of '[lower, step, upper]' into a Range node with three children."""
        groups = [[]]
        for child in token.children:
            if child.is_symbol(","):
                groups.append([])
            else:
                groups[-1].append(child)

        if len(groups) != 3 or not all(groups):
            raise ParseError("invalid range definition, expected 3 arguments (lower bound, step size, upper bound) "
                             "but found {}", str(len([group for group in groups if group])))

        return ParseNode(Kind.RANGE, "[", [self.parse_line(group) for group in groups])

    def parse_number(self, tokens):
        if len(tokens) != 1:
            raise ParseError("invalid number of tokens near '{}', could not be read as a number", tokens[0].text)
        return ParseNode(Kind.NUMBER, tokens[0].text)

    def parse_string(self, tokens):
        """Parses a (possibly interpolated) string literal."""
        if len(tokens) != 1:
            raise ParseError("invalid number of tokens near '\"{}\"', use only one string per statement",
                             tokens[0].text)

        token = tokens[0]
        result = ParseNode(Kind.STRING, token.text)
        for child in token.children:
            if child.kind is Kind.STRING_ESCAPE:
                if not child.children:
                    raise ParseError("empty string interpolation in '\"{}\"'", token.text)
                result.children.append(ParseNode(Kind.STRING_ESCAPE, child.text, [self.parse_line(child.children)]))
            else:
                result.children.append(ParseNode(Kind.STRING, child.text))

        return result

    def parse_unknown(self, tokens):
        """A single unknown token is a reference to a variable."""
        token = tokens[0]
        if token.children or (len(tokens) == 2 and tokens[1].kind is Kind.EXPRESSION):
            raise ParseError("unknown function: '{}'", token.text)
        if len(tokens) != 1:
            raise ParseError("invalid syntax near '{}', expected a single variable name", token.text)
        return ParseNode(Kind.UNKNOWN, token.text)
