r"""Lexical analysis for the hydra language: turns a single source line into a tree of tokens. Parsing the tokens into
statements happens in parser.py.

A line is split into tokens as follows:

```
<line>      ::= <token>* ["//" <char>*]        ; comments are stripped before tokenizing
<token>     ::= "(" <token>* ")"               ; Expression token, or the arguments of a preceding function
              | "[" <token>* "]"               ; Range token, or the arguments of a preceding function
              | '"' (<char> | <escape>)* '"'   ; String token
              | <separator>                    ; one of: space ( + - * / ) , : = [ ]
              | <char>+                        ; keyword, number, M_PI or unknown (variable name)
<escape>    ::= "\(" <token>* ")"              ; StringEscape: interpolated expression
```

Brackets are matched by counting the depth of the same bracket kind; quoted strings are skipped while counting, so
brackets inside strings never need to be balanced.
"""

import logging
import re

from hydra.lang.error import TokenizeError
from hydra.lang.system import Kind, System

logger = logging.getLogger(__name__)


class Token:
    """A token has a kind, its text and the tokens found inside its brackets/quotes."""

    def __init__(self, text, kind, children=None):
        self.text = text
        self.kind = kind
        self.children = children if children is not None else []

    def is_symbol(self, text):
        """Whether this token is the keyword or separator text. String literals never are, whatever they contain."""
        return self.kind is not Kind.STRING and self.text == text

    def display(self, indents=0):
        """Recursively displays the token tree, one token per line."""
        result = f"{'    ' * indents}{self.text} ({self.kind})"
        for child in self.children:
            result += "\n" + child.display(indents + 1)
        return result

    def __repr__(self):
        if self.children:
            return f"Token({self.text!r}, {self.kind}, {self.children!r})"
        return f"Token({self.text!r}, {self.kind})"

    def __eq__(self, other):
        return (isinstance(other, Token) and self.text == other.text and self.kind == other.kind
                and self.children == other.children)


class Tokenizer:
    """Splits source lines into token trees, classifying tokens with the keywords known to system."""
    SEPARATORS = " \t(+-*/),:=[]"
    WHITESPACE = " \t"
    BRACKETS = {"(": ")", "[": "]", "{": "}"}
    ESCAPE = "\\("

    NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
    EXPONENT = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)[eE]$")  # number waiting for a signed exponent

    def __init__(self, system):
        self.system = system
        self._line = ""  # line being tokenized, used for error messages

    @staticmethod
    def matching_bracket(text, position):
        """Returns the index of the bracket closing the one at position, or -1 if there is none."""
        opening = text[position]
        closing = Tokenizer.BRACKETS[opening]

        depth = 0
        idx = position
        while idx < len(text):
            char = text[idx]
            if char == '"':
                idx = Tokenizer.matching_quote(text, idx)
                if idx == -1:
                    return -1
            elif char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return idx
            idx += 1

        return -1

    @staticmethod
    def matching_quote(text, position):
        """Returns the index of the quote closing the one at position, or -1 if there is none. String escapes are
        skipped as a whole, so quotes inside an interpolated expression do not end the string.
        """
        idx = position + 1
        while idx < len(text):
            if text.startswith(Tokenizer.ESCAPE, idx):
                idx = Tokenizer.matching_bracket(text, idx + 1)
                if idx == -1:
                    return -1
            elif text[idx] == '"':
                return idx
            idx += 1

        return -1

    @staticmethod
    def clean(line):
        """Strips surrounding whitespace and a trailing '//' comment (outside of strings) from line."""
        idx = 0
        while idx < len(line):
            if line[idx] == '"':
                end = Tokenizer.matching_quote(line, idx)
                if end == -1:
                    break  # unmatched quote, reported while tokenizing
                idx = end
            elif line.startswith("//", idx):
                line = line[:idx]
                break
            idx += 1

        return line.strip()

    def kind_of(self, text):
        """Classifies a single token: keyword, number (including M_PI) or unknown."""
        if text == System.ERROR_STRING:
            return Kind.ERROR

        kind = self.system.kind_of_keyword(text)
        if kind is not None:
            return kind

        if text == System.PI or Tokenizer.NUMBER.match(text):
            return Kind.NUMBER
        return Kind.UNKNOWN

    def tokenize(self, line):
        """Returns the token tree of line. Raises TokenizeError on unmatched brackets/quotes."""
        self._line = Tokenizer.clean(line)
        logger.debug("Tokenizing string: '%s'", self._line)

        tokens = self._tokenize(self._line, 0)
        if logger.isEnabledFor(logging.DEBUG):
            for token in tokens:
                logger.debug("Token:\n%s", token.display(1))
        return tokens

    def _unmatched(self, char, position, what="bracket"):
        msg = "missing {2}: could not find matching {2} for '{1}' at character index {3}"
        return TokenizeError(msg, (self._line, char, what, str(position)), start=position, end=position + 1)

    def _end_of_run(self, text, idx):
        """Returns the index one past the plain (non-separator) run of characters starting at idx."""
        start = idx
        while idx < len(text):
            char = text[idx]
            if char in "+-" and Tokenizer.EXPONENT.match(text[start:idx]):
                idx += 1
                continue
            if char in Tokenizer.SEPARATORS or char == '"':
                break
            idx += 1
        return idx

    @staticmethod
    def _is_sign(text, idx, tokens):
        """Whether the '-' at idx belongs to a numeric literal rather than being a binary operator."""
        if idx + 1 >= len(text) or not (text[idx + 1].isdigit() or text[idx + 1] == "."):
            return False
        if not tokens:
            return True
        previous = tokens[-1]
        return previous.kind is Kind.OPERATOR or any(previous.is_symbol(symbol) for symbol in (",", ":", "="))

    def _tokenize(self, text, offset):
        """Tokenizes text, which starts at index offset of the cleaned line."""
        tokens = []
        idx = 0

        while idx < len(text):
            char = text[idx]

            if char in Tokenizer.WHITESPACE:
                idx += 1

            elif char in "([":
                end = Tokenizer.matching_bracket(text, idx)
                if end == -1:
                    raise self._unmatched(char, offset + idx)

                children = self._tokenize(text[idx + 1:end], offset + idx + 1)

                # brackets directly after a function/initializer hold its arguments
                if tokens and tokens[-1].kind in (Kind.FUNCTION, Kind.INITIALIZATION):
                    tokens[-1].children.extend(children)
                elif char == "(":
                    tokens.append(Token("(", Kind.EXPRESSION, children))
                else:
                    tokens.append(Token("[", Kind.RANGE, children))
                idx = end + 1

            elif char in ")]":
                msg = "unexpected '{1}' at character index {2}, no matching opening bracket"
                raise TokenizeError(msg, (self._line, char, str(offset + idx)), start=offset + idx,
                                    end=offset + idx + 1)

            elif char == '"':
                end = Tokenizer.matching_quote(text, idx)
                if end == -1:
                    raise self._unmatched(char, offset + idx, what="quote")
                tokens.append(self._tokenize_string(text[idx + 1:end], offset + idx + 1))
                idx = end + 1

            else:
                if char == "-" and Tokenizer._is_sign(text, idx, tokens):
                    end = self._end_of_run(text, idx + 1)
                elif char in Tokenizer.SEPARATORS:
                    end = idx + 1
                else:
                    end = self._end_of_run(text, idx)

                run = text[idx:end]
                tokens.append(Token(run, self.kind_of(run)))
                idx = end

        return tokens

    def _tokenize_string(self, content, offset):
        """Builds a String token from the text between two quotes. Each '\\( ... )' escape becomes a StringEscape
        child holding the tokenized expression, the literal text around escapes becomes String children.
        """
        children = []
        literal_start = 0
        idx = 0

        while idx < len(content):
            if content.startswith(Tokenizer.ESCAPE, idx):
                end = Tokenizer.matching_bracket(content, idx + 1)
                if end == -1:
                    raise self._unmatched("(", offset + idx + 1)

                if idx > literal_start:
                    children.append(Token(content[literal_start:idx], Kind.STRING))
                escaped = self._tokenize(content[idx + 2:end], offset + idx + 2)
                children.append(Token(Tokenizer.ESCAPE, Kind.STRING_ESCAPE, escaped))

                idx = literal_start = end + 1
            else:
                idx += 1

        if not children:
            return Token(content, Kind.STRING)

        if literal_start < len(content):
            children.append(Token(content[literal_start:], Kind.STRING))
        return Token(content, Kind.STRING, children)
