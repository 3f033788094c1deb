"""Session control for the hydra language. Stitches parsed lines into statements (loop bodies span multiple lines) and
runs them, either in command-line mode or file interpretation mode.
"""

import logging

from hydra.lang.error import GenericException, ParseError
from hydra.lang.interpreter import Interpreter
from hydra.lang.parser import Parser
from hydra.lang.system import Kind

logger = logging.getLogger(__name__)


class Session:
    """Governs a hydra session: the stack of open loops and the interpreter that runs completed statements."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, interpreter=None, cmd_line=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.interpreter = interpreter if interpreter is not None else Interpreter()
        self.parser = Parser(self.interpreter.system)

        self.frames = [[]]     # statement lists, frames[0] is the program, frames[-1] the body of the innermost loop
        self.loop_lines = []   # line numbers of the open loops
        self.lines = {}        # dict of line num: source line, for error messages

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.load(path)
        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @property
    def depth(self):
        """Number of open statement lists: 1 at top level, one more per open loop."""
        return len(self.frames)

    @staticmethod
    def preprocess_line(line):
        """Preprocesses a line from a file or command-line: drops the line break and turns the two characters '\\n'
        into a newline.
        """
        return line.rstrip("\r\n").replace("\\n", "\n")

    def load(self, path):
        """Parses every line of the file at path. Lines that do not parse are reported as warnings, the first of them
        is raised once the whole file has been read.
        """
        try:
            with open(path, "r") as file:
                source = [Session.preprocess_line(line) for line in file]
        except OSError:
            raise GenericException("'{}' could not be opened", path, diagnosis=False) from None

        first_error = None
        nodes = []
        for line_num, line in enumerate(source, start=1):
            self.lines[line_num] = line
            node = self.parser.parse_or_error(line, line_num)

            if node.kind is Kind.ERROR:
                error = node.error
                self.error_handler.register_line(self.path, line, line_num)
                self.error_handler.warn(error.raw_msg.replace("{", "{{").replace("}", "}}"), diagnosis=False)
                self.error_handler.remove_line(self.path)
                if first_error is None:
                    first_error = error
            else:
                nodes.append(node)

        if first_error is not None:
            self.error_handler.register_line(self.path, self.lines[first_error.line_number], first_error.line_number)
            raise first_error

        for node in nodes:
            self.error_handler.register_line(self.path, self.lines[node.line_number], node.line_number)
            self.push(node)
            self.error_handler.remove_line(self.path)

        logger.debug("Loaded %d lines from '%s'", len(source), path)

    def add(self, line, line_num):
        """Parses line and adds it to the current session. In command-line mode, a statement is run as soon as it is
        complete (i.e. no loop is open anymore).
        """
        line = Session.preprocess_line(line)
        self.lines[line_num] = line
        self.error_handler.register_line(self.path, line, line_num)  # in case error is raised

        self.push(self.parser.parse_string_line(line, line_num))

        self.error_handler.remove_line(self.path)  # error was not raised

        if self.cmd_line and self.depth == 1:
            self.run()

    def push(self, node):
        """Appends a parsed line to the innermost open statement list, opening or closing loops as needed."""
        if node.kind is Kind.EMPTY:
            return

        if node.kind is Kind.BRACES:
            if self.depth <= 1:
                raise ParseError("unexpected '{}', there is no loop to close", "}", line_number=node.line_number)
            self.frames.pop()
            closed = self.loop_lines.pop()
            logger.debug("Closed loop of line %d", closed)
            return

        self.frames[-1].append(node)

        if node.kind is Kind.LOOP and not node.closed:
            self.frames.append(node.children)
            self.loop_lines.append(node.line_number)
            logger.debug("Opened loop on line %d, depth is now %d", node.line_number, self.depth)

    def close(self):
        """Checks that every loop has been closed."""
        if self.depth > 1:
            line_num = self.loop_lines[-1]
            self.error_handler.register_line(self.path, self.lines.get(line_num, ""), line_num)
            raise ParseError("unterminated loop, missing '{}' for the loop on line {}", ("}", str(line_num)),
                             line_number=line_num)

    def run(self):
        """Runs this session's statements in order. Will raise any errors that are encountered."""
        self.close()

        statements = self.frames[0]
        try:
            for statement in statements:
                line_num = statement.line_number
                self.error_handler.register_line(self.path, self.lines.get(line_num, ""), line_num)

                try:
                    self.interpreter.interpret(statement)
                except GenericException as error:
                    if error.line_number is not None and error.line_number != line_num:  # failed inside a loop body
                        self.error_handler.register_line(self.path, self.lines.get(error.line_number, ""),
                                                         error.line_number)
                    raise

                self.error_handler.remove_line(self.path)
        finally:
            if self.cmd_line:
                statements.clear()
