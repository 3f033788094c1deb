"""Handles interactive/command-line mode for the hydra interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """hydra interpreter shell."""
    intro = "hydra interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used while a loop is open
    _tmp_prompt = "> "       # also used for prompt swapping in loops

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def parseline(self, line):
        """Lines with an assignment are statements, even when they start with a command name (e.g. 'exit = 1.0')."""
        if "=" in line:
            return None, None, line.strip()
        return super().parseline(line)

    def default(self, line):
        """Executes arbitrary hydra statement."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.add(line, self.line_num)

        self.prompt = self.secondary_prompt if self.sess.depth > 1 else self._tmp_prompt

    def do_scopes(self, arg):
        """Prints all open scopes and their variables."""
        print(self.sess.interpreter.describe_scopes(), file=self.stdout)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the hydra interpreter!\n\n"
              "hydra describes constructions in the hyperbolic plane. Points are given in polar \n"
              "coordinates, e.g. 'var p = Pol(r: 1.0, phi: M_PI / 2.0)', and can be drawn \n"
              "with 'line', 'circle', 'mark' and the curve functions. 'save(file: \"out.ipe\")' \n"
              "writes the drawing as an Ipe document.\n\n"
              "Loops span multiple lines: 'for i in [0.0, 1.0, 5.0] {' opens one, '}' closes it.\n"
              "Type 'scopes' to list all variables, 'exit' to leave.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
