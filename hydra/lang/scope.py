"""Variable storage for hydra programs: a stack of scopes, each mapping variable names to values.

Lookups walk the stack from the innermost scope outwards, declarations always land in the innermost scope, and the
outermost (global) scope can never be closed.
"""

from contextlib import contextmanager

from hydra.lang.error import EvalError


class ScopeStack:
    """Stack of name: value dicts. scopes[0] is the global scope, scopes[-1] the current one."""

    def __init__(self):
        self.scopes = [{}]

    @property
    def depth(self):
        return len(self.scopes)

    @property
    def current(self):
        return self.scopes[-1]

    def open(self):
        """Opens a new (innermost) scope."""
        self.scopes.append({})

    def close(self):
        """Closes the current scope, discarding its variables. The global scope cannot be closed."""
        if len(self.scopes) <= 1:
            raise EvalError("could not close scope, as that would mean closing the global scope", diagnosis=False)
        self.scopes.pop()

    @contextmanager
    def scoped(self):
        """Opens a scope for the duration of a with block. The scope is closed on every exit path."""
        self.open()
        depth = len(self.scopes)
        try:
            yield self.current
        finally:
            del self.scopes[depth:]  # scopes a failing block left open
            self.close()

    def index_of(self, name):
        """Returns the index of the innermost scope that binds name, or None."""
        for idx in range(len(self.scopes) - 1, -1, -1):
            if name in self.scopes[idx]:
                return idx
        return None

    def declare(self, name, value):
        """Binds name in the current scope. name must not already be bound in the current scope."""
        if name in self.current:
            raise EvalError("redefinition of '{}'", name, diagnosis=False)
        self.current[name] = value

    def assign(self, name, value):
        """Overwrites the binding of name in the scope it resolves to. name must already be bound."""
        idx = self.index_of(name)
        if idx is None:
            msg = "trying to assign to undefined variable '{}', define it first using 'var {} = ...'"
            raise EvalError(msg, (name, name), diagnosis=False)
        self.scopes[idx][name] = value

    def lookup(self, name):
        """Returns the value of name, searching from the current scope outwards."""
        idx = self.index_of(name)
        if idx is None:
            msg = "use of undeclared variable '{}', declare it first using 'var {} = ...'"
            raise EvalError(msg, (name, name), diagnosis=False)
        return self.scopes[idx][name]

    def lookup_local(self, name):
        """Returns the value of name in the current scope only."""
        try:
            return self.current[name]
        except KeyError:
            raise EvalError("variable '{}' is not defined in the current scope", name, diagnosis=False) from None

    def __contains__(self, name):
        return self.index_of(name) is not None

    def __repr__(self):
        return f"ScopeStack({self.scopes!r})"
