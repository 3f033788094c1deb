"""Points of the hyperbolic plane in polar coordinates (native representation).

Only the parts the interpreter and canvas need live here: construction with a normalized angle, the textual
representation, the projection used when drawing, and theta.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Pol:
    """Polar coordinate: radius r and angle phi, with phi normalized into [0, 2π)."""
    r: float
    phi: float

    def __post_init__(self):
        object.__setattr__(self, "r", float(self.r))
        object.__setattr__(self, "phi", float(self.phi) % (2.0 * math.pi))

    def to_euc(self):
        """Returns the (x, y) position used to draw this point."""
        return self.r * math.cos(self.phi), self.r * math.sin(self.phi)

    @staticmethod
    def theta(r_1, r_2, distance):
        """Angle at the origin between two points with radii r_1 and r_2 that are distance apart. Returns -1.0 if there
        is no such angle, so sampling code can keep its previous angle instead of failing.
        """
        try:
            value = math.acos((math.cosh(r_1) * math.cosh(r_2) - math.cosh(distance)) /
                              (math.sinh(r_1) * math.sinh(r_2)))
        except (ValueError, ZeroDivisionError, OverflowError):
            return -1.0
        return -1.0 if math.isnan(value) else value

    def __str__(self):
        return f"Pol(r: {self.r:f}, phi: {self.phi:f})"
