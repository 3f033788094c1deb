"""Drawing surface for hydra programs. Paths and marks are stored in the order they are added and written out as an
Ipe document on save.
"""

import logging

logger = logging.getLogger(__name__)

IPE_HEADER = (
    '<?xml version="1.0"?>\n'
    '<!DOCTYPE ipe SYSTEM "ipe.dtd">\n'
    '<ipe version="70206" creator="hydra">\n'
    '<ipestyle name="basic">\n'
    '</ipestyle>\n'
    '<page>\n'
    '<layer name="alpha"/>\n'
    '<view layers="alpha" active="alpha"/>\n'
)
IPE_FOOTER = "</page>\n</ipe>\n"


class Path:
    """Sequence of points (Pol), optionally closed."""

    def __init__(self, points, closed=False):
        self.points = list(points)
        self.closed = closed

    def __len__(self):
        return len(self.points)

    def __repr__(self):
        return f"Path({self.points!r}, closed={self.closed})"


class Mark:
    """Circle with a center (Pol) and a radius, either filled or outlined."""

    def __init__(self, center, radius, filled):
        self.center = center
        self.radius = radius
        self.filled = filled

    def __repr__(self):
        return f"Mark({self.center!r}, {self.radius!r}, filled={self.filled})"


class Canvas:
    """Append-only store of paths and marks."""

    def __init__(self, scale=1.0):
        self.scale = scale
        self.paths = []
        self.marks = []

    def add_path(self, points, closed=False):
        path = Path(points, closed)
        self.paths.append(path)
        logger.debug("Added path with %d points", len(path))
        return path

    def add_mark(self, center, radius, filled):
        mark = Mark(center, radius, filled)
        self.marks.append(mark)
        logger.debug("Added mark at %s with radius %f", center, radius)
        return mark

    def clear(self):
        self.paths.clear()
        self.marks.clear()

    def _point(self, pol):
        x, y = pol.to_euc()
        return f"{x * self.scale:f} {y * self.scale:f}"

    def ipe_path(self, path):
        """Ipe <path> element for path. Empty paths produce an empty string."""
        if not path.points:
            return ""

        first, *rest = path.points
        result = '<path stroke="black">\n'
        result += f"{self._point(first)} m\n"
        for point in rest:
            result += f"{self._point(point)} l\n"
        if path.closed:
            result += "h\n"
        return result + "</path>\n"

    def ipe_mark(self, mark):
        """Ipe ellipse element for mark."""
        fill = ' fill="black"' if mark.filled else ""
        radius = mark.radius * self.scale
        return (f'<path stroke="black"{fill}>\n'
                f"{radius:f} 0 0 {radius:f} {self._point(mark.center)} e\n"
                "</path>\n")

    def to_ipe(self):
        """Returns the whole canvas as an Ipe document."""
        body = "".join(self.ipe_mark(mark) for mark in self.marks)
        body += "".join(self.ipe_path(path) for path in self.paths)
        return IPE_HEADER + body + IPE_FOOTER

    def save(self, file_name):
        """Writes the canvas to file_name. Raises OSError if the file cannot be written."""
        with open(file_name, "w") as file:
            file.write(self.to_ipe())
        logger.debug("Saved %d paths and %d marks to '%s'", len(self.paths), len(self.marks), file_name)
