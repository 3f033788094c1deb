"""hydra: a small language for constructions in the hyperbolic plane."""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
