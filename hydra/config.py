"""Run-time configuration of the hydra interpreter, filled from command-line arguments."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Config:
    """Settings shared by the interpreter and its builtins.

    :param resolution: number of samples taken along a curve
    :param seed: seed of the random number generator used by random(), None for a random seed
    :param debug: whether debug logging is enabled
    """
    resolution: int = 100
    seed: Optional[int] = None
    debug: bool = False

    def __post_init__(self):
        assert self.resolution >= 1, "resolution must be a positive number of samples"

    @classmethod
    def from_args(cls, args):
        """Builds a Config from an argparse namespace, using defaults for missing attributes."""
        defaults = cls()
        return cls(resolution=getattr(args, "resolution", defaults.resolution),
                   seed=getattr(args, "seed", defaults.seed),
                   debug=getattr(args, "debug", defaults.debug))
