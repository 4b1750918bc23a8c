"""
Bootstrap configuration.

Collects the tuning constants of the bootstrap algorithms and their
solvers in one place:
- accuracy: Node-value accuracy handed to the solvers
- max_iterations: Convergence-loop budget (None uses the traits default)
- max_evaluations: Function-evaluation budget of the 1-D solvers
- growth_factor: Bracket expansion factor of the auto-bracketing solve
- guess_nudge: Fraction of the bracket a guess is moved inward when it
  sits on or beyond a bound
- localisation: Window size of the local bootstrap
- force_positive: Keep local-bootstrap unknowns positive
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class BootstrapConfig:
    """
    Container for bootstrap tuning constants.

    Attributes:
        accuracy: Required node accuracy (default 1e-12)
        max_iterations: Outer-loop iteration budget, None for traits default
        max_evaluations: 1-D solver evaluation budget (default 100)
        growth_factor: Bracket growth factor (default 1.6)
        guess_nudge: Inward guess nudge as a fraction of the bracket (default 0.2)
        localisation: Local bootstrap window size (default 2)
        force_positive: Positivity constraint for local bootstrap (default True)
    """
    accuracy: float = 1.0e-12
    max_iterations: Optional[int] = None
    max_evaluations: int = 100
    growth_factor: float = 1.6
    guess_nudge: float = 0.2
    localisation: int = 2
    force_positive: bool = True

    def __post_init__(self):
        if self.accuracy <= 0:
            raise ValueError(f"accuracy ({self.accuracy}) must be positive")
        if self.max_iterations is not None and self.max_iterations < 1:
            raise ValueError(f"max_iterations ({self.max_iterations}) must be at least 1")
        if self.max_evaluations < 2:
            raise ValueError(f"max_evaluations ({self.max_evaluations}) must be at least 2")
        if self.growth_factor <= 0:
            raise ValueError(f"growth_factor ({self.growth_factor}) must be positive")
        if not 0 < self.guess_nudge < 0.5:
            raise ValueError(f"guess_nudge ({self.guess_nudge}) must be in (0, 0.5)")
        if self.localisation < 1:
            raise ValueError(f"localisation ({self.localisation}) must be at least 1")

    @classmethod
    def default(cls) -> "BootstrapConfig":
        """Tight accuracy, traits-driven iteration budget."""
        return cls()

    @classmethod
    def fast(cls) -> "BootstrapConfig":
        """Looser accuracy for scenario generation and quick looks."""
        return cls(accuracy=1.0e-10, max_evaluations=60)


__all__ = ["BootstrapConfig"]
