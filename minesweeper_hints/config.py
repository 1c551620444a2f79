"""Tunable parameters of the hint engine."""

import os
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional, Tuple

# Standard difficulty levels: name -> (width, height, mines)
DIFFICULTY_PRESETS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (30, 16, 99),
}

ENV_PREFIX = "MINESWEEPER_HINTS_"


@dataclass(frozen=True)
class EngineConfig:
    """
    Configuration shared by the solver and the analysis facade.

    Attributes:
        max_component_size: Largest independent frontier component that is
            enumerated exactly. Larger components receive
            ``fallback_probability``. 20 cells bounds the worst case at
            about one million assignments.
        timeout: Wall-clock budget in seconds for the combinatorial pass of a
            single analysis. ``None`` disables the deadline.
        fallback_probability: Uniform estimate used for components that could
            not be enumerated (overflow or timeout).
        early_game_fraction: Fraction of revealed cells below which the
            corner/edge adjustment is applied.
        corner_factor: Multiplier applied to corner cell probabilities early on.
        edge_factor: Multiplier applied to edge cell probabilities early on.
        edge_adjustment: Enables the early-game corner/edge adjustment.
        deadline_check_interval: Number of search nodes visited between two
            clock reads during enumeration.
    """

    max_component_size: int = 20
    timeout: Optional[float] = 5.0
    fallback_probability: float = 0.5
    early_game_fraction: float = 0.1
    corner_factor: float = 0.8
    edge_factor: float = 0.9
    edge_adjustment: bool = True
    deadline_check_interval: int = 1024

    def __post_init__(self) -> None:
        if self.max_component_size < 1:
            raise ValueError("max_component_size must be at least 1.")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive or None.")
        if not 0.0 <= self.fallback_probability <= 1.0:
            raise ValueError("fallback_probability must lie in [0, 1].")
        if not 0.0 <= self.early_game_fraction <= 1.0:
            raise ValueError("early_game_fraction must lie in [0, 1].")
        for name in ("corner_factor", "edge_factor"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ValueError(f"{name} must lie in [0, 1].")
        if self.deadline_check_interval < 1:
            raise ValueError("deadline_check_interval must be at least 1.")

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "EngineConfig":
        """
        Build a configuration from environment variables.

        Each field can be overridden by ``<prefix><FIELD_NAME>`` in upper case,
        e.g. ``MINESWEEPER_HINTS_TIMEOUT=2.5``. A timeout of ``none`` disables
        the deadline. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        overrides: Dict[str, object] = {}

        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            raw = raw.strip()

            if f.name == "timeout":
                overrides[f.name] = None if raw.lower() in ("", "none") else float(raw)
            elif f.name == "edge_adjustment":
                overrides[f.name] = raw.lower() in ("1", "true", "yes", "on")
            elif f.name in ("max_component_size", "deadline_check_interval"):
                overrides[f.name] = int(raw)
            else:
                overrides[f.name] = float(raw)

        return cls(**overrides)  # type: ignore[arg-type]
