"""Value types passed between the extractor, solver, ranker and callers."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class InvalidBoardError(ValueError):
    """Raised when a grid snapshot has an invalid shape or contents."""


class EnumerationTimeout(RuntimeError):
    """Raised when exact enumeration runs past its deadline."""


class Coordinate(NamedTuple):
    """Board position: x is the column, y is the row."""

    x: int
    y: int


@dataclass(frozen=True)
class Cell:
    """Read-only view of one board cell."""

    coordinates: Coordinate
    has_mine: bool = False
    is_revealed: bool = False
    is_flagged: bool = False
    adjacent_mines: int = 0


@dataclass(frozen=True)
class Constraint:
    """
    Linear constraint derived from one revealed numbered cell.

    Exactly ``required_mines`` of ``affected_cells`` contain a mine. The
    ``center`` coordinate is kept for diagnostics only.
    """

    center: Coordinate
    required_mines: int
    affected_cells: Tuple[Coordinate, ...]

    @property
    def is_valid(self) -> bool:
        return 0 <= self.required_mines <= len(self.affected_cells)


# Diagnostic kinds surfaced to callers; all of them are recoverable.
MALFORMED_CONSTRAINT = "malformed_constraint"
INCONSISTENT_BOARD = "inconsistent_board"
COMBINATORIAL_OVERFLOW = "combinatorial_overflow"
TIMEOUT = "timeout"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem met while analysing a board."""

    kind: str
    message: str
    cells: Tuple[Coordinate, ...] = ()


@dataclass(frozen=True)
class MoveRecommendation:
    """One ranked move suggestion."""

    coordinate: Coordinate
    probability: float
    priority: float
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "coordinate": [self.coordinate.x, self.coordinate.y],
            "probability": self.probability,
            "priority": self.priority,
            "reasoning": self.reasoning,
        }


@dataclass
class HintAnalysis:
    """
    Complete result of one board analysis.

    ``probabilities`` holds every unrevealed, unflagged cell exactly once.
    Guaranteed-safe cells are stored at 0.0 and guaranteed mines at 1.0.
    """

    guaranteed_safe: List[Coordinate]
    guaranteed_mines: List[Coordinate]
    probabilities: Dict[Coordinate, float]
    recommended_move: Optional[Coordinate]
    confidence: float
    diagnostics: List[Diagnostic] = field(default_factory=list)
    duration: float = 0.0

    @property
    def degraded(self) -> bool:
        """True when any part of the analysis fell back to an estimate."""
        return bool(self.diagnostics)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the analysis into JSON-compatible primitives.

        Coordinates become ``[x, y]`` pairs and the probability map becomes a
        list of records, so the payload survives any JSON or pickle transport.
        """
        return {
            "guaranteed_safe": [[c.x, c.y] for c in self.guaranteed_safe],
            "guaranteed_mines": [[c.x, c.y] for c in self.guaranteed_mines],
            "probabilities": [
                {"x": c.x, "y": c.y, "probability": p}
                for c, p in self.probabilities.items()
            ],
            "recommended_move": (
                None
                if self.recommended_move is None
                else [self.recommended_move.x, self.recommended_move.y]
            ),
            "confidence": self.confidence,
            "degraded": self.degraded,
            "diagnostics": [
                {
                    "kind": d.kind,
                    "message": d.message,
                    "cells": [[c.x, c.y] for c in d.cells],
                }
                for d in self.diagnostics
            ],
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "HintAnalysis":
        """Rebuild an analysis from the output of ``to_dict``."""
        move = payload.get("recommended_move")
        return cls(
            guaranteed_safe=[Coordinate(*c) for c in payload["guaranteed_safe"]],
            guaranteed_mines=[Coordinate(*c) for c in payload["guaranteed_mines"]],
            probabilities={
                Coordinate(r["x"], r["y"]): float(r["probability"])
                for r in payload["probabilities"]
            },
            recommended_move=None if move is None else Coordinate(*move),
            confidence=float(payload["confidence"]),
            diagnostics=[
                Diagnostic(
                    kind=d["kind"],
                    message=d["message"],
                    cells=tuple(Coordinate(*c) for c in d.get("cells", [])),
                )
                for d in payload.get("diagnostics", [])
            ],
            duration=float(payload.get("duration", 0.0)),
        )
