"""Exact constraint-satisfaction solver producing guarantees and mine probabilities."""

import itertools
import logging
import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import (
    DefaultDict,
    Deque,
    Dict,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
)

from .board import BoardSnapshot
from .config import EngineConfig
from .constraints import extract_constraints, frontier_cells
from .models import (
    COMBINATORIAL_OVERFLOW,
    INCONSISTENT_BOARD,
    MALFORMED_CONSTRAINT,
    TIMEOUT,
    Constraint,
    Coordinate,
    Diagnostic,
    EnumerationTimeout,
)
from .utils import clamp, row_major

logger = logging.getLogger(__name__)

# Probability used when a component has no satisfying assignment.
INCONSISTENT_PROBABILITY = 0.5


@dataclass
class SolverResult:
    """Output of one solver pass."""

    guaranteed_safe: List[Coordinate]
    guaranteed_mines: List[Coordinate]
    probabilities: Dict[Coordinate, float]
    diagnostics: List[Diagnostic] = field(default_factory=list)
    frontier: List[Coordinate] = field(default_factory=list)
    open_cells: List[Coordinate] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.diagnostics)


@dataclass
class Deductions:
    """Result of the deductive tier."""

    known: Dict[Coordinate, bool]
    residual: List[Constraint]
    diagnostics: List[Diagnostic]

    @property
    def safe(self) -> List[Coordinate]:
        return row_major(c for c, is_mine in self.known.items() if not is_mine)

    @property
    def mines(self) -> List[Coordinate]:
        return row_major(c for c, is_mine in self.known.items() if is_mine)


def count_assignments(
    constraints: Sequence[Constraint],
    cells: Sequence[Coordinate],
    deadline: Optional[float] = None,
    check_interval: int = 1024,
) -> Tuple[int, Dict[Coordinate, int]]:
    """
    Count every mine assignment over ``cells`` that satisfies all constraints.

    The search walks the constraints in order and, for each one, tries every
    way of placing its still-needed mines among its unassigned cells, so only
    assignments consistent with the constraints seen so far are expanded.
    Cells covered by no constraint are free and double the count.

    Args:
        constraints: Valid constraints whose cells are all in ``cells``.
        cells: The variables of the sub-problem.
        deadline: Absolute ``time.monotonic()`` value after which the search
            aborts, or None for no limit.
        check_interval: Search nodes visited between two clock reads.

    Returns:
        Tuple of (number of satisfying assignments, cell -> number of those
        assignments in which the cell is a mine).

    Raises:
        ValueError: If a constraint references a cell outside ``cells``.
        EnumerationTimeout: If the deadline passes during the search.
    """
    cell_set = set(cells)
    for constraint in constraints:
        if not cell_set.issuperset(constraint.affected_cells):
            raise ValueError(
                f"Constraint at {tuple(constraint.center)} references cells "
                "outside the enumerated set."
            )

    constrained: Set[Coordinate] = {
        cell for constraint in constraints for cell in constraint.affected_cells
    }
    free_cells = [c for c in cells if c not in constrained]

    mine_counts: DefaultDict[Coordinate, int] = defaultdict(int)
    assignment: Dict[Coordinate, bool] = {}
    total = 0
    nodes = 0

    def dfs(i: int) -> None:
        nonlocal total, nodes

        nodes += 1
        if deadline is not None and nodes % check_interval == 0:
            if time.monotonic() > deadline:
                raise EnumerationTimeout("Enumeration deadline exceeded.")

        if i == len(constraints):
            total += 1
            for cell, is_mine in assignment.items():
                if is_mine:
                    mine_counts[cell] += 1
            return

        constraint = constraints[i]
        assigned_mines = 0
        unassigned: List[Coordinate] = []
        for cell in constraint.affected_cells:
            value = assignment.get(cell)
            if value is None:
                unassigned.append(cell)
            elif value:
                assigned_mines += 1

        needed = constraint.required_mines - assigned_mines
        if needed < 0 or needed > len(unassigned):
            return

        for mines in itertools.combinations(unassigned, needed):
            chosen = set(mines)
            for cell in unassigned:
                assignment[cell] = cell in chosen
            dfs(i + 1)

        for cell in unassigned:
            del assignment[cell]

    dfs(0)

    if free_cells and total:
        scale = 2 ** len(free_cells)
        counts = {cell: mine_counts[cell] * scale for cell in cells if cell in constrained}
        for cell in free_cells:
            counts[cell] = total * scale // 2
        return total * scale, counts

    return total, {cell: mine_counts[cell] for cell in cells}


class ConstraintSolver:
    """
    Two-tier solver over the constraint network of a board.

    1. Deductive tier: zero, saturation and subset rules applied to a fixed
       point. Everything it concludes is a logical guarantee.
    2. Combinatorial tier: exact enumeration of each independent frontier
       component, giving marginal mine probabilities. Components that are too
       large, inconsistent or cut short by the deadline get a uniform
       estimate and a diagnostic.

    Open cells then share a background rate derived from the remaining mine
    count, and early in the game corner and edge cells are nudged down.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    # -------------------------------------------------------------------------
    # Deductive tier
    # -------------------------------------------------------------------------

    @staticmethod
    def _reduce(
        constraint: Constraint, known: Dict[Coordinate, bool]
    ) -> Constraint:
        """Remove resolved cells from a constraint and adjust its count."""
        remaining: List[Coordinate] = []
        required = constraint.required_mines
        for cell in constraint.affected_cells:
            value = known.get(cell)
            if value is None:
                remaining.append(cell)
            elif value:
                required -= 1
        return Constraint(constraint.center, required, tuple(remaining))

    @staticmethod
    def _mark(
        cells: Sequence[Coordinate],
        is_mine: bool,
        known: Dict[Coordinate, bool],
        diagnostics: List[Diagnostic],
    ) -> bool:
        """Record deduced cells; returns True if anything new was learned."""
        changed = False
        for cell in cells:
            previous = known.get(cell)
            if previous is None:
                known[cell] = is_mine
                changed = True
            elif previous != is_mine:
                diagnostics.append(
                    Diagnostic(
                        INCONSISTENT_BOARD,
                        f"Cell {tuple(cell)} is deduced both safe and mined.",
                        (cell,),
                    )
                )
        return changed

    def deduce(self, constraints: Sequence[Constraint]) -> Deductions:
        """
        Apply the sound inference rules until nothing new can be concluded.

        Args:
            constraints: Valid constraints (malformed ones must be removed by
                the caller).

        Returns:
            The resolved cells, the residual constraints over unresolved cells,
            and any inconsistency found on the way.
        """
        known: Dict[Coordinate, bool] = {}
        diagnostics: List[Diagnostic] = []
        active: List[Constraint] = list(constraints)

        while True:
            reduced: List[Constraint] = []
            for constraint in active:
                r = self._reduce(constraint, known)
                if not r.is_valid:
                    diagnostics.append(
                        Diagnostic(
                            INCONSISTENT_BOARD,
                            f"Constraint at {tuple(constraint.center)} cannot be "
                            "satisfied by the deduced cells.",
                            constraint.affected_cells,
                        )
                    )
                    continue
                if r.affected_cells:
                    reduced.append(r)
            active = reduced

            # Zero and saturation rules
            changed = False
            for r in active:
                if r.required_mines == 0:
                    changed |= self._mark(r.affected_cells, False, known, diagnostics)
                elif r.required_mines == len(r.affected_cells):
                    changed |= self._mark(r.affected_cells, True, known, diagnostics)
            if changed:
                continue

            # Subset rule
            changed = self._subset_pass(active, known, diagnostics)
            if not changed:
                break

        return Deductions(known=known, residual=active, diagnostics=diagnostics)

    def _subset_pass(
        self,
        active: List[Constraint],
        known: Dict[Coordinate, bool],
        diagnostics: List[Diagnostic],
    ) -> bool:
        """
        Compare every pair of constraints that share a cell.

        If C1's cells are contained in C2's, the cells of C2 outside C1 hold
        exactly ``C2.required - C1.required`` mines.
        """
        by_cell: DefaultDict[Coordinate, List[int]] = defaultdict(list)
        for idx, r in enumerate(active):
            for cell in r.affected_cells:
                by_cell[cell].append(idx)

        cell_sets = [frozenset(r.affected_cells) for r in active]
        changed = False

        for i, c1 in enumerate(active):
            candidates: Set[int] = set()
            for cell in c1.affected_cells:
                candidates.update(by_cell[cell])
            candidates.discard(i)

            for j in sorted(candidates):
                if not cell_sets[i] <= cell_sets[j]:
                    continue
                c2 = active[j]
                difference = [c for c in c2.affected_cells if c not in cell_sets[i]]
                mine_difference = c2.required_mines - c1.required_mines

                if not 0 <= mine_difference <= len(difference):
                    diagnostics.append(
                        Diagnostic(
                            INCONSISTENT_BOARD,
                            f"Constraints at {tuple(c1.center)} and "
                            f"{tuple(c2.center)} contradict each other.",
                            c2.affected_cells,
                        )
                    )
                    continue
                if not difference:
                    continue

                if mine_difference == 0:
                    changed |= self._mark(difference, False, known, diagnostics)
                elif mine_difference == len(difference):
                    changed |= self._mark(difference, True, known, diagnostics)

        return changed

    # -------------------------------------------------------------------------
    # Combinatorial tier
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_frontier_subgroups(
        constraints: Sequence[Constraint],
    ) -> List[Tuple[List[Constraint], List[Coordinate]]]:
        """
        Partition constraints into independent connected components.

        Two constraints are connected when they share a cell. Components are
        returned in order of their first constraint; within a component the
        constraints follow discovery order so that the enumeration meets
        overlapping constraints early and prunes sooner.
        """
        by_cell: DefaultDict[Coordinate, List[int]] = defaultdict(list)
        for idx, constraint in enumerate(constraints):
            for cell in constraint.affected_cells:
                by_cell[cell].append(idx)

        seen: Set[int] = set()
        subgroups: List[Tuple[List[Constraint], List[Coordinate]]] = []

        for start in range(len(constraints)):
            if start in seen:
                continue

            seen.add(start)
            queue: Deque[int] = deque([start])
            members: List[Constraint] = []
            cells: Dict[Coordinate, None] = {}

            while queue:
                idx = queue.popleft()
                constraint = constraints[idx]
                members.append(constraint)
                for cell in constraint.affected_cells:
                    if cell in cells:
                        continue
                    cells[cell] = None
                    for other in by_cell[cell]:
                        if other not in seen:
                            seen.add(other)
                            queue.append(other)

            subgroups.append((members, row_major(cells)))

        return subgroups

    def _enumerate_components(
        self,
        residual: Sequence[Constraint],
        deadline: Optional[float],
        known: Dict[Coordinate, bool],
        diagnostics: List[Diagnostic],
    ) -> Dict[Coordinate, float]:
        """
        Compute marginal probabilities for every residual frontier cell.

        Cells forced in every satisfying assignment are added to ``known``.
        """
        probabilities: Dict[Coordinate, float] = {}
        fallback = self.config.fallback_probability
        timed_out = False

        for members, cells in self._get_frontier_subgroups(residual):
            if not timed_out and deadline is not None and time.monotonic() > deadline:
                timed_out = True
                logger.warning("Deadline reached before enumerating all components.")

            if timed_out:
                diagnostics.append(
                    Diagnostic(
                        TIMEOUT,
                        f"Component of {len(cells)} cells was not enumerated "
                        "before the deadline.",
                        tuple(cells),
                    )
                )
                probabilities.update((c, fallback) for c in cells)
                continue

            if len(cells) > self.config.max_component_size:
                logger.warning(
                    "Frontier component of %d cells exceeds the cap of %d; "
                    "using uniform estimate %.2f.",
                    len(cells),
                    self.config.max_component_size,
                    fallback,
                )
                diagnostics.append(
                    Diagnostic(
                        COMBINATORIAL_OVERFLOW,
                        f"Component of {len(cells)} cells exceeds the "
                        f"enumeration cap of {self.config.max_component_size}.",
                        tuple(cells),
                    )
                )
                probabilities.update((c, fallback) for c in cells)
                continue

            started = time.monotonic()
            try:
                total, mine_counts = count_assignments(
                    members,
                    cells,
                    deadline=deadline,
                    check_interval=self.config.deadline_check_interval,
                )
            except EnumerationTimeout:
                timed_out = True
                logger.warning(
                    "Enumeration of a %d-cell component timed out.", len(cells)
                )
                diagnostics.append(
                    Diagnostic(
                        TIMEOUT,
                        f"Enumeration of a component of {len(cells)} cells "
                        "timed out.",
                        tuple(cells),
                    )
                )
                probabilities.update((c, fallback) for c in cells)
                continue

            logger.debug(
                "Enumerated component: %d cells, %d constraints, %d assignments "
                "in %.4fs.",
                len(cells),
                len(members),
                total,
                time.monotonic() - started,
            )

            if total == 0:
                logger.warning(
                    "No assignment satisfies a %d-cell component; board is "
                    "inconsistent.",
                    len(cells),
                )
                diagnostics.append(
                    Diagnostic(
                        INCONSISTENT_BOARD,
                        f"No mine assignment satisfies the {len(members)} "
                        "constraints of this component.",
                        tuple(cells),
                    )
                )
                probabilities.update((c, INCONSISTENT_PROBABILITY) for c in cells)
                continue

            for cell in cells:
                count = mine_counts[cell]
                if count == 0:
                    known[cell] = False
                elif count == total:
                    known[cell] = True
                probabilities[cell] = count / total

        return probabilities

    # -------------------------------------------------------------------------
    # Background rate and heuristics
    # -------------------------------------------------------------------------

    @staticmethod
    def _background_probability(
        board: BoardSnapshot, frontier_estimate: float, open_count: int
    ) -> float:
        """Shared mine probability of cells not touched by any constraint."""
        if open_count == 0:
            return 0.0
        remaining = (
            board.mine_count
            - board.flagged_count
            - board.revealed_mine_count
            - frontier_estimate
        )
        return clamp(remaining / open_count)

    def _adjust_edges(
        self,
        board: BoardSnapshot,
        probabilities: Dict[Coordinate, float],
        known: Dict[Coordinate, bool],
    ) -> None:
        """Scale down corner and edge probabilities early in the game."""
        if not self.config.edge_adjustment:
            return
        width, height = board.dimensions
        if board.revealed_count >= self.config.early_game_fraction * width * height:
            return

        for coord, p in probabilities.items():
            if coord in known:
                continue
            on_x_edge = coord.x in (0, width - 1)
            on_y_edge = coord.y in (0, height - 1)
            if on_x_edge and on_y_edge:
                probabilities[coord] = clamp(p * self.config.corner_factor)
            elif on_x_edge or on_y_edge:
                probabilities[coord] = clamp(p * self.config.edge_factor)

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def split_constraints(
        self, constraints: Sequence[Constraint]
    ) -> Tuple[List[Constraint], List[Diagnostic]]:
        """Separate valid constraints from malformed ones, reporting the latter."""
        valid: List[Constraint] = []
        diagnostics: List[Diagnostic] = []
        for constraint in constraints:
            if constraint.is_valid:
                valid.append(constraint)
                continue
            logger.warning(
                "Malformed constraint at %s: %d mines required among %d cells.",
                tuple(constraint.center),
                constraint.required_mines,
                len(constraint.affected_cells),
            )
            diagnostics.append(
                Diagnostic(
                    MALFORMED_CONSTRAINT,
                    f"Cell {tuple(constraint.center)} requires "
                    f"{constraint.required_mines} mines among "
                    f"{len(constraint.affected_cells)} unresolved neighbors.",
                    constraint.affected_cells,
                )
            )
        return valid, diagnostics

    def solve(
        self,
        board: BoardSnapshot,
        constraints: Optional[Sequence[Constraint]] = None,
        deadline: Optional[float] = None,
    ) -> SolverResult:
        """
        Analyse a board and return guarantees plus a complete probability map.

        Args:
            board: Grid snapshot to analyse.
            constraints: Pre-extracted constraints; extracted from ``board``
                when omitted.
            deadline: Absolute ``time.monotonic()`` value bounding the
                combinatorial tier. Defaults to now plus ``config.timeout``.

        Returns:
            A SolverResult whose probability map holds every unrevealed,
            unflagged cell, guaranteed cells at exactly 0.0 or 1.0.
        """
        if constraints is None:
            constraints = extract_constraints(board)
        if deadline is None and self.config.timeout is not None:
            deadline = time.monotonic() + self.config.timeout

        candidates = board.candidate_cells()
        if not candidates:
            return SolverResult([], [], {})

        valid, diagnostics = self.split_constraints(constraints)

        deductions = self.deduce(valid)
        diagnostics.extend(deductions.diagnostics)
        known = deductions.known

        frontier_probabilities = self._enumerate_components(
            deductions.residual, deadline, known, diagnostics
        )

        frontier = set(frontier_cells(constraints))
        open_cells = [c for c in candidates if c not in frontier]

        probabilities: Dict[Coordinate, float] = {}
        for coord in candidates:
            if coord in known:
                probabilities[coord] = 1.0 if known[coord] else 0.0
            elif coord in frontier_probabilities:
                probabilities[coord] = frontier_probabilities[coord]
            elif coord in frontier:
                # Only touched by malformed constraints.
                probabilities[coord] = self.config.fallback_probability

        frontier_estimate = sum(probabilities.values())
        background = self._background_probability(
            board, frontier_estimate, len(open_cells)
        )
        for coord in open_cells:
            probabilities[coord] = background

        self._adjust_edges(board, probabilities, known)

        # Restore row-major order after the open cells were appended.
        probabilities = {c: probabilities[c] for c in candidates}

        logger.debug(
            "Solved board %dx%d: %d constraints, %d frontier, %d open, "
            "%d safe, %d mines, %d diagnostics.",
            board.width,
            board.height,
            len(constraints),
            len(frontier),
            len(open_cells),
            sum(1 for v in known.values() if not v),
            sum(1 for v in known.values() if v),
            len(diagnostics),
        )

        return SolverResult(
            guaranteed_safe=row_major(c for c, v in known.items() if not v),
            guaranteed_mines=row_major(c for c, v in known.items() if v),
            probabilities=probabilities,
            diagnostics=diagnostics,
            frontier=row_major(frontier),
            open_cells=open_cells,
        )
