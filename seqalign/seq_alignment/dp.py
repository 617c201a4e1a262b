"""
Dynamic-programming matrix and fill recurrences (linear gaps)
"""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Iterator, List, Tuple

import numpy as np

from .matrices import SCORE_MIN
from .scoring import ScoringConfig, saturating_add


class Arrows(IntFlag):
    """Back-pointer bits; a cell may carry several"""
    NONE = 0
    DIAGONAL = 1
    UP = 2
    LEFT = 4


@dataclass(frozen=True)
class Cell:
    score: int = SCORE_MIN
    arrows: Arrows = Arrows.NONE


class DPMatrix:
    """
    Dense (rows x cols) grid of scores and arrow bitmasks

    Scores are int32 and start at the smallest representable value
    ("unreachable") until a cell is written.
    """

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        self.scores = np.full((rows, cols), SCORE_MIN, dtype=np.int32)
        self.arrows = np.zeros((rows, cols), dtype=np.uint8)

    def __repr__(self) -> str:
        return f"DPMatrix(rows={self.rows}, cols={self.cols})"

    @property
    def shape(self) -> Tuple[int, int]:
        return self.rows, self.cols

    def get(self, i: int, j: int) -> Cell:
        return Cell(int(self.scores[i, j]), Arrows(int(self.arrows[i, j])))

    def set(self, i: int, j: int, cell: Cell) -> None:
        self.scores[i, j] = cell.score
        self.arrows[i, j] = int(cell.arrows)

    def cells(self) -> Iterator[Cell]:
        """Row-major iteration over every cell"""
        for i in range(self.rows):
            for j in range(self.cols):
                yield self.get(i, j)

    def freeze(self) -> "DPMatrix":
        self.scores.flags.writeable = False
        self.arrows.flags.writeable = False
        return self


@dataclass
class FillResult:
    max_score: int
    max_positions: List[Tuple[int, int]] = field(default_factory=list)


def initialize_global(n: int, m: int, scoring: ScoringConfig) -> DPMatrix:
    """Origin at 0, first column / row charged as gap runs"""
    matrix = DPMatrix(n + 1, m + 1)
    matrix.set(0, 0, Cell(0))
    for i in range(1, n + 1):
        matrix.set(i, 0, Cell(scoring.gap_penalty(i), Arrows.UP))
    for j in range(1, m + 1):
        matrix.set(0, j, Cell(scoring.gap_penalty(j), Arrows.LEFT))
    return matrix


def initialize_local(n: int, m: int) -> DPMatrix:
    """First row and column at 0 with no arrows: an alignment may start anywhere"""
    matrix = DPMatrix(n + 1, m + 1)
    matrix.scores[0, :] = 0
    matrix.scores[:, 0] = 0
    return matrix


def fill_matrix(
    matrix: DPMatrix,
    seq1: bytes,
    seq2: bytes,
    scoring: ScoringConfig,
    local: bool = False,
) -> FillResult:
    """
    Fill rows 1..n, columns 1..m in row-major order

    Every predecessor that reaches the cell's score sets its arrow bit, so
    ties are kept. In local mode scores are floored at 0, cells at 0 carry
    no arrows, and every position holding the matrix-wide positive maximum
    is collected.

    Parameters:
    -----------
    matrix : DPMatrix
        Initialized (n+1) x (m+1) matrix
    seq1, seq2 : bytes
        Residues along rows / columns
    scoring : ScoringConfig
        Linear-gap scoring; gap_open is the per-position cost
    local : bool
        Smith-Waterman recurrence instead of Needleman-Wunsch

    Returns:
    --------
    FillResult
        Final score and, for local mode, the maximal cells
    """
    n, m = len(seq1), len(seq2)
    gap = scoring.gap_open
    scores = matrix.scores
    max_score = 0
    max_positions: List[Tuple[int, int]] = []

    for i in range(1, n + 1):
        a = seq1[i - 1]
        for j in range(1, m + 1):
            s = scoring.substitution_score(a, seq2[j - 1])
            diag = saturating_add(int(scores[i - 1, j - 1]), s)
            up = saturating_add(int(scores[i - 1, j]), gap)
            left = saturating_add(int(scores[i, j - 1]), gap)

            best = max(diag, up, left)
            if local:
                best = max(best, 0)

            arrows = Arrows.NONE
            if not local or best > 0:
                if diag == best:
                    arrows |= Arrows.DIAGONAL
                if up == best:
                    arrows |= Arrows.UP
                if left == best:
                    arrows |= Arrows.LEFT

            matrix.set(i, j, Cell(best, arrows))

            if local:
                if best > max_score:
                    max_score = best
                    max_positions = [(i, j)]
                elif best == max_score and best > 0:
                    max_positions.append((i, j))

    if not local:
        return FillResult(int(scores[n, m]))
    return FillResult(max_score, max_positions)
