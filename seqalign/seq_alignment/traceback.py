"""
Traceback: enumerate every optimal path through a filled DP matrix

Paths are explored depth-first from an explicit worklist. Each entry is a
node of a persistent linked list (cell, residues consumed to reach it,
parent), so branches that share a prefix share its nodes and nothing is
copied at a fork. A branch is closed when the stop predicate holds (or,
optionally, when the cell has no arrows), and only then is the path and
the aligned pair materialized by walking the node chain.

The number of paths is the number of distinct arrow-graph paths from the
start cells to the stop cells, which can grow exponentially with the
number of ties. `iter_tracebacks` is lazy so callers can cap it with
`itertools.islice`; `traceback_all_paths` collects everything.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from .dp import Arrows, Cell, DPMatrix


GAP = "-"
_GAP = ord(GAP)

StopCondition = Callable[[int, int, Cell], bool]


def as_text(raw: bytes) -> str:
    """Decode residues one character per byte; non-ASCII bytes become U+FFFD"""
    return raw.decode("ascii", errors="replace")


class TracebackStep(NamedTuple):
    i: int
    j: int


@dataclass(frozen=True)
class TracebackPath:
    """Visited cells from the start cell to the stop cell, inclusive"""
    steps: Tuple[TracebackStep, ...]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[TracebackStep]:
        return iter(self.steps)

    @property
    def start(self) -> TracebackStep:
        return self.steps[0]

    @property
    def end(self) -> TracebackStep:
        return self.steps[-1]

    def to_list(self) -> List[List[int]]:
        return [[s.i, s.j] for s in self.steps]


@dataclass(frozen=True)
class AlignedPair:
    """One concrete alignment; both strings have the same length"""
    seq1_aligned: str
    seq2_aligned: str

    def __len__(self) -> int:
        return len(self.seq1_aligned)

    @property
    def match_string(self) -> str:
        """`|` identical, `.` substitution, space at a gap"""
        out = []
        for a, b in zip(self.seq1_aligned, self.seq2_aligned):
            if a == GAP or b == GAP:
                out.append(" ")
            elif a.upper() == b.upper():
                out.append("|")
            else:
                out.append(".")
        return "".join(out)

    def nmatch(self) -> int:
        """Number of identical aligned positions"""
        return self.match_string.count("|")

    @property
    def gaps(self) -> int:
        return self.seq1_aligned.count(GAP) + self.seq2_aligned.count(GAP)

    @property
    def identity(self) -> float:
        return self.nmatch() / len(self) if len(self) else 0.0

    @property
    def similarity(self) -> float:
        """Fraction of columns without a gap"""
        if not len(self):
            return 0.0
        paired = sum(1 for a, b in zip(self.seq1_aligned, self.seq2_aligned)
                     if a != GAP and b != GAP)
        return paired / len(self)

    def ungapped(self) -> Tuple[str, str]:
        return self.seq1_aligned.replace(GAP, ""), self.seq2_aligned.replace(GAP, "")


# (i, j, residue from seq1, residue from seq2, parent)
_Node = Tuple[int, int, Optional[int], Optional[int], Optional[tuple]]


def _close(node: _Node) -> Tuple[TracebackPath, AlignedPair]:
    # The chain runs from the stop cell back to the start cell, which is
    # left-to-right order for the residues.
    steps = []
    aln1 = bytearray()
    aln2 = bytearray()
    while node is not None:
        i, j, a, b, parent = node
        steps.append(TracebackStep(i, j))
        if a is not None:
            aln1.append(a)
            aln2.append(b)
        node = parent
    steps.reverse()
    pair = AlignedPair(as_text(aln1), as_text(aln2))
    return TracebackPath(tuple(steps)), pair


def iter_tracebacks(
    matrix: DPMatrix,
    seq1: bytes,
    seq2: bytes,
    starts: Iterable[Tuple[int, int]],
    stop: StopCondition,
    stop_on_no_arrows: bool = False,
) -> Iterator[Tuple[TracebackPath, AlignedPair]]:
    """
    Lazily yield (path, aligned pair) for every path from each start cell

    Parameters:
    -----------
    matrix : DPMatrix
        Filled matrix; only read
    seq1, seq2 : bytes
        Sequences along rows / columns
    starts : iterable of (i, j)
        Start cells, explored in order
    stop : callable
        `stop(i, j, cell)` closes the branch at this cell
    stop_on_no_arrows : bool
        Also close a branch at a cell without arrows

    Yields:
    -------
    (TracebackPath, AlignedPair)
        Siblings come out diagonal first, then up, then left
    """
    for si, sj in starts:
        stack: List[_Node] = [(si, sj, None, None, None)]
        while stack:
            node = stack.pop()
            i, j = node[0], node[1]
            cell = matrix.get(i, j)
            if stop(i, j, cell) or (stop_on_no_arrows and not cell.arrows):
                yield _close(node)
                continue

            arrows = cell.arrows
            # LIFO: push in reverse exploration order
            if arrows & Arrows.LEFT and j > 0:
                stack.append((i, j - 1, _GAP, seq2[j - 1], node))
            if arrows & Arrows.UP and i > 0:
                stack.append((i - 1, j, seq1[i - 1], _GAP, node))
            if arrows & Arrows.DIAGONAL and i > 0 and j > 0:
                stack.append((i - 1, j - 1, seq1[i - 1], seq2[j - 1], node))


def traceback_all_paths(
    matrix: DPMatrix,
    seq1: bytes,
    seq2: bytes,
    starts: Iterable[Tuple[int, int]],
    stop: StopCondition,
    stop_on_no_arrows: bool = False,
) -> Tuple[List[TracebackPath], List[AlignedPair]]:
    """Collect every traceback into parallel path / alignment lists"""
    paths: List[TracebackPath] = []
    alignments: List[AlignedPair] = []
    for path, pair in iter_tracebacks(matrix, seq1, seq2, starts, stop, stop_on_no_arrows):
        paths.append(path)
        alignments.append(pair)
    return paths, alignments


def global_stop(i: int, j: int, cell: Cell) -> bool:
    return i == 0 and j == 0


def local_stop(i: int, j: int, cell: Cell) -> bool:
    return cell.score == 0 or (i == 0 and j == 0)
