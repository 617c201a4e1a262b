"""
Pairwise Sequence Alignment Module
Global (Needleman-Wunsch) and local (Smith-Waterman) alignment with a
linear gap model, returning every co-optimal alignment
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Literal, Optional, Tuple, Union

from .dp import DPMatrix, fill_matrix, initialize_global, initialize_local
from .errors import ConfigurationError, InvalidCharacterError
from .matrices import SubstitutionMatrix
from .scoring import ScoringConfig
from .traceback import (
    AlignedPair,
    TracebackPath,
    as_text,
    global_stop,
    local_stop,
    traceback_all_paths,
)


LOGGER = logging.getLogger(__name__)

SequenceLike = Union[str, bytes]
Mode = Literal["global", "local"]


def _as_bytes(seq: SequenceLike) -> bytes:
    # one byte per residue, so text must be ASCII
    if isinstance(seq, str):
        try:
            return seq.encode("ascii")
        except UnicodeEncodeError as e:
            raise InvalidCharacterError(ord(seq[e.start])) from None
    return bytes(seq)


@dataclass
class AlignmentResult:
    """Store alignment results and metadata"""
    seq1: str
    seq2: str
    scoring: ScoringConfig
    matrix: DPMatrix
    traceback_paths: List[TracebackPath]
    alignments: List[AlignedPair]
    final_score: int
    mode: str = "global"

    def __len__(self) -> int:
        return len(self.alignments)

    @property
    def best(self) -> Optional[AlignedPair]:
        """First optimal alignment, or None when there is none"""
        return self.alignments[0] if self.alignments else None

    def __str__(self) -> str:
        """String representation of alignment"""
        text = (
            f"Alignment Score: {self.final_score}\n"
            f"Type: {self.mode}\n"
            f"Optimal alignments: {len(self.alignments)}\n"
        )
        best = self.best
        if best is not None:
            text += (
                f"Identity: {best.identity:.2%}\n"
                f"Similarity: {best.similarity:.2%}\n"
                f"Gaps: {best.gaps}\n"
            )
        return text

    def plot(self, width: int = 80) -> None:
        """Display every alignment with match indicators"""
        lines = []
        lines.append("")
        lines.append(f"Sequence 1: {self.seq1}")
        lines.append(f"Sequence 2: {self.seq2}")
        lines.append("")
        lines.append(f"Type: {self.mode}")
        lines.append(f"Score: {self.final_score}")
        lines.append(f"Optimal alignments: {len(self.alignments)}")
        lines.append("")

        for n, pair in enumerate(self.alignments, 1):
            lines.append(f"# {n}  identity {pair.identity:.2%}  gaps {pair.gaps}")
            match = pair.match_string
            for start in range(0, len(pair), width):
                end = min(start + width, len(pair))
                lines.append(f"pattern: {pair.seq1_aligned[start:end]}")
                lines.append(f"         {match[start:end]}")
                lines.append(f"subject: {pair.seq2_aligned[start:end]}")
                lines.append("")

        for line in lines:
            print(line)

    def view(self, width: int = 80) -> None:
        """Alias for plot method"""
        self.plot(width)

    def to_dict(self) -> dict:
        from .output import result_to_dict
        return result_to_dict(self)

    def plot_matrix(self, **kwargs):
        """Draw the DP matrix; keyword arguments go to plot_dp_matrix"""
        from .matrix_plot import plot_dp_matrix
        return plot_dp_matrix(self, **kwargs)


class _Aligner:
    """Shared validate -> initialize -> fill -> traceback pipeline"""

    mode: str = ""
    local: bool = False

    def __init__(self, scoring: Optional[ScoringConfig] = None):
        self.scoring = scoring if scoring is not None else ScoringConfig()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.scoring!r})"

    def _initialize_matrix(self, n: int, m: int) -> DPMatrix:
        raise NotImplementedError

    def _start_positions(self, n: int, m: int, fill) -> List[Tuple[int, int]]:
        raise NotImplementedError

    def _stop(self, i, j, cell) -> bool:
        raise NotImplementedError

    def align(self, seq1: SequenceLike, seq2: SequenceLike,
              verbose: bool = False) -> AlignmentResult:
        """
        Align two sequences and enumerate every optimal alignment

        Parameters:
        -----------
        seq1 : str or bytes
            First sequence (rows of the matrix)
        seq2 : str or bytes
            Second sequence (columns of the matrix)
        verbose : bool
            If True, display progress during alignment

        Returns:
        --------
        AlignmentResult

        Raises:
        -------
        ConfigurationError
            gap_open != gap_extend
        InvalidCharacterError
            A residue outside the scorer's alphabet
        """
        self.scoring.ensure_linear()

        s1 = _as_bytes(seq1)
        s2 = _as_bytes(seq2)
        self.scoring.validate(s1)
        self.scoring.validate(s2)
        n, m = len(s1), len(s2)

        if verbose:
            print("\n" + "=" * 70)
            print("PAIRWISE SEQUENCE ALIGNMENT")
            print("=" * 70)
            print(f"Sequence 1: {as_text(s1)}")
            print(f"Sequence 2: {as_text(s2)}")
            print(f"Mode: {self.mode}")
            print(f"Gap: {self.scoring.gap_open}")
            print("=" * 70)

        matrix = self._initialize_matrix(n, m)
        fill = fill_matrix(matrix, s1, s2, self.scoring, local=self.local)
        matrix.freeze()
        LOGGER.debug("%s fill done: %dx%d, score %d", self.mode, n + 1, m + 1, fill.max_score)

        starts = self._start_positions(n, m, fill)
        paths, alignments = traceback_all_paths(
            matrix, s1, s2, starts, self._stop, stop_on_no_arrows=self.local
        )
        LOGGER.debug("%s traceback: %d start cell(s), %d alignment(s)",
                     self.mode, len(starts), len(alignments))

        result = AlignmentResult(
            seq1=as_text(s1),
            seq2=as_text(s2),
            scoring=self.scoring,
            matrix=matrix,
            traceback_paths=paths,
            alignments=alignments,
            final_score=fill.max_score,
            mode=self.mode,
        )

        if verbose:
            print("\nALIGNMENT RESULTS")
            print("=" * 70)
            print(f"Score: {result.final_score}")
            print(f"Optimal alignments: {len(alignments)}")
            print("=" * 70 + "\n")

        return result


class GlobalAligner(_Aligner):
    """Needleman-Wunsch: alignments span both sequences end to end"""

    mode = "global"
    local = False

    def _initialize_matrix(self, n: int, m: int) -> DPMatrix:
        return initialize_global(n, m, self.scoring)

    def _start_positions(self, n, m, fill):
        return [(n, m)]

    def _stop(self, i, j, cell):
        return global_stop(i, j, cell)


class LocalAligner(_Aligner):
    """Smith-Waterman: best-scoring pair of substrings, restarts at 0"""

    mode = "local"
    local = True

    def _initialize_matrix(self, n: int, m: int) -> DPMatrix:
        return initialize_local(n, m)

    def _start_positions(self, n, m, fill):
        # nothing positive means no alignment at all
        if fill.max_score <= 0:
            return []
        return list(fill.max_positions)

    def _stop(self, i, j, cell):
        return local_stop(i, j, cell)


_ALIGNERS = {"global": GlobalAligner, "local": LocalAligner}


def make_aligner(mode: str = "global",
                 scoring: Optional[ScoringConfig] = None) -> _Aligner:
    """Aligner for `mode` ("global" or "local", case-insensitive)"""
    try:
        cls = _ALIGNERS[mode.lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown alignment mode '{mode}'. Use 'global' or 'local'."
        ) from None
    return cls(scoring)


# MAIN CONVENIENCE FUNCTION
def pairwise(
    seq1: SequenceLike,
    seq2: SequenceLike,
    mode: Mode = "global",
    matrix: Optional[Union[str, SubstitutionMatrix]] = None,
    match_score: Optional[int] = None,
    mismatch_score: Optional[int] = None,
    gap_open: int = -2,
    gap_extend: Optional[int] = None,
    verbose: bool = False,
) -> AlignmentResult:
    """
    Pairwise sequence alignment

    Scoring defaults to match 3 / mismatch -1 with a gap cost of -2 per
    position. Pass either a substitution matrix name (e.g. "BLOSUM62",
    "EDNAFULL") or match_score and mismatch_score.

    Parameters:
    -----------
    seq1 : str or bytes
        First sequence (pattern)
    seq2 : str or bytes
        Second sequence (subject)
    mode : str
        "global" (default) or "local"
    matrix : str or SubstitutionMatrix, optional
        Substitution matrix
    match_score, mismatch_score : int, optional
        Simple scoring, mutually exclusive with `matrix`
    gap_open : int
        Gap cost per position (default -2)
    gap_extend : int, optional
        Must equal gap_open; defaults to it
    verbose : bool
        Show progress (default False)

    Returns:
    --------
    AlignmentResult
        Alignment result with .view() method

    Examples:
    ---------
    >>> result = pairwise("ACGT", "ACGT")
    >>> result.final_score
    12
    >>> result = pairwise("HEAGAWGHEE", "PAWHEAE", mode="local", matrix="BLOSUM62")
    >>> result.view()
    """
    scoring = ScoringConfig.from_options(
        matrix=matrix,
        match_score=match_score,
        mismatch_score=mismatch_score,
        gap_open=gap_open,
        gap_extend=gap_extend,
    )
    return make_aligner(mode, scoring).align(seq1, seq2, verbose=verbose)


def align_many(
    pairs: Iterable[Tuple[SequenceLike, SequenceLike]],
    scoring: Optional[ScoringConfig] = None,
    mode: Mode = "global",
    n_jobs: Optional[int] = None,
) -> List[AlignmentResult]:
    """
    Align independent sequence pairs in a thread pool

    Results come back in input order. The first failing pair raises.
    """
    aligner = make_aligner(mode, scoring)
    pairs = list(pairs)
    if not pairs:
        return []
    with ThreadPoolExecutor(max_workers=n_jobs) as ex:
        return list(ex.map(lambda p: aligner.align(p[0], p[1]), pairs))


async def align_async(seq1: SequenceLike, seq2: SequenceLike, **kwargs) -> AlignmentResult:
    """
    Async version: runs pairwise() in the default executor.
    (Does not speed up the computation; only keeps the event loop free.)
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, lambda: pairwise(seq1, seq2, **kwargs))
