"""
Scoring model: substitution scores, linear gap costs and saturating arithmetic
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import ConfigurationError
from .matrices import SCORE_MAX, SCORE_MIN, SubstitutionMatrix, get_matrix


# bytes.upper() only touches ASCII letters
_FOLD = bytes(range(256)).upper()


def saturating_add(a: int, b: int) -> int:
    """Add two scores, clamping to the 32-bit range instead of wrapping"""
    s = a + b
    if s > SCORE_MAX:
        return SCORE_MAX
    if s < SCORE_MIN:
        return SCORE_MIN
    return s


def saturating_mul(a: int, b: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, a * b))


@dataclass(frozen=True)
class SimpleScorer:
    """Case-insensitive match / mismatch scoring; every byte is valid"""
    match_score: int
    mismatch_score: int

    def score(self, a: int, b: int) -> int:
        return self.match_score if _FOLD[a] == _FOLD[b] else self.mismatch_score

    def validate(self, seq: bytes) -> None:
        return None


@dataclass(frozen=True)
class MatrixScorer:
    """Scoring delegated to a read-only substitution matrix"""
    matrix: SubstitutionMatrix

    def score(self, a: int, b: int) -> int:
        return self.matrix.score(a, b)

    def validate(self, seq: bytes) -> None:
        self.matrix.validate(seq)


Scorer = Union[SimpleScorer, MatrixScorer]


@dataclass(frozen=True)
class ScoringConfig:
    """
    Substitution scorer plus gap costs

    Only the linear gap model is supported: `gap_open` must equal
    `gap_extend`. The check happens in `ensure_linear()`, which every
    aligner calls before building a matrix.
    """
    scorer: Scorer = field(default_factory=lambda: SimpleScorer(3, -1))
    gap_open: int = -2
    gap_extend: int = -2

    @classmethod
    def linear(cls, match_score: int, mismatch_score: int,
               gap_open: int, gap_extend: int) -> "ScoringConfig":
        return cls(SimpleScorer(match_score, mismatch_score), gap_open, gap_extend)

    @classmethod
    def with_matrix(cls, matrix: Union[str, SubstitutionMatrix],
                    gap_open: int, gap_extend: int) -> "ScoringConfig":
        if isinstance(matrix, str):
            matrix = get_matrix(matrix)
        return cls(MatrixScorer(matrix), gap_open, gap_extend)

    @classmethod
    def from_options(
        cls,
        matrix: Optional[Union[str, SubstitutionMatrix]] = None,
        match_score: Optional[int] = None,
        mismatch_score: Optional[int] = None,
        gap_open: int = -2,
        gap_extend: Optional[int] = None,
    ) -> "ScoringConfig":
        """
        Build a config from loosely specified options

        Parameters:
        -----------
        matrix : str or SubstitutionMatrix, optional
            Substitution matrix; excludes match_score / mismatch_score
        match_score, mismatch_score : int, optional
            Simple scoring; must be given together. With neither these nor
            a matrix, the default 3 / -1 scoring is used.
        gap_open : int
            Gap cost per position (default -2)
        gap_extend : int, optional
            Defaults to gap_open

        Raises:
        -------
        ConfigurationError
            Conflicting or incomplete scoring options
        """
        has_match = match_score is not None
        has_mismatch = mismatch_score is not None
        if matrix is not None and (has_match or has_mismatch):
            raise ConfigurationError(
                "Cannot use both 'matrix' and 'match_score'/'mismatch_score' - "
                "they are mutually exclusive"
            )
        if has_match != has_mismatch:
            raise ConfigurationError(
                "Both 'match_score' and 'mismatch_score' are required when not using a matrix"
            )
        if gap_extend is None:
            gap_extend = gap_open

        if matrix is not None:
            return cls.with_matrix(matrix, gap_open, gap_extend)
        if has_match:
            return cls.linear(match_score, mismatch_score, gap_open, gap_extend)
        return cls(gap_open=gap_open, gap_extend=gap_extend)

    def is_affine(self) -> bool:
        return self.gap_open != self.gap_extend

    def ensure_linear(self) -> None:
        if self.is_affine():
            raise ConfigurationError(
                f"Affine gap penalties are not supported yet "
                f"(gap_open={self.gap_open}, gap_extend={self.gap_extend})",
                gap_open=self.gap_open,
                gap_extend=self.gap_extend,
            )

    def substitution_score(self, a: int, b: int) -> int:
        return self.scorer.score(a, b)

    def validate(self, seq: bytes) -> None:
        self.scorer.validate(seq)

    def gap_penalty(self, length: int) -> int:
        """Total cost of a gap run of `length` positions"""
        if length == 0:
            return 0
        if self.is_affine():
            return saturating_add(self.gap_open, saturating_mul(self.gap_extend, length - 1))
        return saturating_mul(self.gap_open, length)
