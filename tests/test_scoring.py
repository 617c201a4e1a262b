import pytest

from seqalign.seq_alignment import (
    ConfigurationError,
    InvalidCharacterError,
    MatrixScorer,
    ScoringConfig,
    SimpleScorer,
    get_matrix,
)
from seqalign.seq_alignment.matrices import SCORE_MAX, SCORE_MIN
from seqalign.seq_alignment.scoring import saturating_add


class TestSaturatingAdd:
    def test_plain(self):
        assert saturating_add(3, -5) == -2

    def test_clamps_low(self):
        assert saturating_add(SCORE_MIN, -10) == SCORE_MIN
        assert saturating_add(SCORE_MIN, SCORE_MIN) == SCORE_MIN

    def test_clamps_high(self):
        assert saturating_add(SCORE_MAX, 5) == SCORE_MAX

    def test_min_plus_positive_stays_hopeless(self):
        assert saturating_add(SCORE_MIN, 7) == SCORE_MIN + 7


class TestSimpleScorer:
    def test_scores(self):
        scorer = SimpleScorer(match_score=5, mismatch_score=-3)
        assert scorer.score(ord("A"), ord("A")) == 5
        assert scorer.score(ord("A"), ord("T")) == -3
        assert scorer.score(ord("a"), ord("A")) == 5

    def test_every_byte_is_valid(self):
        assert SimpleScorer(1, -1).validate(b"AC*\x00\xff") is None


class TestMatrixScorer:
    def test_delegates(self):
        scorer = MatrixScorer(get_matrix("EDNAFULL"))
        assert scorer.score(ord("a"), ord("A")) == 5

    def test_invalid(self):
        scorer = MatrixScorer(get_matrix("EDNAFULL"))
        with pytest.raises(InvalidCharacterError) as exc:
            scorer.validate(b"ATGCX")
        assert exc.value.char == ord("X")


class TestScoringConfig:
    def test_defaults(self):
        config = ScoringConfig()
        assert config.scorer == SimpleScorer(3, -1)
        assert (config.gap_open, config.gap_extend) == (-2, -2)

    def test_gap_penalty_linear(self):
        config = ScoringConfig.linear(3, -1, -2, -2)
        assert config.gap_penalty(0) == 0
        assert config.gap_penalty(1) == -2
        assert config.gap_penalty(3) == -6

    def test_gap_penalty_saturates(self):
        config = ScoringConfig.linear(1, -1, -(2 ** 30), -(2 ** 30))
        assert config.gap_penalty(3) == SCORE_MIN

    def test_affine_formula(self):
        config = ScoringConfig.linear(1, -1, -5, -1)
        assert config.is_affine()
        assert config.gap_penalty(3) == -7

    def test_affine_rejected(self):
        config = ScoringConfig.linear(1, -1, -2, -1)
        with pytest.raises(ConfigurationError, match="gap_open=-2, gap_extend=-1") as exc:
            config.ensure_linear()
        assert (exc.value.gap_open, exc.value.gap_extend) == (-2, -1)

    def test_with_matrix_by_name(self):
        config = ScoringConfig.with_matrix("blosum62", -4, -4)
        assert config.substitution_score(ord("W"), ord("W")) == 11


class TestFromOptions:
    def test_default_simple(self):
        config = ScoringConfig.from_options(gap_open=-3)
        assert config == ScoringConfig(SimpleScorer(3, -1), -3, -3)

    def test_matrix(self):
        config = ScoringConfig.from_options(matrix="EDNAFULL", gap_open=-2)
        assert isinstance(config.scorer, MatrixScorer)

    def test_exclusive(self):
        with pytest.raises(ConfigurationError, match="mutually exclusive"):
            ScoringConfig.from_options(matrix="BLOSUM62", match_score=1)

    def test_match_needs_mismatch(self):
        with pytest.raises(ConfigurationError, match="Both 'match_score' and 'mismatch_score'"):
            ScoringConfig.from_options(match_score=1)
