import asyncio
import logging

import numpy as np
import pytest

from seqalign.seq_alignment import (
    AlignedPair,
    ConfigurationError,
    GlobalAligner,
    InvalidCharacterError,
    LocalAligner,
    ScoringConfig,
    align_async,
    align_many,
    make_aligner,
    pairwise,
)


ROUND_TRIP_CASES = [
    ("ACGT", "ACGT"),
    ("ACGT", "AGT"),
    ("GCATGCU", "GATTACA"),
    ("AAAGCTAAA", "CGCT"),
    ("TTAGG", "AT"),
    ("ACAC", "AC"),
]


class TestGlobalAligner:
    def test_identical_sequences(self):
        result = GlobalAligner().align("ACGT", "ACGT")
        assert result.final_score == 12
        assert result.alignments == [AlignedPair("ACGT", "ACGT")]
        assert result.mode == "global"

    @pytest.mark.parametrize("length", [1, 5, 12])
    def test_identical_score_is_length_times_match(self, length):
        seq = ("ACGT" * 3)[:length]
        result = GlobalAligner(ScoringConfig.linear(4, -2, -3, -3)).align(seq, seq)
        assert result.final_score == 4 * length
        assert len(result.alignments) == 1
        assert "-" not in result.alignments[0].seq1_aligned + result.alignments[0].seq2_aligned

    def test_simple_alignment(self):
        result = GlobalAligner(ScoringConfig.linear(1, -1, -1, -1)).align("GAC", "ACG")
        assert result.final_score == 0

    def test_with_gaps(self):
        result = GlobalAligner().align("ACGT", "AGT")
        assert result.final_score == 7
        assert result.alignments == [AlignedPair("ACGT", "A-GT")]

    def test_empty_sequence(self):
        result = GlobalAligner().align("ACGT", "")
        assert result.final_score == -8
        assert result.alignments == [AlignedPair("ACGT", "----")]
        assert result.matrix.shape == (5, 1)

    def test_empty_first_sequence(self):
        result = GlobalAligner(ScoringConfig.linear(1, -1, -5, -5)).align("", "ACG")
        assert result.final_score == -15
        assert result.alignments == [AlignedPair("---", "ACG")]

    def test_both_empty(self):
        result = GlobalAligner().align("", "")
        assert result.final_score == 0
        assert result.alignments == [AlignedPair("", "")]
        assert [p.to_list() for p in result.traceback_paths] == [[[0, 0]]]

    def test_every_tie_is_returned(self):
        result = GlobalAligner(ScoringConfig.linear(1, -1, -1, -1)).align("AA", "A")
        assert result.final_score == 0
        assert set(result.alignments) == {AlignedPair("AA", "-A"), AlignedPair("AA", "A-")}
        assert len(result.traceback_paths) == 2

    def test_with_matrix(self):
        scoring = ScoringConfig.with_matrix("BLOSUM62", -2, -2)
        result = GlobalAligner(scoring).align("HEAGAWGHEE", "PAWHEAE")
        assert result.final_score > 0

    def test_forbidden_pair_never_aligned(self, forbidden_matrix):
        scoring = ScoringConfig.with_matrix(forbidden_matrix, -10, -10)
        result = GlobalAligner(scoring).align("AA", "AW")
        assert result.final_score == -13
        assert set(result.alignments) == {
            AlignedPair("A-A", "AW-"),
            AlignedPair("AA-", "-AW"),
            AlignedPair("AA-", "A-W"),
        }
        for aln in result.alignments:
            assert aln.seq1_aligned != "AA"
            assert aln.seq2_aligned != "AW"

    def test_invalid_character(self):
        scoring = ScoringConfig.with_matrix("EDNAFULL", -2, -2)
        with pytest.raises(InvalidCharacterError) as exc:
            GlobalAligner(scoring).align("ATGC", "ATGCX")
        assert exc.value.char == ord("X")

    def test_affine_rejected_before_validation(self):
        scoring = ScoringConfig.with_matrix("EDNAFULL", -2, -1)
        with pytest.raises(ConfigurationError, match="Affine"):
            GlobalAligner(scoring).align("ATGCX", "ATGC")

    def test_bytes_and_case(self):
        result = GlobalAligner().align(b"ACGT", b"acgt")
        assert result.final_score == 12
        assert result.seq2 == "acgt"
        assert result.best.match_string == "||||"

    def test_matrix_is_read_only(self):
        result = GlobalAligner().align("AC", "AC")
        with pytest.raises(ValueError):
            result.matrix.scores[0, 0] = 1


class TestLocalAligner:
    def test_identical_sequences(self):
        result = LocalAligner().align("ACGT", "ACGT")
        assert result.final_score == 12
        assert result.alignments == [AlignedPair("ACGT", "ACGT")]

    def test_finds_best_region(self):
        result = LocalAligner(ScoringConfig.linear(2, -1, -2, -2)).align("AAAGCTAAA", "CGCT")
        assert result.final_score == 6
        assert any(
            "GCT" in a.seq1_aligned and "GCT" in a.seq2_aligned for a in result.alignments
        )

    def test_no_good_alignment(self):
        result = LocalAligner(ScoringConfig.linear(1, -3, -3, -3)).align("AAAA", "TTTT")
        assert result.final_score == 0
        assert result.alignments == []
        assert result.traceback_paths == []
        assert result.best is None

    def test_empty_sequence(self):
        result = LocalAligner().align("", "ACGT")
        assert result.final_score == 0
        assert result.alignments == []

    def test_first_row_and_column_are_zero(self):
        result = LocalAligner().align("ACG", "ACG")
        assert not result.matrix.scores[0].any()
        assert not result.matrix.scores[:, 0].any()

    @pytest.mark.parametrize("seq1, seq2", ROUND_TRIP_CASES + [("ACGT", "TGCA")])
    def test_no_negative_scores(self, seq1, seq2):
        result = LocalAligner().align(seq1, seq2)
        assert (result.matrix.scores >= 0).all()

    def test_several_maximal_cells(self):
        result = LocalAligner().align("ACAC", "AC")
        assert result.final_score == 6
        assert [p.start for p in result.traceback_paths] == [(2, 2), (4, 2)]
        assert result.alignments == [AlignedPair("AC", "AC")] * 2


@pytest.mark.parametrize("mode", ["global", "local"])
@pytest.mark.parametrize("seq1, seq2", ROUND_TRIP_CASES)
def test_alignments_round_trip(mode, seq1, seq2, score_columns):
    scoring = ScoringConfig.linear(2, -1, -2, -2)
    result = make_aligner(mode, scoring).align(seq1, seq2)
    assert len(result.alignments) == len(result.traceback_paths)
    for pair in result.alignments:
        a1, a2 = pair.seq1_aligned, pair.seq2_aligned
        assert len(a1) == len(a2)
        assert score_columns(scoring, a1, a2) == result.final_score
        u1, u2 = pair.ungapped()
        if mode == "global":
            assert (u1, u2) == (seq1, seq2)
        else:
            assert u1 in seq1 and u2 in seq2


class TestNonAsciiInput:
    @pytest.mark.parametrize("seq1, seq2", [("a\u00e9a", "aa"), ("\u00e9", "e")])
    def test_text_must_be_ascii(self, seq1, seq2):
        with pytest.raises(InvalidCharacterError) as exc:
            pairwise(seq1, seq2, match_score=1, mismatch_score=-1, gap_open=-1)
        assert exc.value.char == ord("\u00e9")

    def test_non_ascii_in_second_sequence(self):
        with pytest.raises(InvalidCharacterError, match="\u00e9"):
            LocalAligner().align("ACGT", "AC\u00e9GT")

    @pytest.mark.parametrize("mode", ["global", "local"])
    def test_bytes_columns_stay_aligned(self, mode):
        raw = "a\u00e9a".encode("utf-8")
        result = make_aligner(mode, ScoringConfig.linear(1, -1, -1, -1)).align(raw, b"aa")
        assert result.seq1 == "a\ufffd\ufffda"
        assert result.alignments
        for pair in result.alignments:
            assert len(pair.seq1_aligned) == len(pair.seq2_aligned)
            assert len(pair.match_string) == len(pair)
            u1, u2 = pair.ungapped()
            if mode == "global":
                assert (u1, u2) == (result.seq1, result.seq2)
            else:
                assert u1 in result.seq1 and u2 in result.seq2


class TestMakeAligner:
    def test_modes(self):
        assert isinstance(make_aligner("GLOBAL"), GlobalAligner)
        assert isinstance(make_aligner("local"), LocalAligner)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="Unknown alignment mode 'semi'"):
            make_aligner("semi")


class TestPairwise:
    def test_defaults(self):
        result = pairwise("ACGT", "ACGT")
        assert result.final_score == 12
        assert result.scoring == ScoringConfig()

    def test_matrix_option(self):
        result = pairwise("ACGTN", "ACGTN", matrix="ednafull", gap_open=-4)
        assert result.final_score == 5 * 4 - 1

    def test_conflicting_options(self):
        with pytest.raises(ConfigurationError, match="mutually exclusive"):
            pairwise("A", "A", matrix="BLOSUM62", match_score=1, mismatch_score=-1)

    def test_affine(self):
        with pytest.raises(ConfigurationError) as exc:
            pairwise("A", "A", gap_open=-2, gap_extend=-1)
        assert exc.value.gap_open == -2
        assert exc.value.gap_extend == -1

    def test_verbose(self, capsys):
        pairwise("ACGT", "ACGT", verbose=True)
        out = capsys.readouterr().out
        assert "PAIRWISE SEQUENCE ALIGNMENT" in out
        assert "Score: 12" in out

    def test_view(self, capsys):
        pairwise("ACGT", "AGT").view(width=2)
        out = capsys.readouterr().out
        assert "pattern: AC" in out
        assert "         | " in out
        assert "subject: A-" in out

    def test_str(self):
        text = str(pairwise("ACGT", "ACGT"))
        assert "Alignment Score: 12" in text
        assert "Identity: 100.00%" in text

    def test_debug_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="seqalign.seq_alignment.pairwise"):
            pairwise("ACGT", "ACGT", mode="local")
        assert "1 alignment(s)" in caplog.text


class TestBatch:
    def test_align_many_keeps_order(self):
        pairs = [("ACGT", "ACGT"), ("ACGT", ""), ("AC", "AC")]
        results = align_many(pairs, n_jobs=2)
        assert [r.final_score for r in results] == [12, -8, 6]

    def test_align_many_empty(self):
        assert align_many([]) == []

    def test_align_many_raises(self):
        scoring = ScoringConfig.with_matrix("EDNAFULL", -2, -2)
        with pytest.raises(InvalidCharacterError):
            align_many([("ACGT", "ACGT"), ("ACGT", "ACXT")], scoring)

    def test_align_async(self):
        result = asyncio.run(align_async("AAAGCTAAA", "CGCT", mode="local",
                                         match_score=2, mismatch_score=-1))
        assert result.final_score == 6
        np.testing.assert_array_equal(result.matrix.scores[0], 0)
