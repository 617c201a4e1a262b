import pytest

from seqalign.seq_alignment import ScoringConfig, parse_matrix


FORBIDDEN_AW = """
# A/W may never be aligned to each other
     A     W
A    7  -inf
W -inf    10
"""


@pytest.fixture
def forbidden_matrix():
    return parse_matrix(FORBIDDEN_AW, "forbidden_aw")


@pytest.fixture
def default_scoring():
    return ScoringConfig()


def column_score(scoring, aligned1, aligned2):
    """Score an alignment column by column with a linear gap cost"""
    total = 0
    for a, b in zip(aligned1.encode(), aligned2.encode()):
        if a == ord("-") or b == ord("-"):
            total += scoring.gap_open
        else:
            total += scoring.substitution_score(a, b)
    return total


@pytest.fixture
def score_columns():
    return column_score
