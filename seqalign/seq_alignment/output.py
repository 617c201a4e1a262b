"""
Plain-dict shaping of alignment results and dict-driven alignment calls

The dicts contain only str / int / list values, so they can be handed to
`json.dumps` or any other encoder as they are.
"""

from typing import Any, Mapping

from .errors import ConfigurationError
from .matrices import available_matrices, matrix_info
from .pairwise import AlignmentResult, SequenceLike, make_aligner
from .scoring import MatrixScorer, ScoringConfig, SimpleScorer


def scoring_to_dict(scoring: ScoringConfig) -> dict:
    scorer = scoring.scorer
    if isinstance(scorer, MatrixScorer):
        scorer_dict = {"type": "matrix", "matrix": scorer.matrix.name}
    elif isinstance(scorer, SimpleScorer):
        scorer_dict = {
            "type": "simple",
            "match_score": scorer.match_score,
            "mismatch_score": scorer.mismatch_score,
        }
    else:
        raise TypeError(f"Unknown scorer: {scorer!r}")
    return {
        "scorer": scorer_dict,
        "gap_open": scoring.gap_open,
        "gap_extend": scoring.gap_extend,
    }


def result_to_dict(result: AlignmentResult) -> dict:
    """
    Flatten an AlignmentResult

    The DP matrix becomes `rows`, `cols` and row-major `scores` / `arrows`
    lists; every traceback path becomes a list of `[row, col]` pairs from
    its start cell to its stop cell.
    """
    matrix = result.matrix
    return {
        "seq1": result.seq1,
        "seq2": result.seq2,
        "mode": result.mode,
        "alignment_score": result.final_score,
        "scoring": scoring_to_dict(result.scoring),
        "alignments": [
            {"seq1": a.seq1_aligned, "seq2": a.seq2_aligned}
            for a in result.alignments
        ],
        "traceback_paths": [p.to_list() for p in result.traceback_paths],
        "dp_matrix": {
            "rows": matrix.rows,
            "cols": matrix.cols,
            "scores": matrix.scores.ravel().tolist(),
            "arrows": matrix.arrows.ravel().tolist(),
        },
    }


def _scoring_from_config(config: Mapping[str, Any]) -> ScoringConfig:
    matrix = config.get("matrix")
    match_score = config.get("match_score")
    mismatch_score = config.get("mismatch_score")
    if "gap_open" not in config or "gap_extend" not in config:
        raise ConfigurationError("Both 'gap_open' and 'gap_extend' are required")
    gap_open = config["gap_open"]
    gap_extend = config["gap_extend"]

    if matrix is None and match_score is None and mismatch_score is None:
        raise ConfigurationError(
            "Scoring method required: provide either 'matrix' or both "
            "'match_score' and 'mismatch_score'"
        )
    if gap_open != gap_extend:
        raise ConfigurationError(
            f"Affine gap penalties not supported: gap_open ({gap_open}) "
            f"must equal gap_extend ({gap_extend})",
            gap_open=gap_open,
            gap_extend=gap_extend,
        )
    return ScoringConfig.from_options(
        matrix=matrix,
        match_score=match_score,
        mismatch_score=mismatch_score,
        gap_open=gap_open,
        gap_extend=gap_extend,
    )


def align_from_config(seq1: SequenceLike, seq2: SequenceLike,
                      config: Mapping[str, Any]) -> dict:
    """
    Align from a configuration mapping and return the result dict

    Parameters:
    -----------
    seq1, seq2 : str or bytes
        Sequences to align
    config : mapping
        `mode` ("global" / "local"), either `matrix` or both
        `match_score` and `mismatch_score`, and `gap_open` / `gap_extend`
        (which must be equal)

    Raises:
    -------
    ConfigurationError
        Missing, conflicting or unsupported options
    InvalidCharacterError
        A residue outside the matrix alphabet
    """
    scoring = _scoring_from_config(config)
    aligner = make_aligner(config.get("mode", ""), scoring)
    return result_to_dict(aligner.align(seq1, seq2))


def list_matrices() -> dict:
    return {"matrices": available_matrices()}


__all__ = [
    "scoring_to_dict",
    "result_to_dict",
    "align_from_config",
    "list_matrices",
    "matrix_info",
]
