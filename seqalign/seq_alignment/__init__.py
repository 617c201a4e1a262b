"""
Sequence Alignment Module
Global and local pairwise alignment that enumerates every optimal alignment
"""

from .errors import (
    AlignmentError,
    ConfigurationError,
    InvalidCharacterError,
    MatrixFormatError,
)
from .matrices import (
    SubstitutionMatrix,
    available_matrices,
    get_matrix,
    load_matrix,
    matrix_info,
    parse_matrix,
)
from .scoring import MatrixScorer, ScoringConfig, SimpleScorer
from .dp import Arrows, Cell, DPMatrix
from .traceback import AlignedPair, TracebackPath, TracebackStep, iter_tracebacks
from .pairwise import (
    AlignmentResult,
    GlobalAligner,
    LocalAligner,
    align_async,
    align_many,
    make_aligner,
    pairwise
)
from .output import align_from_config, list_matrices, result_to_dict

__all__ = [
    "AlignmentError",
    "ConfigurationError",
    "InvalidCharacterError",
    "MatrixFormatError",
    "SubstitutionMatrix",
    "available_matrices",
    "get_matrix",
    "load_matrix",
    "matrix_info",
    "parse_matrix",
    "MatrixScorer",
    "ScoringConfig",
    "SimpleScorer",
    "Arrows",
    "Cell",
    "DPMatrix",
    "AlignedPair",
    "TracebackPath",
    "TracebackStep",
    "iter_tracebacks",
    "AlignmentResult",
    "GlobalAligner",
    "LocalAligner",
    "align_async",
    "align_many",
    "make_aligner",
    "pairwise",
    "align_from_config",
    "list_matrices",
    "result_to_dict",
]
