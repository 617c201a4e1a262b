"""
Substitution matrix tables

Tables are plain-text `.mat` files: `#` starts a comment, the first data
line lists the residues, and every following line is a residue label
followed by one score per column. Besides integers, the tokens `inf` and
`-inf` are accepted and stored as the largest / smallest 32-bit score
(`-inf` marks a forbidden pair).

Built-in tables live in the package `data/` directory and are loaded once,
on first use, into read-only `SubstitutionMatrix` objects.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Union

import numpy as np

from .errors import ConfigurationError, InvalidCharacterError, MatrixFormatError


_I32 = np.iinfo(np.int32)
SCORE_MIN = int(_I32.min)
SCORE_MAX = int(_I32.max)

_DATA_DIR = "data"
_SPECIAL_TOKENS = {"inf": SCORE_MAX, "-inf": SCORE_MIN}


@dataclass(frozen=True)
class SubstitutionMatrix:
    """
    Read-only residue-pair score table

    Attributes:
    -----------
    name : str
        Upper-case table name (e.g. "BLOSUM62")
    alphabet : bytes
        Residues in table order, upper-case
    scores : np.ndarray
        Square int32 table indexed by alphabet position
    """
    name: str
    alphabet: bytes
    scores: np.ndarray = field(repr=False, compare=False)
    _lookup: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "scores", np.array(self.scores, dtype=np.int32))
        n = len(self.alphabet)
        if self.scores.shape != (n, n):
            raise MatrixFormatError(f"Matrix {self.name} is not square")
        lookup = np.full(256, -1, dtype=np.int16)
        for i, b in enumerate(self.alphabet):
            lookup[b] = i
            c = chr(b)
            if c.isalpha():
                lookup[ord(c.upper())] = i
                lookup[ord(c.lower())] = i
        lookup.flags.writeable = False
        self.scores.flags.writeable = False
        object.__setattr__(self, "_lookup", lookup)

    def __len__(self) -> int:
        return len(self.alphabet)

    def __contains__(self, residue: int) -> bool:
        return self._lookup[residue] >= 0

    def index(self, residue: int) -> int:
        """Alphabet position of `residue` (case-insensitive)"""
        idx = int(self._lookup[residue])
        if idx < 0:
            raise InvalidCharacterError(residue)
        return idx

    def score(self, a: int, b: int) -> int:
        return int(self.scores[self.index(a), self.index(b)])

    def validate(self, seq: bytes) -> None:
        """Raise InvalidCharacterError on the first residue missing from the alphabet"""
        for c in seq:
            if self._lookup[c] < 0:
                raise InvalidCharacterError(c)


def _normalize_residue(token: str, name: str) -> str:
    if len(token) != 1 or not token.isascii():
        raise MatrixFormatError(
            f"Matrix {name} has non-ASCII or multi-character residue: {token}"
        )
    return token.upper() if token.isalpha() else token


def _parse_score(token: str, name: str) -> int:
    if token in _SPECIAL_TOKENS:
        return _SPECIAL_TOKENS[token]
    try:
        value = int(token)
    except ValueError:
        raise MatrixFormatError(f"Matrix {name} has invalid score token: {token}") from None
    return max(SCORE_MIN, min(SCORE_MAX, value))


def parse_matrix(text: str, name: str) -> SubstitutionMatrix:
    """
    Parse a `.mat` table

    Parameters:
    -----------
    text : str
        Table contents
    name : str
        Table name; stored upper-case

    Returns:
    --------
    SubstitutionMatrix

    Raises:
    -------
    MatrixFormatError
        Row label mismatch, wrong column count, wrong row count, bad token,
        missing header.
    """
    name = name.upper()
    residues: List[str] = []
    rows: List[List[int]] = []

    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        parts = line.split()
        if not residues:
            residues = [_normalize_residue(p, name) for p in parts]
            continue

        if len(parts) != len(residues) + 1:
            raise MatrixFormatError(
                f"Matrix {name} row has unexpected column count: {len(parts)}"
            )
        if len(rows) >= len(residues):
            raise MatrixFormatError(f"Matrix {name} has too many rows")
        label = _normalize_residue(parts[0], name)
        expected = residues[len(rows)]
        if label != expected:
            raise MatrixFormatError(
                f"Matrix {name} row label mismatch: expected {expected}, got {label}"
            )
        rows.append([_parse_score(tok, name) for tok in parts[1:]])

    if not residues:
        raise MatrixFormatError(f"Matrix {name} is missing residues")
    if len(rows) != len(residues):
        raise MatrixFormatError(
            f"Matrix {name} has {len(rows)} rows, expected {len(residues)}"
        )

    alphabet = "".join(residues).encode("ascii")
    scores = np.array(rows, dtype=np.int32)
    return SubstitutionMatrix(name=name, alphabet=alphabet, scores=scores)


def load_matrix(path: Union[str, Path], name: str = None) -> SubstitutionMatrix:
    """Load a `.mat` file; the name defaults to the file stem"""
    path = Path(path)
    return parse_matrix(path.read_text(encoding="ascii"), name or path.stem)


def _data_files() -> Dict[str, Any]:
    root = resources.files(__package__) / _DATA_DIR
    return {
        entry.name[:-4].upper(): entry
        for entry in root.iterdir()
        if entry.name.endswith(".mat")
    }


def available_matrices() -> List[str]:
    """Names of the built-in tables"""
    return sorted(_data_files())


@lru_cache(maxsize=None)
def _builtin(name: str) -> SubstitutionMatrix:
    files = _data_files()
    if name not in files:
        raise ConfigurationError(f"Unknown matrix name: '{name}'")
    return parse_matrix(files[name].read_text(encoding="ascii"), name)


def get_matrix(name: str) -> SubstitutionMatrix:
    """Built-in table by (case-insensitive) name"""
    return _builtin(name.upper())


def matrix_info(name: str) -> dict:
    """Name, alphabet and flattened row-major scores of a built-in table"""
    matrix = get_matrix(name)
    return {
        "name": matrix.name,
        "alphabet": [chr(b) for b in matrix.alphabet],
        "scores": matrix.scores.ravel().tolist(),
    }
