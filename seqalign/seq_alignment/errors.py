"""
Exceptions raised by the pairwise alignment engine
"""

from typing import Optional


class AlignmentError(ValueError):
    """Base class for every failure of an alignment call"""


class InvalidCharacterError(AlignmentError):
    """
    A residue that is absent from the active scorer's alphabet

    Attributes:
    -----------
    char : int
        The offending byte (the code point for non-ASCII text)
    """

    def __init__(self, char: int):
        self.char = char
        super().__init__(f"Invalid character in sequence: '{chr(char)}'")


class ConfigurationError(AlignmentError):
    """Unsupported or inconsistent scoring configuration"""

    def __init__(self, message: str, gap_open: Optional[int] = None,
                 gap_extend: Optional[int] = None):
        self.gap_open = gap_open
        self.gap_extend = gap_extend
        super().__init__(message)


class MatrixFormatError(ValueError):
    """Malformed substitution matrix table"""
