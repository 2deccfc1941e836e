"""Exception types raised by signature generation and comparison.

A score of 0 means "compared, not similar". Every condition below means
"could not compare" (or could not generate) and is always raised, never
mapped to a score.
"""


class FuzzyHashError(Exception):
    def __init__(self, msg="Generic fuzzy hash error"):
        super().__init__(msg)
        self.msg = msg


class InvalidSignatureFormat(FuzzyHashError, ValueError):
    """Missing delimiter, bad block size, empty digest or non-alphabet symbol."""


class DigestTooLong(InvalidSignatureFormat):
    """A digest component is longer than SPAMSUM_LENGTH."""


class IncomparableBlockSizes(FuzzyHashError, ValueError):
    """Block sizes are neither equal nor related by a factor of two."""


class GenerationOverflow(FuzzyHashError, OverflowError):
    """The input needs a block size beyond the last available level."""
