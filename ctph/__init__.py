"""CTPH - ssdeep-compatible context-triggered piecewise (fuzzy) hashing."""
__version__ = "1.0.0"

from ctph.errors import (
    FuzzyHashError, InvalidSignatureFormat, DigestTooLong,
    IncomparableBlockSizes, GenerationOverflow,
)
from ctph.signature import Signature
from ctph.compare import SignatureComparer, compare, match_signature
from ctph.hashing import (
    FuzzyHash, FuzzyHasher, FuzzyHashMode, fuzzy_hasher, hash_bytes, hash_file,
)
