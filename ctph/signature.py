"""Signature value object: ``<block size>:<digest1>:<digest2>[,<label>]``."""
import dataclasses

from typing import Optional

from ctph.constants import B64_SET, SPAMSUM_LENGTH
from ctph.errors import DigestTooLong, InvalidSignatureFormat


@dataclasses.dataclass(frozen=True)
class Signature:
    """Validated on construction, whether built directly or through ``parse``."""

    block_size: int
    digest1: str
    digest2: str
    label: Optional[str] = None

    def __post_init__(self):
        if isinstance(self.block_size, bool) or not isinstance(self.block_size, int):
            raise InvalidSignatureFormat(f"Block size must be an integer, not {type(self.block_size)}")
        if self.block_size < 1:
            raise InvalidSignatureFormat(f"Badly formed signature (block size must be positive): {self.block_size}")
        for name, digest in (("first", self.digest1), ("second", self.digest2)):
            if not isinstance(digest, str):
                raise InvalidSignatureFormat(f"The {name} digest must be a string, not {type(digest)}")
            if len(digest) > SPAMSUM_LENGTH:
                raise DigestTooLong(
                    f"The {name} digest is {len(digest)} symbols long "
                    f"(maximum is {SPAMSUM_LENGTH})."
                )
            bad = set(digest) - B64_SET
            if bad:
                raise InvalidSignatureFormat(
                    f"The {name} digest contains non-base64 symbols: {''.join(sorted(bad))!r}"
                )

    def __str__(self) -> str:
        text = f"{self.block_size}:{self.digest1}:{self.digest2}"
        if self.label is not None:
            text += f",{self.label}"
        return text

    @property
    def digest(self) -> str:
        """The signature without its label."""
        return f"{self.block_size}:{self.digest1}:{self.digest2}"

    def with_label(self, label: Optional[str]) -> "Signature":
        return dataclasses.replace(self, label=label)

    @classmethod
    def parse(cls, text: str) -> "Signature":
        """
        Parse a signature string.

        Raises InvalidSignatureFormat for a missing delimiter, a block size
        that is not a positive decimal integer, or a symbol outside the
        base64 alphabet, and DigestTooLong for a digest over SPAMSUM_LENGTH.
        Empty digests are accepted here (``"3::"`` is what empty input
        hashes to); comparison rejects them.
        """
        if not isinstance(text, str):
            raise TypeError(f"Signature must be a string, not {type(text)}")

        colon1 = text.find(':')
        if colon1 == -1:
            raise InvalidSignatureFormat(f"Badly formed signature (no block size delimiter): {text[:80]!r}")
        bs_text = text[:colon1]
        if not bs_text.isascii() or not bs_text.isdigit():
            raise InvalidSignatureFormat(f"Badly formed signature (block size is not a number): {bs_text[:20]!r}")
        block_size = int(bs_text)

        colon2 = text.find(':', colon1 + 1)
        if colon2 == -1:
            raise InvalidSignatureFormat(f"Badly formed signature (no second digest delimiter): {text[:80]!r}")

        # Everything after the comma is a label (usually a quoted filename).
        comma = text.find(',', colon2 + 1)
        digest1 = text[colon1 + 1:colon2]
        if comma == -1:
            digest2 = text[colon2 + 1:]
            label = None
        else:
            digest2 = text[colon2 + 1:comma]
            label = text[comma + 1:]

        return cls(block_size, digest1, digest2, label)
