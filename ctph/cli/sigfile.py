"""Reading and writing ssdeep-style signature list files."""
from typing import Iterable, List, TextIO

from ctph.errors import InvalidSignatureFormat
from ctph.signature import Signature

SIGFILE_HEADER = "ssdeep,1.1--blocksize:hash:hash,filename"


def quote_label(filename: str) -> str:
    return '"' + filename.replace('"', '\\"') + '"'


def unquote_label(label: str) -> str:
    if len(label) >= 2 and label[0] == '"' and label[-1] == '"':
        return label[1:-1].replace('\\"', '"')
    return label


def write_signatures(out: TextIO, signatures: Iterable[Signature], header: bool = True) -> None:
    if header:
        out.write(SIGFILE_HEADER + "\n")
    for sig in signatures:
        out.write(f"{sig}\n")


def read_signatures(stream: TextIO) -> List[Signature]:
    """Parse a signature list. Labels are returned with their quotes removed."""
    lines = [line.strip() for line in stream]
    lines = [line for line in lines if line]
    if not lines:
        return []
    if not lines[0].startswith("ssdeep,"):
        raise InvalidSignatureFormat(f"Not a signature file (missing '{SIGFILE_HEADER}' header).")

    sigs = []
    for lineno, line in enumerate(lines[1:], start=2):
        try:
            sig = Signature.parse(line)
        except InvalidSignatureFormat as e:
            raise InvalidSignatureFormat(f"Line {lineno}: {e}") from e
        if sig.label is not None:
            sig = sig.with_label(unquote_label(sig.label))
        sigs.append(sig)
    return sigs
