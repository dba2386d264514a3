"""
CAVS Response File Parser

Reads NIST CAVS `.rsp` test vector files:

    #  CAVS 11.0
    [L = 32]

    Len = 8
    Msg = d3
    MD = 28969cdf...

Rules:
- Blank lines and `#` comments terminate the pending record
- `[L = N]` sets the digest length (bytes) for the whole file
- `Len`, `Msg` and `MD` fill the pending record; other keys are ignored
- A record with Len = 0 needs no Msg line; its message is always b""
- Incomplete records are skipped, invalid hex aborts the whole parse
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Union

import structlog


log = structlog.get_logger(__name__)


# ============================================================================
# Constants
# ============================================================================

HEADER_PATTERN = re.compile(r'^\[\s*L\s*=\s*(\d+)\s*\]$')
HEX_PATTERN = re.compile(r'^[0-9a-fA-F]*$')

KEY_LENGTH = "Len"
KEY_MESSAGE = "Msg"
KEY_DIGEST = "MD"


# ============================================================================
# Errors
# ============================================================================

class VectorFileError(Exception):
    """Base class for vector file failures."""
    pass


class VectorFileNotFound(VectorFileError, FileNotFoundError):
    """Raised when a vector file cannot be opened."""
    pass


class MalformedVectorFile(VectorFileError, ValueError):
    """Raised when a vector file violates the format."""

    def __init__(self, message: str, source: str = "<string>", line: Optional[int] = None):
        self.source = source
        self.line = line
        location = f"{source}:{line}" if line is not None else source
        super().__init__(f"{location}: {message}")


# ============================================================================
# Data Model
# ============================================================================

@dataclass(frozen=True)
class TestVector:
    """One (message, expected digest) pair."""
    __test__ = False  # Not a pytest test class

    length_bits: int
    message: bytes
    digest: bytes
    line: int = field(default=0, compare=False)

    @property
    def message_length(self) -> int:
        return len(self.message)

    def __str__(self) -> str:
        return (
            f"Len = {self.length_bits} "
            f"(line {self.line}, MD = {self.digest.hex()[:16]}...)"
        )


@dataclass
class VectorFile:
    """A parsed `.rsp` file: the header digest length and its vectors in file order."""
    digest_length_bytes: int
    vectors: List[TestVector] = field(default_factory=list)
    source: str = field(default="<string>", compare=False)

    def __len__(self) -> int:
        return len(self.vectors)

    def __iter__(self) -> Iterator[TestVector]:
        return iter(self.vectors)

    def empty_message_vector(self) -> Optional[TestVector]:
        """First vector with Len = 0, if the file has one."""
        for vector in self.vectors:
            if vector.length_bits == 0:
                return vector
        return None


# ============================================================================
# Hex Decoding
# ============================================================================

def decode_hex(text: str, source: str = "<string>", line: Optional[int] = None) -> bytes:
    """
    Decode a CAVS hex field.

    Raises:
        MalformedVectorFile: On odd length or non-hex characters
    """
    if len(text) % 2 != 0:
        raise MalformedVectorFile(f"Odd-length hex string ({len(text)} digits)", source, line)
    if not HEX_PATTERN.match(text):
        raise MalformedVectorFile(f"Invalid hex string: {text[:32]!r}", source, line)
    return bytes.fromhex(text)


# ============================================================================
# Parser State Machine
# ============================================================================

@dataclass
class _PendingRecord:
    """Fields collected since the last commit."""
    line: int
    length_bits: Optional[int] = None
    message_hex: Optional[str] = None
    digest_hex: Optional[str] = None

    def is_complete(self) -> bool:
        if self.length_bits is None or self.digest_hex is None:
            return False
        return self.length_bits == 0 or self.message_hex is not None


class RspParser:
    """
    Line-driven parser with two states.

    Idle: no pending record (self._pending is None).
    Accumulating: a record is being filled from key = value lines.

    A terminator line commits a complete record and returns to Idle.
    """

    def __init__(self, source: str = "<string>"):
        self.source = source
        self.digest_length_bytes: Optional[int] = None
        self.vectors: List[TestVector] = []
        self._pending: Optional[_PendingRecord] = None
        self._line_no = 0
        self._skipped = 0

    @property
    def accumulating(self) -> bool:
        return self._pending is not None

    def feed(self, raw_line: str) -> None:
        """Consume one line of input."""
        self._line_no += 1
        line = raw_line.strip()

        if not line or line.startswith('#'):
            self._terminate()
            return

        header = HEADER_PATTERN.match(line)
        if header:
            self.digest_length_bytes = int(header.group(1))
            return

        key, sep, rest = line.partition('=')
        tokens = rest.split()
        if not sep or not tokens:
            return
        key, value = key.strip(), tokens[0]

        if key == KEY_LENGTH:
            self._record().length_bits = self._parse_length(value)
        elif key == KEY_MESSAGE:
            self._record().message_hex = value
        elif key == KEY_DIGEST:
            self._record().digest_hex = value

    def finish(self) -> VectorFile:
        """
        Flush the final record and validate digest lengths.

        Raises:
            MalformedVectorFile: If any digest disagrees with the header
        """
        self._terminate()
        if self._pending is not None:
            self._skipped += 1
            log.debug("dropped incomplete record", source=self.source, line=self._pending.line)
            self._pending = None

        if self.vectors and self.digest_length_bytes is None:
            raise MalformedVectorFile("Missing [L = N] header", self.source)
        digest_length = self.digest_length_bytes or 0
        for vector in self.vectors:
            if len(vector.digest) != digest_length:
                raise MalformedVectorFile(
                    f"Digest is {len(vector.digest)} bytes but header declares {digest_length}",
                    self.source, vector.line,
                )

        log.debug(
            "parsed vector file",
            source=self.source,
            digest_length=digest_length,
            vectors=len(self.vectors),
            skipped=self._skipped,
        )
        return VectorFile(digest_length, list(self.vectors), self.source)

    def _record(self) -> _PendingRecord:
        if self._pending is None:
            self._pending = _PendingRecord(line=self._line_no)
        return self._pending

    def _parse_length(self, value: str) -> int:
        try:
            length_bits = int(value)
        except ValueError:
            raise MalformedVectorFile(f"Invalid Len value: {value!r}", self.source, self._line_no) from None
        if length_bits < 0:
            raise MalformedVectorFile(f"Negative Len value: {length_bits}", self.source, self._line_no)
        return length_bits

    def _terminate(self) -> None:
        pending = self._pending
        if pending is None:
            return
        if not pending.is_complete():
            # Incomplete fields carry over into the next block.
            return
        self._commit(pending)
        self._pending = None

    def _commit(self, pending: _PendingRecord) -> None:
        if pending.length_bits == 0:
            message = b""
        else:
            message = decode_hex(pending.message_hex, self.source, pending.line)
        digest = decode_hex(pending.digest_hex, self.source, pending.line)
        self.vectors.append(TestVector(pending.length_bits, message, digest, pending.line))


# ============================================================================
# Entry Points
# ============================================================================

def parse_vector_text(text: str, source: str = "<string>") -> VectorFile:
    """Parse `.rsp` content already in memory."""
    parser = RspParser(source)
    for line in text.splitlines():
        parser.feed(line)
    return parser.finish()


def parse_vector_file(file_path: Union[str, Path]) -> VectorFile:
    """
    Parse a `.rsp` file.

    Args:
        file_path: Path to the vector file

    Returns:
        The parsed VectorFile

    Raises:
        VectorFileNotFound: If the file cannot be opened
        MalformedVectorFile: If the content is invalid
    """
    path = Path(file_path)
    try:
        handle = open(path, 'r', encoding='ascii', errors='replace')
    except OSError as e:
        raise VectorFileNotFound(f"Failed to open vector file: {path} ({e.strerror})") from e

    parser = RspParser(str(path))
    with handle:
        for line in handle:
            parser.feed(line)
    return parser.finish()
