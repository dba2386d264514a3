"""
Streaming Hash Engine Contract

Every algorithm is driven through the same operation set on caller-owned
buffers, so conformance code never needs to know an engine's internal
state layout:

- init(None) is a sizing probe returning the state size to allocate
- init / reset / update / finalize operate on a caller-owned bytearray
- digest is the one-shot path
- serialize / deserialize checkpoint an in-progress computation

Operations that write output take an optional bytearray; passing None
returns the number of bytes the caller must provide instead.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from .sha2 import Sha2Hasher, Sha2Variant, VARIANTS


# ============================================================================
# Errors
# ============================================================================

class EngineError(Exception):
    """Base class for hash engine failures."""
    pass


class StateError(EngineError, ValueError):
    """Raised when a state buffer is too small, uninitialized or foreign."""
    pass


class DeserializationError(EngineError, ValueError):
    """Raised when a serialized state blob is malformed or incompatible."""
    pass


class UnknownAlgorithm(KeyError):
    """Raised when an engine name is not registered."""
    pass


# ============================================================================
# Contract
# ============================================================================

class HashEngine(ABC):
    """
    The capability every algorithm variant exposes.

    Implementations are stateless; all in-progress computation lives in the
    state buffer the caller allocates and owns.
    """

    name: str = ""
    digest_size: int = 0

    @abstractmethod
    def init(self, state: Optional[bytearray] = None) -> int:
        """
        Initialize a state buffer, or probe for its size.

        Args:
            state: Buffer of at least required_state_size() bytes, or None

        Returns:
            Number of bytes a state buffer needs
        """

    def required_state_size(self) -> int:
        """Size of the state buffer, discovered through the init probe."""
        return self.init(None)

    def allocate_state(self) -> bytearray:
        """Allocate a zeroed (not yet initialized) state buffer."""
        return bytearray(self.required_state_size())

    @abstractmethod
    def reset(self, state: bytearray) -> None:
        """Return an initialized state to the initial state."""

    @abstractmethod
    def update(self, state: bytearray, data: bytes, length: Optional[int] = None) -> None:
        """Absorb `length` bytes of `data` (all of it when length is None)."""

    @abstractmethod
    def finalize(self, state: bytearray, out: Optional[bytearray] = None) -> int:
        """Write the digest into `out` and return the digest size."""

    @abstractmethod
    def digest(self, data: bytes, length: Optional[int] = None,
               out: Optional[bytearray] = None) -> int:
        """One-shot init + update + finalize into `out`; returns the digest size."""

    @abstractmethod
    def serialize(self, state: bytearray, out: Optional[bytearray] = None) -> int:
        """Write the state's checkpoint blob into `out`; returns the blob size."""

    @abstractmethod
    def deserialize(self, blob: bytes, state: bytearray) -> int:
        """
        Rebuild a live state from a checkpoint blob.

        Returns:
            Number of blob bytes consumed

        Raises:
            DeserializationError: If the blob is rejected. The destination
                buffer is not modified in that case.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} digest_size={self.digest_size}>"


def _message_view(data: bytes, length: Optional[int]) -> memoryview:
    view = memoryview(data).cast('B')
    if length is None:
        return view
    if length < 0 or length > len(view):
        raise ValueError(f"length {length} out of range for {len(view)}-byte input")
    return view[:length]


def _check_output(out: bytearray, size: int) -> None:
    if len(out) < size:
        raise ValueError(f"Output buffer must hold at least {size} bytes, got {len(out)}")


# ============================================================================
# SHA-2 Engines
# ============================================================================

FINALIZED_FLAG = 0x80


class Sha2Engine(HashEngine):
    """
    HashEngine backed by the from-scratch SHA-2 implementation.

    State buffer layout: one tag byte (0 until initialized, high bit set once
    finalized) followed by the serialized layout. A finalized state must be
    reset or re-initialized before it can absorb input or be serialized.

    Serialized layout (big-endian throughout):
        chaining words | block buffer | buffered byte count (1) | total bytes
    """

    def __init__(self, variant: Sha2Variant, tag: int):
        if not 1 <= tag < FINALIZED_FLAG:
            raise ValueError(f"Engine tag must be between 1 and {FINALIZED_FLAG - 1}")
        family = variant.family
        self.variant = variant
        self.name = variant.name
        self.digest_size = variant.digest_size
        self.block_size = family.block_size
        self.serialized_size = family.state_bytes + family.block_size + 1 + family.length_bytes
        self.state_size = 1 + self.serialized_size
        self._tag = tag

    # ------------------------------------------------------------------
    # Layout helpers
    # ------------------------------------------------------------------

    def _encode(self, hasher: Sha2Hasher) -> bytes:
        family = self.variant.family
        total = hasher.total_length & ((1 << (8 * family.length_bytes)) - 1)
        return b''.join([
            b''.join(w.to_bytes(family.word_bytes, byteorder='big') for w in hasher.words),
            bytes(hasher.buffer).ljust(family.block_size, b'\x00'),
            bytes([len(hasher.buffer)]),
            total.to_bytes(family.length_bytes, byteorder='big'),
        ])

    def _decode(self, raw: bytes, strict: bool = True) -> Sha2Hasher:
        family = self.variant.family
        if len(raw) != self.serialized_size:
            raise DeserializationError(
                f"{self.name} state must be {self.serialized_size} bytes, got {len(raw)}"
            )
        words_end = family.state_bytes
        buffer_end = words_end + family.block_size
        buffer_len = raw[buffer_end]
        total = int.from_bytes(raw[buffer_end + 1:], byteorder='big')
        if buffer_len >= family.block_size:
            raise DeserializationError(f"Invalid buffered byte count: {buffer_len}")
        if strict and total % family.block_size != buffer_len:
            raise DeserializationError(
                f"Buffered byte count {buffer_len} does not match total length {total}"
            )

        hasher = Sha2Hasher(self.variant)
        hasher.words = [
            int.from_bytes(raw[i:i + family.word_bytes], byteorder='big')
            for i in range(0, words_end, family.word_bytes)
        ]
        hasher.buffer = bytearray(raw[words_end:words_end + buffer_len])
        hasher.total_length = total
        return hasher

    def _check_state(self, state: bytearray) -> None:
        if state is None or len(state) < self.state_size:
            size = 0 if state is None else len(state)
            raise StateError(
                f"{self.name} state buffer needs {self.state_size} bytes, got {size}"
            )

    def _load(self, state: bytearray, allow_finalized: bool = True) -> Sha2Hasher:
        self._check_state(state)
        tag = state[0] & ~FINALIZED_FLAG
        finalized = bool(state[0] & FINALIZED_FLAG)
        if state[0] == 0:
            raise StateError(f"{self.name} state buffer was never initialized")
        if tag != self._tag:
            raise StateError(f"State buffer belongs to a different engine (tag {tag})")
        if finalized and not allow_finalized:
            raise StateError(f"{self.name} state was finalized; reset it before reuse")
        try:
            return self._decode(bytes(state[1:self.state_size]), strict=not finalized)
        except DeserializationError as e:
            raise StateError(f"Corrupted {self.name} state: {e}") from e

    def _store(self, hasher: Sha2Hasher, state: bytearray, finalized: bool = False) -> None:
        state[0] = self._tag | (FINALIZED_FLAG if finalized else 0)
        state[1:self.state_size] = self._encode(hasher)

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def init(self, state: Optional[bytearray] = None) -> int:
        if state is not None:
            self._check_state(state)
            self._store(Sha2Hasher(self.variant), state)
        return self.state_size

    def reset(self, state: bytearray) -> None:
        self._load(state)
        self._store(Sha2Hasher(self.variant), state)

    def update(self, state: bytearray, data: bytes, length: Optional[int] = None) -> None:
        view = _message_view(data, length)
        hasher = self._load(state, allow_finalized=False)
        hasher.update(view)
        self._store(hasher, state)

    def finalize(self, state: bytearray, out: Optional[bytearray] = None) -> int:
        if out is None:
            return self.digest_size
        _check_output(out, self.digest_size)
        hasher = self._load(state)
        out[:self.digest_size] = hasher.finalize()
        self._store(hasher, state, finalized=True)
        return self.digest_size

    def digest(self, data: bytes, length: Optional[int] = None,
               out: Optional[bytearray] = None) -> int:
        if out is None:
            return self.digest_size
        _check_output(out, self.digest_size)
        hasher = Sha2Hasher(self.variant)
        hasher.update(_message_view(data, length))
        out[:self.digest_size] = hasher.finalize()
        return self.digest_size

    def serialize(self, state: bytearray, out: Optional[bytearray] = None) -> int:
        if out is None:
            return self.serialized_size
        _check_output(out, self.serialized_size)
        self._load(state, allow_finalized=False)
        out[:self.serialized_size] = state[1:self.state_size]
        return self.serialized_size

    def deserialize(self, blob: bytes, state: bytearray) -> int:
        self._check_state(state)
        hasher = self._decode(bytes(blob))
        self._store(hasher, state)
        return self.serialized_size


# ============================================================================
# Registry
# ============================================================================

ENGINES: Dict[str, HashEngine] = {
    name: Sha2Engine(variant, tag)
    for tag, (name, variant) in enumerate(VARIANTS.items(), start=1)
}


def get_engine(name: str) -> HashEngine:
    """
    Look up a registered engine by name.

    Raises:
        UnknownAlgorithm: If no engine is registered under the name
    """
    try:
        return ENGINES[name]
    except KeyError:
        raise UnknownAlgorithm(
            f"Unknown algorithm {name!r}; expected one of {', '.join(ENGINES)}"
        ) from None
