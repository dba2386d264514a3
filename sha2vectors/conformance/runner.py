"""
Conformance Runner

Drives one HashEngine against one parsed vector file. A single generic
routine covers every algorithm; only the engine and the file change.

Checks:
- oneshot: digest() of every message
- streaming: one reused state buffer, init/update/finalize per vector,
  plus an empty-message cross-check after every non-empty vector
  (reset then finalize must equal the file's Len = 0 digest)
- chunked: byte-by-byte and three uneven update calls
- serialization: serialize mid-stream, resume in a fresh buffer

Mismatches are collected per vector; a failing vector never stops the
remaining ones.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import structlog

from .. import config
from ..core_crypto.engine import HashEngine
from ..vectors.rsp_parser import TestVector, VectorFile


log = structlog.get_logger(__name__)


# ============================================================================
# Results
# ============================================================================

class ConformanceSetupError(Exception):
    """Raised when a vector file cannot be paired with an engine."""
    pass


@dataclass(frozen=True)
class VectorMismatch:
    """One failed comparison."""
    check: str
    index: int
    line: int
    length_bits: int
    message_length: int
    expected: bytes
    actual: bytes
    detail: str = ""

    def __str__(self) -> str:
        text = (
            f"[{self.check}] vector #{self.index} (line {self.line}, "
            f"Len = {self.length_bits}, {self.message_length} message bytes): "
        )
        if self.detail:
            return text + self.detail
        return text + f"expected {self.expected.hex()}, got {self.actual.hex()}"


@dataclass
class CheckResult:
    """Outcome of one named check over a vector file."""
    name: str
    vectors_checked: int = 0
    failures: List[VectorMismatch] = field(default_factory=list)
    skipped: bool = False

    @property
    def passed(self) -> bool:
        return not self.failures

    def summary(self) -> str:
        if self.skipped:
            return f"{self.name}: skipped"
        status = "ok" if self.passed else f"{len(self.failures)} FAILED"
        return f"{self.name}: {self.vectors_checked} checked, {status}"


@dataclass
class GroupReport:
    """All check results for one (engine, vector file) pair."""
    group: str
    engine: str
    source: str
    results: List[CheckResult] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.error is None and all(r.passed for r in self.results)

    @property
    def failures(self) -> List[VectorMismatch]:
        return [f for r in self.results for f in r.failures]

    def result(self, name: str) -> CheckResult:
        for r in self.results:
            if r.name == name:
                return r
        raise KeyError(name)


# ============================================================================
# Runner
# ============================================================================

CHECK_ONESHOT = "oneshot"
CHECK_STREAMING = "streaming"
CHECK_EMPTY_RESET = "empty-reset"
CHECK_CHUNKED = "chunked"
CHECK_SERIALIZATION = "serialization"

ALL_CHECKS = (CHECK_ONESHOT, CHECK_STREAMING, CHECK_CHUNKED, CHECK_SERIALIZATION)


class ConformanceRunner:
    """
    Verifies an engine against the vectors of one file.

    The streaming checks reuse a single state buffer for the whole file,
    so a runner must not be shared between threads.
    """

    def __init__(self, engine: HashEngine, vector_file: VectorFile, group: str = ""):
        if vector_file.digest_length_bytes != engine.digest_size:
            raise ConformanceSetupError(
                f"Unexpected digest length in {vector_file.source}: "
                f"got {vector_file.digest_length_bytes}, expected {engine.digest_size}"
            )
        self.engine = engine
        self.vector_file = vector_file
        self.group = group or engine.name
        self._checks: Dict[str, Callable[[], CheckResult]] = {
            CHECK_ONESHOT: self.check_oneshot,
            CHECK_STREAMING: self.check_streaming,
            CHECK_CHUNKED: self.check_chunked,
            CHECK_SERIALIZATION: self.check_serialization,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _new_state(self) -> bytearray:
        size = self.engine.required_state_size()
        if size < 1:
            raise ConformanceSetupError(f"{self.engine.name} reported state size {size}")
        return bytearray(size)

    def _compare(self, result: CheckResult, check: str, index: int,
                 vector: TestVector, expected: bytes, actual: bytes) -> None:
        if actual == expected:
            return
        self._fail(result, check, index, vector, expected, actual)

    def _fail(self, result: CheckResult, check: str, index: int, vector: TestVector,
              expected: bytes, actual: bytes, detail: str = "") -> None:
        mismatch = VectorMismatch(
            check=check,
            index=index,
            line=vector.line,
            length_bits=vector.length_bits,
            message_length=vector.message_length,
            expected=bytes(expected),
            actual=bytes(actual),
            detail=detail,
        )
        result.failures.append(mismatch)
        log.warning(
            "vector mismatch",
            group=self.group,
            check=check,
            index=index,
            line=vector.line,
            length_bits=vector.length_bits,
            message_length=vector.message_length,
            detail=detail or None,
        )

    def _stream(self, state: bytearray, chunks: Sequence[bytes]) -> bytes:
        out = bytearray(self.engine.digest_size)
        self.engine.init(state)
        for chunk in chunks:
            self.engine.update(state, chunk, len(chunk))
        self.engine.finalize(state, out)
        return bytes(out)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def check_oneshot(self) -> CheckResult:
        """digest() of every message must match, and Len must match the message."""
        result = CheckResult(CHECK_ONESHOT)
        out = bytearray(self.engine.digest_size)

        for index, vector in enumerate(self.vector_file.vectors):
            result.vectors_checked += 1
            if vector.message_length != vector.length_bits // 8 or vector.length_bits % 8:
                self._fail(
                    result, CHECK_ONESHOT, index, vector, b"", b"",
                    detail=f"message is {vector.message_length} bytes but Len declares {vector.length_bits} bits",
                )
                continue
            self.engine.digest(vector.message, vector.message_length, out)
            self._compare(result, CHECK_ONESHOT, index, vector, vector.digest, out)

        return result

    def check_streaming(self) -> CheckResult:
        """
        init/update/finalize with one reused state buffer.

        After each non-empty vector the buffer is reset and finalized with
        no input; the result must equal the file's empty-message digest.
        Mismatches from that cross-check are reported as 'empty-reset'.
        """
        result = CheckResult(CHECK_STREAMING)
        state = self._new_state()
        out = bytearray(self.engine.digest_size)
        empty_out = bytearray(self.engine.digest_size)
        empty_vector = self.vector_file.empty_message_vector()
        if empty_vector is None:
            log.debug("no empty-message vector, cross-check skipped", group=self.group)

        for index, vector in enumerate(self.vector_file.vectors):
            result.vectors_checked += 1
            self.engine.init(state)
            self.engine.update(state, vector.message, vector.message_length)
            self.engine.finalize(state, out)
            self._compare(result, CHECK_STREAMING, index, vector, vector.digest, out)

            if vector.length_bits > 0 and empty_vector is not None:
                self.engine.reset(state)
                self.engine.finalize(state, empty_out)
                self._compare(result, CHECK_EMPTY_RESET, index, vector, empty_vector.digest, empty_out)

        return result

    def check_chunked(self) -> CheckResult:
        """Byte-by-byte updates for short messages, three uneven updates for longer ones."""
        result = CheckResult(CHECK_CHUNKED)
        state = self._new_state()

        for index, vector in enumerate(self.vector_file.vectors):
            message = vector.message
            checked = False

            if 0 < vector.length_bits <= config.CHUNKED_MAX_BITS:
                chunks = [message[i:i + 1] for i in range(len(message))]
                actual = self._stream(state, chunks)
                self._compare(result, CHECK_CHUNKED, index, vector, vector.digest, actual)
                checked = True

            if vector.length_bits >= config.UNEVEN_CHUNKS_MIN_BITS:
                t1, t2 = len(message) // 3, (2 * len(message)) // 3
                actual = self._stream(state, [message[:t1], message[t1:t2], message[t2:]])
                self._compare(result, CHECK_CHUNKED, index, vector, vector.digest, actual)
                checked = True

            if checked:
                result.vectors_checked += 1

        result.skipped = result.vectors_checked == 0
        return result

    def check_serialization(self) -> CheckResult:
        """Checkpoint halfway through each message and finish in a fresh buffer."""
        result = CheckResult(CHECK_SERIALIZATION)
        engine = self.engine
        state = self._new_state()
        resumed = self._new_state()
        blob = bytearray(engine.serialize(state, None))
        out = bytearray(engine.digest_size)

        for index, vector in enumerate(self.vector_file.vectors):
            result.vectors_checked += 1
            split = vector.message_length // 2
            engine.init(state)
            engine.update(state, vector.message[:split])
            engine.serialize(state, blob)

            consumed = engine.deserialize(bytes(blob), resumed)
            if consumed != len(blob):
                self._fail(
                    result, CHECK_SERIALIZATION, index, vector, b"", b"",
                    detail=f"deserialize consumed {consumed} of {len(blob)} bytes",
                )
                continue
            engine.update(resumed, vector.message[split:])
            engine.finalize(resumed, out)
            self._compare(result, CHECK_SERIALIZATION, index, vector, vector.digest, out)

        return result

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def run(self, checks: Optional[Sequence[str]] = None) -> GroupReport:
        """
        Run the named checks (all of them by default).

        Raises:
            ValueError: If a check name is unknown
        """
        names = list(checks) if checks else list(ALL_CHECKS)
        unknown = [n for n in names if n not in self._checks]
        if unknown:
            raise ValueError(f"Unknown check(s): {', '.join(unknown)}")

        report = GroupReport(self.group, self.engine.name, self.vector_file.source)
        for name in names:
            check_result = self._checks[name]()
            report.results.append(check_result)
            log.info("check finished", group=self.group, summary=check_result.summary())
        return report
