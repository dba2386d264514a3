"""
Unit tests for the streaming engine contract.

Tests:
- Sizing probe and state buffer lifecycle
- One-shot vs streaming agreement
- reset + finalize equals the empty-message digest
- serialize / deserialize checkpoints and rejection of bad blobs
"""

import pytest
from sha2vectors.core_crypto.engine import (
    ENGINES, HashEngine, Sha2Engine, StateError, DeserializationError,
    UnknownAlgorithm, get_engine
)
from sha2vectors.core_crypto.sha2 import sha2_digest


def run_stream(engine: HashEngine, *chunks: bytes) -> bytes:
    state = engine.allocate_state()
    engine.init(state)
    for chunk in chunks:
        engine.update(state, chunk)
    out = bytearray(engine.digest_size)
    engine.finalize(state, out)
    return bytes(out)


class TestRegistry:
    """Engine lookup."""

    def test_five_engines(self):
        """All five variants are registered with their digest sizes."""
        sizes = {name: e.digest_size for name, e in ENGINES.items()}
        assert sizes == {"sha224": 28, "sha256": 32, "sha384": 48, "sha512": 64, "sha512_256": 32}

    def test_get_engine(self):
        assert get_engine("sha384") is ENGINES["sha384"]

    def test_unknown_engine(self):
        """Unknown names raise a KeyError subclass."""
        with pytest.raises(UnknownAlgorithm):
            get_engine("sha3_256")
        with pytest.raises(KeyError):
            get_engine("md5")

    def test_package_exports(self):
        """The core_crypto package resolves the engine API on access."""
        import sha2vectors.core_crypto as core_crypto
        assert core_crypto.get_engine is get_engine
        assert core_crypto.ENGINES is ENGINES

    def test_invalid_tag(self):
        with pytest.raises(ValueError):
            Sha2Engine(ENGINES["sha256"].variant, 0)


class TestSizingProbe:
    """init(None) reports the state size without side effects."""

    def test_probe_is_positive(self):
        for engine in ENGINES.values():
            assert engine.required_state_size() >= 1
            assert engine.init(None) == engine.required_state_size()

    def test_state_sizes(self):
        """State is a tag byte plus the serialized layout."""
        assert ENGINES["sha256"].required_state_size() == 106
        assert ENGINES["sha512"].required_state_size() == 210

    def test_output_probes(self):
        """finalize/digest/serialize with no output report their sizes."""
        engine = ENGINES["sha224"]
        state = engine.allocate_state()
        engine.init(state)
        assert engine.finalize(state, None) == 28
        assert engine.digest(b"abc") == 28
        assert engine.serialize(state, None) == 105
        assert ENGINES["sha512_256"].serialize(bytearray(210), None) == 209

    def test_exact_size_buffer_works(self):
        """A buffer of exactly the probed size is enough."""
        for engine in ENGINES.values():
            assert run_stream(engine, b"abc") == sha2_digest(engine.name, b"abc")

    def test_small_buffer_rejected(self):
        engine = ENGINES["sha256"]
        with pytest.raises(StateError):
            engine.init(bytearray(engine.required_state_size() - 1))

    def test_uninitialized_buffer_rejected(self):
        engine = ENGINES["sha256"]
        with pytest.raises(StateError):
            engine.update(engine.allocate_state(), b"abc")

    def test_foreign_buffer_rejected(self):
        """A state initialized by one engine cannot be used by another."""
        state = ENGINES["sha256"].allocate_state()
        ENGINES["sha224"].init(state)
        with pytest.raises(StateError):
            ENGINES["sha256"].update(state, b"abc")

    def test_init_is_idempotent(self):
        """init can be called repeatedly on the same buffer."""
        engine = ENGINES["sha512"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"something")
        engine.init(state)
        engine.init(state)
        out = bytearray(64)
        engine.finalize(state, out)
        assert bytes(out) == sha2_digest("sha512", b"")


class TestLifecycle:
    """init / update / finalize / reset / digest."""

    def test_oneshot_matches_streaming(self):
        msg = bytes(range(200))
        for engine in ENGINES.values():
            out = bytearray(engine.digest_size)
            engine.digest(msg, len(msg), out)
            assert bytes(out) == run_stream(engine, msg[:7], msg[7:130], msg[130:])

    def test_update_length_limits_input(self):
        """Only `length` bytes of the data are absorbed."""
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"abcdef", 3)
        out = bytearray(32)
        engine.finalize(state, out)
        assert bytes(out) == sha2_digest("sha256", b"abc")

    def test_update_length_out_of_range(self):
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        with pytest.raises(ValueError):
            engine.update(state, b"abc", 4)

    def test_digest_length(self):
        engine = ENGINES["sha384"]
        out = bytearray(48)
        engine.digest(b"abcdef", 3, out)
        assert bytes(out) == sha2_digest("sha384", b"abc")

    def test_short_output_rejected(self):
        engine = ENGINES["sha512"]
        with pytest.raises(ValueError):
            engine.digest(b"abc", None, bytearray(32))

    def test_reset_then_finalize_is_empty_digest(self):
        """reset returns to the canonical initial state whatever came before."""
        for engine in ENGINES.values():
            state = engine.allocate_state()
            engine.init(state)
            engine.update(state, b"\x42" * 300)
            scratch = bytearray(engine.digest_size)
            engine.finalize(state, scratch)
            engine.reset(state)
            out = bytearray(engine.digest_size)
            engine.finalize(state, out)
            assert bytes(out) == sha2_digest(engine.name, b"")

    def test_reset_mid_stream(self):
        engine = ENGINES["sha224"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"aabbccdd")
        engine.reset(state)
        engine.update(state, b"\xd3")
        out = bytearray(28)
        engine.finalize(state, out)
        assert bytes(out) == sha2_digest("sha224", b"\xd3")

    def test_reset_requires_initialized_state(self):
        engine = ENGINES["sha224"]
        with pytest.raises(StateError):
            engine.reset(engine.allocate_state())

    def test_many_updates(self):
        """Total input across calls is not bounded by the buffer size."""
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        chunk = b"\x5a" * 1000
        for _ in range(20):
            engine.update(state, chunk)
        out = bytearray(32)
        engine.finalize(state, out)
        assert bytes(out) == sha2_digest("sha256", chunk * 20)


class TestSerialization:
    """Checkpoint blobs."""

    def test_fresh_state_roundtrip(self):
        """A serialized fresh state finalizes to the empty digest."""
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        blob = bytearray(engine.serialize(state))
        engine.serialize(state, blob)

        restored = engine.allocate_state()
        assert engine.deserialize(blob, restored) == len(blob)
        out = bytearray(32)
        engine.finalize(restored, out)
        assert bytes(out) == sha2_digest("sha256", b"")

    def test_initial_layout_is_big_endian(self):
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        blob = bytearray(105)
        engine.serialize(state, blob)
        assert blob[0:4] == bytes([0x6a, 0x09, 0xe6, 0x67])
        assert blob[28:32] == bytes([0x5b, 0xe0, 0xcd, 0x19])
        assert blob[96] == 0
        assert blob[97:105] == bytes(8)

    def test_layout_preserves_buffer_and_counters(self):
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"hello")
        blob = bytearray(105)
        engine.serialize(state, blob)
        assert blob[32:37] == b"hello"
        assert blob[96] == 5
        assert int.from_bytes(blob[97:105], "big") == 5

    def test_split_at_every_byte(self):
        """Resuming from any split point reproduces the digest."""
        msg = b"abcdefghij"
        for name in ("sha256", "sha512"):
            engine = ENGINES[name]
            expected = sha2_digest(name, msg)
            for split in range(len(msg) + 1):
                state = engine.allocate_state()
                engine.init(state)
                engine.update(state, msg[:split])
                blob = bytearray(engine.serialize(state))
                engine.serialize(state, blob)

                resumed = engine.allocate_state()
                engine.deserialize(bytes(blob), resumed)
                engine.update(resumed, msg[split:])
                out = bytearray(engine.digest_size)
                engine.finalize(resumed, out)
                assert bytes(out) == expected, f"split at {split}"

    def test_split_across_block_boundary(self):
        msg = b"\xab" * 300
        for engine in ENGINES.values():
            expected = sha2_digest(engine.name, msg)
            for split in (0, 1, 63, 64, 65, 127, 128, 129, 300):
                state = engine.allocate_state()
                engine.init(state)
                engine.update(state, msg[:split])
                blob = bytearray(engine.serialize(state))
                engine.serialize(state, blob)
                resumed = engine.allocate_state()
                engine.deserialize(blob, resumed)
                engine.update(resumed, msg[split:])
                out = bytearray(engine.digest_size)
                engine.finalize(resumed, out)
                assert bytes(out) == expected, (engine.name, split)

    def test_wrong_length_rejected(self):
        engine = ENGINES["sha384"]
        with pytest.raises(DeserializationError):
            engine.deserialize(b"\x00" * 105, engine.allocate_state())

    def test_invalid_buffer_length_rejected(self):
        """A buffered byte count of a full block or more is rejected."""
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        blob = bytearray(105)
        engine.serialize(state, blob)
        blob[96] = 64
        with pytest.raises(DeserializationError):
            engine.deserialize(blob, engine.allocate_state())

    def test_inconsistent_total_rejected(self):
        engine = ENGINES["sha256"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"hello")
        blob = bytearray(105)
        engine.serialize(state, blob)
        blob[104] = 6
        with pytest.raises(DeserializationError):
            engine.deserialize(blob, engine.allocate_state())

    def test_failed_deserialize_leaves_state_untouched(self):
        """The destination buffer is not modified on rejection."""
        engine = ENGINES["sha512"]
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"in progress")
        before = bytes(state)
        with pytest.raises(DeserializationError):
            engine.deserialize(b"\xff" * 209, state)
        assert bytes(state) == before

    def test_serialize_requires_initialized_state(self):
        engine = ENGINES["sha224"]
        with pytest.raises(StateError):
            engine.serialize(engine.allocate_state(), bytearray(105))


class TestFinalizedState:
    """A finalized state must be reset before it is reused."""

    def _finalized(self, engine):
        state = engine.allocate_state()
        engine.init(state)
        engine.update(state, b"abc")
        engine.finalize(state, bytearray(engine.digest_size))
        return state

    def test_serialize_after_finalize_rejected(self):
        """A finalized state never produces a blob deserialize would refuse."""
        engine = ENGINES["sha256"]
        state = self._finalized(engine)
        with pytest.raises(StateError):
            engine.serialize(state, bytearray(105))

    def test_update_after_finalize_rejected(self):
        engine = ENGINES["sha384"]
        state = self._finalized(engine)
        with pytest.raises(StateError):
            engine.update(state, b"more")

    def test_reset_after_finalize_allows_checkpoint(self):
        """After reset, serialize and deserialize round-trip again."""
        for engine in ENGINES.values():
            state = self._finalized(engine)
            engine.reset(state)
            engine.update(state, b"abc")
            blob = bytearray(engine.serialize(state))
            engine.serialize(state, blob)

            resumed = engine.allocate_state()
            assert engine.deserialize(blob, resumed) == len(blob)
            out = bytearray(engine.digest_size)
            engine.finalize(resumed, out)
            assert bytes(out) == sha2_digest(engine.name, b"abc")

    def test_finalize_twice_still_writes_output(self):
        engine = ENGINES["sha512"]
        state = self._finalized(engine)
        assert engine.finalize(state, bytearray(64)) == 64

    def test_tag_range(self):
        with pytest.raises(ValueError):
            Sha2Engine(ENGINES["sha256"].variant, 0x80)
