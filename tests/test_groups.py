"""
Tests for the group registry and the bundled vector files.

Tests:
- Every registered group passes every check
- Group lookup and path resolution
- Setup failures are reported, not raised
- Parallel runs keep the requested order
"""

import os
import tempfile

import pytest
from sha2vectors.conformance.groups import (
    GROUPS, VectorGroup, get_group, load_group, resolve_vector_path, run_group, run_groups
)
from sha2vectors.conformance.runner import ALL_CHECKS, ConformanceSetupError
from sha2vectors.vectors.rsp_parser import MalformedVectorFile, VectorFileNotFound


VECTORS_DIR = os.path.join(os.path.dirname(__file__), "vectors")


@pytest.mark.parametrize("group", GROUPS, ids=[g.name for g in GROUPS])
def test_group_passes(group):
    """Each engine agrees with its ShortMsg and LongMsg files."""
    report = run_group(group, VECTORS_DIR)
    assert report.error is None
    assert [r.name for r in report.results] == list(ALL_CHECKS)
    assert report.passed, "\n".join(str(f) for f in report.failures[:10])


class TestBundledVectors:
    """Shape of the bundled vector files."""

    def test_short_msg_covers_every_byte_length(self):
        for group in GROUPS:
            if not group.name.endswith("_short_msg"):
                continue
            vector_file = load_group(group, VECTORS_DIR)
            block_bits = 512 if group.algorithm in ("sha224", "sha256") else 1024
            assert [v.length_bits for v in vector_file] == list(range(0, block_bits + 1, 8))
            assert vector_file.empty_message_vector() is not None

    def test_long_msg_has_no_empty_vector(self):
        """LongMsg files skip the empty-message cross-check."""
        vector_file = load_group(get_group("sha256_long_msg"), VECTORS_DIR)
        assert len(vector_file) == 8
        assert vector_file.empty_message_vector() is None


class TestRegistry:
    """Group lookup."""

    def test_ten_groups(self):
        assert len(GROUPS) == 10
        assert len({g.name for g in GROUPS}) == 10

    def test_get_group(self):
        group = get_group("sha384_long_msg")
        assert group.algorithm == "sha384"
        assert group.filename == "SHA384LongMsg.rsp"

    def test_unknown_group(self):
        with pytest.raises(KeyError):
            get_group("md5_short_msg")

    def test_resolve_vector_path(self):
        path = resolve_vector_path("SHA256ShortMsg.rsp", "/data/vectors")
        assert str(path) == os.path.join("/data/vectors", "SHA256ShortMsg.rsp")

    def test_resolve_uses_environment(self, monkeypatch):
        monkeypatch.setenv("SHA2VECTORS_DIR", "/opt/cavs")
        path = resolve_vector_path("SHA224LongMsg.rsp")
        assert str(path) == os.path.join("/opt/cavs", "SHA224LongMsg.rsp")


class TestSetupFailures:
    """Missing and mismatched vector files."""

    def test_missing_file_raises_on_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            with pytest.raises(VectorFileNotFound):
                load_group(get_group("sha256_short_msg"), tmp)

    def test_missing_file_reported(self):
        """run_group records the setup error and runs no checks."""
        with tempfile.TemporaryDirectory() as tmp:
            report = run_group(get_group("sha224_short_msg"), tmp)
        assert not report.passed
        assert report.error
        assert report.results == []

    def test_digest_length_mismatch(self):
        """A SHA-224 file registered as SHA-256 is rejected at setup."""
        group = VectorGroup("mislabelled", "sha256", 32, "SHA224ShortMsg.rsp")
        with pytest.raises(ConformanceSetupError):
            load_group(group, VECTORS_DIR)
        report = run_group(group, VECTORS_DIR)
        assert "Unexpected digest length" in report.error

    def test_malformed_file_reported(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "SHA256ShortMsg.rsp"), "w") as f:
                f.write("[L = 32]\n\nLen = 8\nMsg = d\nMD = 00\n")
            group = get_group("sha256_short_msg")
            with pytest.raises(MalformedVectorFile):
                load_group(group, tmp)
            report = run_group(group, tmp)
        assert report.error


class TestRunGroups:
    """Running several groups."""

    def test_parallel_keeps_order(self):
        selected = [get_group("sha512_short_msg"), get_group("sha224_short_msg"),
                    get_group("sha256_long_msg")]
        reports = run_groups(selected, VECTORS_DIR, checks=["oneshot"], workers=3)
        assert [r.group for r in reports] == [g.name for g in selected]
        assert all(r.passed for r in reports)

    def test_failure_isolated_to_its_group(self):
        """One broken group does not affect the others."""
        selected = [
            VectorGroup("missing", "sha256", 32, "NoSuchFile.rsp"),
            get_group("sha256_short_msg"),
        ]
        reports = run_groups(selected, VECTORS_DIR, checks=["oneshot"], workers=2)
        assert not reports[0].passed
        assert reports[1].passed
