"""
Tests for the command line front end.
"""

import os

from click.testing import CliRunner
from sha2vectors.core_crypto.sha2 import sha2_digest
from sha2vectors.main import cli
from sha2vectors.vectors.rsp_parser import parse_vector_file


VECTORS_DIR = os.path.join(os.path.dirname(__file__), "vectors")


class TestVerify:
    """sha2vectors verify"""

    def test_passing_group(self):
        result = CliRunner().invoke(
            cli, ["verify", "-d", VECTORS_DIR, "-g", "sha224_short_msg", "-c", "oneshot"]
        )
        assert result.exit_code == 0, result.output
        assert "PASS  sha224_short_msg" in result.output
        assert "1/1 groups passed" in result.output

    def test_several_groups_in_parallel(self):
        result = CliRunner().invoke(cli, [
            "verify", "-d", VECTORS_DIR, "-w", "2",
            "-g", "sha256_long_msg", "-g", "sha512_256_short_msg",
            "-c", "oneshot", "-c", "streaming",
        ])
        assert result.exit_code == 0, result.output
        assert "2/2 groups passed" in result.output

    def test_missing_vectors_exit_nonzero(self, tmp_path):
        """A group whose file is absent fails the run."""
        result = CliRunner().invoke(cli, ["verify", "-d", str(tmp_path), "-g", "sha384_short_msg"])
        assert result.exit_code == 1
        assert "FAIL  sha384_short_msg" in result.output
        assert "setup error" in result.output

    def test_unknown_group_rejected(self):
        result = CliRunner().invoke(cli, ["verify", "-g", "md5_short_msg"])
        assert result.exit_code == 2


class TestGroups:
    """sha2vectors groups"""

    def test_lists_all_groups(self, monkeypatch):
        monkeypatch.setenv("SHA2VECTORS_DIR", VECTORS_DIR)
        result = CliRunner().invoke(cli, ["groups"])
        assert result.exit_code == 0
        assert len(result.output.splitlines()) == 10
        assert "SHA512_256LongMsg.rsp" in result.output
        assert "(missing)" not in result.output

    def test_marks_missing_files(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SHA2VECTORS_DIR", str(tmp_path))
        result = CliRunner().invoke(cli, ["groups"])
        assert result.output.count("(missing)") == 10


class TestGenerate:
    """sha2vectors generate"""

    def test_short_msg(self, tmp_path):
        output = tmp_path / "SHA224ShortMsg.rsp"
        result = CliRunner().invoke(cli, ["generate", "sha224", str(output)])
        assert result.exit_code == 0, result.output
        assert "Wrote 65 vectors" in result.output

        vector_file = parse_vector_file(output)
        assert vector_file.digest_length_bytes == 28
        assert vector_file.empty_message_vector() is not None
        assert output.read_text().startswith("#  Generated by sha2vectors generate")

    def test_long_msg_then_verify(self, tmp_path):
        """A generated file verifies cleanly under its group's name."""
        output = tmp_path / "SHA384LongMsg.rsp"
        result = CliRunner().invoke(cli, ["generate", "sha384", str(output), "--long", "--count", "2"])
        assert result.exit_code == 0, result.output
        assert len(parse_vector_file(output)) == 2

        result = CliRunner().invoke(cli, ["verify", "-d", str(tmp_path), "-g", "sha384_long_msg"])
        assert result.exit_code == 0, result.output


class TestDigest:
    """sha2vectors digest"""

    def test_matches_reference(self, tmp_path):
        path = tmp_path / "data.bin"
        data = bytes(range(256)) * 300
        path.write_bytes(data)
        result = CliRunner().invoke(cli, ["digest", "sha512", str(path)])
        assert result.exit_code == 0
        assert result.output.split()[0] == sha2_digest("sha512", data).hex()

    def test_unknown_algorithm(self, tmp_path):
        path = tmp_path / "data.bin"
        path.write_bytes(b"abc")
        result = CliRunner().invoke(cli, ["digest", "md5", str(path)])
        assert result.exit_code == 2
