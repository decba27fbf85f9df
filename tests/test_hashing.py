"""Tests for whole-file hashing."""
import hashlib

import pytest

from oc_swapper.errors import FileMissingError, FileReadError
from oc_swapper.variants.hashing import CHUNK_SIZE, file_hash, hashes_match


class TestFileHash:
    """Tests for file_hash."""

    def test_md5_lowercase_hex(self, tmp_path):
        path = tmp_path / "openvr_api.dll"
        path.write_bytes(b"hello")

        assert file_hash(path) == "5d41402abc4b2a76b9719d911017c592"

    def test_large_file_streams_in_chunks(self, tmp_path):
        """Files bigger than one chunk hash the same as hashing all bytes at once."""
        data = bytes(range(256)) * (CHUNK_SIZE // 256 * 3 + 7)
        path = tmp_path / "big.dll"
        path.write_bytes(data)

        assert file_hash(path) == hashlib.md5(data).hexdigest()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.dll"
        path.write_bytes(b"")
        assert file_hash(path) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_same_bytes_same_hash(self, tmp_path):
        a = tmp_path / "a.dll"
        b = tmp_path / "b.dll"
        a.write_bytes(b"same content")
        b.write_bytes(b"same content")

        assert file_hash(a) == file_hash(b)
        assert file_hash(a) == file_hash(a)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileMissingError) as exc:
            file_hash(tmp_path / "nope.dll")
        assert exc.value.path == tmp_path / "nope.dll"

    def test_unreadable_is_read_error(self, tmp_path):
        """A directory at the path is a read error, not a missing file."""
        with pytest.raises(FileReadError):
            file_hash(tmp_path)


class TestHashesMatch:
    """Tests for hash comparison."""

    def test_case_insensitive(self):
        assert hashes_match("ABCDEF", "abcdef")

    def test_whitespace_ignored(self):
        assert hashes_match("  abcdef \n", "abcdef")

    def test_different(self):
        assert not hashes_match("abcdef", "abcdee")

    def test_empty_expected_never_matches(self):
        """An unset hash in the config must not match anything."""
        assert not hashes_match("", "")
        assert not hashes_match("   ", "")
