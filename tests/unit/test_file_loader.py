from pathlib import Path

import pytest

from lexico.analysis.exceptions import DocumentTooLargeError
from lexico.worker.file_loader import FileLoader


class TestFileLoader:
    def test_reads_utf8_text(self, tmp_path: Path) -> None:
        path = tmp_path / "doc.txt"
        path.write_text("Canción de cuna", encoding="utf-8")

        assert FileLoader(max_bytes=1000).load(path) == "Canción de cuna"

    def test_strips_byte_order_mark(self, tmp_path: Path) -> None:
        path = tmp_path / "bom.txt"
        path.write_bytes(b"\xef\xbb\xbfhello")

        assert FileLoader(max_bytes=1000).load(path) == "hello"

    def test_invalid_bytes_become_replacement_chars(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.txt"
        path.write_bytes("café".encode("latin-1"))

        assert FileLoader(max_bytes=1000).load(path) == "caf�"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FileLoader(max_bytes=1000).load(tmp_path / "missing.txt")

    def test_directory_is_not_a_document(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FileLoader(max_bytes=1000).load(tmp_path)

    def test_file_over_cap(self, tmp_path: Path) -> None:
        path = tmp_path / "big.txt"
        path.write_bytes(b"a" * 11)

        with pytest.raises(DocumentTooLargeError, match="11 bytes"):
            FileLoader(max_bytes=10).load(path)
