from pathlib import Path

from lexico.analysis.exceptions import DocumentTooLargeError


class FileLoader:
    """Reads an uploaded text document from disk.

    Bytes that are not valid UTF-8 are replaced with U+FFFD rather than
    rejected here; the tokenization stage reports them as an unsupported
    encoding so the attempt is still audited.
    """

    def __init__(self, max_bytes: int) -> None:
        self._max_bytes = max_bytes

    def load(self, path: Path) -> str:
        """Read and decode a document.

        Raises:
            FileNotFoundError: if the file does not exist.
            DocumentTooLargeError: if the file exceeds the upload cap.
        """
        if not path.is_file():
            raise FileNotFoundError(f"File not found: {path}")
        size = path.stat().st_size
        if size > self._max_bytes:
            raise DocumentTooLargeError(
                f"{path.name} has {size} bytes (max {self._max_bytes})"
            )
        return path.read_bytes().decode("utf-8-sig", errors="replace")
