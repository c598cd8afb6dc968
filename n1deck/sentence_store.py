"""Append-only CSV store for generated sentence rows."""

import csv
from pathlib import Path
from typing import Optional, TextIO

import config
from n1deck.models import SentenceRecord


def is_blank(path: Path) -> bool:
    """True if the file is missing, empty or holds only whitespace."""
    if not path.exists():
        return True
    with open(path, "r", encoding="utf-8") as f:
        return not f.read().strip()


def count_existing_rows(path: Path) -> int:
    """
    Count data rows already written to the store.

    Args:
        path: Path to the CSV store

    Returns:
        Number of rows excluding the header
    """
    if is_blank(path):
        return 0
    with open(path, "r", encoding="utf-8", newline="") as f:
        n = sum(1 for row in csv.reader(f) if row)
    return max(n - 1, 0)


def read_sentence_rows(path: Path) -> list[dict[str, str]]:
    """Read all data rows keyed by header name."""
    if is_blank(path):
        return []
    with open(path, "r", encoding="utf-8", newline="") as f:
        return [row for row in csv.DictReader(f) if any(row.values())]


class SentenceStore:
    """
    Writes SentenceRecords to a CSV file, flushing after every row.

    Use as a context manager so the file is closed on both success and
    error paths.
    """

    def __init__(
        self,
        path: Path,
        id_prefix: str = config.CARD_ID_PREFIX,
        image_extension: str = config.IMAGE_EXTENSION,
    ):
        """
        Initialize the store.

        Args:
            path: Path to the CSV file
            id_prefix: Prefix for the card ID column
            image_extension: Extension used in the image reference column
        """
        self.path = path
        self.id_prefix = id_prefix
        self.image_extension = image_extension
        self._file: Optional[TextIO] = None
        self._writer = None

    def open(self) -> "SentenceStore":
        """Open the file for appending, writing the header if it is new or blank."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        blank = is_blank(self.path)
        mode = "w" if blank else "a"
        self._file = open(self.path, mode, encoding="utf-8", newline="")
        self._writer = csv.writer(self._file, quoting=csv.QUOTE_ALL)
        if blank:
            self._writer.writerow(config.SENTENCE_HEADER)
            self._file.flush()
        return self

    def append(self, record: SentenceRecord) -> None:
        """Write one record and flush it to disk."""
        if self._file is None:
            raise RuntimeError("SentenceStore is not open")
        self._writer.writerow(record.to_row(self.id_prefix, self.image_extension))
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def __enter__(self) -> "SentenceStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
