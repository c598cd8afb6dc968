"""Vocabulary input and the cumulative known-word set."""

from pathlib import Path
from typing import Iterable

import config
from n1deck.logger import get_logger
from n1deck.models import VocabularyEntry


def load_vocabulary(path: Path = config.NOTES_PATH) -> list[VocabularyEntry]:
    """
    Load vocabulary entries from a tab-separated notes file.

    Each line is ``surface<TAB>gloss[<TAB>annotated]``. Blank lines are
    skipped, lines with fewer than two fields are skipped with a warning.

    Args:
        path: Path to the notes file

    Returns:
        Entries in file order
    """
    logger = get_logger()
    entries = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            line = line.rstrip("\r\n")
            if not line.strip():
                continue
            parts = line.split("\t")
            if len(parts) < 2:
                logger.warning(f"Skipping malformed line {line_number} in {path}: {line!r}")
                continue
            surface = parts[0].strip()
            gloss = parts[1].strip()
            annotated = parts[2].strip() if len(parts) > 2 else surface
            entries.append(VocabularyEntry(surface=surface, gloss=gloss, annotated=annotated))
    return entries


def load_known_words(path: Path = config.KNOWN_PATH) -> list[str]:
    """Load seed known words (one per line). A missing file means no seed."""
    if not path.exists():
        return []
    with open(path, "r", encoding="utf-8") as f:
        return [line.strip() for line in f if line.strip()]


class KnownSet:
    """
    Vocabulary usable in generated sentences.

    Starts from a seed list and grows by each committed entry's surface and
    furigana forms. Entries must be committed in row order; there is no way
    to remove a word.
    """

    def __init__(self, seed: Iterable[str] = ()):
        self._words: dict[str, None] = {}
        self._committed_rows = 0
        self.seed(seed)

    def seed(self, initial: Iterable[str]) -> None:
        for word in initial:
            self._words.setdefault(word, None)

    def commit(self, entry: VocabularyEntry, row_index: int) -> None:
        """
        Add a processed entry to the known set.

        Args:
            entry: The vocabulary entry that was just handled
            row_index: Its 1-based row index in the vocabulary source

        Raises:
            ValueError: If rows are committed out of order
        """
        expected = self._committed_rows + 1
        if row_index != expected:
            raise ValueError(f"Out-of-order commit: got row {row_index}, expected row {expected}")
        self._words.setdefault(entry.surface, None)
        self._words.setdefault(entry.annotated, None)
        self._committed_rows = row_index

    def snapshot(self) -> list[str]:
        """Deduplicated copy of the known words in insertion order."""
        return list(self._words)

    @property
    def committed_rows(self) -> int:
        return self._committed_rows

    def __contains__(self, word: str) -> bool:
        return word in self._words

    def __len__(self) -> int:
        return len(self._words)
