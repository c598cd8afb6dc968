"""Shared fixtures for the test suite."""

import pytest

from n1deck.sentence_store import SentenceStore
from tests.helpers import make_record, write_notes


@pytest.fixture
def notes_file(tmp_path):
    return write_notes(tmp_path / "notes.txt")


@pytest.fixture
def known_file(tmp_path):
    path = tmp_path / "known-words.txt"
    path.write_text("私\nあなた\n", encoding="utf-8")
    return path


@pytest.fixture
def sentences_csv(tmp_path):
    """A sentence store with three rows."""
    path = tmp_path / "flashcards.csv"
    with SentenceStore(path) as store:
        for i in range(1, 4):
            store.append(make_record(i))
    return path
