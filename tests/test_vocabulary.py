"""Tests for vocabulary loading and the known-word set."""

import pytest

from n1deck.models import VocabularyEntry
from n1deck.vocabulary import KnownSet, load_known_words, load_vocabulary


class TestLoadVocabulary:
    def test_parses_tab_separated_lines(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("猫\tcat\t猫[ねこ]\n\n犬\tdog\n", encoding="utf-8")

        entries = load_vocabulary(path)

        assert entries == [
            VocabularyEntry(surface="猫", gloss="cat", annotated="猫[ねこ]"),
            VocabularyEntry(surface="犬", gloss="dog", annotated="犬"),
        ]

    def test_skips_malformed_lines_with_warning(self, tmp_path, caplog):
        path = tmp_path / "notes.txt"
        path.write_text("猫\tcat\nbroken line\n犬\tdog\n", encoding="utf-8")

        entries = load_vocabulary(path)

        assert [e.surface for e in entries] == ["猫", "犬"]
        assert "Skipping malformed line 2" in caplog.text

    def test_entries_are_immutable(self):
        entry = VocabularyEntry(surface="猫", gloss="cat", annotated="猫[ねこ]")
        with pytest.raises(Exception):
            entry.surface = "犬"


class TestLoadKnownWords:
    def test_missing_file_is_empty_seed(self, tmp_path):
        assert load_known_words(tmp_path / "nope.txt") == []

    def test_strips_and_skips_blank_lines(self, tmp_path):
        path = tmp_path / "known.txt"
        path.write_text(" 私 \n\nあなた\n", encoding="utf-8")
        assert load_known_words(path) == ["私", "あなた"]


class TestKnownSet:
    def entry(self, surface, annotated=None):
        return VocabularyEntry(surface=surface, gloss="x", annotated=annotated or surface)

    def test_seed_is_deduplicated_in_order(self):
        known = KnownSet(["私", "あなた", "私"])
        assert known.snapshot() == ["私", "あなた"]

    def test_commit_adds_surface_and_annotated(self):
        known = KnownSet(["私"])
        known.commit(self.entry("猫", "猫[ねこ]"), 1)

        assert known.snapshot() == ["私", "猫", "猫[ねこ]"]
        assert "猫[ねこ]" in known
        assert known.committed_rows == 1

    def test_out_of_order_commit_raises(self):
        known = KnownSet()
        known.commit(self.entry("猫"), 1)
        with pytest.raises(ValueError, match="Out-of-order"):
            known.commit(self.entry("水"), 3)

    def test_snapshot_is_a_copy(self):
        known = KnownSet(["私"])
        snapshot = known.snapshot()
        known.commit(self.entry("猫"), 1)
        assert snapshot == ["私"]

    def test_snapshots_only_grow(self):
        known = KnownSet(["私"])
        snapshots = [set(known.snapshot())]
        for i, surface in enumerate(["猫", "犬", "猫", "水"], start=1):
            known.commit(self.entry(surface), i)
            snapshots.append(set(known.snapshot()))

        for earlier, later in zip(snapshots, snapshots[1:]):
            assert later >= earlier
        assert len(known) == 4
