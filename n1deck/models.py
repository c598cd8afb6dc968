"""Pydantic data models for the n+1 flashcard deck builder."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class VocabularyEntry(BaseModel):
    """A vocabulary row: target-script form, English gloss and furigana form."""

    model_config = ConfigDict(frozen=True)

    surface: str
    gloss: str
    annotated: str


class GeneratedSentence(BaseModel):
    """Example sentence produced by the language model for one entry."""

    sentence_jp: str = ""
    sentence_en: str = ""
    sentence_romaji: str = ""
    explanation: str = ""


class SentenceRecord(BaseModel):
    """A persisted flashcard row."""

    id: int
    surface: str
    gloss: str
    annotated: str
    pronunciation: str
    sentence_jp: str
    sentence_en: str
    sentence_romaji: str
    sentence_pronunciation: str
    explanation: str = ""

    @property
    def rank(self) -> int:
        return self.id

    def card_id(self, prefix: str) -> str:
        return f"{prefix}{self.id}"

    def image_reference(self, prefix: str, extension: str) -> str:
        return f"<img src='{self.card_id(prefix)}.{extension}'>"

    def to_row(self, prefix: str, extension: str) -> list[str]:
        """
        Serialize to a CSV row.

        The trailing image reference column has no header entry; existing
        decks address it by position.
        """
        return [
            self.card_id(prefix),
            str(self.rank),
            self.surface,
            self.gloss,
            self.annotated,
            self.pronunciation,
            self.sentence_jp,
            self.sentence_en,
            self.sentence_romaji,
            self.sentence_pronunciation,
            self.explanation,
            self.image_reference(prefix, extension),
        ]


class ImageJob(BaseModel):
    """A single image to render for one sentence row."""

    sequence_index: int
    total: int
    card_id: str
    sentence: str
    output_path: Path
