"""Fake clients and builders shared by the tests."""

import json
import re
from pathlib import Path

from n1deck.models import SentenceRecord

NOTES = [
    ("猫", "cat", "猫[ねこ]"),
    ("犬", "dog", "犬[いぬ]"),
    ("食べる", "to eat", "食[た]べる"),
    ("水", "water", "水[みず]"),
    ("本", "book", "本[ほん]"),
]


def text_response(text: str) -> dict:
    """Build a minimal Responses API payload carrying one text segment."""
    return {
        "output": [
            {"type": "reasoning", "summary": []},
            {"type": "message", "content": [{"type": "output_text", "text": text}]},
        ]
    }


def sentence_reply(**kwargs) -> dict:
    """Reply with a valid sentence that contains the prompt's target word."""
    surface = re.search(r"- JP: (.*)", kwargs["input"]).group(1).strip()
    payload = {
        "sentence_jp": f"これは {surface}です。",
        "sentence_en": f"This is {surface}.",
        "sentence_romaji": "kore wa desu.",
        "explanation": "",
    }
    return text_response(json.dumps(payload, ensure_ascii=False))


class FakeResponses:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        result = self.reply(**kwargs)
        if isinstance(result, Exception):
            raise result
        return result


class FakeOpenAI:
    """Stand-in for openai.OpenAI exposing only responses.create."""

    def __init__(self, reply=sentence_reply):
        self.responses = FakeResponses(reply)

    @property
    def prompts(self) -> list[str]:
        return [call["input"] for call in self.responses.calls]


class FakeAsyncResponses:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        result = self.reply(**kwargs)
        if isinstance(result, Exception):
            raise result
        return result


class FakeAsyncOpenAI:
    """Stand-in for openai.AsyncOpenAI exposing only responses.create."""

    def __init__(self, reply):
        self.responses = FakeAsyncResponses(reply)


def write_notes(path: Path, notes=NOTES) -> Path:
    path.write_text("\n".join("\t".join(note) for note in notes) + "\n", encoding="utf-8")
    return path


def make_record(record_id: int, sentence_en: str | None = None) -> SentenceRecord:
    return SentenceRecord(
        id=record_id,
        surface="猫",
        gloss="cat",
        annotated="猫[ねこ]",
        pronunciation="ねこ",
        sentence_jp="これは 猫[ねこ]です。",
        sentence_en=sentence_en if sentence_en is not None else f"Sentence number {record_id}.",
        sentence_romaji="kore wa neko desu.",
        sentence_pronunciation="これは猫です。",
        explanation="",
    )


