"""Helpers for Anki-style furigana text such as 日本[にほん]語[ご]."""

import re

_HAN = "\u3005\u3007\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff"
_KANA = "\u3040-\u309f\u30a0-\u30ff"

HAN_CHAR = re.compile(f"[{_HAN}]")
READING_SPAN = re.compile(r"\[[^\]]*\]")
SPACE_BEFORE_JAPANESE = re.compile(f"\\s+(?=[{_HAN}{_KANA}])")


def extract_pronunciation(text: str | None) -> str:
    """
    Turn a furigana string into its kana reading.

    Bracket contents are kept, kanji outside brackets are dropped and every
    other character is copied as-is. Text without brackets is returned
    unchanged.
    """
    if not text:
        return ""
    if "[" not in text and "]" not in text:
        return text

    result = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "[":
            closing = text.find("]", i + 1)
            if closing != -1:
                result.append(text[i + 1 : closing])
                i = closing
        elif char == "]":
            pass  # stray closer
        elif not HAN_CHAR.match(char):
            result.append(char)
        i += 1

    return "".join(result)


def strip_furigana(text: str | None) -> str:
    """Remove [reading] spans and the spacing inserted before annotated groups."""
    if not text:
        return ""
    cleaned = READING_SPAN.sub("", text)
    return SPACE_BEFORE_JAPANESE.sub("", cleaned).strip()


def word_pronunciation(surface: str, annotated: str) -> str:
    """Reading for a vocabulary entry, falling back to the surface form."""
    pronunciation = extract_pronunciation(annotated)
    if not pronunciation:
        pronunciation = extract_pronunciation(surface)
    return pronunciation or surface


def sentence_pronunciation(sentence: str) -> str:
    """Plain sentence without furigana, falling back to the raw sentence."""
    return strip_furigana(sentence) or (sentence or "").strip()
