"""Generate n+1 example sentences for a vocabulary entry."""

from pathlib import Path

from openai import OpenAI

import config
from n1deck.logger import get_logger
from n1deck.models import GeneratedSentence, VocabularyEntry
from n1deck.openai_client import (
    GenerationParseError,
    extract_json_from_response,
    generate_text,
)

RAW_EXCERPT_LENGTH = 500


def load_prompt_template(path: Path = config.SENTENCE_GENERATION_PROMPT) -> str:
    """Load the prompt template from file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def build_prompt(
    entry: VocabularyEntry,
    known_words: list[str],
    prompt_template: str,
    grammar: list[str] = config.ALLOWED_GRAMMAR,
) -> str:
    """
    Fill the prompt template for one entry.

    Args:
        entry: Target vocabulary entry
        known_words: Snapshot of the known set
        prompt_template: Template with {surface}, {gloss}, {annotated},
            {known_words} and {grammar} placeholders
        grammar: Whitelisted grammar tokens

    Returns:
        The prompt text
    """
    allowed = list(dict.fromkeys([*known_words, *grammar]))
    return prompt_template.format(
        surface=entry.surface,
        gloss=entry.gloss,
        annotated=entry.annotated,
        known_words=", ".join(allowed),
        grammar=" ".join(grammar),
    )


def parse_generated_sentence(raw: str) -> GeneratedSentence:
    """
    Parse the model text into a GeneratedSentence.

    Raises:
        GenerationParseError: If no JSON object can be recovered
    """
    data = extract_json_from_response(raw)
    if data is None:
        raise GenerationParseError(
            f"OpenAI response could not be parsed as JSON. Raw: {raw[:RAW_EXCERPT_LENGTH]}..."
        )
    return GeneratedSentence(
        sentence_jp=str(data.get("sentence_jp") or ""),
        sentence_en=str(data.get("sentence_en") or ""),
        sentence_romaji=str(data.get("sentence_romaji") or ""),
        explanation=str(data.get("explanation") or ""),
    )


def validate_sentence(entry: VocabularyEntry, generated: GeneratedSentence) -> list[str]:
    """
    Check a generated sentence against its entry.

    Returns:
        List of validation warnings (empty if valid)
    """
    warnings = []
    if entry.surface not in generated.sentence_jp.strip():
        warnings.append(
            f"sentence does not contain target '{entry.surface}'. Will still record but please verify."
        )
    return warnings


def generate_sentence(
    entry: VocabularyEntry,
    known_words: list[str],
    client: OpenAI,
    prompt_template: str,
    model: str = config.OPENAI_MODEL,
    reasoning_effort: str = config.OPENAI_REASONING_EFFORT,
) -> GeneratedSentence:
    """
    Generate an example sentence for one vocabulary entry.

    Validation problems are logged but do not fail the call.

    Args:
        entry: Target vocabulary entry
        known_words: Snapshot of the known set for this row
        client: OpenAI client
        prompt_template: The prompt template to use
        model: Model name
        reasoning_effort: Reasoning effort hint

    Returns:
        GeneratedSentence

    Raises:
        GenerationAPIError: If the API returns an error envelope
        GenerationParseError: If the response is not JSON
    """
    prompt = build_prompt(entry, known_words, prompt_template)
    raw = generate_text(client, prompt, model=model, reasoning_effort=reasoning_effort)
    generated = parse_generated_sentence(raw)

    logger = get_logger()
    for warning in validate_sentence(entry, generated):
        logger.warning(f"  Validation: {warning}")

    return generated
