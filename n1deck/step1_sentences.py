"""Step 1: Sentence Generation - Build n+1 example sentences row by row."""

from contextlib import ExitStack
from pathlib import Path

from openai import OpenAI
from tqdm import tqdm

import config
from n1deck.furigana import sentence_pronunciation, word_pronunciation
from n1deck.logger import get_logger
from n1deck.models import GeneratedSentence, SentenceRecord, VocabularyEntry
from n1deck.openai_client import build_client
from n1deck.sentence_generator import generate_sentence, load_prompt_template
from n1deck.sentence_store import SentenceStore, count_existing_rows
from n1deck.vocabulary import KnownSet, load_known_words, load_vocabulary


def resolve_window(
    total: int,
    start_index: int = 1,
    limit: int | None = None,
    existing_rows: int = 0,
) -> tuple[int, int]:
    """
    Compute the 1-based [start, last] row window to process.

    When the start index is left at its default and rows already exist,
    processing resumes right after them.

    Args:
        total: Number of rows available
        start_index: Configured 1-based start row
        limit: Optional maximum number of rows to process
        existing_rows: Rows already present in the output

    Returns:
        Tuple of (start, last), inclusive
    """
    start = max(start_index, 1)
    if existing_rows > 0 and start_index <= 1:
        start = existing_rows + 1
    if limit and limit > 0:
        last = min(start + limit - 1, total)
    else:
        last = total
    return start, last


def build_record(
    record_id: int, entry: VocabularyEntry, generated: GeneratedSentence
) -> SentenceRecord:
    """
    Combine a vocabulary entry with its generated sentence.

    Args:
        record_id: Sequential card number
        entry: Source vocabulary entry
        generated: LLM-generated sentence fields

    Returns:
        Complete SentenceRecord
    """
    return SentenceRecord(
        id=record_id,
        surface=entry.surface,
        gloss=entry.gloss,
        annotated=entry.annotated,
        pronunciation=word_pronunciation(entry.surface, entry.annotated),
        sentence_jp=generated.sentence_jp,
        sentence_en=generated.sentence_en,
        sentence_romaji=generated.sentence_romaji,
        sentence_pronunciation=sentence_pronunciation(generated.sentence_jp),
        explanation=generated.explanation,
    )


def run_step1(
    notes_path: Path = config.NOTES_PATH,
    known_path: Path = config.KNOWN_PATH,
    output_path: Path = config.OUTPUT_PATH,
    start_index: int = config.START_INDEX,
    limit: int | None = config.LIMIT,
    client: OpenAI | None = None,
    prompt_template: str | None = None,
    model: str = config.OPENAI_MODEL,
    reasoning_effort: str = config.OPENAI_REASONING_EFFORT,
) -> list[SentenceRecord]:
    """
    Run Step 1 of the pipeline.

    Rows are processed strictly in order: each row's sentence may only use
    the seed words plus the words of every earlier row. Any generation error
    stops the run after the output file is closed; rows written so far are
    kept and picked up by the next run.

    Args:
        notes_path: Tab-separated vocabulary file
        known_path: Seed known-words file
        output_path: CSV store to append to
        start_index: 1-based first row to generate
        limit: Optional maximum number of rows to generate
        client: OpenAI client. If None, one is created for the run.
        prompt_template: Prompt template. If None, loaded from file.
        model: Model name
        reasoning_effort: Reasoning effort hint

    Returns:
        Records written during this run
    """
    logger = get_logger()
    logger.info("Step 1: Generating example sentences...")

    entries = load_vocabulary(notes_path)
    if not entries:
        raise ValueError(f"No notes found in {notes_path}")
    total = len(entries)
    logger.info(f"  Loaded {total} vocabulary entries")

    seed = load_known_words(known_path)
    logger.info(f"  Loaded {len(seed)} seed known words from {known_path}")

    if prompt_template is None:
        prompt_template = load_prompt_template()

    existing = count_existing_rows(output_path)
    start, last = resolve_window(total, start_index, limit, existing)
    if existing:
        logger.info(f"  Found {existing} existing rows in {output_path}")
    logger.info(f"  Processing rows {start}..{last} of {total}")

    known = KnownSet(seed)
    next_id = existing + 1
    written = []

    with ExitStack() as stack:
        if client is None:
            client = stack.enter_context(build_client())
        store = stack.enter_context(SentenceStore(output_path))

        bar = stack.enter_context(tqdm(entries, desc="  Generating"))

        for i, entry in enumerate(bar, start=1):
            if i < start:
                known.commit(entry, i)
                continue
            if i > last:
                break

            logger.info(f"  [{i}/{total}] {entry.surface} {entry.gloss}")
            try:
                generated = generate_sentence(
                    entry,
                    known.snapshot(),
                    client,
                    prompt_template,
                    model=model,
                    reasoning_effort=reasoning_effort,
                )
            except Exception as e:
                logger.error(f"  Error for row {i} ({entry.surface}): {type(e).__name__} {e}")
                raise

            record = build_record(next_id, entry, generated)
            store.append(record)
            written.append(record)

            logger.info(f"    ↳ JP: {record.sentence_jp}")
            logger.info(f"    ↳ EN: {record.sentence_en}")
            logger.info(f"    ↳ RM: {record.sentence_romaji}")
            if record.explanation.strip():
                logger.info(f"    ↳ EX: {record.explanation}")

            next_id += 1
            known.commit(entry, i)

    logger.info(f"  Wrote {len(written)} new rows to: {output_path}")
    return written


if __name__ == "__main__":
    run_step1()
