"""Step 2: Image Generation - Illustrate each sentence with a rendered image."""

import asyncio
import logging
import random
from contextlib import AsyncExitStack
from pathlib import Path

import httpx
from openai import AsyncOpenAI
from tqdm import tqdm

import config
from n1deck.image_prompt import derive_image_prompt, load_prompt_template
from n1deck.logger import emit_logs, get_logger
from n1deck.models import ImageJob
from n1deck.openai_client import build_async_client
from n1deck.replicate_client import render_image
from n1deck.sentence_store import read_sentence_rows
from n1deck.step1_sentences import resolve_window
from n1deck.worker_pool import run_jobs


def image_path_for(card_id: str, images_dir: Path = config.IMAGES_DIR) -> Path:
    """Output path of the image for a card."""
    return images_dir / f"{card_id}.{config.IMAGE_EXTENSION}"


def build_jobs(
    rows: list[dict[str, str]],
    images_dir: Path = config.IMAGES_DIR,
    start_index: int = 1,
    limit: int | None = None,
) -> list[ImageJob]:
    """
    Create jobs for rows in the window that have no image yet.

    Args:
        rows: Sentence rows keyed by header name
        images_dir: Directory holding rendered images
        start_index: 1-based first row
        limit: Optional maximum number of rows

    Returns:
        Jobs to run, in row order
    """
    logger = get_logger()
    total = len(rows)
    start, last = resolve_window(total, start_index, limit)
    logger.info(f"  Generating images for rows {start}..{last} of {total}")

    jobs = []
    for i, row in enumerate(rows, start=1):
        if i < start:
            continue
        if i > last:
            break

        card_id = (row.get("ID") or "").strip()
        sentence = (row.get("Sentence EN") or "").strip()
        if not card_id or not sentence:
            logger.warning(f"  Skipping row {i}: missing ID or Sentence EN")
            continue

        out_path = image_path_for(card_id, images_dir)
        if out_path.exists():
            logger.info(f"  [{i}/{total}] {card_id} → exists, skipping ({out_path})")
            continue

        jobs.append(
            ImageJob(
                sequence_index=i,
                total=total,
                card_id=card_id,
                sentence=sentence,
                output_path=out_path,
            )
        )
    return jobs


async def process_job(
    job: ImageJob,
    openai_client: AsyncOpenAI,
    http_client: httpx.AsyncClient,
    template: str,
    rng: random.Random | None = None,
    api_token: str = config.REPLICATE_API_TOKEN,
) -> None:
    """
    Derive a prompt, render it and save the image for one job.

    Log lines are buffered and written together once the job ends.
    """
    events = [
        (
            logging.INFO,
            f"  [{job.sequence_index}/{job.total}] {job.card_id} → building prompt for: {job.sentence}",
        )
    ]
    try:
        prompt = await derive_image_prompt(job.sentence, openai_client, template, rng=rng)
        events.append((logging.INFO, f"    ↳ prompt: {prompt}"))
        image = await render_image(prompt, http_client, api_token=api_token)
        await asyncio.to_thread(job.output_path.write_bytes, image)
        events.append((logging.INFO, f"    ↳ saved {job.output_path}"))
    except Exception as e:
        events.append(
            (
                logging.WARNING,
                f"  Error for row {job.sequence_index} ({job.card_id}): {type(e).__name__} {e}",
            )
        )
        raise
    finally:
        emit_logs(get_logger(), events)


async def process_jobs_async(
    jobs: list[ImageJob],
    concurrency: int,
    openai_client: AsyncOpenAI | None = None,
    http_client: httpx.AsyncClient | None = None,
    template: str | None = None,
    rng: random.Random | None = None,
    api_token: str = config.REPLICATE_API_TOKEN,
) -> None:
    """
    Run image jobs on a bounded pool of workers.

    Clients that are not supplied are created for the duration of the call.
    """
    if template is None:
        template = load_prompt_template()

    async with AsyncExitStack() as stack:
        if openai_client is None:
            openai_client = await stack.enter_async_context(build_async_client())
        if http_client is None:
            http_client = await stack.enter_async_context(httpx.AsyncClient())

        with tqdm(total=len(jobs), desc="  Rendering") as pbar:

            async def handle(job: ImageJob) -> None:
                try:
                    await process_job(job, openai_client, http_client, template, rng, api_token)
                finally:
                    pbar.update(1)

            await run_jobs(
                jobs,
                handle,
                concurrency,
                describe=lambda job: f"row {job.sequence_index} ({job.card_id})",
            )


def run_step2(
    output_path: Path = config.OUTPUT_PATH,
    images_dir: Path = config.IMAGES_DIR,
    start_index: int = config.START_INDEX,
    limit: int | None = config.LIMIT,
    concurrency: int = config.CONCURRENCY,
    openai_client: AsyncOpenAI | None = None,
    http_client: httpx.AsyncClient | None = None,
    template: str | None = None,
    rng: random.Random | None = None,
    api_token: str = config.REPLICATE_API_TOKEN,
) -> list[ImageJob]:
    """
    Run Step 2 of the pipeline.

    Rows whose image already exists are skipped, so a failed run can simply
    be started again.

    Args:
        output_path: Sentence CSV written by Step 1
        images_dir: Directory for rendered images
        start_index: 1-based first row
        limit: Optional maximum number of rows
        concurrency: Maximum number of concurrent jobs
        openai_client: Async OpenAI client. If None, one is created.
        http_client: Async HTTP client. If None, one is created.
        template: Developer message template. If None, loaded from file.
        rng: Random source for style sampling
        api_token: Replicate API token

    Returns:
        Jobs that were run

    Raises:
        FileNotFoundError: If the sentence CSV does not exist
        JobFailedError: If any job failed, after all jobs have finished
    """
    logger = get_logger()
    logger.info("Step 2: Generating images...")

    if not output_path.exists():
        raise FileNotFoundError(f"CSV not found at {output_path}")

    images_dir.mkdir(parents=True, exist_ok=True)

    rows = read_sentence_rows(output_path)
    jobs = build_jobs(rows, images_dir, start_index, limit)

    if not jobs:
        logger.info("  No images to generate (all already completed)")
        return jobs

    workers = min(concurrency, len(jobs))
    logger.info(f"  Using concurrency {workers} for {len(jobs)} image(s)")

    asyncio.run(
        process_jobs_async(
            jobs,
            workers,
            openai_client=openai_client,
            http_client=http_client,
            template=template,
            rng=rng,
            api_token=api_token,
        )
    )

    logger.info(f"  Done. Images in {images_dir}")
    return jobs


if __name__ == "__main__":
    run_step2()
