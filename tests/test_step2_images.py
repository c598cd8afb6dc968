"""Tests for the image pipeline driver."""

import asyncio
import logging
import random

import httpx
import pytest

from n1deck import step2_images
from n1deck.sentence_store import SentenceStore, read_sentence_rows
from n1deck.step2_images import build_jobs, image_path_for, run_step2
from n1deck.worker_pool import JobFailedError
from tests.helpers import FakeAsyncOpenAI, make_record, text_response

TEMPLATE = "Style: {style}. Subject: {gender}. {smile_rule}"


def prompt_reply(**kwargs):
    sentence = kwargs["input"][1]["content"]
    if "FAIL" in sentence:
        return {"error": {"message": f"cannot illustrate {sentence}"}}
    return text_response(f"An illustration of: {sentence}")


def replicate_handler(request: httpx.Request) -> httpx.Response:
    if request.method == "POST":
        return httpx.Response(201, json={"status": "succeeded", "output": ["https://cdn.example/out.jpeg"]})
    return httpx.Response(200, content=b"jpeg-bytes")


@pytest.fixture
def render(sentences_csv, tmp_path):
    images_dir = tmp_path / "images"

    def _render(**kwargs):
        kwargs.setdefault("start_index", 1)
        kwargs.setdefault("limit", None)
        kwargs.setdefault("concurrency", 2)
        openai_client = FakeAsyncOpenAI(prompt_reply)
        jobs = run_step2(
            output_path=sentences_csv,
            images_dir=images_dir,
            openai_client=openai_client,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(replicate_handler)),
            template=TEMPLATE,
            rng=random.Random(0),
            api_token="tok",
            **kwargs,
        )
        return jobs, openai_client

    _render.images_dir = images_dir
    return _render


class TestBuildJobs:
    def test_skips_existing_images(self, sentences_csv, tmp_path):
        images_dir = tmp_path / "images"
        images_dir.mkdir()
        image_path_for("JPN1K-2", images_dir).write_bytes(b"done")

        jobs = build_jobs(read_sentence_rows(sentences_csv), images_dir)

        assert [job.card_id for job in jobs] == ["JPN1K-1", "JPN1K-3"]
        assert jobs[0].sequence_index == 1
        assert jobs[0].total == 3
        assert jobs[0].sentence == "Sentence number 1."
        assert jobs[0].output_path == images_dir / "JPN1K-1.jpeg"

    def test_window(self, sentences_csv, tmp_path):
        jobs = build_jobs(read_sentence_rows(sentences_csv), tmp_path, start_index=2, limit=1)
        assert [job.card_id for job in jobs] == ["JPN1K-2"]

    def test_skips_rows_without_sentence(self, tmp_path, caplog):
        path = tmp_path / "flashcards.csv"
        with SentenceStore(path) as store:
            store.append(make_record(1, sentence_en=""))
            store.append(make_record(2))

        with caplog.at_level(logging.WARNING):
            jobs = build_jobs(read_sentence_rows(path), tmp_path)

        assert [job.card_id for job in jobs] == ["JPN1K-2"]
        assert "Skipping row 1: missing ID or Sentence EN" in caplog.text


class TestRunStep2:
    def test_renders_missing_images(self, render):
        jobs, openai_client = render()

        assert len(jobs) == 3
        for i in range(1, 4):
            assert image_path_for(f"JPN1K-{i}", render.images_dir).read_bytes() == b"jpeg-bytes"
        assert len(openai_client.responses.calls) == 3

    def test_rerun_is_idempotent(self, render):
        render()
        jobs, openai_client = render()

        assert jobs == []
        assert openai_client.responses.calls == []

    def test_job_count_matches_missing_images(self, render):
        render.images_dir.mkdir()
        image_path_for("JPN1K-1", render.images_dir).write_bytes(b"old")

        jobs, _ = render()

        assert [job.card_id for job in jobs] == ["JPN1K-2", "JPN1K-3"]
        assert image_path_for("JPN1K-1", render.images_dir).read_bytes() == b"old"

    def test_failed_job_raises_after_others_finish(self, tmp_path):
        path = tmp_path / "flashcards.csv"
        with SentenceStore(path) as store:
            store.append(make_record(1))
            store.append(make_record(2, sentence_en="FAIL here."))
            store.append(make_record(3))
        images_dir = tmp_path / "images"

        with pytest.raises(JobFailedError) as exc_info:
            run_step2(
                output_path=path,
                images_dir=images_dir,
                start_index=1,
                limit=None,
                concurrency=3,
                openai_client=FakeAsyncOpenAI(prompt_reply),
                http_client=httpx.AsyncClient(transport=httpx.MockTransport(replicate_handler)),
                template=TEMPLATE,
                api_token="tok",
            )

        assert "JPN1K-2" in str(exc_info.value)
        assert "cannot illustrate" in str(exc_info.value.__cause__)
        assert image_path_for("JPN1K-1", images_dir).exists()
        assert image_path_for("JPN1K-3", images_dir).exists()
        assert not image_path_for("JPN1K-2", images_dir).exists()

    def test_missing_csv(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            run_step2(output_path=tmp_path / "missing.csv", images_dir=tmp_path / "images")

    def test_images_are_written_off_the_event_loop(self, render, monkeypatch):
        written = []
        real_to_thread = asyncio.to_thread

        async def spy(func, *args, **kwargs):
            written.append(args[0])
            return await real_to_thread(func, *args, **kwargs)

        monkeypatch.setattr(step2_images.asyncio, "to_thread", spy)

        render()

        assert written == [b"jpeg-bytes"] * 3
