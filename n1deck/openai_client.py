"""OpenAI Responses API wrapper for text generation."""

import json
import os
from typing import Any, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI, OpenAI

import config


class GenerationError(Exception):
    """Raised when sentence generation fails."""

    pass


class GenerationParseError(GenerationError):
    """Raised when the model response cannot be parsed as JSON."""

    pass


class GenerationAPIError(GenerationError):
    """Raised when the Responses API returns an error envelope."""

    pass


def _api_key() -> str | None:
    return os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_ACCESS_TOKEN")


def build_client(http_client: httpx.Client | None = None) -> OpenAI:
    """Create a synchronous OpenAI client from the environment. Failed calls are not retried."""
    return OpenAI(
        api_key=_api_key(),
        base_url=config.OPENAI_BASE_URL,
        timeout=config.OPENAI_TIMEOUT,
        max_retries=config.OPENAI_MAX_RETRIES,
        http_client=http_client,
    )


def build_async_client(http_client: httpx.AsyncClient | None = None) -> AsyncOpenAI:
    """Create an asynchronous OpenAI client from the environment. Failed calls are not retried."""
    return AsyncOpenAI(
        api_key=_api_key(),
        base_url=config.OPENAI_BASE_URL,
        timeout=config.OPENAI_TIMEOUT,
        max_retries=config.OPENAI_MAX_RETRIES,
        http_client=http_client,
    )


def response_to_dict(response: Any) -> dict:
    """Normalize an SDK response object (or a plain dict) to a dict."""
    if isinstance(response, dict):
        return response
    if hasattr(response, "model_dump"):
        return response.model_dump()
    return {}


def api_error_message(response: dict) -> Optional[str]:
    """
    Return the message of an error envelope, or None if there is none.

    Args:
        response: Response as a dict

    Returns:
        Error message string or None
    """
    error = response.get("error")
    if not error:
        return None
    if isinstance(error, dict):
        return error.get("message") or repr(error)
    return str(error)


def sdk_error_message(error: APIError) -> str:
    """Message of an SDK exception, preferring the embedded error envelope."""
    if isinstance(error, APIStatusError):
        message = api_error_message({"error": error.body})
        if message:
            return f"HTTP {error.status_code} {message}"
    return error.message or str(error)


def extract_output_text(response: dict) -> str:
    """
    Collect the text segments of a Responses API result.

    Content items typed ``output_text`` (or untyped) are joined with newlines.
    """
    chunks = []
    output = response.get("output")
    if not isinstance(output, list):
        return ""
    for item in output:
        if not isinstance(item, dict):
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if isinstance(part, dict) and part.get("type") in ("output_text", None):
                text = part.get("text")
                chunks.append("" if text is None else str(text))
    return "\n".join(chunks).strip()


def parse_json_payload(text: str) -> Optional[dict]:
    """
    Parse text as a JSON object.

    A JSON array is reduced to its first element. Returns None if the text is
    not valid JSON or does not hold an object.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(data, list):
        data = data[0] if data else None
    if not isinstance(data, dict):
        return None
    return data


def extract_json_from_response(content: str) -> Optional[dict]:
    """
    Extract a JSON object from model output.

    Tries a strict parse first, then retries once on the span between the
    first ``{`` and the last ``}``.

    Args:
        content: Raw response text

    Returns:
        Parsed JSON dictionary, or None if both attempts fail
    """
    parsed = parse_json_payload(content)
    if parsed is not None:
        return parsed

    start = content.find("{")
    end = content.rfind("}")
    if start == -1 or end < start:
        return None
    return parse_json_payload(content[start : end + 1])


def generate_text(
    client: OpenAI,
    input: str | list[dict],
    model: str = config.OPENAI_MODEL,
    reasoning_effort: str = config.OPENAI_REASONING_EFFORT,
) -> str:
    """
    Run a Responses API request and return its text.

    Args:
        client: OpenAI client
        input: Prompt string or role-tagged messages
        model: Model name
        reasoning_effort: Reasoning effort hint

    Returns:
        Concatenated output text

    Raises:
        GenerationAPIError: If the request fails or the response carries an error envelope
    """
    try:
        response = client.responses.create(
            model=model,
            input=input,
            reasoning={"effort": reasoning_effort},
        )
    except APIError as e:
        raise GenerationAPIError(f"OpenAI API error: {sdk_error_message(e)}") from e
    data = response_to_dict(response)
    message = api_error_message(data)
    if message:
        raise GenerationAPIError(f"OpenAI API error: {message}")
    return extract_output_text(data)
