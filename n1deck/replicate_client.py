"""Replicate API client for rendering images."""

from typing import Any, Optional

import httpx

import config

REDIRECT_STATUSES = (301, 302, 303, 307, 308)
URL_SCHEMES = ("http://", "https://")


class RenderError(Exception):
    """Raised when the image service fails or returns no usable output."""

    pass


class DownloadError(Exception):
    """Raised when the rendered image cannot be downloaded."""

    pass


def _is_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(URL_SCHEMES)


def extract_image_url(output: Any) -> Optional[str]:
    """
    Find the image URL in a prediction's output field.

    The output may be a URL string, a list of URLs, or a mapping whose
    values (strings or lists) are searched in order.

    Args:
        output: The prediction "output" value

    Returns:
        First URL found, or None
    """
    if isinstance(output, str):
        return output if _is_url(output) else None
    if isinstance(output, list):
        return next((v for v in output if _is_url(v)), None)
    if isinstance(output, dict):
        for value in output.values():
            if _is_url(value):
                return value
            if isinstance(value, list):
                candidate = next((v for v in value if _is_url(v)), None)
                if candidate:
                    return candidate
    return None


async def create_prediction(
    prompt: str,
    client: httpx.AsyncClient,
    api_token: str = config.REPLICATE_API_TOKEN,
    model: str = config.REPLICATE_MODEL,
    aspect_ratio: str = config.REPLICATE_ASPECT_RATIO,
) -> dict:
    """
    Create a prediction and wait for it to finish.

    Args:
        prompt: Image prompt
        client: Async HTTP client
        api_token: Replicate API token
        model: Replicate model, e.g. "bytedance/seedream-4"
        aspect_ratio: Output aspect ratio

    Returns:
        Prediction JSON

    Raises:
        RenderError: If the token is missing or the API returns an error
    """
    if not api_token.strip():
        raise RenderError("Missing REPLICATE_API_TOKEN")

    url = f"{config.REPLICATE_API_URL}/{model}/predictions"
    headers = {
        "Authorization": f"Bearer {api_token}",
        "Content-Type": "application/json",
        "Prefer": "wait",
    }
    body = {"input": {"prompt": prompt, "aspect_ratio": aspect_ratio}}

    response = await client.post(url, headers=headers, json=body, timeout=config.REPLICATE_TIMEOUT)
    if not response.is_success:
        raise RenderError(
            f"Replicate API error: HTTP {response.status_code} {response.reason_phrase} - {response.text[:500]}"
        )

    try:
        data = response.json()
    except ValueError as e:
        raise RenderError(f"Replicate returned invalid JSON: {e}")

    if not isinstance(data, dict):
        raise RenderError(f"Unexpected Replicate response: {str(data)[:500]}")
    error = data.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or repr(error)
        else:
            message = str(error)
        raise RenderError(f"Replicate API error: {message}")

    return data


async def download_bytes(
    url: str,
    client: httpx.AsyncClient,
    max_redirects: int = config.DOWNLOAD_MAX_REDIRECTS,
) -> bytes:
    """
    Download a file, following at most max_redirects redirects.

    Args:
        url: File URL
        client: Async HTTP client (redirects are followed here, not by httpx)
        max_redirects: Redirect budget

    Returns:
        Response body

    Raises:
        DownloadError: On HTTP errors or when the redirect budget is exceeded
    """
    current = httpx.URL(url)
    redirects = 0
    while True:
        response = await client.get(current, follow_redirects=False, timeout=config.DOWNLOAD_TIMEOUT)
        if response.is_success:
            return response.content
        if response.status_code not in REDIRECT_STATUSES:
            raise DownloadError(
                f"Image download error: HTTP {response.status_code} {response.reason_phrase}"
            )

        location = response.headers.get("location", "").strip()
        if not location:
            raise DownloadError("Redirect missing location")
        if redirects >= max_redirects:
            raise DownloadError(f"Too many HTTP redirects (limit {max_redirects})")
        redirects += 1
        current = current.join(location)


async def render_image(prompt: str, client: httpx.AsyncClient, **prediction_options) -> bytes:
    """
    Render an image for a prompt and return its bytes.

    Args:
        prompt: Image prompt
        client: Async HTTP client
        **prediction_options: Passed to create_prediction

    Returns:
        Raw image bytes

    Raises:
        RenderError: If the prediction failed or has no output URL
        DownloadError: If the image download fails
    """
    prediction = await create_prediction(prompt, client, **prediction_options)

    status = str(prediction.get("status", ""))
    if status in ("failed", "canceled"):
        raise RenderError(f"Replicate prediction {status}")

    url = extract_image_url(prediction.get("output"))
    if not url:
        raise RenderError("Replicate response missing image URL in output")

    return await download_bytes(url, client)
