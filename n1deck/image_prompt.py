"""Derive image-generator prompts from example sentences."""

import random
from pathlib import Path

from openai import APIError, AsyncOpenAI

import config
from n1deck.openai_client import api_error_message, extract_output_text, response_to_dict, sdk_error_message


class PromptGenerationError(Exception):
    """Raised when an image prompt cannot be derived."""

    pass


def load_prompt_template(path: Path = config.IMAGE_PROMPT_TEMPLATE) -> str:
    """Load the developer message template from file."""
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def sample_style(rng: random.Random, styles: list[tuple[str, int]] = config.IMAGE_STYLES) -> str:
    """Pick a visual style using the configured weights."""
    names = [name for name, _ in styles]
    weights = [weight for _, weight in styles]
    return rng.choices(names, weights=weights, k=1)[0]


def build_developer_message(template: str, rng: random.Random) -> str:
    """
    Fill the developer message with a randomly drawn style and subject.

    Args:
        template: Template with {style}, {gender} and {smile_rule} placeholders
        rng: Random source for this call

    Returns:
        The developer message
    """
    return template.format(
        style=sample_style(rng),
        gender=rng.choice(config.SUBJECT_GENDERS),
        smile_rule=rng.choice(config.SMILE_RULES),
    )


async def derive_image_prompt(
    sentence: str,
    client: AsyncOpenAI,
    template: str,
    rng: random.Random | None = None,
    model: str = config.OPENAI_MODEL,
) -> str:
    """
    Ask the model for an image prompt illustrating an English sentence.

    Args:
        sentence: English example sentence
        client: Async OpenAI client
        template: Developer message template
        rng: Random source for style sampling. A fresh one is used if None.
        model: Model name

    Returns:
        The image prompt

    Raises:
        PromptGenerationError: If the API errors or the prompt is empty
    """
    rng = rng or random.Random()
    try:
        response = await client.responses.create(
            model=model,
            input=[
                {"role": "developer", "content": build_developer_message(template, rng)},
                {"role": "user", "content": sentence},
            ],
            reasoning={"effort": config.OPENAI_PROMPT_REASONING_EFFORT},
        )
    except APIError as e:
        raise PromptGenerationError(f"OpenAI API error (prompt): {sdk_error_message(e)}") from e
    data = response_to_dict(response)

    message = api_error_message(data)
    if message:
        raise PromptGenerationError(f"OpenAI API error (prompt): {message}")

    prompt = extract_output_text(data)
    if not prompt:
        raise PromptGenerationError(f"Empty prompt from OpenAI for sentence: {sentence!r}")
    return prompt
