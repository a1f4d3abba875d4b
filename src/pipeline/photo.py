"""Describe a customer's job photo so it can feed description analysis."""

import logging

from src.core.config import LLMConfig
from src.core.errors import InputError
from src.core.schemas import PhotoDescription
from src.llm import LLMProvider, get_provider, load_image
from src.llm.base import DEFAULT_PROMPT

logger = logging.getLogger(__name__)


def describe_job_photo(
    image: str,
    config: LLMConfig | None = None,
    question: str | None = None,
    provider: LLMProvider | None = None,
) -> PhotoDescription:
    """Ask a vision model what surface, scope and condition a photo shows.

    Args:
        image: http(s) URL, data: URL, or local file path.
        config: Provider/model selection; defaults to OpenAI.
        question: Override the prompt sent with the image.
        provider: Pre-built provider, bypassing the registry.

    Raises:
        InputError: If image is empty or the provider name is unknown.
        FileNotFoundError: If a local image path does not exist.
    """
    config = config or LLMConfig()
    try:
        source = load_image(image)
        llm = provider or get_provider(config.provider)
    except ValueError as e:
        raise InputError(str(e)) from e

    prompt = question or config.prompt or DEFAULT_PROMPT
    text = llm.describe_image(source, prompt, model=config.model)

    location = source.url or f"inline {source.media_type}"
    logger.info("Described photo (%s) with %s", location, llm.provider_id)
    return PhotoDescription(
        source=location,
        provider=llm.provider_id,
        question=prompt,
        description=(text or "").strip(),
    )
