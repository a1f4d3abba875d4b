"""Abstract base class for vision LLM providers and shared image handling."""

import base64
import mimetypes
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

SYSTEM_PROMPT = (
    "You help a painting marketplace scope jobs from customer photos. "
    "Answer in plain prose (no markdown, no lists) and only describe what is visible."
)

DEFAULT_PROMPT = (
    "In 2-3 concise sentences, describe: 1) What type of surface (e.g., fence, walls, "
    "ceiling) and material (wood, brick, concrete, etc.), 2) Estimated size/scope (e.g., "
    "fence length in meters, room dimensions, number of rooms), 3) Current condition "
    "(damage, peeling, stains, weathering)."
)

_DATA_URL_RE = re.compile(r"^data:(image/[\w.+-]+);base64,(.+)$", re.DOTALL)


@dataclass(frozen=True)
class ImageSource:
    """An image given either as a remote URL or as inline base64 data."""

    url: str | None = None
    data: str | None = None
    media_type: str = "image/jpeg"

    @property
    def data_url(self) -> str:
        """URL form accepted by OpenAI-compatible chat APIs."""
        if self.url:
            return self.url
        return f"data:{self.media_type};base64,{self.data}"


def load_image(source: str) -> ImageSource:
    """Resolve an http(s) URL, a data: URL, or a local file path.

    Raises:
        ValueError: If source is empty.
        FileNotFoundError: If a local path does not exist.
    """
    source = (source or "").strip()
    if not source:
        msg = "image source must not be empty"
        raise ValueError(msg)
    if source.startswith(("http://", "https://")):
        return ImageSource(url=source)

    match = _DATA_URL_RE.match(source)
    if match:
        return ImageSource(data=match.group(2), media_type=match.group(1))

    path = Path(source)
    if not path.exists():
        msg = f"Image file not found: {path}"
        raise FileNotFoundError(msg)
    media_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return ImageSource(
        data=base64.b64encode(path.read_bytes()).decode("ascii"),
        media_type=media_type,
    )


class LLMProvider(ABC):
    """Base class that every LLM provider must implement."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'anthropic')."""

    @abstractmethod
    def describe_image(
        self,
        image: ImageSource,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        """Send an image plus prompt to the LLM and return its text answer.

        Args:
            image: Remote URL or inline base64 image.
            prompt: Question asked about the image.
            model: Override the provider's default model. None uses default.
            system: Override the system prompt. None falls back to SYSTEM_PROMPT.
        """

    @property
    @abstractmethod
    def default_model(self) -> str:
        """The default model ID used when no override is specified."""

    @property
    @abstractmethod
    def env_var(self) -> str | None:
        """Environment variable name for the API key, or None if not needed."""
