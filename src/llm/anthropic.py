"""Anthropic Claude vision provider."""

import logging
import os
from typing import Any

from src.llm.base import SYSTEM_PROMPT, ImageSource, LLMProvider

logger = logging.getLogger(__name__)


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Claude API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def describe_image(
        self,
        image: ImageSource,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for photo description. "
                "Install with: pip install 'painter-match[anthropic]'"
            )
            raise ImportError(msg) from None

        source: dict[str, Any]
        if image.url:
            source = {"type": "url", "url": image.url}
        else:
            source = {"type": "base64", "media_type": image.media_type, "data": image.data}

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.info("Sending photo to Anthropic API (%s)...", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=500,
            system=use_system,
            messages=[{
                "role": "user",
                "content": [
                    {"type": "image", "source": source},
                    {"type": "text", "text": prompt},
                ],
            }],
        )

        return message.content[0].text  # type: ignore[union-attr]
