"""OpenAI vision provider."""

import logging
import os

from src.llm.base import SYSTEM_PROMPT, ImageSource, LLMProvider

logger = logging.getLogger(__name__)


def build_messages(image: ImageSource, prompt: str, system: str) -> list[dict[str, object]]:
    """Chat messages with the image attached, for OpenAI-compatible APIs."""
    return [
        {"role": "system", "content": system},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": image.data_url}},
            ],
        },
    ]


class OpenAIProvider(LLMProvider):
    """LLM provider using the OpenAI API."""

    @property
    def provider_id(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return "gpt-4o"

    @property
    def env_var(self) -> str:
        return "OPENAI_API_KEY"

    def describe_image(
        self,
        image: ImageSource,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for photo description. "
                "Install with: pip install 'painter-match[openai]'"
            )
            raise ImportError(msg) from None

        client = openai.OpenAI(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.info("Sending photo to OpenAI API (%s)...", use_model)
        response = client.chat.completions.create(
            model=use_model,
            max_tokens=500,
            messages=build_messages(image, prompt, use_system),
        )

        return response.choices[0].message.content  # type: ignore[no-any-return]
