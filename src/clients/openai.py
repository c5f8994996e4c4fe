"""OpenAI client utility for chat completions used by text enrichment."""

from openai import AsyncOpenAI

from src.utils.config import get_openai_api_key, get_openai_base_url, get_openai_model
from src.utils.logging import get_logger

logger = get_logger(__name__)


class OpenAIClient:
    """A client for interacting with an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
    ):
        """Initialize the async OpenAI client.

        Raises:
            ValueError: If no API key is passed or found in config/env
        """
        api_key = api_key or get_openai_api_key()
        if not api_key:
            raise ValueError("OpenAI API key not provided. Set OPENAI_API_KEY environment variable")

        self.model = model or get_openai_model()
        self.async_client = AsyncOpenAI(api_key=api_key, base_url=base_url or get_openai_base_url())

    async def complete(self, prompt: str) -> str:
        """Send a single-turn prompt and return the model's text reply.

        Raises:
            ValueError: If the response carries no text content
        """
        response = await self.async_client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ValueError(f"Empty completion returned by model {self.model}")
        return content

    async def close(self) -> None:
        await self.async_client.close()
