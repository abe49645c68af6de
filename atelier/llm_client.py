"""
LLM client for insight generation using Anthropic Claude.

Wraps the Messages API behind a single prompt -> completion call and
reports failures as error dicts instead of raising.
"""
from typing import Optional, Dict, Any

import anthropic
from anthropic import AsyncAnthropic

from atelier.config import config, InsightConfig
from atelier.observability import get_logger

logger = get_logger(__name__)


class LLMClient:
    """Async client for Claude text completion."""

    SYSTEM_PROMPT = """You are a retail business analyst for a small fashion boutique.
You turn weekly catalog and traffic metrics into short, practical advice for the owner.

Important guidelines:
- Only use the numbers you are given; never invent figures
- Be concise and specific
- Prefer actions the owner can take this week"""

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-20250514", max_tokens: int = 800):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self._client: Optional[AsyncAnthropic] = None

    @property
    def client(self) -> AsyncAnthropic:
        """Lazy-initialize Anthropic client."""
        if self._client is None:
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    @property
    def is_available(self) -> bool:
        """Check if LLM is configured."""
        return bool(self.api_key)

    async def complete(self, prompt: str, max_tokens: Optional[int] = None) -> Dict[str, Any]:
        """
        Send a single-turn prompt and return the completion.

        Args:
            prompt: User prompt text
            max_tokens: Max response tokens (defaults to the client setting)

        Returns:
            {"content", "stop_reason", "usage"} on success, or
            {"content": <reason>, "error": True} on failure
        """
        if not self.is_available:
            return {
                "content": "Insight generation is not configured. Please set ANTHROPIC_API_KEY.",
                "error": True
            }

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                system=self.SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )

            content = "".join(
                block.text for block in response.content
                if getattr(block, "type", None) == "text"
            )
            return {
                "id": response.id,
                "content": content,
                "stop_reason": response.stop_reason,
                "usage": {
                    "input_tokens": response.usage.input_tokens,
                    "output_tokens": response.usage.output_tokens
                }
            }

        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            return {
                "content": f"API error: {e.message}",
                "error": True
            }
        except (AttributeError, TypeError) as e:
            logger.error(f"Malformed LLM response: {e}")
            return {
                "content": f"Malformed response: {e}",
                "error": True
            }


def build_llm_client(insight_config: InsightConfig = None) -> LLMClient:
    """Create an LLM client from configuration."""
    cfg = insight_config or config.insight
    return LLMClient(
        api_key=cfg.anthropic_api_key,
        model=cfg.model,
        max_tokens=cfg.max_tokens,
    )
