"""Anthropic Claude LLM provider."""

import logging
import os

from cvtriage.extraction.llm.base import SYSTEM_PROMPT, LLMProvider

logger = logging.getLogger(__name__)

MAX_TOKENS = 1024
JSON_PREFILL = "{"


class AnthropicProvider(LLMProvider):
    """CV extraction through the Anthropic messages API."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        cv_text: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get(self.env_var)
        if not api_key:
            msg = f"{self.env_var} environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for CV extraction. "
                "Install with: pip install 'cvtriage[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model

        logger.info("Sending CV to Anthropic API (%s)...", use_model)
        # Prefilling the reply with "{" keeps the model on a bare JSON object.
        message = client.messages.create(
            model=use_model,
            max_tokens=MAX_TOKENS,
            temperature=0,
            system=system if system is not None else SYSTEM_PROMPT,
            messages=[
                {"role": "user", "content": cv_text},
                {"role": "assistant", "content": JSON_PREFILL},
            ],
        )

        return JSON_PREFILL + message.content[0].text  # type: ignore[union-attr]
