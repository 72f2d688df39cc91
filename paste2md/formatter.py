"""Markdown formatting with LLM enhancement and heuristic fallback."""

from __future__ import annotations

from collections.abc import Callable

from .config import LLMConfig, default_config
from .converter import convert
from .exceptions import EnhancementError
from .llm import OllamaClient, OpenAIClient, enhance as enhance_with_llm
from .models import EnhanceResult


def format_text(
    text: str,
    config: LLMConfig | None = None,
    enhance: bool = False,
    add_emojis: bool = False,
    custom_instructions: str = "",
    client: OllamaClient | OpenAIClient | None = None,
    warn: Callable[[str], None] | None = None,
) -> EnhanceResult:
    """Format pasted text as Markdown, preferring the LLM when asked to.

    The heuristic converter is always available: it is used directly when
    `enhance` is False, and as the fallback when the LLM is unreachable,
    times out, rejects the request, or returns nothing.

    Args:
        text: Pasted text.
        config: LLM configuration. Defaults to `default_config()`.
        enhance: Whether to try the LLM first.
        add_emojis: Forwarded to the LLM prompt.
        custom_instructions: Forwarded to the LLM prompt.
        client: LLM client to use instead of one built from `config`.
        warn: Optional callback for reporting why the fallback was used.

    Returns:
        EnhanceResult: The Markdown, whether the LLM produced it, and the
            fallback reason when it did not.

    Examples:
        format_text("Name  Age\\nAda  36").markdown
        format_text(text, config, enhance=True, warn=print)
    """
    if not enhance:
        return EnhanceResult(markdown=convert(text))

    config = config or default_config()
    try:
        markdown = enhance_with_llm(
            text,
            config,
            add_emojis=add_emojis,
            custom_instructions=custom_instructions,
            client=client,
        )
    except EnhancementError as error:
        reason = str(error)
    else:
        if markdown.strip():
            return EnhanceResult(markdown=markdown, enhanced=True)
        reason = "LLM returned an empty response"

    if warn is not None:
        warn(f"Warning: {reason}; using the built-in converter instead.")
    return EnhanceResult(markdown=convert(text), error=reason)
