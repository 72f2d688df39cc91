"""
paste2md: turn pasted plain text into Markdown.

This package can be used both as a CLI tool and as a library.

CLI Usage:
    pbpaste | paste2md
    paste2md notes.txt -o notes.md --enhance

Library Usage:
    from paste2md import convert, format_text

    markdown = convert("INTRODUCTION\\n\\nSome text")
    result = format_text(text, enhance=True)
    print(result.markdown)
"""

from .config import ConfigError, LLMConfig, build_config, default_config
from .converter import convert
from .exceptions import (
    EnhancementError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMResponseError,
    LLMTimeoutError,
)
from .formatter import format_text
from .llm import OllamaClient, OpenAIClient, build_prompt, check_connection, enhance
from .models import ConnectionStatus, EnhanceResult, LLMModel

__version__ = "0.1.0"

__all__ = [
    # Core functionality
    "convert",
    "format_text",
    # LLM enhancement
    "enhance",
    "build_prompt",
    "check_connection",
    "OllamaClient",
    "OpenAIClient",
    # Configuration
    "LLMConfig",
    "build_config",
    "default_config",
    # Data models
    "ConnectionStatus",
    "EnhanceResult",
    "LLMModel",
    # Exceptions
    "ConfigError",
    "EnhancementError",
    "LLMAuthenticationError",
    "LLMConnectionError",
    "LLMResponseError",
    "LLMTimeoutError",
    # Version
    "__version__",
]
