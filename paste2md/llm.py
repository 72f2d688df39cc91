"""LLM enhancement clients for local Ollama servers and the OpenAI API."""

from __future__ import annotations

import os
from typing import Any

import httpx

from .config import LLMConfig, get_best_available_model
from .constants import (
    CONNECTION_CHECK_TIMEOUT,
    OPENAI_API_URL,
    OPENAI_KEY_ENV_VAR,
    OPENAI_MODELS,
)
from .exceptions import (
    EnhancementError,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMResponseError,
    LLMTimeoutError,
)
from .models import ConnectionStatus, LLMModel

SYSTEM_MESSAGE = (
    "You are a markdown formatting expert. "
    "Always respond with only the formatted markdown, no explanations."
)

EMOJI_RULE = (
    "4. Add appropriate and relevant emojis to headers and sections to make them "
    "visually appealing. Use emojis that match the content (e.g., 📊 for data, "
    "🍳 for cooking, 📝 for forms, etc.). Place emojis at the beginning of headers."
)
NO_EMOJI_RULE = "4. Do NOT add any emojis to the text."

PROMPT_TEMPLATE = """You are a markdown formatting expert. Convert the following text into well-formatted markdown.

CRITICAL RULES - YOU MUST FOLLOW THESE EXACTLY:

1. TABLES ARE SACRED - NEVER REMOVE TABLES:
   - If you detect any tabular data (text aligned in columns with consistent spacing), you MUST convert it to a markdown table
   - Use | separators between columns
   - Add a header separator row (|---|---|) after the first row
   - NEVER convert tables to lists or paragraphs
   - Example of table format:
     | Column 1 | Column 2 | Column 3 |
     |----------|----------|----------|
     | Data 1   | Data 2   | Data 3   |

2. Headers: use # for main titles, ## for sections, ### for subsections

3. Lists:
   - Convert bullet points to proper markdown lists
   - Preserve numbered lists with correct formatting

{emoji_rule}

5. Text formatting:
   - Bold: **text**
   - Italic: *text*
   - Code: `code`

6. Code blocks: Use ``` for multi-line code

7. URLs: Convert to [text](url) format

8. PRESERVE ALL CONTENT:
   - Do not remove or summarize any information
   - Keep all data intact
   - Maintain the original structure as much as possible

{custom_instructions}

REMEMBER: If you see data that looks like a table (rows and columns of information), you MUST format it as a markdown table. This is non-negotiable.

Text to convert:
{text}

Return ONLY the formatted markdown, no explanations or comments. DO NOT remove tables or convert them to other formats."""


def build_prompt(text: str, add_emojis: bool = False, custom_instructions: str = "") -> str:
    """Build the formatting prompt sent to the LLM.

    Args:
        text: Pasted text to convert.
        add_emojis: Whether headers should be decorated with emojis.
        custom_instructions: Extra free-form instructions from the user.

    Returns:
        str: The complete prompt.

    Examples:
        build_prompt("Name  Age", custom_instructions="Use British spelling")
    """
    custom_block = ""
    if custom_instructions:
        custom_block = f"\n\nADDITIONAL INSTRUCTIONS FROM USER:\n{custom_instructions}\n"

    return PROMPT_TEMPLATE.format(
        emoji_rule=EMOJI_RULE if add_emojis else NO_EMOJI_RULE,
        custom_instructions=custom_block,
        text=text,
    )


class _HTTPClient:
    """Shared request handling for LLM providers.

    Translates transport failures into `EnhancementError` subclasses. An
    `httpx.Client` may be injected; otherwise a short-lived one is created per
    request.
    """

    def __init__(self, config: LLMConfig, base_url: str, http_client: httpx.Client | None = None):
        self.config = config
        self.base_url = base_url.rstrip("/")
        self._http_client = http_client

    def _request(self, method: str, path: str, timeout: float, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._http_client is not None:
                response = self._http_client.request(method, url, timeout=timeout, **kwargs)
            else:
                with httpx.Client() as client:
                    response = client.request(method, url, timeout=timeout, **kwargs)
        except httpx.TimeoutException as error:
            raise LLMTimeoutError(timeout) from error
        except httpx.HTTPError as error:
            raise LLMConnectionError() from error

        if response.is_error:
            raise self._error_for(response)

        try:
            return response.json()
        except ValueError as error:
            raise LLMResponseError(
                f"Invalid JSON response from {url}", response.status_code
            ) from error

    def _error_for(self, response: httpx.Response) -> EnhancementError:
        return LLMResponseError(
            f"LLM API error: {response.status_code} {response.reason_phrase}",
            response.status_code,
        )


class OllamaClient(_HTTPClient):
    """Client for a local Ollama server.

    Examples:
        client = OllamaClient(LLMConfig(provider="local"))
        markdown = client.generate(build_prompt("some text"))
    """

    def __init__(self, config: LLMConfig, http_client: httpx.Client | None = None):
        super().__init__(config, config.server_url, http_client)

    def generate(self, prompt: str) -> str:
        """Send a non-streaming generation request and return the response text."""
        payload = {
            "model": self.config.selected_model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
            },
        }
        data = self._request("POST", "/api/generate", self.config.timeout, json=payload)
        if not isinstance(data, dict):
            raise LLMResponseError("Unexpected response shape from Ollama")
        return data.get("response") or ""

    def list_models(self) -> list[LLMModel]:
        """Return the models installed on the server."""
        data = self._request("GET", "/api/tags", CONNECTION_CHECK_TIMEOUT)
        if not isinstance(data, dict):
            raise LLMResponseError("Unexpected response shape from Ollama")

        models = []
        for entry in data.get("models") or []:
            if not isinstance(entry, dict) or not entry.get("name"):
                continue
            models.append(
                LLMModel(
                    name=entry["name"],
                    size=entry.get("size"),
                    modified_at=entry.get("modified_at"),
                    digest=entry.get("digest"),
                    details=entry.get("details") or {},
                )
            )
        return models


class OpenAIClient(_HTTPClient):
    """Client for the OpenAI chat completions API.

    The API key is taken from the `api_key` argument or the ``OPENAI_KEY``
    environment variable.
    """

    def __init__(
        self,
        config: LLMConfig,
        api_key: str | None = None,
        http_client: httpx.Client | None = None,
        base_url: str = OPENAI_API_URL,
    ):
        super().__init__(config, base_url, http_client)
        self.api_key = api_key if api_key is not None else os.environ.get(OPENAI_KEY_ENV_VAR)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise LLMAuthenticationError("OpenAI API key not configured")
        return {"Authorization": f"Bearer {self.api_key}"}

    def _error_for(self, response: httpx.Response) -> EnhancementError:
        try:
            body = response.json()
            message = body["error"]["message"]
        except (ValueError, KeyError, TypeError):
            message = response.reason_phrase

        if response.status_code == 401:
            return LLMAuthenticationError(f"Invalid OpenAI API key: {message}")
        return LLMResponseError(f"OpenAI API error: {message}", response.status_code)

    def generate(self, prompt: str) -> str:
        """Send a chat completion request and return the first choice's content."""
        payload = {
            "model": self.config.selected_model,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
        }
        data = self._request(
            "POST",
            "/chat/completions",
            self.config.timeout,
            json=payload,
            headers=self._headers(),
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""

    def list_models(self) -> list[LLMModel]:
        """Verify the API key and return the supported OpenAI models."""
        self._request("GET", "/models", CONNECTION_CHECK_TIMEOUT, headers=self._headers())
        return [LLMModel(name=name, details={"family": "OpenAI"}) for name, _, _ in OPENAI_MODELS]


def create_client(
    config: LLMConfig, http_client: httpx.Client | None = None
) -> OllamaClient | OpenAIClient:
    """Return the client matching `config.provider`."""
    if config.provider == "openai":
        return OpenAIClient(config, http_client=http_client)
    return OllamaClient(config, http_client=http_client)


def enhance(
    text: str,
    config: LLMConfig,
    add_emojis: bool = False,
    custom_instructions: str = "",
    client: OllamaClient | OpenAIClient | None = None,
) -> str:
    """Ask the configured LLM to format `text` as Markdown.

    Args:
        text: Pasted text to convert.
        config: LLM configuration.
        add_emojis: Whether headers should be decorated with emojis.
        custom_instructions: Extra free-form instructions from the user.
        client: Client to use instead of one built from `config`.

    Returns:
        str: Markdown produced by the model, possibly empty.

    Raises:
        EnhancementError: If the request fails, times out, or is rejected.
    """
    client = client or create_client(config)
    return client.generate(build_prompt(text, add_emojis, custom_instructions))


def check_connection(
    config: LLMConfig, client: OllamaClient | OpenAIClient | None = None
) -> ConnectionStatus:
    """Probe the configured LLM server without raising.

    Args:
        config: LLM configuration.
        client: Client to use instead of one built from `config`.

    Returns:
        ConnectionStatus: Availability, model names, and the model that would be
            used. The configured model is kept when the server offers it;
            otherwise the best supported one is chosen.
    """
    client = client or create_client(config)
    try:
        models = [model.name for model in client.list_models()]
    except LLMTimeoutError:
        return ConnectionStatus(available=False, error="Connection timeout")
    except EnhancementError as error:
        return ConnectionStatus(available=False, error=str(error))

    if config.selected_model in models:
        selected_model = config.selected_model
    elif models:
        selected_model = get_best_available_model(models, config.provider)
    else:
        selected_model = None

    return ConnectionStatus(available=True, models=models, selected_model=selected_model)
