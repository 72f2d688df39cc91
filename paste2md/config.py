"""Configuration loading and management."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from urllib.parse import urlsplit

from .constants import (
    DEFAULT_LOCAL_MODEL,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_SERVER_URL,
    DEFAULT_TEMPERATURE,
    DEFAULT_TIMEOUT,
    DEFAULT_TOP_P,
    SUPPORTED_LOCAL_MODELS,
)

PROVIDERS = ("local", "openai")
PROVIDER_ALIASES = {"ollama": "local"}


@dataclass
class LLMConfig:
    """Configuration for the LLM enhancement pass.

    Attributes:
        provider: ``"local"`` for an Ollama server or ``"openai"`` for the OpenAI API.
        server_url: Base URL of the local Ollama server.
        selected_model: Model name sent with each request.
        temperature: Sampling temperature.
        top_p: Nucleus sampling threshold.
        timeout: Request timeout in seconds.
        max_file_size: Maximum input size in bytes accepted by the CLI.

    Examples:
        LLMConfig(provider="local", selected_model="phi4")
    """

    provider: str = "openai"
    server_url: str = DEFAULT_SERVER_URL
    selected_model: str = DEFAULT_OPENAI_MODEL

    # Sampling
    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P

    # Limits
    timeout: float = DEFAULT_TIMEOUT
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`timeout` must be positive")
    """


def default_config(interactive_local: bool = False) -> LLMConfig:
    """Build the default configuration for the running environment.

    Args:
        interactive_local: True when running on the user's own machine, where a
            local Ollama server is the natural default. Otherwise the OpenAI
            API is used.

    Returns:
        LLMConfig: Default configuration.

    Examples:
        default_config(interactive_local=True).provider  # "local"
        default_config().selected_model  # "gpt-4o-mini"
    """
    if interactive_local:
        return LLMConfig(provider="local", selected_model=DEFAULT_LOCAL_MODEL)
    return LLMConfig(provider="openai", selected_model=DEFAULT_OPENAI_MODEL)


# Files searched in each directory, with the tables each may hold.
CONFIG_SOURCES: tuple[tuple[str, tuple[tuple[str, ...], ...]], ...] = (
    ("pyproject.toml", (("tool", "paste2md"),)),
    (".paste2md.toml", (("paste2md",), ("tool", "paste2md"))),
)


def load_config(search_path: Path, interactive_local: bool = False) -> LLMConfig:
    """Load the LLM settings that apply to `search_path`.

    Each directory from `search_path` up to the filesystem root is checked for
    the files in `CONFIG_SOURCES`; the first one holding a paste2md table wins
    and its values are layered over `default_config(interactive_local)`.
    Unreadable or malformed TOML files are ignored.

    Args:
        search_path: Directory where the lookup starts.
        interactive_local: Capability flag forwarded to `default_config`.

    Returns:
        LLMConfig: The configuration, or the defaults when no file applies.

    Raises:
        ConfigError: If the paste2md table is not a table or has unknown keys.

    Examples:
        load_config(Path("notes"), interactive_local=True)
    """
    defaults = default_config(interactive_local)
    start = search_path.resolve()

    for directory in (start, *start.parents):
        for filename, table_paths in CONFIG_SOURCES:
            data = _read_toml(directory / filename)
            if data is None:
                continue
            found = _find_table(data, table_paths)
            if found is not None:
                table_path, table = found
                config = _layer_table(table, defaults, directory / filename, table_path)
                return normalize_config(config)

    return defaults


def _read_toml(path: Path) -> dict | None:
    if not path.is_file():
        return None
    try:
        return tomllib.loads(path.read_text(encoding="UTF-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError):
        return None


def _find_table(
    data: dict, table_paths: tuple[tuple[str, ...], ...]
) -> tuple[tuple[str, ...], object] | None:
    for table_path in table_paths:
        node: object = data
        for key in table_path:
            if not isinstance(node, dict) or key not in node:
                break
            node = node[key]
        else:
            return table_path, node
    return None


def _layer_table(
    table: object, base: LLMConfig, source: Path, table_path: tuple[str, ...]
) -> LLMConfig:
    label = f"`[{'.'.join(table_path)}]` in {source}"
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid {label}: expected a table of settings")

    unknown = sorted(set(table) - {field.name for field in fields(LLMConfig)})
    if unknown:
        raise ConfigError(f"Invalid {label}: unknown keys {', '.join(unknown)}")

    # A provider without a model gets that provider's default model.
    if "provider" in table and "selected_model" not in table:
        provider = _canonical_provider(table["provider"])
        base = replace(base, selected_model=_default_model_for(provider, base.selected_model))

    return replace(base, **table)


def _canonical_provider(provider: object) -> object:
    if isinstance(provider, str):
        return PROVIDER_ALIASES.get(provider, provider)
    return provider


def _default_model_for(provider: object, fallback: str) -> str:
    if provider == "local":
        return DEFAULT_LOCAL_MODEL
    if provider == "openai":
        return DEFAULT_OPENAI_MODEL
    return fallback


def normalize_config(config: LLMConfig) -> LLMConfig:
    provider = _canonical_provider(config.provider)
    server_url = config.server_url
    if isinstance(server_url, str):
        server_url = server_url.rstrip("/")
    return replace(config, provider=provider, server_url=server_url)


def is_valid_server_url(url: str) -> bool:
    """Check that a server URL uses http or https and names a host.

    Examples:
        is_valid_server_url("http://localhost:11434")  # True
        is_valid_server_url("ftp://example.com")  # False
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


def validate_config(config: LLMConfig) -> None:
    """Reject settings the LLM clients cannot work with.

    Args:
        config: Settings to check; aliases are resolved first.

    Raises:
        ConfigError: If the provider is unknown, the server URL is malformed,
            the model name is empty, or numeric values are out of range.

    Examples:
        validate_config(LLMConfig(provider="local"))
    """
    config = normalize_config(config)

    if config.provider not in PROVIDERS:
        raise ConfigError(f"`provider` must be one of: {', '.join(PROVIDERS)}, ollama")
    if not isinstance(config.server_url, str) or not is_valid_server_url(config.server_url):
        raise ConfigError("`server_url` must be an http:// or https:// URL")
    if not isinstance(config.selected_model, str) or not config.selected_model.strip():
        raise ConfigError("`selected_model` must not be empty")

    _check_number("temperature", config.temperature, low=0, high=2)
    _check_number("top_p", config.top_p, low=0, high=1)
    _check_number("timeout", config.timeout, positive=True)
    _check_number("max_file_size", config.max_file_size, positive=True, integer=True)


def apply_overrides(config: LLMConfig, **overrides: object) -> LLMConfig:
    """Layer command-line values over `config`.

    Switching provider without naming a model also switches to that
    provider's default model.

    Args:
        config: Settings loaded from files or defaults.
        overrides: Field values to set; None means "not given" and is skipped.

    Returns:
        LLMConfig: Updated copy, or `config` itself when nothing was given.

    Raises:
        TypeError: If an override name is not defined on `LLMConfig`.

    Examples:
        updated = apply_overrides(config, provider="local", timeout=60)
    """
    given = {name: value for name, value in overrides.items() if value is not None}
    if "provider" in given and "selected_model" not in given:
        provider = _canonical_provider(given["provider"])
        if provider != _canonical_provider(config.provider):
            given["selected_model"] = _default_model_for(provider, config.selected_model)
    return replace(config, **given) if given else config


def build_config(search_path: Path, interactive_local: bool = False, **overrides: object) -> LLMConfig:
    """Resolve the settings for one run: files, then overrides, then checks.

    Args:
        search_path: Directory where the config file lookup starts.
        interactive_local: Capability flag forwarded to `default_config`.
        overrides: Command-line values; None values are skipped.

    Returns:
        LLMConfig: Normalized, validated settings.

    Raises:
        ConfigError: If a config file or the final settings are invalid.

    Examples:
        config = build_config(Path.cwd(), interactive_local=True, timeout=60)
    """
    merged = apply_overrides(load_config(search_path, interactive_local), **overrides)
    merged = normalize_config(merged)
    validate_config(merged)
    return merged


def get_best_available_model(available_models: list[str], provider: str = "local") -> str:
    """Pick the model to use from the ones a server offers.

    OpenAI prefers ``gpt-4o-mini``. Local servers are matched against
    `SUPPORTED_LOCAL_MODELS` in priority order, accepting exact names or
    case-insensitive substring matches.

    Args:
        available_models: Model names reported by the server.
        provider: ``"local"`` or ``"openai"``.

    Returns:
        str: Chosen model; the first available model when none is supported,
        or the provider default when the list is empty.

    Examples:
        get_best_available_model(["mistral:7b", "Phi4:latest"])  # "Phi4:latest"
        get_best_available_model([], provider="openai")  # "gpt-4o-mini"
    """
    provider = _canonical_provider(provider)
    if provider == "openai":
        if DEFAULT_OPENAI_MODEL in available_models:
            return DEFAULT_OPENAI_MODEL
        return available_models[0] if available_models else DEFAULT_OPENAI_MODEL

    for supported_model in SUPPORTED_LOCAL_MODELS:
        for model in available_models:
            if model == supported_model or supported_model.lower() in model.lower():
                return model

    return available_models[0] if available_models else DEFAULT_LOCAL_MODEL


def _check_number(
    name: str,
    value: object,
    low: float | None = None,
    high: float | None = None,
    positive: bool = False,
    integer: bool = False,
) -> None:
    kinds = int if integer else (int, float)
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise ConfigError(f"`{name}` must be {'an integer' if integer else 'a number'}")
    if low is not None and high is not None and not low <= value <= high:
        raise ConfigError(f"`{name}` must be between {low} and {high}")
    if positive and value <= 0:
        raise ConfigError(f"`{name}` must be positive")
