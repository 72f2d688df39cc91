"""Constants used across the paste2md package."""

from __future__ import annotations

import re

# Block detection
CODE_FENCE = "```"
INDENT_PATTERN = re.compile(r"^(?:    |\t)")
SEGMENT_SPLIT_PATTERN = re.compile(r"\s{2,}|\t+")
TABLE_SEPARATOR_CELL = "---"
UPPERCASE_START_PATTERN = re.compile(r"^[A-Z]")

# Input and output cleanup
LEADING_BLANK_LINES_PATTERN = re.compile(r"\A(?:[^\S\n]*\n)+")
EXCESS_BLANK_LINES_PATTERN = re.compile(r"\n{3,}")

# Heading heuristics
MAX_HEADING_LENGTH = 80
TRAILING_PUNCTUATION_PATTERN = re.compile(r"[.!?,;]$")
ALL_CAPS_PATTERN = re.compile(r"[A-Z][A-Z\s]+[A-Z]")
TITLE_CASE_PATTERN = re.compile(r"[A-Z][a-zA-Z\s]+")
TITLE_CASE_SHORT_WORD_LENGTH = 3
INTRODUCTORY_PATTERN = re.compile(r"[^:]+:")
NUMBERED_SECTION_PATTERN = re.compile(r"\d+\.\s+[A-Z][^.!?]*")

# Body line transforms
LONG_LIST_ITEM_LENGTH = 80
NUMBERED_LIST_PATTERN = re.compile(r"^(\s*)(\d+)[.)]\s+(.+)$")
BULLET_GLYPHS = "•·▪▫◦‣⁃*"
BULLET_PATTERN = re.compile(rf"^[{BULLET_GLYPHS}]\s+(.+)$")
INDENTED_BULLET_PATTERN = re.compile(rf"^(\s+)[{BULLET_GLYPHS}]\s+(.+)$")
NESTED_LIST_INDENT = "  "
BARE_URL_PATTERN = re.compile(r"""(?<!\[)(?<!\()https?://[^\s<>"{}|\\^\[\]`()\x00]++(?!\))""")
BOLD_UNDERSCORE_PATTERN = re.compile(r"__(.+?)__")
ITALIC_ASTERISK_PATTERN = re.compile(r"(?<!\*)\*([^*]+)\*(?!\*)")
QUOTE_START_PATTERN = re.compile(r"^[\"']")
QUOTE_PREFIX = "> "

# Input limits
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

# LLM defaults
DEFAULT_SERVER_URL = "http://localhost:11434"
DEFAULT_LOCAL_MODEL = "llama3.1:8b"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_TOP_P = 0.9
DEFAULT_TIMEOUT = 30.0
CONNECTION_CHECK_TIMEOUT = 10.0
OPENAI_API_URL = "https://api.openai.com/v1"
OPENAI_KEY_ENV_VAR = "OPENAI_KEY"

# Local models in fallback priority order
SUPPORTED_LOCAL_MODELS = (
    "llama3.1:8b",
    "llama3.1:latest",
    "llama3:8b",
    "llama3:latest",
    "phi4:latest",
    "phi4",
    "devstral:latest",
    "devstral",
    "qwen2.5:7b",
    "qwen2.5:latest",
    "mistral:7b",
    "mistral:latest",
)

OPENAI_MODELS = (
    ("gpt-4o-mini", "GPT-4o Mini", "Fast and affordable"),
    ("gpt-4o", "GPT-4o", "Most capable model"),
    ("gpt-3.5-turbo", "GPT-3.5 Turbo", "Legacy model"),
)
