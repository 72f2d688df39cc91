"""Data models for paste2md."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto


class BlockMode(Enum):
    """Block-level modes used while scanning pasted text.

    Exactly one mode is active for any line; code blocks and tables never
    overlap.

    Attributes:
        NORMAL: Default mode; lines go through heading and inline rules.
        CODE_BLOCK: Collecting indented lines for a fenced code block.
        TABLE: Collecting column-aligned lines for a pipe table.
    """

    NORMAL = auto()
    CODE_BLOCK = auto()
    TABLE = auto()


@dataclass
class ConverterContext:
    """Mutable state for a single conversion call.

    Attributes:
        mode: Current block-level mode.
        code_lines: Buffered code block lines with their indentation removed.
        table_rows: Buffered pipe-table rows, separator included.
        output: Finalized Markdown lines in source order.
    """

    mode: BlockMode = BlockMode.NORMAL
    code_lines: list[str] = field(default_factory=list)
    table_rows: list[str] = field(default_factory=list)
    output: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class LineContext:
    """A line together with the neighbours heading rules look at.

    Attributes:
        line: The untrimmed line.
        previous_line: The line before it, or an empty string.
        next_line: The line after it, or an empty string.
        is_first_line: Whether the line is the first line of input.
    """

    line: str
    previous_line: str = ""
    next_line: str = ""
    is_first_line: bool = False

    @property
    def stripped(self) -> str:
        return self.line.strip()


@dataclass
class LLMModel:
    """A model advertised by an LLM server.

    Attributes:
        name: Model identifier used in requests.
        size: Size in bytes, when the server reports it.
        modified_at: Last modification timestamp reported by the server.
        digest: Content digest reported by the server.
        details: Free-form metadata such as family or quantization level.
    """

    name: str
    size: int | None = None
    modified_at: str | None = None
    digest: str | None = None
    details: dict[str, object] = field(default_factory=dict)


@dataclass
class ConnectionStatus:
    """Outcome of probing an LLM server.

    Attributes:
        available: Whether the server answered.
        models: Names of the models the server offers.
        selected_model: Model that would be used, or None when none is available.
        error: Human-readable reason when the server is unavailable.
    """

    available: bool
    models: list[str] = field(default_factory=list)
    selected_model: str | None = None
    error: str | None = None


@dataclass
class EnhanceResult:
    """Markdown produced for a piece of pasted text.

    Attributes:
        markdown: The Markdown text.
        enhanced: True when the LLM produced the text, False for the heuristic converter.
        error: Reason the LLM output was not used, if it was requested.
    """

    markdown: str
    enhanced: bool = False
    error: str | None = None
