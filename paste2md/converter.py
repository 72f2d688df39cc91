"""Heuristic plain-text to Markdown conversion."""

from __future__ import annotations

from collections import deque

from .constants import (
    CODE_FENCE,
    EXCESS_BLANK_LINES_PATTERN,
    INDENT_PATTERN,
    LEADING_BLANK_LINES_PATTERN,
    SEGMENT_SPLIT_PATTERN,
    TABLE_SEPARATOR_CELL,
    UPPERCASE_START_PATTERN,
)
from .headings import render_heading
from .inline import transform_body_line
from .models import BlockMode, ConverterContext, LineContext


def normalize_input(text: str) -> str:
    """Normalize line endings and drop surrounding blank space.

    Trailing whitespace and leading blank lines are removed; indentation of the
    first content line is kept so an indented opening line still starts a code
    block.

    Examples:
        normalize_input("\\r\\n\\n    code\\r\\n")  # "    code"
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return LEADING_BLANK_LINES_PATTERN.sub("", text.rstrip())


def collapse_blank_lines(markdown: str) -> str:
    """Collapse runs of three or more newlines to exactly two."""
    return EXCESS_BLANK_LINES_PATTERN.sub("\n\n", markdown)


def is_indented(line: str) -> bool:
    """Check whether a line opens with four spaces or a tab."""
    return INDENT_PATTERN.match(line) is not None


def strip_indent(line: str) -> str:
    """Remove one level of code indentation (four spaces or one tab)."""
    return INDENT_PATTERN.sub("", line, count=1)


def split_segments(line: str) -> list[str]:
    """Split a line into table cells.

    Lines containing ``|`` are split on pipes; other lines are split on runs of
    two or more whitespace characters or tabs. Segments are trimmed and empty
    ones dropped.

    Args:
        line: Line to tokenize.

    Returns:
        list[str]: The non-empty, trimmed segments.

    Examples:
        split_segments("| a | b |")  # ["a", "b"]
        split_segments("Name    Age")  # ["Name", "Age"]
        split_segments("plain text")  # ["plain text"]
    """
    if "|" in line:
        pieces = line.split("|")
    else:
        pieces = SEGMENT_SPLIT_PATTERN.split(line)
    return [piece.strip() for piece in pieces if piece.strip()]


def looks_like_table_row(segments: list[str], previous_line: str, next_line: str) -> bool:
    """Decide whether a tokenized line starts a table.

    The line needs two or more segments, and either a neighbour with the same
    segment count or two neighbours that both have two or more segments.

    Examples:
        looks_like_table_row(["a", "b"], "", "c  d")  # True
        looks_like_table_row(["a", "b"], "", "")  # False
    """
    if len(segments) < 2:
        return False

    previous_count = len(split_segments(previous_line))
    next_count = len(split_segments(next_line))
    return (
        len(segments) in (previous_count, next_count)
        or (previous_count > 1 and next_count > 1)
    )


def format_table_row(cells: list[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def format_separator_row(cell_count: int) -> str:
    return "|" + "|".join([TABLE_SEPARATOR_CELL] * cell_count) + "|"


def _emit_code_block(ctx: ConverterContext) -> None:
    ctx.output.append(CODE_FENCE)
    ctx.output.extend(ctx.code_lines)
    ctx.output.append(CODE_FENCE)
    ctx.code_lines = []
    ctx.mode = BlockMode.NORMAL


def _emit_table(ctx: ConverterContext) -> None:
    ctx.output.extend(ctx.table_rows)
    ctx.table_rows = []
    ctx.mode = BlockMode.NORMAL


def _try_enter_code_block(ctx: ConverterContext, line: str) -> bool:
    """Start a code block when an indented line appears outside any block.

    Args:
        ctx: Converter context to update.
        line: Current line.

    Returns:
        bool: True when the line opened a code block.

    Examples:
        _try_enter_code_block(ConverterContext(), "    x = 1")  # True
    """
    if ctx.mode is not BlockMode.NORMAL or not is_indented(line):
        return False

    ctx.mode = BlockMode.CODE_BLOCK
    ctx.code_lines = [strip_indent(line)]
    return True


def _try_continue_code_block(ctx: ConverterContext, line: str) -> bool:
    if ctx.mode is not BlockMode.CODE_BLOCK or not is_indented(line):
        return False

    ctx.code_lines.append(strip_indent(line))
    return True


def _try_close_code_block(ctx: ConverterContext, line: str) -> bool:
    """Close the open code block on the first non-indented line.

    Args:
        ctx: Converter context describing the open block.
        line: Current line.

    Returns:
        bool: True when the block was emitted; the caller must reprocess the
            line in normal mode.
    """
    if ctx.mode is not BlockMode.CODE_BLOCK or is_indented(line):
        return False

    _emit_code_block(ctx)
    return True


def _try_enter_table(
    ctx: ConverterContext,
    segments: list[str],
    previous_line: str,
    next_line: str,
    is_first_line: bool,
) -> bool:
    """Start a table when the line looks like a row of tabular data.

    A header separator row follows the first row when the table opens the
    input, or when the previous line is blank and some cell is capitalized.

    Args:
        ctx: Converter context to update.
        segments: Cells of the current line.
        previous_line: Line before the current one, or an empty string.
        next_line: Line after the current one, or an empty string.
        is_first_line: Whether the current line is the first input line.

    Returns:
        bool: True when the line opened a table.
    """
    if ctx.mode is not BlockMode.NORMAL:
        return False
    if not looks_like_table_row(segments, previous_line, next_line):
        return False

    ctx.mode = BlockMode.TABLE
    ctx.table_rows = [format_table_row(segments)]

    is_header = previous_line.strip() == "" and any(
        UPPERCASE_START_PATTERN.match(cell) for cell in segments
    )
    if is_first_line or is_header:
        ctx.table_rows.append(format_separator_row(len(segments)))
    return True


def _try_continue_table(ctx: ConverterContext, segments: list[str]) -> bool:
    if ctx.mode is not BlockMode.TABLE or len(segments) < 2:
        return False

    ctx.table_rows.append(format_table_row(segments))
    return True


def _try_close_table(ctx: ConverterContext, line: str) -> bool:
    """Flush the open table when a line no longer looks like a row.

    A non-blank terminating line is followed by one blank line in the output
    and must be reprocessed by the caller; a blank terminating line is consumed.

    Args:
        ctx: Converter context describing the open table.
        line: Current line.

    Returns:
        bool: True when the table was emitted.
    """
    if ctx.mode is not BlockMode.TABLE:
        return False

    _emit_table(ctx)
    if line.strip():
        ctx.output.append("")
    return True


def _flush_open_block(ctx: ConverterContext) -> None:
    """Emit whatever block is still open when the input ends."""
    if ctx.mode is BlockMode.CODE_BLOCK:
        _emit_code_block(ctx)
    elif ctx.mode is BlockMode.TABLE:
        _emit_table(ctx)


def convert_line(line_ctx: LineContext) -> str:
    """Render a normal-mode line as a heading or transformed body text."""
    heading = render_heading(line_ctx)
    if heading is not None:
        return heading
    return transform_body_line(line_ctx.line)


def _process_line(ctx: ConverterContext, lines: list[str], index: int) -> bool:
    """Process one line under the current block mode.

    Returns:
        bool: True when a block was closed and the same line must be processed
            again in normal mode.
    """
    line = lines[index]
    previous_line = lines[index - 1] if index > 0 else ""
    next_line = lines[index + 1] if index + 1 < len(lines) else ""

    # Code block detection takes precedence over tables.
    if _try_enter_code_block(ctx, line) or _try_continue_code_block(ctx, line):
        return False
    if _try_close_code_block(ctx, line):
        return True

    segments = split_segments(line)
    if _try_enter_table(ctx, segments, previous_line, next_line, is_first_line=index == 0):
        return False
    if _try_continue_table(ctx, segments):
        return False
    if _try_close_table(ctx, line):
        return line.strip() != ""

    ctx.output.append(
        convert_line(
            LineContext(
                line=line,
                previous_line=previous_line,
                next_line=next_line,
                is_first_line=index == 0,
            )
        )
    )
    return False


def convert(text: str) -> str:
    """Convert unstructured text into Markdown.

    Scans the lines once, collecting indented runs into fenced code blocks and
    column-aligned runs into pipe tables, and rewriting the remaining lines as
    headings, lists, links, emphasis, and block quotes. A line that closes a
    block is pushed back onto the work list and processed again in normal mode.

    The conversion is deterministic and never raises for string input.

    Args:
        text: Pasted plain text.

    Returns:
        str: Markdown text with at most one blank line between blocks.

    Examples:
        convert("INTRODUCTION\\n\\nSome text")  # "# INTRODUCTION\\n\\nSome text"
        convert("    a\\n    b")  # "```\\na\\nb\\n```"
    """
    lines = normalize_input(text).split("\n")
    ctx = ConverterContext()

    pending = deque(range(len(lines)))
    while pending:
        index = pending.popleft()
        if _process_line(ctx, lines, index):
            pending.appendleft(index)

    _flush_open_block(ctx)
    return collapse_blank_lines("\n".join(ctx.output))
