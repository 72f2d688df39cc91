"""Line-level transforms applied to body text."""

from __future__ import annotations

import functools
import re
from collections.abc import Callable
from urllib.parse import urlsplit

from .constants import (
    BARE_URL_PATTERN,
    BOLD_UNDERSCORE_PATTERN,
    BULLET_PATTERN,
    INDENTED_BULLET_PATTERN,
    ITALIC_ASTERISK_PATTERN,
    LONG_LIST_ITEM_LENGTH,
    NESTED_LIST_INDENT,
    NUMBERED_LIST_PATTERN,
    QUOTE_PREFIX,
    QUOTE_START_PATTERN,
    TRAILING_PUNCTUATION_PATTERN,
)

_PLACEHOLDER = "\x00CODE_{}\x00"


def is_escaped(text: str, pos: int) -> bool:
    """Determine whether a character is escaped by preceding backslashes.

    Counts consecutive backslashes immediately before `pos`; an odd count marks
    the character as escaped.

    Examples:
        is_escaped("\\\\`", 2)  # False, two backslashes
        is_escaped("\\`", 1)  # True, one backslash
    """
    backslash_count = 0
    i = pos - 1
    while i >= 0 and text[i] == "\\":
        backslash_count += 1
        i -= 1
    return backslash_count % 2 == 1


def find_inline_code_spans(text: str) -> list[tuple[int, int]]:
    """Locate backtick code spans.

    A span opens with an unescaped run of backticks and closes with the next
    unescaped run of the same length. Unclosed runs are not spans.

    Args:
        text: The line to scan.

    Returns:
        list[tuple[int, int]]: Start (inclusive) and end (exclusive) positions
            for each span.

    Examples:
        find_inline_code_spans("`code`")  # [(0, 6)]
        find_inline_code_spans("``a`b`` text")  # [(0, 7)]
    """
    spans = []
    i = 0

    while i < len(text):
        if text[i] != "`" or is_escaped(text, i):
            i += 1
            continue

        start = i
        while i < len(text) and text[i] == "`":
            i += 1
        opening_length = i - start

        j = i
        while j < len(text):
            if text[j] != "`" or is_escaped(text, j):
                j += 1
                continue
            run_start = j
            while j < len(text) and text[j] == "`":
                j += 1
            if j - run_start == opening_length:
                spans.append((start, j))
                i = j
                break

    return spans


def protect_code_spans(transform: Callable[[str], str]) -> Callable[[str], str]:
    """Wrap a transform so it never rewrites text inside backtick spans.

    Spans are swapped for placeholders before the transform runs and restored
    afterwards.
    """

    @functools.wraps(transform)
    def wrapper(line: str) -> str:
        spans = find_inline_code_spans(line)
        if not spans:
            return transform(line)

        parts = []
        code_texts = []
        offset = 0
        for start, end in spans:
            parts.append(line[offset:start])
            parts.append(_PLACEHOLDER.format(len(code_texts)))
            code_texts.append(line[start:end])
            offset = end
        parts.append(line[offset:])

        transformed = transform("".join(parts))
        for index, code_text in enumerate(code_texts):
            transformed = transformed.replace(_PLACEHOLDER.format(index), code_text)
        return transformed

    return wrapper


def normalize_numbered_list(line: str) -> str:
    """Rewrite ``N)`` / ``N.`` items as ``N. `` when they read like list items.

    Only long items (over 80 characters) or items ending in punctuation are
    rewritten; short unpunctuated ones may be numbered headings and stay as
    they are.

    Examples:
        normalize_numbered_list("2)  Whisk the eggs.")  # "2. Whisk the eggs."
        normalize_numbered_list("2) Results")  # unchanged
    """
    match = NUMBERED_LIST_PATTERN.match(line)
    if not match:
        return line

    indent, number, content = match.groups()
    if len(content) > LONG_LIST_ITEM_LENGTH or TRAILING_PUNCTUATION_PATTERN.search(content):
        return f"{indent}{number}. {content}"
    return line


def normalize_bullet(line: str) -> str:
    """Replace a leading bullet glyph or ``*`` with ``- ``.

    Examples:
        normalize_bullet("• First")  # "- First"
    """
    return BULLET_PATTERN.sub(r"- \1", line)


def nest_indented_bullet(line: str) -> str:
    """Turn an indented bullet into a nested list item.

    Every two characters of original indentation become one nesting level of
    two spaces.

    Examples:
        nest_indented_bullet("  ◦ Child")  # "  - Child"
        nest_indented_bullet(" ◦ Child")  # "- Child"
    """
    match = INDENTED_BULLET_PATTERN.match(line)
    if not match:
        return line

    indent, content = match.groups()
    return f"{NESTED_LIST_INDENT * (len(indent) // 2)}- {content}"


def _link_for_url(match: re.Match[str]) -> str:
    url = match.group(0)
    try:
        parts = urlsplit(url)
        # .port raises ValueError for a malformed port
        host, _port = parts.hostname, parts.port
    except ValueError:
        return url

    if not host:
        return url
    return f"[{host.removeprefix('www.')}]({url})"


@protect_code_spans
def linkify_urls(line: str) -> str:
    """Rewrite bare http(s) URLs as ``[host](url)`` links.

    URLs directly inside ``[...]`` or ``(...)`` are assumed to be part of an
    existing Markdown link and left alone, as are URLs without a usable host.

    Examples:
        linkify_urls("See https://www.example.com/page")  # "See [example.com](https://www.example.com/page)"
    """
    return BARE_URL_PATTERN.sub(_link_for_url, line)


@protect_code_spans
def normalize_emphasis(line: str) -> str:
    """Normalize bold to ``**text**`` and italics to ``_text_``.

    ``__text__`` becomes ``**text**`` and a lone ``*text*`` becomes ``_text_``.
    Text already written as ``**text**`` or ``_text_`` is left as is.
    """
    line = BOLD_UNDERSCORE_PATTERN.sub(r"**\1**", line)
    return ITALIC_ASTERISK_PATTERN.sub(r"_\1_", line)


def quote_line(line: str, original: str) -> str:
    """Prefix the line with ``> `` when the original text opens with a quote mark."""
    if QUOTE_START_PATTERN.match(original.strip()):
        return f"{QUOTE_PREFIX}{line.strip()}"
    return line


# Applied in order to every body line.
BODY_LINE_TRANSFORMS: tuple[tuple[str, Callable[[str], str]], ...] = (
    ("numbered-list", normalize_numbered_list),
    ("bullet", normalize_bullet),
    ("nested-bullet", nest_indented_bullet),
    ("link", linkify_urls),
    ("emphasis", normalize_emphasis),
)


def transform_body_line(line: str) -> str:
    """Apply every body transform to a line that is not a heading.

    Args:
        line: The untrimmed line.

    Returns:
        str: The Markdown rendition of the line.

    Examples:
        transform_body_line("• Read __this__ first")  # "- Read **this** first"
        transform_body_line('"Quoted," she said.')  # '> "Quoted," she said.'
    """
    processed = line
    for _, transform in BODY_LINE_TRANSFORMS:
        processed = transform(processed)
    return quote_line(processed, line)
