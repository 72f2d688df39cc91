"""Heading detection for plain-text lines."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .constants import (
    ALL_CAPS_PATTERN,
    INTRODUCTORY_PATTERN,
    MAX_HEADING_LENGTH,
    NUMBERED_SECTION_PATTERN,
    TITLE_CASE_PATTERN,
    TITLE_CASE_SHORT_WORD_LENGTH,
    TRAILING_PUNCTUATION_PATTERN,
)
from .models import LineContext


def is_heading_candidate(ctx: LineContext) -> bool:
    """Check the generic shape test shared by Title Case headings.

    A candidate is non-empty, shorter than 80 characters, does not end in
    ``. ! ? , ;``, is followed by a non-blank line, and is either the first
    line or preceded by a blank line.

    Args:
        ctx: Line under inspection with its neighbours.

    Returns:
        bool: True when the line could be a heading.

    Examples:
        is_heading_candidate(LineContext("Overview", next_line="Body", is_first_line=True))  # True
        is_heading_candidate(LineContext("Overview", next_line=""))  # False
    """
    stripped = ctx.stripped
    return (
        0 < len(stripped) < MAX_HEADING_LENGTH
        and not TRAILING_PUNCTUATION_PATTERN.search(stripped)
        and ctx.next_line.strip() != ""
        and (ctx.is_first_line or ctx.previous_line.strip() == "")
    )


def is_title_case(text: str) -> bool:
    """Check whether every word is capitalized, ignoring words of three characters or fewer.

    Only ASCII letters and whitespace are allowed, and the first character must
    be an uppercase letter.

    Examples:
        is_title_case("Getting Started")  # True
        is_title_case("Tips and Tricks")  # True, "and" is short
        is_title_case("Getting started")  # False
    """
    if not TITLE_CASE_PATTERN.fullmatch(text):
        return False
    return all(
        len(word) <= TITLE_CASE_SHORT_WORD_LENGTH or word[0].isupper() for word in text.split(" ")
    )


def is_all_caps(text: str) -> bool:
    return ALL_CAPS_PATTERN.fullmatch(text) is not None


def _all_caps(ctx: LineContext) -> bool:
    return is_all_caps(ctx.stripped)


def _title_on_first_line(ctx: LineContext) -> bool:
    return ctx.is_first_line and is_heading_candidate(ctx) and is_title_case(ctx.stripped)


def _title(ctx: LineContext) -> bool:
    return is_heading_candidate(ctx) and is_title_case(ctx.stripped)


def _introductory(ctx: LineContext) -> bool:
    # Independent of the candidate test: "Ingredients:" directly above a list.
    return (
        INTRODUCTORY_PATTERN.fullmatch(ctx.stripped) is not None
        and ctx.next_line.strip() != ""
    )


def _numbered_section(ctx: LineContext) -> bool:
    return NUMBERED_SECTION_PATTERN.fullmatch(ctx.stripped) is not None


@dataclass(frozen=True)
class HeadingRule:
    """A named heading predicate and the Markdown prefix it produces.

    Attributes:
        name: Identifier used in tests and diagnostics.
        matches: Predicate evaluated against the line context.
        prefix: Heading marker, such as ``"#"`` or ``"##"``.
    """

    name: str
    matches: Callable[[LineContext], bool]
    prefix: str

    def render(self, ctx: LineContext) -> str:
        return f"{self.prefix} {ctx.stripped}"


# Evaluated top to bottom; the first match wins.
HEADING_RULES: tuple[HeadingRule, ...] = (
    HeadingRule("all-caps", _all_caps, "#"),
    HeadingRule("first-line-title", _title_on_first_line, "#"),
    HeadingRule("title", _title, "##"),
    HeadingRule("introductory", _introductory, "##"),
    HeadingRule("numbered-section", _numbered_section, "###"),
)


def match_heading(
    ctx: LineContext, rules: tuple[HeadingRule, ...] = HEADING_RULES
) -> HeadingRule | None:
    """Return the first heading rule that matches the line, if any.

    Args:
        ctx: Line under inspection with its neighbours.
        rules: Ordered rules to evaluate. Defaults to `HEADING_RULES`.

    Returns:
        HeadingRule | None: The winning rule, or None when the line is body text.

    Examples:
        match_heading(LineContext("SUMMARY")).name  # "all-caps"
        match_heading(LineContext("1. Overview")).name  # "numbered-section"
    """
    for rule in rules:
        if rule.matches(ctx):
            return rule
    return None


def render_heading(ctx: LineContext) -> str | None:
    """Render the line as a Markdown heading, or return None for body text."""
    rule = match_heading(ctx)
    if rule is None:
        return None
    return rule.render(ctx)
