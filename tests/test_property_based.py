from __future__ import annotations

import re
import string

from hypothesis import given
from hypothesis import strategies as st

from paste2md.converter import convert, split_segments
from paste2md.inline import find_inline_code_spans, linkify_urls

WORD_PATTERN = re.compile(r"[A-Za-z0-9]+")

words = st.text(alphabet=string.ascii_lowercase, min_size=1, max_size=8)
plain_text = st.text(alphabet=string.ascii_letters + string.digits + " \n", max_size=300)


@given(st.text())
def test_convert_never_raises_and_is_deterministic(text: str):
    first = convert(text)
    assert isinstance(first, str)
    assert convert(text) == first


@given(st.text())
def test_output_has_no_runs_of_blank_lines(text: str):
    assert "\n\n\n" not in convert(text)


@given(st.text().filter(lambda text: "\r" not in text))
def test_crlf_and_lf_inputs_convert_identically(text: str):
    assert convert(text.replace("\n", "\r\n")) == convert(text)


@given(plain_text)
def test_words_are_preserved_in_order(text: str):
    assert WORD_PATTERN.findall(convert(text)) == WORD_PATTERN.findall(text)


code_block = st.lists(words, min_size=1, max_size=3).map(
    lambda lines: ("code", ["    " + line for line in lines])
)
table_block = st.integers(min_value=2, max_value=4).flatmap(
    lambda columns: st.lists(
        st.lists(words, min_size=columns, max_size=columns), min_size=2, max_size=4
    )
).map(lambda rows: ("table", ["  ".join(row) for row in rows]))


@given(st.lists(st.one_of(code_block, table_block), min_size=1, max_size=6))
def test_code_blocks_and_tables_never_nest(blocks):
    text = "\n\n".join("\n".join(lines) for _, lines in blocks)

    output_lines = convert(text).split("\n")

    in_code = False
    fenced: list[list[str]] = []
    table_rows: list[str] = []
    for line in output_lines:
        if line == "```":
            if not in_code:
                fenced.append([])
            in_code = not in_code
        elif in_code:
            assert "|" not in line
            fenced[-1].append(line)
        elif line.startswith("| "):
            table_rows.append(line)

    assert not in_code
    assert fenced == [
        [line.strip() for line in lines] for kind, lines in blocks if kind == "code"
    ]
    expected_rows = [line for kind, lines in blocks if kind == "table" for line in lines]
    assert [" ".join(split_segments(row)) for row in table_rows] == [
        " ".join(split_segments(row)) for row in expected_rows
    ]


@given(st.text())
def test_linkify_keeps_code_spans_intact(line: str):
    spans = [line[start:end] for start, end in find_inline_code_spans(line)]
    linked = linkify_urls(line)
    for span in spans:
        assert span in linked
