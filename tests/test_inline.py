import pytest

from paste2md.inline import (
    BODY_LINE_TRANSFORMS,
    find_inline_code_spans,
    is_escaped,
    linkify_urls,
    nest_indented_bullet,
    normalize_bullet,
    normalize_emphasis,
    normalize_numbered_list,
    protect_code_spans,
    quote_line,
    transform_body_line,
)


def test_body_transforms_run_in_order():
    assert [name for name, _ in BODY_LINE_TRANSFORMS] == [
        "numbered-list",
        "bullet",
        "nested-bullet",
        "link",
        "emphasis",
    ]


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("1) Mix the flour and water.", "1. Mix the flour and water."),
        ("2.   Whisk the eggs!", "2. Whisk the eggs!"),
        ("  3) Indented item;", "  3. Indented item;"),
        ("2) Results", "2) Results"),
        ("10. Chapter Ten", "10. Chapter Ten"),
        ("Not a list.", "Not a list."),
    ],
)
def test_normalize_numbered_list(line, expected):
    assert normalize_numbered_list(line) == expected


def test_normalize_numbered_list_rewrites_long_items():
    content = "word " * 20
    assert normalize_numbered_list(f"4)  {content.strip()}") == f"4. {content.strip()}"


@pytest.mark.parametrize("glyph", list("•·▪▫◦‣⁃*"))
def test_normalize_bullet_handles_every_glyph(glyph):
    assert normalize_bullet(f"{glyph} Item") == "- Item"


def test_normalize_bullet_leaves_indented_bullets_for_nesting():
    assert normalize_bullet("  ◦ Child") == "  ◦ Child"


def test_normalize_bullet_requires_space_after_glyph():
    assert normalize_bullet("*bold*") == "*bold*"


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("  ◦ Child", "  - Child"),
        ("    ▪ Grandchild", "    - Grandchild"),
        (" • Shallow", "- Shallow"),
        ("- Already markdown", "- Already markdown"),
    ],
)
def test_nest_indented_bullet(line, expected):
    assert nest_indented_bullet(line) == expected


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        (
            "Visit https://www.example.com/page for info",
            "Visit [example.com](https://www.example.com/page) for info",
        ),
        ("Go to http://docs.python.org", "Go to [docs.python.org](http://docs.python.org)"),
        (
            "Two: https://a.io and https://b.io/x",
            "Two: [a.io](https://a.io) and [b.io](https://b.io/x)",
        ),
        ("Host https://wwwexample.com", "Host [wwwexample.com](https://wwwexample.com)"),
    ],
)
def test_linkify_urls(line, expected):
    assert linkify_urls(line) == expected


@pytest.mark.parametrize(
    "line",
    [
        "[docs](https://example.com/docs)",
        "[https://example.com]",
        "(see https://example.com)",
        "http://:80/path",
        "https://example.com:99999",
        "Run `curl https://example.com` first",
    ],
)
def test_linkify_urls_leaves_line_unchanged(line):
    assert linkify_urls(line) == line


def test_normalize_emphasis():
    assert normalize_emphasis("This is __important__ and *subtle*.") == (
        "This is **important** and _subtle_."
    )


@pytest.mark.parametrize(
    "line",
    [
        "Already **bold** here",
        "Already _italic_ here",
        "Run `a*b*c` now",
        "Call `__init__` first",
        "2 * 3 = 6",
    ],
)
def test_normalize_emphasis_leaves_line_unchanged(line):
    assert normalize_emphasis(line) == line


def test_quote_line_checks_original_text():
    assert quote_line("'Hi,' she said.", "  'Hi,' she said.") == "> 'Hi,' she said."
    assert quote_line("Plain", "Plain") == "Plain"


def test_transform_body_line_combines_rules():
    assert transform_body_line("• Read __this__ at https://example.com") == (
        "- Read **this** at [example.com](https://example.com)"
    )


def test_transform_body_line_quotes_after_transforms():
    assert transform_body_line('"See *this*," he wrote.') == '> "See _this_," he wrote.'


def test_transform_body_line_keeps_blank_lines():
    assert transform_body_line("") == ""


@pytest.mark.parametrize(
    ("text", "pos", "expected"),
    [
        ("`", 0, False),
        ("\\`", 1, True),
        ("\\\\`", 2, False),
    ],
)
def test_is_escaped(text, pos, expected):
    assert is_escaped(text, pos) is expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("`code`", [(0, 6)]),
        ("``a`b`` text", [(0, 7)]),
        ("a `b` c `d`", [(2, 5), (8, 11)]),
        ("`unclosed", []),
        ("\\`not code`", []),
    ],
)
def test_find_inline_code_spans(text, expected):
    assert find_inline_code_spans(text) == expected


def test_protect_code_spans_restores_spans():
    calls = []

    @protect_code_spans
    def shout(line: str) -> str:
        calls.append(line)
        return line.upper()

    assert shout("say `quiet` loudly") == "SAY `quiet` LOUDLY"
    assert "`quiet`" not in calls[0]
    assert shout.__name__ == "shout"
