"""Body cleaning and excerpt generation (pure text transforms)."""

import re

EXCERPT_MAX_LENGTH = 160
ELLIPSIS = "..."

_RESIDUAL_HEADER = re.compile(r"\A\s*---.*?---\s*", re.DOTALL)
_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_EXTRA_NEWLINES = re.compile(r"\n{3,}")

# Ordered: code fences must go before inline code and residual markers.
_MARKUP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"```.*?```", re.DOTALL), ""),
    (re.compile(r"<[^>]*>"), ""),
    (re.compile(r"#{1,6}\s"), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"!?\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"[#*>`]"), ""),
    (re.compile(r"\s+"), " "),
)


def clean_body(body: str) -> str:
    """
    Clean a document body before persisting it.

    - strips a residual header block left at the top of the body
    - strips HTML comments
    - trims every line
    - collapses 3+ consecutive newlines into a single blank line
    """
    text = _RESIDUAL_HEADER.sub("", body, count=1)
    text = _HTML_COMMENT.sub("", text)
    text = "\n".join(line.strip() for line in text.splitlines())
    text = _EXTRA_NEWLINES.sub("\n\n", text)
    return text.strip()


def strip_markup(text: str) -> str:
    """Reduce Markdown/HTML to plain text on a single line."""
    for pattern, repl in _MARKUP_RULES:
        text = pattern.sub(repl, text)
    return text.strip()


def make_excerpt(body: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """
    Build a plain-text excerpt, truncated on a word boundary.

    Examples:
        >>> make_excerpt("# Title\\n\\nSome **bold** text.")
        'Title Some bold text.'
    """
    plain = strip_markup(body)
    if len(plain) <= max_length:
        return plain

    cut = plain[:max_length]
    # Drop the trailing partial word, if any
    if not plain[max_length].isspace():
        cut = re.sub(r"\s+\S*$", "", cut)
    return cut.rstrip() + ELLIPSIS
