"""Turn fetched HTML into plain text suitable for a tool result."""

import re

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?(?:</\1\s*>|\Z)", re.IGNORECASE | re.DOTALL)
_COMMENT_RE = re.compile(r"<!--.*?(?:-->|\Z)", re.DOTALL)
_PARAGRAPH_END_RE = re.compile(r"</p\s*>", re.IGNORECASE)
_LINE_BREAK_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_END_RE = re.compile(
    r"</(?:div|h[1-6]|tr|blockquote|pre|ul|ol|table|section|article|header|footer)\s*>",
    re.IGNORECASE,
)
_LIST_ITEM_RE = re.compile(r"<li\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_HORIZONTAL_WS_RE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE_RE = re.compile(r" ?\n ?")
_BLANK_LINES_RE = re.compile(r"\n{3,}")

# &amp; goes last so "&amp;lt;" decodes to "&lt;" rather than "<"
_ENTITIES = (
    ("&nbsp;", " "),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&#x27;", "'"),
    ("&apos;", "'"),
    ("&amp;", "&"),
)


def decode_entities(text: str) -> str:
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text


def render_html(markup: str) -> str:
    """Strip markup from ``markup`` and return normalized plain text.

    Script and style blocks are dropped with their content before any other
    tag handling. Paragraph ends become blank lines, line breaks and other
    block ends become newlines and list items become ``- `` bullets. Never
    raises; empty or markup-only input gives an empty string.
    """
    if not markup:
        return ""
    text = markup.replace("\r\n", "\n").replace("\r", "\n")
    text = _SCRIPT_STYLE_RE.sub("", text)
    text = _COMMENT_RE.sub("", text)
    text = _PARAGRAPH_END_RE.sub("\n\n", text)
    text = _LINE_BREAK_RE.sub("\n", text)
    text = _BLOCK_END_RE.sub("\n", text)
    text = _LIST_ITEM_RE.sub("\n- ", text)
    text = _TAG_RE.sub("", text)
    text = decode_entities(text)
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE_RE.sub("\n", text)
    text = _BLANK_LINES_RE.sub("\n\n", text)
    return text.strip()
