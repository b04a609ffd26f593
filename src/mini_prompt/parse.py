"""
Helpers for extracting structured data from model output.

Three extraction styles are supported:
- markdown code blocks, optionally filtered by language
- a class label on an ``answer: <label>`` line
- the body of ``<key>...</key>`` tagged spans

Example:
    >>> text = await caller.simple_call(
    ...     "What's 2+2? Output the final answer as JSON in a ```json code block."
    ... )
    >>> payload = json.loads(markdown_codeblock(text, MarkdownOptions.json()))
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Optional, Tuple

from markdown_it import MarkdownIt
from markdown_it.token import Token

_CODE_TOKENS = ("fence", "code_block")

_markdown = MarkdownIt("commonmark")


# =============================================================================
# Markdown code blocks
# =============================================================================


@dataclass(frozen=True)
class MarkdownOptions:
    """
    Describes how to extract a code block from a block of text.

    Attributes:
        from_back: Search from the end of the document (trailing block wins).
        lang: Language tag the block must carry; None selects blocks
            without any language tag.
    """

    from_back: bool = True
    lang: Optional[str] = None

    @classmethod
    def json(cls) -> "MarkdownOptions":
        return cls(lang="json")

    @classmethod
    def python(cls) -> "MarkdownOptions":
        return cls(lang="python")

    @classmethod
    def untagged(cls) -> "MarkdownOptions":
        return cls(lang=None)

    @classmethod
    def for_lang(cls, lang: str) -> "MarkdownOptions":
        return cls(lang=lang)

    def leading(self) -> "MarkdownOptions":
        """Copy of these options searching from the start of the document."""
        return replace(self, from_back=False)


def _block_lang(token: Token) -> Optional[str]:
    info = token.info.strip() if token.info else ""
    return info.split()[0] if info else None


def _block_text(token: Token) -> str:
    content = token.content
    return content[:-1] if content.endswith("\n") else content


def code_blocks(text: str) -> List[Tuple[Optional[str], str]]:
    """Return ``(lang, content)`` for every code block, in document order."""
    return [
        (_block_lang(token), _block_text(token))
        for token in _markdown.parse(text)
        if token.type in _CODE_TOKENS
    ]


def markdown_codeblock(text: str, opts: MarkdownOptions) -> Optional[str]:
    """
    Extract a leading or trailing markdown code block.

    With ``opts.lang`` set, only blocks tagged with exactly that language
    qualify. Without it, only blocks carrying no language tag qualify.

    Returns:
        The block content, or None when no block qualifies.
    """
    blocks = code_blocks(text)
    if opts.from_back:
        blocks.reverse()
    for lang, content in blocks:
        if lang == opts.lang:
            return content
    return None


# =============================================================================
# Multiclass labels
# =============================================================================


@dataclass(frozen=True)
class MulticlassOptions:
    """
    Describes the labels a multiclass answer may take.

    Attributes:
        classes: Allowed labels, matched case-insensitively.
        key: Line prefix introducing the answer, e.g. ``answer: query``.
    """

    classes: Tuple[str, ...]
    key: str = "answer"

    def __post_init__(self) -> None:
        object.__setattr__(self, "classes", tuple(self.classes))
        if not self.classes:
            raise ValueError("MulticlassOptions requires at least one class label")


def multiclass(text: str, opts: MulticlassOptions) -> Optional[str]:
    """
    Find the last ``<key>: <label>`` line naming an allowed label.

    Lines are scanned from the bottom up so a model that revises its answer
    is judged by its final one. Returns the label as configured in
    ``opts.classes``, or None.
    """
    prefix = opts.key.strip().lower() + ":"
    labels = {label.strip().lower(): label for label in opts.classes}
    for line in reversed(text.splitlines()):
        candidate = line.strip().lower()
        if not candidate.startswith(prefix):
            continue
        label = labels.get(candidate[len(prefix) :].strip())
        if label is not None:
            return label
    return None


# =============================================================================
# Tagged spans
# =============================================================================


def tagged(text: str, key: str) -> Optional[Tuple[str, str]]:
    """
    Find the next ``<key>...</key>`` span.

    A ``<`` that does not open an exact ``<key>`` tag, or opens one without a
    matching closer, is skipped and scanning resumes just past it.

    Returns:
        ``(body, rest)`` where rest is the text after the closing tag, or
        None when no further span exists.
    """
    if not key:
        raise ValueError("tag key must not be empty")
    opener = f"<{key}>"
    closer = f"</{key}>"

    pos = 0
    while True:
        start = text.find("<", pos)
        if start == -1:
            return None
        if text.startswith(opener, start):
            body_start = start + len(opener)
            end = text.find(closer, body_start)
            if end != -1:
                return text[body_start:end], text[end + len(closer) :]
        pos = start + 1


def iter_tagged(text: str, key: str) -> Iterator[str]:
    """Yield the body of every ``<key>...</key>`` span, in order."""
    found = tagged(text, key)
    while found is not None:
        body, rest = found
        yield body
        found = tagged(rest, key)


@dataclass(frozen=True)
class TagOptions:
    """A tag key to extract, e.g. ``TagOptions("add_memory")``."""

    key: str

    def find(self, text: str) -> Optional[Tuple[str, str]]:
        return tagged(text, self.key)

    def iter(self, text: str) -> Iterator[str]:
        return iter_tagged(text, self.key)

    def all(self, text: str) -> List[str]:
        return list(iter_tagged(text, self.key))


__all__ = [
    "MarkdownOptions",
    "code_blocks",
    "markdown_codeblock",
    "MulticlassOptions",
    "multiclass",
    "tagged",
    "iter_tagged",
    "TagOptions",
]
