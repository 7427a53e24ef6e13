"""Reduce HTML/XHTML content documents to plain reading text."""

import logging
import re
import warnings

from bs4 import BeautifulSoup, NavigableString, XMLParsedAsHTMLWarning

log = logging.getLogger(__name__)

# Suppress XML parsing warnings - EPUB content documents are usually XHTML
warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

# Subtrees that never contribute reading text
SKIPPED_TAGS = ["script", "style", "head", "template", "noscript"]

# Elements rendered on their own line
BLOCK_TAGS = [
    "address", "article", "aside", "blockquote", "dd", "div", "dl",
    "dt", "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5",
    "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre", "section",
    "table", "td", "th", "tr", "ul",
]

_WHITESPACE = re.compile(r"\s+")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_BLANK_RUNS = re.compile(r"\n{3,}")
_PARAGRAPH_BREAK = re.compile(r"\n[^\S\n]*\n\s*")


class ContentProcessor:
    """Convert markup into plain text in document order.

    Stateless; a single instance may be shared across threads.
    """

    def to_plain_text(self, html_content: bytes) -> str | None:
        """Extract visible text from an HTML/XHTML byte buffer.

        Returns None when the buffer is not valid UTF-8 or cannot be parsed.
        """
        try:
            html_content.decode("utf-8")
        except UnicodeDecodeError as e:
            log.warning(f"Content document is not valid UTF-8: {e}")
            return None

        try:
            soup = BeautifulSoup(html_content, "lxml", from_encoding="utf-8")
        except Exception as e:
            log.warning(f"Could not parse content document: {e}")
            return None

        for tag in soup(SKIPPED_TAGS):
            tag.decompose()

        # Source line breaks are plain whitespace; only block boundaries end lines
        for string in soup.find_all(string=True):
            if type(string) is NavigableString:
                collapsed = _WHITESPACE.sub(" ", string)
                if collapsed != string:
                    string.replace_with(collapsed)

        for tag in soup.find_all("br"):
            tag.replace_with(NavigableString("\n"))

        # Mark block boundaries so the flattened text keeps paragraph breaks
        for tag in soup.find_all(BLOCK_TAGS):
            tag.insert_before(NavigableString("\n"))
            tag.insert_after(NavigableString("\n"))

        body = soup.body or soup
        return self._normalize(body.get_text())

    def _normalize(self, text: str) -> str:
        """Collapse horizontal whitespace and runs of blank lines."""
        lines = [_HORIZONTAL_SPACE.sub(" ", line).strip() for line in text.split("\n")]
        collapsed = "\n".join(lines)
        return _BLANK_RUNS.sub("\n\n", collapsed).strip()

    def get_stats(self, content: str) -> dict[str, int]:
        """Count words, characters, non-blank lines and paragraphs of a page.

        Paragraphs are separated by blank lines, which may hold stray spaces.
        """
        lines = [line for line in content.splitlines() if line.strip()]
        paragraphs = [p for p in _PARAGRAPH_BREAK.split(content) if p.strip()]
        return {
            "word_count": len(content.split()),
            "character_count": len(content),
            "line_count": len(lines),
            "paragraph_count": len(paragraphs),
        }
