"""Markdown outline for previewing .md files."""

import logging
from typing import Any

from markdown_it import MarkdownIt

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = (".md", ".markdown")


def is_markdown(path: str) -> bool:
    return path.lower().endswith(MARKDOWN_EXTENSIONS)


class MarkdownOutline:
    """Extracts title and sections from a Markdown document."""

    def __init__(self):
        self.md = MarkdownIt()

    def parse(self, content: str) -> dict[str, Any]:
        """
        Parse markdown into a title and sections.

        Returns:
            {
                "title": "First H1",
                "headings": [(level, text), ...],
                "sections": {
                    "Heading": ["paragraph", "list item", ...]
                }
            }
        """
        tokens = self.md.parse(content)

        result: dict[str, Any] = {
            "title": "",
            "headings": [],
            "sections": {},
        }

        current_section: str | None = None
        current_items: list[str] = []

        i = 0
        while i < len(tokens):
            token = tokens[i]

            if token.type == "heading_open":
                if current_section:
                    result["sections"][current_section] = current_items
                    current_items = []

                level = int(token.tag[1])

                if i + 1 < len(tokens) and tokens[i + 1].type == "inline":
                    text = self._get_text(tokens[i + 1])
                    current_section = text
                    result["headings"].append((level, text))

                    if level == 1 and not result["title"]:
                        result["title"] = text

                    i += 2
                    continue

            elif token.type == "paragraph_open":
                if i + 1 < len(tokens) and tokens[i + 1].type == "inline":
                    text = self._get_text(tokens[i + 1])
                    if text:
                        current_items.append(text)
                    i += 2
                    continue

            elif token.type in ["bullet_list_open", "ordered_list_open"]:
                items, i = self._parse_list(tokens, i)
                current_items.extend(items)
                continue

            elif token.type == "fence":
                if token.content:
                    current_items.append(f"```{token.info}\n{token.content}```")

            i += 1

        if current_section:
            result["sections"][current_section] = current_items

        logger.debug("Outline: %d headings", len(result["headings"]))
        return result

    def _parse_list(self, tokens: list, start: int) -> tuple[list[str], int]:
        """Collect list item texts; returns items and the index after the list."""
        items = []
        depth = 0
        i = start
        while i < len(tokens):
            token = tokens[i]
            if token.type in ["bullet_list_open", "ordered_list_open"]:
                depth += 1
            elif token.type in ["bullet_list_close", "ordered_list_close"]:
                depth -= 1
                if depth == 0:
                    return items, i + 1
            elif token.type == "inline":
                items.append(self._get_text(token))
            i += 1
        return items, i

    def _get_text(self, inline_token: Any) -> str:
        """Extract plain text from inline token."""
        if not inline_token.children:
            return getattr(inline_token, "content", "")

        parts = []
        for child in inline_token.children:
            if child.type in ("text", "code_inline"):
                parts.append(child.content)
            elif child.type == "softbreak":
                parts.append(" ")
            elif child.content:
                parts.append(child.content)

        return "".join(parts)


def render_outline(outline: dict[str, Any]) -> list[str]:
    lines = []
    for level, text in outline["headings"]:
        lines.append(f"{'  ' * (level - 1)}{'#' * level} {text}")
        count = len(outline["sections"].get(text, []))
        if count:
            lines[-1] += f"  ({count})"
    return lines
