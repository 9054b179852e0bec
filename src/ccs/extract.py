"""Flatten a transcript ``message.content`` value into display text."""

from __future__ import annotations


def extract_text(content) -> str:
    """Extract text from string or [{type: 'text', text: '...'}] array format.

    Text blocks are joined with a single space; tool calls, images and any
    other block types are dropped. Shapes that are neither a string nor a
    list of blocks yield an empty string.
    """
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if not isinstance(block, dict) or block.get("type") != "text":
                continue
            text = block.get("text")
            if isinstance(text, str) and text:
                parts.append(text)
        return " ".join(parts)
    return ""
