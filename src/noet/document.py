# SPDX-License-Identifier: GPL-3.0-or-later
"""
Helpers for the rich-text document format, independent of GTK.

Content is stored as a JSON string:
{
  "blocks": [
    {"type": "paragraph" | "bullet",
     "runs": [{"text": "hello ", "tags": []}, {"text": "world", "tags": ["bold"]}]}
  ]
}

Anything that does not parse as such a document is treated as plain text.
"""

import json


def parse_document(content):
    """Return the block list of a document, or None if it is plain text."""
    if not content:
        return []
    try:
        data = json.loads(content)
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(data, dict):
        return None
    blocks = data.get('blocks', [])
    return blocks if isinstance(blocks, list) else None


def get_plain_text(content) -> str:
    """Extract plain text from rich-text JSON."""
    blocks = parse_document(content)
    if blocks is None:
        return content
    lines = []
    for block in blocks:
        lines.append(''.join(run.get('text', '') for run in block.get('runs', [])))
    return '\n'.join(lines)


def is_blank_content(content) -> bool:
    """True for missing or whitespace-only content and for documents with no blocks."""
    if content is None or not content.strip():
        return True
    return parse_document(content) == []

