# SPDX-License-Identifier: GPL-3.0-or-later

from dataclasses import dataclass, field
from typing import Optional

from noet.document import get_plain_text


@dataclass
class Note:
    id: str
    title: str
    content: str  # JSON-serialized rich text
    tags: list[str] = field(default_factory=list)
    notebook: Optional[str] = None
    folder: Optional[str] = None
    version: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def preview_text(self) -> str:
        if not self.content:
            return ''
        return get_plain_text(self.content)[:200]

    @classmethod
    def from_json(cls, data) -> 'Note':
        return cls(
            id=data['id'],
            title=data.get('title') or '',
            content=data.get('content') or '',
            tags=list(data.get('tags') or []),
            notebook=data.get('notebook'),
            folder=data.get('folder'),
            version=data.get('version', 1),
            created_at=data.get('created'),
            updated_at=data.get('updated'),
        )


@dataclass
class VersionSummary:
    """A row of the version list. Carries no content."""
    id: str
    version: int
    created_at: Optional[str] = None
    trigger: Optional[str] = None
    change_description: str = ''
    size: int = 0

    @classmethod
    def from_json(cls, data) -> 'VersionSummary':
        return cls(
            id=data['id'],
            version=data['version'],
            created_at=data.get('createdAt'),
            trigger=data.get('trigger'),
            change_description=data.get('changeDescription') or '',
            size=data.get('size') or 0,
        )


@dataclass(frozen=True)
class Version:
    """Immutable snapshot of a note, as returned by the version endpoint."""
    id: str
    note_id: str
    version: int
    content: str
    title: str = ''
    tags: tuple = ()
    notebook: Optional[str] = None
    folder: Optional[str] = None
    markdown: Optional[str] = None
    created_at: Optional[str] = None
    change_description: str = ''
    size: int = 0

    @classmethod
    def from_json(cls, data) -> 'Version':
        metadata = data.get('metadata') or {}
        return cls(
            id=data['id'],
            note_id=data.get('noteId') or metadata.get('id') or '',
            version=data['version'],
            content=data.get('content') or '',
            title=metadata.get('title') or '',
            tags=tuple(metadata.get('tags') or ()),
            notebook=metadata.get('notebook'),
            folder=metadata.get('folder'),
            markdown=data.get('markdown'),
            created_at=data.get('createdAt'),
            change_description=data.get('changeDescription') or '',
            size=data.get('size') or 0,
        )

    def export_text(self) -> str:
        """Markdown when the server rendered it, plain text otherwise."""
        if self.markdown:
            return self.markdown
        return get_plain_text(self.content)

    def export_file_name(self) -> str:
        title = (self.title or 'untitled').strip() or 'untitled'
        safe = ''.join('_' if ch in '/\\:' else ch for ch in title)
        return f'{safe}_v{self.version}.md'


def size_change(summary, previous) -> str:
    """Describe how much a version grew or shrank against the one before it."""
    if previous is None:
        return 'Initial version'
    diff = summary.size - previous.size
    if diff > 0:
        return f'+{diff} characters'
    if diff < 0:
        return f'{diff} characters'
    return 'No content changes'
