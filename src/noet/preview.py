# SPDX-License-Identifier: GPL-3.0-or-later
"""
Version preview for the note editor.

The editor shows either the live note or a read-only historical version.
VersionPreviewController keeps that choice in one PreviewState value and
keeps a PreviewBuffer with the live note as it was just before the first
version was opened, so leaving preview always brings back exactly what the
user had, saved or not.

Network calls go through a runner, ``runner(call, on_success, on_error)``.
The default runs the call immediately; the GTK host passes
noet.background.ThreadedRunner so the main loop never blocks. Every
response carries the note id and session generation it was issued under and
is dropped if either has changed by the time it arrives.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional, Union

from noet.constants import EMPTY_DOCUMENT
from noet.document import is_blank_content
from noet.errors import NoetError
from noet.note import Note, Version

logger = logging.getLogger(__name__)


# --- State ---

@dataclass(frozen=True)
class Live:
    pass


@dataclass(frozen=True)
class Previewing:
    version_id: str
    version_number: int


LIVE = Live()

PreviewState = Union[Live, Previewing]


@dataclass(frozen=True)
class PreviewBuffer:
    """The live note's editable fields, captured when preview starts."""
    content: str
    title: str
    tags: tuple
    notebook: Optional[str]
    folder: Optional[str]

    @classmethod
    def capture(cls, note) -> 'PreviewBuffer':
        content = note.content
        if is_blank_content(content):
            content = EMPTY_DOCUMENT
        return cls(
            content=content,
            title=note.title,
            tags=tuple(note.tags),
            notebook=note.notebook,
            folder=note.folder,
        )

    def apply_to(self, note) -> Note:
        return dataclasses.replace(
            note,
            content=self.content,
            title=self.title,
            tags=list(self.tags),
            notebook=self.notebook,
            folder=self.folder,
        )


# --- What the editor renders ---

@dataclass(frozen=True)
class LiveView:
    note: Note

    is_preview = False

    @property
    def previewing_version(self):
        return None


@dataclass(frozen=True)
class PreviewView:
    note: Note
    version_number: int

    is_preview = True

    @property
    def previewing_version(self):
        return self.version_number


DisplayedNote = Union[LiveView, PreviewView]


def run_immediately(call, on_success, on_error):
    """Runner that performs the call on the spot.

    Exceptions outside the NoetError family are logged and reported to
    on_error as a NoetError, so a callback always fires.
    """
    try:
        result = call()
    except NoetError as exc:
        on_error(exc)
        return
    except Exception as exc:
        logger.exception('Unexpected error in background call')
        on_error(NoetError(f'Unexpected error: {exc}'))
        return
    on_success(result)


def _ignore(*args):
    pass


class VersionPreviewController:

    def __init__(self, client, note, runner=run_immediately,
                 on_display=None, on_versions=None, on_error=None):
        self._client = client
        self._runner = runner
        self._on_display = on_display or _ignore
        self._on_versions = on_versions or _ignore
        self._on_error = on_error or _ignore

        self._note = note
        self._state = LIVE
        self._buffer = None
        self._generation = 0
        self._displayed = LiveView(note)
        self._versions = []
        self._restoring_note_id = None

    @property
    def note(self) -> Note:
        """The live note, never a preview."""
        return self._note

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def buffer(self) -> Optional[PreviewBuffer]:
        return self._buffer

    @property
    def displayed(self) -> DisplayedNote:
        return self._displayed

    @property
    def versions(self) -> list:
        return list(self._versions)

    @property
    def is_previewing(self) -> bool:
        return isinstance(self._state, Previewing)

    @property
    def restore_in_flight(self) -> bool:
        return self._restoring_note_id == self._note.id

    # --- Preview ---

    def enter_preview(self, note=None):
        """Capture the live note into the buffer, once per preview session."""
        if self._buffer is not None:
            return
        self._buffer = PreviewBuffer.capture(note or self._note)
        logger.debug('Captured live state of note %s', self._note.id)

    def view_version(self, version_id):
        note_id = self._note.id
        generation = self._generation

        def on_success(version):
            if not self._is_current(note_id, generation):
                logger.debug('Dropping stale version %s of note %s',
                             version_id, note_id)
                return
            self._show_version(version)

        self._runner(
            lambda: self._client.get_version(note_id, version_id),
            on_success,
            self._error_handler('load version', note_id),
        )

    def _show_version(self, version: Version):
        self.enter_preview(self._note)
        self._state = Previewing(version.id, version.version)
        preview_note = dataclasses.replace(
            self._note,
            title=version.title,
            content=version.content,
            tags=list(version.tags),
            notebook=version.notebook,
            folder=version.folder,
        )
        logger.info('Previewing version %d of note %s',
                    version.version, self._note.id)
        self._display(PreviewView(preview_note, version.version))

    def exit_preview(self):
        # Responses still in flight belong to the session being left.
        self._generation += 1

        if self._buffer is not None:
            restored = self._buffer.apply_to(self._note)
            self._buffer = None
            self._state = LIVE
            logger.info('Back to live content of note %s', self._note.id)
            self._display(LiveView(restored))
            return

        if isinstance(self._state, Previewing):
            logger.warning('Previewing note %s without a saved live state, '
                           'falling back to the last known note', self._note.id)
            self._state = LIVE
            self._display(LiveView(self._note))

    # --- Restore ---

    def restore_version(self, version_id) -> bool:
        """Make a version the new current content.

        Returns False without calling the backend if a restore for this note
        is already running.
        """
        if self.restore_in_flight:
            logger.warning('Restore already running for note %s', self._note.id)
            return False

        note_id = self._note.id
        self._restoring_note_id = note_id

        def on_success(note):
            self._finish_restore(note_id)
            if note_id != self._note.id:
                logger.debug('Dropping restore result for closed note %s', note_id)
                return
            self._note = note
            self._reset_session()
            logger.info('Restored note %s to version %s, now at %d',
                        note_id, version_id, note.version)
            self._display(LiveView(note))
            self.load_versions()

        def on_error(exc):
            self._finish_restore(note_id)
            self._error_handler('restore version', note_id)(exc)

        try:
            self._runner(
                lambda: self._client.restore_version(note_id, version_id),
                on_success,
                on_error,
            )
        except Exception:
            self._finish_restore(note_id)
            raise
        return True

    def _finish_restore(self, note_id):
        if self._restoring_note_id == note_id:
            self._restoring_note_id = None

    # --- Note switching and live edits ---

    def switch_note(self, note):
        """Open another note. Any preview in progress is dropped silently."""
        if self.is_previewing:
            logger.debug('Leaving preview of note %s for note %s',
                         self._note.id, note.id)
        self._note = note
        self._versions = []
        self._reset_session()
        self._display(LiveView(note))

    def update_live_note(self, note) -> bool:
        """Record the saved live note. Ignored while previewing."""
        if self.is_previewing or self._buffer is not None:
            logger.debug('Ignoring live update of note %s during preview', note.id)
            return False
        self._note = note
        self._displayed = LiveView(note)
        return True

    # --- Version list ---

    def load_versions(self):
        note_id = self._note.id

        def on_success(versions):
            if note_id != self._note.id:
                return
            self._versions = list(versions)
            self._on_versions(self.versions)

        self._runner(
            lambda: self._client.list_versions(note_id),
            on_success,
            self._error_handler('load version history', note_id),
        )

    def delete_version(self, version_id):
        note_id = self._note.id

        def on_success(_result):
            if note_id != self._note.id:
                return
            if (isinstance(self._state, Previewing)
                    and self._state.version_id == version_id):
                self.exit_preview()
            self._versions = [v for v in self._versions if v.id != version_id]
            self._on_versions(self.versions)

        self._runner(
            lambda: self._client.delete_version(note_id, version_id),
            on_success,
            self._error_handler('delete version', note_id),
        )

    # --- Helpers ---

    def _is_current(self, note_id, generation):
        return note_id == self._note.id and generation == self._generation

    def _reset_session(self):
        self._state = LIVE
        self._buffer = None
        self._generation += 1

    def _display(self, displayed):
        self._displayed = displayed
        self._on_display(displayed)

    def _error_handler(self, action, note_id):
        def on_error(exc):
            logger.error('Failed to %s for note %s: %s', action, note_id, exc)
            if note_id == self._note.id:
                self._on_error(exc)
        return on_error
