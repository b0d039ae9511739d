# SPDX-License-Identifier: GPL-3.0-or-later

import dataclasses
import logging

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Adw, Gdk, Gio, GLib, GObject, Gtk

from noet.background import AutoSave
from noet.errors import NoetError
from noet.preview import PreviewView, VersionPreviewController
from noet.rich_text import dump_document, ensure_tags, load_document
from noet.version_history import VersionHistoryPanel

logger = logging.getLogger(__name__)


class NoteEditor(Adw.Bin):
    """Editor pane for one note at a time, with its version history.

    Renders whatever DisplayedNote the preview controller hands it. Live
    content is editable and auto-saved; a previewed version is read-only.
    """

    __gsignals__ = {
        'note-saved': (GObject.SignalFlags.RUN_LAST, None, (str,)),
        'error': (GObject.SignalFlags.RUN_LAST, None, (str,)),
    }

    def __init__(self, client, runner, **kwargs):
        super().__init__(**kwargs)
        self._client = client
        self._runner = runner
        self._controller = None
        self._rendering = False

        self._auto_save = AutoSave(self._save_note)

        self._build_ui()
        self._setup_key_controller()

    @property
    def controller(self):
        return self._controller

    @property
    def history_visible(self):
        return self._split.get_show_sidebar()

    @history_visible.setter
    def history_visible(self, value):
        self._split.set_show_sidebar(value)

    def _build_ui(self):
        self._split = Adw.OverlaySplitView(
            sidebar_position=Gtk.PackType.END,
            show_sidebar=False,
        )

        main_box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL)

        self._banner = Adw.Banner(button_label='Back to Current')
        self._banner.connect('button-clicked', lambda b: self.exit_preview())
        main_box.append(self._banner)

        self._title_entry = Gtk.Entry(placeholder_text='Note title...')
        self._title_entry.add_css_class('note-title-entry')
        self._title_entry.connect('changed', self._on_content_changed)
        main_box.append(self._title_entry)
        main_box.append(Gtk.Separator())

        scrolled = Gtk.ScrolledWindow(vexpand=True, hexpand=True)
        self._text_view = Gtk.TextView(
            wrap_mode=Gtk.WrapMode.WORD_CHAR,
            left_margin=12, right_margin=12,
            top_margin=8, bottom_margin=8,
        )
        self._text_view.add_css_class('note-text-view')
        self._buffer = self._text_view.get_buffer()
        ensure_tags(self._buffer)
        self._buffer.connect('changed', self._on_content_changed)
        scrolled.set_child(self._text_view)
        main_box.append(scrolled)

        self._tags_bar = Gtk.FlowBox(
            selection_mode=Gtk.SelectionMode.NONE,
            max_children_per_line=10,
            min_children_per_line=1,
        )
        self._tags_bar.set_visible(False)
        main_box.append(self._tags_bar)

        self._empty_state = Adw.StatusPage(
            icon_name='document-edit-symbolic',
            title='No Note Open',
            description='Pick a note from the list to start editing',
        )

        self._content_stack = Gtk.Stack()
        self._content_stack.add_named(main_box, 'editor')
        self._content_stack.add_named(self._empty_state, 'empty')
        self._content_stack.set_visible_child_name('empty')
        self._split.set_content(self._content_stack)

        self._history = VersionHistoryPanel()
        self._history.connect('preview-requested', self._on_preview_requested)
        self._history.connect('restore-requested', self._on_restore_requested)
        self._history.connect('delete-requested', self._on_delete_requested)
        self._history.connect('export-requested', self._on_export_requested)
        self._history.connect('exit-requested', lambda p: self.exit_preview())
        self._split.set_sidebar(self._history)

        self.set_child(self._split)

    # --- Opening notes ---

    def show_note(self, note):
        """Open a note. Any version preview of the previous note is dropped."""
        if self._controller is None:
            self._controller = VersionPreviewController(
                self._client, note,
                runner=self._runner,
                on_display=self._render,
                on_versions=self._on_versions_loaded,
                on_error=self._on_controller_error,
            )
            self._render(self._controller.displayed)
        else:
            old_id = self._controller.note.id
            # The save reads the widgets now, before they show the new note.
            self.flush(then=lambda: self._request_checkpoint(old_id))
            self._controller.switch_note(note)
        self._content_stack.set_visible_child_name('editor')
        self._controller.load_versions()

    def _request_checkpoint(self, note_id):
        # The server decides whether the note changed enough to keep a version.
        self._runner(
            lambda: self._client.create_checkpoint(note_id),
            lambda created: logger.debug('Checkpoint for note %s: %s', note_id, created),
            lambda exc: logger.warning('Checkpoint for note %s failed: %s', note_id, exc),
        )

    def _render(self, displayed):
        note = displayed.note
        self._rendering = True
        try:
            self._title_entry.set_text(note.title or '')
            load_document(self._buffer, note.content)
            self._update_tags_bar(note.tags)
        finally:
            self._rendering = False

        is_preview = isinstance(displayed, PreviewView)
        self._set_editable(not is_preview)
        if is_preview:
            self._auto_save.suspend()
            self._banner.set_title(
                f'Viewing version {displayed.version_number} (read-only)'
            )
            self.add_css_class('previewing')
        else:
            self._auto_save.resume()
            self.remove_css_class('previewing')
        self._banner.set_revealed(is_preview)
        self._history.show_state(self._controller.state)
        self._history.set_restore_enabled(not self._controller.restore_in_flight)

    def _set_editable(self, editable):
        self._title_entry.set_editable(editable)
        self._text_view.set_editable(editable)
        self._text_view.set_cursor_visible(editable)

    @property
    def editable(self) -> bool:
        return self._text_view.get_editable()

    def _update_tags_bar(self, tags):
        child = self._tags_bar.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self._tags_bar.remove(child)
            child = next_child

        self._tags_bar.set_visible(bool(tags))
        for tag_name in tags:
            label = Gtk.Label(label=tag_name)
            label.add_css_class('tag-chip')
            self._tags_bar.append(label)

    # --- Live editing ---

    def _on_content_changed(self, *args):
        if self._rendering or self._controller is None:
            return
        if self._controller.is_previewing:
            return
        self._auto_save.trigger()

    def _collect_live_note(self):
        return dataclasses.replace(
            self._controller.note,
            title=self._title_entry.get_text(),
            content=dump_document(self._buffer),
        )

    def _save_note(self, then=None):
        if self._controller is None or self._controller.is_previewing:
            if then is not None:
                then()
            return
        note = self._collect_live_note()
        note_id = note.id

        def on_success(saved):
            if self._controller.note.id == saved.id:
                self._controller.update_live_note(saved)
            self.emit('note-saved', saved.id)
            if then is not None:
                then()

        def on_error(exc):
            self._on_save_failed(exc)
            if then is not None:
                then()

        self._runner(
            lambda: self._client.update_note(
                note_id, title=note.title, content=note.content,
            ),
            on_success,
            on_error,
        )

    def _on_save_failed(self, exc):
        logger.error('Failed to save note: %s', exc)
        self.emit('error', 'Could not save the note')

    def flush(self, then=None):
        """Send pending edits in the background.

        ``then`` runs once the save has finished, or right away when there
        is nothing to save.
        """
        if self._controller is not None and self._auto_save.pending:
            self._auto_save.cancel()
            self._save_note(then)
        elif then is not None:
            then()

    def flush_blocking(self):
        """Save pending edits synchronously. Only for closing the window."""
        if not self._auto_save.pending or self._controller is None:
            return
        self._auto_save.cancel()
        if self._controller.is_previewing:
            return
        note = self._collect_live_note()
        try:
            self._client.update_note(note.id, title=note.title, content=note.content)
        except NoetError as exc:
            logger.error('Failed to save note %s: %s', note.id, exc)

    # --- Versions ---

    def exit_preview(self):
        if self._controller is not None:
            self._controller.exit_preview()

    def _on_preview_requested(self, panel, version_id):
        if not self._controller.is_previewing:
            # Locked until the version arrives, so nothing typed in between
            # can miss both the save and the preview buffer.
            self._set_editable(False)
            self._controller.update_live_note(self._collect_live_note())
            self.flush()
        self._controller.view_version(version_id)

    def _on_restore_requested(self, panel, version_id, version_number):
        dialog = Adw.AlertDialog(
            heading=f'Restore Version {version_number}?',
            body='The current content is kept in the history and this '
                 'version becomes the new current version.',
        )
        dialog.add_response('cancel', 'Cancel')
        dialog.add_response('restore', 'Restore')
        dialog.set_response_appearance('restore', Adw.ResponseAppearance.SUGGESTED)
        dialog.connect('response', self._on_restore_response, version_id)
        dialog.present(self)

    def _on_restore_response(self, dialog, response, version_id):
        if response != 'restore':
            return
        note_id = self._controller.note.id
        self._history.set_restore_enabled(False)

        def restore():
            if self._controller.note.id != note_id:
                logger.debug('Note %s closed before its restore started', note_id)
            elif self._controller.restore_version(version_id):
                return
            self._history.set_restore_enabled(not self._controller.restore_in_flight)

        # Pending edits land first so the restore is the newest write.
        self.flush(then=restore)

    def _on_delete_requested(self, panel, version_id, version_number):
        dialog = Adw.AlertDialog(
            heading=f'Delete Version {version_number}?',
            body='This action cannot be undone.',
        )
        dialog.add_response('cancel', 'Cancel')
        dialog.add_response('delete', 'Delete')
        dialog.set_response_appearance('delete', Adw.ResponseAppearance.DESTRUCTIVE)
        dialog.connect('response', self._on_delete_response, version_id)
        dialog.present(self)

    def _on_delete_response(self, dialog, response, version_id):
        if response == 'delete':
            self._controller.delete_version(version_id)

    def _on_export_requested(self, panel, version_id):
        note_id = self._controller.note.id
        self._runner(
            lambda: self._client.get_version(note_id, version_id),
            self._choose_export_file,
            self._on_export_failed,
        )

    def _choose_export_file(self, version):
        dialog = Gtk.FileDialog(
            title='Export Version',
            initial_name=version.export_file_name(),
        )
        dialog.save(self.get_root(), None, self._on_export_file_chosen, version)

    def _on_export_file_chosen(self, dialog, result, version):
        try:
            target = dialog.save_finish(result)
        except GLib.Error as exc:
            logger.debug('Export dismissed: %s', exc.message)
            return
        try:
            target.replace_contents(
                version.export_text().encode('utf-8'), None, False,
                Gio.FileCreateFlags.REPLACE_DESTINATION, None,
            )
        except GLib.Error as exc:
            self._on_export_failed(exc)
            return
        logger.info('Exported version %d of note %s to %s',
                    version.version, version.note_id, target.get_path())

    def _on_export_failed(self, exc):
        logger.error('Failed to export version: %s', exc)
        self.emit('error', 'Could not export the version')

    def _on_versions_loaded(self, versions):
        self._history.set_versions(versions)
        self._history.show_state(self._controller.state)
        self._history.set_restore_enabled(not self._controller.restore_in_flight)

    def _on_controller_error(self, exc):
        self._set_editable(not self._controller.is_previewing)
        self._history.set_restore_enabled(not self._controller.restore_in_flight)
        self.emit('error', str(exc))

    def _setup_key_controller(self):
        key_controller = Gtk.EventControllerKey()
        key_controller.connect('key-pressed', self._on_key_pressed)
        self.add_controller(key_controller)

    def _on_key_pressed(self, controller, keyval, keycode, state):
        if keyval == Gdk.KEY_Escape and self._controller is not None:
            if self._controller.is_previewing:
                self._controller.exit_preview()
                return Gdk.EVENT_STOP
        return Gdk.EVENT_PROPAGATE
