# SPDX-License-Identifier: GPL-3.0-or-later

import logging

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Adw, Gio, Gtk

from noet.constants import APP_ID
from noet.note_editor import NoteEditor

logger = logging.getLogger(__name__)


class NoteRow(Gtk.ListBoxRow):

    def __init__(self, note, **kwargs):
        super().__init__(**kwargs)
        self.note_id = note.id

        box = Gtk.Box(orientation=Gtk.Orientation.VERTICAL, spacing=2)
        box.set_margin_top(6)
        box.set_margin_bottom(6)
        box.set_margin_start(6)
        box.set_margin_end(6)

        self._title = Gtk.Label(xalign=0, ellipsize=3)  # END
        self._title.add_css_class('heading')
        box.append(self._title)

        self._preview = Gtk.Label(xalign=0, ellipsize=3)
        self._preview.add_css_class('dim-label')
        box.append(self._preview)

        self.set_child(box)
        self.update(note)

    def update(self, note):
        self._title.set_label(note.title or 'Untitled Note')
        preview = note.preview_text.strip().split('\n', 1)[0]
        self._preview.set_label(preview)
        self._preview.set_visible(bool(preview))


class MainWindow(Adw.ApplicationWindow):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._app = self.get_application()
        self._current_note_id = None

        self.set_title('Noet')
        self.set_default_size(1100, 700)
        self.set_icon_name(APP_ID)

        self._build_ui()
        self.refresh_notes()

    @property
    def editor(self):
        return self._editor

    def _build_ui(self):
        # Sidebar: notes list
        sidebar_view = Adw.ToolbarView()
        sidebar_header = Adw.HeaderBar()

        refresh_btn = Gtk.Button(
            icon_name='view-refresh-symbolic',
            tooltip_text='Reload Notes',
        )
        refresh_btn.connect('clicked', lambda b: self.refresh_notes())
        sidebar_header.pack_start(refresh_btn)

        menu = Gio.Menu()
        menu.append('Keyboard Shortcuts', 'app.shortcuts')
        menu.append('Preferences', 'app.preferences')
        menu.append('About Noet', 'app.about')
        sidebar_header.pack_end(Gtk.MenuButton(
            icon_name='open-menu-symbolic',
            menu_model=menu,
        ))
        sidebar_view.add_top_bar(sidebar_header)

        self._notes_list = Gtk.ListBox(selection_mode=Gtk.SelectionMode.SINGLE)
        self._notes_list.add_css_class('navigation-sidebar')
        self._notes_list.connect('row-activated', self._on_note_activated)

        notes_scroll = Gtk.ScrolledWindow(vexpand=True)
        notes_scroll.set_child(self._notes_list)

        self._notes_empty = Adw.StatusPage(
            icon_name='document-new-symbolic',
            title='No Notes',
            description='Notes created on the server show up here',
        )
        self._notes_empty.add_css_class('compact')

        self._notes_stack = Gtk.Stack()
        self._notes_stack.add_named(notes_scroll, 'list')
        self._notes_stack.add_named(self._notes_empty, 'empty')
        sidebar_view.set_content(self._notes_stack)

        # Content: editor
        content_view = Adw.ToolbarView()
        content_header = Adw.HeaderBar()
        self._title_widget = Adw.WindowTitle(title='Noet')
        content_header.set_title_widget(self._title_widget)

        self._history_btn = Gtk.ToggleButton(
            icon_name='document-open-recent-symbolic',
            tooltip_text='Version History (Ctrl+H)',
        )
        self._history_btn.connect('toggled', self._on_history_toggled)
        content_header.pack_end(self._history_btn)
        content_view.add_top_bar(content_header)

        self._editor = NoteEditor(self._app.client, self._app.runner)
        self._editor.connect('error', self._on_editor_error)
        self._editor.connect('note-saved', self._on_note_saved)

        self._toast_overlay = Adw.ToastOverlay()
        self._toast_overlay.set_child(self._editor)
        content_view.set_content(self._toast_overlay)

        split = Adw.NavigationSplitView(
            sidebar=Adw.NavigationPage(title='Notes', child=sidebar_view),
            content=Adw.NavigationPage(title='Note', child=content_view),
        )
        self._split = split
        self.set_content(split)

    # --- Notes list ---

    def refresh_notes(self):
        self._app.runner(
            self._app.client.list_notes,
            self._on_notes_loaded,
            self._on_load_failed,
        )

    def _on_notes_loaded(self, notes):
        child = self._notes_list.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self._notes_list.remove(child)
            child = next_child

        if not notes:
            self._notes_stack.set_visible_child_name('empty')
            return

        self._notes_stack.set_visible_child_name('list')
        for note in sorted(notes, key=lambda n: n.updated_at or '', reverse=True):
            row = NoteRow(note)
            self._notes_list.append(row)
            if note.id == self._current_note_id:
                self._notes_list.select_row(row)

    def _on_load_failed(self, exc):
        logger.error('Failed to load notes: %s', exc)
        self._notes_stack.set_visible_child_name('empty')
        self.show_toast('Could not reach the Noet server')

    def _on_note_activated(self, list_box, row):
        self.open_note(row.note_id)

    def open_note(self, note_id):
        self._current_note_id = note_id

        def on_success(note):
            if note.id != self._current_note_id:
                return
            self._title_widget.set_title(note.title or 'Untitled Note')
            self._editor.show_note(note)
            self._split.set_show_content(True)

        self._app.runner(
            lambda: self._app.client.get_note(note_id),
            on_success,
            self._on_open_failed,
        )

    def _on_open_failed(self, exc):
        logger.error('Failed to open note: %s', exc)
        self.show_toast('Could not open the note')

    def _on_note_saved(self, editor, note_id):
        note = editor.controller.note
        if note.id != note_id:
            return
        self._title_widget.set_title(note.title or 'Untitled Note')
        row = self._find_row(note_id)
        if row is None:
            self.refresh_notes()
        else:
            row.update(note)

    def _find_row(self, note_id):
        child = self._notes_list.get_first_child()
        while child:
            if isinstance(child, NoteRow) and child.note_id == note_id:
                return child
            child = child.get_next_sibling()
        return None

    # --- Version history ---

    def _on_history_toggled(self, btn):
        self._editor.history_visible = btn.get_active()

    def toggle_history(self):
        self._history_btn.set_active(not self._history_btn.get_active())

    # --- Feedback ---

    def _on_editor_error(self, editor, message):
        self.show_toast(message)

    def show_toast(self, message):
        toast = Adw.Toast(title=message, timeout=4)
        self._toast_overlay.add_toast(toast)

    def do_close_request(self):
        self._editor.flush_blocking()
        return False
