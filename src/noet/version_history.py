# SPDX-License-Identifier: GPL-3.0-or-later

from datetime import datetime

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Adw, GObject, Gtk

from noet.note import size_change
from noet.preview import Previewing


def format_timestamp(value):
    if not value:
        return ''
    try:
        stamp = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value
    return stamp.astimezone().strftime('%Y-%m-%d %H:%M')


class VersionRow(Adw.ActionRow):

    def __init__(self, summary, previous=None, **kwargs):
        super().__init__(
            title=f'Version {summary.version}',
            subtitle=' · '.join(
                part for part in (
                    format_timestamp(summary.created_at),
                    summary.change_description,
                    size_change(summary, previous),
                ) if part
            ),
            activatable=True,
            **kwargs,
        )
        self.version_id = summary.id
        self.version_number = summary.version

        self.export_button = Gtk.Button(
            icon_name='document-save-as-symbolic',
            tooltip_text='Export This Version',
            valign=Gtk.Align.CENTER,
        )
        self.export_button.add_css_class('flat')
        self.add_suffix(self.export_button)

        self.restore_button = Gtk.Button(
            icon_name='edit-undo-symbolic',
            tooltip_text='Restore This Version',
            valign=Gtk.Align.CENTER,
        )
        self.restore_button.add_css_class('flat')
        self.add_suffix(self.restore_button)

        self.delete_button = Gtk.Button(
            icon_name='user-trash-symbolic',
            tooltip_text='Delete This Version',
            valign=Gtk.Align.CENTER,
        )
        self.delete_button.add_css_class('flat')
        self.add_suffix(self.delete_button)


class VersionHistoryPanel(Gtk.Box):
    """Version list beside the editor.

    Emits requests; the owner decides what to do with them.
    """

    __gsignals__ = {
        'preview-requested': (GObject.SignalFlags.RUN_LAST, None, (str,)),
        'restore-requested': (GObject.SignalFlags.RUN_LAST, None, (str, int)),
        'delete-requested': (GObject.SignalFlags.RUN_LAST, None, (str, int)),
        'export-requested': (GObject.SignalFlags.RUN_LAST, None, (str,)),
        'exit-requested': (GObject.SignalFlags.RUN_LAST, None, ()),
    }

    def __init__(self, **kwargs):
        super().__init__(orientation=Gtk.Orientation.VERTICAL, **kwargs)
        self.add_css_class('version-history')
        self._rows = []
        self._restore_enabled = True

        header = Adw.HeaderBar(show_end_title_buttons=False)
        header.set_title_widget(Adw.WindowTitle(title='Version History'))
        self._back_btn = Gtk.Button(
            label='Back to Current',
            tooltip_text='Leave preview (Esc)',
        )
        self._back_btn.add_css_class('suggested-action')
        self._back_btn.set_visible(False)
        self._back_btn.connect('clicked', lambda b: self.emit('exit-requested'))
        header.pack_start(self._back_btn)
        self.append(header)

        self._list = Gtk.ListBox(selection_mode=Gtk.SelectionMode.SINGLE)
        self._list.add_css_class('navigation-sidebar')
        self._list.connect('row-activated', self._on_row_activated)

        scrolled = Gtk.ScrolledWindow(vexpand=True)
        scrolled.set_child(self._list)

        self._empty_state = Adw.StatusPage(
            icon_name='document-open-recent-symbolic',
            title='No Versions Yet',
            description='Versions are created as the note changes',
        )
        self._empty_state.add_css_class('compact')

        self._stack = Gtk.Stack(vexpand=True)
        self._stack.add_named(scrolled, 'list')
        self._stack.add_named(self._empty_state, 'empty')
        self._stack.set_visible_child_name('empty')
        self.append(self._stack)

    def set_versions(self, versions):
        child = self._list.get_first_child()
        while child:
            next_child = child.get_next_sibling()
            self._list.remove(child)
            child = next_child
        self._rows = []

        if not versions:
            self._stack.set_visible_child_name('empty')
            return

        self._stack.set_visible_child_name('list')
        ordered = sorted(versions, key=lambda v: v.version, reverse=True)
        for index, summary in enumerate(ordered):
            previous = ordered[index + 1] if index + 1 < len(ordered) else None
            row = VersionRow(summary, previous)
            row.restore_button.set_sensitive(self._restore_enabled)
            row.restore_button.connect(
                'clicked', self._on_restore_clicked, summary.id, summary.version,
            )
            row.delete_button.connect(
                'clicked', self._on_delete_clicked, summary.id, summary.version,
            )
            row.export_button.connect('clicked', self._on_export_clicked, summary.id)
            self._rows.append(row)
            self._list.append(row)

    def show_state(self, state):
        """Highlight the previewed version, or nothing when live."""
        self._back_btn.set_visible(isinstance(state, Previewing))
        if not isinstance(state, Previewing):
            self._list.unselect_all()
            return
        for row in self._rows:
            if row.version_id == state.version_id:
                self._list.select_row(row)
                return
        self._list.unselect_all()

    def set_restore_enabled(self, enabled):
        self._restore_enabled = enabled
        for row in self._rows:
            row.restore_button.set_sensitive(enabled)

    def _on_row_activated(self, list_box, row):
        if isinstance(row, VersionRow):
            self.emit('preview-requested', row.version_id)

    def _on_restore_clicked(self, btn, version_id, version_number):
        self.emit('restore-requested', version_id, version_number)

    def _on_delete_clicked(self, btn, version_id, version_number):
        self.emit('delete-requested', version_id, version_number)

    def _on_export_clicked(self, btn, version_id):
        self.emit('export-requested', version_id)
