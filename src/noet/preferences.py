# SPDX-License-Identifier: GPL-3.0-or-later

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Adw

from noet.config import load_config


class PreferencesWindow(Adw.PreferencesDialog):

    def __init__(self, application, **kwargs):
        super().__init__(**kwargs)
        self.set_title('Preferences')
        self._app = application
        self._settings = application.get_settings()
        self._changed = False

        self._build_ui()
        self.connect('closed', self._on_closed)

    def _build_ui(self):
        page = Adw.PreferencesPage(title='General', icon_name='preferences-system-symbolic')

        server_group = Adw.PreferencesGroup(
            title='Server',
            description='Environment variables NOET_BACKEND_URL and '
                        'NOET_USER_ID override these values',
        )
        config = load_config(self._settings)

        self._url_row = Adw.EntryRow(title='Server Address')
        self._url_row.set_text(config.backend_url)
        server_group.add(self._url_row)

        self._user_row = Adw.EntryRow(title='User')
        self._user_row.set_text(config.user_id)
        server_group.add(self._user_row)

        if self._settings:
            self._url_row.connect('changed', self._on_entry_changed, 'backend-url')
            self._user_row.connect('changed', self._on_entry_changed, 'user-id')
        else:
            self._url_row.set_sensitive(False)
            self._user_row.set_sensitive(False)

        page.add(server_group)
        self.add(page)

    def _on_entry_changed(self, row, key):
        text = row.get_text().strip()
        if text:
            self._settings.set_string(key, text)
            self._changed = True

    def _on_closed(self, dialog):
        if self._changed:
            self._app.reconnect()
