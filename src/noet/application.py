# SPDX-License-Identifier: GPL-3.0-or-later

import logging
import os

import gi
gi.require_version('Gtk', '4.0')
gi.require_version('Adw', '1')

from gi.repository import Adw, Gdk, Gio, Gtk

from noet.background import ThreadedRunner
from noet.config import load_config
from noet.constants import APP_ID
from noet.main_window import MainWindow
from noet.note_client import NoteClient

logger = logging.getLogger(__name__)


class NoetApp(Adw.Application):

    def __init__(self, version='0.1.0', **kwargs):
        super().__init__(
            application_id=APP_ID,
            flags=Gio.ApplicationFlags.DEFAULT_FLAGS,
            **kwargs,
        )
        self.version = version
        self.client = None
        self.runner = ThreadedRunner()

    def do_startup(self):
        Adw.Application.do_startup(self)
        self._connect_client()
        self._load_css()
        self._setup_actions()
        self._setup_shortcuts()

    def _connect_client(self):
        config = load_config(self.get_settings())
        logger.info('Using Noet server %s as user %s',
                    config.backend_url, config.user_id)
        if self.client is not None:
            self.client.close()
        self.client = NoteClient(config.backend_url, config.user_id)

    def _load_css(self):
        css_provider = Gtk.CssProvider()
        css_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'style.css')
        if not os.path.exists(css_path):
            logger.debug('No style.css found, using the default theme')
            return
        css_provider.load_from_path(css_path)

        Gtk.StyleContext.add_provider_for_display(
            Gdk.Display.get_default(),
            css_provider,
            Gtk.STYLE_PROVIDER_PRIORITY_APPLICATION,
        )

    def _setup_actions(self):
        actions = [
            ('about', self._on_about),
            ('quit', self._on_quit),
            ('preferences', self._on_preferences),
            ('shortcuts', self._on_shortcuts),
            ('toggle-history', self._on_toggle_history),
        ]
        for name, callback in actions:
            action = Gio.SimpleAction.new(name, None)
            action.connect('activate', callback)
            self.add_action(action)

    def _setup_shortcuts(self):
        self.set_accels_for_action('app.quit', ['<Control>q'])
        self.set_accels_for_action('app.shortcuts', ['<Control>question'])
        self.set_accels_for_action('app.preferences', ['<Control>comma'])
        self.set_accels_for_action('app.toggle-history', ['<Control>h'])

    def do_activate(self):
        win = self.get_active_window()
        if win and isinstance(win, MainWindow):
            win.present()
            return
        win = MainWindow(application=self)
        win.present()

    def get_settings(self):
        schema_source = Gio.SettingsSchemaSource.get_default()
        if schema_source and schema_source.lookup(APP_ID, True):
            return Gio.Settings.new(APP_ID)
        return None

    def reconnect(self):
        """Pick up changed server settings and reload the notes list."""
        self._connect_client()
        win = self.get_active_window()
        if isinstance(win, MainWindow):
            win.close()
        MainWindow(application=self).present()

    def _main_window(self):
        win = self.get_active_window()
        return win if isinstance(win, MainWindow) else None

    def _on_toggle_history(self, action, param):
        win = self._main_window()
        if win:
            win.toggle_history()

    def _on_about(self, action, param):
        about = Adw.AboutDialog(
            application_name='Noet',
            application_icon=APP_ID,
            version=self.version,
            comments='Personal notes with version history',
            license_type=Gtk.License.GPL_3_0,
        )
        about.present(self.get_active_window())

    def _on_quit(self, action, param):
        win = self._main_window()
        if win:
            win.close()
        self.quit()

    def _on_preferences(self, action, param):
        from noet.preferences import PreferencesWindow
        win = PreferencesWindow(application=self)
        win.present(self.get_active_window())

    def _on_shortcuts(self, action, param):
        from noet.shortcuts import ShortcutsWindow
        win = ShortcutsWindow(transient_for=self.get_active_window())
        win.present()

    def do_shutdown(self):
        if self.client is not None:
            self.client.close()
        Adw.Application.do_shutdown(self)
