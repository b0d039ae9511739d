# SPDX-License-Identifier: GPL-3.0-or-later

import gi
gi.require_version('Gtk', '4.0')
from gi.repository import Gtk


SHORTCUT_GROUPS = [
    ('General', [
        ('Quit', '<Control>q'),
        ('Preferences', '<Control>comma'),
        ('Keyboard Shortcuts', '<Control>question'),
    ]),
    ('Version History', [
        ('Show or Hide History', '<Control>h'),
        ('Back to Current Version', 'Escape'),
    ]),
]


class ShortcutsWindow(Gtk.ShortcutsWindow):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        section = Gtk.ShortcutsSection(visible=True, section_name='shortcuts')
        for title, shortcuts in SHORTCUT_GROUPS:
            group = Gtk.ShortcutsGroup(title=title, visible=True)
            for name, accelerator in shortcuts:
                group.append(Gtk.ShortcutsShortcut(
                    title=name,
                    accelerator=accelerator,
                    visible=True,
                ))
            section.append(group)

        self.add_section(section)
