import dataclasses
import unittest

from noet.errors import FetchFailed, NoetError
from noet.note import Note, Version, VersionSummary

try:
    import gi
    gi.require_version('Gtk', '4.0')
    gi.require_version('Adw', '1')
    from gi.repository import Adw, Gtk
except (ImportError, ValueError):
    Gtk = None


def _display_available():
    return Gtk is not None and bool(Gtk.init_check())


HAVE_DISPLAY = _display_available()


def make_note(note_id='n1', **fields):
    defaults = dict(title='Draft', content='draft text', tags=['t1'], version=7)
    defaults.update(fields)
    return Note(id=note_id, **defaults)


class EditorClient:

    def __init__(self, versions=()):
        self.versions = {v.id: v for v in versions}
        self.calls = []

    def update_note(self, note_id, **fields):
        self.calls.append(('update_note', note_id, fields.get('title')))
        return make_note(note_id, **fields)

    def get_version(self, note_id, version_id):
        self.calls.append(('get_version', note_id, version_id))
        if version_id not in self.versions:
            raise FetchFailed(f'GET version {version_id} returned 404')
        return self.versions[version_id]

    def list_versions(self, note_id):
        self.calls.append(('list_versions', note_id))
        return [VersionSummary(id=v.id, version=v.version) for v in self.versions.values()]

    def restore_version(self, note_id, version_id):
        self.calls.append(('restore_version', note_id, version_id))
        return make_note(note_id, title='Restored', version=8)

    def delete_version(self, note_id, version_id):
        self.calls.append(('delete_version', note_id, version_id))

    def create_checkpoint(self, note_id):
        self.calls.append(('create_checkpoint', note_id))
        return True


class DeferredRunner:

    def __init__(self):
        self.pending = []

    def __call__(self, call, on_success, on_error):
        self.pending.append((call, on_success, on_error))

    def release(self, index=0):
        call, on_success, on_error = self.pending.pop(index)
        try:
            result = call()
        except NoetError as exc:
            on_error(exc)
            return
        on_success(result)


@unittest.skipUnless(HAVE_DISPLAY, 'needs GTK 4 and a display')
class TestNoteEditor(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        Adw.init()

    def setUp(self):
        from noet.note_editor import NoteEditor

        self.client = EditorClient([
            Version(id='v1', note_id='n1', version=1, content='old text', title='Old'),
        ])
        self.runner = DeferredRunner()
        self.editor = NoteEditor(self.client, self.runner)
        self.errors = []
        self.editor.connect('error', lambda editor, message: self.errors.append(message))
        self.editor.show_note(make_note())
        self.runner.release()
        self.client.calls.clear()

    def call_names(self):
        return [call[0] for call in self.client.calls]

    def type_title(self, text):
        self.editor._title_entry.set_text(text)

    def test_switching_notes_saves_in_the_background(self):
        self.type_title('Edited')

        self.editor.show_note(make_note('n2', title='Other'))

        self.assertNotIn('update_note', self.call_names())
        self.assertEqual(self.editor.controller.note.id, 'n2')
        self.runner.release(0)
        self.assertEqual(self.client.calls[0], ('update_note', 'n1', 'Edited'))
        self.runner.release(-1)
        self.assertIn(('create_checkpoint', 'n1'), self.client.calls)

    def test_restore_waits_for_pending_save(self):
        self.type_title('Edited')

        self.editor._on_restore_response(None, 'restore', 'v1')

        self.assertEqual(self.call_names(), [])
        self.runner.release()
        self.assertEqual(self.call_names(), ['update_note'])
        self.assertTrue(self.editor.controller.restore_in_flight)
        self.runner.release()
        self.assertEqual(self.call_names(), ['update_note', 'restore_version'])
        self.assertFalse(self.editor.controller.restore_in_flight)
        self.assertEqual(self.editor.controller.note.title, 'Restored')

    def test_restore_without_pending_edits_starts_at_once(self):
        self.editor._on_restore_response(None, 'restore', 'v1')

        self.assertTrue(self.editor.controller.restore_in_flight)
        self.runner.release()
        self.assertEqual(self.call_names(), ['restore_version'])

    def test_editing_is_locked_while_a_version_loads(self):
        self.editor._on_preview_requested(None, 'v1')

        self.assertFalse(self.editor.editable)
        self.runner.release()
        self.assertTrue(self.editor.controller.is_previewing)
        self.assertFalse(self.editor.editable)

        self.editor.exit_preview()
        self.assertTrue(self.editor.editable)

    def test_failed_version_load_unlocks_editing(self):
        self.editor._on_preview_requested(None, 'missing')
        self.assertFalse(self.editor.editable)

        self.runner.release()

        self.assertTrue(self.editor.editable)
        self.assertFalse(self.editor.controller.is_previewing)
        self.assertEqual(len(self.errors), 1)

    def test_typed_title_survives_preview_round_trip(self):
        self.type_title('Typed')

        self.editor._on_preview_requested(None, 'v1')
        # The version arrives before the save finishes.
        self.runner.release(1)
        self.assertEqual(self.editor._title_entry.get_text(), 'Old')
        self.editor.exit_preview()

        self.assertEqual(self.editor._title_entry.get_text(), 'Typed')
        self.runner.release()
        self.assertEqual(self.client.calls[-1], ('update_note', 'n1', 'Typed'))


@unittest.skipUnless(HAVE_DISPLAY, 'needs GTK 4 and a display')
class TestNoteRow(unittest.TestCase):

    def test_update_replaces_labels(self):
        from noet.main_window import NoteRow

        row = NoteRow(make_note(title='First', content='line one'))
        row.update(dataclasses.replace(make_note(), title='Second', content=''))

        self.assertEqual(row._title.get_label(), 'Second')
        self.assertFalse(row._preview.get_visible())
        self.assertEqual(row.note_id, 'n1')
