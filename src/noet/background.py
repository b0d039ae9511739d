# SPDX-License-Identifier: GPL-3.0-or-later
"""Main-loop helpers: background network calls and debounced saving."""

import logging
import threading

from gi.repository import GLib

from noet.constants import AUTOSAVE_DELAY_MS
from noet.errors import NoetError

logger = logging.getLogger(__name__)


class ThreadedRunner:
    """Runs blocking calls on a worker thread.

    Callbacks are dispatched with GLib.idle_add so they always execute on the
    main loop, in the order the calls complete.
    """

    def __call__(self, call, on_success, on_error):
        thread = threading.Thread(
            target=self._work, args=(call, on_success, on_error), daemon=True,
        )
        thread.start()

    def _work(self, call, on_success, on_error):
        try:
            result = call()
        except NoetError as exc:
            GLib.idle_add(self._dispatch, on_error, exc)
            return
        except Exception as exc:
            logger.exception('Unexpected error in background call')
            GLib.idle_add(self._dispatch, on_error, NoetError(f'Unexpected error: {exc}'))
            return
        GLib.idle_add(self._dispatch, on_success, result)

    @staticmethod
    def _dispatch(callback, value):
        callback(value)
        return GLib.SOURCE_REMOVE


class AutoSave:
    """Debounced auto-save using GLib.timeout_add.

    While suspended, triggers are dropped and save_now does nothing.
    """

    def __init__(self, save_callback, delay_ms=AUTOSAVE_DELAY_MS):
        self._save_callback = save_callback
        self._delay_ms = delay_ms
        self._timeout_id = None
        self._suspended = False

    @property
    def pending(self) -> bool:
        return self._timeout_id is not None

    def trigger(self):
        """Schedule a save after the debounce delay. Resets if called again."""
        if self._suspended:
            return
        self.cancel()
        self._timeout_id = GLib.timeout_add(self._delay_ms, self._do_save)

    def cancel(self):
        if self._timeout_id is not None:
            GLib.source_remove(self._timeout_id)
            self._timeout_id = None

    def save_now(self):
        """Flush a pending save immediately."""
        self.cancel()
        if not self._suspended:
            self._save_callback()

    def suspend(self):
        """Flush what is pending, then ignore edits until resume()."""
        if self.pending:
            self.save_now()
        self._suspended = True

    def resume(self):
        self._suspended = False

    def _do_save(self):
        self._timeout_id = None
        self._save_callback()
        return GLib.SOURCE_REMOVE
