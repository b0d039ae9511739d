# SPDX-License-Identifier: GPL-3.0-or-later

import logging

import requests

from noet.constants import DEFAULT_BACKEND_URL, DEFAULT_USER_ID, REQUEST_TIMEOUT
from noet.errors import FetchFailed, RestoreFailed
from noet.note import Note, Version, VersionSummary

logger = logging.getLogger(__name__)


class NoteClient:
    """Blocking client for the Noet REST backend.

    Every method performs one round trip. Failures are raised as
    FetchFailed, except for restore_version which raises RestoreFailed.
    A 2xx body that does not have the expected shape is a failure too.
    """

    def __init__(self, base_url=DEFAULT_BACKEND_URL, user_id=DEFAULT_USER_ID,
                 timeout=REQUEST_TIMEOUT, session=None):
        self._base_url = base_url.rstrip('/')
        self._user_id = user_id
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    # --- Notes ---

    def list_notes(self) -> list[Note]:
        return self._request(
            'GET', 'notes', parse=lambda data: [Note.from_json(item) for item in data],
        )

    def get_note(self, note_id) -> Note:
        return self._request('GET', f'notes/{note_id}', parse=Note.from_json)

    def update_note(self, note_id, **fields) -> Note:
        return self._request(
            'PUT', f'notes/{note_id}', json=fields, parse=Note.from_json,
        )

    # --- Versions ---

    def list_versions(self, note_id) -> list[VersionSummary]:
        return self._request(
            'GET', f'notes/{note_id}/versions',
            parse=lambda data: [VersionSummary.from_json(item) for item in data],
        )

    def get_version(self, note_id, version_id) -> Version:
        def parse(data):
            if not data.get('noteId'):
                data = dict(data, noteId=note_id)
            return Version.from_json(data)

        return self._request(
            'GET', f'notes/{note_id}/versions/{version_id}', parse=parse,
        )

    def restore_version(self, note_id, version_id) -> Note:
        return self._request(
            'POST', f'notes/{note_id}/restore/{version_id}',
            error=RestoreFailed, parse=Note.from_json,
        )

    def delete_version(self, note_id, version_id):
        self._request('DELETE', f'notes/{note_id}/versions/{version_id}')

    def create_checkpoint(self, note_id) -> bool:
        return self._request(
            'POST', f'notes/{note_id}/version-checkpoint',
            parse=lambda data: bool(data.get('versionCreated')),
        )

    # --- Helpers ---

    def _url(self, path):
        return f'{self._base_url}/api/{self._user_id}/{path}'

    def _request(self, method, path, error=FetchFailed, parse=None, **kwargs):
        url = self._url(path)
        logger.debug('%s %s', method, url)
        try:
            response = self._session.request(
                method, url, timeout=self._timeout, **kwargs,
            )
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            raise error(
                f'{method} {path} returned {exc.response.status_code}: '
                f'{_error_message(exc.response)}'
            ) from exc
        except requests.RequestException as exc:
            raise error(f'{method} {path} failed: {exc}') from exc
        except ValueError as exc:
            raise error(f'{method} {path} returned invalid JSON') from exc

        if parse is None:
            return data
        try:
            return parse(data)
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            logger.debug('Unexpected body from %s %s: %r', method, path, data)
            raise error(f'{method} {path} returned an unexpected body') from exc

    def close(self):
        self._session.close()


def _error_message(response):
    try:
        return response.json().get('error') or response.reason
    except (ValueError, AttributeError):
        return response.reason
