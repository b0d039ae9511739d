# SPDX-License-Identifier: GPL-3.0-or-later

import os
from dataclasses import dataclass

from noet.constants import DEFAULT_BACKEND_URL, DEFAULT_USER_ID


@dataclass(frozen=True)
class Config:
    backend_url: str = DEFAULT_BACKEND_URL
    user_id: str = DEFAULT_USER_ID


def load_config(settings=None, environ=None) -> Config:
    """Resolve the backend location.

    Environment variables win over GSettings keys, which win over the
    built-in defaults. ``settings`` is a Gio.Settings for APP_ID or None
    when the schema is not installed.
    """
    if environ is None:
        environ = os.environ

    backend_url = DEFAULT_BACKEND_URL
    user_id = DEFAULT_USER_ID
    if settings is not None:
        backend_url = settings.get_string('backend-url') or backend_url
        user_id = settings.get_string('user-id') or user_id

    return Config(
        backend_url=environ.get('NOET_BACKEND_URL') or backend_url,
        user_id=environ.get('NOET_USER_ID') or user_id,
    )
