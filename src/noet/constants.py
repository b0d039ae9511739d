# SPDX-License-Identifier: GPL-3.0-or-later

import json

APP_ID = 'io.github.noet.Noet'

DEFAULT_BACKEND_URL = 'http://localhost:3004'
DEFAULT_USER_ID = 'default'
REQUEST_TIMEOUT = 10

AUTOSAVE_DELAY_MS = 1500

# One empty paragraph. Stands in for blank content in the preview buffer.
EMPTY_DOCUMENT = json.dumps({
    'blocks': [{'type': 'paragraph', 'runs': [{'text': '', 'tags': []}]}],
})
