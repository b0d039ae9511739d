# SPDX-License-Identifier: GPL-3.0-or-later


class NoetError(Exception):
    """Base class for errors reported by the Noet client."""


class FetchFailed(NoetError):
    """A read (or a non-restore write) against the backend failed."""


class RestoreFailed(NoetError):
    """The backend could not restore a version."""
