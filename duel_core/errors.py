from __future__ import annotations


class DuelError(Exception):
    """Base class for every error raised by the duel packages."""


class MissingDependencyError(DuelError):
    """A collaborator an agent cannot tick without was not supplied."""


class MapFormatError(DuelError):
    """An arena layout could not be parsed."""
