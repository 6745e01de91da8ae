class RacikError(Exception):
    """Base class for errors raised by the racikpc package."""


class CatalogError(RacikError):
    """A catalog write failed (reads never raise, they degrade to empty)."""

    def __init__(self, message, code=None, status=None):
        super().__init__(message)
        self.code = code
        self.status = status


class InvalidPayloadError(CatalogError):
    """A write payload was rejected before it was sent."""

    def __init__(self, message):
        super().__init__(message, status=400)


class AuthError(RacikError):
    """Login failed or the auth backend could not be reached."""


class ExportError(RacikError):
    """The build cannot be exported (empty or incompatible)."""
