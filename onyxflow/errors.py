"""Exception hierarchy shared by the store, synchronizer and outer surfaces."""


class OnyxflowError(Exception):
    """Base class for all OnyxFlow errors."""


class RemoteStoreError(OnyxflowError):
    """The remote store rejected a call or could not be reached."""

    def __init__(self, message: str, *, table: str | None = None):
        super().__init__(message)
        self.table = table


class InvalidReferenceError(OnyxflowError, ValueError):
    """An entity references another entity missing from the local mirror."""
