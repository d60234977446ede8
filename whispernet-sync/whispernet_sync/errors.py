"""
Exceptions raised by the sync core
"""


class SyncError(Exception):
    """Base class for sync core errors"""


class RemoteDataError(SyncError):
    """A gateway call failed or returned an unusable payload"""


class ValidationError(SyncError):
    """Input rejected before any network call was made"""


class UnknownSettingError(ValidationError):
    """Setting name is not part of the settings record"""

    def __init__(self, name: str):
        super().__init__(f"Unknown setting: {name}")
        self.name = name


class PostCreationError(SyncError):
    """The remote API did not accept a new post"""
