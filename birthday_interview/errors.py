"""Exception types shared by the store, the backup pipeline and the API."""


class BirthdayInterviewError(Exception):
    """Base class for all application errors."""


class StoreCorruptionError(BirthdayInterviewError):
    """A stored collection blob could not be decoded as a JSON array."""

    def __init__(self, key: str, detail: str):
        self.key = key
        super().__init__(f"Stored collection {key!r} is corrupt: {detail}")


class InvalidBackupError(BirthdayInterviewError):
    """Raised when a backup archive is structurally unusable."""


class BackupParseError(BirthdayInterviewError):
    """Raised when plain-JSON backup data cannot be parsed or is empty."""


class CapabilityUnavailableError(BirthdayInterviewError):
    """A filesystem or sharing capability needed by an operation is missing."""
