"""
Session manager exceptions.
"""


class DatabaseSessionError(Exception):
    """Base class for session manager failures."""


class DatabaseNotInitialized(DatabaseSessionError):
    def __init__(self):
        super().__init__("Database not initialized. Call Database.init() first.")


class DatabaseTransactionError(DatabaseSessionError):
    """Commit failed and the session was rolled back."""

    def __init__(self, original: Exception):
        self.original = original
        super().__init__(f"Transaction rolled back: {original}")
