"""
This file contains custom, application-specific exceptions.
"""

class InvalidLessonTransitionError(Exception):
    """Raised when a lesson is asked to move to a status its current status does not allow."""
    def __init__(self, current: str | None, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(
            f"Cannot move a lesson from '{current or 'scheduled'}' to '{requested}'."
        )

class StorageError(Exception):
    """Raised when the blob storage service rejects or fails a request."""
    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)

class CascadeDeleteError(Exception):
    """Raised when a multi-step delete stops part way. Re-running the delete finishes the job."""
    pass
