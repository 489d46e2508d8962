"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Feed
    FeedFileNotFoundError,
    InvalidFeedRowError,

    # Import
    ImportAlreadyRunningError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Feed
    "FeedFileNotFoundError",
    "InvalidFeedRowError",

    # Import
    "ImportAlreadyRunningError",
]
