"""
Service layer for business logic implementation.
Contains services for authentication, listings, notifications and error handling.
"""

from .auth import AuthService
from .property import PropertyService
from .notification import NotificationService, dispatch_notification
from .error_handler import ErrorHandlerService

__all__ = [
    "AuthService",
    "PropertyService",
    "NotificationService",
    "dispatch_notification",
    "ErrorHandlerService"
]
