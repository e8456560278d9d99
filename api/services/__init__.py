"""
API Services Layer.

Database operations behind the HTTP endpoints. Each function takes the
request's session explicitly; the application workflow and the notification
dispatcher are classes because they carry collaborators.
"""

from api.services.notifications import NotificationDispatcher, STATUS_MESSAGES
from api.services.applications import ApplicationWorkflow

__all__ = [
    "NotificationDispatcher",
    "STATUS_MESSAGES",
    "ApplicationWorkflow",
]
