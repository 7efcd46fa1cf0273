"""
Notifications module - In-app notifications created by background jobs.

API Endpoints:
- GET /notifications - Feed with unread count
- POST /notifications - Mark read/unread
"""

from camboconnect.modules.notifications.models import Notification, NotificationType
from camboconnect.modules.notifications.router import router

__all__ = ["Notification", "NotificationType", "router"]
