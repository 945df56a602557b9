"""
Notifications Module

In-app notifications, the emitter the application lifecycle publishes
through, and the hourly cleanup of expired notifications.

API Endpoints:
- /notifications - Listing, read state, admin creation and cleanup
"""

from .router import router

__all__ = ["router"]
