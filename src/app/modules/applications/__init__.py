"""
Applications Module

Student applications and their lifecycle: creation, editing, submission,
review status changes and the append-only status history.

API Endpoints:
- /applications - Listing, creation, statistics and bulk updates
- /applications/{id} - Detail, update, submit, status and history
"""

from .router import router

__all__ = ["router"]
