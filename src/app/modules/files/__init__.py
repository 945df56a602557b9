"""
Files Module

References to files held in external storage. Only metadata is recorded
here; size and type limits come from settings.

API Endpoints:
- /files - Register and list the caller's files
- /files/{id} - Details, verification and deletion
"""

from .router import router

__all__ = ["router"]
