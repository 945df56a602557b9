"""
Programs Module

Program catalog: programs, certificate types, and the ordered certificate
requirements each program places on its applications.

API Endpoints:
- /programs - Program CRUD and statistics
- /programs/{program_id}/certificates - Requirement catalog
- /certificate-types - Certificate type CRUD
"""

from .certificate_router import router as certificate_types_router
from .requirements_router import router as requirements_router
from .router import router

__all__ = ["router", "requirements_router", "certificate_types_router"]
