"""
Application Documents Module

Documents submitted against a program's certificate requirements, and the
completeness / verification report built from them.

API Endpoints:
- /applications/{application_id}/documents - CRUD, verification and reports
"""

from .router import router

__all__ = ["router"]
