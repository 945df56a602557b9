"""
Shared module - Base model and helpers used across feature modules.
"""

from app.modules.shared.models import BaseModel
from app.modules.shared.pagination import PageParams, build_page

__all__ = ["BaseModel", "PageParams", "build_page"]
