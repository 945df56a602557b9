"""
Fixtures for notification tests.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import Actor
from app.modules.notifications.models import Notification, NotificationType
from app.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def student():
    return Actor(id=uuid4(), role=UserRole.STUDENT, email="student@test.edu")


@pytest.fixture
def other_student():
    return Actor(id=uuid4(), role=UserRole.STUDENT, email="other@test.edu")


@pytest.fixture
def admin():
    return Actor(id=uuid4(), role=UserRole.ADMIN, email="admin@test.edu")


@pytest.fixture
def sample_notification(student):
    notification = MagicMock(spec=Notification)
    notification.id = uuid4()
    notification.user_id = student.id
    notification.title = "Application Submitted"
    notification.type = NotificationType.INFO
    notification.is_read = False
    return notification
