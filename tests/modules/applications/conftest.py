"""
Fixtures for applications tests.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import Actor
from app.modules.applications.models import (
    Application,
    ApplicationStatus,
    Gender,
    ReservationCategory,
)
from app.modules.applications.schemas import ApplicationCreate
from app.modules.notifications.emitter import RecordingNotificationEmitter
from app.modules.programs.models import Program, ProgramType
from app.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.rollback = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def program_id():
    return uuid4()


@pytest.fixture
def sample_program(program_id):
    program = MagicMock(spec=Program)
    program.id = program_id
    program.program_code = "BSC-CS"
    program.program_name = "B.Sc. Computer Science"
    program.program_type = ProgramType.UG
    program.department = "Computer Science"
    program.is_active = True
    return program


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
def program_admin(program_id):
    return Actor(
        id=uuid4(),
        role=UserRole.PROGRAM_ADMIN,
        program_id=program_id,
        email="padmin@test.edu",
    )


@pytest.fixture
def foreign_program_admin():
    """A program admin assigned to some other program."""
    return Actor(
        id=uuid4(),
        role=UserRole.PROGRAM_ADMIN,
        program_id=uuid4(),
        email="elsewhere@test.edu",
    )


@pytest.fixture
def recording_emitter():
    return RecordingNotificationEmitter()


@pytest.fixture
def sample_application_create(program_id):
    return ApplicationCreate(
        program_id=program_id,
        academic_year="2025-26",
        student_name="Ravi Kumar",
        father_name="Suresh Kumar",
        mother_name="Lakshmi",
        date_of_birth=date(2006, 4, 12),
        gender=Gender.MALE,
        mobile_number="9876543210",
        email="ravi@test.edu",
        identification_marks=["mole on left hand", "  "],
    )


@pytest.fixture
def sample_application_model(student, sample_program):
    """A draft application owned by the student fixture."""
    app = MagicMock(spec=Application)
    app.id = uuid4()
    app.application_number = "APP25000001"
    app.user_id = student.id
    app.program_id = sample_program.id
    app.program = sample_program
    app.academic_year = "2025-26"
    app.status = ApplicationStatus.DRAFT
    app.submitted_at = None
    app.reviewed_by = None
    app.reviewed_at = None
    app.approval_comments = None
    app.student_name = "Ravi Kumar"
    app.father_name = "Suresh Kumar"
    app.mother_name = "Lakshmi"
    app.date_of_birth = date(2006, 4, 12)
    app.gender = Gender.MALE
    app.mobile_number = "9876543210"
    app.email = "ravi@test.edu"
    app.reservation_category = ReservationCategory.OC
    app.created_at = datetime.now(UTC)
    return app


@pytest.fixture
def mock_history_repo():
    """
    Patchable repository stand-in whose save helpers return the application
    they were given, recording every history row.
    """
    repo = MagicMock()
    repo.history = []

    async def save_with_history(db, application, *, from_status, changed_by, remarks):
        repo.history.append(
            {
                "from_status": from_status,
                "to_status": application.status,
                "changed_by": changed_by,
                "remarks": remarks,
            }
        )
        return application

    async def save(db, application):
        return application

    repo.save_with_history = AsyncMock(side_effect=save_with_history)
    repo.save = AsyncMock(side_effect=save)
    return repo
