"""
Fixtures for program catalog tests.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import Actor
from app.modules.programs.models import CertificateType, Program, ProgramType
from app.modules.programs.schemas import ProgramCreate
from app.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def admin():
    return Actor(id=uuid4(), role=UserRole.ADMIN, email="admin@test.edu")


@pytest.fixture
def program_admin():
    return Actor(
        id=uuid4(), role=UserRole.PROGRAM_ADMIN, program_id=uuid4(), email="padmin@test.edu"
    )


@pytest.fixture
def sample_program():
    program = MagicMock(spec=Program)
    program.id = uuid4()
    program.program_code = "BSC-CS"
    program.program_name = "B.Sc. Computer Science"
    program.program_type = ProgramType.UG
    program.total_seats = 60
    program.is_active = True
    return program


@pytest.fixture
def sample_certificate_type():
    certificate_type = MagicMock(spec=CertificateType)
    certificate_type.id = uuid4()
    certificate_type.name = "SSC Memo"
    return certificate_type


@pytest.fixture
def sample_program_create():
    return ProgramCreate(
        program_code="BSC-CS",
        program_name="B.Sc. Computer Science",
        program_type=ProgramType.UG,
        department="Computer Science",
        duration_years=3,
        total_seats=60,
    )
