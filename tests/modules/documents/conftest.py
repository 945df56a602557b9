"""
Fixtures for application document tests.

Documents are built as real (transient) model instances so the service's
response serialization runs for real.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from app.core.auth import Actor
from app.modules.applications.models import Application, ApplicationStatus
from app.modules.documents.models import ApplicationDocument
from app.modules.files.models import FileUpload
from app.modules.programs.models import CertificateType, ProgramCertificateRequirement
from app.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def program_id():
    return uuid4()


@pytest.fixture
def student():
    return Actor(id=uuid4(), role=UserRole.STUDENT, email="student@test.edu")


@pytest.fixture
def admin():
    return Actor(id=uuid4(), role=UserRole.ADMIN, email="admin@test.edu")


@pytest.fixture
def program_admin(program_id):
    return Actor(
        id=uuid4(), role=UserRole.PROGRAM_ADMIN, program_id=program_id, email="padmin@test.edu"
    )


@pytest.fixture
def application(student, program_id):
    app = MagicMock(spec=Application)
    app.id = uuid4()
    app.user_id = student.id
    app.program_id = program_id
    app.status = ApplicationStatus.DRAFT
    return app


def _certificate_type(name: str) -> CertificateType:
    return CertificateType(
        id=uuid4(),
        name=name,
        description=f"{name} issued by the board",
        file_types_allowed="pdf,jpg",
        max_file_size_mb=5,
    )


def _file(name: str = "memo.pdf", uploaded_by=None) -> FileUpload:
    return FileUpload(
        id=uuid4(),
        filename=f"{uuid4().hex}.pdf",
        original_name=name,
        file_path=f"uploads/{name}",
        file_size=2048,
        mime_type="application/pdf",
        uploaded_by=uploaded_by,
        created_at=datetime.now(UTC),
    )


def _requirement(
    program_id, certificate_type: CertificateType, *, is_required: bool = True, order: int = 0
) -> ProgramCertificateRequirement:
    requirement = ProgramCertificateRequirement(
        id=uuid4(),
        program_id=program_id,
        certificate_type_id=certificate_type.id,
        is_required=is_required,
        display_order=order,
        is_active=True,
    )
    requirement.certificate_type = certificate_type
    return requirement


def _document(
    application_id, certificate_type: CertificateType, *, is_verified: bool = False
) -> ApplicationDocument:
    now = datetime.now(UTC)
    file_upload = _file()
    document = ApplicationDocument(
        id=uuid4(),
        application_id=application_id,
        certificate_type_id=certificate_type.id,
        file_upload_id=file_upload.id,
        document_name=certificate_type.name,
        is_verified=is_verified,
        verified_by=uuid4() if is_verified else None,
        verified_at=now if is_verified else None,
        created_at=now,
        updated_at=now,
    )
    document.certificate_type = certificate_type
    document.file_upload = file_upload
    return document


@pytest.fixture
def make_certificate_type():
    return _certificate_type


@pytest.fixture
def make_file():
    return _file


@pytest.fixture
def make_requirement():
    return _requirement


@pytest.fixture
def make_document():
    return _document
