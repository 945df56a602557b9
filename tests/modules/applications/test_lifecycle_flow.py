"""
Lifecycle scenario: create -> submit -> approve -> approve again.

Runs the service end to end against a stand-in repository and a recording
emitter, checking the history ledger and the notifications produced at
each step.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from app.modules.applications.models import ApplicationStatus
from app.modules.applications.schemas import StatusChangeRequest
from app.modules.applications.service import (
    ApplicationNotFoundError,
    change_status,
    create_application,
    submit_application,
)
from app.modules.users.models import User

SERVICE = "app.modules.applications.service"


@pytest.mark.asyncio
async def test_full_lifecycle(
    mock_db,
    student,
    program_admin,
    sample_program,
    sample_application_create,
    sample_application_model,
    mock_history_repo,
    recording_emitter,
):
    mock_history_repo.get_for_user_program_year = AsyncMock(return_value=None)
    mock_history_repo.count_all = AsyncMock(return_value=0)
    mock_history_repo.create_with_history = AsyncMock(return_value=sample_application_model)
    mock_history_repo.get_by_id = AsyncMock(return_value=sample_application_model)

    reviewer_user = MagicMock(spec=User)
    reviewer_user.id = program_admin.id
    reviewer_user.email = program_admin.email

    with (
        patch(f"{SERVICE}.repository", new=mock_history_repo),
        patch(f"{SERVICE}.programs_service") as mock_programs,
        patch(f"{SERVICE}.UserRepository") as mock_users,
    ):
        mock_programs.get_program = AsyncMock(return_value=sample_program)
        mock_users.get_active_program_admins = AsyncMock(return_value=[reviewer_user])

        application = await create_application(
            mock_db, student, sample_application_create, recording_emitter
        )
        assert application.status == ApplicationStatus.DRAFT

        application = await submit_application(
            mock_db, student, application.id, recording_emitter
        )
        submitted_at = application.submitted_at
        assert application.status == ApplicationStatus.SUBMITTED
        assert submitted_at is not None

        application = await change_status(
            mock_db,
            program_admin,
            application.id,
            StatusChangeRequest(status=ApplicationStatus.APPROVED),
            recording_emitter,
        )
        reviewed_at = application.reviewed_at
        assert application.status == ApplicationStatus.APPROVED
        assert application.reviewed_by == program_admin.id

        # Approving again changes nothing
        application = await change_status(
            mock_db,
            program_admin,
            application.id,
            StatusChangeRequest(status=ApplicationStatus.APPROVED, remarks="double click"),
            recording_emitter,
        )

    assert application.reviewed_at == reviewed_at
    assert application.submitted_at == submitted_at

    assert [(h["from_status"], h["to_status"]) for h in mock_history_repo.history] == [
        (ApplicationStatus.DRAFT, ApplicationStatus.SUBMITTED),
        (ApplicationStatus.SUBMITTED, ApplicationStatus.APPROVED),
    ]
    assert [h["changed_by"] for h in mock_history_repo.history] == [student.id, program_admin.id]

    assert [(m.title, m.user_id) for m in recording_emitter.messages] == [
        ("Application Created", student.id),
        ("New Application Submitted", program_admin.id),
        ("Application Status Updated", student.id),
    ]


@pytest.mark.asyncio
async def test_history_written_for_every_accepted_transition(
    mock_db, admin, sample_application_model, mock_history_repo, recording_emitter
):
    mock_history_repo.get_by_id = AsyncMock(return_value=sample_application_model)
    path = [
        ApplicationStatus.SUBMITTED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.REJECTED,
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
    ]

    with patch(f"{SERVICE}.repository", new=mock_history_repo):
        for status in path:
            await change_status(
                mock_db,
                admin,
                sample_application_model.id,
                StatusChangeRequest(status=status),
                recording_emitter,
            )

    assert [h["to_status"] for h in mock_history_repo.history] == path
    expected_from = [ApplicationStatus.DRAFT, *path[:-1]]
    assert [h["from_status"] for h in mock_history_repo.history] == expected_from
    # First review stamp survives the later approval
    assert sample_application_model.reviewed_by == admin.id
    assert len(recording_emitter.messages) == len(path)


@pytest.mark.asyncio
async def test_missing_application_id_is_not_found(mock_db, admin):
    with patch(f"{SERVICE}.repository") as mock_repo:
        mock_repo.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(ApplicationNotFoundError) as exc_info:
            await change_status(
                mock_db, admin, uuid4(), StatusChangeRequest(status=ApplicationStatus.FROZEN)
            )

    assert exc_info.value.error_code == "APPLICATION_NOT_FOUND"
