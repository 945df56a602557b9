"""
Unit tests for the document verification engine and document mutations.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.auth import Actor
from app.core.errors import ForbiddenError
from app.modules.documents.schemas import DocumentCreate, DocumentUpdate
from app.modules.documents.service import (
    ApplicationNotFoundError,
    CertificateNotRequiredError,
    DocumentNotFoundError,
    DuplicateDocumentError,
    FileUploadNotFoundError,
    add_document,
    get_available_types,
    get_verification_status,
    list_documents,
    percentage,
    update_document,
    verify_document,
)
from app.modules.users.models import User, UserRole

SERVICE = "app.modules.documents.service"


@pytest.fixture
def repos(application):
    """Patch every repository the service touches."""
    with (
        patch(f"{SERVICE}.applications_repository") as applications_repo,
        patch(f"{SERVICE}.repository") as documents_repo,
        patch(f"{SERVICE}.programs_repository") as programs_repo,
        patch(f"{SERVICE}.files_repository") as files_repo,
        patch(f"{SERVICE}.UserRepository") as users_repo,
    ):
        applications_repo.get_by_id = AsyncMock(return_value=application)
        documents_repo.list_for_application = AsyncMock(return_value=[])
        documents_repo.get_for_certificate = AsyncMock(return_value=None)
        documents_repo.save = AsyncMock(side_effect=lambda db, document: document)
        programs_repo.list_requirements = AsyncMock(return_value=[])
        users_repo.get_by_ids = AsyncMock(return_value={})
        yield SimpleNamespace(
            applications=applications_repo,
            documents=documents_repo,
            programs=programs_repo,
            files=files_repo,
            users=users_repo,
        )


class TestPercentage:
    @pytest.mark.parametrize(
        "part,whole,expected",
        [(3, 5, 60), (2, 3, 67), (1, 3, 33), (1, 8, 13), (5, 5, 100), (0, 4, 0), (3, 0, 0)],
    )
    def test_rounds_half_up(self, part, whole, expected):
        assert percentage(part, whole) == expected


class TestVerificationStatus:
    """Tests for the completeness and verification report."""

    @pytest.mark.asyncio
    async def test_five_required_three_submitted_two_verified(
        self,
        mock_db,
        student,
        application,
        repos,
        make_certificate_type,
        make_requirement,
        make_document,
    ):
        types = [make_certificate_type(f"Certificate {i}") for i in range(5)]
        repos.programs.list_requirements.return_value = [
            make_requirement(application.program_id, t, order=i) for i, t in enumerate(types)
        ]
        repos.documents.list_for_application.return_value = [
            make_document(application.id, types[0], is_verified=True),
            make_document(application.id, types[1], is_verified=True),
            make_document(application.id, types[2]),
        ]

        report = await get_verification_status(mock_db, student, application.id)

        repos.programs.list_requirements.assert_awaited_once_with(
            mock_db, application.program_id, required_only=True
        )
        assert report.total_required == 5
        assert report.total_submitted == 3
        assert report.total_verified == 2
        assert report.completion_percentage == 60
        assert report.verification_percentage == 67
        assert [m.name for m in report.missing_documents] == ["Certificate 3", "Certificate 4"]
        assert len(report.verified_documents) == 2
        assert len(report.unverified_documents) == 1

    @pytest.mark.asyncio
    async def test_nothing_required_nothing_submitted(self, mock_db, admin, application, repos):
        report = await get_verification_status(mock_db, admin, application.id)

        assert report.completion_percentage == 0
        assert report.verification_percentage == 0
        assert report.missing_documents == []

    @pytest.mark.asyncio
    async def test_optional_documents_count_as_submitted(
        self,
        mock_db,
        admin,
        application,
        repos,
        make_certificate_type,
        make_requirement,
        make_document,
    ):
        required = make_certificate_type("SSC Memo")
        optional = make_certificate_type("Sports Certificate")
        repos.programs.list_requirements.return_value = [
            make_requirement(application.program_id, required)
        ]
        repos.documents.list_for_application.return_value = [
            make_document(application.id, required),
            make_document(application.id, optional),
        ]

        report = await get_verification_status(mock_db, admin, application.id)

        assert report.total_submitted == 2
        assert report.completion_percentage == 200

    @pytest.mark.asyncio
    async def test_verifier_expanded(
        self, mock_db, admin, application, repos, make_certificate_type, make_document
    ):
        memo = make_certificate_type("SSC Memo")
        document = make_document(application.id, memo, is_verified=True)
        repos.documents.list_for_application.return_value = [document]
        verifier = MagicMock(spec=User)
        verifier.id = document.verified_by
        verifier.email = "checker@test.edu"
        repos.users.get_by_ids.return_value = {verifier.id: verifier}

        report = await get_verification_status(mock_db, admin, application.id)

        assert report.verified_documents[0].verifier.email == "checker@test.edu"

    @pytest.mark.asyncio
    async def test_other_program_admin_forbidden(self, mock_db, application, repos):
        outsider = Actor(id=uuid4(), role=UserRole.PROGRAM_ADMIN, program_id=uuid4())

        with pytest.raises(ForbiddenError):
            await get_verification_status(mock_db, outsider, application.id)

    @pytest.mark.asyncio
    async def test_missing_application(self, mock_db, admin, repos):
        repos.applications.get_by_id.return_value = None

        with pytest.raises(ApplicationNotFoundError):
            await get_verification_status(mock_db, admin, uuid4())


class TestAvailableTypes:
    @pytest.mark.asyncio
    async def test_flags_covered_requirements(
        self,
        mock_db,
        student,
        application,
        repos,
        make_certificate_type,
        make_requirement,
        make_document,
    ):
        memo = make_certificate_type("SSC Memo")
        tc = make_certificate_type("Transfer Certificate")
        repos.programs.list_requirements.return_value = [
            make_requirement(application.program_id, memo, order=1),
            make_requirement(application.program_id, tc, is_required=False, order=2),
        ]
        repos.documents.list_for_application.return_value = [make_document(application.id, memo)]

        result = await get_available_types(mock_db, student, application.id)

        assert [(r.certificate_type.name, r.has_document) for r in result] == [
            ("SSC Memo", True),
            ("Transfer Certificate", False),
        ]
        assert result[1].is_required is False


class TestAddDocument:
    """Tests for add_document."""

    @pytest.mark.asyncio
    async def test_add_defaults_name_to_file_name(
        self,
        mock_db,
        student,
        application,
        repos,
        make_certificate_type,
        make_requirement,
        make_file,
        make_document,
    ):
        memo = make_certificate_type("SSC Memo")
        upload = make_file("ssc_memo_scan.pdf", uploaded_by=student.id)
        repos.programs.get_requirement_for_certificate = AsyncMock(
            return_value=make_requirement(application.program_id, memo)
        )
        repos.files.get_by_id = AsyncMock(return_value=upload)
        repos.documents.create = AsyncMock(return_value=make_document(application.id, memo))

        result = await add_document(
            mock_db,
            student,
            application.id,
            DocumentCreate(certificate_type_id=memo.id, file_upload_id=upload.id),
        )

        values = repos.documents.create.call_args.args[1]
        assert values["document_name"] == "ssc_memo_scan.pdf"
        assert values["application_id"] == application.id
        assert result.certificate_type.name == "SSC Memo"

    @pytest.mark.asyncio
    async def test_certificate_not_required_by_program(self, mock_db, student, application, repos):
        repos.programs.get_requirement_for_certificate = AsyncMock(return_value=None)

        with pytest.raises(CertificateNotRequiredError) as exc_info:
            await add_document(
                mock_db,
                student,
                application.id,
                DocumentCreate(certificate_type_id=uuid4(), file_upload_id=uuid4()),
            )

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_file(self, mock_db, student, application, repos):
        repos.programs.get_requirement_for_certificate = AsyncMock(return_value=MagicMock())
        repos.files.get_by_id = AsyncMock(return_value=None)

        with pytest.raises(FileUploadNotFoundError):
            await add_document(
                mock_db,
                student,
                application.id,
                DocumentCreate(certificate_type_id=uuid4(), file_upload_id=uuid4()),
            )

    @pytest.mark.asyncio
    async def test_student_cannot_attach_someone_elses_file(
        self, mock_db, student, application, repos, make_file
    ):
        repos.programs.get_requirement_for_certificate = AsyncMock(return_value=MagicMock())
        repos.files.get_by_id = AsyncMock(return_value=make_file(uploaded_by=uuid4()))
        repos.documents.create = AsyncMock()

        with pytest.raises(ForbiddenError):
            await add_document(
                mock_db,
                student,
                application.id,
                DocumentCreate(certificate_type_id=uuid4(), file_upload_id=uuid4()),
            )

        repos.documents.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_program_admin_attaches_student_file(
        self,
        mock_db,
        student,
        program_admin,
        application,
        repos,
        make_certificate_type,
        make_requirement,
        make_file,
        make_document,
    ):
        memo = make_certificate_type("SSC Memo")
        upload = make_file(uploaded_by=student.id)
        repos.programs.get_requirement_for_certificate = AsyncMock(
            return_value=make_requirement(application.program_id, memo)
        )
        repos.files.get_by_id = AsyncMock(return_value=upload)
        repos.documents.create = AsyncMock(return_value=make_document(application.id, memo))

        await add_document(
            mock_db,
            program_admin,
            application.id,
            DocumentCreate(certificate_type_id=memo.id, file_upload_id=upload.id),
        )

        repos.documents.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_certificate_type(
        self, mock_db, student, application, repos, make_file
    ):
        repos.programs.get_requirement_for_certificate = AsyncMock(return_value=MagicMock())
        repos.files.get_by_id = AsyncMock(return_value=make_file(uploaded_by=student.id))
        repos.documents.get_for_certificate.return_value = MagicMock()

        with pytest.raises(DuplicateDocumentError) as exc_info:
            await add_document(
                mock_db,
                student,
                application.id,
                DocumentCreate(certificate_type_id=uuid4(), file_upload_id=uuid4()),
            )

        assert exc_info.value.status_code == 409
        repos.documents.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_caught_by_constraint(
        self, mock_db, student, application, repos, make_file
    ):
        repos.programs.get_requirement_for_certificate = AsyncMock(return_value=MagicMock())
        repos.files.get_by_id = AsyncMock(return_value=make_file(uploaded_by=student.id))
        repos.documents.create = AsyncMock(
            side_effect=IntegrityError("INSERT", {}, Exception("duplicate key"))
        )

        with pytest.raises(DuplicateDocumentError):
            await add_document(
                mock_db,
                student,
                application.id,
                DocumentCreate(certificate_type_id=uuid4(), file_upload_id=uuid4()),
            )


class TestUpdateAndVerify:
    """Tests for update_document and verify_document."""

    @pytest.mark.asyncio
    async def test_student_cannot_self_verify(
        self, mock_db, student, application, repos, make_certificate_type, make_document
    ):
        document = make_document(application.id, make_certificate_type("SSC Memo"))
        repos.documents.get_by_id = AsyncMock(return_value=document)

        result = await update_document(
            mock_db,
            student,
            application.id,
            document.id,
            DocumentUpdate(is_verified=True, remarks="scanned again"),
        )

        assert result.is_verified is False
        assert result.remarks == "scanned again"

    @pytest.mark.asyncio
    async def test_replacing_file_resets_verification(
        self, mock_db, student, application, repos, make_certificate_type, make_document, make_file
    ):
        memo = make_certificate_type("SSC Memo")
        document = make_document(application.id, memo, is_verified=True)
        document.verification_remarks = "Looks fine"
        new_file = make_file("rescan.pdf", uploaded_by=student.id)
        repos.documents.get_by_id = AsyncMock(return_value=document)
        repos.files.get_by_id = AsyncMock(return_value=new_file)

        result = await update_document(
            mock_db,
            student,
            application.id,
            document.id,
            DocumentUpdate(file_upload_id=new_file.id),
        )

        assert result.file_upload_id == new_file.id
        assert result.is_verified is False
        assert result.verified_by is None
        assert result.verified_at is None
        assert result.verification_remarks is None

    @pytest.mark.asyncio
    async def test_replacing_with_foreign_file_forbidden(
        self, mock_db, student, application, repos, make_certificate_type, make_document, make_file
    ):
        document = make_document(application.id, make_certificate_type("SSC Memo"))
        original_file_id = document.file_upload_id
        repos.documents.get_by_id = AsyncMock(return_value=document)
        repos.files.get_by_id = AsyncMock(return_value=make_file(uploaded_by=uuid4()))

        with pytest.raises(ForbiddenError):
            await update_document(
                mock_db,
                student,
                application.id,
                document.id,
                DocumentUpdate(file_upload_id=uuid4()),
            )

        assert document.file_upload_id == original_file_id
        repos.documents.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_staff_can_replace_file_and_keep_verified(
        self, mock_db, admin, application, repos, make_certificate_type, make_document, make_file
    ):
        document = make_document(application.id, make_certificate_type("SSC Memo"))
        new_file = make_file("rescan.pdf")
        repos.documents.get_by_id = AsyncMock(return_value=document)
        repos.files.get_by_id = AsyncMock(return_value=new_file)

        result = await update_document(
            mock_db,
            admin,
            application.id,
            document.id,
            DocumentUpdate(file_upload_id=new_file.id, is_verified=True),
        )

        assert result.is_verified is True
        assert result.verified_by == admin.id

    @pytest.mark.asyncio
    async def test_document_of_other_application_not_found(
        self, mock_db, admin, application, repos, make_certificate_type, make_document
    ):
        document = make_document(uuid4(), make_certificate_type("SSC Memo"))
        repos.documents.get_by_id = AsyncMock(return_value=document)

        with pytest.raises(DocumentNotFoundError):
            await verify_document(mock_db, admin, application.id, document.id, True)

    @pytest.mark.asyncio
    async def test_program_admin_verifies(
        self, mock_db, program_admin, application, repos, make_certificate_type, make_document
    ):
        document = make_document(application.id, make_certificate_type("SSC Memo"))
        repos.documents.get_by_id = AsyncMock(return_value=document)

        result = await verify_document(
            mock_db, program_admin, application.id, document.id, False, "Blurred scan"
        )

        assert result.is_verified is False
        assert result.verified_by == program_admin.id
        assert result.verified_at is not None
        assert result.verification_remarks == "Blurred scan"

    @pytest.mark.asyncio
    async def test_student_cannot_verify(self, mock_db, student, application, repos):
        with pytest.raises(ForbiddenError):
            await verify_document(mock_db, student, application.id, uuid4(), True)

    @pytest.mark.asyncio
    async def test_list_documents_for_owner(
        self, mock_db, student, application, repos, make_certificate_type, make_document
    ):
        repos.documents.list_for_application.return_value = [
            make_document(application.id, make_certificate_type("SSC Memo"))
        ]

        result = await list_documents(mock_db, student, application.id)

        assert [d.document_name for d in result] == ["SSC Memo"]
