"""
Unit tests for file registration.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.auth import Actor
from app.core.errors import ForbiddenError
from app.modules.files.models import FileUpload
from app.modules.files.schemas import FileRegister
from app.modules.files.service import (
    FileInUseError,
    FileTooLargeError,
    FileTypeNotAllowedError,
    UploadNotFoundError,
    delete_file,
    file_extension,
    get_file,
    register_file,
    validate_upload,
    verify_file,
)
from app.modules.users.models import UserRole

REPOSITORY = "app.modules.files.service.repository"


@pytest.fixture
def mock_db():
    return AsyncMock()


@pytest.fixture
def student():
    return Actor(id=uuid4(), role=UserRole.STUDENT, email="student@test.edu")


@pytest.fixture
def program_admin():
    return Actor(id=uuid4(), role=UserRole.PROGRAM_ADMIN, program_id=uuid4())


@pytest.fixture
def stored_file(student):
    file_upload = MagicMock(spec=FileUpload)
    file_upload.id = uuid4()
    file_upload.uploaded_by = student.id
    file_upload.original_name = "ssc_memo.pdf"
    file_upload.file_size = 2048
    return file_upload


def registration(name="ssc_memo.pdf", size=2048, **extra):
    return FileRegister(filename="3f2a9c.pdf", original_name=name, file_size=size, **extra)


class TestValidation:
    @pytest.mark.parametrize(
        "name,expected",
        [("memo.PDF", "pdf"), ("scan.final.jpeg", "jpeg"), ("README", ""), (".hidden", "")],
    )
    def test_file_extension(self, name, expected):
        assert file_extension(name) == expected

    def test_accepts_allowed_type(self):
        validate_upload(registration("transfer_certificate.png"))

    def test_rejects_disallowed_type(self):
        with pytest.raises(FileTypeNotAllowedError) as exc_info:
            validate_upload(registration("payload.exe"))

        assert exc_info.value.error_code == "FILE_TYPE_NOT_ALLOWED"

    def test_rejects_missing_extension(self):
        with pytest.raises(FileTypeNotAllowedError):
            validate_upload(registration("memo"))

    def test_rejects_oversized_file(self):
        with patch("app.modules.files.service.settings") as mock_settings:
            mock_settings.upload_max_size_bytes = 1024
            mock_settings.upload_max_size_mb = 1

            with pytest.raises(FileTooLargeError) as exc_info:
                validate_upload(registration(size=1025))

        assert "1MB" in exc_info.value.message


class TestRegisterFile:
    @pytest.mark.asyncio
    async def test_defaults_file_path_under_storage_root(self, mock_db, student, stored_file):
        with (
            patch(REPOSITORY) as mock_repo,
            patch("app.modules.files.service.settings") as mock_settings,
        ):
            mock_settings.upload_max_size_bytes = 10 * 1024 * 1024
            mock_settings.upload_allowed_types_list = ["pdf"]
            mock_settings.storage_root = "uploads"
            mock_repo.create = AsyncMock(return_value=stored_file)

            await register_file(mock_db, student, registration())

        values = mock_repo.create.call_args.args[1]
        assert values["file_path"] == "uploads/3f2a9c.pdf"
        assert values["uploaded_by"] == student.id

    @pytest.mark.asyncio
    async def test_keeps_explicit_file_path(self, mock_db, student, stored_file):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.create = AsyncMock(return_value=stored_file)

            await register_file(
                mock_db, student, registration(file_path="s3://bucket/memo.pdf")
            )

        assert mock_repo.create.call_args.args[1]["file_path"] == "s3://bucket/memo.pdf"


class TestAccess:
    @pytest.mark.asyncio
    async def test_other_student_cannot_read(self, mock_db, stored_file):
        stranger = Actor(id=uuid4(), role=UserRole.STUDENT)
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=stored_file)

            with pytest.raises(ForbiddenError):
                await get_file(mock_db, stranger, stored_file.id)

    @pytest.mark.asyncio
    async def test_program_admin_can_read_and_verify(self, mock_db, program_admin, stored_file):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=stored_file)
            mock_repo.set_verified = AsyncMock(return_value=stored_file)

            assert await get_file(mock_db, program_admin, stored_file.id) is stored_file
            await verify_file(mock_db, program_admin, stored_file.id)

        mock_repo.set_verified.assert_awaited_once_with(
            mock_db, stored_file, is_verified=True, verified_by=program_admin.id
        )

    @pytest.mark.asyncio
    async def test_student_cannot_verify(self, mock_db, student):
        with pytest.raises(ForbiddenError):
            await verify_file(mock_db, student, uuid4())

    @pytest.mark.asyncio
    async def test_missing_file(self, mock_db, student):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)

            with pytest.raises(UploadNotFoundError):
                await get_file(mock_db, student, uuid4())


class TestDeleteFile:
    @pytest.mark.asyncio
    async def test_owner_deletes(self, mock_db, student, stored_file):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=stored_file)
            mock_repo.delete = AsyncMock()

            await delete_file(mock_db, student, stored_file.id)

        mock_repo.delete.assert_awaited_once_with(mock_db, stored_file)

    @pytest.mark.asyncio
    async def test_file_attached_to_document(self, mock_db, student, stored_file):
        with patch(REPOSITORY) as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=stored_file)
            mock_repo.delete = AsyncMock(
                side_effect=IntegrityError("DELETE", {}, Exception("fk violation"))
            )

            with pytest.raises(FileInUseError) as exc_info:
                await delete_file(mock_db, student, stored_file.id)

        assert exc_info.value.status_code == 409
