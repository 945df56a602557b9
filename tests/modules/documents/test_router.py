"""
HTTP tests for the application documents router.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from app.core.auth import get_current_actor
from app.core.database import get_db
from app.core.rate_limit import RateLimitExceeded
from app.main import app
from app.modules.documents.schemas import VerificationStatusResponse
from app.modules.documents.service import CertificateNotRequiredError, DocumentNotFoundError

ROUTER = "app.modules.documents.router"


@pytest.fixture
def client(program_admin, mock_db):
    async def override_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[get_current_actor] = lambda: program_admin
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def base():
    return f"/api/v1/applications/{uuid4()}/documents"


class TestDocumentsRouter:
    def test_verification_status(self, client, base):
        report = VerificationStatusResponse(
            total_required=5,
            total_submitted=3,
            total_verified=2,
            missing_documents=[],
            unverified_documents=[],
            verified_documents=[],
            completion_percentage=60,
            verification_percentage=67,
        )

        with patch(f"{ROUTER}.service") as mock_service:
            mock_service.get_verification_status = AsyncMock(return_value=report)
            response = client.get(f"{base}/verification-status")

        assert response.status_code == 200
        assert response.json()["completion_percentage"] == 60
        assert response.json()["verification_percentage"] == 67

    def test_add_document_not_required(self, client, base):
        with patch(f"{ROUTER}.service") as mock_service:
            mock_service.add_document = AsyncMock(side_effect=CertificateNotRequiredError())
            response = client.post(
                base,
                json={"certificate_type_id": str(uuid4()), "file_upload_id": str(uuid4())},
            )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "CERTIFICATE_NOT_REQUIRED"

    def test_verify_passes_decision(self, client, base, program_admin, mock_db):
        document_id = uuid4()

        with (
            patch(f"{ROUTER}.enforce_rate_limit", new=AsyncMock()),
            patch(f"{ROUTER}.service") as mock_service,
        ):
            mock_service.verify_document = AsyncMock(side_effect=DocumentNotFoundError(document_id))
            response = client.put(
                f"{base}/{document_id}/verify",
                json={"is_verified": False, "verification_remarks": "Blurred scan"},
            )

            args = mock_service.verify_document.call_args.args
        assert response.status_code == 404
        assert args[0] is mock_db
        assert args[1] is program_admin
        assert args[3:] == (document_id, False, "Blurred scan")

    def test_verify_rate_limited(self, client, base):
        with (
            patch(
                f"{ROUTER}.enforce_rate_limit",
                new=AsyncMock(side_effect=RateLimitExceeded(60, 60)),
            ),
            patch(f"{ROUTER}.service") as mock_service,
        ):
            response = client.put(f"{base}/{uuid4()}/verify", json={"is_verified": True})

            mock_service.verify_document.assert_not_called()
        assert response.status_code == 429

    def test_delete_document(self, client, base):
        with patch(f"{ROUTER}.service") as mock_service:
            mock_service.delete_document = AsyncMock(return_value=None)
            response = client.delete(f"{base}/{uuid4()}")

        assert response.status_code == 200
        assert response.json() == {"message": "Document removed"}
