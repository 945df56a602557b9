from fastapi import APIRouter

from app.modules.applications import router as applications_router
from app.modules.documents import router as documents_router
from app.modules.files import router as files_router
from app.modules.notifications import router as notifications_router
from app.modules.programs import (
    certificate_types_router,
    requirements_router,
)
from app.modules.programs import router as programs_router

api_router = APIRouter()

api_router.include_router(applications_router, prefix="/applications", tags=["Applications"])

api_router.include_router(
    documents_router,
    prefix="/applications/{application_id}/documents",
    tags=["Application Documents"],
)

api_router.include_router(programs_router, prefix="/programs", tags=["Programs"])

api_router.include_router(
    requirements_router,
    prefix="/programs/{program_id}/certificates",
    tags=["Program Requirements"],
)

api_router.include_router(
    certificate_types_router, prefix="/certificate-types", tags=["Certificate Types"]
)

api_router.include_router(files_router, prefix="/files", tags=["Files"])

api_router.include_router(notifications_router, prefix="/notifications", tags=["Notifications"])
