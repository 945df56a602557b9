"""
Seed Admissions Catalog

Creates the initial admin user, the standard certificate types and one
sample program requiring them. Safe to run more than once: existing rows
are left untouched.

Usage:
    python scripts/seed_catalog.py admin@example.edu

Prints a development access token for the admin user.
"""

import asyncio
import sys
from pathlib import Path

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.security import create_access_token
from app.modules.programs.models import (
    CertificateType,
    Program,
    ProgramCertificateRequirement,
    ProgramType,
)
from app.modules.users.models import UserRole
from app.modules.users.repository import UserRepository

CERTIFICATE_TYPES = [
    ("SSC Memo", "Secondary school certificate marks memo"),
    ("Intermediate Memo", "Intermediate marks memo"),
    ("Transfer Certificate", "Transfer certificate from the last institution attended"),
    ("Caste Certificate", "Issued by the competent authority"),
    ("Income Certificate", "Issued within the current financial year"),
    ("Aadhar Card", None),
]

SAMPLE_PROGRAM = {
    "program_code": "BSC-CS",
    "program_name": "B.Sc. Computer Science",
    "program_type": ProgramType.UG,
    "department": "Computer Science",
    "duration_years": 3,
    "total_seats": 60,
}

# Certificate types the sample program requires (the rest are optional)
SAMPLE_REQUIRED = {"SSC Memo", "Intermediate Memo", "Transfer Certificate"}


async def seed_catalog(admin_email: str) -> None:
    engine = create_async_engine(settings.database_url, echo=False)
    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as db:
        admin = await UserRepository.get_by_email(db, admin_email)
        if admin:
            print(f"Admin already exists: {admin_email}")
        else:
            admin = await UserRepository.create(
                db, email=admin_email, role=UserRole.ADMIN, full_name="Administrator"
            )
            print(f"Admin created: {admin_email}")

        certificate_types = {}
        for order, (name, description) in enumerate(CERTIFICATE_TYPES, start=1):
            cert = (
                await db.execute(select(CertificateType).where(CertificateType.name == name))
            ).scalar_one_or_none()
            if not cert:
                cert = CertificateType(name=name, description=description, display_order=order)
                db.add(cert)
                print(f"Certificate type created: {name}")
            certificate_types[name] = cert

        program = (
            await db.execute(
                select(Program).where(Program.program_code == SAMPLE_PROGRAM["program_code"])
            )
        ).scalar_one_or_none()
        if program:
            print(f"Program already exists: {program.program_code}")
        else:
            program = Program(**SAMPLE_PROGRAM)
            db.add(program)
            await db.flush()
            for order, (name, cert) in enumerate(certificate_types.items(), start=1):
                db.add(
                    ProgramCertificateRequirement(
                        program_id=program.id,
                        certificate_type=cert,
                        is_required=name in SAMPLE_REQUIRED,
                        display_order=order,
                    )
                )
            print(
                f"Program created: {program.program_code} "
                f"with {len(certificate_types)} requirements"
            )

        await db.commit()
        await db.refresh(admin)

        token = create_access_token(str(admin.id), role=UserRole.ADMIN.value, email=admin.email)
        print(f"  Admin ID: {admin.id}")
        print(f"  Access token: {token}")

    await engine.dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/seed_catalog.py <admin-email>")
        sys.exit(1)
    asyncio.run(seed_catalog(sys.argv[1]))
