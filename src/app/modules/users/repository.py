"""
User Repository

Database operations for the identity directory.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.users.models import User, UserRole

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for user database operations."""

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        role: UserRole,
        full_name: str | None = None,
        program_id: UUID | None = None,
        is_active: bool = True,
    ) -> User:
        """
        Create a new user record.

        Args:
            db: Database session
            email: User's email address (unique)
            role: User's role
            full_name: Display name (optional)
            program_id: Assigned program (program admins only)
            is_active: Whether user is active

        Returns:
            Created User instance
        """
        user = User(
            email=email,
            role=role,
            full_name=full_name,
            program_id=program_id,
            is_active=is_active,
        )

        db.add(user)
        await db.flush()
        await db.refresh(user)

        logger.info(f"Created user: {user.id} - {user.email} ({user.role.value})")
        return user

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: UUID) -> User | None:
        """Get a user by ID."""
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_email(db: AsyncSession, email: str) -> User | None:
        """Get a user by email address."""
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_by_ids(db: AsyncSession, user_ids: list[UUID]) -> dict[UUID, User]:
        """
        Batch-load users for read-side expansion.

        Returns:
            Mapping of user id to User for the ids that exist
        """
        if not user_ids:
            return {}
        result = await db.execute(select(User).where(User.id.in_(set(user_ids))))
        return {user.id: user for user in result.scalars().all()}

    @staticmethod
    async def get_active_program_admins(db: AsyncSession, program_id: UUID) -> list[User]:
        """
        Get all active program admins assigned to a program.

        Args:
            db: Database session
            program_id: Program UUID

        Returns:
            List of active program admin users
        """
        result = await db.execute(
            select(User).where(
                User.role == UserRole.PROGRAM_ADMIN,
                User.program_id == program_id,
                User.is_active == True,  # noqa: E712
            )
        )
        return list(result.scalars().all())
