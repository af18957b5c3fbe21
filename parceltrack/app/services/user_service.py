"""
User registration, login and account management.

Short IDs are assigned best-effort at registration: candidates already in
use are skipped via a pre-check, a racing duplicate is retried, and if the
budget runs out the user is created without a short ID.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from parceltrack.app.core.config import Settings
from parceltrack.app.core.exceptions import (
    AccountBlockedError, AllocationExhaustedError, AuthenticationError,
    DuplicateIdentifierError, InsufficientPermissionsError, ResourceNotFoundError,
    ValidationError,
)
from parceltrack.app.core.jwt import create_access_token
from parceltrack.app.core.security import get_password_hash, verify_password
from parceltrack.app.core.token_revocation import clear_user_token_revocation, revoke_all_user_tokens
from parceltrack.app.domain.identifiers.allocator import allocate_unique_identifier
from parceltrack.app.domain.identifiers.generator import generate_short_id
from parceltrack.app.models.enums import UserRole
from parceltrack.app.models.user import User
from parceltrack.app.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def token_payload(user: User) -> dict:
    return {
        "sub": user.email,
        "user_id": user.id,
        "role": user.role.value,
    }


class UserService:
    
    def __init__(self, db: AsyncSession, settings: Settings):
        self.db = db
        self.settings = settings
        self.users = UserRepository(db)
    
    def new_short_id(self) -> str:
        return generate_short_id(self.settings.short_id_length)
    
    def issue_token(self, user: User) -> str:
        return create_access_token(data=token_payload(user))
    
    async def register(
        self,
        name: str,
        email: str,
        password: str,
        role: Optional[UserRole] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
    ) -> Tuple[User, str]:
        """
        Register a user and return it with a fresh access token.
        
        Raises:
            InsufficientPermissionsError: Admin accounts cannot self-register
            ValidationError: Missing fields or email already in use
        """
        role = role or UserRole.SENDER
        if role == UserRole.ADMIN:
            raise InsufficientPermissionsError("Admin users cannot be registered via API")
        
        name = (name or "").strip()
        email = (email or "").strip().lower()
        if not name or not email or not password:
            raise ValidationError("name, email and password are required")
        
        if await self.users.find_by_email(email):
            raise ValidationError("Email already in use")
        
        hashed_password = get_password_hash(password, self.settings.bcrypt_rounds)
        
        async def create(short_id: Optional[str]) -> User:
            user = User(
                name=name,
                email=email,
                hashed_password=hashed_password,
                role=role,
                short_id=short_id,
                is_blocked=False,
                phone=phone,
                address=address,
            )
            try:
                return await self.users.create(user)
            except DuplicateIdentifierError as exc:
                if exc.field == "email":
                    raise ValidationError("Email already in use") from exc
                raise
        
        try:
            user = await allocate_unique_identifier(
                self.new_short_id,
                create,
                exists=self.users.short_id_exists,
                max_attempts=self.settings.id_allocation_max_attempts,
                field="short_id",
            )
        except AllocationExhaustedError:
            logger.warning("Registering %s without a short ID", email)
            user = await create(None)
        
        logger.info("User %s registered as %s", user.id, user.role.value)
        return user, self.issue_token(user)
    
    async def login(self, identifier: str, password: str) -> Tuple[User, str]:
        """
        Authenticate by email (case-insensitive) or short ID.
        
        Raises:
            AuthenticationError: Unknown user or wrong password
            AccountBlockedError: Valid credentials for a blocked user
        """
        identifier = (identifier or "").strip()
        user = await self.users.find_by_email(identifier)
        if user is None:
            user = await self.users.find_by_short_id(identifier)
        
        if user is None or not verify_password(password or "", user.hashed_password):
            logger.info("Failed login for %r", identifier)
            raise AuthenticationError("Invalid credentials")
        
        if user.is_blocked:
            logger.warning("Blocked user %s attempted to log in", user.id)
            raise AccountBlockedError()
        
        return user, self.issue_token(user)
    
    async def get_user(self, user_id: int) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user
    
    async def get_user_by_short_id(self, short_id: str) -> User:
        user = await self.users.find_by_short_id(short_id)
        if user is None:
            raise ResourceNotFoundError("User", short_id)
        return user
    
    async def list_users(self, q: Optional[str], page: int, limit: int) -> Tuple[List[User], int]:
        return await self.users.search(q, offset=(page - 1) * limit, limit=limit)
    
    async def set_blocked(self, user_id: int, blocked: bool, admin_id: int, reason: Optional[str] = None) -> User:
        """
        Block or unblock a user.
        
        Blocking also revokes every outstanding token of the user, so the
        next authenticated request is rejected immediately.
        """
        user = await self.get_user(user_id)
        
        if blocked:
            if user.id == admin_id:
                raise ValidationError("Cannot block yourself")
            if user.role == UserRole.ADMIN:
                raise InsufficientPermissionsError("Cannot block another admin user")
        
        user = await self.users.update(user, {"is_blocked": blocked})
        
        if blocked:
            await revoke_all_user_tokens(user.id)
        else:
            await clear_user_token_revocation(user.id)
        
        logger.info(
            "User %s %s by admin %s%s",
            user.id, "blocked" if blocked else "unblocked", admin_id,
            f" ({reason})" if reason else "",
        )
        return user
