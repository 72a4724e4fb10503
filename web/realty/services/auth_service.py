from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from ..core.base import BaseService
from ..core.config import get_settings
from ..core.exceptions import (
    AuthenticationError, AuthorizationError, ConflictError, ValidationError,
)
from ..core.onboarding import validate_selectable_role
from ..core.permissions import Action, Actor, Target, authorize
from ..models import User
from ..security import (
    REFRESH, create_token, decode_token, hash_password, hash_reset_token,
    mint_tokens, new_reset_token, verify_password,
)

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """Authentication service handling registration, login and credentials"""

    async def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
        role: str = "buyer",
        phone: Optional[str] = None,
    ) -> User:
        """Create a new account with a hashed password"""
        validate_selectable_role(role)
        email = email.lower()

        async with self.uow:
            if await self.uow.users.exists_by_email(email):
                raise ConflictError("Email already registered", entity="User")
            user = await self.uow.users.create(obj_in={
                "email": email,
                "password_hash": hash_password(password),
                "first_name": first_name,
                "last_name": last_name,
                "phone": phone,
                "role": role,
            })
            await self.uow.commit()

        logger.info("Registered user %s as %s", user.id, role)
        return user

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, str, str]:
        """Authenticate user with email and password"""
        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if not user or not verify_password(password, user.password_hash):
                raise AuthenticationError("Invalid email or password")
            if not user.is_active:
                raise AuthorizationError("Account is deactivated")

            user = await self.uow.users.update(id=user.id, obj_in={"last_login": datetime.utcnow()})
            await self.uow.commit()

        access_token, refresh_token = mint_tokens(sub=user.id, role=user.role)
        return user, access_token, refresh_token

    async def refresh_access_token(self, refresh_token: str) -> str:
        """Generate new access token from refresh token"""
        payload = decode_token(refresh_token, expected_type=REFRESH)
        user = await self.uow.users.get(int(payload["sub"]))
        if not user or not user.is_active:
            raise AuthenticationError("Invalid refresh token")
        return create_token(user.id, user.role)

    async def change_password(
        self,
        actor: Actor,
        user_id: int,
        current_password: str,
        new_password: str,
    ) -> User:
        """Change a password; only the account holder may do this"""
        authorize(actor, Action.CHANGE_PASSWORD, Target.for_user(user_id))

        async with self.uow:
            user = await self.uow.users.get(user_id)
            if not user:
                raise AuthenticationError("User not found")
            if not verify_password(current_password, user.password_hash):
                raise AuthenticationError("Current password is incorrect")

            user = await self.uow.users.update(
                id=user.id, obj_in={"password_hash": hash_password(new_password)}
            )
            await self.uow.commit()

        logger.info("User %s changed password", user.id)
        return user

    async def forgot_password(self, email: str) -> Optional[str]:
        """Start a password reset.

        Callers must answer the same way whatever this returns. The raw token
        (``None`` for unknown or inactive accounts) is handed to the delivery
        channel; only its digest is stored.
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if not user or not user.is_active:
                logger.info("Password reset requested for unknown or inactive account")
                return None

            raw, digest = new_reset_token()
            expires = datetime.utcnow() + timedelta(seconds=get_settings().PASSWORD_RESET_EXPIRE_SECONDS)
            await self.uow.users.update(id=user.id, obj_in={
                "password_reset_token": digest,
                "password_reset_expires": expires,
            })
            await self.uow.commit()

        logger.info("Password reset token issued for user %s", user.id)
        return raw

    async def reset_password(self, token: str, new_password: str) -> User:
        async with self.uow:
            user = await self.uow.users.get_by_reset_token(hash_reset_token(token))
            if (
                not user
                or user.password_reset_expires is None
                or user.password_reset_expires < datetime.utcnow()
            ):
                raise ValidationError("Invalid or expired reset token", field="token")

            user = await self.uow.users.update(id=user.id, obj_in={
                "password_hash": hash_password(new_password),
                "password_reset_token": None,
                "password_reset_expires": None,
            })
            await self.uow.commit()

        logger.info("User %s reset password", user.id)
        return user
