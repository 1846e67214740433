"""
User lookups and the login-time upsert. User management itself lives
elsewhere; auth only needs to find users by id/phone and mark phones verified.
"""
from __future__ import annotations

import logging

from models.enums import UserRole, UserStatus
from models.user import User
from services.errors import ForbiddenError

logger = logging.getLogger(__name__)


def get_user(storage, user_id: str) -> User | None:
    return storage.get(User, user_id)


def upsert_verified_user(storage, phone: str, country_code: str) -> User:
    """
    Find the user for a phone that just passed OTP, creating an ACTIVE CUSTOMER
    on first sight. Suspended accounts are refused.
    """
    with storage.transaction() as session:
        user = session.query(User).filter(User.phone == phone).first()
        if user is None:
            user = User(
                phone=phone,
                country_code=str(country_code),
                phone_verified=True,
                status=UserStatus.ACTIVE.value,
                role=UserRole.CUSTOMER.value,
            )
            session.add(user)
            logger.info("Registered new customer %s", user.id)
        elif user.status == UserStatus.SUSPENDED.value:
            raise ForbiddenError("Account suspended")
        elif not user.phone_verified:
            user.phone_verified = True
            user.status = UserStatus.ACTIVE.value
    return user
