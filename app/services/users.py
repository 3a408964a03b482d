import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.exceptions import NotFoundError, ValidationError
from app.models.user import User
from app.schemas.user import UserCreate
from app.utils.security import get_password_hash, verify_password

logger = logging.getLogger(__name__)

EMAIL_TAKEN = {"email": ["The email has already been taken."]}


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).filter(User.user_id == user_id))
    user = result.scalars().first()
    if not user:
        logger.warning("[USERS] User %s not found", user_id)
        raise NotFoundError("User not found.")
    return user


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).filter(User.email == email.lower()))
    return result.scalars().first()


async def register_user(db: AsyncSession, user: UserCreate) -> User:
    email = user.email.lower()
    if await get_user_by_email(db, email):
        raise ValidationError(EMAIL_TAKEN)

    new_user = User(name=user.name, email=email, hashed_password=get_password_hash(user.password))
    db.add(new_user)
    try:
        await db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        await db.rollback()
        raise ValidationError(EMAIL_TAKEN)

    logger.info("[USERS] Registered user %s", new_user.user_id)
    return new_user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.warning("[AUTH] Failed login for %s", email)
        return None
    return user
