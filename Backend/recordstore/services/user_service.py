import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from recordstore.core.config import Settings, settings as default_settings
from recordstore.core.exceptions import ConflictError, NotFoundException, UnauthorizedError, ValidationError
from recordstore.core.security import MAX_PASSWORD_BYTES, create_access_token, get_password_hash, verify_password
from recordstore.models.user import User, UserRole
from recordstore.schemas.user import UserCreate, UserUpdate
from recordstore.services.database import transaction

logger = logging.getLogger(__name__)


def _role_for(username: str, password: str, config: Settings) -> str:
    """Registering with the configured admin credentials yields an admin account."""
    if config.admin_configured and username == config.ADMIN_USERNAME and password == config.ADMIN_PASSWORD:
        return UserRole.ADMIN
    return UserRole.USER


async def _username_or_email_taken(db: AsyncSession, username: str, email: str) -> bool:
    result = await db.execute(select(User.id).where(or_(User.username == username, User.email == email)))
    return result.first() is not None


async def register_user(db: AsyncSession, user_data: UserCreate, config: Settings = default_settings) -> User:
    first_name = (user_data.first_name or "").strip()
    last_name = (user_data.last_name or "").strip()
    username = (user_data.username or "").strip()
    if not (first_name and last_name and username and user_data.password):
        raise ValidationError("Username, password, email, first name, and last name are required")
    if len(user_data.password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")

    async with transaction(db):
        if await _username_or_email_taken(db, username, user_data.email):
            raise ConflictError("Username or email already exists")

        db_user = User(
            first_name=first_name,
            last_name=last_name,
            username=username,
            email=user_data.email,
            password_hash=get_password_hash(user_data.password),
            city=user_data.city,
            role=_role_for(username, user_data.password, config),
        )
        db.add(db_user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race against a concurrent registration with the same name or email
            raise ConflictError("Username or email already exists")

    logger.info(f"Registered user '{db_user.username}' with role {db_user.role}")
    return db_user


async def authenticate(db: AsyncSession, username: str, password: str) -> str:
    """Check credentials and return a signed access token."""
    if not username or not password:
        raise ValidationError("Username and password are required")

    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid username or password")

    return create_access_token(user.id, user.username, user.role)


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        logger.warning(f"User ID {user_id} from token not found in database")
        raise NotFoundException("User", user_id)
    return user


async def update_profile(db: AsyncSession, user_id: int, user_data: UserUpdate) -> User:
    """Only the personal fields can change; username, email and role stay put."""
    async with transaction(db):
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundException("User", user_id)

        update_data = user_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            if key in ("first_name", "last_name") and not (value or "").strip():
                raise ValidationError("First name and last name cannot be empty")
            setattr(user, key, value.strip() if isinstance(value, str) else value)

    return user


async def ensure_admin_user(db: AsyncSession, config: Settings = default_settings) -> Optional[User]:
    """
    Create the configured admin account on first start. Safe to call on every
    start: an existing admin is left alone, and an existing non-admin user
    with the same name only produces a warning.
    """
    if not config.admin_configured:
        logger.info("ADMIN_USERNAME or ADMIN_PASSWORD not set. Cannot register admin automatically.")
        return None

    result = await db.execute(select(User).where(User.username == config.ADMIN_USERNAME))
    existing = result.scalar_one_or_none()
    if existing is not None:
        if existing.role != UserRole.ADMIN:
            logger.warning(
                f"User '{config.ADMIN_USERNAME}' already exists but is not an admin. "
                f"Cannot register admin user with this username."
            )
        return existing

    async with transaction(db):
        admin = User(
            first_name="Admin",
            last_name="User",
            username=config.ADMIN_USERNAME,
            email=f"{config.ADMIN_USERNAME}@example.com",
            password_hash=get_password_hash(config.ADMIN_PASSWORD),
            city="Unknown",
            role=UserRole.ADMIN,
        )
        db.add(admin)

    logger.info(f"Admin user '{admin.username}' registered successfully.")
    return admin
