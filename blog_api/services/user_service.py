"""
User service — registration, login and lookup for the User aggregate.

Password hashing is done explicitly in ``create_user`` (no ORM hook).
bcrypt is CPU-bound, so hashing and verification run in the threadpool
to keep the event loop free for other requests.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from blog_api.auth.password import DEFAULT_ROUNDS, burn_verification
from blog_api.auth.tokens import TokenService
from blog_api.errors import AuthenticationError, ConflictError, NotFoundError
from blog_api.models import User
from blog_api.schemas import RegisterRequest

logger = logging.getLogger(__name__)

# Same message for unknown user and wrong password.
_BAD_CREDENTIALS = "invalid username or password"


async def _find_live_user(db: AsyncSession, *criteria) -> User | None:
    q = select(User).where(User.deleted_at.is_(None), *criteria)
    result = await db.execute(q)
    return result.scalar_one_or_none()


async def create_user(
    db: AsyncSession,
    data: RegisterRequest,
    bcrypt_rounds: int = DEFAULT_ROUNDS,
) -> User:
    """
    Register a new user.

    The username / email look-ups only produce a clearer error; the
    partial unique indexes on ``users`` are what actually guarantee
    uniqueness, so a concurrent registration that slips past the
    pre-check still ends in ``ConflictError``.
    """
    if await _find_live_user(db, User.username == data.username) is not None:
        logger.warning("Registration rejected, username taken: %s", data.username)
        raise ConflictError("username already exists")

    if await _find_live_user(db, User.email == data.email) is not None:
        logger.warning("Registration rejected, email taken: %s", data.email)
        raise ConflictError("email already exists")

    user = User(username=data.username, email=data.email)
    await run_in_threadpool(user.set_password, data.password, bcrypt_rounds)

    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        logger.warning("Registration lost a uniqueness race: %s", data.username)
        raise ConflictError("username or email already exists") from None

    logger.info("User registered: %s (id=%d)", user.username, user.id, extra={"user_id": user.id})
    return user


async def authenticate(
    db: AsyncSession,
    username: str,
    password: str,
    bcrypt_rounds: int = DEFAULT_ROUNDS,
) -> User:
    """
    Return the user whose credentials match, else raise
    ``AuthenticationError``.

    An unknown username still pays for one bcrypt check at
    *bcrypt_rounds*, the work factor stored hashes are created with, so
    the two failure cases look the same from outside.
    """
    user = await _find_live_user(db, User.username == username)
    if user is None:
        await run_in_threadpool(burn_verification, password, bcrypt_rounds)
        logger.warning("Login failed, unknown user: %s", username)
        raise AuthenticationError(_BAD_CREDENTIALS)

    if not await run_in_threadpool(user.verify_password, password):
        logger.warning("Login failed, wrong password for user: %s", username)
        raise AuthenticationError(_BAD_CREDENTIALS)

    return user


async def login(
    db: AsyncSession,
    tokens: TokenService,
    username: str,
    password: str,
    bcrypt_rounds: int = DEFAULT_ROUNDS,
) -> tuple[str, User]:
    user = await authenticate(db, username, password, bcrypt_rounds)
    token = tokens.issue(user.id)
    logger.info("User logged in: %s", username, extra={"user_id": user.id})
    return token, user


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await _find_live_user(db, User.id == user_id)
    if user is None:
        raise NotFoundError("user not found")
    return user


async def get_user_by_username(db: AsyncSession, username: str) -> User:
    user = await _find_live_user(db, User.username == username)
    if user is None:
        raise NotFoundError("user not found")
    return user
