"""
Direct service-layer tests — exercises business logic without HTTP overhead.

These cover the ordering guarantees (404 before 403), the credential
store contract, and the storage-level uniqueness fallback that the HTTP
tests cannot reach.
"""
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError
from blog_api.models import Post, User
from blog_api.schemas import CommentCreate, PostCreate, PostUpdate, RegisterRequest
from blog_api.services import comment_service, post_service, user_service


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _register(db: AsyncSession, username: str, password: str = "secret1") -> User:
    data = RegisterRequest(username=username, email=f"{username}@example.com", password=password)
    return await user_service.create_user(db, data, bcrypt_rounds=4)


def _post_data(title: str = "Service post") -> PostCreate:
    return PostCreate(title=title, content="Content written through the service layer.")


# ---------------------------------------------------------------------------
# user_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_stored_password_is_never_plaintext(db_session: AsyncSession):
    await _register(db_session, "alice", password="secret1")
    user = await user_service.get_user_by_username(db_session, "alice")
    assert user.password_hash != "secret1"
    assert user.verify_password("secret1")


@pytest.mark.asyncio
async def test_duplicate_username_conflict(db_session: AsyncSession):
    await _register(db_session, "alice")
    with pytest.raises(ConflictError):
        await user_service.create_user(
            db_session,
            RegisterRequest(username="alice", email="other@example.com", password="secret1"),
            bcrypt_rounds=4,
        )


@pytest.mark.asyncio
async def test_unique_index_is_the_final_word(db_session: AsyncSession, monkeypatch):
    """If the pre-check misses (concurrent registration), the index still refuses."""
    await _register(db_session, "alice")

    async def _miss(db, *criteria):
        return None

    monkeypatch.setattr(user_service, "_find_live_user", _miss)
    with pytest.raises(ConflictError):
        await user_service.create_user(
            db_session,
            RegisterRequest(username="alice", email="other@example.com", password="secret1"),
            bcrypt_rounds=4,
        )


@pytest.mark.asyncio
async def test_login_issues_verifiable_token(db_session: AsyncSession, token_service):
    alice = await _register(db_session, "alice")
    token, user = await user_service.login(db_session, token_service, "alice", "secret1", bcrypt_rounds=4)
    assert user.id == alice.id
    assert token_service.verify(token).user_id == alice.id


@pytest.mark.asyncio
async def test_authenticate_failures_share_message(db_session: AsyncSession):
    await _register(db_session, "alice")
    with pytest.raises(AuthenticationError) as wrong_password:
        await user_service.authenticate(db_session, "alice", "nope", bcrypt_rounds=4)
    with pytest.raises(AuthenticationError) as unknown_user:
        await user_service.authenticate(db_session, "bob", "secret1", bcrypt_rounds=4)
    assert wrong_password.value.message == unknown_user.value.message


@pytest.mark.asyncio
async def test_get_user_missing(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await user_service.get_user(db_session, 12345)


# ---------------------------------------------------------------------------
# post_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_post_owner_is_actor(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    post = await post_service.create_post(db_session, alice.id, _post_data())
    assert post.user_id == alice.id
    assert post.author.username == "alice"


@pytest.mark.asyncio
async def test_non_owner_update_and_delete_forbidden(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    bob = await _register(db_session, "bob")
    post = await post_service.create_post(db_session, alice.id, _post_data())

    with pytest.raises(AuthorizationError):
        await post_service.update_post(db_session, bob.id, post.id, PostUpdate(
            title="Hijack", content="Bob tries to overwrite this.",
        ))
    with pytest.raises(AuthorizationError):
        await post_service.delete_post(db_session, bob.id, post.id)

    fresh = await post_service.get_post(db_session, post.id)
    assert fresh.title == "Service post"


@pytest.mark.asyncio
async def test_missing_post_is_not_found_for_any_actor(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    with pytest.raises(NotFoundError):
        await post_service.delete_post(db_session, alice.id, 999)
    with pytest.raises(NotFoundError):
        await post_service.update_post(db_session, alice.id, 999, PostUpdate(
            title="Ghost", content="Nothing to update here.",
        ))


@pytest.mark.asyncio
async def test_soft_deleted_post_row_is_kept(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    post = await post_service.create_post(db_session, alice.id, _post_data())
    await post_service.delete_post(db_session, alice.id, post.id)

    row = (await db_session.execute(select(Post).where(Post.id == post.id))).scalar_one()
    assert row.deleted_at is not None

    with pytest.raises(NotFoundError):
        await post_service.get_post(db_session, post.id)
    posts, total = await post_service.list_user_posts(db_session, alice.id)
    assert posts == [] and total == 0


@pytest.mark.asyncio
async def test_post_owner_is_immutable(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    bob = await _register(db_session, "bob")
    post = await post_service.create_post(db_session, alice.id, _post_data())
    with pytest.raises(ValueError):
        post.user_id = bob.id


# ---------------------------------------------------------------------------
# comment_service
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_comment_lifecycle(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    bob = await _register(db_session, "bob")
    post = await post_service.create_post(db_session, alice.id, _post_data())

    comment = await comment_service.create_comment(
        db_session, bob.id, post.id, CommentCreate(content="First!")
    )
    assert comment.user_id == bob.id
    assert comment.author.username == "bob"

    with pytest.raises(AuthorizationError):
        await comment_service.delete_comment(db_session, alice.id, comment.id)

    await comment_service.delete_comment(db_session, bob.id, comment.id)
    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(db_session, bob.id, comment.id)

    comments, total = await comment_service.list_post_comments(db_session, post.id)
    assert comments == [] and total == 0


@pytest.mark.asyncio
async def test_comment_requires_existing_post(db_session: AsyncSession):
    alice = await _register(db_session, "alice")
    with pytest.raises(NotFoundError):
        await comment_service.create_comment(
            db_session, alice.id, 999, CommentCreate(content="Into the void")
        )
