from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from blog_api.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from blog_api.database import Base

# Partial-index predicate shared by every "unique among live rows" constraint.
_NOT_DELETED = text("deleted_at IS NULL")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SoftDeleteMixin:
    """Rows are never purged; ``deleted_at`` marks them as gone."""

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        self.deleted_at = utcnow()


# ---------------------------------------------------------------------------
# User
# ---------------------------------------------------------------------------
class User(SoftDeleteMixin, Base):
    __tablename__ = "users"

    __table_args__ = (
        # Storage-level source of truth for uniqueness; the service-layer
        # pre-check only exists to produce a friendlier message.
        Index(
            "uq_users_username_active",
            "username",
            unique=True,
            postgresql_where=_NOT_DELETED,
            sqlite_where=_NOT_DELETED,
        ),
        Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=_NOT_DELETED,
            sqlite_where=_NOT_DELETED,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships: lazy="noload" enforces explicit eager loading in services
    posts: Mapped[List["Post"]] = relationship("Post", back_populates="author", lazy="noload")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="author", lazy="noload"
    )

    def set_password(self, plaintext: str, rounds: int = DEFAULT_ROUNDS) -> None:
        """Hash *plaintext* and store only the hash."""
        self.password_hash = hash_password(plaintext, rounds=rounds)

    def verify_password(self, plaintext: str) -> bool:
        return verify_password(plaintext, self.password_hash)


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class Post(SoftDeleteMixin, Base):
    __tablename__ = "posts"

    __table_args__ = (
        # A user's posts sorted by date (profile page)
        Index("ix_posts_user_id_created_at", "user_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )

    author: Mapped["User"] = relationship("User", back_populates="posts", lazy="noload")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="post",
        lazy="noload",
        order_by=lambda: [Comment.created_at.desc(), Comment.id.desc()],
    )

    @validates("user_id")
    def _owner_is_immutable(self, key, value):
        if self.user_id is not None and value != self.user_id:
            raise ValueError("post owner cannot be changed")
        return value


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(SoftDeleteMixin, Base):
    __tablename__ = "comments"

    __table_args__ = (
        Index("ix_comments_post_id_created_at", "post_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    post_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("posts.id"), nullable=False, index=True
    )

    author: Mapped["User"] = relationship("User", back_populates="comments", lazy="noload")
    post: Mapped["Post"] = relationship("Post", back_populates="comments", lazy="noload")

    @validates("user_id")
    def _owner_is_immutable(self, key, value):
        if self.user_id is not None and value != self.user_id:
            raise ValueError("comment owner cannot be changed")
        return value
