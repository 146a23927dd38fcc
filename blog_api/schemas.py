import math
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# --- User ---

class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email: EmailStr = Field(max_length=100)
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    id: int
    username: str
    model_config = ConfigDict(from_attributes=True)


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse


# --- Comment ---

class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=500)


class CommentResponse(BaseModel):
    id: int
    content: str
    user_id: int
    post_id: int
    created_at: datetime
    author: UserBrief | None = None
    model_config = ConfigDict(from_attributes=True)


class CommentCreated(BaseModel):
    message: str
    comment: CommentResponse


# --- Post ---

class PostCreate(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    content: str = Field(min_length=10)


class PostUpdate(PostCreate):
    pass


class PostResponse(BaseModel):
    id: int
    title: str
    user_id: int
    created_at: datetime
    updated_at: datetime
    author: UserBrief | None = None
    model_config = ConfigDict(from_attributes=True)


class PostDetail(PostResponse):
    content: str
    comments: list[CommentResponse] = []


class PostWritten(BaseModel):
    message: str
    post: PostDetail


# --- Pagination ---

class Pagination(BaseModel):
    total: int
    page: int
    page_size: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, page_size: int) -> "Pagination":
        return cls(
            total=total,
            page=page,
            page_size=page_size,
            pages=math.ceil(total / page_size) if total > 0 else 0,
        )


class PostList(BaseModel):
    posts: list[PostResponse]
    pagination: Pagination


class CommentList(BaseModel):
    comments: list[CommentResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
