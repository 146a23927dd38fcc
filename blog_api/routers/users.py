from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.dependencies import get_token_service
from blog_api.auth.tokens import TokenService
from blog_api.database import get_db
from blog_api.dependencies import ResourceId
from blog_api.schemas import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from blog_api.services import user_service

router = APIRouter(prefix="/api", tags=["users"])


@router.post("/register", status_code=201, response_model=RegisterResponse)
async def register(data: RegisterRequest, request: Request, db: AsyncSession = Depends(get_db)):
    rounds = request.app.state.settings.BCRYPT_ROUNDS
    user = await user_service.create_user(db, data, bcrypt_rounds=rounds)
    return {"message": "user registered", "user": user}


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    rounds = request.app.state.settings.BCRYPT_ROUNDS
    token, user = await user_service.login(
        db, tokens, data.username, data.password, bcrypt_rounds=rounds
    )
    return {"message": "login successful", "token": token, "user": user}


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: ResourceId, db: AsyncSession = Depends(get_db)):
    return await user_service.get_user(db, user_id)
