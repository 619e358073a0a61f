from typing import Any

from fastapi import APIRouter

from datevote import accounts
from datevote.models.users import CreateUserRequest, GoogleLoginRequest, LoginRequest, User

router = APIRouter(tags=["users"])


@router.post("/users", status_code=201, response_model=User)
async def create_user(req: CreateUserRequest) -> dict[str, Any]:
    return await accounts.create_user(
        email=req.email,
        name=req.name,
        password=req.password,
        google_id=req.google_id,
    )


@router.post("/auth/login", response_model=User)
async def login(req: LoginRequest) -> dict[str, Any]:
    return await accounts.login(req.email, req.password)


@router.post("/auth/google", response_model=User)
async def google_login(req: GoogleLoginRequest) -> dict[str, Any]:
    return await accounts.google_login(req.google_id, req.email, req.name)
