from fastapi import APIRouter, Depends, status

from app.dependencies import get_components
from src.models import SignInRequest, SignInResult, SignUpRequest
from src.orchestrator import LedgerComponents


auth_router = APIRouter(tags=["auth"])


@auth_router.post("/signUp", status_code=status.HTTP_201_CREATED)
async def sign_up(
    body: SignUpRequest,
    components: LedgerComponents = Depends(get_components),
):
    await components.auth.sign_up(body.name, body.email, body.password)
    return {"message": "User created"}


@auth_router.post("/signIn", response_model=SignInResult)
async def sign_in(
    body: SignInRequest,
    components: LedgerComponents = Depends(get_components),
):
    return await components.auth.sign_in(body.email, body.password)
