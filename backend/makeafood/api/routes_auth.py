# makeafood/api/routes_auth.py
# Account mail flows: password reset, email verification, moderation warning
# Sign-up/sign-in itself is Supabase Auth on the frontend.

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from makeafood.core.deps import get_accounts
from makeafood.models.schemas import (
    ForgotPasswordIn,
    ResetPasswordIn,
    SendVerificationIn,
    SendWarningIn,
)
from makeafood.services.accounts import AccountService

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordIn, accounts: AccountService = Depends(get_accounts)):
    return await run_in_threadpool(accounts.request_password_reset, body.email)


@router.post("/auth/reset-password")
async def reset_password(body: ResetPasswordIn, accounts: AccountService = Depends(get_accounts)):
    return await run_in_threadpool(accounts.reset_password, body.token, body.password)


@router.post("/send-verification")
async def send_verification(body: SendVerificationIn, accounts: AccountService = Depends(get_accounts)):
    return await run_in_threadpool(accounts.send_verification, body.user_id, body.email, body.username)


@router.post("/send-warning")
async def send_warning(body: SendWarningIn, accounts: AccountService = Depends(get_accounts)):
    return await run_in_threadpool(accounts.send_warning, body.email, body.username, body.reason)
