# makeafood/services/accounts.py
# Password reset + verification/warning mail flows
# Supabase holds users/password_resets; the SMTP mailer delivers links.
# Sync on purpose (supabase-py + smtplib): routers call through run_in_threadpool.

from __future__ import annotations
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
from urllib.parse import urlencode

from makeafood.core.errors import InvalidInput, RecipeAppError, StoreError
from makeafood.db.store import SupabaseStore
from makeafood.services.mailer import (
    Mailer,
    password_reset_html,
    verification_html,
    warning_html,
)

log = logging.getLogger(__name__)

RESET_TOKEN_TTL = timedelta(minutes=30)
NEUTRAL_RESET_MESSAGE = "If email exists, reset link sent"


def _utc(dt: datetime) -> datetime:
    # Postgres timestamptz comes back aware; plain timestamp columns don't
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class AccountService:
    def __init__(self, store: SupabaseStore, mailer: Mailer, app_base_url: str):
        self.store = store
        self.mailer = mailer
        self.app_base_url = app_base_url.rstrip("/")

    def request_password_reset(self, email: Optional[str]) -> Dict[str, str]:
        email = (email or "").strip()
        if not email:
            raise InvalidInput("Email is required")

        user = self.store.find_user_by_email(email)
        if not user:
            # same answer either way: don't leak which emails have accounts
            return {"message": NEUTRAL_RESET_MESSAGE}

        self.mailer.ensure_ready()
        token = secrets.token_hex(32)
        expires_at = datetime.now(timezone.utc) + RESET_TOKEN_TTL
        self.store.create_password_reset(str(user["id"]), token, expires_at)

        link = f"{self.app_base_url}/reset-password?{urlencode({'token': token})}"
        self.mailer.send(email, "Password Reset Request",
                         password_reset_html(user.get("username") or email, link))
        return {"message": "Reset link sent"}

    def reset_password(self, token: Optional[str], password: Optional[str]) -> Dict[str, str]:
        if not token or not password:
            raise InvalidInput("Token and password required")

        record = self.store.get_password_reset(token)
        if record is None:
            raise InvalidInput("Invalid or expired token")
        if datetime.now(timezone.utc) > _utc(record.expires_at):
            raise InvalidInput("Token expired")

        try:
            self.store.update_password(record.user_id, password)
        except StoreError as e:
            log.error("Password update for %s failed: %s", record.user_id, e)
            raise RecipeAppError(str(e), error="Failed to update password")

        self.store.delete_password_reset(token)
        return {"message": "Password reset successfully"}

    def send_verification(self, user_id: Optional[str], email: Optional[str],
                          username: Optional[str]) -> Dict[str, str]:
        if not user_id or not email or not username:
            raise InvalidInput("Missing userId, email, or username")

        query = urlencode({"userId": user_id, "username": username, "email": email})
        link = f"{self.app_base_url}/verify?{query}"
        self.mailer.send(email, "Please verify your email", verification_html(link))
        return {"message": "Verification email sent"}

    def send_warning(self, email: Optional[str], username: Optional[str],
                     reason: Optional[str]) -> Dict[str, bool]:
        if not email or not username or not reason:
            raise InvalidInput("Email, username, and reason are required")

        self.mailer.send(email, "Warning regarding your account", warning_html(username, reason))
        return {"success": True}
