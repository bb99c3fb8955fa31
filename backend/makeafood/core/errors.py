# makeafood/core/errors.py
# Error taxonomy shared by services and routers.
# Routers let these propagate; main.create_app registers one handler that
# turns them into {"error": ..., ...} JSON bodies.

from __future__ import annotations
from typing import Any, Dict, Optional


class ConfigError(Exception):
    # missing/invalid startup configuration (never reaches a client)
    pass


class RecipeAppError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, details: Optional[str] = None, *, error: Optional[str] = None):
        super().__init__(details or error or self.error)
        self.details = details
        if error:
            self.error = error

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInput(RecipeAppError):
    status_code = 400
    error = "Invalid input"

    def __init__(self, error: str = "Invalid input", details: Optional[str] = None):
        super().__init__(details, error=error)


class UpstreamError(RecipeAppError):
    status_code = 500
    error = "Failed to generate recipe"

    def __init__(self, details: str, *, error: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(details, error=error)
        self.hint = hint

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.hint:
            body["help"] = self.hint
        return body


class ParseError(RecipeAppError):
    # model text was not JSON; raw carries the cleaned text for diagnosis
    status_code = 500
    error = "Failed to parse recipe"

    def __init__(self, details: str, raw: str):
        super().__init__(details)
        self.raw = raw

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        body["raw"] = self.raw
        return body


class SchemaError(RecipeAppError):
    status_code = 500
    error = "Failed to generate recipe"


class Unauthorized(RecipeAppError):
    status_code = 401
    error = "Unauthorized"


class NotFound(RecipeAppError):
    status_code = 404
    error = "Recipe not found"


class StoreError(RecipeAppError):
    # Supabase rejected a read/write (constraint, RLS, bad column ...)
    status_code = 400

    def __init__(self, message: str):
        super().__init__(None, error=message)


class MailerNotReady(RecipeAppError):
    status_code = 500
    error = "Server email not configured"


class EmailError(RecipeAppError):
    status_code = 500
    error = "Failed to send email"
