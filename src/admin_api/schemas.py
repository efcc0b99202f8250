"""
Auth endpoint response schemas.

Pydantic models for the payloads the session flows depend on. The backend
sends camelCase; fields are exposed in snake_case through aliases.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from client_core.errors.exceptions import ResponseValidationError

M = TypeVar("M", bound=BaseModel)


class SignInResponse(BaseModel):
    """Successful sign-in or step-up verification.

    Example:
        >>> SignInResponse.model_validate({"token": "eyJ...", "user": {"id": "u1"}}).token
        'eyJ...'
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(..., min_length=1, description="Bearer credential")
    user: dict[str, Any] = Field(default_factory=dict, description="Signed-in user profile")
    message: str | None = None


class TwoFactorChallenge(BaseModel):
    """Sign-in accepted the password but requires a one-time code."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    auth_step: str = Field(..., alias="authStep")
    temp_token: str = Field(..., alias="tempToken", min_length=1)
    user_id: str = Field(..., alias="userId")
    message: str | None = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> str:
        """Numeric user ids arrive as ints."""
        return str(v) if v is not None else v


class RefreshResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    token: str = Field(..., min_length=1)
    expires_in: int | None = Field(default=None, alias="expiresIn", description="Seconds")


def parse_response(model: type[M], data: Any, endpoint: str) -> M:
    """
    Validate a success payload against its schema.

    Raises:
        ResponseValidationError: the payload does not match the schema
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ResponseValidationError(
            f"Unexpected response from {endpoint}",
            endpoint=endpoint,
            payload=data,
            cause=e,
            context={"validation_errors": e.error_count()},
        ) from e


__all__ = [
    "SignInResponse",
    "TwoFactorChallenge",
    "RefreshResponse",
    "parse_response",
]
