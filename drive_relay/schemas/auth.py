"""Schemas related to authorization and session management."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class _ResponseModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthorizationRequest(_RequestModel):
    """Payload starting the OAuth consent flow for an identity."""

    client_id: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("clientId", "client_id"),
        description="OAuth client identifier the token will be issued to.",
    )
    identity: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("identity", "email"),
        description="Identity key (usually an email) the credential is cached under.",
    )
    redirect_uri: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("redirectUri", "redirect_uri"),
        description="Optional redirect target overriding the configured default.",
    )


class AuthorizationResponse(_ResponseModel):
    success: bool = True
    auth_url: str
    message: str = "Open this URL to authorize and get your access token."


class TokenSubmission(_RequestModel):
    """Access token obtained from the consent flow."""

    identity: Optional[str] = Field(None, validation_alias=AliasChoices("identity", "email"))
    bearer_token: Optional[str] = Field(
        None,
        validation_alias=AliasChoices(
            "bearerToken", "bearer_token", "accessToken", "access_token"
        ),
    )


class TokenResponse(_ResponseModel):
    success: bool = True
    message: str
    expires_in_minutes: int


class LogoutRequest(_RequestModel):
    identity: Optional[str] = Field(None, validation_alias=AliasChoices("identity", "email"))


class LogoutResponse(_ResponseModel):
    success: bool = True
    message: str


__all__ = [
    "AuthorizationRequest",
    "AuthorizationResponse",
    "LogoutRequest",
    "LogoutResponse",
    "TokenResponse",
    "TokenSubmission",
]
