"""Authentication API Models

Purpose: Request/response models for the login and authenticator endpoints

These models define the wire contract between the host login form and the
decision pipeline. Secrets never appear in any response model.

Key Components:
- UserProfile: Public user information for API responses
- LoginChallengeResponse: Ask the client to (re)submit credentials
- LoginSuccessResponse: Credentials accepted
- AuthenticatorDescriptorResponse: Static authenticator metadata
- AuthError: Refused-login error body
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from humhub_bridge.domain.models.auth import LocalUser, to_json_compatible


class UserProfile(BaseModel):
    """Public user profile information

    Represents user information safe for API responses.
    Excludes the password credential.
    """

    user_id: str = Field(
        ..., description="Unique user identifier", examples=["a1b2c3d4-0000-4000-8000-000000000001"]
    )
    username: str = Field(..., description="Username", examples=["alice"])
    email: str = Field(default="", description="Email address", examples=["alice@example.com"])
    first_name: str = Field(default="", description="First name", examples=["Alice"])
    last_name: str = Field(default="", description="Last name", examples=["Example"])
    enabled: bool = Field(default=True, description="Account enabled flag")
    email_verified: bool = Field(default=False, description="Email verified flag")
    created_at: str = Field(
        ...,
        description="Account creation timestamp (ISO format)",
        examples=["2025-01-15T10:00:00Z"],
    )
    attributes: Dict[str, str] = Field(
        default_factory=dict,
        description="Attributes mirrored from HumHub",
        examples=[{"humhub_guid": "a1b2c3d4-0000-4000-8000-000000000001"}],
    )

    @classmethod
    def from_user(cls, user: LocalUser) -> "UserProfile":
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            enabled=user.enabled,
            email_verified=user.email_verified,
            created_at=to_json_compatible(user.created_at),
            attributes=dict(user.attributes),
        )


class LoginChallengeResponse(BaseModel):
    """Challenge response

    Returned when credentials are missing or were rejected. The client
    renders the username/password form and posts it back.
    """

    status: Literal["challenge"] = "challenge"
    form: str = Field(
        default="login-username-password", description="Form the client should render"
    )
    error: Optional[str] = Field(
        None, description="Error to show above the form", examples=["Invalid username or password"]
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"status": "challenge", "form": "login-username-password", "error": None},
                {
                    "status": "challenge",
                    "form": "login-username-password",
                    "error": "Invalid username or password",
                },
            ]
        }
    }


class LoginSuccessResponse(BaseModel):
    """Successful login response

    Session or token issuance is left to the host; this only reports the
    authenticated user.
    """

    status: Literal["authenticated"] = "authenticated"
    user: UserProfile = Field(..., description="Authenticated user profile")


class AuthenticatorDescriptorResponse(BaseModel):
    """Static metadata describing the authenticator to the host flow engine"""

    id: str = Field(..., examples=["humhub-authenticator"])
    display_type: str = Field(..., examples=["HumHub Authenticator"])
    reference_category: str = Field(..., examples=["humhub-auth"])
    help_text: str
    requirement_choices: List[str] = Field(..., examples=[["ALTERNATIVE", "REQUIRED"]])
    configurable: bool = False
    requires_user: bool = False
    user_setup_allowed: bool = False


class AuthError(BaseModel):
    """Authentication error response

    Returned when a verified login is refused, e.g. a disabled account.
    """

    error: str = Field(..., description="Error code", examples=["account_disabled"])
    error_description: str = Field(
        ...,
        description="Human-readable error description",
        examples=["Account is disabled"],
    )
    correlation_id: Optional[str] = Field(None, description="Request correlation ID for debugging")
