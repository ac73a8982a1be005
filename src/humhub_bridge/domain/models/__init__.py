"""Domain models for HumHub Bridge Auth Service"""

from humhub_bridge.domain.models.api_auth import (
    AuthError,
    AuthenticatorDescriptorResponse,
    LoginChallengeResponse,
    LoginSuccessResponse,
    UserProfile,
)
from humhub_bridge.domain.models.auth import (
    ATTR_HUMHUB_DISPLAY_NAME,
    ATTR_HUMHUB_GUID,
    ATTR_HUMHUB_IMAGE_URL,
    ATTR_HUMHUB_PROFILE_URL,
    Authenticated,
    Decision,
    LocalUser,
    LoginAttempt,
    NeedsInput,
    Rejected,
    parse_utc_timestamp,
    to_json_compatible,
)
from humhub_bridge.domain.models.profile import RemoteIdentityProfile

__all__ = [
    # Auth models
    "LocalUser",
    "LoginAttempt",
    "NeedsInput",
    "Authenticated",
    "Rejected",
    "Decision",
    "RemoteIdentityProfile",
    "ATTR_HUMHUB_GUID",
    "ATTR_HUMHUB_DISPLAY_NAME",
    "ATTR_HUMHUB_PROFILE_URL",
    "ATTR_HUMHUB_IMAGE_URL",
    "parse_utc_timestamp",
    "to_json_compatible",
    # API models
    "UserProfile",
    "LoginChallengeResponse",
    "LoginSuccessResponse",
    "AuthenticatorDescriptorResponse",
    "AuthError",
]
