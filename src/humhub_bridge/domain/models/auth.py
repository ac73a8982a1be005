"""Authentication Data Models

Purpose: Define data structures for local users, login attempts and
authentication decisions

Key Components:
- LocalUser: A user record in the local identity store
- LoginAttempt: Submitted identifier/secret pair for one request
- NeedsInput / Authenticated / Rejected: Outcomes of the decision pipeline
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Optional, Union


# External attribute names mirrored from HumHub onto local records
ATTR_HUMHUB_GUID = "humhub_guid"
ATTR_HUMHUB_DISPLAY_NAME = "humhub_display_name"
ATTR_HUMHUB_PROFILE_URL = "humhub_profile_url"
ATTR_HUMHUB_IMAGE_URL = "humhub_image_url"


def parse_utc_timestamp(timestamp_str: str) -> datetime:
    """Parse UTC timestamp string to datetime object"""
    if isinstance(timestamp_str, datetime):
        return timestamp_str
    return datetime.fromisoformat(timestamp_str.replace('Z', '+00:00'))


def to_json_compatible(value):
    """Convert datetime to JSON-compatible ISO format string"""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


@dataclass
class LocalUser:
    """User account in the local identity store

    The password credential is not part of the record; the store keeps it
    separately and only exposes validate/set operations.

    Attributes:
        user_id: Stable identifier (HumHub guid for imported users, else UUID)
        username: Unique username for login
        email: User email address (may be empty)
        first_name: Given name
        last_name: Family name
        enabled: Whether the account may log in
        email_verified: Whether the email address is trusted
        created_at: Record creation timestamp
        attributes: External attributes (humhub_guid, humhub_display_name, ...)
    """
    user_id: str
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    enabled: bool = False
    email_verified: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    attributes: Dict[str, str] = field(default_factory=dict)

    def set_single_attribute(self, name: str, value: Optional[str]) -> None:
        """Set an external attribute, treating None as empty"""
        self.attributes[name] = value or ""

    def get_attribute(self, name: str) -> Optional[str]:
        return self.attributes.get(name)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "user_id": self.user_id,
            "username": self.username,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "enabled": self.enabled,
            "email_verified": self.email_verified,
            "created_at": to_json_compatible(self.created_at),
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LocalUser':
        """Create from dictionary (JSON deserialization)"""
        return cls(
            user_id=data["user_id"],
            username=data.get("username", ""),
            email=data.get("email", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            enabled=data.get("enabled", False),
            email_verified=data.get("email_verified", False),
            created_at=parse_utc_timestamp(data["created_at"]),
            attributes=dict(data.get("attributes") or {}),
        )


@dataclass
class LoginAttempt:
    """Credentials submitted with one login request

    Either field may be None when the form has not been posted yet.
    The secret is never persisted and is kept out of repr().
    """
    identifier: Optional[str] = None
    secret: Optional[str] = field(default=None, repr=False)

    @property
    def is_complete(self) -> bool:
        return self.identifier is not None and self.secret is not None

    @property
    def is_email(self) -> bool:
        return self.identifier is not None and "@" in self.identifier


@dataclass(frozen=True)
class NeedsInput:
    """No credentials submitted yet; the host should render the login form"""


@dataclass(frozen=True)
class Authenticated:
    """Credentials verified, locally or against HumHub"""
    user: LocalUser


@dataclass(frozen=True)
class Rejected:
    """Credentials could not be verified by either source"""
    reason: str


Decision = Union[NeedsInput, Authenticated, Rejected]
