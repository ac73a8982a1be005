"""Remote identity profile parsed from the HumHub credential check response."""

from typing import Any, Mapping

from pydantic import BaseModel


def _text(node: Any, key: str) -> str:
    """Read a scalar field as text, defaulting to empty string"""
    if not isinstance(node, Mapping):
        return ""
    value = node.get(key)
    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RemoteIdentityProfile(BaseModel):
    """User identity returned by a successful HumHub credential check.

    Attributes:
        external_id: HumHub guid, stable across renames
        username: HumHub account username
        email: HumHub account email
        first_name: Profile first name
        last_name: Profile last name
        display_name: HumHub display name
        profile_url: URL of the HumHub profile page
        image_url: URL of the HumHub profile image
    """
    external_id: str = ""
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    display_name: str = ""
    profile_url: str = ""
    image_url: str = ""

    @classmethod
    def from_api_payload(cls, payload: Mapping[str, Any]) -> "RemoteIdentityProfile":
        """Map the /auth/current response body onto a profile.

        Expected shape:
            {"guid", "display_name", "url",
             "account": {"username", "email"},
             "profile": {"firstname", "lastname", "image_url"}}

        Raises:
            ValueError: If payload is not a JSON object
        """
        if not isinstance(payload, Mapping):
            raise ValueError("HumHub response body is not a JSON object")

        account = payload.get("account")
        profile = payload.get("profile")

        return cls(
            external_id=_text(payload, "guid"),
            display_name=_text(payload, "display_name"),
            profile_url=_text(payload, "url"),
            username=_text(account, "username"),
            email=_text(account, "email"),
            first_name=_text(profile, "firstname"),
            last_name=_text(profile, "lastname"),
            image_url=_text(profile, "image_url"),
        )
