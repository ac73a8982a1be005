"""Static description of the HumHub authenticator for the host flow engine."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Requirement(Enum):
    """Placement of an authenticator within a host flow"""
    REQUIRED = "REQUIRED"
    ALTERNATIVE = "ALTERNATIVE"
    CONDITIONAL = "CONDITIONAL"
    DISABLED = "DISABLED"


@dataclass(frozen=True)
class AuthenticatorDescriptor:
    """Self-describing metadata shown by the host when building flows

    Attributes:
        id: Unique provider id
        display_type: Name shown in the flow editor
        reference_category: Category used to group authenticators
        help_text: Description shown in the flow editor
        requirement_choices: Placements the host may choose from
        configurable: Whether the host should offer per-flow config
        requires_user: Whether a user must be identified before this step
        user_setup_allowed: Whether missing setup can be done inline
    """
    id: str
    display_type: str
    reference_category: str
    help_text: str
    requirement_choices: Tuple[Requirement, ...]
    configurable: bool = False
    requires_user: bool = False
    user_setup_allowed: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_type": self.display_type,
            "reference_category": self.reference_category,
            "help_text": self.help_text,
            "requirement_choices": [r.value for r in self.requirement_choices],
            "configurable": self.configurable,
            "requires_user": self.requires_user,
            "user_setup_allowed": self.user_setup_allowed,
        }


HUMHUB_AUTHENTICATOR = AuthenticatorDescriptor(
    id="humhub-authenticator",
    display_type="HumHub Authenticator",
    reference_category="humhub-auth",
    help_text=(
        "Authenticator for local/HumHub hybrid login, on-demand user import, "
        "and credential sync."
    ),
    requirement_choices=(Requirement.ALTERNATIVE, Requirement.REQUIRED),
)
