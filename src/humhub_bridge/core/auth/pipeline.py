"""Authentication decision pipeline.

Local credentials are always checked first. HumHub is only contacted when
the user is unknown locally or the local password does not match; a HumHub
success imports or refreshes the local user so the next login stays local.
"""

import logging
from typing import Optional

from humhub_bridge.core.auth.reconciler import IdentityReconciler
from humhub_bridge.core.auth.store import LocalIdentityStore
from humhub_bridge.core.auth.verifier import HumHubCredentialVerifier
from humhub_bridge.domain.models import (
    Authenticated,
    Decision,
    LocalUser,
    LoginAttempt,
    NeedsInput,
    Rejected,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class AuthenticationPipeline:
    """Decides the outcome of one login attempt.

    Stateless between calls: a NeedsInput result keeps nothing, the host
    simply calls decide() again once the form is posted.
    """

    def __init__(
        self,
        store: LocalIdentityStore,
        verifier: HumHubCredentialVerifier,
        reconciler: Optional[IdentityReconciler] = None,
    ):
        self.store = store
        self.verifier = verifier
        self.reconciler = reconciler or IdentityReconciler(store)

    async def decide(self, identifier: Optional[str], secret: Optional[str]) -> Decision:
        """Run the local-then-HumHub authentication decision.

        Args:
            identifier: Username or email, None if not submitted
            secret: Plaintext password, None if not submitted

        Returns:
            NeedsInput, Authenticated(user) or Rejected(reason)

        Raises:
            UserStoreError: If importing or updating the local user fails
        """
        attempt = LoginAttempt(identifier=identifier, secret=secret)
        if not attempt.is_complete:
            logger.debug("No credentials posted, requesting login form")
            return NeedsInput()

        user = await self.find_user(attempt)
        user_exists = user is not None
        logger.debug(f"User '{identifier}' found locally? {user_exists}")

        if user_exists and await self.store.validate_password(user, secret):
            logger.info(f"Local authentication succeeded for '{user.username}'")
            return Authenticated(user)

        logger.info(f"Local login failed or user not found for '{identifier}', trying HumHub")
        profile = await self.verifier.verify(identifier, secret)
        if profile is None:
            logger.info(f"HumHub authentication failed for '{identifier}'")
            return Rejected(INVALID_CREDENTIALS)

        user = await self.reconciler.reconcile(user, profile, secret)
        return Authenticated(user)

    async def find_user(self, attempt: LoginAttempt) -> Optional[LocalUser]:
        """Look up by username, then by email when the identifier contains '@'"""
        user = await self.store.get_user_by_username(attempt.identifier)
        if user is None and attempt.is_email:
            user = await self.store.get_user_by_email(attempt.identifier)
        return user
