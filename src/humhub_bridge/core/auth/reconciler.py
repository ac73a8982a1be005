"""On-demand import and sync of HumHub users into the local store."""

import logging
from typing import Optional

from humhub_bridge.core.auth.store import LocalIdentityStore
from humhub_bridge.domain.models import (
    ATTR_HUMHUB_DISPLAY_NAME,
    ATTR_HUMHUB_GUID,
    ATTR_HUMHUB_IMAGE_URL,
    ATTR_HUMHUB_PROFILE_URL,
    LocalUser,
    RemoteIdentityProfile,
)

logger = logging.getLogger(__name__)


class IdentityReconciler:
    """Brings a local user in line with a verified HumHub profile.

    New users are created with the HumHub guid as their id (when present).
    Existing users keep their username; everything else, including the
    password credential, is overwritten from the profile every time.

    Profile fields and the credential are written in two separate store
    calls. If the credential write fails the profile write is not undone
    and the store error propagates to the caller.
    """

    def __init__(self, store: LocalIdentityStore):
        self.store = store

    async def reconcile(
        self,
        existing: Optional[LocalUser],
        profile: RemoteIdentityProfile,
        plain_password: str,
    ) -> LocalUser:
        """Create or update the local user for a verified profile.

        Args:
            existing: Local user found at lookup time, or None
            profile: Profile returned by HumHub
            plain_password: Password HumHub just accepted

        Returns:
            The created or updated LocalUser
        """
        if existing is None:
            user = await self.import_user(profile, plain_password)
            logger.info(f"Imported user '{profile.username}' ({user.user_id}) from HumHub")
        else:
            user = await self.update_user(existing, profile, plain_password)
            logger.info(f"Updated user '{user.username}' ({user.user_id}) with HumHub data")
        return user

    async def import_user(self, profile: RemoteIdentityProfile, plain_password: str) -> LocalUser:
        user = await self.store.add_user(
            username=profile.username,
            user_id=profile.external_id or None,
        )
        self._apply_profile(user, profile)

        await self.store.update_user(user)
        await self.store.set_password(user, plain_password)
        return user

    async def update_user(
        self, user: LocalUser, profile: RemoteIdentityProfile, plain_password: str
    ) -> LocalUser:
        # Username stays authoritative once established locally
        self._apply_profile(user, profile)

        await self.store.update_user(user)
        await self.store.set_password(user, plain_password)
        return user

    @staticmethod
    def _apply_profile(user: LocalUser, profile: RemoteIdentityProfile) -> None:
        user.email = profile.email
        user.first_name = profile.first_name
        user.last_name = profile.last_name
        user.enabled = True
        user.email_verified = True
        user.set_single_attribute(ATTR_HUMHUB_GUID, profile.external_id)
        user.set_single_attribute(ATTR_HUMHUB_DISPLAY_NAME, profile.display_name)
        user.set_single_attribute(ATTR_HUMHUB_PROFILE_URL, profile.profile_url)
        user.set_single_attribute(ATTR_HUMHUB_IMAGE_URL, profile.image_url)
