"""Authentication component factory.

Builds the process-wide HumHub verifier from settings and assembles a
decision pipeline around a local identity store.
"""

import logging
from typing import Optional

from humhub_bridge.config.settings import get_settings
from .pipeline import AuthenticationPipeline
from .store import LocalIdentityStore
from .verifier import HumHubCredentialVerifier

logger = logging.getLogger(__name__)

# Global verifier instance (initialized on first call)
_verifier_instance: Optional[HumHubCredentialVerifier] = None


def get_verifier() -> HumHubCredentialVerifier:
    """Get the configured HumHub verifier instance.

    Configured via HUMHUB_API_URL, HUMHUB_CONNECT_TIMEOUT and
    HUMHUB_READ_TIMEOUT. The endpoint and HTTP client are read-only after
    creation.

    Raises:
        ValueError: If HUMHUB_API_URL is empty
    """
    global _verifier_instance

    # Return cached instance
    if _verifier_instance is not None:
        return _verifier_instance

    settings = get_settings()
    if not settings.humhub_api_url:
        raise ValueError("HumHub verifier requires: HUMHUB_API_URL")

    _verifier_instance = HumHubCredentialVerifier(
        api_url=settings.humhub_api_url,
        connect_timeout=settings.humhub_connect_timeout,
        read_timeout=settings.humhub_read_timeout,
    )
    logger.info(f"HumHub verifier initialized: {settings.humhub_api_url}")
    return _verifier_instance


def get_pipeline(store: LocalIdentityStore) -> AuthenticationPipeline:
    """Assemble a decision pipeline for the given store"""
    return AuthenticationPipeline(store=store, verifier=get_verifier())


async def close_verifier() -> None:
    """Close the global verifier's HTTP client"""
    global _verifier_instance
    if _verifier_instance is not None:
        await _verifier_instance.aclose()
        _verifier_instance = None


def reset_verifier() -> None:
    """Reset the global verifier instance (for testing)."""
    global _verifier_instance
    _verifier_instance = None
