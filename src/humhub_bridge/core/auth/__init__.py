"""HumHub bridge authentication core.

- pipeline: local-first, HumHub-fallback login decision
- verifier: HumHub /auth/current credential check
- reconciler: on-demand import and sync of HumHub users
- descriptor: static metadata for the host flow engine
"""

from .descriptor import HUMHUB_AUTHENTICATOR, AuthenticatorDescriptor, Requirement
from .factory import get_pipeline, get_verifier
from .pipeline import INVALID_CREDENTIALS, AuthenticationPipeline
from .reconciler import IdentityReconciler
from .store import LocalIdentityStore, UserConflictError, UserStoreError
from .verifier import HumHubCredentialVerifier

__all__ = [
    "AuthenticationPipeline",
    "AuthenticatorDescriptor",
    "HUMHUB_AUTHENTICATOR",
    "HumHubCredentialVerifier",
    "IdentityReconciler",
    "INVALID_CREDENTIALS",
    "LocalIdentityStore",
    "Requirement",
    "UserConflictError",
    "UserStoreError",
    "get_pipeline",
    "get_verifier",
]
