"""Flash benefit card provider."""

from .auth import AuthStage, AuthState
from .client import FlashClient
from .statement import to_statement

__all__ = ["AuthStage", "AuthState", "FlashClient", "to_statement"]
