"""Identity/auth collaborator verifying caller identities."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

import structlog

from ..errors import AuthorizationError

logger = structlog.get_logger(__name__)


class AuthProvider(ABC):
    """Verifies that an identity signed the current call."""

    @abstractmethod
    def is_authenticated(self, identity: str) -> bool:
        """Check whether the identity is authenticated for this call."""
        pass

    def require_auth(self, identity: str) -> None:
        """
        Require an authenticated identity.

        Raises:
            AuthorizationError: If the identity is not authenticated
        """
        if not identity or not self.is_authenticated(identity):
            logger.warning("Authentication failed", identity=identity)
            raise AuthorizationError(
                "Caller is not authenticated",
                identity=identity
            )


class AllowAllAuthProvider(AuthProvider):
    """Treats every non-empty identity as authenticated."""

    def is_authenticated(self, identity: str) -> bool:
        return True


class SessionAuthProvider(AuthProvider):
    """Tracks the set of identities authenticated in the current session."""

    def __init__(self, identities: Optional[Iterable[str]] = None):
        self._authenticated: set[str] = set(identities or ())

    def is_authenticated(self, identity: str) -> bool:
        return identity in self._authenticated

    def authenticate(self, identity: str) -> None:
        self._authenticated.add(identity)

    def revoke(self, identity: str) -> None:
        self._authenticated.discard(identity)

    @contextmanager
    def as_caller(self, identity: str) -> Iterator[None]:
        """Authenticate an identity for the duration of a block."""
        already = identity in self._authenticated
        self._authenticated.add(identity)
        try:
            yield
        finally:
            if not already:
                self._authenticated.discard(identity)
