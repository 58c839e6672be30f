"""Token access through the universal storage key space."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from ..state.base import Storage


class TokenFacade:
    """Reads and writes strategy tokens under ``prefix + strategy``.

    No caching is done here; every call goes to storage.

    Parameters
    ----------
    storage : Storage
        The storage collaborator.
    prefix : str
        Key prefix (default ``"_token."``).
    """

    def __init__(self, storage: Storage, prefix: str = "_token.") -> None:
        """Initialize the token facade."""
        self.storage = storage
        self.prefix = prefix

    def key(self, strategy: str) -> str:
        """Return the storage key for ``strategy``'s token."""
        return f"{self.prefix}{strategy}"

    def get_token(self, strategy: str) -> Any:
        """Return the stored token for ``strategy``, or None."""
        return self.storage.get_universal(self.key(strategy))

    def set_token(self, strategy: str, token: Any) -> Any:
        """Store ``token`` for ``strategy``; None clears it."""
        return self.storage.set_universal(self.key(strategy), token)

    def sync_token(self, strategy: str) -> Any:
        """Re-synchronize ``strategy``'s token from persisted storage."""
        return self.storage.sync_universal(self.key(strategy))
