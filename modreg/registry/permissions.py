"""Role checks for registry operations.

Two roles: the owner (the deploying identity, manages the moderator set)
and moderators (may change content status). The owner is always a moderator.
"""

from __future__ import annotations

from collections.abc import Set

from modreg.registry.errors import Unauthorized

ZERO_IDENTITY = "0x0000000000000000000000000000000000000000"


def is_zero_identity(identity: str) -> bool:
    """Return True for an empty, blank, or all-zero address identity."""
    if not identity or not identity.strip():
        return True
    return identity.strip().lower() == ZERO_IDENTITY


def is_owner(caller: str, owner: str) -> bool:
    return caller == owner


def is_moderator(caller: str, owner: str, moderators: Set[str]) -> bool:
    """Check if a caller may moderate content.

    Parameters
    ----------
    caller:
        The invoking identity.
    owner:
        The registry owner.
    moderators:
        Current moderator set.

    Returns
    -------
    bool
        True if the caller is a moderator or the owner.
    """
    return caller in moderators or is_owner(caller, owner)


def require_owner(caller: str, owner: str) -> None:
    """Raise ``Unauthorized`` unless the caller is the owner."""
    if not is_owner(caller, owner):
        raise Unauthorized(f"'{caller}' is not the registry owner")


def require_moderator(caller: str, owner: str, moderators: Set[str]) -> None:
    """Raise ``Unauthorized`` unless the caller is a moderator or the owner."""
    if not is_moderator(caller, owner, moderators):
        raise Unauthorized(f"'{caller}' is not a moderator")
