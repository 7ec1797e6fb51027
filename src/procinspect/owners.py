"""Owner id to display name resolution."""

import pwd
from collections.abc import Callable

OwnerResolver = Callable[[int], str | None]


def resolve_owner_name(uid: int) -> str | None:
    """Look up the account name for a uid, or None if it has no entry."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None
