"""Admin roles and the capabilities they grant."""

from enum import Enum
from typing import Iterable

from supabase import Client


class Role(str, Enum):
    SUPER_ADMIN = "super_admin"
    CONTENT_MODERATOR = "content_moderator"
    CATEGORY_MANAGER = "category_manager"


def resolve_capabilities(role_labels: Iterable[str]) -> frozenset[Role]:
    """
    Map raw role labels to the set of roles the user effectively holds.

    Unknown labels are ignored. `super_admin` implies every other role, so
    callers only ever test membership of the role they need.
    """
    roles = set()
    for label in role_labels:
        try:
            roles.add(Role(label))
        except ValueError:
            continue

    if Role.SUPER_ADMIN in roles:
        return frozenset(Role)
    return frozenset(roles)


def has_any(capabilities: frozenset[Role], required: Iterable[Role] = ()) -> bool:
    """True when any of `required` is held; with nothing required, any admin role will do."""
    required = tuple(required)
    if not required:
        return bool(capabilities)
    return any(role in capabilities for role in required)


def fetch_roles(supabase: Client, user_id: str) -> list[str]:
    result = (
        supabase.table("user_roles").select("role").eq("user_id", str(user_id)).execute()
    )
    return [row["role"] for row in result.data or []]
