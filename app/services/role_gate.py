"""Per-request authorization against a route's declared access rule."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from app.models import Role
from app.schemas.auth import CurrentUser
from app.services.errors import Forbidden, Unauthenticated


@dataclass(frozen=True)
class RouteAccess:
    """Access rule declared on a route: public, authenticated-only, or role-restricted."""

    public: bool = False
    roles: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def allow(cls, *roles: Role | str) -> "RouteAccess":
        return cls(roles=frozenset(str(getattr(r, "value", r)) for r in roles))


PUBLIC = RouteAccess(public=True)
AUTHENTICATED = RouteAccess()
ADMIN_ONLY = RouteAccess.allow(Role.ADMIN)
ADMIN_OR_MANAGER = RouteAccess.allow(Role.ADMIN, Role.MANAGER)
FILE_MANAGERS = RouteAccess.allow(Role.ADMIN, Role.MANAGER, Role.ASSISTANT)


def caller_roles(user: CurrentUser) -> set[str]:
    """roles claim if present, else the single role as a singleton set."""
    return set(user.roles) if user.roles else {user.role}


def has_access(user_roles: Iterable[str], required: frozenset[str]) -> bool:
    roles = set(user_roles)
    if not required:
        return True
    if Role.ADMIN.value in roles:
        return True
    return bool(roles & required)


def authorize(
    path: str,
    access: RouteAccess,
    token: str | None,
    verify: Callable[[str], CurrentUser],
    api_prefix: str = "/api",
) -> CurrentUser | None:
    """
    Decide whether a request may proceed.

    Returns the caller for authenticated routes, None when no identity was
    required (non-API path or public route). Raises Unauthenticated or
    Forbidden otherwise.
    """
    if not (path == api_prefix or path.startswith(api_prefix + "/")):
        return None
    if access.public:
        return None
    if not token:
        raise Unauthenticated()
    user = verify(token)
    if not has_access(caller_roles(user), access.roles):
        raise Forbidden()
    return user
