"""Route-to-role policy table consulted by the access control middleware."""

import re
from dataclasses import dataclass, field
from enum import Enum


class Role(str, Enum):
    MEMBER = "member"
    ADMIN = "admin"


class Access(str, Enum):
    """What a route requires from the caller."""

    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ROLE = "role"


_PLACEHOLDER = re.compile(r"\{[^/{}]+\}")


def _normalize_path(path: str) -> str:
    if len(path) > 1:
        return path.rstrip("/") or "/"
    return path


def _compile_template(template: str) -> re.Pattern[str]:
    """Turn '/api/books/{id}' into a regex where each placeholder is one path segment."""
    pattern = ""
    pos = 0
    for match in _PLACEHOLDER.finditer(template):
        pattern += re.escape(template[pos : match.start()]) + "[^/]+"
        pos = match.end()
    pattern += re.escape(template[pos:])
    return re.compile(f"^{pattern}$")


@dataclass(frozen=True)
class RouteRule:
    """
    One policy entry: method + path template -> required access.

    method is an HTTP method or '*' for any; roles only matter for Access.ROLE.
    """

    method: str
    path: str
    access: Access
    roles: frozenset[Role] = frozenset()
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.access is Access.ROLE and not self.roles:
            raise ValueError(f"Role-restricted rule {self.method} {self.path} needs at least one role")
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "_regex", _compile_template(_normalize_path(self.path)))

    def matches(self, method: str, path: str) -> bool:
        if self.method != "*" and self.method != method.upper():
            return False
        return self._regex.match(_normalize_path(path)) is not None

    def permits(self, role: Role) -> bool:
        if self.access is Access.ROLE:
            return role in self.roles
        return True


class RolePolicy:
    """
    Ordered rule table. The first matching rule wins; unmatched routes get the
    default rule, which requires authentication.
    """

    def __init__(self, rules: list[RouteRule], default: Access = Access.AUTHENTICATED) -> None:
        if default is Access.ROLE:
            raise ValueError("The default access level cannot be role-restricted")
        self._rules = tuple(rules)
        self._default = default

    @property
    def rules(self) -> tuple[RouteRule, ...]:
        return self._rules

    def resolve(self, method: str, path: str) -> RouteRule:
        for rule in self._rules:
            if rule.matches(method, path):
                return rule
        return RouteRule(method=method, path=_normalize_path(path), access=self._default)


def default_policy(prefix: str = "/api") -> RolePolicy:
    """Policy for the book catalog API mounted under ``prefix``."""
    admin_only = frozenset({Role.ADMIN})
    return RolePolicy(
        [
            RouteRule("POST", f"{prefix}/users/register", Access.PUBLIC),
            RouteRule("POST", f"{prefix}/users/login", Access.PUBLIC),
            RouteRule("GET", f"{prefix}/health", Access.PUBLIC),
            RouteRule("GET", "/", Access.PUBLIC),
            RouteRule("GET", "/docs", Access.PUBLIC),
            RouteRule("GET", "/docs/oauth2-redirect", Access.PUBLIC),
            RouteRule("GET", "/redoc", Access.PUBLIC),
            RouteRule("GET", "/openapi.json", Access.PUBLIC),
            RouteRule("GET", f"{prefix}/users", Access.ROLE, admin_only),
            RouteRule("DELETE", f"{prefix}/books/{{id}}", Access.ROLE, admin_only),
        ]
    )
