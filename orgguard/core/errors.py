"""
Error types shared across the permission and logging features.
"""
from typing import Optional


class OrgGuardError(Exception):
    """Base error for orgguard."""


class PermissionDenied(OrgGuardError):
    """The actor's role does not grant `resource.action` at the checked scope."""

    def __init__(self, resource: str, action: str):
        self.resource = resource
        self.action = action
        super().__init__(f"Permission denied: {resource}.{action}")


class SeedConflict(OrgGuardError):
    """Another writer inserted the same catalog row first."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} {key!r} already exists")


class LogPersistenceFailure(OrgGuardError):
    """An activity or audit entry could not be written."""

    def __init__(self, kind: str, cause: BaseException):
        self.kind = kind
        self.cause = cause
        super().__init__(f"Failed to write {kind} entry: {cause!r}")


class QueryDecodeFailure(OrgGuardError):
    """A stored JSON payload could not be decoded for one row."""

    def __init__(self, kind: str, row_id: str, field: str, cause: Optional[BaseException] = None):
        self.kind = kind
        self.row_id = row_id
        self.field = field
        self.cause = cause
        super().__init__(f"Undecodable {field} on {kind} {row_id}")


class UnknownRoleError(OrgGuardError, ValueError):
    """A catalog role map names a role outside the recognized set."""

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"Unrecognized role: {role!r}")
