"""
Pydantic schemas for the permission catalog and permission checks.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator

from orgguard.core import config
from orgguard.core.errors import UnknownRoleError


# ============================================================================
# Catalog Schemas
# ============================================================================

class PermissionDefinition(BaseModel):
    """One catalog entry; `name` is always `<resource>.<action>`."""
    name: str = Field(..., min_length=3, max_length=100, description="Unique permission name")
    resource: str = Field(..., min_length=1, max_length=100, description="Resource type (e.g., 'organization', 'member')")
    action: str = Field(..., min_length=1, max_length=50, description="Action (e.g., 'read', 'delete', 'manage')")
    description: Optional[str] = Field(None, max_length=1000, description="Permission description")

    model_config = ConfigDict(frozen=True)

    @field_validator('resource', 'action')
    @classmethod
    def lowercase_no_dots(cls, v: str) -> str:
        """Resource and action are lowercase and must not contain the separator."""
        if "." in v:
            raise ValueError("Resource and action must not contain '.'")
        return v.lower()

    @field_validator('name')
    @classmethod
    def lowercase_name(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode='after')
    def name_matches_pair(self) -> "PermissionDefinition":
        expected = f"{self.resource}.{self.action}"
        if self.name != expected:
            raise ValueError(f"Permission name {self.name!r} must equal {expected!r}")
        return self

    @classmethod
    def of(cls, resource: str, action: str, description: Optional[str] = None) -> "PermissionDefinition":
        resource, action = resource.lower(), action.lower()
        return cls(name=f"{resource}.{action}", resource=resource, action=action, description=description)


class CatalogConfig(BaseModel):
    """
    Explicit seeding input: permission definitions, the recognized role set,
    and the role -> permission-name map seeded at global scope.
    """
    permissions: List[PermissionDefinition] = Field(default_factory=list)
    role_permissions: Dict[str, List[str]] = Field(default_factory=dict)
    roles: List[str] = Field(default_factory=lambda: list(config.RECOGNIZED_ROLES))

    @model_validator(mode='after')
    def roles_are_recognized(self) -> "CatalogConfig":
        for role in self.role_permissions:
            if role not in self.roles:
                raise UnknownRoleError(role)
        return self


# ============================================================================
# Permission Check Schemas
# ============================================================================

class PermissionCheckRequest(BaseModel):
    """Schema for checking if the current user has a permission."""
    resource: str = Field(..., min_length=1, max_length=100, description="Resource type")
    action: str = Field(..., min_length=1, max_length=50, description="Action")
    organization_id: Optional[str] = Field(None, description="Organization ID (omit for global scope)")


class PermissionCheckResponse(BaseModel):
    """Schema for permission check response."""
    has_permission: bool
    reason: Optional[str] = None
