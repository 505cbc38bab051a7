"""
Permission management feature module.

Implements organization-scoped Role-Based Access Control: a seeded catalog of
`resource.action` permissions, role grants at global or organization scope,
and resolution with a `resource.manage` wildcard fallback.
"""
