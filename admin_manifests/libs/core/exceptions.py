"""
Custom Exceptions

Defines custom exception classes for the admin-manifests tool.
"""


class AdminManifestsError(Exception):
    """Base exception class for admin-manifests errors"""
    pass


class ConfigurationError(AdminManifestsError):
    """Raised when configuration or the kubesaw-admins file is invalid or missing"""
    pass


class ValidationError(AdminManifestsError):
    """Raised when the declared permissions cannot be compiled as given"""
    pass


class RoleNotFoundError(AdminManifestsError):
    """Raised when a role is not defined in the Role Template Library"""
    pass


class ManifestIdentityError(AdminManifestsError):
    """Raised when a manifest lacks a resolvable kind, name or namespace"""
    pass


class ManifestWriteError(AdminManifestsError):
    """Raised when writing the manifest tree fails"""
    pass
