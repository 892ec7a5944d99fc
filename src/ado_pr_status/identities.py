"""Recognition of Azure DevOps service (non-human) identities."""

from __future__ import annotations

from typing import Optional

# Display name of the platform's own service account.
SERVICE_DISPLAY_NAME = "Microsoft.VisualStudio.Services.TFS"

# Unique-name prefix of synthetic identities such as build services.
SERVICE_UNIQUE_NAME_PREFIX = "vstfs:///"


def is_service_identity(unique_name: Optional[str], display_name: Optional[str]) -> bool:
    """Return ``True`` when the identity belongs to a service rather than a person.

    Both comparisons are case-sensitive.
    """
    if display_name == SERVICE_DISPLAY_NAME:
        return True
    return bool(unique_name) and unique_name.startswith(SERVICE_UNIQUE_NAME_PREFIX)


def is_service_identity_ref(identity: Optional[dict]) -> bool:
    """Apply :func:`is_service_identity` to a raw ``IdentityRef`` payload."""
    identity = identity or {}
    return is_service_identity(identity.get("uniqueName"), identity.get("displayName"))
