"""
Client capability negotiation.

Inspects the capabilities a client declares in the initialize request
and derives the feature flags the server uses for the rest of the session.
"""

from __future__ import annotations

from dataclasses import dataclass

from lsprotocol.types import ClientCapabilities


@dataclass(frozen=True)
class ClientCapabilityFlags:
    """Optional protocol features supported by the connected client."""

    # workspace/configuration requests
    supports_configuration_pull: bool = False
    # workspace/didChangeWorkspaceFolders notifications
    supports_workspace_folders: bool = False
    # relatedInformation entries in published diagnostics
    supports_diagnostic_related_info: bool = False


def _has_path(obj: object, *path: str) -> bool:
    """Check that every attribute along ``path`` is present and truthy."""
    for name in path:
        obj = getattr(obj, name, None)
        if not obj:
            return False
    return True


def negotiate(capabilities: ClientCapabilities | None) -> ClientCapabilityFlags:
    """
    Derive feature flags from the client's declared capabilities.

    Older clients omit whole sub-trees of the capability document, so any
    missing field counts as "not supported".
    """
    if capabilities is None:
        return ClientCapabilityFlags()

    return ClientCapabilityFlags(
        supports_configuration_pull=_has_path(
            capabilities, "workspace", "configuration"
        ),
        supports_workspace_folders=_has_path(
            capabilities, "workspace", "workspace_folders"
        ),
        supports_diagnostic_related_info=_has_path(
            capabilities,
            "text_document",
            "publish_diagnostics",
            "related_information",
        ),
    )
