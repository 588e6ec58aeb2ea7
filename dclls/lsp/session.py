from __future__ import annotations

from dataclasses import dataclass

from dclls.lsp.negotiation import ClientCapabilityFlags
from dclls.workspace.settings_cache import DocumentSettingsCache


@dataclass
class SessionState:
    """
    Per-session state created during the initialize handshake.

    Attributes:
        flags: Features negotiated with the client (fixed for the session)
        settings_cache: Per-document settings and the global fallback
        configuration_registered: Whether the didChangeConfiguration
            registration has been sent to the client
    """

    flags: ClientCapabilityFlags
    settings_cache: DocumentSettingsCache
    configuration_registered: bool = False
