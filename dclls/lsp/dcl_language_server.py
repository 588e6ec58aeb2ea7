from lsprotocol.types import TextDocumentSyncKind
from pygls.lsp.server import LanguageServer

from dclls.catalogue.catalogue import Catalogue
from dclls.lsp.capabilities.capabilities import CapabilityManager
from dclls.lsp.session import SessionState
from dclls.lsp.text_sync_manager import TextSyncManager


class DclLanguageServer(LanguageServer):
    """
    Custom Language Server with DCL-specific attributes.

    Attributes:
        catalogue: Completion vocabulary, loaded once at startup
        session: State negotiated during initialize (None before it)
    """

    def __init__(self, name: str, version: str):
        super().__init__(
            name, version, text_document_sync_kind=TextDocumentSyncKind.Full
        )

        self.catalogue: Catalogue | None = None
        self.session: SessionState | None = None
        self.capability_manager: CapabilityManager | None = None
        self.text_sync_manager: TextSyncManager | None = None
