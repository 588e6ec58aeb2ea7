"""
Text Synchronization Manager

Provides hook extension points for components that keep per-document
state and must forget it when a document is closed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable

from lsprotocol.types import (
    DidCloseTextDocumentParams,
    LogMessageParams,
    MessageType,
    TEXT_DOCUMENT_DID_CLOSE,
)

if TYPE_CHECKING:
    from dclls.lsp.dcl_language_server import DclLanguageServer


# Type alias for hook signature
OnCloseHook = Callable[[DidCloseTextDocumentParams], Awaitable[None]]


class TextSyncManager:
    """
    Manages document close notifications and hook broadcasting.

    Document open/change are handled entirely by pygls (full sync keeps
    ls.workspace up to date), so only close is exposed to other components.

    Design Principles:
    - Errors are isolated (one hook failure doesn't affect others)
    - Hooks run in registration order
    - No return values (notifications, not requests)

    Usage:
        text_sync = TextSyncManager(server)
        text_sync.register_handlers()
        server.text_sync_manager = text_sync

        # The settings cache forgets closed documents
        text_sync.add_on_close_hook(settings_cache._on_document_closed)
    """

    def __init__(self, server: DclLanguageServer) -> None:
        self.server = server
        self._on_close_hooks: list[OnCloseHook] = []

    def add_on_close_hook(self, hook: OnCloseHook) -> None:
        """
        Register a hook for document close events.

        Use for cleanup of per-document state.
        """
        self._on_close_hooks.append(hook)

    async def _broadcast_on_close(self, params: DidCloseTextDocumentParams) -> None:
        """
        Broadcast did_close event to all registered hooks.

        Errors are caught and logged to prevent one hook from breaking others.
        """
        for hook in self._on_close_hooks:
            try:
                await hook(params)
            except Exception as e:
                self.server.window_log_message(
                    LogMessageParams(
                        type=MessageType.Error,
                        message=f"Error in on_close hook {hook.__name__}: "
                                f"{type(e).__name__}: {e}"
                    )
                )

    def register_handlers(self) -> None:
        """
        Register the textDocument/didClose handler with the server.

        This should be called once, when the server is created.
        """

        @self.server.feature(TEXT_DOCUMENT_DID_CLOSE)
        async def did_close(
            ls: DclLanguageServer,
            params: DidCloseTextDocumentParams,
        ) -> None:
            """The document is already gone from ls.workspace when this runs."""
            ls.window_log_message(
                LogMessageParams(
                    type=MessageType.Info,
                    message=f"Document closed: {params.text_document.uri}"
                )
            )
            await self._broadcast_on_close(params)
