"""
Document Settings Cache

Holds the effective configuration of each open document.

Design Principles:
1. Lazy (settings are fetched from the client on first lookup)
2. One fetch per document (later lookups share the pending fetch)
3. Only open documents are cached (entries dropped on didClose)
4. Falls back to a single global value for clients without
   workspace/configuration support
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Any, Awaitable, Callable

from lsprotocol.types import (
    ConfigurationItem,
    ConfigurationParams,
    DidCloseTextDocumentParams,
    LogMessageParams,
    MessageType,
)

if TYPE_CHECKING:
    from dclls.lsp.dcl_language_server import DclLanguageServer


# Configuration section requested from (and pushed by) the client.
CONFIGURATION_SECTION = "languageServer"

DEFAULT_MAX_NUMBER_OF_PROBLEMS = 1000

# (scope_uri, section) -> raw configuration value
ConfigurationProvider = Callable[[str, str], Awaitable[Any]]


@dataclass(frozen=True)
class Settings:
    """Server settings for a document (or for the whole workspace)."""

    max_number_of_problems: int = DEFAULT_MAX_NUMBER_OF_PROBLEMS

    @classmethod
    def from_dict(cls, value: Mapping[str, Any] | None) -> Settings:
        """
        Build settings from a configuration payload.

        Missing keys take their defaults. Raises ValueError for a payload
        that is not a mapping or holds an invalid value.
        """
        if value is None:
            return cls()

        if not isinstance(value, Mapping):
            raise ValueError(
                f"Expected a mapping for '{CONFIGURATION_SECTION}', "
                f"got {type(value).__name__}"
            )

        max_problems = value.get(
            "maxNumberOfProblems", DEFAULT_MAX_NUMBER_OF_PROBLEMS
        )
        if isinstance(max_problems, bool) or not isinstance(max_problems, int):
            raise ValueError(
                f"maxNumberOfProblems must be an integer, got {max_problems!r}"
            )
        if max_problems < 0:
            raise ValueError(
                f"maxNumberOfProblems must be non-negative, got {max_problems}"
            )

        return cls(max_number_of_problems=max_problems)


DEFAULT_SETTINGS = Settings()


class DocumentSettingsCache:
    """
    Cache of per-document settings.

    Each entry is an asyncio future: pending while the client is being
    asked, resolved once it answers. Callers await the returned future.

    Usage:
        cache = DocumentSettingsCache(server, configuration_pull=True)
        cache.register_text_sync_hooks()

        settings = await cache.get_settings(uri)
    """

    def __init__(
        self,
        server: DclLanguageServer | None,
        configuration_pull: bool,
        provider: ConfigurationProvider | None = None,
    ) -> None:
        self.server = server
        self.configuration_pull = configuration_pull
        self.global_settings = DEFAULT_SETTINGS

        self._documents: dict[str, asyncio.Future[Settings]] = {}
        self._provider = provider or self._fetch_from_client

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, uri: object) -> bool:
        return uri in self._documents

    def register_text_sync_hooks(self) -> None:
        """Drop cached settings when a document is closed."""
        if self.server is None or self.server.text_sync_manager is None:
            return

        self.server.text_sync_manager.add_on_close_hook(self._on_document_closed)

    def get_settings(self, uri: str) -> asyncio.Future[Settings]:
        """
        Get the settings for a document.

        Must be called from the running event loop. Without configuration
        pull, or for a document that is not open, the global settings are
        returned already resolved and nothing is cached.

        Callers share one fetch per document but each gets its own shielded
        future, so cancelling one caller leaves the fetch running for the rest.
        """
        if not self.configuration_pull or not self._is_open(uri):
            future: asyncio.Future[Settings] = (
                asyncio.get_running_loop().create_future()
            )
            future.set_result(self.global_settings)
            return future

        task = self._documents.get(uri)
        if task is None:
            task = asyncio.ensure_future(self._fetch(uri))
            task.add_done_callback(partial(self._on_fetch_done, uri))
            self._documents[uri] = task

        return asyncio.shield(task)

    def on_document_closed(self, uri: str) -> None:
        """Forget the settings of a closed document."""
        self._documents.pop(uri, None)

    def on_configuration_changed(self, settings: Any = None) -> None:
        """
        React to workspace/didChangeConfiguration.

        With configuration pull every cached entry is dropped so the next
        lookup asks the client again. Otherwise the pushed settings replace
        the global fallback.
        """
        if self.configuration_pull:
            self._documents.clear()
            return

        section = None
        if isinstance(settings, Mapping):
            section = settings.get(CONFIGURATION_SECTION)

        if section is None:
            self.global_settings = DEFAULT_SETTINGS
        else:
            self.global_settings = Settings.from_dict(section)

    def _is_open(self, uri: str) -> bool:
        """Check the document is open in the pygls workspace."""
        if self.server is None:
            return True
        return uri in self.server.workspace.text_documents

    async def _on_document_closed(self, params: DidCloseTextDocumentParams) -> None:
        self.on_document_closed(params.text_document.uri)

    async def _fetch(self, uri: str) -> Settings:
        value = await self._provider(uri, CONFIGURATION_SECTION)
        return Settings.from_dict(value)

    async def _fetch_from_client(self, scope_uri: str, section: str) -> Any:
        """Ask the client for a configuration section via workspace/configuration."""
        if self.server is None:
            return None

        result = await self.server.workspace_configuration_async(
            ConfigurationParams(
                items=[ConfigurationItem(scope_uri=scope_uri, section=section)]
            )
        )
        return result[0] if result else None

    def _on_fetch_done(self, uri: str, future: asyncio.Future[Settings]) -> None:
        """Evict a failed fetch so the next lookup retries."""
        if future.cancelled():
            reason = "cancelled"
        elif future.exception() is not None:
            error = future.exception()
            reason = f"{type(error).__name__}: {error}"
        else:
            return

        if self._documents.get(uri) is future:
            del self._documents[uri]

        if self.server is not None:
            self.server.window_log_message(
                LogMessageParams(
                    type=MessageType.Warning,
                    message=f"Settings fetch for {uri} failed ({reason})",
                )
            )
