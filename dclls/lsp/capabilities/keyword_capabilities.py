"""
Keyword completion for DCL command procedures.

Offers every catalogue entry (lexical functions and VMS commands) and
attaches their documentation on completionItem/resolve.
"""

from __future__ import annotations

from typing import Any

from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionParams,
)

from dclls.lsp.capabilities.capabilities import CompletionCapability


def _as_identifier(data: Any) -> int | None:
    """Recover a catalogue identifier from completion item data."""
    if isinstance(data, bool):
        return None
    if isinstance(data, int):
        return data
    # JSON round-trips may hand the id back as 5.0 or "5"
    if isinstance(data, float) and data.is_integer():
        return int(data)
    if isinstance(data, str):
        try:
            return int(data)
        except ValueError:
            return None
    return None


class KeywordCompletionCapability(CompletionCapability):
    """Provides completion for DCL lexical functions and VMS commands."""

    @property
    def name(self) -> str:
        return "keyword_completion"

    @property
    def description(self) -> str:
        return "Complete DCL lexical functions (F$...) and common VMS commands"

    async def can_handle(self, params: CompletionParams) -> bool:
        # Keywords are offered everywhere, regardless of cursor context.
        return self.catalogue is not None

    async def complete(self, params: CompletionParams) -> CompletionList:
        """List the whole catalogue, in catalogue order."""
        if self.catalogue is None:
            return CompletionList(is_incomplete=False, items=[])

        items = [
            CompletionItem(
                label=entry.label,
                kind=CompletionItemKind.Text,
                data=entry.identifier,
            )
            for entry in self.catalogue
        ]

        return CompletionList(is_incomplete=False, items=items)

    async def resolve(self, item: CompletionItem) -> CompletionItem:
        """Attach detail and documentation for a known identifier."""
        if self.catalogue is None:
            return item

        identifier = _as_identifier(item.data)
        if identifier is None:
            return item

        resolution = self.catalogue.resolve(identifier)
        if resolution is None:
            return item

        item.detail = resolution.detail
        item.documentation = resolution.documentation
        return item
