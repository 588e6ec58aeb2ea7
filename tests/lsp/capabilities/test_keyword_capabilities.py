from unittest.mock import AsyncMock, Mock

import pytest
from lsprotocol.types import (
    CompletionItem,
    CompletionItemKind,
    CompletionList,
    CompletionParams,
    LogMessageParams,
    MessageType,
    Position,
    TextDocumentIdentifier,
)

from dclls.catalogue.catalogue import Catalogue, load_catalogue
from dclls.lsp.capabilities.capabilities import CapabilityManager, CompletionCapability
from dclls.lsp.capabilities.keyword_capabilities import KeywordCompletionCapability


def _params(line: int, character: int, uri: str = "file:///work/build.com"):
    return CompletionParams(
        text_document=TextDocumentIdentifier(uri=uri),
        position=Position(line=line, character=character),
    )


@pytest.fixture
def mock_server():
    server = Mock()
    server.catalogue = load_catalogue()
    server.window_log_message = Mock()
    return server


@pytest.fixture
def capability(mock_server):
    return KeywordCompletionCapability(mock_server)


class TestKeywordCompletionCapability:

    @pytest.mark.asyncio
    async def test_can_handle_anywhere(self, capability):
        assert await capability.can_handle(_params(0, 0)) is True
        assert await capability.can_handle(_params(120, 40)) is True

    @pytest.mark.asyncio
    async def test_complete_lists_whole_catalogue(self, capability, mock_server):
        result = await capability.complete(_params(0, 0))

        assert isinstance(result, CompletionList)
        assert result.is_incomplete is False
        assert [item.label for item in result.items] == [
            entry.label for entry in mock_server.catalogue
        ]

    @pytest.mark.asyncio
    async def test_complete_items_carry_identifier_only(self, capability):
        result = await capability.complete(_params(0, 0))

        first = result.items[0]
        assert first.label == "f$environment"
        assert first.kind == CompletionItemKind.Text
        assert first.data == 1
        assert first.detail is None
        assert first.documentation is None

    @pytest.mark.asyncio
    async def test_complete_ignores_position(self, capability):
        first = await capability.complete(_params(0, 0))
        second = await capability.complete(_params(42, 17, uri="file:///other.com"))

        assert first.items == second.items

    @pytest.mark.asyncio
    async def test_complete_empty_catalogue(self, mock_server):
        mock_server.catalogue = Catalogue()
        capability = KeywordCompletionCapability(mock_server)

        result = await capability.complete(_params(0, 0))

        assert result.items == []

    @pytest.mark.asyncio
    async def test_resolve_lexical(self, capability):
        item = CompletionItem(label="f$csid", kind=CompletionItemKind.Text, data=5)

        resolved = await capability.resolve(item)

        assert resolved.detail == "Lexical"
        assert "identification number" in resolved.documentation

    @pytest.mark.asyncio
    async def test_resolve_command(self, capability):
        item = CompletionItem(label="PURGE", data=44)

        resolved = await capability.resolve(item)

        assert resolved.detail == "VMS COMMAND"
        assert resolved.documentation == (
            "Delete copies of file1 except for the most recent"
        )

    @pytest.mark.asyncio
    async def test_resolve_unknown_identifier_is_passthrough(self, capability):
        item = CompletionItem(label="mystery", kind=CompletionItemKind.Text, data=9999)

        resolved = await capability.resolve(item)

        assert resolved == CompletionItem(
            label="mystery", kind=CompletionItemKind.Text, data=9999
        )

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "data", [None, "f$csid", "²", "", [5], {"id": 5}, True, 5.5]
    )
    async def test_resolve_malformed_data_is_passthrough(self, capability, data):
        item = CompletionItem(label="x", data=data)

        resolved = await capability.resolve(item)

        assert resolved.detail is None
        assert resolved.documentation is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("data", [5.0, "5"])
    async def test_resolve_round_tripped_identifier(self, capability, data):
        item = CompletionItem(label="f$csid", data=data)

        resolved = await capability.resolve(item)

        assert resolved.detail == "Lexical"

    @pytest.mark.asyncio
    async def test_without_catalogue(self, mock_server):
        mock_server.catalogue = None
        capability = KeywordCompletionCapability(mock_server)

        assert await capability.can_handle(_params(0, 0)) is False
        assert (await capability.complete(_params(0, 0))).items == []
        item = CompletionItem(label="x", data=5)
        assert (await capability.resolve(item)).detail is None


class TestCapabilityManager:

    @pytest.mark.asyncio
    async def test_default_capabilities(self, mock_server):
        manager = CapabilityManager(mock_server)

        assert isinstance(
            manager.get_capability("keyword_completion"), KeywordCompletionCapability
        )
        assert len(manager.get_capabilities_by_type(CompletionCapability)) == 1

    @pytest.mark.asyncio
    async def test_handle_completion(self, mock_server):
        manager = CapabilityManager(mock_server)

        result = await manager.handle_completion(_params(3, 1))

        assert len(result.items) == 61
        assert result.is_incomplete is False

    @pytest.mark.asyncio
    async def test_handle_completion_skips_capabilities_that_decline(self, mock_server):
        declining = Mock(spec=CompletionCapability)
        declining.can_handle = AsyncMock(return_value=False)
        declining.complete = AsyncMock()

        manager = CapabilityManager(
            mock_server,
            capabilities={
                "declining": declining,
                "keyword_completion": KeywordCompletionCapability(mock_server),
            },
        )

        result = await manager.handle_completion(_params(0, 0))

        declining.complete.assert_not_awaited()
        assert len(result.items) == 61

    @pytest.mark.asyncio
    async def test_resolve_completion(self, mock_server):
        manager = CapabilityManager(mock_server)

        resolved = await manager.resolve_completion(CompletionItem(label="f$csid", data=5))

        assert resolved.detail == "Lexical"

    @pytest.mark.asyncio
    async def test_resolve_completion_isolates_errors(self, mock_server):
        failing = Mock(spec=CompletionCapability)
        failing.name = "failing"
        failing.resolve = AsyncMock(side_effect=RuntimeError("broken"))

        manager = CapabilityManager(
            mock_server,
            capabilities={
                "failing": failing,
                "keyword_completion": KeywordCompletionCapability(mock_server),
            },
        )

        resolved = await manager.resolve_completion(CompletionItem(label="COPY", data=42))

        assert resolved.documentation == "Copy file contents from file1 to file2"
        call_args = mock_server.window_log_message.call_args[0][0]
        assert isinstance(call_args, LogMessageParams)
        assert call_args.type == MessageType.Error

    @pytest.mark.asyncio
    async def test_resolve_unknown_through_manager(self, mock_server):
        manager = CapabilityManager(mock_server)
        item = CompletionItem(label="mystery", data=9999)

        resolved = await manager.resolve_completion(item)

        assert resolved is item
        assert resolved.detail is None

    @pytest.mark.asyncio
    async def test_resolve_non_decimal_digits_is_not_an_error(self, mock_server):
        manager = CapabilityManager(mock_server)
        item = CompletionItem(label="x", data="²")

        resolved = await manager.resolve_completion(item)

        assert resolved.detail is None
        mock_server.window_log_message.assert_not_called()
