import uuid

from lsprotocol.types import (
    COMPLETION_ITEM_RESOLVE,
    INITIALIZE,
    INITIALIZED,
    TEXT_DOCUMENT_COMPLETION,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS,
    CompletionItem,
    CompletionList,
    CompletionOptions,
    CompletionParams,
    DidChangeConfigurationParams,
    DidChangeWorkspaceFoldersParams,
    InitializedParams,
    InitializeParams,
    LogMessageParams,
    MessageType,
    Registration,
    RegistrationParams,
)

from dclls.catalogue.catalogue import load_catalogue
from dclls.lsp.capabilities.capabilities import CapabilityManager
from dclls.lsp.dcl_language_server import DclLanguageServer
from dclls.lsp.negotiation import negotiate
from dclls.lsp.session import SessionState
from dclls.lsp.text_sync_manager import TextSyncManager
from dclls.workspace.settings_cache import DocumentSettingsCache


def initialize(ls: DclLanguageServer, params: InitializeParams):
    """
    Negotiate client capabilities and set up the session state.

    The InitializeResult itself (full text sync, completion with resolve)
    is built by pygls from the registered features.
    """
    flags = negotiate(params.capabilities)

    settings_cache = DocumentSettingsCache(ls, flags.supports_configuration_pull)
    settings_cache.register_text_sync_hooks()

    ls.session = SessionState(flags=flags, settings_cache=settings_cache)

    ls.window_log_message(
        LogMessageParams(
            MessageType.Info,
            "Client capabilities: "
            f"configuration={flags.supports_configuration_pull}, "
            f"workspaceFolders={flags.supports_workspace_folders}, "
            f"relatedInformation={flags.supports_diagnostic_related_info}",
        )
    )


async def initialized(ls: DclLanguageServer, params: InitializedParams):
    """Register for configuration changes if the client can be asked for them."""
    session = ls.session
    if session is None or not session.flags.supports_configuration_pull:
        return
    if session.configuration_registered:
        return

    session.configuration_registered = True
    try:
        await ls.client_register_capability_async(
            RegistrationParams(
                registrations=[
                    Registration(
                        id=str(uuid.uuid4()),
                        method=WORKSPACE_DID_CHANGE_CONFIGURATION,
                    )
                ]
            )
        )
    except Exception as e:
        ls.window_log_message(
            LogMessageParams(
                MessageType.Error,
                f"Failed to register for configuration changes: {e}",
            )
        )


def did_change_configuration(
    ls: DclLanguageServer, params: DidChangeConfigurationParams
):
    if ls.session is None:
        return

    try:
        ls.session.settings_cache.on_configuration_changed(params.settings)
    except ValueError as e:
        ls.window_log_message(
            LogMessageParams(MessageType.Error, f"Invalid settings ignored: {e}")
        )


def did_change_workspace_folders(
    ls: DclLanguageServer, params: DidChangeWorkspaceFoldersParams
):
    if ls.session is None or not ls.session.flags.supports_workspace_folders:
        return

    ls.window_log_message(
        LogMessageParams(MessageType.Info, "Workspace folder change event received.")
    )


async def completion(ls: DclLanguageServer, params: CompletionParams):
    if ls.capability_manager:
        return await ls.capability_manager.handle_completion(params)
    return CompletionList(is_incomplete=False, items=[])


async def completion_resolve(ls: DclLanguageServer, item: CompletionItem):
    if ls.capability_manager:
        return await ls.capability_manager.resolve_completion(item)
    return item


def create_server() -> DclLanguageServer:
    """
    Creates and returns a configured Language Server instance.

    The LanguageServer class from pygls handles:
    - JSON-RPC communication with clients (editors)
    - Request/response lifecycle
    - Document contents (full sync)
    """
    server = DclLanguageServer("dclls", "0.1.0")

    # Completion vocabulary is loaded once and shared by the whole session
    server.catalogue = load_catalogue()

    # Text sync first so the settings cache can hook into didClose
    server.text_sync_manager = TextSyncManager(server)
    server.text_sync_manager.register_handlers()

    server.capability_manager = CapabilityManager(server)

    server.feature(INITIALIZE)(initialize)
    server.feature(INITIALIZED)(initialized)
    server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)(did_change_configuration)
    server.feature(WORKSPACE_DID_CHANGE_WORKSPACE_FOLDERS)(
        did_change_workspace_folders
    )
    server.feature(
        TEXT_DOCUMENT_COMPLETION, CompletionOptions(resolve_provider=True)
    )(completion)
    server.feature(COMPLETION_ITEM_RESOLVE)(completion_resolve)

    return server
