"""Language-server protocol messages used by the server."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

SERVER_NAME = "cuda"
SERVER_VERSION = "0.0.1"
# Incremental document synchronisation.
TEXT_DOCUMENT_SYNC_INCREMENTAL = 2


def _load(data: Any) -> dict:
    if isinstance(data, (bytes, bytearray, str)):
        try:
            data = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ValueError(f"invalid JSON: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def _object(data: dict, key: str) -> dict:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"field {key!r} must be an object")
    return value


def _int(data: dict, key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer")
    return value


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


@dataclass
class ClientInfo:
    name: str = ""
    version: str = ""


@dataclass
class InitializeRequest:
    id: int = 0
    method: str = ""
    jsonrpc: str = ""
    client_info: Optional[ClientInfo] = None


@dataclass
class InitializeResponse:
    id: int
    jsonrpc: str = "2.0"
    text_document_sync: int = TEXT_DOCUMENT_SYNC_INCREMENTAL
    server_name: str = SERVER_NAME
    server_version: str = SERVER_VERSION

    def to_dict(self) -> dict:
        """Return the response as its JSON object."""
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "result": {
                "capabilities": {"textDocumentSync": self.text_document_sync},
                "serverInfo": {"name": self.server_name, "version": self.server_version},
            },
        }


@dataclass
class Position:
    line: int = 0
    character: int = 0


@dataclass
class Range:
    start: Position = field(default_factory=Position)
    end: Position = field(default_factory=Position)


@dataclass
class TextDocumentItem:
    uri: str = ""
    language_id: str = ""
    version: int = 0
    text: str = ""


@dataclass
class TextDocumentContentChangeEvent:
    range: Range = field(default_factory=Range)
    text: str = ""


@dataclass
class DidOpenTextDocumentNotification:
    method: str = ""
    jsonrpc: str = ""
    text_document: TextDocumentItem = field(default_factory=TextDocumentItem)


@dataclass
class DidChangeTextDocumentNotification:
    method: str = ""
    jsonrpc: str = ""
    uri: str = ""
    version: int = 0
    content_changes: list[TextDocumentContentChangeEvent] = field(default_factory=list)


def new_initialize_response(request_id: int) -> InitializeResponse:
    """Build the reply to an ``initialize`` request."""
    return InitializeResponse(id=request_id)


def parse_initialize_request(data: Any) -> InitializeRequest:
    """Parse an ``initialize`` request from JSON text, bytes or a dict."""
    obj = _load(data)
    params = _object(obj, "params")
    client_info = None
    if params.get("clientInfo") is not None:
        info = _object(params, "clientInfo")
        client_info = ClientInfo(name=_str(info, "name"), version=_str(info, "version"))
    return InitializeRequest(
        id=_int(obj, "id"),
        method=_str(obj, "method"),
        jsonrpc=_str(obj, "jsonrpc"),
        client_info=client_info,
    )


def parse_did_open(data: Any) -> DidOpenTextDocumentNotification:
    """Parse a ``textDocument/didOpen`` notification."""
    obj = _load(data)
    doc = _object(_object(obj, "params"), "textDocument")
    return DidOpenTextDocumentNotification(
        method=_str(obj, "method"),
        jsonrpc=_str(obj, "jsonrpc"),
        text_document=TextDocumentItem(
            uri=_str(doc, "uri"),
            language_id=_str(doc, "languageId"),
            version=_int(doc, "version"),
            text=_str(doc, "text"),
        ),
    )


def _position(data: dict) -> Position:
    return Position(line=_int(data, "line"), character=_int(data, "character"))


def _change(data: Any) -> TextDocumentContentChangeEvent:
    if data is None:
        return TextDocumentContentChangeEvent()
    if not isinstance(data, dict):
        raise ValueError("content change must be an object")
    span = _object(data, "range")
    return TextDocumentContentChangeEvent(
        range=Range(
            start=_position(_object(span, "start")),
            end=_position(_object(span, "end")),
        ),
        text=_str(data, "text"),
    )


def parse_did_change(data: Any) -> DidChangeTextDocumentNotification:
    """Parse a ``textDocument/didChange`` notification."""
    obj = _load(data)
    params = _object(obj, "params")
    doc = _object(params, "textDocument")
    changes = params.get("contentChanges")
    if changes is None:
        changes = []
    if not isinstance(changes, list):
        raise ValueError("field 'contentChanges' must be an array")
    return DidChangeTextDocumentNotification(
        method=_str(obj, "method"),
        jsonrpc=_str(obj, "jsonrpc"),
        uri=_str(doc, "uri"),
        version=_int(doc, "version"),
        content_changes=[_change(change) for change in changes],
    )