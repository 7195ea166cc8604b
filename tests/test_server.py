import io
import json
from unittest import mock

import pytest

from cudals.lsp import new_initialize_response
from cudals.rpc import RpcError, decode_message, encode_message, read_messages
from cudals.server import handle_message, main, serve
from cudals.state import State

URI = "file:///kernel.cu"


def frame(obj):
    return encode_message(obj).encode("utf-8")


def initialize(request_id=1, client_info=None):
    params = {}
    if client_info is not None:
        params["clientInfo"] = client_info
    return {"jsonrpc": "2.0", "id": request_id, "method": "initialize", "params": params}


def did_open(text, uri=URI):
    return {
        "jsonrpc": "2.0",
        "method": "textDocument/didOpen",
        "params": {
            "textDocument": {"uri": uri, "languageId": "cuda", "version": 1, "text": text}
        },
    }


def change(start_line, start_char, end_line, end_char, text):
    return {
        "range": {
            "start": {"line": start_line, "character": start_char},
            "end": {"line": end_line, "character": end_char},
        },
        "text": text,
    }


def did_change(changes, uri=URI):
    return {
        "jsonrpc": "2.0",
        "method": "textDocument/didChange",
        "params": {
            "textDocument": {"uri": uri, "version": 2},
            "contentChanges": changes,
        },
    }


def replies(out):
    return [json.loads(decode_message(m)[1]) for m in read_messages(io.BytesIO(out.getvalue()))]


def test_initialize_writes_response():
    out = io.BytesIO()
    state = State()
    method = handle_message(
        frame(initialize(7, {"name": "editor", "version": "1.0"})), state, out
    )
    assert method == "initialize"
    [reply] = replies(out)
    assert reply == new_initialize_response(7).to_dict()
    assert reply["result"]["serverInfo"] == {"name": "cuda", "version": "0.0.1"}
    assert reply["result"]["capabilities"]["textDocumentSync"] == 2


def test_initialize_without_client_info():
    out = io.BytesIO()
    handle_message(frame(initialize(3)), State(), out)
    [reply] = replies(out)
    assert reply["id"] == 3


def test_did_open_stores_document():
    state = State()
    out = io.BytesIO()
    method = handle_message(frame(did_open("int x;\nint y;\n")), state, out)
    assert method == "textDocument/didOpen"
    assert state.documents[URI] == ["int x;", "int y;"]
    assert state.current_buffer == "int x;\nint y;\n"
    assert out.getvalue() == b""


def test_did_change_applies_edits_in_order():
    state = State()
    out = io.BytesIO()
    handle_message(frame(did_open("abc\n")), state, out)
    handle_message(
        frame(did_change([change(0, 3, 0, 3, "d"), change(0, 0, 0, 1, "")])), state, out
    )
    assert state.documents[URI] == ["bcd"]
    assert state.current_buffer == "bcd\n"


def test_did_change_stops_at_first_failing_edit():
    state = State()
    out = io.BytesIO()
    handle_message(frame(did_open("abc\n")), state, out)
    handle_message(
        frame(did_change([change(5, 0, 5, 0, "x"), change(0, 0, 0, 0, "z")])), state, out
    )
    assert state.documents[URI] == ["abc"]


def test_did_change_for_unknown_document_is_ignored():
    state = State()
    out = io.BytesIO()
    handle_message(
        frame(did_change([change(0, 0, 0, 0, "x")], uri="file:///other.cu")), state, out
    )
    assert state.documents == {}
    assert out.getvalue() == b""


def test_unknown_method_writes_nothing():
    state = State()
    out = io.BytesIO()
    method = handle_message(frame({"jsonrpc": "2.0", "method": "shutdown", "id": 2}), state, out)
    assert method == "shutdown"
    assert out.getvalue() == b""
    assert state.documents == {}


def test_malformed_frame_raises():
    with pytest.raises(RpcError):
        handle_message(b"no separator here", State(), io.BytesIO())


def test_malformed_body_raises():
    bad = {"jsonrpc": "2.0", "method": "textDocument/didOpen", "params": {"textDocument": 5}}
    with pytest.raises(ValueError):
        handle_message(frame(bad), State(), io.BytesIO())


def test_serve_handles_a_stream_of_messages():
    stream = io.BytesIO(
        frame(initialize(1))
        + frame(did_open("__global__ void k();\n"))
        + frame(did_change([change(0, 0, 0, 0, "// ")]))
    )
    out = io.BytesIO()
    state = State()
    assert serve(stream, out, state) == 3
    [reply] = replies(out)
    assert reply["id"] == 1
    assert state.documents[URI] == ["// __global__ void k();"]


def _text_stream(data=b""):
    return io.TextIOWrapper(io.BytesIO(data), encoding="utf-8")


def test_main_serves_stdin_to_stdout():
    stdin = _text_stream(frame(initialize(4)))
    stdout = _text_stream()
    with mock.patch("sys.stdin", stdin), mock.patch("sys.stdout", stdout):
        status = main([])
    assert status == 0
    data = stdout.buffer.getvalue()
    [message] = list(read_messages(io.BytesIO(data)))
    assert json.loads(decode_message(message)[1]) == new_initialize_response(4).to_dict()


def test_main_reports_failure_on_bad_input(tmp_path):
    log_file = tmp_path / "server.log"
    stdin = _text_stream(b"Content-Length: 5\r\n\r\nnope!")
    stdout = _text_stream()
    with mock.patch("sys.stdin", stdin), mock.patch("sys.stdout", stdout):
        status = main(["--log-file", str(log_file)])
    assert status == 1
    assert stdout.buffer.getvalue() == b""
    assert "Invalid JSON Format" in log_file.read_text(encoding="utf-8")