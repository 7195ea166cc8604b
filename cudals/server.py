"""The language server loop: read framed requests, update state, reply."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import BinaryIO, Callable, Optional

from cudals.lsp import (
    new_initialize_response,
    parse_did_change,
    parse_did_open,
    parse_initialize_request,
)
from cudals.rpc import decode_message, encode_message, read_messages
from cudals.state import DiffError, DocumentNotFoundError, State, new_diff

log = logging.getLogger(__name__)

_LOG_FORMAT = "[lsp==cuda]%(asctime)s %(filename)s:%(lineno)d: %(message)s"


def _on_initialize(content: bytes, state: State, out: BinaryIO) -> None:
    request = parse_initialize_request(content)
    info = request.client_info
    if info is not None:
        log.info("Connected to %s, %s", info.name, info.version)
    else:
        log.info("Connected to an unnamed client")
    encoded = encode_message(new_initialize_response(request.id))
    log.info("Encoded Msg: %s", encoded)
    out.write(encoded.encode("utf-8"))
    out.flush()
    log.info("Written to output")


def _on_did_open(content: bytes, state: State, out: BinaryIO) -> None:
    notification = parse_did_open(content)
    document = notification.text_document
    log.info("Document URI %s", document.uri)
    state.open_document(document.uri, document.text)
    log.info("Showing State:::")
    for line in state.documents[document.uri]:
        log.info("%s", line)


def _on_did_change(content: bytes, state: State, out: BinaryIO) -> None:
    notification = parse_did_change(content)
    for change in notification.content_changes:
        span = change.range
        log.info(
            "Received change %r at %d:%d-%d:%d",
            change.text,
            span.start.line,
            span.start.character,
            span.end.line,
            span.end.character,
        )
        try:
            state.apply_diff(notification.uri, new_diff(change))
        except (DiffError, DocumentNotFoundError) as exc:
            log.warning("Error while applying diffs: %s", exc)
            break
    for line in state.documents.get(notification.uri, []):
        log.info("%s", line)


_HANDLERS: dict[str, Callable[[bytes, State, BinaryIO], None]] = {
    "initialize": _on_initialize,
    "textDocument/didOpen": _on_did_open,
    "textDocument/didChange": _on_did_change,
}


def handle_message(message: bytes, state: State, out: BinaryIO) -> str:
    """Handle one framed message and return its method name.

    Replies are written to ``out``. Malformed frames raise ``RpcError`` and
    malformed bodies raise ``ValueError``.
    """
    method, content = decode_message(message)
    log.info("Received method: %s", method)
    handler = _HANDLERS.get(method)
    if handler is not None:
        handler(content, state, out)
    return method


def serve(instream: BinaryIO, outstream: BinaryIO, state: Optional[State] = None) -> int:
    """Handle every message on ``instream`` until it ends; return how many."""
    if state is None:
        state = State()
    handled = 0
    for message in read_messages(instream):
        handle_message(message, state, outstream)
        handled += 1
    return handled


def _configure_logging(log_file: Optional[str]) -> None:
    logger = logging.getLogger("cudals")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        logger.setLevel(logging.INFO)
    else:
        handler = logging.StreamHandler(sys.stderr)
        logger.setLevel(logging.WARNING)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False


def main(argv: Optional[list[str]] = None) -> int:
    """Run the server over standard input and output."""
    parser = argparse.ArgumentParser(
        prog="cudals", description="Language server for CUDA sources over stdio."
    )
    parser.add_argument("--log-file", help="append log records to this file")
    args = parser.parse_args(argv)
    _configure_logging(args.log_file)

    log.info("Started the server")
    try:
        serve(sys.stdin.buffer, sys.stdout.buffer, State())
    except ValueError as exc:
        log.critical("Error while handling message: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())