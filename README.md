# cudals

A small language server for CUDA source files. It speaks the Language
Server Protocol over standard input and output, using JSON-RPC messages
framed with `Content-Length` headers.

## What it does

- Answers `initialize` with its capabilities (incremental text sync,
  `textDocumentSync: 2`) and server info (`cuda`, version `0.0.1`).
- Keeps an in-memory copy of each document opened with
  `textDocument/didOpen`, one string per line.
- Applies incremental edits from `textDocument/didChange` to that copy:
  single-line insertions and replacements, newline insertions above or
  below a line, deletion of characters within a line and deletion of whole
  lines. Other kinds of edit leave the document unchanged; a newline
  inserted across several lines is rejected with `DiffError`. When an edit
  in a batch fails, the rest of that batch is skipped.
- Ignores every other method.

## What it does not do

It offers no completions, hover, diagnostics or other language features:
the only reply it ever sends is the one to `initialize`. It does not handle
`shutdown` or `exit`; it stops when its input is closed. The tokenizer in
`cudals.lexer` ships with an empty keyword table, so by default
`Tokenizer.scan_tokens()` yields only the final `EOF` token unless you pass
your own keywords.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running

Point your editor's LSP client at the `cudals` command for CUDA files:

```
cudals
```

The server reads requests from stdin and writes responses to stdout until
its input is closed. Standard output carries protocol traffic only. By
default only warnings and errors are logged, to stderr; to keep a full
activity log, append it to a file:

```
cudals --log-file cudals.log
```

A malformed frame or message body stops the server with exit status 1.

## Using the pieces from Python

```python
from cudals.rpc import encode_message, decode_message
from cudals.state import State

framed = encode_message({"method": "hey"})
method, content = decode_message(framed.encode())  # ("hey", b'{"method":"hey"}')

state = State()
state.open_document("file:///kernel.cu", "__global__ void k() {}\n")
print(state.documents["file:///kernel.cu"])  # ['__global__ void k() {}']
```

- `cudals.rpc`: `encode_message`, `decode_message`, `split` and
  `read_messages`, which yields whole framed messages from a binary
  stream. Framing errors raise `RpcError` (a `ValueError`).
- `cudals.lsp`: dataclasses for the messages used, `new_initialize_response`
  and the parsers `parse_initialize_request`, `parse_did_open` and
  `parse_did_change`.
- `cudals.state`: `State` with `open_document` and `apply_diff`, `new_diff`,
  `parse_input`, `unwind`, and the errors `DiffError` and
  `DocumentNotFoundError`.
- `cudals.lexer`: `TokenType`, `Token`, `Tokenizer` and `tokenize`, which
  prints each token and returns the list.
- `cudals.server`: `handle_message` and `serve`, which runs the message loop
  over any pair of binary streams and returns how many messages it handled,
  which makes the server easy to drive from tests.