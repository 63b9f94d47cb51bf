"""Length-prefixed JSON messaging over stream sockets."""

from __future__ import annotations

import json
import struct
import threading
from typing import Any, Callable, Protocol

from glint import logger

_HEADER = struct.Struct(">I")

# The same characters a browser-safe JSON encoder escapes.
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class _Connection(Protocol):
    def sendall(self, data: bytes) -> Any: ...

    def recv(self, size: int) -> bytes: ...

    def close(self) -> None: ...


MessageCallback = Callable[[dict[str, Any]], Any]


def _encode_json(value: dict[str, Any]) -> bytes:
    text = json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _JSON_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def encode_message(status: int, message: str, taskid: int) -> bytes:
    """A status frame: a big-endian 32-bit length followed by the JSON body."""
    body = _encode_json({"status": status, "msg": message, "taskid": str(taskid)})
    return _HEADER.pack(len(body)) + body


def _recv_exact(conn: _Connection, size: int) -> bytes | None:
    """Read exactly ``size`` bytes, or ``None`` if the peer closed first."""
    chunks = bytearray()
    while len(chunks) < size:
        chunk = conn.recv(size - len(chunks))
        if not chunk:
            return None
        chunks.extend(chunk)
    return bytes(chunks)


class MConn:
    """Dispatches framed JSON messages to a callback and broadcasts status frames."""

    def __init__(self, callback: MessageCallback | None = None) -> None:
        self.callback = callback
        self.connections: list[_Connection] = []
        self._lock = threading.Lock()

    def add(self, conn: _Connection) -> None:
        """Register a connection for broadcasts."""
        with self._lock:
            self.connections.append(conn)

    def send_all(self, status: int, message: str, taskid: int) -> int:
        """Send a status frame to every connection; drop those that fail.

        Returns the number of connections the frame reached.
        """
        frame = encode_message(status, message, taskid)
        delivered = 0
        with self._lock:
            for conn in list(self.connections):
                try:
                    conn.sendall(frame)
                except OSError as exc:
                    logger.error("%s", exc)
                    self.connections.remove(conn)
                    continue
                delivered += 1
        return delivered

    def handle(self, data: bytes | str) -> Any:
        """Decode one JSON object and pass it to the callback."""
        try:
            message = json.loads(data)
        except ValueError as exc:
            logger.error("%s", exc)
            raise
        if not isinstance(message, dict):
            error = ValueError("message is not a JSON object")
            logger.error("%s", error)
            raise error
        if self.callback is None:
            raise RuntimeError("no message callback set")
        return self.callback(message)

    def _handle_quietly(self, data: bytes) -> None:
        try:
            self.handle(data)
        except Exception as exc:  # a bad message must not stop the reader
            logger.error("%s", exc)

    def listen(self, conn: _Connection) -> None:
        """Read frames from ``conn`` until it closes, handling each in its own thread."""
        try:
            while True:
                header = _recv_exact(conn, _HEADER.size)
                if header is None:
                    break
                (length,) = _HEADER.unpack(header)
                body = _recv_exact(conn, length)
                if body is None:
                    break
                logger.info("received msg %s", body.decode("utf-8", errors="replace"))
                threading.Thread(target=self._handle_quietly, args=(body,), daemon=True).start()
        except OSError as exc:
            logger.error("%s", exc)
        finally:
            conn.close()