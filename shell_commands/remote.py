"""
Remote Call Boundary
====================

The only path by which a RemoteCommand reaches the collection server.

    Dispatcher ──serialize()──► RemoteCallBoundary.send() ──UDP──► server
               ◄──── text ─────                          ◄──JSON──

Wire format (UdpRemoteClient)
-----------------------------
One JSON object per datagram, UTF-8 encoded.

    request:  {"command": "remove", "args": {"id": 42}, "scripted": false}
    reply:    {"message": "Element removed."}

Control datagrams use the same envelope:

    {"command": "ping"}        handshake sent by start(), expects a reply
    {"command": "disconnect"}  sent by close(), no reply expected

Any transport problem (timeout, refused port, unreadable reply)
surfaces as ConnectionFailure. There is no retry: the dispatcher
treats a lost connection as the end of the session.
"""

from __future__ import annotations

import json
import logging
import socket
from abc import ABC, abstractmethod
from typing import Any, Optional

from shell_commands.errors import ConnectionFailure

logger = logging.getLogger(__name__)


class RemoteCallBoundary(ABC):
    """Interface the dispatcher uses to reach the remote peer."""

    @abstractmethod
    def start(self) -> None:
        """Establish the connection. Raises ConnectionFailure."""
        ...

    @abstractmethod
    def send(self, command: dict[str, Any], scripted: bool) -> str:
        """Forward a serialized command and return the textual reply.

        `scripted` tells the server to keep its own messaging terse;
        it never changes what the server does.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Flush remote-side cleanup and release the connection."""
        ...


class UdpRemoteClient(RemoteCallBoundary):
    """JSON-over-UDP client for the collection server."""

    def __init__(self, host: str = "127.0.0.1", port: int = 5555,
                 timeout: float = 5.0, buffer_size: int = 65535):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.buffer_size = buffer_size
        self.socket: Optional[socket.socket] = None
        self.stats = {
            'requests_sent': 0,
            'bytes_sent': 0,
            'errors': 0
        }

    def start(self) -> None:
        """Open the socket and check that the server answers."""
        try:
            self.socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            self.socket.settimeout(self.timeout)
            self.socket.connect((self.host, self.port))
        except OSError as e:
            self._discard_socket()
            raise ConnectionFailure(f"Cannot reach {self.host}:{self.port}: {e}") from e

        try:
            self._exchange({"command": "ping"})
        except ConnectionFailure:
            self._discard_socket()
            raise
        logger.info(f"Connected to {self.host}:{self.port}")

    def send(self, command: dict[str, Any], scripted: bool) -> str:
        if self.socket is None:
            raise ConnectionFailure("Remote connection is not open")

        request = dict(command)
        request["scripted"] = scripted
        reply = self._exchange(request)

        message = reply.get("message")
        if not isinstance(message, str):
            self.stats['errors'] += 1
            raise ConnectionFailure(f"Malformed reply from server: {reply!r}")
        return message

    def close(self) -> None:
        if self.socket is None:
            return
        try:
            self.socket.send(self._encode({"command": "disconnect"}))
        except OSError as e:
            logger.debug(f"Disconnect notice not delivered: {e}")
        self._discard_socket()
        logger.debug("Remote connection closed")

    def get_stats(self) -> dict[str, int]:
        """Get transmission statistics"""
        return self.stats.copy()

    # ─── Internals ──────────────────────────────────────────────────

    @staticmethod
    def _encode(payload: dict[str, Any]) -> bytes:
        return json.dumps(payload).encode("utf-8")

    def _exchange(self, request: dict[str, Any]) -> dict[str, Any]:
        """Send one request datagram and wait for one reply datagram."""
        data = self._encode(request)
        try:
            bytes_sent = self.socket.send(data)
            self.stats['requests_sent'] += 1
            self.stats['bytes_sent'] += bytes_sent
            logger.debug(f"📤 Sent {request.get('command')}: {bytes_sent}B to {self.host}:{self.port}")
            raw = self.socket.recv(self.buffer_size)
        except socket.timeout as e:
            self.stats['errors'] += 1
            raise ConnectionFailure(f"No reply from {self.host}:{self.port} within {self.timeout}s") from e
        except OSError as e:
            self.stats['errors'] += 1
            raise ConnectionFailure(f"Network error: {e}") from e

        try:
            reply = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            self.stats['errors'] += 1
            raise ConnectionFailure(f"Unreadable reply from server: {e}") from e

        if not isinstance(reply, dict):
            self.stats['errors'] += 1
            raise ConnectionFailure(f"Malformed reply from server: {reply!r}")
        logger.debug(f"📥 Received {len(raw)}B reply")
        return reply

    def _discard_socket(self) -> None:
        if self.socket is not None:
            self.socket.close()
            self.socket = None
