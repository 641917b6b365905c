"""
Tests for the UDP remote client against a loopback server.

Run with:  python -m pytest shell_commands/test_remote.py -v
"""

import json
import socket
import threading

import pytest

from shell_commands.errors import ConnectionFailure
from shell_commands.remote import UdpRemoteClient


class LoopbackServer:
    """Tiny UDP server answering every request with `reply(request)`."""

    def __init__(self, reply=None):
        self.reply = reply or (lambda request: json.dumps({"message": f"done {request['command']}"}).encode())
        self.requests = []
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(0.1)
        self.port = self.sock.getsockname()[1]
        self.running = True
        self.disconnected = threading.Event()
        self.thread = threading.Thread(target=self._serve, daemon=True)

    def _serve(self):
        while self.running:
            try:
                data, address = self.sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                break
            request = json.loads(data.decode("utf-8"))
            self.requests.append(request)
            if request["command"] == "disconnect":
                self.disconnected.set()
                continue
            self.sock.sendto(self.reply(request), address)

    def start(self):
        self.thread.start()
        return self

    def stop(self):
        self.running = False
        self.thread.join(timeout=2)
        self.sock.close()


@pytest.fixture
def server():
    srv = LoopbackServer().start()
    yield srv
    srv.stop()


def free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


# ============================================================
# Normal traffic
# ============================================================

class TestUdpRemoteClient:
    def test_start_pings_server(self, server):
        client = UdpRemoteClient(port=server.port, timeout=2.0)
        client.start()
        try:
            assert server.requests[0] == {"command": "ping"}
        finally:
            client.close()

    def test_send_returns_reply_message(self, server):
        client = UdpRemoteClient(port=server.port, timeout=2.0)
        client.start()
        try:
            reply = client.send({"command": "remove", "args": {"id": 3}}, scripted=True)
            assert reply == "done remove"
            assert server.requests[-1] == {"command": "remove", "args": {"id": 3}, "scripted": True}
        finally:
            client.close()

    def test_stats_count_requests(self, server):
        client = UdpRemoteClient(port=server.port, timeout=2.0)
        client.start()
        client.send({"command": "show", "args": {}}, scripted=False)
        stats = client.get_stats()
        client.close()
        assert stats['requests_sent'] == 2
        assert stats['bytes_sent'] > 0
        assert stats['errors'] == 0

    def test_close_notifies_server_once(self, server):
        client = UdpRemoteClient(port=server.port, timeout=2.0)
        client.start()
        client.close()
        client.close()
        assert server.disconnected.wait(timeout=2)
        assert client.socket is None
        assert [r["command"] for r in server.requests].count("disconnect") == 1

    def test_send_after_close_fails(self, server):
        client = UdpRemoteClient(port=server.port, timeout=2.0)
        client.start()
        client.close()
        with pytest.raises(ConnectionFailure):
            client.send({"command": "info", "args": {}}, scripted=False)


# ============================================================
# Failures
# ============================================================

class TestUdpRemoteClientFailures:
    def test_send_before_start(self):
        client = UdpRemoteClient()
        with pytest.raises(ConnectionFailure, match="not open"):
            client.send({"command": "info", "args": {}}, scripted=False)

    def test_no_server_listening(self):
        client = UdpRemoteClient(port=free_udp_port(), timeout=0.3)
        with pytest.raises(ConnectionFailure):
            client.start()
        assert client.socket is None

    def test_unreadable_reply(self):
        server = LoopbackServer(reply=lambda request: b"\xff not json").start()
        try:
            client = UdpRemoteClient(port=server.port, timeout=2.0)
            with pytest.raises(ConnectionFailure, match="Unreadable"):
                client.start()
            assert client.get_stats()['errors'] == 1
        finally:
            server.stop()

    def test_reply_without_message(self):
        def reply(request):
            if request["command"] == "ping":
                return json.dumps({"message": "pong"}).encode()
            return json.dumps({"status": "ok"}).encode()

        server = LoopbackServer(reply=reply).start()
        try:
            client = UdpRemoteClient(port=server.port, timeout=2.0)
            client.start()
            with pytest.raises(ConnectionFailure, match="Malformed"):
                client.send({"command": "info", "args": {}}, scripted=False)
            client.close()
        finally:
            server.stop()

    def test_reply_not_an_object(self):
        server = LoopbackServer(reply=lambda request: b"[1, 2]").start()
        try:
            client = UdpRemoteClient(port=server.port, timeout=2.0)
            with pytest.raises(ConnectionFailure, match="Malformed"):
                client.start()
        finally:
            server.stop()
