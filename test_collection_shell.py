"""
Tests for the collection-shell entry point

Run with:  python -m pytest test_collection_shell.py -v
"""

import io
import socket

from collection_shell import main


def free_udp_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_create_config_returns_zero(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["--create-config", "sample.yaml"]) == 0
    assert (tmp_path / "sample.yaml").exists()


def test_unreachable_server_returns_one(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("sys.stdin", io.StringIO("show\n"))

    status = main(["-p", str(free_udp_port()), "-t", "0.3"])

    assert status == 1
    assert "Couldn't connect to the server" in capsys.readouterr().err
