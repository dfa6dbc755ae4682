"""Tests for the click command line interface."""

import json
import logging
import os
import platform
import socket
from unittest.mock import AsyncMock, patch

import pytest
import structlog
from click.testing import CliRunner

from subnet_scanner import __version__
from subnet_scanner.__main__ import cli
from subnet_scanner.discovery.coordinator import ScanCoordinator


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("SUBNET_SCANNER_"):
            monkeypatch.delenv(name, raising=False)
    yield
    # The scan command points logging at CliRunner's temporary stderr.
    logging.getLogger().handlers.clear()
    structlog.reset_defaults()


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def listening_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(64)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


def test_version(runner):
    result = runner.invoke(cli, ["version"])
    assert result.exit_code == 0
    assert f"Subnet Scanner v{__version__}" in result.output


def test_config_show(runner):
    result = runner.invoke(cli, ["config-show"])
    assert result.exit_code == 0
    shown = json.loads(result.output)
    assert shown["scan"]["port"] == 25565
    assert shown["scan"]["max_workers"] == 50


def test_config_file_option(runner, tmp_path):
    config_file = tmp_path / "scanner.json"
    config_file.write_text(json.dumps({"scan": {"port": 8080}}))

    result = runner.invoke(cli, ["--config-file", str(config_file), "config-show"])

    assert result.exit_code == 0
    assert json.loads(result.output)["scan"]["port"] == 8080


def test_bad_config_file_exits_with_error(runner, tmp_path):
    config_file = tmp_path / "broken.json"
    config_file.write_text("{not json")

    result = runner.invoke(cli, ["--config-file", str(config_file), "config-show"])

    assert result.exit_code == 1
    assert "Error loading configuration" in result.output


def test_scan_rejects_invalid_address(runner):
    result = runner.invoke(cli, ["--log-level", "ERROR", "scan", "999.1.1.1"])
    assert result.exit_code == 2
    assert "Invalid IP address format" in result.output


def test_scan_rejects_out_of_range_port(runner):
    result = runner.invoke(cli, ["scan", "192.168.1.1", "--port", "70000"])
    assert result.exit_code == 2


@pytest.mark.skipif(platform.system() != "Linux", reason="relies on the whole 127.0.0.0/8 routing to loopback")
def test_scan_writes_found_endpoints_to_file(runner, tmp_path, listening_port):
    output_file = tmp_path / "found.json"

    result = runner.invoke(cli, [
        "--log-level", "ERROR",
        "scan", "127.0.0.1",
        "--prefix", "29",
        "--port", str(listening_port),
        "--timeout", "0.5",
        "--quiet",
        "--output-file", str(output_file),
    ])

    assert result.exit_code == 0, result.output
    assert "Scan complete! Found 1 servers" in result.output
    assert "1 endpoint(s) written to" in result.output
    assert json.loads(output_file.read_text()) == [
        {"host": "127.0.0.1", "port": listening_port, "name": "Server #127.0.0.1"}
    ]


@pytest.fixture
def closed_port():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


@pytest.mark.skipif(platform.system() != "Linux", reason="relies on the whole 127.0.0.0/8 routing to loopback")
def test_scan_prints_found_endpoints_as_json(runner, listening_port):
    result = runner.invoke(cli, [
        "--log-level", "ERROR",
        "scan", "127.0.0.1",
        "--prefix", "30",
        "--port", str(listening_port),
        "--timeout", "0.5",
        "--quiet",
    ])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == [
        {"host": "127.0.0.1", "port": listening_port, "name": "Server #127.0.0.1"}
    ]
    assert "Scan complete! Found 1 servers" in result.stderr


def test_scan_interrupted_by_user_exits_130(runner, closed_port):
    with patch.object(ScanCoordinator, "wait", new=AsyncMock(side_effect=KeyboardInterrupt)):
        result = runner.invoke(cli, [
            "--log-level", "ERROR",
            "scan", "127.0.0.1",
            "--prefix", "30",
            "--port", str(closed_port),
            "--timeout", "0.2",
            "--quiet",
        ])

    assert result.exit_code == 130
    assert "Scan interrupted by user." in result.stderr
    assert "Scanning stopped" in result.stderr
    assert result.stdout == ""


def test_unwritable_output_file_exits_1(runner, tmp_path, closed_port):
    output_file = tmp_path / "found.json"

    with patch("subnet_scanner.__main__._write_records", side_effect=OSError("Read-only file system")):
        result = runner.invoke(cli, [
            "--log-level", "ERROR",
            "scan", "127.0.0.1",
            "--prefix", "30",
            "--port", str(closed_port),
            "--timeout", "0.2",
            "--quiet",
            "--output-file", str(output_file),
        ])

    assert result.exit_code == 1
    assert "Error writing output file" in result.stderr
    assert "Read-only file system" in result.stderr
    assert "written to" not in result.output


def test_unexpected_scan_error_exits_1_without_blaming_the_output_file(runner, closed_port):
    with patch.object(ScanCoordinator, "wait", new=AsyncMock(side_effect=OSError("Too many open files"))):
        result = runner.invoke(cli, [
            "--log-level", "ERROR",
            "scan", "127.0.0.1",
            "--prefix", "30",
            "--port", str(closed_port),
            "--timeout", "0.2",
            "--quiet",
        ])

    assert result.exit_code == 1
    assert "An unexpected error occurred during the scan: Too many open files" in result.stderr
    assert "output file" not in result.output
