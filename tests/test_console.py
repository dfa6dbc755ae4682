"""Tests for the terminal scan listener."""

from subnet_scanner.console import ConsoleListener
from subnet_scanner.models.common import Severity
from subnet_scanner.models.scan import Endpoint


def test_progress_line_only_redrawn_when_percent_changes(capsys):
    listener = ConsoleListener()

    for processed in range(1, 255):
        listener.on_progress(processed, 254)

    err = capsys.readouterr().err
    assert err.count("\r") == 101
    assert "Scanning: 100.0% (254/254)" in err


def test_quiet_listener_prints_no_progress(capsys):
    listener = ConsoleListener(show_progress=False)
    listener.on_progress(1, 2)
    assert capsys.readouterr().err == ""


def test_new_endpoints_are_announced_once(capsys):
    listener = ConsoleListener()
    first = Endpoint(host="192.168.1.20", port=25565)
    second = Endpoint(host="192.168.1.30", port=25565)

    listener.on_results_changed([first])
    listener.on_results_changed([first, second])

    err = capsys.readouterr().err
    assert err.count("Found Server #192.168.1.20 (192.168.1.20:25565)") == 1
    assert err.count("Found Server #192.168.1.30") == 1
    assert listener.results == [first, second]


def test_status_closes_open_progress_line(capsys):
    listener = ConsoleListener()
    listener.on_progress(1, 2)
    listener.on_status("Scanning stopped", Severity.WARNING)
    listener.on_stopped()

    err = capsys.readouterr().err
    assert err.endswith("\nScanning stopped\n")
    assert listener.last_status == ("Scanning stopped", Severity.WARNING)
    assert listener.stopped


def test_complete_records_found_count():
    listener = ConsoleListener()
    listener.on_complete(3)
    assert listener.found_count == 3
