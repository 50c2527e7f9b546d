"""Tests for the demonstration driver and its configuration."""

import random

import pytest

from demo.__main__ import main
from demo.driver import ChannelDemo, flip_byte, run_demo, tamper_with
from xc220b3.config import ConfigurationError, DemoConfig
from xc220b3.primitives import MacMismatch


def test_run_demo_reports_round_trip_and_tampering() -> None:
    report = run_demo(DemoConfig(), random.Random(1234))

    assert report.decrypted == b"Hello"
    assert len(report.ciphertext) == 29
    assert len(report.tampered) == 29
    # A random overwrite can leave the message unchanged
    assert report.tamper_detected == (report.tampered != report.ciphertext)


def test_flip_byte_scenario() -> None:
    demo = ChannelDemo(DemoConfig())
    encrypted = demo.sender.encrypt(b"Hello")

    with pytest.raises(MacMismatch):
        demo.receiver.decrypt(flip_byte(encrypted, 0))


def test_tamper_with_is_reproducible() -> None:
    data = bytes(32)

    first = tamper_with(data, 4, random.Random(7))
    second = tamper_with(data, 4, random.Random(7))

    assert first == second
    assert len(first) == len(data)
    assert data == bytes(32)


def test_flip_byte() -> None:
    assert flip_byte(b"\x00\x0f", 1) == b"\x00\xf0"


def test_deliver_with_tampering() -> None:
    demo = ChannelDemo(DemoConfig(tamper_count=8), random.Random(99))

    assert demo.deliver(b"plain") == b"plain"

    demo.tamper = True
    assert demo.deliver(b"plain") in (None, b"plain")


def test_commands() -> None:
    demo = ChannelDemo(DemoConfig())

    assert demo._handle_command("/tamper on")
    assert demo.tamper
    assert demo._handle_command("/tamper off")
    assert not demo.tamper
    assert demo._handle_command("/bogus")
    assert not demo._handle_command("/quit")


def test_config_from_env() -> None:
    config = DemoConfig.from_env({
        "XC220B3_MESSAGE": "Hi there",
        "XC220B3_TAMPER_COUNT": "3",
        "XC220B3_LOG_LEVEL": "debug",
        "XC220B3_INTERACTIVE": "false",
    })

    assert config.message == "Hi there"
    assert config.tamper_count == 3
    assert config.log_level == "DEBUG"
    assert config.interactive is False


def test_config_overrides_take_precedence() -> None:
    config = DemoConfig.from_env({"XC220B3_MESSAGE": "env"}, message="flag", tamper_count=None)

    assert config.message == "flag"
    assert config.tamper_count == 1


@pytest.mark.parametrize("environ", [
    {"XC220B3_TAMPER_COUNT": "0"},
    {"XC220B3_TAMPER_COUNT": "many"},
    {"XC220B3_LOG_LEVEL": "loud"},
])
def test_invalid_config(environ) -> None:
    with pytest.raises(ConfigurationError):
        DemoConfig.from_env(environ)


def test_main(monkeypatch, capsys) -> None:
    for name in ("MESSAGE", "TAMPER_COUNT", "LOG_LEVEL", "INTERACTIVE"):
        monkeypatch.delenv(f"XC220B3_{name}", raising=False)

    assert main(["--message", "Hi", "--log-level", "warning"]) == 0
    assert main(["--tamper-count", "0"]) == 2
    assert "Configuration error" in capsys.readouterr().err
