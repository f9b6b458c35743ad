from __future__ import annotations

import json

import pytest
import structlog

from pairswap.log import configure_logging


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


def test_json_renderer_with_level_and_timestamp(capsys) -> None:
    configure_logging(renderer=structlog.processors.JSONRenderer())
    structlog.get_logger().info("pool_ready", pool_id="0xabc")

    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "pool_ready"
    assert line["level"] == "info"
    assert line["pool_id"] == "0xabc"
    assert "timestamp" in line


def test_debug_hidden_unless_verbose(capsys) -> None:
    configure_logging(renderer=structlog.processors.JSONRenderer())
    structlog.get_logger().debug("ledger_mint")
    assert capsys.readouterr().out == ""

    configure_logging(verbose=True, renderer=structlog.processors.JSONRenderer())
    structlog.get_logger().debug("ledger_mint")
    assert "ledger_mint" in capsys.readouterr().out
