import json

import pytest

from config.settings import Config
from main import SwapRunner


@pytest.fixture(autouse=True)
def encryption_key(monkeypatch):
    monkeypatch.setenv("ENCRYPTION_KEY", "test-encryption-key")


def _runner(tmp_path, config_data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config_data))
    return SwapRunner(Config(str(path)))


def test_initialize_stops_on_missing_router(tmp_path):
    runner = _runner(tmp_path, {
        "network": {"contracts": {"router": ""}},
        "wallets": [{"name": "1", "private_key": "0x" + "4c" * 32}]
    })

    assert runner.initialize() is False
    assert runner.swap_executor is None
    assert runner.wallet_manager.wallets == []


def test_initialize_wires_services_for_valid_config(tmp_path):
    runner = _runner(tmp_path, {
        "wallets": [{"name": "1", "private_key": "0x" + "4c" * 32}],
        "swap": {"max_attempts": 3, "approve_target_token": False}
    })

    assert runner.initialize() is True
    assert runner.batch_controller.max_attempts == 3
    assert runner.swap_executor.approve_target_token is False
    assert runner.wallet_manager.get_wallet_names() == ["1"]
