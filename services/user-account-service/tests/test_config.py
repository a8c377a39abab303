from __future__ import annotations

import importlib

import pytest

from account_messages.constants import ENTITY_TASK_QUEUE
from user_account import config


def test_task_queue_defaults_to_entity_queue(monkeypatch):
    monkeypatch.delenv("TEMPORAL_TASK_QUEUE", raising=False)
    reloaded = importlib.reload(config)
    try:
        assert reloaded.Settings().task_queue == ENTITY_TASK_QUEUE
    finally:
        monkeypatch.undo()
        importlib.reload(config)


def test_tls_requires_both_paths():
    assert not config.Settings(temporal_tls_cert_path="", temporal_tls_key_path="").tls_enabled
    assert config.Settings(temporal_tls_cert_path="client.pem", temporal_tls_key_path="client.key").tls_enabled

    with pytest.raises(ValueError, match="must be set together"):
        config.Settings(temporal_tls_cert_path="client.pem", temporal_tls_key_path="").tls_enabled
