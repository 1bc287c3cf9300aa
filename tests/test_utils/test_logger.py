"""Tests for logging setup."""

import json

from loguru import logger

from src.utils.logger import event_logger, setup_logger


def test_event_logger_binds_launch_fields():
    messages: list[str] = []
    handler_id = logger.add(
        messages.append, format="{extra[signature]}|{extra[mint]}|{message}", level="DEBUG"
    )
    try:
        event_logger("sig_abc", "MintA").info("[ORCH] enriching")
    finally:
        logger.remove(handler_id)

    assert messages == ["sig_abc|MintA|[ORCH] enriching\n"]


def test_setup_logger_writes_json_file(tmp_path):
    setup_logger(json_logs=True, level="WARNING", log_dir=tmp_path)
    try:
        event_logger("sig_abc", "MintA").bind(stage="enriching").debug("[ORCH] transition")
        logger.complete()
    finally:
        logger.remove()

    files = list(tmp_path.glob("launch_radar_*.log"))
    assert len(files) == 1
    entry = json.loads(files[0].read_text(encoding="utf-8").splitlines()[0])
    assert entry["record"]["extra"]["signature"] == "sig_abc"
    assert entry["record"]["extra"]["stage"] == "enriching"
    assert entry["record"]["level"]["name"] == "DEBUG"
