from __future__ import annotations

import json
import logging
from pathlib import Path

from learner_report.logging import init as log_init
from learner_report.logging.error_log import ErrorLogBuffer
from learner_report.models.error_record import ErrorRecord


def _record(level: int, msg: str) -> logging.LogRecord:
    return logging.LogRecord("learner_report", level, __file__, 1, msg, None, None)


def test_labeled_formatter_prefixes():
    fmt = log_init.LabeledFormatter()
    assert fmt.format(_record(logging.INFO, "hello")) == "INFO hello"
    assert fmt.format(_record(logging.WARNING, "careful")) == "WARN careful"
    assert fmt.format(_record(logging.ERROR, "boom")) == "ERROR boom"
    assert fmt.format(_record(log_init.SUMMARY_LEVEL, "sources=3/3")) == "SUMMARY sources=3/3"


def test_setup_logging_is_idempotent(capsys):
    log_init.reset_logging()
    logger = log_init.setup_logging()
    assert logger is log_init.setup_logging()
    assert logger.name == "learner_report"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_module_loggers_propagate_and_debug_toggle(capsys):
    log_init.reset_logging()
    log_init.setup_logging()
    child = logging.getLogger("learner_report.services.orchestrator")

    child.debug("hidden")
    child.info("visible")
    log_init.set_debug(True)
    child.debug("now shown")
    log_init.set_debug(False)
    log_init.log_summary("matched=2")

    out = capsys.readouterr().out
    assert "DEBUG hidden" not in out
    assert "INFO visible" in out
    assert "DEBUG now shown" in out
    assert "SUMMARY matched=2" in out


def test_error_record_json_line():
    rec = ErrorRecord.create(
        source="chapters", subject="chapters.xlsx", card_number=-1, error_type="DECODE_ERROR", message="bad"
    )
    data = json.loads(rec.to_json_line())
    assert set(data) == {"timestamp", "source", "subject", "card_number", "error_type", "message"}
    assert data["timestamp"].endswith("Z")
    assert data["card_number"] == -1


def test_error_log_buffer_flush(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()

    buf.append(ErrorRecord.create("email", "jane doe-0", 1, "DELIVERY_ERROR", "refused"))
    rec = buf.add(source="whatsapp", subject="jane doe-0", card_number=1, error_type="DELIVERY_ERROR", message="401")
    assert rec.timestamp.endswith("Z")
    assert len(buf) == 2

    path = buf.flush()
    assert path is not None
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("errors-") and path.name.endswith(".log")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(ln)["source"] for ln in lines] == ["email", "whatsapp"]
    assert len(buf) == 0
