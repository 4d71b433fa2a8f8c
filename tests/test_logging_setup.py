import io
import logging
from pathlib import Path

from liquidation_risk import logging_setup


def _configure_logging_to_stream(debug: int) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    logging_setup.configure_logging(debug=debug, stream_target=stream)
    return logging.getLogger("liquidation_risk.test"), stream


def test_debug_messages_are_emitted_at_debug_level() -> None:
    logger, stream = _configure_logging_to_stream(2)

    logger.debug("Computed liquidation risk")

    assert "Computed liquidation risk" in stream.getvalue()


def test_info_is_suppressed_when_quiet() -> None:
    logger, stream = _configure_logging_to_stream(0)

    logger.info("Rendered liquidation risk")
    logger.warning("Margin ratio calculation failed")

    output = stream.getvalue()
    assert "Rendered liquidation risk" not in output
    assert "Margin ratio calculation failed" in output


def test_debug_to_level_mapping() -> None:
    assert logging_setup.debug_to_level(0) == logging.WARNING
    assert logging_setup.debug_to_level(1) == logging.INFO
    assert logging_setup.debug_to_level("2") == logging.DEBUG
    assert logging_setup.debug_to_level(3) == logging_setup.TRACE_LEVEL
    assert logging_setup.debug_to_level(None) == logging.INFO
    assert logging_setup.debug_to_level("loud") == logging.INFO


def test_log_file_receives_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "risk.log"
    logging_setup.configure_logging(debug=1, stream=False, log_file=str(log_file))

    logging.getLogger("liquidation_risk.test").info("Starting liquidation risk API")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert "Starting liquidation risk API" in log_file.read_text(encoding="utf-8")
