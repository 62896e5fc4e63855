# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# tests/test_report_utils.py
import os

from rdfield.report_utils import configure_logging, print_summary_table


def test_configure_logging(tmp_path):
    """configure_logging should create a log file in the output directory."""
    logger = configure_logging(str(tmp_path), "test_compare")

    logger.info("test message")

    for h in logger.handlers:
        h.flush()

    log_files = [f for f in os.listdir(tmp_path) if f.endswith(".log")]
    assert len(log_files) == 1
    assert "test_compare" in log_files[0]
    with open(tmp_path / log_files[0]) as fh:
        assert "test message" in fh.read()

    # Clean up handlers to avoid leaking between tests
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def test_configure_logging_console_only():
    """Without an output directory only one console handler is attached."""
    logger = configure_logging()
    configure_logging()
    assert len(logger.handlers) == 1
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def test_print_summary_table(capsys):
    """print_summary_table should print formatted rows."""
    rows = [
        {"method": "ADI steady state", "rms_error": 1.5e-4, "max_rel_error": 0.0123,
         "seconds": 2.5},
    ]
    print_summary_table(rows)
    captured = capsys.readouterr()
    assert "ADI steady state" in captured.out
    assert "1.5000e-04" in captured.out
    assert "0.0123" in captured.out
    assert "2.500" in captured.out
