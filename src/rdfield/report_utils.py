# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

"""Shared utilities for comparison runs: logging setup and summary tables."""

import logging
import os


def configure_logging(outdir=None, run_name="rdfield", level=logging.INFO):
    """Set up console (+ optional file) logging on the 'rdfield' logger.

    Args:
        outdir: directory for the log file; no file handler if None.
        run_name: used in the log filename.
        level: logging level for the logger and its handlers.

    Returns:
        the configured logger.
    """
    logger = logging.getLogger("rdfield")
    logger.setLevel(level)

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    if outdir is not None:
        os.makedirs(outdir, exist_ok=True)
        log_path = os.path.join(outdir, f"{run_name}.log")
        fh = logging.FileHandler(log_path)
        fh.setLevel(level)
        fh.setFormatter(fmt)
        logger.addHandler(fh)

    # Console handler (only if none already exists)
    if not any(isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
               for h in logger.handlers):
        ch = logging.StreamHandler()
        ch.setLevel(level)
        ch.setFormatter(fmt)
        logger.addHandler(ch)

    return logger


def print_summary_table(summary_rows):
    """Print a formatted method-comparison table to stdout.

    Each row is a dict with method, rms_error, max_rel_error and seconds.
    """
    header = f"{'method':>22} {'rms':>12} {'max_rel':>10} {'time[s]':>9}"
    print(header)
    print("-" * len(header))
    for row in summary_rows:
        print(
            f"{row['method']:>22} {row['rms_error']:>12.4e} "
            f"{row['max_rel_error']:>10.4f} {row['seconds']:>9.3f}"
        )
