# Copyright (c) 2026 Shmuel Link
# SPDX-License-Identifier: MIT

# tests/test_cli.py
import logging
import os

from rdfield.cli import build_parser, main


def _drop_handlers():
    logger = logging.getLogger("rdfield")
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.width == 100
    assert args.D == 5.0
    assert args.decay == 0.01
    assert args.lambda_range == [4.0, 12.0, 9]


def test_main_small_grid(tmp_path, capsys):
    """End to end on a small grid: converges, prints the table and logs to file."""
    argv = [
        "--width", "20", "--height", "16", "-D", "2.0", "-k", "0.1", "--dt", "1.0",
        "--probability", "0.05", "--max-mode", "60", "--tol", "1e-8", "--chunk", "50",
        "--lambda-range", "1", "4", "4", "--scale-range", "5", "20", "4",
        "--seed", "3", "--logdir", str(tmp_path),
    ]
    try:
        code = main(argv)
    finally:
        _drop_handlers()
    assert code == 0
    out = capsys.readouterr().out
    assert "ADI steady state" in out
    assert "effective influence" in out
    assert "Effective influence fit" in out
    assert os.path.exists(tmp_path / "compare.log")
