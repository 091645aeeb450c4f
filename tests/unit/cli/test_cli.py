"""Tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from searchbattle import __version__
from searchbattle.cli import _build_parser, _seed, main


class TestParser:
    def test_serve_options(self) -> None:
        args = _build_parser().parse_args(["--log-level", "debug", "serve", "--port", "9000", "--reload"])

        assert args.command == "serve"
        assert args.port == 9000
        assert args.reload is True
        assert args.log_level == "debug"

    def test_seed_defaults(self) -> None:
        args = _build_parser().parse_args(["seed"])

        assert args.csv_path == Path("processed.csv")
        assert args.skip_relational is False
        assert args.skip_index is False

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args([])

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestSeed:
    def test_missing_csv(self, settings, tmp_path: Path) -> None:
        args = _build_parser().parse_args(["seed", "--csv", str(tmp_path / "missing.csv")])
        assert _seed(settings, args) == 1

    def test_runs_loader(self, settings, tmp_path: Path) -> None:
        csv_path = tmp_path / "processed.csv"
        csv_path.write_text(",review,sentiment\n0,ok,1\n", encoding="utf-8")
        args = _build_parser().parse_args(["seed", "--csv", str(csv_path), "--skip-index"])

        with patch("searchbattle.cli._seed_async", new_callable=AsyncMock) as seed_async:
            assert _seed(settings, args) == 0
        seed_async.assert_awaited_once_with(settings, csv_path, False, True)

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--config", str(tmp_path / "nope.yaml"), "seed"])
        assert exc_info.value.code == 1
