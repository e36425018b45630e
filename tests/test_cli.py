from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from stockdash.cli import main
from stockdash.models import Direction, PredictorError, PredictorResult, Signal


class TestCLIParsing:
    def test_no_command_fails(self) -> None:
        with pytest.raises(SystemExit):
            main([])

    def test_help_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_migrate_command(self) -> None:
        with patch("stockdash.cli.cmd_migrate", return_value=None) as mock_cmd:
            main(["migrate"])
            mock_cmd.assert_called_once()

    def test_serve_defaults(self) -> None:
        with patch("stockdash.cli.cmd_serve", return_value=None) as mock_cmd:
            main(["serve"])
            args = mock_cmd.call_args[0][0]
            assert args.host == "0.0.0.0"
            assert args.port == 8080

    def test_serve_port(self) -> None:
        with patch("stockdash.cli.cmd_serve", return_value=None) as mock_cmd:
            main(["serve", "--host", "127.0.0.1", "--port", "9000"])
            args = mock_cmd.call_args[0][0]
            assert args.host == "127.0.0.1"
            assert args.port == 9000

    def test_predict_with_symbols(self) -> None:
        with patch("stockdash.cli.cmd_predict", return_value=0) as mock_cmd:
            main(["predict", "AAPL", "MSFT"])
            args = mock_cmd.call_args[0][0]
            assert args.symbols == ["AAPL", "MSFT"]

    def test_predict_requires_symbols(self) -> None:
        with pytest.raises(SystemExit):
            main(["predict"])

    def test_verbose_flag(self) -> None:
        with patch("stockdash.cli.cmd_migrate", return_value=None) as mock_cmd:
            main(["-v", "migrate"])
            args = mock_cmd.call_args[0][0]
            assert args.verbose is True

    def test_nonzero_status_exits(self) -> None:
        with patch("stockdash.cli.cmd_predict", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                main(["predict", "AAPL"])
        assert exc_info.value.code == 1


class TestPredictCommand:
    def _run(self, results: list, capsys: pytest.CaptureFixture) -> tuple[int | None, list]:
        client = MagicMock()
        client.predict_batch = AsyncMock(return_value=results)
        client.close = AsyncMock()
        with patch(
            "stockdash.predictor.http.HttpPredictorClient.from_config", return_value=client,
        ):
            try:
                main(["predict", "AAPL", "BAD"])
                code = None
            except SystemExit as e:
                code = e.code
        client.close.assert_awaited_once()
        return code, json.loads(capsys.readouterr().out)

    def test_all_ok(self, capsys: pytest.CaptureFixture) -> None:
        code, out = self._run(
            [PredictorResult("AAPL", Direction.UP, 0.7, Signal.BUY, "t")], capsys,
        )
        assert code is None
        assert out[0]["symbol"] == "AAPL"
        assert "expectedSignal" not in out[0]

    def test_failure_and_inconsistency_flagged(self, capsys: pytest.CaptureFixture) -> None:
        code, out = self._run(
            [
                PredictorResult("AAPL", Direction.UP, 0.2, Signal.BUY, "t"),
                PredictorError("BAD", "Unknown ticker"),
            ],
            capsys,
        )
        assert code == 1
        assert out[0]["expectedSignal"] == "SELL"
        assert out[1] == {"symbol": "BAD", "error": "Unknown ticker"}
