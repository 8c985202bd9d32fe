"""Tests for the gracemap.cli module."""

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from gracemap import cli
from gracemap.cli import app
from gracemap.legend import read_legend
from gracemap.pixels import GeoPoint
from gracemap.probe import ProbeResult, ProbeState


runner = CliRunner()


class TestEnvironment:
    """Tests for the --env option shared by all commands."""

    @patch('gracemap.config.change_env')
    def test_changes_env_when_not_default(self, mock_change_env):
        """Commands should change environment when env is not DEFAULT."""
        result = runner.invoke(app, ["tile", "--env", "production", "3", "0", "0"])

        mock_change_env.assert_called_once_with("production")
        assert result.exit_code == 0

    @patch('gracemap.config.change_env')
    def test_skips_env_change_for_default(self, mock_change_env):
        """Commands should not change environment for DEFAULT."""
        result = runner.invoke(app, ["tile", "--env", "DEFAULT", "3", "0", "0"])

        mock_change_env.assert_not_called()
        assert result.exit_code == 0

    @patch('gracemap.config.change_env')
    def test_prints_environment_name(self, mock_change_env):
        """Commands should print the environment name."""
        result = runner.invoke(app, ["tile", "--env", "test_env", "3", "0", "0"])

        assert "test_env" in result.output


class TestTileCommand:
    """Tests for the tile command."""

    def test_prints_wrapped_path(self):
        """tile should wrap negative columns."""
        result = runner.invoke(app, ["tile", "--base", "tiles", "--", "3", "-1", "0"])

        assert result.exit_code == 0
        assert "tiles/3/7/0.png" in result.output

    def test_prints_no_tile(self):
        """tile should report rows outside the world."""
        result = runner.invoke(app, ["tile", "3", "0", "8"])

        assert result.exit_code == 0
        assert "No tile" in result.output


class TestPixelCommand:
    """Tests for the pixel command."""

    def test_prints_center_and_graph(self):
        """pixel should print the cell center and graph name."""
        result = runner.invoke(app, ["pixel", "--", "41.7", "-3.2"])

        assert result.exit_code == 0
        assert "(41.5, -3.5)" in result.output
        assert "-3.5, 41.5 Data.jpg" in result.output
        assert "-3.5,%2041.5%20Data.jpg" in result.output
        assert "/2/1/1.png" in result.output
        assert "Found" not in result.output

    def test_check_finds_graph(self, graph_dir):
        """pixel --check should report a graph present in the graph directory."""
        with patch.object(cli.config, 'settings', {"graph_url": str(graph_dir)}):
            found = runner.invoke(app, ["pixel", "--check", "--", "41.7", "-3.2"])
            missing = runner.invoke(app, ["pixel", "--check", "--", "-20.2", "130.9"])

        assert found.exit_code == 0
        assert "Found:  yes" in found.output
        assert missing.exit_code == 0
        assert "Found:  no" in missing.output

    @patch.object(cli, 'GraphProber')
    def test_check_reports_failure(self, mock_prober):
        """pixel --check should exit with code 1 when the lookup fails."""
        mock_prober.return_value.probe = AsyncMock(return_value=ProbeResult(
            GeoPoint(41.5, -3.5), "x", state=ProbeState.REJECTED, error="boom"))

        result = runner.invoke(app, ["pixel", "--check", "--", "41.7", "-3.2"])

        assert result.exit_code == 1
        mock_prober.return_value.probe.assert_awaited_once_with(GeoPoint(41.7, -3.2))


class TestLegendCommand:
    """Tests for the legend command."""

    def test_prints_rows(self):
        """legend should print one label,color row per slot."""
        result = runner.invoke(app, ["legend", "--max-value", "2", "--slots", "5"])

        assert result.exit_code == 0
        rows = [line for line in result.output.splitlines() if line.startswith(("-", "0", "1", "2"))]
        assert rows[0] == "2.00,#0044ff"
        assert rows[2] == "0.00,#f5ffff"
        assert len(rows) == 5

    def test_writes_file(self, temp_dir):
        """legend --output should write a readable legend file."""
        output = temp_dir / "legend.txt"
        result = runner.invoke(app, ["legend", "--slots", "7", "--output", str(output)])

        assert result.exit_code == 0
        assert len(read_legend(output)) == 7

    def test_rejects_bad_scale(self):
        """legend should fail cleanly for a non positive scale."""
        result = runner.invoke(app, ["legend", "--max-value", "0"])

        assert result.exit_code == 1


class TestServeCommand:
    """Tests for the serve command."""

    @patch.object(cli.server, 'run')
    def test_runs_server(self, mock_run):
        """serve should run the server with the configured map."""
        result = runner.invoke(app, ["serve"])

        assert result.exit_code == 0
        mock_run.assert_called_once()
        assert mock_run.call_args.args[0].port == 8080

    @patch.object(cli.server, 'run')
    def test_port_override(self, mock_run):
        """serve --port should override the configured port."""
        runner.invoke(app, ["serve", "--port", "9999"])

        assert mock_run.call_args.args[0].port == 9999


class TestInvalidSettings:
    """Tests for invalid configuration."""

    @patch.object(cli.config, 'settings', {"max_value": -1})
    def test_exits_with_error(self):
        """Commands should exit with code 1 on invalid settings."""
        result = runner.invoke(app, ["tile", "3", "0", "0"])

        assert result.exit_code == 1
