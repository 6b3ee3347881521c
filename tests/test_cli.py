"""
Tests for the CLI interface.
"""
import os
import shutil
import tempfile
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from usage_admin.cli.main import app, EXIT_CODE_OK, EXIT_CODE_FAIL

runner = CliRunner()


@pytest.fixture
def config_file():
    """Write a pool config with a fixed renewal date."""
    temp_dir = tempfile.mkdtemp()
    path = os.path.join(temp_dir, "dashboard.yaml")

    def _write(**pool):
        values = {
            "active_users": 1562,
            "total_pool": 1000000,
            "remaining_pool": 732450,
            "renewal_date": "2099-06-01",
            "average_daily_spend": 4000,
        }
        values.update(pool)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump({"pool": values}, f)
        return path

    yield _write
    shutil.rmtree(temp_dir, ignore_errors=True)


class TestCLI:
    """Test CLI commands."""

    def test_no_command_prints_hint(self):
        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_CODE_OK
        assert "Use --help" in result.output

    def test_overview(self, config_file):
        """Overview shows seats and pool figures."""
        result = runner.invoke(app, ["--config", config_file(), "overview"])

        assert result.exit_code == EXIT_CODE_OK
        assert "1,562" in result.output
        assert "1,442" in result.output
        assert "$732,450" in result.output
        assert "(73%)" in result.output
        assert "Jun 1, 2099" in result.output

    def test_overview_without_spend_has_no_run_out(self, config_file):
        result = runner.invoke(app, ["--config", config_file(average_daily_spend=0), "overview"])

        assert result.exit_code == EXIT_CODE_OK
        assert "—" in result.output

    def test_overview_with_offset_renewal_date(self, config_file):
        """A renewal date with a UTC offset does not break the countdowns."""
        result = runner.invoke(
            app, ["--config", config_file(renewal_date="2099-06-01T00:00:00+02:00"), "overview"]
        )

        assert result.exit_code == EXIT_CODE_OK
        assert "2099" in result.output

    def test_config_from_environment(self, config_file):
        result = runner.invoke(
            app, ["overview"], env={"USAGE_ADMIN_CONFIG": config_file(active_users=2000)}
        )
        assert result.exit_code == EXIT_CODE_OK
        assert "2,000" in result.output

    def test_missing_config_fails(self):
        result = runner.invoke(app, ["--config", "nonexistent.yaml", "overview"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "Error loading configuration" in result.output

    def test_usage_total_view(self):
        result = runner.invoke(app, ["usage", "--days", "7", "--view", "total", "--seed", "1"])

        assert result.exit_code == EXIT_CODE_OK
        assert "Usage dollars spent (7d)" in result.output
        assert "$" in result.output

    def test_usage_json(self):
        result = runner.invoke(app, ["usage", "--days", "14", "--json"])

        assert result.exit_code == EXIT_CODE_OK
        assert '"days": 14' in result.output
        assert '"view": "models"' in result.output

    def test_usage_invalid_view_fails(self):
        result = runner.invoke(app, ["usage", "--view", "stacked"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_usage_load_error_fails(self):
        """A failing data source surfaces the error and a retry hint."""
        with patch('usage_admin.data.source.generate_mock_usage', side_effect=RuntimeError("backend down")):
            result = runner.invoke(app, ["usage"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "backend down" in result.output
        assert "retry" in result.output

    def test_distribution(self):
        result = runner.invoke(app, ["distribution", "--days", "7", "--seed", "2"])

        assert result.exit_code == EXIT_CODE_OK
        assert "User spend distribution (7d)" in result.output
        assert "$0–20" in result.output
        assert "$980–1000" in result.output

    def test_distribution_unsupported_window_fails(self):
        result = runner.invoke(app, ["distribution", "--days", "60"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_distribution_zero_days_fails(self):
        result = runner.invoke(app, ["distribution", "--days", "0"])
        assert result.exit_code == EXIT_CODE_FAIL
        assert "must be one of" in result.output

    def test_distribution_drill_down(self):
        result = runner.invoke(
            app, ["distribution", "--seed", "3", "--bucket", "$20-40", "--user-rank", "1"]
        )

        assert result.exit_code == EXIT_CODE_OK
        assert "Showing" in result.output
        assert "@example.com" in result.output
        assert "Agent requests" in result.output
        assert "Model usage" in result.output

    def test_distribution_malformed_bucket_is_not_fatal(self):
        result = runner.invoke(app, ["distribution", "--bucket", "20 to 40"])

        assert result.exit_code == EXIT_CODE_OK
        assert "Nothing to display" in result.output

    def test_user_rank_requires_bucket(self):
        result = runner.invoke(app, ["distribution", "--user-rank", "1"])
        assert result.exit_code == EXIT_CODE_FAIL

    def test_user_rank_beyond_list_fails(self):
        result = runner.invoke(
            app, ["distribution", "--bucket", "$0-20", "--user-rank", "51"]
        )
        assert result.exit_code == EXIT_CODE_FAIL

    def test_user_detail_is_stable(self):
        args = ["user", "user123456@example.com", "--spend", "31.5", "--bucket", "$20-40"]
        first = runner.invoke(app, args)
        second = runner.invoke(app, args)

        assert first.exit_code == EXIT_CODE_OK
        assert first.output == second.output
        assert "Tab completions accepted" in first.output
        assert "$31.50" in first.output

    def test_dashboard(self, config_file):
        result = runner.invoke(app, ["--config", config_file(), "dashboard", "--seed", "4"])

        assert result.exit_code == EXIT_CODE_OK
        assert "Usage pool remaining" in result.output
        assert "Usage dollars spent (30d)" in result.output
        assert "User spend distribution (30d)" in result.output
