"""
Tests for the CLI interface.
"""
import os
import tempfile

import pytest
import yaml
from typer.testing import CliRunner

from devlog_guard.cli.main import app, EXIT_CODE_PASS, EXIT_CODE_FAIL
from devlog_guard.config.loader import load_guard_config
from devlog_guard.core.ledger import build_ledger

runner = CliRunner()


@pytest.fixture
def workspace():
    """Temporary directory holding a config that points at a private ledger."""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_path = os.path.join(temp_dir, "guard.yaml")
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump({
                "budget": {"monthly_limit_usd": 1, "max_monthly_tokens": 10_000},
                "storage": {"db_path": os.path.join(temp_dir, "ledger.db")},
            }, f)
        yield temp_dir, config_path


def _write(directory: str, name: str, content: str) -> str:
    path = os.path.join(directory, name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return path


class TestLedgerCommands:
    """Test init, budget and reset commands."""

    def test_no_command_prints_hint(self):
        """Test invoking without a command."""
        result = runner.invoke(app, [])
        assert result.exit_code == EXIT_CODE_PASS
        assert "Use --help" in result.output

    def test_init_creates_database(self, workspace):
        """Test init creates the ledger file."""
        temp_dir, config_path = workspace
        result = runner.invoke(app, ["init", "--config", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Ledger initialized" in result.output
        assert os.path.exists(os.path.join(temp_dir, "ledger.db"))

    def test_budget_within_limits(self, workspace):
        """Test budget on an empty ledger."""
        _, config_path = workspace
        result = runner.invoke(app, ["budget", "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Within budget" in result.output
        assert "$1.000000" in result.output

    def test_budget_exceeded(self, workspace):
        """Test budget reports an exhausted token ceiling."""
        _, config_path = workspace
        build_ledger(load_guard_config(config_path)).record_usage(6000, 4000, 10_000)

        result = runner.invoke(app, ["budget", "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Budget exceeded" in result.output

    def test_reset_current_month(self, workspace):
        """Test reset empties the current month."""
        _, config_path = workspace
        ledger = build_ledger(load_guard_config(config_path))
        ledger.record_usage(6000, 4000, 10_000)

        result = runner.invoke(app, ["reset", "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert f"Usage for {ledger.current_month()} has been reset" in result.output
        reloaded = build_ledger(load_guard_config(config_path))
        assert reloaded.get_monthly_usage().total_tokens == 0

    def test_reset_named_month(self, workspace):
        """Test reset accepts an explicit month."""
        _, config_path = workspace
        result = runner.invoke(app, ["reset", "--month", "2025-12", "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Usage for 2025-12 has been reset" in result.output

    def test_reset_rejects_malformed_month(self, workspace):
        """Test a month that is not YYYY-MM fails without writing a record."""
        _, config_path = workspace
        result = runner.invoke(app, ["reset", "--month", "garbage", "-c", config_path])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "expected YYYY-MM" in result.output

    def test_reset_reaches_running_ledger(self, workspace):
        """Test a ledger opened before the reset stops reporting the old usage."""
        _, config_path = workspace
        running = build_ledger(load_guard_config(config_path))
        running.record_usage(6000, 4000, 10_000)
        assert running.is_budget_exceeded() is True

        result = runner.invoke(app, ["reset", "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert running.is_budget_exceeded() is False

    def test_missing_config_fails(self, workspace):
        """Test a missing config file is reported with a failure exit code."""
        temp_dir, _ = workspace
        result = runner.invoke(app, ["budget", "-c", os.path.join(temp_dir, "nope.yaml")])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "not found" in result.output


class TestExtractCommand:
    """Test offline fragment extraction."""

    def test_extract_prints_fragments(self, workspace):
        """Test fragments are listed with their language."""
        temp_dir, config_path = workspace
        log_path = _write(temp_dir, "log.md", "Today:\n```python\nprint('hi')\n```\n")

        result = runner.invoke(app, ["extract", log_path, "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "Fragment 1" in result.output
        assert "[python]" in result.output
        assert "print('hi')" in result.output

    def test_extract_nothing_found(self, workspace):
        """Test a log without code."""
        temp_dir, config_path = workspace
        log_path = _write(temp_dir, "log.md", "Meetings all day.")

        result = runner.invoke(app, ["extract", log_path, "-c", config_path])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No code fragments found" in result.output

    def test_extract_unreadable_file(self, workspace):
        """Test a missing log file fails."""
        temp_dir, config_path = workspace
        result = runner.invoke(app, ["extract", os.path.join(temp_dir, "missing.md"), "-c", config_path])
        assert result.exit_code == EXIT_CODE_FAIL


class TestCheckCommand:
    """Test offline claim validation."""

    def test_clean_post(self, workspace):
        """Test a post with nothing to flag."""
        temp_dir, _ = workspace
        post = _write(temp_dir, "post.txt", "Moved the export job to a worker queue.")

        result = runner.invoke(app, ["check", post])

        assert result.exit_code == EXIT_CODE_PASS
        assert "No evidence supplied" in result.output
        assert "No warnings" in result.output

    def test_warnings_listed(self, workspace):
        """Test warnings are printed but do not fail by default."""
        temp_dir, _ = workspace
        post = _write(temp_dir, "post.txt", "Made it 3x faster")

        result = runner.invoke(app, ["check", post])

        assert result.exit_code == EXIT_CODE_PASS
        assert "numeric_claims_without_evidence" in result.output
        assert "performance_claims_without_evidence" in result.output

    def test_enforced_flag_failure(self, workspace):
        """Test enforced flag turns warnings into a failing exit code."""
        temp_dir, _ = workspace
        post = _write(temp_dir, "post.txt", "Made it 3x faster")

        result = runner.invoke(app, ["check", post, "--enforced"])

        assert result.exit_code == EXIT_CODE_FAIL

    def test_evidence_checked_verbatim(self, workspace):
        """Test supplied evidence must be quoted exactly."""
        temp_dir, _ = workspace
        post = _write(temp_dir, "post.txt", "[Evidence] p95 went from 1200ms to 300ms")

        result = runner.invoke(app, ["check", post, "--before", "p95 1200ms", "--after", "300ms", "-e"])

        assert result.exit_code == EXIT_CODE_FAIL
        assert "evidence_before may not be quoted exactly" in result.output
        assert "evidence_after" not in result.output
