"""Tests for the prmonitor CLI."""

import threading
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from prmonitor import __version__
from prmonitor.adapters.base import NoTokenError, PRService
from prmonitor.app_state import AppState
from prmonitor.config import load_config
from prmonitor.integrations.secrets import FileSecretStore
from prmonitor.integrations.storage import FileBlobStore
from prmonitor.main import (
    apply_settings_changes,
    build_app,
    cmd_list,
    cmd_snooze,
    cmd_version,
    main,
    parse_args,
    run_daemon,
)
from prmonitor.models import PRFetchResults, SnoozeDuration
from prmonitor.services.settings_store import SettingsStore


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(f"storage:\n  data_dir: {tmp_path / 'data'}\nlogging:\n  level: ERROR\n")
    return path


def _app_with(results: PRFetchResults) -> AppState:
    service = MagicMock(spec=PRService)
    service.fetch_all_prs.return_value = results
    secrets = MagicMock()
    secrets.get_secret.return_value = "tok"
    return AppState(service=service, secrets=secrets, notifier=MagicMock())


class TestParseArgs:
    def test_default_command_is_daemon(self) -> None:
        args = parse_args([])
        assert args.command == "daemon"
        assert args.check is False

    def test_snooze_duration(self) -> None:
        args = parse_args(["snooze", "owner/repo#3", "-d", "1w"])
        assert (args.command, args.ref, args.duration) == ("snooze", "owner/repo#3", "1w")

    def test_settings_on_off(self) -> None:
        args = parse_args(["settings", "--interval", "900", "--notifications", "off"])
        assert args.interval == 900
        assert args.notifications is False
        assert args.launch_at_login is None

    def test_interval_outside_choices_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["settings", "--interval", "120"])


def test_check_prints_config(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-c", str(config_file), "--check"]) == 0
    assert "Config OK" in capsys.readouterr().out


def test_token_set_and_delete(config_file: Path, tmp_path: Path) -> None:
    assert main(["-c", str(config_file), "token", "set", "ghp_saved"]) == 0
    assert FileSecretStore(tmp_path / "data").get_secret() == "ghp_saved"

    assert main(["-c", str(config_file), "token", "delete"]) == 0
    assert FileSecretStore(tmp_path / "data").get_secret() is None


def test_settings_command_persists(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-c", str(config_file), "settings", "--interval", "60"]) == 0
    capsys.readouterr()

    assert main(["-c", str(config_file), "settings"]) == 0
    assert "poll_interval: 60" in capsys.readouterr().out


def test_snoozed_empty(config_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-c", str(config_file), "snoozed"]) == 0
    assert "No snoozed PRs" in capsys.readouterr().out


def test_build_app_uses_config_defaults(config_file: Path) -> None:
    app = build_app(load_config(config_file))

    assert app.settings.settings.poll_interval == 300
    assert app.notifications_enabled is True


def test_cmd_list_prints_buckets(make_pr, capsys: pytest.CaptureFixture[str]) -> None:
    app = _app_with(PRFetchResults(needs_review=[make_pr("a", number=5, title="Please look")]))

    assert cmd_list(app) == 0

    out = capsys.readouterr().out
    assert "Needs my review (1)" in out
    assert "owner/repo #5 Please look" in out
    assert "Drafts (0)" in out


def test_cmd_list_reports_error(capsys: pytest.CaptureFixture[str]) -> None:
    app = _app_with(PRFetchResults())
    app.service.fetch_all_prs.side_effect = NoTokenError()

    assert cmd_list(app) == 1
    assert "No GitHub token configured" in capsys.readouterr().err


def test_cmd_snooze(make_pr, capsys: pytest.CaptureFixture[str]) -> None:
    app = _app_with(PRFetchResults(approved=[make_pr("pr-3", number=3)]))

    assert cmd_snooze(app, "owner/repo#3", "1m") == 0
    [entry] = app.snoozes.entries
    assert entry.pr_id == "pr-3"
    assert entry.duration == SnoozeDuration.ONE_MONTH

    assert cmd_snooze(app, "owner/repo#99", "1d") == 1
    assert "No open PR matches" in capsys.readouterr().err


def test_cmd_version_check(capsys: pytest.CaptureFixture[str]) -> None:
    service = MagicMock(spec=PRService)
    service.fetch_latest_release.return_value = "99.0.0"

    assert cmd_version(service, check=True) == 0

    out = capsys.readouterr().out
    assert f"prmonitor {__version__}" in out
    assert "Update available: 99.0.0" in out


def test_cmd_version_up_to_date(capsys: pytest.CaptureFixture[str]) -> None:
    service = MagicMock(spec=PRService)
    service.fetch_latest_release.return_value = None

    cmd_version(service, check=True)

    assert "Up to date" in capsys.readouterr().out


def _wait_for(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            return False
        time.sleep(0.01)
    return True


class TestDaemonSettings:
    """The running daemon follows settings saved by another process."""

    def _app(self, data_dir: Path, *results: PRFetchResults) -> tuple[AppState, MagicMock]:
        service = MagicMock(spec=PRService)
        service.fetch_all_prs.side_effect = list(results)
        secrets = MagicMock()
        secrets.get_secret.return_value = "tok"
        notifier = MagicMock()
        app = AppState(
            service=service,
            secrets=secrets,
            notifier=notifier,
            settings=SettingsStore(FileBlobStore(data_dir)),
        )
        return app, notifier

    @staticmethod
    def _scheduler(interval: int) -> MagicMock:
        scheduler = MagicMock()
        scheduler.interval_seconds = interval

        def _reschedule(value: int) -> None:
            scheduler.interval_seconds = value

        scheduler.reschedule.side_effect = _reschedule
        return scheduler

    def test_unchanged_settings_keep_timer(self, tmp_path: Path) -> None:
        app, _ = self._app(tmp_path)
        scheduler = self._scheduler(300)

        apply_settings_changes(app, scheduler)

        scheduler.reschedule.assert_not_called()

    def test_interval_and_toggle_applied_while_running(self, tmp_path: Path, make_pr) -> None:
        app, notifier = self._app(tmp_path, PRFetchResults(), PRFetchResults(approved=[make_pr("a")]))
        scheduler = self._scheduler(300)
        stop = threading.Event()

        with patch("prmonitor.main.PollScheduler", return_value=scheduler):
            daemon = threading.Thread(target=run_daemon, args=(app, stop, 0.01))
            daemon.start()
            try:
                assert _wait_for(lambda: not app.is_first_load)
                SettingsStore(FileBlobStore(tmp_path)).update(poll_interval=60, notifications_enabled=False)
                assert _wait_for(lambda: scheduler.reschedule.called)
                app.refresh()
            finally:
                stop.set()
                daemon.join(5)

        scheduler.start.assert_called_once()
        scheduler.reschedule.assert_called_once_with(60)
        scheduler.stop.assert_called_once()
        assert app.notifications_enabled is False
        assert [pr.id for pr in app.approved] == ["a"]
        notifier.show_notification.assert_not_called()
