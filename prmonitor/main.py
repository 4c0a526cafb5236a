"""prmonitor entry point.

Commands: daemon (default; poll and notify until interrupted), list (one
refresh, print buckets), snooze, unsnooze, snoozed, token, settings, version.
Usage: prmonitor [-c config.yaml] <command> ...
"""

import argparse
import logging
import sys
import threading
from pathlib import Path

from prmonitor import __version__
from prmonitor.adapters.base import PRService
from prmonitor.adapters.github import GitHubService, is_newer_version
from prmonitor.app_state import AppState
from prmonitor.config import POLL_INTERVALS, AppConfig, load_config
from prmonitor.integrations.notifier import LogNotifier
from prmonitor.integrations.secrets import FileSecretStore
from prmonitor.integrations.storage import FileBlobStore
from prmonitor.logging import PRMonitorLogging
from prmonitor.models import SnoozeDuration
from prmonitor.scheduler import PollScheduler
from prmonitor.services.settings_store import AppSettings, SettingsStore
from prmonitor.services.snooze_manager import SnoozeManager
from prmonitor.utils import format_pr_line, relative_time

LOG = logging.getLogger("prmonitor")

SECTION_TITLES = (
    ("needs_review", "Needs my review"),
    ("waiting_for_reviewers", "Waiting for review"),
    ("approved", "Approved"),
    ("changes_requested", "Returned to me"),
    ("my_changes_requested", "Reviewed"),
    ("drafts", "Drafts"),
)

# How often the daemon re-reads settings changed from the CLI
SETTINGS_CHECK_SECONDS = 5

DURATION_CHOICES = {
    "1d": SnoozeDuration.ONE_DAY,
    "1w": SnoozeDuration.ONE_WEEK,
    "1m": SnoozeDuration.ONE_MONTH,
}


def _on_off(value: str) -> bool:
    if value not in ("on", "off"):
        raise argparse.ArgumentTypeError("expected on or off")
    return value == "on"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments; no command means daemon."""
    parser = argparse.ArgumentParser(
        prog="prmonitor",
        description="prmonitor - watch your GitHub pull requests",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("daemon", help="Poll and notify until interrupted")
    sub.add_parser("list", help="Refresh once and print PRs (snoozed PRs hidden)")

    snooze = sub.add_parser("snooze", help="Hide a PR for a while")
    snooze.add_argument("ref", help="PR id, URL or owner/repo#number")
    snooze.add_argument("--duration", "-d", choices=sorted(DURATION_CHOICES), default="1d")

    unsnooze = sub.add_parser("unsnooze", help="Show a snoozed PR again")
    unsnooze.add_argument("pr_id", help="Snoozed PR id (see 'prmonitor snoozed')")

    sub.add_parser("snoozed", help="List snoozed PRs")

    token = sub.add_parser("token", help="Save or delete the GitHub token")
    token_sub = token.add_subparsers(dest="token_command", required=True)
    token_set = token_sub.add_parser("set", help="Save a token")
    token_set.add_argument("value", help="Personal access token")
    token_sub.add_parser("delete", help="Delete the saved token")

    settings = sub.add_parser("settings", help="Show or change settings")
    settings.add_argument("--interval", type=int, choices=POLL_INTERVALS, help="Poll interval in seconds")
    settings.add_argument("--notifications", type=_on_off, metavar="on|off")
    settings.add_argument("--launch-at-login", type=_on_off, metavar="on|off")

    version = sub.add_parser("version", help="Print version")
    version.add_argument("--check-update", action="store_true", help="Check for a newer release")

    parsed = parser.parse_args(argv)
    if parsed.command is None:
        parsed.command = "daemon"
    return parsed


def build_app(config: AppConfig) -> AppState:
    """Wire GitHub service, stores and notifier from config."""
    data_dir = config.storage.data_path
    blobs = FileBlobStore(data_dir)
    service = GitHubService(
        graphql_url=config.github.graphql_url,
        api_url=config.github.api_url,
        release_repo=config.github.release_repo,
        timeout=config.github.timeout,
    )
    defaults = AppSettings(
        poll_interval=config.polling.interval_seconds,
        notifications_enabled=config.notifications.enabled,
    )
    return AppState(
        service=service,
        secrets=FileSecretStore(data_dir, override=config.github_token_resolved),
        notifier=LogNotifier(),
        snoozes=SnoozeManager(blobs),
        settings=SettingsStore(blobs, defaults=defaults),
    )


def apply_settings_changes(app: AppState, scheduler: PollScheduler) -> None:
    """Pick up settings saved by 'prmonitor settings' in another process.

    The notifications toggle is read from app.settings on every refresh, so
    reloading is enough; a new poll interval restarts the timer.
    """
    settings = app.settings.reload()
    if settings.poll_interval != scheduler.interval_seconds:
        LOG.info("Poll interval changed: %ss -> %ss", scheduler.interval_seconds, settings.poll_interval)
        scheduler.reschedule(settings.poll_interval)


def run_daemon(
    app: AppState,
    stop: threading.Event | None = None,
    settings_check_seconds: float = SETTINGS_CHECK_SECONDS,
) -> None:
    """Refresh now, then every poll interval until stop is set or Ctrl-C."""
    stop = stop or threading.Event()
    scheduler = PollScheduler(app.refresh, app.settings.settings.poll_interval)
    LOG.info("prmonitor %s started | interval=%ss", __version__, scheduler.interval_seconds)
    app.refresh()
    scheduler.start()
    try:
        while not stop.wait(settings_check_seconds):
            apply_settings_changes(app, scheduler)
    finally:
        scheduler.stop()


def print_results(app: AppState) -> None:
    results = app.visible_results()
    for name, title in SECTION_TITLES:
        prs = getattr(results, name)
        print(f"{title} ({len(prs)})")
        for pr in prs:
            print(f"  {format_pr_line(pr)}")
    if app.last_updated is not None:
        print(f"Updated {relative_time(app.last_updated)}")


def cmd_list(app: AppState) -> int:
    app.refresh()
    if app.error:
        print(app.error, file=sys.stderr)
        return 1
    print_results(app)
    return 0


def cmd_snooze(app: AppState, ref: str, duration: str) -> int:
    app.refresh()
    if app.error:
        print(app.error, file=sys.stderr)
        return 1
    pr = app.find_pr(ref)
    if pr is None:
        print(f"No open PR matches {ref}", file=sys.stderr)
        return 1
    entry = app.snoozes.snooze(pr, DURATION_CHOICES[duration])
    print(f"Snoozed {pr.reference} until {entry.expires_at:%Y-%m-%d %H:%M} UTC")
    return 0


def cmd_snoozed(app: AppState) -> int:
    app.snoozes.clean_expired()
    entries = app.snoozes.sorted_entries
    if not entries:
        print("No snoozed PRs")
    for e in entries:
        print(f"{e.pr_id}  {e.pr_repository} #{e.pr_number} {e.pr_title} (until {e.expires_at:%Y-%m-%d %H:%M} UTC)")
    return 0


def cmd_settings(app: AppState, args: argparse.Namespace) -> int:
    current = app.settings.update(
        poll_interval=args.interval,
        notifications_enabled=args.notifications,
        launch_at_login=args.launch_at_login,
    )
    print(f"poll_interval: {current.poll_interval}")
    print(f"notifications: {'on' if current.notifications_enabled else 'off'}")
    print(f"launch_at_login: {'on' if current.launch_at_login else 'off'}")
    return 0


def cmd_version(service: PRService, check: bool) -> int:
    print(f"prmonitor {__version__}")
    if check:
        latest = service.fetch_latest_release()
        if is_newer_version(__version__, latest):
            print(f"Update available: {latest}")
        else:
            print("Up to date")
    return 0


def dispatch(args: argparse.Namespace, config: AppConfig) -> int:
    app = build_app(config)
    command = args.command
    if command == "daemon":
        run_daemon(app)
        return 0
    if command == "list":
        return cmd_list(app)
    if command == "snooze":
        return cmd_snooze(app, args.ref, args.duration)
    if command == "unsnooze":
        app.snoozes.unsnooze(args.pr_id)
        return 0
    if command == "snoozed":
        return cmd_snoozed(app)
    if command == "token":
        secrets = FileSecretStore(config.storage.data_path)
        if args.token_command == "set":
            secrets.set_secret(args.value)
        else:
            secrets.delete_secret()
        return 0
    if command == "settings":
        return cmd_settings(app, args)
    if command == "version":
        return cmd_version(app.service, args.check_update)
    raise ValueError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    """Entry point for prmonitor."""
    args = parse_args(argv)
    config = load_config(args.config)

    if args.check:
        print("Config OK:", config.github.graphql_url, f"interval={config.polling.interval_seconds}s")
        return 0

    PRMonitorLogging(config.logging).setup()
    try:
        return dispatch(args, config)
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        LOG.exception("Fatal error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
