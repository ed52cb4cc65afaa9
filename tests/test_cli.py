"""
Tests for the packsync-client command line
"""

import json
import os
import time
from types import SimpleNamespace

import keyring

from packsync import cli
from packsync.managers import ConfigManager, DEFAULT_CLIENT_CONFIG


def load_config(tmp_path, **values):
    config_file = tmp_path / "packsync-client.json"
    config_file.write_text(json.dumps(values), encoding="utf-8")
    config_mgr = ConfigManager(config_file, DEFAULT_CLIENT_CONFIG)
    config_mgr.load_config()
    return config_mgr


def test_parser_collects_repeated_excludes():
    args = cli.build_parser().parse_args(["--server", "http://pack.test", "--exclude", "jei", "--exclude", "jade"])

    assert args.server == "http://pack.test"
    assert args.exclude == ["jei", "jade"]
    assert args.set_password is False


def test_run_sync_without_server_fails(tmp_path):
    config_mgr = load_config(tmp_path, output_dir=str(tmp_path / "mods"))
    args = cli.build_parser().parse_args([])

    assert cli.run_sync(config_mgr, args) == cli.EXIT_FAILURE


def test_run_sync_with_bad_security_settings_is_config_error(tmp_path):
    config_mgr = load_config(tmp_path, remote_server="http://pack.test", security={"type": "telepathy"})
    args = cli.build_parser().parse_args([])

    assert cli.run_sync(config_mgr, args) == cli.EXIT_CONFIG_ERROR


def test_set_password_stores_in_credential_store(tmp_path, monkeypatch):
    stored = {}
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt: "hunter2")
    monkeypatch.setattr(keyring, "set_password", lambda service, account, password: stored.update(
        {(service, account): password}
    ))

    exit_code = cli.main(["--config", str(tmp_path / "packsync-client.json"), "--set-password"])

    assert exit_code == cli.EXIT_SUCCESS
    assert stored == {("PackSync", "modpack"): "hunter2"}


def test_invalid_config_file_exits_with_config_error(tmp_path):
    config_file = tmp_path / "packsync-client.json"
    config_file.write_text("[", encoding="utf-8")

    assert cli.main(["--config", str(config_file)]) == cli.EXIT_CONFIG_ERROR


def test_cleanup_old_logs_keeps_recent_and_current(tmp_path):
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    current = log_dir / "packsync-current.log"
    recent = log_dir / "packsync-recent.log"
    old = log_dir / "packsync-old.log"
    unrelated = log_dir / "other.log"
    for path in (current, recent, old, unrelated):
        path.write_text("log", encoding="utf-8")
    forty_days_ago = time.time() - 40 * 86400
    for path in (current, old, unrelated):
        os.utime(path, (forty_days_ago, forty_days_ago))

    config_mgr = SimpleNamespace(get=lambda key, default=None: 30)
    cli.cleanup_old_logs(config_mgr, current)

    assert current.exists()
    assert recent.exists()
    assert unrelated.exists()
    assert not old.exists()
