"""CLI entry point for the surf monitor tray app."""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from surftray.config.defaults import (
    DEFAULT_LOG_PATH,
    DEFAULT_SETTINGS_PATH,
    DEFAULT_UI_PORT,
)
from surftray.config.store import SettingsStore, get_setting_value, set_setting_value
from surftray.display.mapper import emoji_for_color, label_for_color
from surftray.exceptions import SettingsValidationError
from surftray.models.state import AppState
from surftray.poller import ForecastPoller

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="surftray",
        description="Surf conditions in the system tray",
    )
    parser.add_argument(
        "--settings", default=str(DEFAULT_SETTINGS_PATH), help="Settings YAML path"
    )
    parser.add_argument(
        "--log-file", default=None, help="Also log to this file (run only)"
    )

    sub = parser.add_subparsers(dest="command")

    # run
    run_p = sub.add_parser("run", help="Start the tray icon and poller")
    run_p.add_argument(
        "--ui-port", type=int, default=DEFAULT_UI_PORT,
        help="Local port for the settings window",
    )
    run_p.add_argument(
        "--no-browser", action="store_true",
        help="Print the settings URL instead of opening a browser",
    )

    # fetch
    sub.add_parser("fetch", help="Poll the forecast once and print the status")

    # config show / config set
    config_p = sub.add_parser("config", help="Settings operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current settings")
    set_p = config_sub.add_parser("set", help="Set a setting")
    set_p.add_argument("keyvalue", help="key=value to set")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    store = SettingsStore(args.settings)

    if args.command == "run":
        return _cmd_run(store, args)
    elif args.command == "fetch":
        return _cmd_fetch(store, args)
    elif args.command == "config":
        return _cmd_config(store, args)
    else:
        parser.print_help()
        return 1


def _cmd_run(store: SettingsStore, args) -> int:
    log_path = Path(args.log_file) if args.log_file else DEFAULT_LOG_PATH
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

    # Imported here so `config` and `fetch` work without a desktop session.
    from surftray.app import SurfTrayApp

    app = SurfTrayApp(store, ui_port=args.ui_port, open_browser=not args.no_browser)
    return app.run()


def _cmd_fetch(store: SettingsStore, args) -> int:
    state = AppState()
    poller = ForecastPoller(store, state)
    update = asyncio.run(poller.fetch_once())

    print(f"{emoji_for_color(state.color)} {label_for_color(state.color)}")
    if update is not None:
        print(
            f"  Level: {update.level} | Waves: {update.wave_height} m "
            f"| Period: {update.period} s | Time: {update.time}"
        )
    elif poller.last_error:
        print(f"  Error: {poller.last_error}")
    else:
        print("  No forecast entries returned")
    return 0 if poller.last_error is None else 1


def _cmd_config(store: SettingsStore, args) -> int:
    if args.config_command == "show":
        print(json.dumps(store.read().to_persisted(), indent=2))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            settings = set_setting_value(store, key.strip(), value.strip())
        except KeyError as e:
            print(f"Error: {e.args[0]}")
            return 1
        except SettingsValidationError as e:
            for msg in e.errors:
                print(f"Error: {msg}")
            return 1
        print(f"Set {key.strip()} = {get_setting_value(settings, key.strip())}")
        return 0
    else:
        print("Use: config show | config set key=value")
        return 1
