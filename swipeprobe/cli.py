#!/usr/bin/env python3
"""swipeprobe CLI - seed, launch and watch swipe configuration state."""

import argparse
import json
import sys

from . import launch_config
from .config import load_config, write_default_config
from .debug_state import parse_debug_state
from .errors import HarnessError, SeedPayloadError
from .seeding import HAPTIC_STYLES, PRESETS, SeededConfiguration, decode_seed, preset
from .session import SWIPE_ID_PREFIXES, SwipeSession
from .simulator import Simulator


def _csv(value: str) -> list:
    return [v for v in value.split(",") if v] if value else []


def _add_seed_args(parser):
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Use a predefined seed")
    parser.add_argument("--leading", type=_csv, help="Comma-separated leading actions, in order")
    parser.add_argument("--trailing", type=_csv, help="Comma-separated trailing actions, in order")
    parser.add_argument("--full-leading", action=argparse.BooleanOptionalAction, default=True,
                        help="Allow full swipe on the leading edge")
    parser.add_argument("--full-trailing", action=argparse.BooleanOptionalAction, default=False,
                        help="Allow full swipe on the trailing edge")
    parser.add_argument("--haptics", action=argparse.BooleanOptionalAction, default=True,
                        help="Enable haptic feedback")
    parser.add_argument("--haptic-style", default="medium", choices=HAPTIC_STYLES, help="Haptic intensity")


def _seed_from_args(args):
    if getattr(args, "preset", None):
        return preset(args.preset)
    if args.leading is None and args.trailing is None:
        return None
    return SeededConfiguration(
        leading=args.leading or [],
        trailing=args.trailing or [],
        allow_full_swipe_leading=args.full_leading,
        allow_full_swipe_trailing=args.full_trailing,
        haptics_enabled=args.haptics,
        haptic_style=args.haptic_style,
    )


def _print_state(state):
    print(f"  Leading:   {', '.join(state.leading) or '—'}")
    print(f"  Trailing:  {', '.join(state.trailing) or '—'}")
    print(f"  Full:      leading={state.full_leading} trailing={state.full_trailing}")
    print(f"  Haptics:   {state.haptics_enabled}")
    print(f"  Unsaved:   {state.unsaved}")
    print(f"  Baseline:  {state.baseline_loaded}")


def _open_simulator(cfg: dict, verbose: bool) -> Simulator:
    simulator = Simulator(cfg["app"]["bundle_id"], udid=cfg["device"]["udid"], verbose=verbose)
    if not simulator.udid:
        device = cfg["device"]
        simulator.find_or_create_device(f"SwipeProbe-{device['name']}", device["type"], cfg["runtime"])
    simulator.boot()
    if cfg["app"].get("app_path"):
        simulator.install(cfg["app"]["app_path"])
    return simulator


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="swipeprobe",
        description="Seed and observe swipe configuration state in a running iOS app",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Write a starter swipeprobe.yaml")
    init_parser.add_argument("--output", "-o", default="swipeprobe.yaml", help="Config output path")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")

    # seed
    seed_parser = subparsers.add_parser("seed", help="Print a base64 seed payload")
    _add_seed_args(seed_parser)

    # decode
    decode_parser = subparsers.add_parser("decode", help="Decode a base64 seed payload to JSON")
    decode_parser.add_argument("payload", help="Base64 payload")

    # parse-state
    parse_parser = subparsers.add_parser("parse-state", help="Parse a raw debug state string")
    parse_parser.add_argument("raw", help="e.g. 'Leading=play;Trailing=delete;Full=1/0;Haptics=1;Unsaved=0;Baseline=1'")
    parse_parser.add_argument("--json", action="store_true", help="Print as JSON")

    # env
    env_parser = subparsers.add_parser("env", help="Print the launch environment for a profile")
    env_parser.add_argument("--profile", default="swipe-configuration", choices=sorted(launch_config.PROFILES))
    _add_seed_args(env_parser)

    # launch
    launch_parser = subparsers.add_parser("launch", help="Launch the app on the simulator, optionally seeded")
    launch_parser.add_argument("--config", "-c", help="Config file path (default: ./swipeprobe.yaml)")
    launch_parser.add_argument("--reset", action="store_true", help="Reset swipe settings on launch")
    launch_parser.add_argument("--wait", action="store_true", help="Wait until the seed shows up in the debug state")
    launch_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    _add_seed_args(launch_parser)

    # wait-state
    wait_parser = subparsers.add_parser("wait-state", help="Poll the live debug state until it matches")
    wait_parser.add_argument("--config", "-c", help="Config file path (default: ./swipeprobe.yaml)")
    wait_parser.add_argument("--leading", type=_csv, help="Expected leading actions")
    wait_parser.add_argument("--trailing", type=_csv, help="Expected trailing actions")
    wait_parser.add_argument("--unsaved", action=argparse.BooleanOptionalAction, default=None,
                             help="Expected unsaved flag")
    wait_parser.add_argument("--timeout", "-t", type=float, default=None, help="Seconds to wait")
    wait_parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # identifiers
    ids_parser = subparsers.add_parser("identifiers", help="List swipe accessibility identifiers on screen")
    ids_parser.add_argument("--config", "-c", help="Config file path (default: ./swipeprobe.yaml)")
    ids_parser.add_argument("--all", action="store_true", help="List every identifier, not just swipe ones")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "init":
            path = write_default_config(args.output, force=args.force)
            print(f"✅ Wrote {path}")

        elif args.command == "seed":
            seed = _seed_from_args(args)
            if seed is None:
                print("❌ Pass --preset or --leading/--trailing", file=sys.stderr)
                return 1
            print(seed.encode())

        elif args.command == "decode":
            print(json.dumps(decode_seed(args.payload).to_payload(), indent=2))

        elif args.command == "parse-state":
            state = parse_debug_state(args.raw)
            if args.json:
                print(json.dumps({
                    "leading": list(state.leading),
                    "trailing": list(state.trailing),
                    "fullLeading": state.full_leading,
                    "fullTrailing": state.full_trailing,
                    "hapticsEnabled": state.haptics_enabled,
                    "unsaved": state.unsaved,
                    "baselineLoaded": state.baseline_loaded,
                }, indent=2))
            else:
                _print_state(state)

        elif args.command == "env":
            seed = _seed_from_args(args)
            if args.profile == "swipe-configuration":
                env = launch_config.swipe_configuration(
                    reset=seed is not None,
                    seeded_configuration=seed.encode() if seed else None,
                )
            else:
                env = launch_config.profile_environment(args.profile)
            for key in sorted(env):
                print(f"{key}={env[key]}")

        elif args.command == "launch":
            cfg = load_config(args.config)
            verbose = args.verbose or cfg["verbose"]
            print("📱 swipeprobe — launching app under test")
            print("=" * 45)
            simulator = _open_simulator(cfg, verbose)
            session = SwipeSession(simulator, config=cfg, verbose=verbose)
            seed = _seed_from_args(args)
            if seed is not None:
                session.launch_with_seed(seed)
            else:
                session.launch(reset=args.reset)
            print(f"  ✅ Launched {cfg['app']['bundle_id']} on {simulator.udid}")
            if args.wait and seed is not None:
                state = session.complete_seed_if_needed()
                print("  ✅ Seeded configuration is live")
                _print_state(state)

        elif args.command == "wait-state":
            cfg = load_config(args.config)
            verbose = args.verbose or cfg["verbose"]
            simulator = Simulator(cfg["app"]["bundle_id"], udid=cfg["device"]["udid"], verbose=verbose)
            session = SwipeSession(simulator, config=cfg, verbose=verbose)
            expected_leading = tuple(args.leading) if args.leading is not None else None
            expected_trailing = tuple(args.trailing) if args.trailing is not None else None

            def matches(state):
                if expected_leading is not None and state.leading != expected_leading:
                    return False
                if expected_trailing is not None and state.trailing != expected_trailing:
                    return False
                return args.unsaved is None or state.unsaved == args.unsaved

            state = session.wait_for_debug_state(matches, timeout=args.timeout)
            print("✅ Debug state matched")
            _print_state(state)

        elif args.command == "identifiers":
            cfg = load_config(args.config)
            simulator = Simulator(cfg["app"]["bundle_id"], udid=cfg["device"]["udid"])
            for identifier in simulator.identifiers(() if args.all else SWIPE_ID_PREFIXES):
                print(identifier)

    except SeedPayloadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    except (HarnessError, FileNotFoundError, FileExistsError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
