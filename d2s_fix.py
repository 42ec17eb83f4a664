"""Drag-and-drop unlocker for D2R character saves.

Drop a ``.d2s`` file on the script (or pass it as the first argument). The
save is backed up next to the original, patched with the selected profile
and written back with a fresh checksum.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import d2s
import d2s_settings as settings_module
import localization
import savefile_io
from policies import POLICIES, get_policy

EXIT_OK = 0
EXIT_INVALID_SAVE = 1
EXIT_USAGE = 2
EXIT_WRITE_FAILED = 3


def build_parser(defaults: dict) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="d2s-fix",
        description="Unlock difficulties, quests and waypoints in a D2R save file.",
    )
    parser.add_argument("save", nargs="?", help="character save (*.d2s)")
    parser.add_argument(
        "--profile",
        choices=sorted(POLICIES),
        default=defaults["profile"] if defaults["profile"] in POLICIES else "minimal",
        help="unlock profile to apply (default: %(default)s)",
    )
    parser.add_argument(
        "--complete-act2",
        action="store_true",
        help="also complete the last Act II quest on every difficulty",
    )
    parser.add_argument(
        "--no-backup",
        dest="make_backup",
        action="store_false",
        default=defaults["make_backup"],
        help="do not write a timestamped .bak copy first",
    )
    parser.add_argument(
        "--no-pause",
        dest="pause",
        action="store_false",
        default=defaults["pause_on_exit"],
        help="exit without waiting for Enter",
    )
    parser.add_argument("--language", default=defaults["language"], help="message language (en, zh)")
    parser.add_argument("-v", "--verbose", action="store_true", help="verbose logging")
    return parser


def _wait_for_acknowledgement(language: str, pause: bool) -> None:
    if not pause:
        return
    try:
        input(localization.translate(language, "press_to_close"))
    except EOFError:
        pass


def main(argv: Optional[List[str]] = None) -> int:
    defaults = settings_module.load_settings()
    args = build_parser(defaults).parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    language = args.language

    if not args.save:
        print(localization.translate(language, "usage"))
        _wait_for_acknowledgement(language, args.pause)
        return EXIT_USAGE

    path = Path(args.save)
    policy = get_policy(args.profile, complete_act2=args.complete_act2)
    try:
        outcome = savefile_io.patch_file(path, policy, make_backup=args.make_backup)
    except FileNotFoundError:
        print(localization.translate(language, "file_not_found", path=path))
        print(localization.translate(language, "usage"))
        _wait_for_acknowledgement(language, args.pause)
        return EXIT_USAGE
    except d2s.UnrecognizedFormatError:
        print(localization.translate(language, "invalid_save", name=path.name))
        _wait_for_acknowledgement(language, args.pause)
        return EXIT_INVALID_SAVE
    except OSError as exc:
        print(localization.translate(language, "write_failed", error=exc))
        _wait_for_acknowledgement(language, args.pause)
        return EXIT_WRITE_FAILED

    if outcome.backup_path is not None:
        print(localization.translate(language, "backup_written", path=outcome.backup_path))
    print(localization.translate(language, "success", profile=outcome.policy, name=path.name))
    _wait_for_acknowledgement(language, args.pause)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
