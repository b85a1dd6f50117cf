#!/usr/bin/env python3
"""
pnpm-lockgen - Regenerate a project's pnpm-lock.yaml.

Usage:
    lockgen.py                              # Regenerate lock file in current directory
    lockgen.py path/to/project              # Regenerate in another directory
    lockgen.py --upgrade pnpm@8.6.0         # Run with a specific pnpm version
    lockgen.py --lock-file-maintenance      # Discard and fully regenerate the lock file
    lockgen.py --dedupe --json              # Dedupe afterwards, print result as JSON

Exit codes: 0 success, 1 pnpm failure, 2 usage/config error,
75 temporary infrastructure error (safe to retry).
"""

import argparse
import functools
import json
import os
import sys

from pnpm_lockgen.config import load_settings, validate_settings
from pnpm_lockgen.errors import TemporaryError
from pnpm_lockgen.executor import exec_commands
from pnpm_lockgen.logging_config import setup_logging
from pnpm_lockgen.models import PNPM_DEDUPE, GlobalPolicy, PostUpdateConfig, Upgrade
from pnpm_lockgen.pnpm import generate_lock_file

EXIT_TEMPFAIL = 75


def parse_upgrade(value: str) -> Upgrade:
    """Parse NAME@VERSION (scoped names like @scope/pkg@1.0 supported)."""
    name, sep, version = value.rpartition("@")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME@VERSION, got {value!r}")
    if not version:
        raise argparse.ArgumentTypeError(f"missing version in {value!r}")
    return Upgrade(dep_name=name, new_version=version)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Regenerate pnpm-lock.yaml by running pnpm under controlled conditions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing package.json and pnpm-lock.yaml",
    )
    parser.add_argument("--config", help="Path to a configuration file")
    parser.add_argument(
        "--upgrade",
        action="append",
        type=parse_upgrade,
        default=[],
        metavar="NAME@VERSION",
        help="Requested upgrade (repeatable)",
    )
    parser.add_argument(
        "--lock-file-maintenance",
        action="store_true",
        help="Delete the existing lock file before regenerating",
    )
    parser.add_argument("--dedupe", action="store_true", help="Run pnpm dedupe after install")
    parser.add_argument("--ignore-scripts", action="store_true", help="Never run lifecycle scripts")
    parser.add_argument("--allow-scripts", action="store_true", help="Allow lifecycle scripts")
    parser.add_argument("--timeout", type=int, help="Per-command timeout in seconds")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--log-file", help="Write a debug log to this file")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors")
    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(verbose=args.verbose, quiet=args.quiet, log_file=args.log_file)

    lock_file_dir = os.path.abspath(args.directory)
    if not os.path.isdir(lock_file_dir):
        logger.error(f"Not a directory: {lock_file_dir}")
        return 2

    try:
        settings = load_settings(args.config, project_dir=lock_file_dir).with_env_overrides()
    except ValueError as e:
        logger.error(str(e))
        return 2
    for warning in validate_settings(settings):
        logger.warning(warning)

    options = set(settings.post_update.post_update_options)
    if args.dedupe:
        options.add(PNPM_DEDUPE)
    config = PostUpdateConfig(
        constraints=settings.post_update.constraints,
        post_update_options=frozenset(options),
        ignore_scripts=settings.post_update.ignore_scripts or args.ignore_scripts,
    )
    policy = GlobalPolicy(
        allow_scripts=settings.policy.allow_scripts or args.allow_scripts,
        expose_all_env=settings.policy.expose_all_env,
    )

    upgrades = list(args.upgrade)
    if args.lock_file_maintenance:
        upgrades.append(Upgrade(is_lock_file_maintenance=True))

    timeout = args.timeout or settings.timeout_seconds
    exec_fn = functools.partial(exec_commands, timeout=timeout)

    try:
        result = generate_lock_file(
            lock_file_dir,
            dict(os.environ),
            config,
            upgrades,
            policy=policy,
            exec_fn=exec_fn,
        )
    except TemporaryError as e:
        logger.error(f"Temporary failure, retry later: {e.reason or e.message}")
        return EXIT_TEMPFAIL

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        logger.error("pnpm failed to regenerate the lock file")
        if result.stderr:
            print(result.stderr, file=sys.stderr)
    elif result.lock_file is None:
        logger.warning("pnpm succeeded but no lock file was produced")
    else:
        logger.info(f"Regenerated {os.path.join(lock_file_dir, 'pnpm-lock.yaml')}")

    return 1 if result.error else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
