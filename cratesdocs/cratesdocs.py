#!/usr/bin/env python3
"""
cratesdocs CLI tool

Usage:
    cratesdocs build <name> [version]
    cratesdocs build-world
    cratesdocs add <name> <version>
    cratesdocs cargo-version

Example:
    cratesdocs build rand 0.3
    cratesdocs add rand 0.3.14

This tool:
- build: Builds documentation for a crate version from the mirrored index and records it
- build-world: Builds and records every version of every crate in the index
- add: Records a crate version's metadata without building it
"""
import argparse
import os
import sys


def setup_django():
    """Configure Django before anything touches the models."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'cratesdocs.settings')
    import django
    django.setup()


def get_builder():
    from crates.builder import DocBuilder
    return DocBuilder()


def cmd_build(args):
    """Build docs for one crate version and record its metadata."""
    from crates.errors import CratesDocsError

    builder = get_builder()
    print(f"Building {args.name} {args.version or '(latest)'}")
    try:
        release = builder.build_and_record(args.name, args.version)
    except CratesDocsError as e:
        print(f"Error: {e}")
        return 1

    status = {1: 'succeeded', -1: 'failed', 0: 'not tried'}.get(release.build_status, 'unknown')
    print(f"✓ {release} recorded, documentation build {status}")
    return 0 if release.build_status == 1 else 1


def cmd_build_world(args):
    """Build docs for everything in the index."""
    from crates.errors import CratesDocsError

    builder = get_builder()
    try:
        counts = builder.build_world()
    except CratesDocsError as e:
        print(f"Error: {e}")
        return 1

    print(f"{'='*60}")
    print(f"Built: {counts['built']}  Failed: {counts['failed']}  Errors: {counts['errors']}")
    return 0


def cmd_add(args):
    """Record metadata of a crate version without building it."""
    from crates.errors import CratesDocsError

    builder = get_builder()
    try:
        release = builder.add_package(args.name, args.version)
    except CratesDocsError as e:
        print(f"Error: {e}")
        return 1

    print(f"✓ {release} recorded")
    return 0


def cmd_cargo_version(args):
    """Show which cargo will be used for builds."""
    from crates.cargo_wrapper import get_cargo_executable, get_cargo_version

    version = get_cargo_version()
    if version is None:
        print(f"Error: cargo not available ({get_cargo_executable()})")
        return 1
    print(version)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        description='cratesdocs - build and record documentation for crates in a mirrored index'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    build_cmd = subparsers.add_parser('build', help='Build documentation for a crate version')
    build_cmd.add_argument('name', help='Crate name (e.g., rand)')
    build_cmd.add_argument(
        'version',
        nargs='?',
        default=None,
        help='Version or version prefix (default: latest)'
    )

    subparsers.add_parser('build-world', help='Build every crate in the index')

    add_cmd = subparsers.add_parser('add', help='Record a crate version without building it')
    add_cmd.add_argument('name', help='Crate name (e.g., rand)')
    add_cmd.add_argument('version', help='Version or version prefix')

    subparsers.add_parser('cargo-version', help='Show the cargo used for builds')

    return parser


COMMANDS = {
    'build': cmd_build,
    'build-world': cmd_build_world,
    'add': cmd_add,
    'cargo-version': cmd_cargo_version,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    handler = COMMANDS.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    setup_django()
    return handler(args)


if __name__ == '__main__':
    sys.exit(main())
