#!/usr/bin/env python3
"""Command-line interface for the control-flow structurizer."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from structurizer import (
    DecompileMode,
    MalformedProgramError,
    StructurizerOptions,
    load_listing,
    serialize_node,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("listing", type=Path, help="JSON program listing to structure")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with structurizer options; command-line flags take precedence",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in DecompileMode],
        default=None,
        help="Eliminate every goto (full) or only loop-forming ones (backwards)",
    )
    parser.add_argument(
        "--no-else-derivation",
        action="store_true",
        help="Never merge a forward skip into the preceding if as its else branch",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Write the result to this path instead of stdout",
    )
    parser.add_argument("--json", action="store_true", help="Emit the tree as JSON")
    parser.add_argument(
        "--show-input",
        action="store_true",
        help="Print the tree before goto elimination as well",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def resolve_options(args: argparse.Namespace) -> StructurizerOptions:
    try:
        options = StructurizerOptions.load(args.config)
    except ValueError as exc:
        raise SystemExit(f"invalid options file {args.config}: {exc}")
    mode = DecompileMode(args.mode) if args.mode else options.mode
    disable_else = options.disable_else_derivation or args.no_else_derivation
    return StructurizerOptions(mode=mode, disable_else_derivation=disable_else)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if not args.listing.exists():
        raise SystemExit(f"missing input file: {args.listing}")

    options = resolve_options(args)
    try:
        manager = load_listing(args.listing, options)
        if args.show_input:
            print(manager.print())
        manager.decompile()
    except MalformedProgramError as exc:
        print(f"malformed program: {exc}", file=sys.stderr)
        raise SystemExit(2)

    if args.json:
        output = json.dumps(serialize_node(manager.program), indent=2) + "\n"
    else:
        output = manager.print()
    if args.out is not None:
        args.out.write_text(output, "utf-8")
        print(f"structured program written to {args.out}", file=sys.stderr)
    else:
        sys.stdout.write(output)

    status = "fully structured" if manager.is_fully_decompiled() else "partially structured"
    print(f"{status}; {manager.variables} synthetic variable(s)", file=sys.stderr)


if __name__ == "__main__":
    main()
