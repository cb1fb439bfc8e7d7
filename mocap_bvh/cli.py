"""
Command-line interface for the BVH parser.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from mocap_bvh import __version__
from mocap_bvh.config import LOG_LEVELS, ParserConfig
from mocap_bvh.core.errors import ParseResult
from mocap_bvh.core.types import Joint, Skeleton
from mocap_bvh.loader import load_bvh_files, parse_bvh_file

console = Console()

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_USAGE = 2

_log_handler: Optional[logging.Handler] = None


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the command line tool."""
    global _log_handler

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )

    # stderr, so the report on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    if _log_handler is not None:
        root_logger.removeHandler(_log_handler)
    root_logger.addHandler(console_handler)
    _log_handler = console_handler

    logging.getLogger("mocap_bvh").setLevel(level.upper())


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="mocap-bvh",
        description="Parse BVH motion capture files and report their structure",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Summary of one file
  mocap-bvh walk.bvh

  # Show the joint hierarchy
  mocap-bvh walk.bvh --tree

  # Write a JSON summary
  mocap-bvh walk.bvh --json walk.json

  # Check every .bvh file in a directory
  mocap-bvh data/bvh/
        """,
    )

    parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        help="BVH file, or directory of BVH files",
    )

    parser.add_argument(
        "--config",
        type=Path,
        help="Configuration file (YAML)",
    )

    parser.add_argument(
        "--tree",
        action="store_true",
        help="Print the joint hierarchy",
    )

    parser.add_argument(
        "--json",
        type=Path,
        metavar="PATH",
        help="Write a JSON summary of the skeleton",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Treat data after the last motion frame as an error",
    )

    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: from config, INFO)",
    )

    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_tree(joint: Joint, tree: Optional[Tree] = None) -> Tree:
    """Build a rich Tree mirroring the joint hierarchy."""
    if joint.num_channels:
        order = joint.get_rotation_order() or "-"
        label = f"[bold]{escape(joint.name)}[/bold] [dim]{order} ({joint.num_channels} ch)[/dim]"
    else:
        label = f"[dim]{escape(joint.name)}[/dim]"

    node = tree.add(label) if tree is not None else Tree(label)
    for child in joint.children:
        build_tree(child, node)
    return node


def summary_table(path: Path, skeleton: Skeleton) -> Table:
    table = Table(title=escape(str(path)), show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Joints", str(skeleton.num_joints))
    table.add_row("End sites", str(sum(j.is_end_site for j in skeleton.joints)))
    table.add_row("Channels", str(skeleton.num_channels))
    table.add_row("Frames", str(skeleton.frame_count))
    table.add_row("Frame time", f"{skeleton.frame_time:g} s")
    table.add_row("FPS", f"{skeleton.fps:.2f}")
    table.add_row("Duration", f"{skeleton.duration:.2f} s")
    return table


def print_error(path: Path, result: ParseResult) -> None:
    error = result.error
    console.print(f"[red]✗ Failed to parse[/red] {escape(str(path))}")
    console.print(f"  [red]{error.kind.value}[/red]: {escape(error.message)}")
    if error.context:
        console.print(f"  while parsing {escape(error.context)}")
    if error.line is not None:
        console.print(f"  at line {error.line}")


def run_directory(directory: Path, config: ParserConfig) -> int:
    results = load_bvh_files(directory, config)
    if not results:
        console.print(
            f"[yellow]No files matching {config.file_pattern} in {escape(str(directory))}[/yellow]"
        )
        return EXIT_OK

    table = Table(title=escape(str(directory)))
    table.add_column("File")
    table.add_column("Status")
    table.add_column("Joints", justify="right")
    table.add_column("Frames", justify="right")
    table.add_column("Error")

    for path, result in results.items():
        if result.ok:
            skeleton = result.skeleton
            table.add_row(
                path.name,
                "[green]ok[/green]",
                str(skeleton.num_joints),
                str(skeleton.frame_count),
                "",
            )
        else:
            table.add_row(path.name, "[red]failed[/red]", "-", "-", escape(str(result.error)))

    console.print(table)

    failed = sum(not r.ok for r in results.values())
    console.print(f"\n{len(results) - failed}/{len(results)} files parsed")
    return EXIT_PARSE_ERROR if failed else EXIT_OK


def run_file(path: Path, config: ParserConfig, args: argparse.Namespace) -> int:
    if path.suffix.lower() != ".bvh":
        console.print(
            f"[yellow]Warning:[/yellow] {escape(str(path))} does not have a .bvh extension"
        )

    result = parse_bvh_file(path, config)
    if not result.ok:
        print_error(path, result)
        return EXIT_PARSE_ERROR

    skeleton = result.skeleton
    console.print(summary_table(path, skeleton))

    if args.tree and skeleton.root is not None:
        console.print(build_tree(skeleton.root))

    if args.json:
        with open(args.json, "w") as f:
            json.dump(skeleton.to_dict(), f, indent=2)
        console.print(f"[green]✓[/green] Exported JSON: {escape(str(args.json))}")

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)

    if args.version:
        console.print(f"mocap-bvh version {__version__}")
        return EXIT_OK

    if args.path is None:
        console.print("[red]Error:[/red] a BVH file or directory is required")
        return EXIT_USAGE

    # Load configuration
    if args.config:
        try:
            config = ParserConfig.from_yaml(args.config)
        except (OSError, TypeError, yaml.YAMLError) as e:
            console.print(f"[red]Error loading configuration:[/red] {escape(str(e))}")
            return EXIT_USAGE
    else:
        config = ParserConfig()

    if args.strict:
        config.trailing_data = "error"
    if args.log_level:
        config.log_level = args.log_level

    issues = config.validate()
    if issues:
        console.print("[red]Invalid configuration:[/red]")
        for issue in issues:
            console.print(f"  - {escape(issue)}")
        return EXIT_USAGE

    setup_logging(config.log_level)

    if args.path.is_dir():
        return run_directory(args.path, config)
    return run_file(args.path, config, args)


if __name__ == "__main__":
    sys.exit(main())
