# SPDX-License-Identifier: MIT
"""Command-line interface for makemake."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from makemake.configure.config import Settings, load_settings
from makemake.core.aggregator import GrammarScanner, ProjectAggregator
from makemake.core.errors import MakemakeError
from makemake.core.project import AggregateIndex
from makemake.generators.makefile import MakefileGenerator
from makemake.generators.mermaid import MermaidGenerator

# Set up logging
logger = logging.getLogger("makemake")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt, force=True)


def resolve_settings(args: argparse.Namespace) -> Settings:
    """Load settings and apply command line overrides."""
    settings = load_settings(getattr(args, "config", None))
    overrides = {
        "root": getattr(args, "root", None),
        "output": getattr(args, "output", None),
        "discover": getattr(args, "discover", None),
    }
    if getattr(args, "allow_duplicates", False):
        overrides["on_duplicate"] = "overwrite"
    return settings.update(overrides, "command line")


def collect(settings: Settings) -> AggregateIndex:
    """Discover and aggregate the grammar projects described by settings."""
    root = Path(settings.root)
    if not root.is_dir():
        raise MakemakeError("grammar root is not a directory", root)

    if settings.discover == "grammar":
        return GrammarScanner(
            root,
            ignore_paths=settings.ignore_paths,
            descriptor_name=settings.descriptor_name,
            listener=settings.listener,
            visitor=settings.visitor,
        ).scan()

    return ProjectAggregator(
        root,
        ignore=settings.ignore,
        descriptor_name=settings.descriptor_name,
        on_duplicate=settings.on_duplicate,  # type: ignore[arg-type]
        inspect_grammars=settings.inspect_grammars,
        listener=settings.listener,
        visitor=settings.visitor,
    ).aggregate()


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the Makefile.

    This command:
    1. Walks the grammar root for project descriptors
    2. Aggregates and checks every project
    3. Writes the Makefile (or prints it with --stdout)
    """
    settings = resolve_settings(args)
    index = collect(settings)
    generator = MakefileGenerator(settings.makefile_options())

    if getattr(args, "stdout", False):
        sys.stdout.write(generator.render(index))
        return 0

    output = generator.generate(index, Path(settings.output))
    logger.info("Wrote %s with %d grammar projects", output, len(index))
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """List every discovered project with its grammars and generated files."""
    settings = resolve_settings(args)
    index = collect(settings)

    for name in index.names():
        project = index.projects[name]
        print(f"{name} ({project.descriptor.as_posix()})")
        for grammar in project.grammars:
            print(f"  {grammar.kind:<8} {grammar.path.as_posix()}")
        for generated in index.generated_files[name]:
            print(f"  -> {generated}")
        if project.entry_point:
            print(f"  entry point: {project.entry_point}")

    print(f"{len(index)} grammar projects")
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    """Write a Mermaid diagram of grammar dependencies."""
    settings = resolve_settings(args)
    index = collect(settings)
    generator = MermaidGenerator(show_files=args.files, direction=args.direction)
    output = generator.generate(index, Path(args.graph_output))
    logger.info("Wrote %s", output)
    return 0


def add_common_args(parser: argparse.ArgumentParser, subcommand: bool = False) -> None:
    """Add common arguments to a parser.

    Subcommand copies default to argparse.SUPPRESS, so a flag given
    before the subcommand is not reset by the subcommand's defaults.
    """
    default = {"default": argparse.SUPPRESS} if subcommand else {}
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output", **default
    )
    parser.add_argument("--debug", action="store_true", help="Debug output", **default)
    parser.add_argument(
        "-c",
        "--config",
        help="Config file (default: makemake.toml if present)",
        **default,
    )
    parser.add_argument(
        "-r",
        "--root",
        help="Directory holding the grammars (default: grammars-v4)",
        **default,
    )
    parser.add_argument(
        "--discover",
        choices=["pom", "grammar"],
        help="Find projects from pom.xml descriptors or from .g4 files",
        **default,
    )
    parser.add_argument(
        "--allow-duplicates",
        action="store_true",
        help="Let a later project replace an earlier one with the same name",
        **default,
    )


def add_generate_args(
    parser: argparse.ArgumentParser, subcommand: bool = False
) -> None:
    """Add arguments for the generate command."""
    default = {"default": argparse.SUPPRESS} if subcommand else {}
    parser.add_argument(
        "-o", "--output", help="Makefile to write (default: Makefile)", **default
    )
    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the Makefile instead of writing it",
        **default,
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the makemake CLI."""
    parser = argparse.ArgumentParser(
        prog="makemake",
        description="Generate a Makefile that builds and tests ANTLR grammars with Go.",
        epilog="Run 'makemake <command> --help' for command-specific help.",
    )
    from makemake import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Default command args (for 'makemake' with no subcommand)
    add_common_args(parser)
    add_generate_args(parser)
    parser.set_defaults(func=cmd_generate)

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # makemake generate
    gen_parser = subparsers.add_parser("generate", help="Generate the Makefile")
    add_common_args(gen_parser, subcommand=True)
    add_generate_args(gen_parser, subcommand=True)
    gen_parser.set_defaults(func=cmd_generate)

    # makemake list
    list_parser = subparsers.add_parser(
        "list", help="List grammar projects and their generated files"
    )
    add_common_args(list_parser, subcommand=True)
    list_parser.set_defaults(func=cmd_list)

    # makemake graph
    graph_parser = subparsers.add_parser(
        "graph", help="Write a Mermaid diagram of grammar dependencies"
    )
    add_common_args(graph_parser, subcommand=True)
    graph_parser.add_argument(
        "-o",
        "--output",
        dest="graph_output",
        default="deps.mmd",
        help="Diagram to write (default: deps.mmd)",
    )
    graph_parser.add_argument(
        "--files", action="store_true", help="Show generated files"
    )
    graph_parser.add_argument(
        "--direction", choices=["LR", "TB", "RL", "BT"], default="LR"
    )
    graph_parser.set_defaults(func=cmd_graph)

    args = parser.parse_args(argv)
    setup_logging(args.verbose, args.debug)

    try:
        result: int = args.func(args)
    except MakemakeError as e:
        logger.error("%s", e)
        return 1
    return result


if __name__ == "__main__":
    sys.exit(main())
