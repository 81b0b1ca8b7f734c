"""CLI entrypoints for examplegen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .errors import CollaboratorError, ExampleGenError
from .logging import configure_logging
from .models import SampleFailure
from .pipeline import Pipeline
from .validators import ValidationError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_command(
    subparsers: argparse._SubParsersAction, name: str, help_text: str
) -> argparse.ArgumentParser:
    command_parser = subparsers.add_parser(name, help=help_text)
    _add_verbose_option(command_parser, suppress_default=True)
    return command_parser


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="examplegen",
        description="Build, validate and deploy the example site.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Project directory or path to .examplegen.yml (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Also write debug-level log records to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _add_command(subparsers, "build", "Build all resources: assets, sitemap and examples.")
    _add_command(subparsers, "compile", "Generate index.html and the example pages.")
    _add_command(subparsers, "validate", "Validate compiled example pages.")
    _add_command(subparsers, "sitemap", "Generate sitemap.xml.")
    _add_command(subparsers, "clean", "Delete all generated resources.")
    _add_command(
        subparsers, "canonicalize", "Add a canonical link to source samples that lack one."
    )

    snapshot_parser = _add_command(
        subparsers, "snapshot", "Save a snapshot of the compiled examples."
    )
    snapshot_parser.add_argument(
        "--verify",
        action="store_true",
        help="Compare compiled examples against the stored snapshot instead of saving.",
    )

    create_parser = _add_command(subparsers, "create", "Create a new example.")
    create_parser.add_argument("-n", "--name", help="Title of the new example.")
    create_parser.add_argument("-c", "--category", help="Category of the new example.")
    create_parser.add_argument("-d", "--dest", help="Existing category directory to add the example to.")

    robots_parser = _add_command(subparsers, "robots", "Write robots.txt into the output tree.")
    robots_parser.add_argument("policy", choices=("allow", "disallow"))

    deploy_parser = _add_command(subparsers, "deploy", "Clean, build and deploy to a hosting target.")
    deploy_parser.add_argument("target", help="Deploy target name (for example prod or staging).")

    serve_parser = _add_command(subparsers, "serve", "Run the HTTP service.")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for examplegen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    command = args.command
    if command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
        return

    try:
        pipeline = Pipeline.from_path(args.config)
        _dispatch(parser, pipeline, args)
    except ValidationError as exc:
        _print_failures(exc.issues)
        parser.exit(1, f"examplegen {command} failed: {exc}\n")
    except FileExistsError as exc:
        parser.exit(1, f"{exc}\n")
    except ValueError as exc:
        if command != "create":
            raise
        parser.exit(
            1,
            f"Error: {exc}\n\n"
            "create a new category:\n  examplegen create -n \"The Name\" -c \"The Category\"\n\n"
            "add to existing category:\n  examplegen create -n \"The Name\" -d src/directory\n",
        )
    except CollaboratorError as exc:
        parser.exit(1, f"examplegen {command} failed: {exc}\n")
    except ExampleGenError as exc:
        parser.exit(1, f"examplegen {command} failed: {exc}\nRun with --verbose for more details.\n")


def _dispatch(parser: argparse.ArgumentParser, pipeline: Pipeline, args: argparse.Namespace) -> None:
    command = args.command
    if command == "build":
        run = pipeline.run_build()
        _finish(parser, command, run.failures, f"Built {len(run.documents)} document(s)")
    elif command == "compile":
        run = pipeline.run_compile()
        _finish(parser, command, run.failures, f"Compiled {len(run.documents)} document(s)")
    elif command == "validate":
        report = pipeline.run_validate()
        _finish(parser, command, report.failures, f"Validated {report.checked} document(s)")
    elif command == "sitemap":
        print(f"Sitemap written to {_relativize(pipeline.run_sitemap())}")
    elif command == "canonicalize":
        updated = pipeline.run_canonicalize()
        print(f"Updated {len(updated)} sample(s)")
    elif command == "clean":
        removed = pipeline.run_clean()
        print(f"Removed {len(removed)} director(ies)")
    elif command == "snapshot":
        if args.verify:
            report = pipeline.run_snapshot_verify()
            _finish(parser, command, report.failures, f"{report.checked} document(s) match the snapshot")
        else:
            written = pipeline.run_snapshot()
            print(f"Saved {len(written)} snapshot file(s)")
    elif command == "create":
        path = pipeline.run_create(args.name, category=args.category, directory=args.dest)
        print(f"Example created at {_relativize(path)}")
    elif command == "robots":
        path = pipeline.run_robots(allow=args.policy == "allow")
        print(f"robots.txt written to {_relativize(path)}")
    elif command == "deploy":
        results = pipeline.run_deploy(args.target)
        print(f"Deployed to {args.target} ({len(results)} command(s))")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _finish(
    parser: argparse.ArgumentParser,
    command: str,
    failures: Sequence[SampleFailure],
    summary: str,
) -> None:
    if failures:
        _print_failures(failures)
        parser.exit(1, f"examplegen {command}: {len(failures)} sample(s) failed\n")
    print(summary)


def _print_failures(failures: Sequence[object]) -> None:
    for failure in failures:
        if isinstance(failure, SampleFailure):
            print(f"{failure.sample}: {failure.reason}", file=sys.stderr)
            for detail in failure.details:
                print(f"  {detail}", file=sys.stderr)
        else:
            print(str(failure), file=sys.stderr)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
