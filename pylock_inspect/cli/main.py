"""Command-line interface for pylock-inspect.

Three commands share one pipeline:

    read input -> parse -> index -> query/summarize -> serialize -> write

- ``lock``: parse a poetry.lock / pdm.lock / uv.lock / uv-workspace.lock
  (optionally with its pyproject.toml) and report on the graph.
- ``pyproject``: parse a pyproject.toml on its own.
- ``bundle``: inspect a bundle previously exported with ``lock --json -o``.

# Output precedence
With ``--out`` the JSON file is written first. When ``--json`` is also given
the file is the only output: the bundle is not dumped to stdout as well.

# Configuration
Input paths fall back to environment variables:
- PYLOCK_LOCK_FILE: default for ``lock --lock``
- PYLOCK_PYPROJECT_FILE: default for ``--pyproject``
- PYLOCK_INSPECT_LOG_LEVEL: default for ``--log-level``
"""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import click

from .. import __version__
from .._parsing import load_bundle_file, parse_py_lock_file, parse_pyproject_toml_file
from ..console import print_error, print_notice, print_report
from ..exceptions import ConfigurationError, InputNotFoundError, PylockInspectError
from ..graph import QueryEngine
from ..logging_config import LOG_LEVEL_ENV, logger, set_log_level
from ..models import LockBundle
from ..serialization import render_text_report, to_canonical_json, write_json
from ..summary import build_summary

EXIT_INPUT_ERROR = 2

LOCK_FILE_ENV = "PYLOCK_LOCK_FILE"
PYPROJECT_FILE_ENV = "PYLOCK_PYPROJECT_FILE"

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def _resolve_path(path: Optional[str]) -> Optional[Path]:
    """Resolve a user-supplied path against the current working directory."""
    if not path:
        return None
    return Path(path).expanduser().resolve()


@dataclass
class InspectConfig:
    """Configuration for one inspection run."""

    lock_file: Optional[Path] = None
    pyproject_file: Optional[Path] = None
    bundle_file: Optional[Path] = None
    ref: Optional[str] = None
    name: Optional[str] = None
    show_deps: bool = False
    show_pkgs: bool = False
    as_json: bool = False
    out_file: Optional[Path] = None

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If the combination of inputs is invalid
            InputNotFoundError: If a declared input path does not exist
        """
        if self.lock_file and self.bundle_file:
            raise ConfigurationError("Please provide only one of: lock file or bundle file")
        if not (self.lock_file or self.bundle_file):
            raise ConfigurationError("A lock file is required")

        if self.lock_file and not self.lock_file.is_file():
            raise InputNotFoundError(self.lock_file, label="Lock file")
        if self.bundle_file and not self.bundle_file.is_file():
            raise InputNotFoundError(self.bundle_file, label="Bundle file")
        if self.pyproject_file and not self.pyproject_file.is_file():
            raise InputNotFoundError(self.pyproject_file, label="pyproject.toml")

        if self.ref and self.name:
            logger.warning(f"Both --ref and --name given; using --ref {self.ref} and ignoring --name {self.name}")
            self.name = None

    @property
    def wants_node(self) -> bool:
        """Whether the output is one dependency node rather than the bundle."""
        return bool(self.show_deps and (self.ref or self.name))


def _fail(error: PylockInspectError) -> NoReturn:
    logger.debug(f"{type(error).__name__}: {error}", exc_info=True)
    print_error(str(error))
    sys.exit(EXIT_INPUT_ERROR)


def run_query(bundle: LockBundle, config: InspectConfig) -> None:
    """
    Index the bundle, run the requested query and write the output.

    Raises:
        MalformedGraphError: If the bundle has dangling references
        NotFoundError: If --name or --ref cannot be resolved
        FileProcessingError: If the output file cannot be written
    """
    engine = QueryEngine.from_bundle(bundle)

    ref = config.ref
    if config.name:
        ref = engine.resolve_by_name(config.name)
        component = engine.get_component(ref)
        logger.info(f"Resolved {config.name!r} to {component.name}@{component.version} ({ref})")

    if ref and not config.show_deps:
        if engine.get_component(ref) is None:
            logger.warning(f"--ref {ref} is not in pkgList; it only applies with --show-deps")
        else:
            logger.debug(f"--ref {ref} has no effect without --show-deps")

    subgraph = engine.extract_subgraph(ref) if ref and config.wants_node else None

    if config.out_file:
        payload = subgraph.node if subgraph else bundle
        out_path = write_json(payload, config.out_file)
        print_notice(f"Wrote JSON: {out_path}")
        # The file is authoritative; don't dump the same JSON to stdout too
        if config.as_json or not (config.show_deps or config.show_pkgs):
            return

    if config.as_json:
        click.echo(to_canonical_json(bundle), nl=False)
        return

    print_report(
        render_text_report(
            bundle,
            show_pkgs=config.show_pkgs,
            show_deps=config.show_deps and subgraph is None,
            title="lock data summary",
        )
    )
    if subgraph is not None:
        print_report(["", "=== dependenciesList ==="])
        click.echo(to_canonical_json(subgraph.node), nl=False)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "--version", "-V", prog_name="pylock-inspect", message="%(prog)s %(version)s")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar=LOG_LEVEL_ENV,
    default="WARNING",
    show_default=True,
    help="Logging verbosity (logs go to stderr).",
)
def cli(log_level: str) -> None:
    """Inspect Python lock files and manifests as a normalized dependency graph."""
    set_log_level(log_level)


def _query_options(func):
    """Options shared by the commands that query a dependency graph."""
    options = [
        click.option("--ref", "-r", help="Print only one dependency node (bom-ref)."),
        click.option("--name", "-n", help="Resolve the bom-ref by package name, then apply it as --ref."),
        click.option("--show-deps", is_flag=True, help="Print dependenciesList (or one node with --ref/--name)."),
        click.option("--show-pkgs", is_flag=True, help="Print pkgList (name@version and bom-ref)."),
        click.option("--json", "as_json", is_flag=True, help="Print the full bundle as JSON."),
        click.option(
            "--out",
            "-o",
            "out_file",
            type=click.Path(dir_okay=False),
            help="Write JSON to a file (the bundle, or one node with --show-deps and --ref/--name).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command("lock")
@click.option(
    "--lock",
    "-l",
    "lock_file",
    envvar=LOCK_FILE_ENV,
    required=True,
    help="Path to poetry.lock / pdm.lock / uv.lock / uv-workspace.lock.",
)
@click.option("--pyproject", "-p", "pyproject_file", envvar=PYPROJECT_FILE_ENV, help="Path to pyproject.toml.")
@_query_options
def lock_command(lock_file, pyproject_file, ref, name, show_deps, show_pkgs, as_json, out_file) -> None:
    """Parse a lock file and report on its dependency graph.

    \b
    Examples:
      pylock-inspect lock -l uv.lock --show-deps
      pylock-inspect lock -l uv-workspace.lock -p pyproject.toml --show-deps
      pylock-inspect lock -l poetry.lock --json -o poetry.lock.parsed.json
      pylock-inspect lock -l poetry.lock --show-deps --name django -o django.deps.json
    """
    config = InspectConfig(
        lock_file=_resolve_path(lock_file),
        pyproject_file=_resolve_path(pyproject_file),
        ref=ref,
        name=name,
        show_deps=show_deps,
        show_pkgs=show_pkgs,
        as_json=as_json,
        out_file=_resolve_path(out_file),
    )
    try:
        config.validate()
        bundle = parse_py_lock_file(config.lock_file, config.pyproject_file)
        run_query(bundle, config)
    except PylockInspectError as e:
        _fail(e)


@cli.command("bundle")
@click.argument("bundle_file")
@_query_options
def bundle_command(bundle_file, ref, name, show_deps, show_pkgs, as_json, out_file) -> None:
    """Inspect a bundle JSON previously written with `lock --json -o`."""
    config = InspectConfig(
        bundle_file=_resolve_path(bundle_file),
        ref=ref,
        name=name,
        show_deps=show_deps,
        show_pkgs=show_pkgs,
        as_json=as_json,
        out_file=_resolve_path(out_file),
    )
    try:
        config.validate()
        bundle = load_bundle_file(config.bundle_file)
        run_query(bundle, config)
    except PylockInspectError as e:
        _fail(e)


@cli.command("pyproject")
@click.option(
    "--pyproject",
    "-p",
    "pyproject_file",
    envvar=PYPROJECT_FILE_ENV,
    required=True,
    help="Path to pyproject.toml.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full parse result as JSON.")
@click.option(
    "--out",
    "-o",
    "out_file",
    type=click.Path(dir_okay=False),
    help="Write JSON to a file (the full result with --json, else the summary).",
)
@click.option("--show-direct", is_flag=True, help="Print directDepsKeys (names).")
@click.option("--show-groups", is_flag=True, help="Print groupDepsKeys (name -> groups).")
@click.option("--show-workspace-paths", is_flag=True, help="Print workspacePaths.")
def pyproject_command(pyproject_file, as_json, out_file, show_direct, show_groups, show_workspace_paths) -> None:
    """Parse a pyproject.toml and report its project metadata and declared dependencies."""
    try:
        bundle = parse_pyproject_toml_file(_resolve_path(pyproject_file))

        if out_file:
            payload = bundle if as_json else build_summary(bundle)
            out_path = write_json(payload, _resolve_path(out_file))
            print_notice(f"Wrote JSON: {out_path}")
            if as_json:
                return

        if as_json:
            click.echo(to_canonical_json(bundle), nl=False)
            return

        print_report(
            render_text_report(
                bundle,
                show_direct=show_direct,
                show_groups=show_groups,
                show_workspace_paths=show_workspace_paths,
                title="pyproject summary",
            )
        )
    except PylockInspectError as e:
        _fail(e)


def main() -> None:
    """Console script entry point."""
    cli()
