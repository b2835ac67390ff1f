from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from .bundle import build_bundle, log_diagnostics
from .cargo_metadata import load_metadata_file, run_cargo_metadata
from .check import run_check
from .errors import LichkingError
from .listing import BY_CHOICES, render_listing
from .policy import load_policy
from .python_env import load_python_environment
from .reporting import VARIANTS, render_inline, render_name_only, write_bundle
from .resolver import resolve_packages, resolve_roots
from .types import Metadata, PackageSelection

logger = logging.getLogger(__name__)

DISTRIBUTION = "lichking"

IANAL = "IANAL: This is not legal advice and is not guaranteed to be correct."

_LEVEL_COLORS = {
    logging.DEBUG: "blue",
    logging.INFO: "green",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "red",
}


class ClickHandler(logging.Handler):
    """Write ``level: message`` lines to stderr through click."""

    def __init__(self, color: Optional[bool] = None) -> None:
        super().__init__()
        self.color = color

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            prefix = click.style(
                f"{record.levelname.lower()}:", fg=_LEVEL_COLORS.get(record.levelno), bold=True
            )
            click.echo(f"{prefix} {message}", err=True, color=self.color)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: int = 0, quiet: bool = False, color: str = "auto") -> logging.Logger:
    package_logger = logging.getLogger(DISTRIBUTION)
    for handler in list(package_logger.handlers):
        if isinstance(handler, ClickHandler):
            package_logger.removeHandler(handler)

    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = ClickHandler({"auto": None, "always": True, "never": False}[color])
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return package_logger


@dataclass
class Settings:
    verbose: int = 0
    quiet: bool = False
    frozen: bool = False
    locked: bool = False
    manifest_path: Optional[Path] = None
    metadata_file: Optional[Path] = None
    python_env: bool = False
    cargo: Optional[str] = None

    def load_metadata(self) -> Metadata:
        if self.python_env:
            return load_python_environment()
        if self.metadata_file:
            return load_metadata_file(self.metadata_file)
        return run_cargo_metadata(
            manifest_path=self.manifest_path,
            frozen=self.frozen,
            locked=self.locked,
            verbose=self.verbose,
            quiet=self.quiet,
            cargo=self.cargo,
        )


@contextmanager
def _reporting_errors():
    try:
        yield
    except LichkingError as exc:
        raise click.ClickException(str(exc)) from exc


def _selection(all_packages: bool, package: Optional[str]) -> PackageSelection:
    if all_packages and package:
        raise click.UsageError("--all and --package cannot be used together")
    if all_packages:
        return PackageSelection.all()
    if package:
        return PackageSelection.specific(package)
    return PackageSelection.default()


def selection_options(command):
    command = click.option(
        "-p",
        "--package",
        metavar="NAME",
        help="Package to apply this command to (defaults to the current package).",
    )(command)
    command = click.option(
        "--all",
        "all_packages",
        is_flag=True,
        help="Apply to all packages in the workspace.",
    )(command)
    return command


@click.group()
@click.option("-v", "--verbose", count=True, help="Use verbose output (-vv for debug output).")
@click.option("-q", "--quiet", is_flag=True, help="Only report errors.")
@click.option(
    "--color",
    type=click.Choice(["auto", "always", "never"]),
    default="auto",
    show_default=True,
    help="Coloring of log output.",
)
@click.option("--frozen", is_flag=True, help="Require Cargo.lock and cache to be up to date.")
@click.option("--locked", is_flag=True, help="Require Cargo.lock to be up to date.")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="LICHKING_MANIFEST_PATH",
    help="Path to Cargo.toml (defaults to cargo's own lookup).",
)
@click.option(
    "--metadata-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="LICHKING_METADATA_FILE",
    help="Read saved `cargo metadata --format-version 1` output instead of running cargo.",
)
@click.option(
    "--python-env",
    is_flag=True,
    help="Audit the distributions installed in the running Python environment.",
)
@click.option("--cargo", envvar="CARGO", help="cargo binary to run (defaults to CARGO or `cargo`).")
@click.pass_context
def main(
    ctx: click.Context,
    verbose: int,
    quiet: bool,
    color: str,
    frozen: bool,
    locked: bool,
    manifest_path: Optional[Path],
    metadata_file: Optional[Path],
    python_env: bool,
    cargo: Optional[str],
) -> None:
    """Check and bundle the licenses of a package's dependencies."""

    configure_logging(verbose, quiet, color)
    logger.warning(IANAL)
    ctx.obj = Settings(
        verbose=verbose,
        quiet=quiet,
        frozen=frozen,
        locked=locked,
        manifest_path=manifest_path,
        metadata_file=metadata_file,
        python_env=python_env,
        cargo=cargo,
    )


@main.command("list")
@click.option(
    "--by",
    type=click.Choice(BY_CHOICES),
    default="license",
    show_default=True,
    help="Whether to list packages per license or licenses per package.",
)
@selection_options
@click.pass_obj
def list_command(settings: Settings, by: str, all_packages: bool, package: Optional[str]) -> None:
    """List the licensing of all dependencies."""

    selection = _selection(all_packages, package)
    with _reporting_errors():
        metadata = settings.load_metadata()
        packages = resolve_packages(metadata, resolve_roots(metadata, selection))
    for line in render_listing(packages, by):
        click.echo(line)


@main.command()
@selection_options
@click.option(
    "--policy",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="LICHKING_POLICY",
    help="YAML file with reviewed exceptions for incompatible dependencies.",
)
@click.pass_obj
def check(settings: Settings, all_packages: bool, package: Optional[str], policy: Optional[Path]) -> None:
    """Check that all dependencies have a license compatible with the package."""

    selection = _selection(all_packages, package)
    with _reporting_errors():
        policy_data = load_policy(policy) if policy else None
        metadata = settings.load_metadata()
        results = [
            run_check(root, resolve_packages(metadata, [root]), policy_data)
            for root in resolve_roots(metadata, selection)
        ]

    if not all(result.passed for result in results):
        raise click.ClickException("Incompatible license")


@main.command()
@click.option(
    "--variant",
    type=click.Choice(VARIANTS),
    default="inline",
    show_default=True,
    help=(
        "inline: names and texts; name-only: names only; source: a Python module; "
        "split: names plus one text file per package in --dir; json: machine readable."
    ),
)
@click.option(
    "--file",
    "file_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="The file to output to (standard out if not specified).",
)
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    help="The directory to write license texts to (split variant).",
)
@selection_options
@click.pass_obj
def bundle(
    settings: Settings,
    variant: str,
    file_path: Optional[Path],
    directory: Optional[Path],
    all_packages: bool,
    package: Optional[str],
) -> None:
    """Bundle the license texts of all dependencies for distribution."""

    if variant == "split" and directory is None:
        raise click.UsageError("--dir is required for the split variant")
    selection = _selection(all_packages, package)

    with _reporting_errors():
        metadata = settings.load_metadata()
        roots = resolve_roots(metadata, selection)
        report = build_bundle(roots, resolve_packages(metadata, roots))
        output = write_bundle(report, variant, file_path, directory)

    if file_path is None:
        click.echo(output, nl=False)

    log_diagnostics(report.diagnostics)
    if report.diagnostics.failed:
        raise click.ClickException("Generating bundle finished with error(s)")


@main.command()
@click.option("--full", is_flag=True, help="Include the text of each license.")
def thirdparty(full: bool) -> None:
    """List the third party libraries lichking itself depends on."""

    with _reporting_errors():
        metadata = load_python_environment(root=DISTRIBUTION)
        root = metadata.by_id(metadata.graph.root)
        packages = [package for package in resolve_packages(metadata, [root]) if package.id != root.id]
        report = build_bundle([root], packages)

    if full:
        click.echo(render_inline(report), nl=False)
        log_diagnostics(report.diagnostics)
    else:
        click.echo(render_name_only(report), nl=False)


if __name__ == "__main__":
    main()
