"""kubeimport CLI interface.

Commands:
- import: Import schemas ([NAME:=]SPEC ...) and emit one file per module
- check: Validate external tool availability (Helm)
- init: Create a default kubeimport.yaml

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

from pathlib import Path
from typing import Annotated

import typer

from kubeimport import __version__
from kubeimport.config import CONFIG_FILE, KubeImportConfig, create_default_config, load_config
from kubeimport.errors import KubeImportError
from kubeimport.tools.base import ToolExecutionError, ToolNotAvailableError
from kubeimport.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="kubeimport",
    help="Import Kubernetes API, CRD and Helm chart schemas as a typed definition model",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: KubeImportConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"kubeimport {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """kubeimport - Kubernetes schema import engine.

    Imports the core Kubernetes API, Custom Resource Definitions and Helm
    charts into a deterministic, collision-free definition model.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except Exception as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


# =============================================================================
# import command
# =============================================================================


@app.command("import")
def import_(
    specs: Annotated[
        list[str] | None,
        typer.Argument(
            help="Import specifications ([NAME:=]SPEC). Defaults to the config's import list.",
            show_default=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output directory (default: config 'output')",
            file_okay=False,
        ),
    ] = None,
    class_prefix: Annotated[
        str | None,
        typer.Option(
            "--class-prefix",
            help="Prefix for construct names (overrides the per-import default)",
        ),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option(
            "--exclude",
            "-x",
            help="Fully qualified core API definition to skip (repeatable)",
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format: json or markdown",
        ),
    ] = "json",
    no_save: Annotated[
        bool,
        typer.Option(
            "--no-save",
            help="Do not add the imports to the config's import list",
        ),
    ] = False,
) -> None:
    """Import schemas and emit one file per module.

    Examples:
        kubeimport import k8s@1.22.0
        kubeimport import crds:=https://example.com/crds.yaml
        kubeimport import github:crossplane/crossplane@0.14.0
        kubeimport import helm:https://charts.bitnami.com/bitnami/mysql@9.10.10

    Exit codes:
        0: All imports succeeded
        1: An import failed (nothing is emitted for the failing import)
    """
    from kubeimport.emitters import get_emitter
    from kubeimport.pipeline import ImportPipeline, PipelineOptions

    config = _config or KubeImportConfig()
    requested = list(specs or config.imports)

    if not requested:
        _logger.error("Nothing to import. Pass import specs or list them under 'imports' in the config")
        raise typer.Exit(1)

    try:
        emitter = get_emitter(output_format)
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    options = PipelineOptions(
        outdir=output,
        save=not no_save,
        class_name_prefix=class_prefix,
        exclude=list(exclude or []),
        config_path=config.config_path,
    )

    try:
        results = ImportPipeline(config=config, emitter=emitter).run(requested, options)
    except (KubeImportError, ToolNotAvailableError, ToolExecutionError) as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    for result in results:
        for path in result.files:
            typer.echo(str(path))

    raise typer.Exit(0)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output results as JSON",
        ),
    ] = False,
    require_helm: Annotated[
        bool,
        typer.Option(
            "--require-helm",
            help="Fail if Helm is not installed",
        ),
    ] = False,
) -> None:
    """Validate external tool availability.

    Exit codes:
        0: All required tools available
        1: One or more required tools missing
        2: Only optional tools missing (warnings)
    """
    import json as json_module

    from kubeimport.utils.preflight import PreflightChecker

    config = _config or KubeImportConfig()
    result = PreflightChecker().check_all(config.helm, require_helm=require_helm)

    if json_output:
        typer.echo(json_module.dumps(result.to_dict(), indent=2))
    else:
        typer.echo("\nPreflight Check Results\n")

        for check_result in result.checks:
            status = "OK" if check_result.available else "MISSING"
            version_str = f" ({check_result.version})" if check_result.version else ""
            required_str = " [required]" if check_result.required else " [optional]"

            typer.echo(f"  [{status}] {check_result.name}{version_str}{required_str}")
            if check_result.available and check_result.path:
                typer.echo(f"     - {check_result.path}")
            elif not check_result.available:
                typer.echo(f"     - {check_result.message}")

        typer.echo()

    if result.errors:
        if not json_output:
            typer.echo("Preflight check FAILED")
            for error in result.errors:
                typer.echo(f"   * {error}")
        raise typer.Exit(1)
    if result.warnings:
        if not json_output:
            typer.echo("Preflight check passed with WARNINGS")
        raise typer.Exit(2)

    if not json_output:
        typer.echo("Preflight check PASSED")
    raise typer.Exit(0)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Create a default kubeimport.yaml in the current directory."""
    config_file = Path(CONFIG_FILE)

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created {config_file}")
    raise typer.Exit(0)


if __name__ == "__main__":
    app()
