"""CLI interface for airlift"""

import logging
import sys
import warnings

import click

from airlift import __version__
from airlift.core.config import Config
from airlift.core.importer import parse_registry_host
from airlift.core.naming import NAMING_SCHEMES, decode_archive_name, encode_archive_name
from airlift.core.orchestrator import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_REGISTRY_URL,
    Orchestrator,
)
from airlift.exceptions import AirliftError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


def pipeline_options(func):
    """Options shared by run, export and import"""
    options = [
        click.option(
            "-c",
            "--config",
            type=click.Path(dir_okay=False),
            help=(
                "Configuration file listing the images (YAML or JSON) "
                f"[default for export: {DEFAULT_CONFIG_FILE}; import reads it only when given]"
            ),
        ),
        click.option(
            "-o",
            "--output-dir",
            envvar="AIRLIFT_OUTPUT_DIR",
            type=click.Path(file_okay=False),
            help=f"Archive directory [default: config output_dir or {DEFAULT_OUTPUT_DIR}]",
        ),
        click.option(
            "-r",
            "--registry-url",
            envvar="AIRLIFT_REGISTRY_URL",
            help=f"Target registry URL [default: config registry_url or {DEFAULT_REGISTRY_URL}]",
        ),
        click.option(
            "-e",
            "--env-file",
            multiple=True,
            type=click.Path(exists=True),
            help="Load environment variables from file (can be used multiple times)",
        ),
        click.option(
            "-v",
            "--verbose",
            is_flag=True,
            help="Enable verbose logging",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


naming_option = click.option(
    "--naming",
    type=click.Choice(NAMING_SCHEMES),
    help=(
        "Archive naming scheme [default: config archive_naming or underscore]. "
        "underscore always drops the first segment of a reference with two or more '/' "
        "from the push path; percent drops it only when it looks like a registry host"
    ),
)


def _print_summaries(orchestrator: Orchestrator) -> None:
    for summary in orchestrator.summaries:
        color = "yellow" if summary.failed else "green"
        click.secho(f"  {summary}", fg=color)
        for result in summary.failed:
            click.secho(f"    ✗ {result.item} ({result.step}): {result.message}", fg="red")


def _run_pipeline(ctx, config, output_dir, registry_url, naming, env_file, verbose,
                  skip_export, skip_import):
    if verbose or ctx.obj.get("debug"):
        logging.getLogger().setLevel(logging.DEBUG)

    orchestrator = Orchestrator(
        config_file=config,
        output_dir=output_dir,
        registry_url=registry_url,
        skip_export=skip_export,
        skip_import=skip_import,
        naming=naming,
        env_files=list(env_file) if env_file else None,
    )

    try:
        success = orchestrator.run()
    except Exception as e:
        click.secho(f"\n✗ Error: {e}", fg="red")
        if verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    if not success:
        click.secho(f"\n✗ Failed: {orchestrator.error}", fg="red")
        sys.exit(orchestrator.error.exit_code if orchestrator.error else 1)

    if not orchestrator.summaries:
        click.echo("\n✓ Nothing to do")
        sys.exit(0)

    click.echo("\n✓ Completed")
    _print_summaries(orchestrator)
    sys.exit(0)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    help="Enable debug mode with verbose output and warnings",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug):
    """Airlift - offline registry image transfer

    Export images to archive files, then import the archives into an offline
    registry.
    """
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug

    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        warnings.filterwarnings("ignore", category=DeprecationWarning)


@cli.command()
@pipeline_options
@naming_option
@click.option("--skip-export", is_flag=True, help="Do not pull and save images")
@click.option("--skip-import", is_flag=True, help="Do not load and push archives")
@click.pass_context
def run(ctx, config, output_dir, registry_url, naming, env_file, verbose, skip_export, skip_import):
    """Export images, then import them into the registry

    Examples:
        airlift run -c images.yaml -r http://registry.local:5000
        airlift run -c images.json -o /mnt/usb/images --skip-import
    """
    _run_pipeline(ctx, config, output_dir, registry_url, naming, env_file, verbose,
                  skip_export, skip_import)


@cli.command("export")
@pipeline_options
@naming_option
@click.pass_context
def export_(ctx, config, output_dir, registry_url, naming, env_file, verbose):
    """Pull images and save each one to an archive

    Examples:
        airlift export -c images.yaml -o /mnt/usb/images
    """
    _run_pipeline(ctx, config, output_dir, registry_url, naming, env_file, verbose,
                  skip_export=False, skip_import=True)


@cli.command("import")
@pipeline_options
@click.pass_context
def import_(ctx, config, output_dir, registry_url, env_file, verbose):
    """Load archives and push them to the registry

    Examples:
        airlift import -o /mnt/usb/images -r http://registry.local:5000
    """
    _run_pipeline(ctx, config, output_dir, registry_url, None, env_file, verbose,
                  skip_export=True, skip_import=False)


@cli.command()
@click.option(
    "-c",
    "--config",
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Configuration file listing the images",
)
@click.option(
    "-e",
    "--env-file",
    multiple=True,
    type=click.Path(exists=True),
    help="Load environment variables from file (can be used multiple times)",
)
def validate(config: str, env_file: tuple):
    """Validate configuration file

    Examples:
        airlift validate -c images.yaml
    """
    try:
        env_files = list(env_file) if env_file else None
        cfg = Config(config, env_files=env_files)

        if not cfg.validate():
            click.echo("✗ Configuration validation failed")
            sys.exit(1)

        click.echo("✓ Configuration is valid")
        click.echo(f"  Images: {len(cfg.images)}")
        click.echo(f"  Archive naming: {cfg.archive_naming}")
        sys.exit(0)

    except AirliftError as e:
        click.echo(f"✗ Error: {e}")
        sys.exit(1)


@cli.command()
@click.argument("name")
@click.option(
    "--naming",
    type=click.Choice(NAMING_SCHEMES),
    default=NAMING_SCHEMES[0],
    show_default=True,
    help="Archive naming scheme",
)
@click.option("--decode", is_flag=True, help="Treat NAME as an archive filename")
@click.option(
    "-r",
    "--registry-url",
    default=DEFAULT_REGISTRY_URL,
    show_default=True,
    help="Registry used to show the push target when decoding",
)
def name(name: str, naming: str, decode: bool, registry_url: str):
    """Show the archive filename of an image reference, or decode one

    Examples:
        airlift name registry.example.com/team/app:1.0
        airlift name --decode registry.example.com____team__app@1.0.tar
    """
    try:
        if not decode:
            click.echo(encode_archive_name(name, naming))
            sys.exit(0)

        archive = decode_archive_name(name)
        click.echo(f"image:  {archive.image_name}")
        click.echo(f"tag:    {archive.tag}")
        click.echo(f"source: {archive.source_image}")
        click.echo(f"target: {archive.target(parse_registry_host(registry_url))}")
        sys.exit(0)

    except AirliftError as e:
        click.echo(f"✗ Error: {e}")
        sys.exit(1)


def main():
    """Entry point for CLI"""
    cli()


if __name__ == "__main__":
    main()
