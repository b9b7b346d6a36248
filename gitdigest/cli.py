"""
Command-line interface for gitdigest.

Provides commands for digesting repositories, serving the HTTP
handler, and managing configuration.
"""

import sys
from pathlib import Path

import click

from gitdigest import __version__
from gitdigest.core.options import OutputFormat
from gitdigest.utils.logging_config import setup_logging

EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
@click.option(
    "--log-file",
    type=click.Path(),
    help="Path to log file"
)
@click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON configuration file"
)
@click.pass_context
def cli(ctx, verbose, log_file, config_path):
    """
    gitdigest

    Flatten a remote Git repository into a single text, JSON or
    Markdown digest for language-model prompts.
    """
    from gitdigest.core.config import Config

    ctx.ensure_object(dict)

    if config_path:
        Config.load_from_file(config_path)
    config = Config.load_from_env()

    verbose = verbose or config.verbose
    ctx.obj["verbose"] = verbose

    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(
        level=log_level,
        log_file=Path(log_file) if log_file else None,
        stream=sys.stderr,
    )


@cli.command()
@click.argument("url")
@click.option(
    "--tests/--no-tests", "include_tests",
    default=None,
    help="Include test files (default from configuration)"
)
@click.option(
    "--docs/--no-docs", "include_docs",
    default=None,
    help="Include documentation files (default from configuration)"
)
@click.option(
    "--smart-filter/--no-smart-filter",
    default=None,
    help="Drop tiny, huge, and generated files"
)
@click.option(
    "--max-file-size",
    type=click.IntRange(min=0),
    help="Skip files larger than this many bytes"
)
@click.option(
    "--format", "-f", "output_format",
    type=click.Choice([f.value for f in OutputFormat] + ["json", "text"]),
    help="Output format"
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    help="Write the digest to this file instead of stdout"
)
@click.option(
    "--token",
    envvar="GITDIGEST_TOKEN",
    help="Access token for private repositories"
)
@click.option(
    "--private",
    is_flag=True,
    help="Repository is private; requires --token"
)
@click.pass_context
def digest(ctx, url, include_tests, include_docs, smart_filter, max_file_size,
           output_format, output, token, private):
    """
    Generate a digest for a repository.

    URL must point at a GitHub, GitLab or Bitbucket repository.

    Examples:

        gitdigest digest https://github.com/user/repo

        gitdigest digest https://github.com/user/repo --no-tests -f json -o repo.json
    """
    from gitdigest.core.config import Config
    from gitdigest.core.exceptions import DigestError, InvalidInputError
    from gitdigest.engine import DigestEngine
    from gitdigest.reporting.formatter import format_kilobytes

    config = Config.get()
    overrides = {
        "include_tests": include_tests,
        "include_docs": include_docs,
        "smart_filter": smart_filter,
        "max_file_size": max_file_size,
        "output_format": OutputFormat.parse(output_format) if output_format else None,
    }

    try:
        engine = DigestEngine(config)
        options = engine.default_options.with_overrides(
            **{key: value for key, value in overrides.items() if value is not None}
        )
        result = engine.digest(url, options, credential=token, private=private)

    except InvalidInputError as e:
        click.echo(f"Error: {e.args[0]}", err=True)
        sys.exit(EXIT_INVALID_INPUT)

    except DigestError as e:
        click.echo(f"Error: {e}", err=True)
        stderr = e.details.get("stderr")
        if stderr and ctx.obj.get("verbose"):
            click.echo(stderr, err=True)
        sys.exit(EXIT_FAILURE)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.render(), encoding="utf-8")

        stats = result.stats
        click.echo(f"Digest saved to: {output}", err=True)
        click.echo(
            f"  {stats.total_files} files, {format_kilobytes(stats.total_size)} KB, "
            f"languages: {', '.join(stats.languages) or '-'}",
            err=True,
        )
    else:
        click.echo(result.render())


@cli.command()
@click.option("--host", help="Interface to bind")
@click.option("--port", type=int, help="Port to listen on")
def serve(host, port):
    """Serve the digest API over HTTP."""
    import uvicorn

    from gitdigest.core.config import Config
    from gitdigest.service.app import create_app

    config = Config.get()
    uvicorn.run(
        create_app(),
        host=host or config.service.host,
        port=port or config.service.port,
    )


@cli.command()
@click.option(
    "--output", "-o",
    type=click.Path(),
    default="gitdigest.json",
    help="Output path for configuration file"
)
def init(output):
    """
    Initialize configuration file.

    Creates a default configuration file that can be customized.
    """
    from gitdigest.core.config import Config

    Config.save_to_file(output)
    click.echo(f"Configuration saved to: {output}")


@cli.command()
def list_languages():
    """List recognised languages and their extensions."""
    from gitdigest.analysis.classifier import FileClassifier

    classifier = FileClassifier()

    click.echo("Supported Languages:")
    click.echo("-" * 40)
    for lang in classifier.get_supported_languages():
        extensions = classifier.get_extensions_for_language(lang)
        click.echo(f"  {lang}: {', '.join(extensions)}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
