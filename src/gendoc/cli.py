"""Command-line entry point for the protoc-gen-doc plugin."""

import logging
import sys

import click

from . import __version__
from .errors import GendocError
from .plugin import run

logger = logging.getLogger(__name__)

USAGE_HINT = """\
protoc-gen-doc is a protoc plugin, not meant to be run directly.

\b
Usage:
  protoc --doc_out=./docs --doc_opt=html,index.html protos/*.proto
  protoc --plugin=protoc-gen-doc=$(which protoc-gen-doc) \\
         --doc_out=./docs --doc_opt=markdown,docs.md protos/*.proto
"""


@click.command(help=USAGE_HINT)
@click.version_option(version=__version__, prog_name="protoc-gen-doc")
@click.pass_context
def main(ctx):
    """Read a CodeGeneratorRequest on stdin, write the response to stdout."""
    # stdout carries the protocol; diagnostics go to stderr
    logging.basicConfig(
        level=logging.WARNING,
        format="protoc-gen-doc: [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )

    stdin = click.get_binary_stream("stdin")
    if stdin.isatty():
        click.echo(ctx.get_help(), err=True)
        ctx.exit(1)

    data = stdin.read()
    logger.debug("Received %d byte request", len(data))
    try:
        output = run(data)
    except GendocError as e:
        raise click.ClickException(str(e)) from e

    stdout = click.get_binary_stream("stdout")
    stdout.write(output)
    stdout.flush()
