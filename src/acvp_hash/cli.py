#!/usr/bin/env python3
"""
ACVP hash harness command line.

Runs request vector sets against the bundled reference module under test and
writes the response document.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import HarnessConfig
from .crypto.hashlib_module import default_registry
from .errors import AcvpError
from .runner import HashHarness
from .samples import sample_vector_set
from .types import HashAlgorithm
from .vector_io import dump_document, load_document, write_document

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@click.group()
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """ACVP hash test harness."""
    config = HarnessConfig.from_env()
    if verbose:
        config.verbose = True
    _configure_logging(config.verbose)
    ctx.obj = config


@main.command()
@click.argument("request", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Response file (.json or .yaml); defaults to the result dir or stdout",
)
@click.option("--mct-outer", type=click.IntRange(min=1), default=None, help="MCT outer iterations")
@click.option("--mct-inner", type=click.IntRange(min=1), default=None, help="MCT inner iterations")
@click.option("--compact", is_flag=True, help="Write JSON without indentation")
@click.pass_obj
def process(
    config: HarnessConfig,
    request: Path,
    output: Optional[Path],
    mct_outer: Optional[int],
    mct_inner: Optional[int],
    compact: bool,
) -> None:
    """Process REQUEST and write the response vector set."""
    if mct_outer:
        config.mct_outer = mct_outer
    if mct_inner:
        config.mct_inner = mct_inner
    if compact:
        config.pretty = False

    if output is None and config.result_dir:
        output = Path(config.result_dir) / f"{request.stem}.response.json"

    harness = HashHarness(default_registry(), config)
    try:
        response = harness.process(load_document(request))
    except AcvpError as e:
        logger.error(f"Processing {request} failed: {e}")
        sys.exit(1)

    if output is None:
        click.echo(dump_document(response, pretty=config.pretty), nl=False)
    else:
        write_document(output, response, pretty=config.pretty)
        logger.info(f"Wrote response to {output}")


@main.command()
@click.argument("algorithm", type=click.Choice([a.value for a in HashAlgorithm]))
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Request file (.json or .yaml); defaults to stdout",
)
@click.option("--vs-id", type=int, default=0, help="vsId of the sample vector set")
def sample(algorithm: str, output: Optional[Path], vs_id: int) -> None:
    """Write a sample request vector set for ALGORITHM."""
    document = sample_vector_set(HashAlgorithm(algorithm), vs_id=vs_id)
    if output is None:
        click.echo(dump_document(document), nl=False)
    else:
        write_document(output, document)
        logger.info(f"Wrote sample request to {output}")


if __name__ == "__main__":
    main()
