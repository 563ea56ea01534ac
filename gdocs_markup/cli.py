import json
import logging
from typing import Optional

import click

from gdocs_markup.errors import StructuralError
from gdocs_markup.logger import DETAIL, logger
from gdocs_markup.partition.gdocs.partition import partition_gdocs_html
from gdocs_markup.partition.utils.config import STYLE_RESOLUTION_MODES
from gdocs_markup.staging.base import (
    convert_to_text,
    elements_to_dicts,
    elements_to_json,
    elements_to_text,
)


@click.command(name="gdocs-markup")
@click.argument("filename", type=click.Path(exists=True, dir_okay=False))
@click.option("--encoding", type=str, default=None, help="Encoding of FILENAME, detected if unset.")
@click.option(
    "--style-resolution",
    type=click.Choice(STYLE_RESOLUTION_MODES),
    default=None,
    help="Where bold, italic and underline are read from.",
)
@click.option("--format", "output_format", type=click.Choice(["json", "text"]), default="json")
@click.option("--output", type=click.Path(dir_okay=False), default=None, help="Write here.")
@click.option("--verbose", is_flag=True, default=False, help="Log parsing details to stderr.")
def main(
    filename: str,
    encoding: Optional[str],
    style_resolution: Optional[str],
    output_format: str,
    output: Optional[str],
    verbose: bool,
):
    """Convert the Google Docs HTML export FILENAME to JSON blocks or plain text."""
    if verbose:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(DETAIL)

    try:
        document = partition_gdocs_html(
            filename, encoding=encoding, style_resolution=style_resolution
        )
    except StructuralError as e:
        raise click.ClickException(e.message) from e

    if output is None:
        if output_format == "json":
            click.echo(json.dumps(elements_to_dicts(document), indent=4, ensure_ascii=False))
        else:
            click.echo(convert_to_text(document))
        return

    if output_format == "json":
        elements_to_json(document, filename=output)
    else:
        elements_to_text(document, filename=output)
    click.echo(f"Wrote {len(document)} blocks to {output}", err=True)


if __name__ == "__main__":
    main()
