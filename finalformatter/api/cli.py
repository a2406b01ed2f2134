"""
Command-line adapter for FinalFormatter (client environment).

Architectural role:
- Runs the same pipeline as the HTTP adapter against a local file or text.
- The file's MIME type is derived from its name, the way a browser types a
  selected file, unless `--mime-type` overrides it.
- Delegates all classification/extraction/model work to
  `finalformatter.core.pipeline`.

Request lifecycle:
1. Read `--file`, or `--text`, or piped stdin as the single artifact.
2. Prompt for instructions when none were given and a terminal is attached.
3. `--dry-run`: print the assembled Gemini request body and stop.
4. Otherwise invoke the model and print (or write) the formatted text.

Error handling strategy:
- Pipeline errors print `error: <message> (<detail>)` to stderr, exit status 1.
- File read errors are reported by click before the pipeline runs.
"""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import json
import logging
import mimetypes
import sys
from pathlib import Path

import click

from finalformatter.core.errors import FormatterError
from finalformatter.core.pipeline import (
    build_default_services,
    build_request,
    format_document,
)
from finalformatter.core.types import resolve_artifact
from finalformatter.llm.client import build_request_body
from finalformatter.multimodal.classifier import DOCX_MIME_TYPE


logger = logging.getLogger(__name__)

# Not every platform's mime.types table knows OOXML.
mimetypes.add_type(DOCX_MIME_TYPE, ".docx")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(name)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )


def guess_mime_type(path: Path) -> str:
    """Return the MIME type for a filename, `""` when unknown."""
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or ""


def _read_artifact(file: str | None, text: str | None, mime_type: str | None):
    if file is not None:
        path = Path(file)
        return resolve_artifact(
            content=text,
            mime_type=mime_type or guess_mime_type(path),
            data=path.read_bytes(),
            required=False,
        )

    if text is None and not sys.stdin.isatty():
        text = sys.stdin.read()

    return resolve_artifact(content=text, required=False)


@click.command()
@click.option("-f", "--file", "file", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Document to format (PDF, DOCX, image or .txt).")
@click.option("-t", "--text", default=None, help="Document text; read from stdin when piped.")
@click.option("-i", "--instructions", default=None, help="Formatting instructions.")
@click.option("--mime-type", default=None, help="Override the MIME type guessed from --file.")
@click.option("-o", "--output", type=click.Path(dir_okay=False), default=None,
              help="Write the formatted document here instead of stdout.")
@click.option("--dry-run", is_flag=True, help="Print the request body without calling the model.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def main(file, text, instructions, mime_type, output, dry_run, verbose) -> None:
    """Format a document into plain, paste-ready text."""
    _setup_logging(verbose)

    if instructions is None and sys.stdin.isatty():
        instructions = click.prompt("Instructions", default="", show_default=False)

    services = build_default_services()

    try:
        artifact = _read_artifact(file, text, mime_type)

        if dry_run:
            payload = asyncio.run(build_request(artifact, instructions, services))
            body = build_request_body(payload.parts, payload.system_instruction)
            click.echo(json.dumps(body, ensure_ascii=False, indent=2))
            return

        result = asyncio.run(format_document(artifact, instructions, services))
    except FormatterError as exc:
        click.echo(f"error: {exc.message} ({exc.detail})", err=True)
        sys.exit(1)

    if output:
        Path(output).write_text(result.formatted_content, encoding="utf-8")
        click.echo(f"Wrote {output}", err=True)
    else:
        click.echo(result.formatted_content)


if __name__ == "__main__":
    main()
