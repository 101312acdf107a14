"""Typer CLI definition for casevoice."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from .config import generate_config, get_config_path, load_config
from .speech.errors import TTSError
from .speech.gateway import SpeechGateway

app = typer.Typer(help="Speech synthesis gateway for detective case narration")

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(debug: bool, default_level: int = logging.WARNING) -> None:
    """Set up root logging for a CLI invocation."""
    logging.basicConfig(
        level=logging.DEBUG if debug else default_level,
        format=LOG_FORMAT,
    )


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to synthesize.

    Args:
        text: Optional text input from CLI argument, file or stdin

    Returns:
        The text to synthesize

    Raises:
        ValueError: If no text is provided or it is blank
    """
    if text is None:
        raise ValueError("No text provided")
    if not text.strip():
        raise ValueError("Text cannot be empty")

    return text


async def collect_voices(gateway: SpeechGateway) -> list[tuple[str, list[dict] | None]]:
    """List voices for every tier; None marks a tier that could not answer."""
    listings: list[tuple[str, list[dict] | None]] = []
    for provider in gateway.providers:
        try:
            listings.append((provider.name, await provider.list_voices()))
        except TTSError as e:
            logger.warning(f"Could not list voices for {provider.name}: {e}")
            listings.append((provider.name, None))
    return listings


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (from config if omitted)"),
    port: int | None = typer.Option(None, "--port", help="Port (from config if omitted)"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from .web.server import create_app

    configure_logging(debug, default_level=logging.INFO)
    config = load_config()
    uvicorn.run(
        create_app(config),
        host=host if host is not None else config.http.host,
        port=port if port is not None else config.http.port,
        log_level="debug" if debug else "info",
    )


@app.command()
def say(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    output: Path = typer.Option(..., "-o", "--output", help="File to write MP3 audio to"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    voice: str | None = typer.Option(None, "-v", "--voice", help="Voice hint"),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and tier activity"
    ),
) -> None:
    """Synthesize text through the fallback ladder and save it as MP3."""
    configure_logging(debug)

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except (OSError, UnicodeDecodeError) as e:
                if debug:
                    typer.echo(f"Debug - Cannot read {file} ({e!r})", err=True)
                else:
                    typer.echo(f"Error: Cannot read file: {file}", err=True)
                raise typer.Exit(1) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        speech_text = process_text_input(text)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    gateway = SpeechGateway.from_config(load_config())
    result = asyncio.run(gateway.synthesize(speech_text, voice))

    if not result.ok:
        typer.echo(f"Error: No audio available ({result.reason})", err=True)
        raise typer.Exit(1)

    try:
        output.write_bytes(result.audio)
    except OSError as e:
        if debug:
            typer.echo(f"Debug - File system error: {e!r}", err=True)
        else:
            typer.echo(f"Error: Failed to save audio file: {e}", err=True)
        raise typer.Exit(1) from None

    typer.echo(f"Audio saved to {output} ({result.tier}, voice {result.voice})")


@app.command()
def voices(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """List the voices each configured tier offers."""
    configure_logging(debug)
    gateway = SpeechGateway.from_config(load_config())

    if not gateway.providers:
        typer.echo("No speech tiers configured")
        raise typer.Exit(1)

    for tier, tier_voices in asyncio.run(collect_voices(gateway)):
        typer.echo(f"[{tier}]")
        if tier_voices is None:
            typer.echo("  (unavailable)")
            continue
        for voice in tier_voices:
            typer.echo(f"  {voice['name']}: {voice['id']}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration file."""
    path = get_config_path()
    if path.exists() and not force:
        typer.echo(f"Config already exists at {path} (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    typer.echo(f"Wrote {generate_config(path)}")
