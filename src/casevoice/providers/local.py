"""Local speech provider that runs a synthesis engine as a subprocess.

The default engine is the edge-tts command line tool, but any program that
reads text from a file and writes audio to a file can be plugged in through
the command template.
"""

import asyncio
import contextlib
import logging
import re
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from ..speech.errors import TTSEngineError, TTSTimeoutError
from .base import SpeechProvider

if TYPE_CHECKING:
    from ..config import CasevoiceConfig

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = (
    "edge-tts",
    "--file",
    "{text_file}",
    "--voice",
    "{voice}",
    "--write-media",
    "{output_file}",
)
DEFAULT_VOICES = ("sv-SE-MattiasNeural", "sv-SE-SofieNeural", "sv-SE-HilleviNeural")
DEFAULT_TIMEOUT = 10.0

# Azure/Edge neural voice names, e.g. "sv-SE-MattiasNeural"
NEURAL_VOICE_PATTERN = re.compile(r"^[a-z]{2,3}-[A-Z]{2}-\w+Neural$")


def is_neural_voice(voice: str | None) -> bool:
    """Return True if the voice id names a local neural voice."""
    return bool(voice) and NEURAL_VOICE_PATTERN.match(voice) is not None


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    await proc.wait()


class LocalProcessProvider(SpeechProvider):
    """Speech provider backed by an external engine process.

    Each attempt writes the text to a temporary file, runs the engine with a
    hard timeout, and reads the audio the engine wrote. The temporary
    directory is removed when the attempt ends, however it ends.
    """

    name = "local"

    def __init__(
        self,
        command: Sequence[str] = DEFAULT_COMMAND,
        voices: Sequence[str] = DEFAULT_VOICES,
        timeout: float = DEFAULT_TIMEOUT,
        temp_dir: Path | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            command: Engine argv template with {text_file}, {voice} and
                {output_file} placeholders
            voices: Voice candidates, in preference order
            timeout: Seconds an attempt may run before the process is killed
            temp_dir: Parent directory for per-attempt scratch files
                (defaults to the system temp directory)

        Raises:
            ValueError: If command or voices is empty, or timeout is not positive
        """
        if not command:
            raise ValueError("command cannot be empty")
        if not voices:
            raise ValueError("voices cannot be empty")
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")

        self.command = tuple(command)
        self.voices = tuple(voices)
        self.timeout = timeout
        self.temp_dir = temp_dir

    @classmethod
    def from_config(cls, config: "CasevoiceConfig") -> "LocalProcessProvider":
        return cls(
            command=config.local.command,
            voices=config.local.voices,
            timeout=config.local.timeout,
        )

    def voices_for(self, hint: str | None) -> list[str]:
        """Return the configured candidates, with a neural voice hint first."""
        if is_neural_voice(hint):
            return [hint] + [v for v in self.voices if v != hint]
        return list(self.voices)

    def build_command(self, text_file: Path, voice: str, output_file: Path) -> list[str]:
        """Fill the command template for one attempt."""
        return [
            arg.replace("{text_file}", str(text_file))
            .replace("{voice}", voice)
            .replace("{output_file}", str(output_file))
            for arg in self.command
        ]

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Run the engine once with the given voice.

        Args:
            text: Text to convert to speech
            voice: Engine voice identifier

        Returns:
            Audio bytes written by the engine

        Raises:
            ValueError: If text is empty
            TTSTimeoutError: If the engine did not finish within the timeout
            TTSEngineError: If the engine is missing, fails, or writes nothing
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        with tempfile.TemporaryDirectory(
            prefix="casevoice-", dir=self.temp_dir
        ) as workdir:
            text_file = Path(workdir) / "input.txt"
            output_file = Path(workdir) / "output.mp3"
            text_file.write_text(text, encoding="utf-8")

            cmd = self.build_command(text_file, voice, output_file)
            logger.debug(f"Running local engine {cmd[0]} with voice {voice}")
            try:
                proc = await asyncio.create_subprocess_exec(
                    *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
                )
            except OSError as e:
                raise TTSEngineError(
                    f"Could not start local engine '{cmd[0]}': {e}", original_error=e
                ) from e

            try:
                _, stderr = await asyncio.wait_for(
                    proc.communicate(), timeout=self.timeout
                )
            except asyncio.TimeoutError:
                await _kill(proc)
                raise TTSTimeoutError(
                    f"Local engine timed out after {self.timeout}s with voice {voice}",
                    self.timeout,
                ) from None
            except BaseException:
                # Cancelled or interrupted: the engine must not outlive workdir
                await _kill(proc)
                raise

            if proc.returncode != 0:
                raise TTSEngineError(
                    f"Local engine failed with code {proc.returncode} for voice "
                    f"{voice}: {stderr.decode(errors='replace').strip()}",
                    returncode=proc.returncode,
                )

            if not output_file.exists() or output_file.stat().st_size == 0:
                raise TTSEngineError(
                    f"Local engine produced no audio for voice {voice}",
                    returncode=proc.returncode,
                )

            return output_file.read_bytes()

    async def list_voices(self) -> list[dict]:
        """List the configured voice candidates."""
        return [{"id": v, "name": v, "provider": self.name} for v in self.voices]
