"""Configuration management for casevoice.

Loads configuration from ~/.config/casevoice/config.toml (or the path in
CASEVOICE_CONFIG). Built-in defaults apply when no file exists.
Priority chain: CLI flags > env vars > config file > defaults.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn

CONFIG_DIR = Path.home() / ".config" / "casevoice"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = """\
# casevoice configuration

[speech]
# Tiers in fallback order. "local" runs an engine on this machine (free),
# "elevenlabs" calls the cloud API (paid, needs ELEVENLABS_API_KEY).
tiers = ["local", "elevenlabs"]

# Longer text is cut to this many characters before synthesis
max_text_length = 5000

[local]
# Engine command. {text_file}, {voice} and {output_file} are filled in per
# attempt; the text itself never appears on the command line.
command = [
    "edge-tts",
    "--file", "{text_file}",
    "--voice", "{voice}",
    "--write-media", "{output_file}",
]

# Voices tried in order until one succeeds
voices = ["sv-SE-MattiasNeural", "sv-SE-SofieNeural", "sv-SE-HilleviNeural"]

# Seconds before a hung engine process is killed
timeout = 10.0

[cloud]
# ElevenLabs voice and model used when the local tier fails
voice = "Hyidyy6OA9R3GpDKGwoZ"
model = "eleven_multilingual_v2"

[cache]
# Maximum cached phrases; results beyond this are returned but not stored
max_entries = 100

[http]
# Bind address: "127.0.0.1" = localhost only, "0.0.0.0" = allow LAN access
host = "127.0.0.1"
port = 8000

# Secrets are read from environment variables, not this file:
#   ELEVENLABS_API_KEY  - enables the elevenlabs tier
#   CASEVOICE_API_KEY   - required X-API-Key header for the HTTP API
"""


@dataclass(frozen=True)
class SpeechConfig:
    """Fallback ladder configuration."""

    tiers: tuple[str, ...]
    max_text_length: int


@dataclass(frozen=True)
class LocalEngineConfig:
    """Local synthesis engine configuration."""

    command: tuple[str, ...]
    voices: tuple[str, ...]
    timeout: float


@dataclass(frozen=True)
class CloudConfig:
    """Cloud synthesis configuration."""

    voice: str
    model: str
    api_key: str | None


@dataclass(frozen=True)
class CacheConfig:
    """Speech cache configuration."""

    max_entries: int


@dataclass(frozen=True)
class HTTPConfig:
    """HTTP API configuration."""

    host: str
    port: int
    api_key: str | None


@dataclass(frozen=True)
class CasevoiceConfig:
    """Top-level casevoice configuration."""

    speech: SpeechConfig
    local: LocalEngineConfig
    cloud: CloudConfig
    cache: CacheConfig
    http: HTTPConfig


_cached_config: CasevoiceConfig | None = None


def get_config_path() -> Path:
    """Return the config file path, honouring CASEVOICE_CONFIG."""
    override = os.getenv("CASEVOICE_CONFIG")
    return Path(override) if override else CONFIG_PATH


def generate_config(path: Path | None = None) -> Path:
    """Write the default config file and return its path."""
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG)
    return path


def _split_env(name: str) -> list[str] | None:
    value = os.getenv(name)
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _fail(message: str, path: Path) -> NoReturn:
    print(message, file=sys.stderr)
    print(f"Edit {path} or delete it to use the defaults.", file=sys.stderr)
    raise SystemExit(1)


def parse_config(data: dict[str, Any], path: Path = CONFIG_PATH) -> CasevoiceConfig:
    """Build a validated config from parsed TOML, applying env overrides.

    Missing sections and keys fall back to DEFAULT_CONFIG.

    Raises:
        SystemExit: If a value is invalid.
    """
    from .providers import ProviderRegistry

    defaults = tomllib.loads(DEFAULT_CONFIG)
    for section in defaults:
        if not isinstance(data.get(section, {}), dict):
            _fail(f"Invalid config values: [{section}] must be a table", path)
    merged = {
        section: {**values, **data.get(section, {})}
        for section, values in defaults.items()
    }
    speech = merged["speech"]
    local = merged["local"]
    cloud = merged["cloud"]
    cache = merged["cache"]
    http_cfg = merged["http"]

    problems = [
        f"{name} must be a list of strings"
        for name, value in (
            ("speech.tiers", speech["tiers"]),
            ("local.voices", local["voices"]),
            ("local.command", local["command"]),
        )
        if not _is_string_list(value)
    ]
    problems += [
        f"{name} must be a string"
        for name, value in (
            ("cloud.voice", cloud["voice"]),
            ("cloud.model", cloud["model"]),
            ("http.host", http_cfg["host"]),
        )
        if not isinstance(value, str)
    ]
    if problems:
        _fail(f"Invalid config values: {', '.join(problems)}", path)

    try:
        tiers = _split_env("CASEVOICE_TIERS") or list(speech["tiers"])
        voices = _split_env("CASEVOICE_LOCAL_VOICES") or list(local["voices"])
        max_text_length = int(
            os.getenv("CASEVOICE_MAX_TEXT_LENGTH", speech["max_text_length"])
        )
        timeout = float(os.getenv("CASEVOICE_LOCAL_TIMEOUT", local["timeout"]))
        max_entries = int(
            os.getenv("CASEVOICE_CACHE_MAX_ENTRIES", cache["max_entries"])
        )
        port = int(os.getenv("CASEVOICE_HTTP_PORT", http_cfg["port"]))
    except (TypeError, ValueError) as e:
        _fail(f"Invalid config value: {e}", path)

    known_tiers = ProviderRegistry.names()
    unknown_tiers = [tier for tier in tiers if tier not in known_tiers]
    if unknown_tiers:
        problems.append(
            f"speech.tiers has unknown tier(s) {', '.join(unknown_tiers)} "
            f"(available: {', '.join(known_tiers)})"
        )
    if max_text_length <= 0:
        problems.append("speech.max_text_length must be positive")
    if timeout <= 0:
        problems.append("local.timeout must be positive")
    if max_entries <= 0:
        problems.append("cache.max_entries must be positive")
    if not local["command"]:
        problems.append("local.command cannot be empty")
    if not voices:
        problems.append("local.voices cannot be empty")
    if problems:
        _fail(f"Invalid config values: {', '.join(problems)}", path)

    return CasevoiceConfig(
        speech=SpeechConfig(
            tiers=tuple(tiers),
            max_text_length=max_text_length,
        ),
        local=LocalEngineConfig(
            command=tuple(local["command"]),
            voices=tuple(voices),
            timeout=timeout,
        ),
        cloud=CloudConfig(
            voice=os.getenv("CASEVOICE_CLOUD_VOICE", cloud["voice"]),
            model=os.getenv("CASEVOICE_CLOUD_MODEL", cloud["model"]),
            api_key=os.getenv("ELEVENLABS_API_KEY") or None,
        ),
        cache=CacheConfig(max_entries=max_entries),
        http=HTTPConfig(
            host=os.getenv("CASEVOICE_HTTP_HOST", http_cfg["host"]),
            port=port,
            api_key=os.getenv("CASEVOICE_API_KEY") or None,
        ),
    )


def load_config(path: Path | None = None) -> CasevoiceConfig:
    """Load configuration from the config file with env var overrides.

    The default location is read once and memoized; an explicit path is
    always re-read.

    Returns:
        Loaded and validated CasevoiceConfig.

    Raises:
        SystemExit: If the config file cannot be parsed or is invalid.
    """
    global _cached_config
    if path is None and _cached_config is not None:
        return _cached_config

    config_path = path or get_config_path()
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            _fail(f"Cannot parse {config_path}: {e}", config_path)

    config = parse_config(data, config_path)
    if path is None:
        _cached_config = config
    return config
