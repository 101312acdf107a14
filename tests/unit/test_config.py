"""Unit tests for configuration loading."""

import sys
import tomllib
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from casevoice import config as config_module
from casevoice.config import (
    DEFAULT_CONFIG,
    generate_config,
    get_config_path,
    load_config,
    parse_config,
)


class TestDefaults:
    """Test configuration when no file exists."""

    def test_missing_file_uses_defaults(self, isolated_config: Path) -> None:
        """Test a fresh install works without a config file."""
        config = load_config()

        assert not isolated_config.exists()
        assert config.speech.tiers == ("local", "elevenlabs")
        assert config.speech.max_text_length == 5000
        assert config.local.voices == (
            "sv-SE-MattiasNeural",
            "sv-SE-SofieNeural",
            "sv-SE-HilleviNeural",
        )
        assert config.local.timeout == 10.0
        assert config.local.command[0] == "edge-tts"
        assert config.cloud.voice == "Hyidyy6OA9R3GpDKGwoZ"
        assert config.cloud.model == "eleven_multilingual_v2"
        assert config.cloud.api_key is None
        assert config.cache.max_entries == 100
        assert config.http.host == "127.0.0.1"
        assert config.http.port == 8000
        assert config.http.api_key is None

    def test_default_config_is_valid_toml(self) -> None:
        """Test the shipped template parses."""
        data = tomllib.loads(DEFAULT_CONFIG)

        assert set(data) == {"speech", "local", "cloud", "cache", "http"}

    def test_config_path_honours_env(self, isolated_config: Path) -> None:
        """Test CASEVOICE_CONFIG selects the file."""
        assert get_config_path() == isolated_config

    def test_generate_config_writes_template(self, isolated_config: Path) -> None:
        """Test generate_config creates parent directories and the file."""
        path = generate_config()

        assert path == isolated_config
        assert path.read_text() == DEFAULT_CONFIG


class TestFileAndEnvOverrides:
    """Test the priority chain: env vars over file over defaults."""

    def test_file_values_override_defaults(self, isolated_config: Path) -> None:
        """Test partial files merge with defaults."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            '[local]\ntimeout = 4.5\nvoices = ["sv-SE-SofieNeural"]\n'
            "[cache]\nmax_entries = 10\n"
        )

        config = load_config()

        assert config.local.timeout == 4.5
        assert config.local.voices == ("sv-SE-SofieNeural",)
        assert config.cache.max_entries == 10
        assert config.speech.max_text_length == 5000

    def test_env_overrides_file(self, isolated_config: Path, monkeypatch) -> None:
        """Test environment variables beat the file."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[cache]\nmax_entries = 10\n")
        monkeypatch.setenv("CASEVOICE_CACHE_MAX_ENTRIES", "25")
        monkeypatch.setenv("CASEVOICE_TIERS", "local")
        monkeypatch.setenv("CASEVOICE_LOCAL_VOICES", "sv-SE-HilleviNeural, sv-SE-SofieNeural")
        monkeypatch.setenv("CASEVOICE_HTTP_PORT", "9001")

        config = load_config()

        assert config.cache.max_entries == 25
        assert config.speech.tiers == ("local",)
        assert config.local.voices == ("sv-SE-HilleviNeural", "sv-SE-SofieNeural")
        assert config.http.port == 9001

    def test_secrets_come_from_env(self, monkeypatch) -> None:
        """Test API keys are read from the environment."""
        monkeypatch.setenv("ELEVENLABS_API_KEY", "sk-eleven")
        monkeypatch.setenv("CASEVOICE_API_KEY", "gateway-secret")

        config = load_config()

        assert config.cloud.api_key == "sk-eleven"
        assert config.http.api_key == "gateway-secret"

    def test_empty_secret_treated_as_missing(self, monkeypatch) -> None:
        """Test an empty key does not enable the cloud tier."""
        monkeypatch.setenv("ELEVENLABS_API_KEY", "")

        assert load_config().cloud.api_key is None


class TestValidation:
    """Test invalid configuration is reported and exits."""

    def test_invalid_number_exits(self, monkeypatch, capsys) -> None:
        """Test a non-numeric override exits with a message."""
        monkeypatch.setenv("CASEVOICE_LOCAL_TIMEOUT", "soon")

        with pytest.raises(SystemExit) as exc_info:
            load_config()

        assert exc_info.value.code == 1
        assert "Invalid config value" in capsys.readouterr().err

    def test_non_positive_values_exit(self, capsys) -> None:
        """Test every non-positive limit is listed."""
        with pytest.raises(SystemExit):
            parse_config(
                {"speech": {"max_text_length": 0}, "cache": {"max_entries": -1}}
            )

        err = capsys.readouterr().err
        assert "speech.max_text_length must be positive" in err
        assert "cache.max_entries must be positive" in err

    def test_empty_voices_exit(self, capsys) -> None:
        """Test the local tier needs at least one voice."""
        with pytest.raises(SystemExit):
            parse_config({"local": {"voices": []}})

        assert "local.voices cannot be empty" in capsys.readouterr().err

    def test_unknown_tier_from_env_exits(self, monkeypatch, capsys) -> None:
        """Test a misspelled tier is reported at load time, not as a KeyError later."""
        monkeypatch.setenv("CASEVOICE_TIERS", "locl")

        with pytest.raises(SystemExit) as exc_info:
            load_config()

        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "unknown tier(s) locl" in err
        assert "available: local, elevenlabs" in err

    def test_unknown_tier_from_file_exits(self, isolated_config: Path, capsys) -> None:
        """Test tier names in the file are checked against the registered tiers."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text('[speech]\ntiers = ["local", "kokoro"]\n')

        with pytest.raises(SystemExit):
            load_config()

        assert "unknown tier(s) kokoro" in capsys.readouterr().err

    @pytest.mark.parametrize(
        "toml, name",
        [
            ('[speech]\ntiers = "local"\n', "speech.tiers"),
            ('[local]\ncommand = "edge-tts"\n', "local.command"),
            ('[local]\nvoices = "sv-SE-SofieNeural"\n', "local.voices"),
            ("[local]\nvoices = [1, 2]\n", "local.voices"),
        ],
    )
    def test_non_list_values_exit(
        self, isolated_config: Path, capsys, toml: str, name: str
    ) -> None:
        """Test tiers, voices and command must be lists of strings."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(toml)

        with pytest.raises(SystemExit) as exc_info:
            load_config()

        assert exc_info.value.code == 1
        assert f"{name} must be a list of strings" in capsys.readouterr().err

    def test_non_string_scalar_exits(self, capsys) -> None:
        """Test string settings reject other TOML types."""
        with pytest.raises(SystemExit):
            parse_config({"cloud": {"voice": 42}, "http": {"host": ["0.0.0.0"]}})

        err = capsys.readouterr().err
        assert "cloud.voice must be a string" in err
        assert "http.host must be a string" in err

    def test_section_must_be_table(self, capsys) -> None:
        """Test a section given as a plain value is reported."""
        with pytest.raises(SystemExit):
            parse_config({"cache": 100})

        assert "[cache] must be a table" in capsys.readouterr().err

    def test_unparseable_file_exits(self, isolated_config: Path, capsys) -> None:
        """Test broken TOML is reported with the file path."""
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[speech\n")

        with pytest.raises(SystemExit):
            load_config()

        assert str(isolated_config) in capsys.readouterr().err


class TestMemoization:
    """Test the default config is loaded once."""

    def test_default_location_is_memoized(self, monkeypatch) -> None:
        """Test later env changes do not affect the memoized config."""
        first = load_config()
        monkeypatch.setenv("CASEVOICE_CACHE_MAX_ENTRIES", "7")

        assert load_config() is first
        assert config_module._cached_config is first

    def test_explicit_path_always_reread(self, tmp_path: Path) -> None:
        """Test an explicit path bypasses the memoized config."""
        path = tmp_path / "other.toml"
        path.write_text("[http]\nport = 8123\n")

        assert load_config(path).http.port == 8123
        assert config_module._cached_config is None
