"""Unit tests for configuration schemas and loading."""

from pathlib import Path

import pytest

from berth.config.loader import ConfigurationLoader
from berth.config.schemas import CommandDefinition, CommandSpec, Tier, parse_command, parse_commands
from berth.config.settings import BerthSettings, load_settings
from berth.errors import ConfigParseError
from berth.shell.sanitizer import SanitizationMode


class TestParseCommand:
    """Test parsing of single command records."""

    def test_string_shorthand(self):
        definition = parse_command("up", "docker compose up -d")

        assert definition == CommandDefinition(name="up", command="docker compose up -d")
        assert definition.interactive
        assert definition.category == "custom"

    def test_full_record(self):
        definition = parse_command(
            "test",
            {
                "cmd": "docker compose exec php vendor/bin/phpunit $@",
                "description": "Run the test suite",
                "alias": "t",
                "category": "testing",
                "env": {"APP_ENV": "testing", "XDEBUG_MODE": None, "WORKERS": 4},
                "interactive": False,
            },
            tier=Tier.GLOBAL,
            path=Path("/tmp/.berth.yml"),
        )

        assert definition.aliases == ("t",)
        assert definition.category == "testing"
        assert definition.env == {"APP_ENV": "testing", "XDEBUG_MODE": "", "WORKERS": "4"}
        assert definition.interactive is False
        assert definition.origin is Tier.GLOBAL
        assert definition.source == Path("/tmp/.berth.yml")
        assert definition.summary == "Run the test suite"

    def test_summary_falls_back_to_help_then_command(self):
        assert parse_command("a", {"cmd": "x", "help": "Longer"}).summary == "Longer"
        assert parse_command("b", "ls").summary == "Run: ls"

    @pytest.mark.parametrize(
        "value",
        [
            {"description": "no cmd"},
            {"cmd": ""},
            {"cmd": "   "},
            {"cmd": "ls", "env": ["A=1"]},
            ["ls"],
            None,
        ],
    )
    def test_invalid_records(self, value):
        with pytest.raises(ConfigParseError) as exc_info:
            parse_command("broken", value)

        assert exc_info.value.field_path == "commands.broken"
        assert "error parsing command broken" in str(exc_info.value)

    def test_invalid_name(self):
        with pytest.raises(ConfigParseError):
            parse_command("two words", "ls")

    def test_circular_reference_by_name(self):
        with pytest.raises(ConfigParseError) as exc_info:
            parse_command("deploy", "berth deploy --force")

        assert "circular reference" in str(exc_info.value)

    def test_circular_reference_by_alias(self):
        with pytest.raises(ConfigParseError):
            parse_command("deploy", {"cmd": "berth d", "alias": "d"})

    def test_calling_another_command_is_not_circular(self):
        definition = parse_command("ci", "berth lint && berth deploy-staging")
        assert definition.command.startswith("berth lint")

    def test_alias_equal_to_name_is_dropped(self):
        assert parse_command("up", {"cmd": "ls", "alias": "up"}).aliases == ()


class TestParseCommands:
    """Test parsing of whole command sections."""

    def test_parses_every_entry(self):
        commands = parse_commands({"up": "docker compose up", "down": {"cmd": "docker compose down"}})
        assert sorted(commands) == ["down", "up"]

    def test_one_invalid_entry_fails_the_section(self):
        with pytest.raises(ConfigParseError):
            parse_commands({"up": "docker compose up", "bad": {"description": "x"}})


class TestCommandSpec:
    """Test the pydantic record schema."""

    def test_blank_alias_is_none(self):
        assert CommandSpec(cmd="ls", alias=" ").alias is None

    def test_unknown_keys_ignored(self):
        assert CommandSpec.model_validate({"cmd": "ls", "extra": 1}).cmd == "ls"


class TestConfigurationLoader:
    """Test loading YAML files."""

    def test_load_commands(self, temp_dir, config_writer):
        path = config_writer(temp_dir, {"up": "docker compose up -d", "logs": {"cmd": "docker compose logs -f $@"}})

        commands = ConfigurationLoader.load_commands(path)

        assert commands["up"].command == "docker compose up -d"
        assert commands["logs"].source == path

    def test_empty_file(self, temp_dir):
        path = temp_dir / ".berth.yml"
        path.write_text("")

        assert ConfigurationLoader.load_commands(path) == {}

    def test_other_sections_ignored(self, temp_dir):
        path = temp_dir / ".berth.yml"
        path.write_text("defaults:\n  docker:\n    auto_start: true\ncommands:\n  up: docker compose up\n")

        assert list(ConfigurationLoader.load_commands(path)) == ["up"]

    def test_malformed_yaml(self, temp_dir):
        path = temp_dir / ".berth.yml"
        path.write_text("commands: [unclosed\n")

        with pytest.raises(ConfigParseError) as exc_info:
            ConfigurationLoader.load_commands(path)

        assert exc_info.value.config_path == path

    def test_non_mapping_top_level(self, temp_dir):
        path = temp_dir / ".berth.yml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigParseError):
            ConfigurationLoader.load_yaml_config(path)

    def test_commands_must_be_mapping(self, temp_dir):
        path = temp_dir / ".berth.yml"
        path.write_text("commands:\n  - up\n")

        with pytest.raises(ConfigParseError):
            ConfigurationLoader.load_commands(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigParseError):
            ConfigurationLoader.load_yaml_config(temp_dir / "missing.yml")


class TestBerthSettings:
    """Test environment-driven settings."""

    def test_defaults(self):
        settings = BerthSettings()

        assert settings.sanitize_mode == "strict"
        assert settings.shell == "sh"
        assert settings.sanitizer_config().mode is SanitizationMode.STRICT

    def test_from_environment(self, monkeypatch, temp_dir):
        monkeypatch.setenv("BERTH_SANITIZE_MODE", "warn")
        monkeypatch.setenv("BERTH_SANITIZE_ALLOW_PIPES", "yes")
        monkeypatch.setenv("BERTH_HOME", str(temp_dir))

        settings = BerthSettings()
        config = settings.sanitizer_config()

        assert config.mode is SanitizationMode.WARN
        assert config.allow_pipes
        assert not config.allow_redirects
        assert settings.home_dir == temp_dir

    def test_unknown_mode_warns_on_stderr(self, monkeypatch, capsys):
        monkeypatch.setenv("BERTH_SANITIZE_MODE", "paranoid")

        config = BerthSettings().sanitizer_config()

        assert config.mode is SanitizationMode.STRICT
        captured = capsys.readouterr()
        assert "Unknown BERTH_SANITIZE_MODE 'paranoid', using 'strict'" in captured.err

    def test_load_settings(self, monkeypatch):
        monkeypatch.setenv("BERTH_SHELL", "bash")

        assert load_settings().shell == "bash"

    def test_load_settings_invalid_boolean(self, monkeypatch):
        monkeypatch.setenv("BERTH_SANITIZE_ALLOW_PIPES", "maybe")

        with pytest.raises(ConfigParseError) as exc_info:
            load_settings()

        error = exc_info.value
        assert error.error_code == "CONFIG_INVALID_SETTINGS"
        assert error.field_path == "BERTH_SANITIZE_ALLOW_PIPES"
        assert "BERTH_SANITIZE_ALLOW_PIPES" in error.message
        assert error.context.suggestions
