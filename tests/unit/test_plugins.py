"""Unit tests for plugin command discovery."""

from unittest.mock import Mock, patch

import pytest

from berth.config.schemas import Tier
from berth.errors import PluginError
from berth.plugins.base import CommandPlugin
from berth.plugins.loader import (
    PluginCommandLoader,
    commands_file_for,
    iter_plugin_command_files,
    plugin_directories,
)


class DatabasePlugin(CommandPlugin):
    name = "database"
    version = "2.1.0"
    description = "Database helpers"

    def get_commands(self):
        return {
            "db": {"cmd": "docker compose exec mysql mysql $@", "category": "database"},
            "migrate": "php artisan migrate",
        }


def create_plugin():
    return DatabasePlugin()


def entry_point(name, target):
    ep = Mock()
    ep.name = name
    ep.load.return_value = target
    return ep


@pytest.fixture
def plugin_dir(home_dir):
    directory = home_dir / ".berth" / "plugins"
    directory.mkdir(parents=True)
    return directory


class TestPluginDirectories:
    """Test plugin directory lookup order."""

    def test_home_then_project(self, home_dir, project_dir):
        home_plugins = home_dir / ".berth" / "plugins"
        root_plugins = project_dir / ".berth" / "plugins"
        cwd_plugins = project_dir / "services" / ".berth" / "plugins"
        for directory in (home_plugins, root_plugins, cwd_plugins):
            directory.mkdir(parents=True)

        directories = plugin_directories(project_dir / "services", home_dir)

        assert directories == [home_plugins, cwd_plugins, root_plugins]

    def test_stops_at_git_root(self, home_dir, project_dir):
        outside = project_dir.parent / ".berth" / "plugins"
        outside.mkdir(parents=True)

        assert plugin_directories(project_dir, home_dir) == []

    def test_missing_directories_skipped(self, home_dir, project_dir):
        assert plugin_directories(project_dir, home_dir) == []


class TestCommandFiles:
    """Test locating command files beside plugins."""

    def test_directory_plugin(self, plugin_dir):
        (plugin_dir / "docker").mkdir()
        commands = plugin_dir / "docker" / "commands.yml"
        commands.write_text("commands: {}\n")

        assert commands_file_for(plugin_dir / "docker") == commands

    def test_named_commands_file(self, plugin_dir):
        (plugin_dir / "berth-db").write_text("#!/bin/sh\n")
        named = plugin_dir / "berth-db.commands.yml"
        named.write_text("commands: {}\n")
        (plugin_dir / "commands.yml").write_text("commands: {}\n")

        assert commands_file_for(plugin_dir / "berth-db") == named

    def test_shared_commands_file(self, plugin_dir):
        (plugin_dir / "berth-db").write_text("#!/bin/sh\n")
        shared = plugin_dir / "commands.yml"
        shared.write_text("commands: {}\n")

        assert commands_file_for(plugin_dir / "berth-db") == shared

    def test_plugin_without_commands(self, plugin_dir):
        (plugin_dir / "berth-lonely").write_text("#!/bin/sh\n")
        assert commands_file_for(plugin_dir / "berth-lonely") is None

    def test_iteration_skips_yaml_and_duplicates(self, plugin_dir):
        (plugin_dir / "alpha").write_text("")
        (plugin_dir / "beta").write_text("")
        (plugin_dir / "commands.yml").write_text("commands: {}\n")

        found = list(iter_plugin_command_files(plugin_dir))

        assert found == [("alpha", plugin_dir / "commands.yml")]


class TestPluginCommandLoader:
    """Test loading plugin command sets."""

    def test_directory_plugins(self, plugin_dir, home_dir, project_dir, config_writer):
        config_writer(plugin_dir / "docker", {"ps": "docker compose ps"}, name="commands.yml")
        (plugin_dir / "zeta").write_text("")
        config_writer(plugin_dir, {"ps": "zeta ps", "zeta": "zeta run $@"}, name="zeta.commands.yml")

        loader = PluginCommandLoader(cwd=project_dir, home=home_dir, use_entry_points=False)
        commands = loader.load_commands()

        assert commands["ps"].command == "docker compose ps"
        assert commands["zeta"].origin is Tier.PLUGIN
        assert loader.plugin_commands == {"docker": ["ps"], "zeta": ["ps", "zeta"]}

    def test_invalid_commands_file_recorded(self, plugin_dir, home_dir, project_dir):
        (plugin_dir / "broken").mkdir()
        (plugin_dir / "broken" / "commands.yml").write_text("commands:\n  x: {}\n")

        loader = PluginCommandLoader(cwd=project_dir, home=home_dir, use_entry_points=False)

        assert loader.load_commands() == {}
        assert len(loader.errors) == 1

    @pytest.mark.parametrize("target", [DatabasePlugin, DatabasePlugin(), create_plugin])
    def test_entry_points(self, home_dir, project_dir, target):
        loader = PluginCommandLoader(cwd=project_dir, home=home_dir)

        with patch("berth.plugins.loader.importlib.metadata.entry_points") as entry_points:
            entry_points.return_value = [entry_point("db-tools", target)]
            commands = loader.load_commands()

        entry_points.assert_called_once_with(group="berth.plugins")
        assert commands["db"].category == "database"
        assert commands["migrate"].command == "php artisan migrate"
        assert loader.plugins["database"].version == "2.1.0"

    def test_entry_point_default_name(self, home_dir, project_dir):
        class Anonymous(CommandPlugin):
            def get_commands(self):
                return {"hello": "echo hello"}

        loader = PluginCommandLoader(cwd=project_dir, home=home_dir)
        with patch("berth.plugins.loader.importlib.metadata.entry_points") as entry_points:
            entry_points.return_value = [entry_point("greeter", Anonymous)]
            loader.load_commands()

        assert loader.plugin_commands == {"greeter": ["hello"]}

    def test_bad_entry_points_recorded(self, home_dir, project_dir):
        failing = Mock()
        failing.name = "exploding"
        failing.load.side_effect = ImportError("no module named exploding")

        loader = PluginCommandLoader(cwd=project_dir, home=home_dir)
        with patch("berth.plugins.loader.importlib.metadata.entry_points") as entry_points:
            entry_points.return_value = [failing, entry_point("not-a-plugin", object())]
            commands = loader.load_commands()

        assert commands == {}
        assert len(loader.errors) == 2
        assert all(isinstance(error, PluginError) for error in loader.errors)
