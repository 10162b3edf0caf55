"""Pytest configuration and shared fixtures for all tests."""

# Add project root to path
import os
import sys
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import yaml
from loguru import logger
from typer.testing import CliRunner

sys.path.insert(0, str(Path(__file__).parent.parent))

from berth.errors import ExecutionError
from berth.shell.sanitizer import CommandSanitizer, SanitizationMode, SanitizerConfig
from berth.utils.console import reset_consoles


# ==============================================================================
# Environment isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Strip BERTH_* variables and cached consoles between tests."""
    for key in list(os.environ):
        if key.startswith("BERTH_"):
            monkeypatch.delenv(key, raising=False)
    reset_consoles()
    yield
    reset_consoles()


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI runner for testing commands."""
    return CliRunner()


# ==============================================================================
# Temporary Directory and Project Fixtures
# ==============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def home_dir(temp_dir: Path) -> Path:
    """A fake home directory, kept apart from the project tree."""
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """A project root (with .git) containing a nested working directory."""
    root = temp_dir / "workspace" / "project"
    (root / ".git").mkdir(parents=True)
    (root / "services" / "api").mkdir(parents=True)
    return root


@pytest.fixture
def in_project(project_dir: Path) -> Generator[Path, None, None]:
    """Change into the project root for the duration of the test."""
    original_cwd = Path.cwd()
    os.chdir(project_dir)
    try:
        yield project_dir
    finally:
        os.chdir(original_cwd)


def write_config(directory: Path, commands: Dict[str, Any], name: str = ".berth.yml") -> Path:
    """Write a config file with a ``commands:`` section."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    with open(path, "w") as f:
        yaml.safe_dump({"commands": commands}, f)
    return path


@pytest.fixture
def config_writer():
    """Expose ``write_config`` to tests."""
    return write_config


# ==============================================================================
# Logging
# ==============================================================================


@pytest.fixture
def log_records() -> Generator[List[Dict[str, Any]], None, None]:
    """Capture loguru records emitted during the test."""
    records: List[Dict[str, Any]] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    try:
        yield records
    finally:
        logger.remove(sink_id)


# ==============================================================================
# Sanitizers and executors
# ==============================================================================


@pytest.fixture
def sanitizer_for():
    """Build a sanitizer for a mode name."""

    def build(mode: str = "strict", **flags: bool) -> CommandSanitizer:
        return CommandSanitizer(SanitizerConfig(mode=SanitizationMode(mode), **flags))

    return build


class FakeExecutor:
    """Records commands instead of running them."""

    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.calls: List[Dict[str, Any]] = []
        self.shell = "sh"

    def run(
        self,
        command: str,
        env: Optional[Dict[str, str]] = None,
        interactive: bool = True,
    ) -> int:
        self.calls.append({"command": command, "env": dict(env or {}), "interactive": interactive})
        if self.exit_code != 0:
            raise ExecutionError.non_zero_exit(command, self.exit_code)
        return 0

    @property
    def commands(self) -> List[str]:
        return [call["command"] for call in self.calls]


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """An executor that records instead of spawning a shell."""
    return FakeExecutor()
