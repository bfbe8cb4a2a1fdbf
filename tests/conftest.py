"""Pytest configuration for phased testing.

Tests are organized by phase (f1, f2, f3, f4).
Only tests for the current phase and completed phases should run.
Future phase tests are automatically skipped.

Every test also runs with the database path override and the config file
pointed into its tmp_path, and the whole session is guarded against writes to
the real ./db and ./data trees.
"""

import hashlib
from pathlib import Path

import pytest

from vectorlab.config import app_config
from vectorlab.config.app_config import DB_PATH_ENV, clear_config_cache

# Current implementation phase
CURRENT_PHASE = 4

# Default locations of the SQLite store and the YAML config
PROTECTED_PATHS = (Path("db"), Path("data"))


def pytest_collection_modifyitems(config, items):
    """Skip tests from phases that haven't been implemented yet."""
    for item in items:
        # Extract phase from path (tests/f2/... -> 2)
        parts = item.fspath.strpath.split("/")
        for part in parts:
            if part.startswith("f") and part[1:].isdigit():
                test_phase = int(part[1:])
                if test_phase > CURRENT_PHASE:
                    item.add_marker(
                        pytest.mark.skip(
                            reason=f"Phase F{test_phase} not yet implemented (current: F{CURRENT_PHASE})"
                        )
                    )
                break


class PathGuard:
    """Fingerprints of a set of paths, taken at construction time."""

    def __init__(self, roots: tuple[Path, ...]):
        self.roots = roots
        self.before = self.fingerprint()

    def fingerprint(self) -> dict[str, str | None]:
        """Map every root and every file below it to a content hash.

        Missing roots map to None, directories to "dir".
        """
        prints: dict[str, str | None] = {}
        for root in self.roots:
            if not root.exists():
                prints[str(root)] = None
                continue
            prints[str(root)] = "dir" if root.is_dir() else _file_digest(root)
            for path in sorted(root.rglob("*")):
                prints[str(path)] = "dir" if path.is_dir() else _file_digest(path)
        return prints

    def changed(self) -> list[str]:
        """Paths created, removed or rewritten since construction."""
        after = self.fingerprint()
        return sorted(
            path
            for path in set(self.before) | set(after)
            if self.before.get(path) != after.get(path)
        )


def _file_digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


@pytest.fixture(scope="session", autouse=True)
def protected_paths():
    """Snapshot ./db and ./data before the first test, compare after the last."""
    guard = PathGuard(PROTECTED_PATHS)
    yield guard

    changed = guard.changed()
    if changed:
        pytest.fail(
            "Test suite wrote outside temporary directories:\n"
            + "\n".join(f"  - {path}" for path in changed)
        )


@pytest.fixture
def path_guard():
    """Build a PathGuard over arbitrary roots."""
    return PathGuard


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file and the database override into tmp_path."""
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config" / "app_config_v1.yaml")
    monkeypatch.setenv(DB_PATH_ENV, str(tmp_path / "isolated" / "vectorlab.db"))
    clear_config_cache()
    yield
    clear_config_cache()
