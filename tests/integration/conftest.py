"""Pytest configuration for integration tests."""

from pathlib import Path

import pytest

MIRROR_ENV_VARS = ["GITHUB_PAT_TOKEN", "GITHUB_API_URL", "SAVE_LOCATION", "DEBUG", "QUERY_BATCH_SIZE", "QUERY_PAGE_SIZE"]


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run every CLI test from an empty directory without the developer's mirror settings.

    Settings are read from the environment and from a .env file in the working
    directory, so both are cleared to keep the tests independent of the machine.
    """
    for name in MIRROR_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
