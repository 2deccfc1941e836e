"""Shared fixtures for CTPH tests."""
import hashlib

import pytest


class MockContext:
    """Minimal mock for MCP Context used by tool tests."""
    def __init__(self):
        self.warnings = []
        self.errors = []
        self.infos = []

    async def warning(self, msg):
        self.warnings.append(msg)

    async def error(self, msg):
        self.errors.append(msg)

    async def info(self, msg):
        self.infos.append(msg)


@pytest.fixture
def mock_ctx():
    """Provide a MockContext for async tool tests."""
    return MockContext()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Redirect user config to a temporary directory and clear env overrides."""
    cfg_dir = tmp_path / ".ctph"
    cfg_dir.mkdir()
    cfg_file = cfg_dir / "config.json"
    monkeypatch.setattr("ctph.user_config.CONFIG_DIR", cfg_dir)
    monkeypatch.setattr("ctph.user_config.CONFIG_FILE", cfg_file)
    for env_var in ("CTPH_ELIMINATE_SEQUENCES", "CTPH_DO_NOT_TRUNCATE", "CTPH_MATCH_THRESHOLD"):
        monkeypatch.delenv(env_var, raising=False)
    return cfg_dir, cfg_file


def make_random_bytes(size, tag):
    """Pseudo-random bytes: SHA-256 digests of "<tag>:0", "<tag>:1", ... concatenated."""
    out = bytearray()
    i = 0
    while len(out) < size:
        out += hashlib.sha256(f"{tag}:{i}".encode()).digest()
        i += 1
    return bytes(out[:size])


@pytest.fixture(scope="session")
def random_blob():
    """20 KB of deterministic pseudo-random data."""
    return make_random_bytes(20000, "ctph")


@pytest.fixture(scope="session")
def other_random_blob():
    return make_random_bytes(20000, "other")


@pytest.fixture(scope="session")
def large_blob():
    """49000 bytes: large enough for the chosen level (768) to fill all 63 committed symbols."""
    return make_random_bytes(49000, "ctph")
