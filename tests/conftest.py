import os
import sys

import pytest


TEST_KEY = "secret" * 10


def pytest_configure():
    # Ensure `src/` is importable as top-level for `common.*` / `settings.*` imports
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


@pytest.fixture(autouse=True)
def settings_config():
    """Install a known encryption key and clear feature overrides per test."""
    from common import config, features

    cfg = config.Config(encryption=config.EncryptionConfig(key=TEST_KEY))
    config.set_config(cfg)
    features.reset()
    yield cfg
    config.reset_config()
    features.reset()
