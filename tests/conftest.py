"""
Pytest configuration and shared fixtures for test suite.

Provides a loguru capture sink, environment isolation, and a throwaway git
repository for integration tests.
"""

import os

import pytest
from loguru import logger

from helpers import GitRepo


@pytest.fixture
def log_messages():
    """Capture every loguru message (TRACE and above) emitted during a test."""
    messages = []
    handler_id = logger.add(lambda msg: messages.append(msg.record['message']), level='TRACE', format='{message}')
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def git_repo(tmp_path):
    """Create an initialized, empty git repository on branch 'main'."""
    repo_path = tmp_path / 'repo'
    repo_path.mkdir()
    return GitRepo(repo_path).init()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every TAGVER_* variable from the environment."""
    for key in list(os.environ):
        if key.upper().startswith('TAGVER_'):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
