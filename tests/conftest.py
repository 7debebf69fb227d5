"""
Module: conftest.py

Author: Michael Economou
Date: 2026-02-15

Global pytest configuration and fixtures for the modkeep test suite.
Includes CI-friendly setup for PyQt5 testing and common fixtures.
"""

import os
import sys

# Headless CI: use the offscreen Qt platform unless one is already configured
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# Add project root to sys.path so 'modkeep' imports without installation
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest

from modkeep.models.content_item import ContentType, Profile
from tests.mocks import FakeContentStore, FakeHasher, FakeMetadataService, FakeRegistry


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line("markers", "gui: mark test as requiring GUI")
    config.addinivalue_line("markers", "local_only: mark test as local environment only")


def pytest_collection_modifyitems(session, config, items):
    """Skip GUI tests on CI."""
    _ = session
    _ = config

    is_ci = "CI" in os.environ or "GITHUB_ACTIONS" in os.environ
    if is_ci:
        skip_gui = pytest.mark.skip(reason="GUI tests don't work on CI")
        skip_local = pytest.mark.skip(reason="Local-only tests skipped on CI")
        for item in items:
            if "gui" in item.keywords:
                item.add_marker(skip_gui)
            if "local_only" in item.keywords:
                item.add_marker(skip_local)


@pytest.fixture
def profile() -> Profile:
    """Fabric 1.20.1 profile rooted nowhere in particular."""
    return Profile(id="p-1", name="Test Profile", loader="fabric", game_version="1.20.1")


@pytest.fixture
def content_type() -> ContentType:
    return ContentType.MOD


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def store() -> FakeContentStore:
    return FakeContentStore()


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def metadata() -> FakeMetadataService:
    return FakeMetadataService()
