"""
Pytest configuration for Keel tests.

Tests run against keel.settings_test (in-memory SQLite, segmentation off).
"""

import os

import django
import pytest


def pytest_configure():
    """Configure Django settings before tests run."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "keel.settings_test")
    django.setup()


@pytest.fixture
def client():
    """Django test client fixture."""
    from django.test import Client
    return Client()
