"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import pytest

# Add project root to path for all tests
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture
def temp_log_dir(tmp_path):
    """Provide a temporary directory for log files."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir


@pytest.fixture
def sample_namespaces_response():
    """Sample siteinfo response (formatversion=2)."""
    return {
        "query": {
            "namespaces": {
                "-1": {"id": -1, "name": "Special", "canonical": "Special"},
                "0": {"id": 0, "name": ""},
                "2": {"id": 2, "name": "User", "canonical": "User"},
                "3": {"id": 3, "name": "User talk", "canonical": "User talk"},
                "14": {"id": 14, "name": "Category", "canonical": "Category"},
            },
            "namespacealiases": [
                {"id": 2, "alias": "U"},
            ],
        }
    }


@pytest.fixture
def sample_global_user_info():
    """Sample globaluserinfo result for a user active on two of three wikis."""
    return {
        "home": "enwiki",
        "id": 1234,
        "registration": "2020-01-01T00:00:00Z",
        "name": "Alice",
        "groups": [],
        "rights": [],
        "merged": [
            {
                "wiki": "enwiki",
                "url": "https://en.wikipedia.org",
                "timestamp": "2020-01-01T00:00:00Z",
                "method": "primary",
                "editcount": 12,
                "registration": "2020-01-01T00:00:00Z",
            },
            {
                "wiki": "dewiki",
                "url": "https://de.wikipedia.org",
                "timestamp": "2020-02-01T00:00:00Z",
                "method": "login",
                "editcount": 5,
                "registration": "2020-02-01T00:00:00Z",
            },
            {
                "wiki": "frwiki",
                "url": "https://fr.wikipedia.org",
                "timestamp": "2020-03-01T00:00:00Z",
                "method": "login",
                "editcount": 0,
                "registration": "",
                "blocked": {"expiry": "infinity", "reason": "spam"},
            },
        ],
    }
