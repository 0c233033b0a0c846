"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from mimekit.config import reset_settings
from mimekit.tables_loader import reset_tables


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test sees settings and tables built from its own environment."""
    reset_settings()
    reset_tables()
    yield
    reset_settings()
    reset_tables()


@pytest.fixture
def long_subject_value():
    """Header value with non-ASCII words spread over most of the line."""
    return (
        "Testin command line kirja õkva kakva mõni tõnis kõllas põllas "
        "tõllas rõllas jušla kušla tušla musla"
    )


@pytest.fixture
def tere_words():
    """Twenty space separated 'tere' words, longer than one 76 character line."""
    return " ".join(["tere"] * 20)
