"""
Pytest configuration and shared fixtures for parameter file tests.
"""

import pytest
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

PRM_DIR = Path(__file__).parent.parent / "examples" / "prm"


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def prm_dir():
    """Directory holding the sample parameter files."""
    return PRM_DIR


@pytest.fixture
def inflow_box_file():
    return PRM_DIR / "inflow_box.prm"


@pytest.fixture
def sinking_block_file():
    return PRM_DIR / "sinking_block.prm"
