"""
Pytest configuration and fixtures for testing.
"""

import sys
from pathlib import Path

import pytest

# Add project root and bin/ to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(project_root / "bin"))

from scamsentry.pipeline import ScanPipeline


@pytest.fixture(scope="session")
def pipeline():
    """Pipeline over the built-in pattern table."""
    return ScanPipeline.from_patterns()


SAMPLE_SCAMS = [
    "URGENT! Your GCash account has been suspended. Verify your account now by clicking bit.ly/gcash123 and enter your OTP immediately.",
    "Congratulations! You won PHP 500,000 cash prize! Claim your reward now. Contact our official customer service.",
    "From BPI Security Team: Unusual activity detected. Please i-verify your account agad by sending your OTP.",
    "FREE LOAN offer! Instant approval, no collateral needed. Kumita ng malaki with our investment program.",
]


@pytest.fixture
def sample_scams():
    return list(SAMPLE_SCAMS)
