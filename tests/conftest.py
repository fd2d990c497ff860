"""
Pytest configuration and shared fixtures for ReserveProof tests.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator, List, Optional

import pytest


# Demo accounts committed by the default configuration
DEMO_LEAVES = [f"({i},{i * 1111})" for i in range(1, 9)]

# Root of DEMO_LEAVES under ProofOfReserve_Leaf / ProofOfReserve_Branch
DEMO_ROOT_HEX = "b1231de33da17c23cebd80c104b88198e0914b0463d0e14db163605b904a7ba3"


def create_test_config_content(
    temp_dir: Path,
    accounts_file: Optional[Path] = None,
    mode: str = "tagged",
    listen_address: str = "127.0.0.1:3000",
    log_format: str = "json",
) -> str:
    """
    Generate test configuration YAML content.

    Logs go to a file inside `temp_dir` so command output stays clean.

    Args:
        temp_dir: Temporary directory for the log file.
        accounts_file: Optional CSV accounts file. If None, inline records are used.
        mode: Hashing mode.
        listen_address: Server listen address.
        log_format: "json" or "console".

    Returns:
        YAML configuration content as string.
    """
    if accounts_file is not None:
        accounts = f"""
accounts:
  file: {accounts_file}
"""
    else:
        accounts = """
accounts:
  records:
    - {id: 1, balance: 1111}
    - {id: 2, balance: 2222}
    - {id: 3, balance: 3333}
"""

    return f"""
hashing:
  mode: {mode}
  parallel_threshold: 100
{accounts}
server:
  listen_address: "{listen_address}"
  service_name: reserveproof-test

logging:
  level: INFO
  file: {temp_dir}/reserveproof.log
  format: {log_format}
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory that is cleaned up after test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def demo_leaves() -> List[str]:
    """The eight demo account leaves "(1,1111)" through "(8,8888)"."""
    return list(DEMO_LEAVES)


@pytest.fixture
def demo_root_hex() -> str:
    """Root of the demo leaves under the proof of reserve tags."""
    return DEMO_ROOT_HEX


@pytest.fixture
def sample_accounts_path(temp_dir: Path) -> Path:
    """
    Create a sample accounts CSV file holding the eight demo accounts.

    Returns:
        Path to accounts file.
    """
    accounts_path = temp_dir / "accounts.csv"
    rows = ["id,balance"] + [f"{i},{i * 1111}" for i in range(1, 9)]
    accounts_path.write_text("\n".join(rows) + "\n")
    return accounts_path


@pytest.fixture
def sample_config_path(temp_dir: Path) -> Path:
    """
    Create a sample configuration file with three inline accounts.

    Returns:
        Path to sample config file.
    """
    config_path = temp_dir / "config.yaml"
    config_path.write_text(create_test_config_content(temp_dir))
    return config_path


@pytest.fixture
def make_config_yaml(temp_dir: Path):
    """
    Factory fixture that writes a config file and returns its path.

    Usage:
        def test_something(make_config_yaml, sample_accounts_path):
            config_path = make_config_yaml(accounts_file=sample_accounts_path)
    """
    def _make_config(**kwargs) -> Path:
        config_path = temp_dir / "config.yaml"
        config_path.write_text(create_test_config_content(temp_dir, **kwargs))
        return config_path
    return _make_config


# Configure hypothesis for property-based testing
from hypothesis import settings, Verbosity

# Register custom profiles
settings.register_profile("reserveproof", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("reserveproof-ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("reserveproof-dev", max_examples=10, verbosity=Verbosity.verbose)

# Load profile from environment or use default
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "reserveproof"))
