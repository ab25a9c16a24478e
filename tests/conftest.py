"""Pytest configuration and fixtures.

Test Markers:
    - Default: Unit tests run automatically
    - @pytest.mark.manual: Integration tests against real services
    - @pytest.mark.slow: Tests that take more than a few seconds

Run commands:
    pytest                          # Run unit tests only (default)
    pytest -m manual                # Run manual/integration tests
    pytest -m "not slow"            # Skip slow tests
    pytest -m ""                    # Run ALL tests (no filter)
"""

import pytest
from faker import Faker


@pytest.fixture(scope='session')
def faker() -> Faker:
    return Faker()


@pytest.fixture(autouse=True)
def output_dir(tmp_path, monkeypatch):
    """Write generated files under a per-test temp dir."""
    from reelforge.core.configs import app_config

    monkeypatch.setattr(app_config, 'OUTPUT_DIR', str(tmp_path / 'generated'))
    return tmp_path / 'generated'


@pytest.fixture(autouse=True)
def secret_auth_disabled(monkeypatch):
    """Workflows skip secret validation unless a test opts in."""
    from reelforge.core.configs import app_config

    monkeypatch.setattr(app_config, 'WORKFLOW_SECRET_ENABLED', False)


# =============================================================================
# Temporal Fixtures for Manual Tests
# =============================================================================


@pytest.fixture
async def temporal_client():
    """Get a Temporal client connected to the real server.

    Only used for manual tests.
    """
    from temporalio.client import Client
    from temporalio.contrib.pydantic import pydantic_data_converter

    from reelforge.core.configs import app_config

    return await Client.connect(
        app_config.TEMPORAL_HOST,
        namespace=app_config.TEMPORAL_NAMESPACE,
        data_converter=pydantic_data_converter,
    )


@pytest.fixture(scope='session')
def task_queue():
    """Get the configured task queue."""
    from reelforge.core.configs import app_config

    return app_config.TEMPORAL_TASK_QUEUE
