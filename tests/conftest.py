"""Test configuration and fixtures."""

import pytest

from completion_contracts.runtime import ExecutionContext, InMemoryArtifactStore
from completion_contracts.validators import ValidatorRegistry, build_default_registry


@pytest.fixture
def store() -> InMemoryArtifactStore:
    """Create an empty in-memory artifact store."""
    return InMemoryArtifactStore(name="test")


@pytest.fixture
def context(store: InMemoryArtifactStore) -> ExecutionContext:
    """Create an execution context backed by the in-memory store."""
    return ExecutionContext(artifacts=store, run_id="run-test")


@pytest.fixture
def registry() -> ValidatorRegistry:
    """Create the default validator registry."""
    return build_default_registry()
