from __future__ import annotations

import pytest

from gauge_agent.core.delta_store import DeltaStore

from .helpers.fakes import FakeAgentLogger


@pytest.fixture
def store():
    return DeltaStore()


@pytest.fixture
def agent_logger():
    return FakeAgentLogger()


@pytest.fixture
def test_logger(agent_logger):
    return agent_logger.get_logger()
