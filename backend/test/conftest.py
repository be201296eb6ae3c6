"""
Shared fixtures for the snowflake id service tests.
"""

import os
from collections import deque

import pytest

# Keep the app's startup quick and deterministic; these have to be set before the
# app module is imported since Settings reads the environment at import time.
os.environ.setdefault("RUN_STARTUP_BENCHMARK", "false")
os.environ.setdefault("DATACENTER_ID", "0")
os.environ.setdefault("MACHINE_ID", "0")

from fastapi.testclient import TestClient

from snowflake_service import app
from snowflake_service.services.id_service import IdService, get_id_service
from snowflake_service.services.snowflake import SnowflakeGenerator

# Nov 14, 2023; any fixed millisecond after the epoch works
FROZEN_TIME = 1700000000000


class FakeClock:
  """Millisecond clock that stays frozen until a test moves it.

  Values pushed onto `queue` are handed out one per read before falling back to `now`,
  which lets a test script exactly what the generator sees while it spins.
  """

  def __init__(self, now: int = FROZEN_TIME):
    self.now = now
    self.queue = deque()
    self.reads = 0

  def __call__(self) -> int:
    self.reads += 1
    if self.queue:
      self.now = self.queue.popleft()
    return self.now


@pytest.fixture
def clock() -> FakeClock:
  return FakeClock()


@pytest.fixture
def frozen_generator(clock) -> SnowflakeGenerator:
  return SnowflakeGenerator(datacenter_id=1, machine_id=1, clock=clock)


@pytest.fixture
def generator() -> SnowflakeGenerator:
  return SnowflakeGenerator(datacenter_id=1, machine_id=1)


@pytest.fixture
def client(frozen_generator):
  """Test client whose routes use a (1, 1) generator on the fake clock."""
  id_service = IdService(frozen_generator)
  app.dependency_overrides[get_id_service] = lambda: id_service
  with TestClient(app) as test_client:
    yield test_client
  app.dependency_overrides.clear()
