import logging

import pytest

from snowflake_service.config import Settings
from snowflake_service.services.logger import app_logger
from snowflake_service.services.id_service import (
  MAX_BATCH_SIZE,
  IdService,
  get_id_service,
  init_id_service,
)
from snowflake_service.services.snowflake import (
  ClockRegression,
  InvalidConfiguration,
  TWITTER_EPOCH,
  parse_id,
)

from conftest import FROZEN_TIME


class ListHandler(logging.Handler):
  def __init__(self):
    super().__init__()
    self.messages = []

  def emit(self, record):
    self.messages.append((record.levelno, record.getMessage()))


# app_logger doesn't propagate to the root logger, so caplog can't see it
@pytest.fixture
def captured_logs():
  handler = ListHandler()
  app_logger.addHandler(handler)
  yield handler.messages
  app_logger.removeHandler(handler)


@pytest.fixture
def id_service(frozen_generator) -> IdService:
  return IdService(frozen_generator)


def test_generate_id_uses_generator_identity(id_service):
  parsed = parse_id(id_service.generate_id())
  assert (parsed.datacenter_id, parsed.machine_id) == (1, 1)


def test_generate_ids_returns_unique_batch(generator):
  ids, duration_us = IdService(generator).generate_ids(500)
  assert len(ids) == 500
  assert len(set(ids)) == 500
  assert ids == sorted(ids)
  assert duration_us >= 0


@pytest.mark.parametrize("count", [0, -3, MAX_BATCH_SIZE + 1])
def test_generate_ids_rejects_out_of_range_count(id_service, count):
  with pytest.raises(ValueError):
    id_service.generate_ids(count)


def test_generate_ids_accepts_max_batch(generator):
  ids, _ = IdService(generator).generate_ids(MAX_BATCH_SIZE)
  assert len(set(ids)) == MAX_BATCH_SIZE


def test_clock_regression_mid_batch_propagates(id_service, clock):
  clock.queue.extend([FROZEN_TIME, FROZEN_TIME - 1])
  with pytest.raises(ClockRegression):
    id_service.generate_ids(3)


def test_parse_id_delegates_to_generator(id_service):
  snowflake_id = id_service.generate_id()
  assert id_service.parse_id(snowflake_id).timestamp == FROZEN_TIME


def test_stats(id_service):
  assert id_service.stats() == {
    "datacenter_id": 1,
    "machine_id": 1,
    "max_sequence": 4095,
    "twitter_epoch": TWITTER_EPOCH,
  }


def test_run_benchmark(generator):
  duration, rate = IdService(generator).run_benchmark(count=100)
  assert duration >= 0
  assert rate > 0
  assert generator.last_timestamp > 0


def test_init_id_service_uses_settings():
  service = init_id_service(Settings(DATACENTER_ID=4, MACHINE_ID=9))
  assert get_id_service() is service
  assert service.stats()["datacenter_id"] == 4
  assert service.stats()["machine_id"] == 9


def test_init_id_service_rejects_bad_identity():
  with pytest.raises(InvalidConfiguration):
    init_id_service(Settings(DATACENTER_ID=0, MACHINE_ID=32))


def test_benchmark_survives_clock_regression(id_service, clock, captured_logs):
  clock.queue.extend([FROZEN_TIME, FROZEN_TIME - 3])

  assert id_service.run_benchmark(count=2) is None
  assert (
    logging.ERROR,
    "Benchmark failed: Clock moved backwards. Refusing to generate ID for 3 milliseconds",
  ) in captured_logs

  # The generator is still usable once the clock catches up
  clock.now = FROZEN_TIME
  assert parse_id(id_service.generate_id()).sequence == 1


def test_bad_identity_is_logged_before_raising(captured_logs):
  with pytest.raises(InvalidConfiguration):
    init_id_service(Settings(DATACENTER_ID=32, MACHINE_ID=0))

  errors = [message for level, message in captured_logs if level == logging.ERROR]
  assert errors == ["Failed to create generator: datacenter_id must be between 0 and 31, got 32"]
