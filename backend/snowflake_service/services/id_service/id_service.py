import time
from typing import List, Optional, Tuple

from snowflake_service.config import Settings
from snowflake_service.services.logger import app_logger
from snowflake_service.services.snowflake import (
  MAX_SEQUENCE,
  ClockRegression,
  InvalidConfiguration,
  SnowflakeGenerator,
)
from snowflake_service.types import ParsedId

MAX_BATCH_SIZE = 10000


class IdService:
  def __init__(self, generator: SnowflakeGenerator):
    """
    Class that hands out snowflake ids to the routes

    Important:
    Keep a single instance of this (and its generator) alive for as long as the API is
    running. The sequence number lives in memory, so creating a new generator per request
    would both waste it and reset last_timestamp, which throws away our protection against
    the clock going backwards. init_id_service() builds the instance once at startup and
    get_id_service() hands it to the routes through Depends().
    """
    self.generator = generator

  def generate_id(self) -> int:
    return self.generator.next_id()

  def generate_ids(self, count: int) -> Tuple[List[int], int]:
    """Generates a batch of ids.

    Returns a tuple of the ids and how long it took in microseconds. If the clock
    goes backwards halfway through, the ClockRegression propagates and nothing is
    returned.
    """
    if not (1 <= count <= MAX_BATCH_SIZE):
      raise ValueError(f"count must be between 1 and {MAX_BATCH_SIZE}")

    start = time.perf_counter()
    ids = [self.generator.next_id() for _ in range(count)]
    duration_us = int((time.perf_counter() - start) * 1_000_000)
    return ids, duration_us

  def parse_id(self, snowflake_id: int) -> ParsedId:
    return self.generator.parse_id(snowflake_id)

  def stats(self) -> dict:
    return {
      "datacenter_id": self.generator.datacenter_id,
      "machine_id": self.generator.machine_id,
      "max_sequence": MAX_SEQUENCE,
      "twitter_epoch": self.generator.epoch,
    }

  def run_benchmark(self, count: int = MAX_BATCH_SIZE) -> Optional[Tuple[float, float]]:
    """Generates `count` ids and logs the throughput. Returns (seconds, ids per second)

    Note: This is only a startup self-test. If the clock steps backwards while it runs
    (e.g. NTP correcting at boot) we log it and return None instead of stopping the app.
    """
    app_logger.info("Running performance test...")
    start = time.perf_counter()
    try:
      for _ in range(count):
        self.generator.next_id()
    except ClockRegression as e:
      app_logger.error(f"Benchmark failed: {e}")
      return None
    duration = time.perf_counter() - start

    rate = count / duration if duration > 0 else float("inf")
    app_logger.info(f"Generated {count:,} IDs in {duration:.4f}s ({rate:.2f} IDs/second)")
    return duration, rate


_id_service: Optional[IdService] = None


def init_id_service(settings: Settings) -> IdService:
  """Builds the id service from the given settings. Call once at startup.

  Raises:
    InvalidConfiguration: DATACENTER_ID or MACHINE_ID is out of range. Don't start the
    app if this happens.
  """
  global _id_service
  try:
    generator = SnowflakeGenerator(
      datacenter_id=settings.DATACENTER_ID,
      machine_id=settings.MACHINE_ID,
    )
  except InvalidConfiguration as e:
    app_logger.error(f"Failed to create generator: {e}")
    raise
  _id_service = IdService(generator)
  app_logger.info(
    f"Snowflake generator ready (datacenter_id={generator.datacenter_id}, machine_id={generator.machine_id})"
  )
  return _id_service


def get_id_service() -> IdService:
  """Returns the id service

  Note: Use this with dependency injection!
  """
  if _id_service is None:
    raise RuntimeError("Id service isn't initialized. Call init_id_service() first")
  return _id_service
