from datetime import datetime, timezone
from fastapi import APIRouter, HTTPException, status, Depends
from snowflake_service.services.logger import app_logger
from snowflake_service.services.id_service import (
  IdService,
  get_id_service,
  MAX_BATCH_SIZE,
)
from snowflake_service.services.snowflake import ClockRegression
from snowflake_service.types import (
  GenerateIdResponse,
  GenerateIdsResponse,
  HealthResponse,
  ParsedId,
  StatsResponse,
)

id_router = APIRouter()

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

"""
NOTE: The generating routes are plain 'def' instead of 'async def' on purpose. FastAPI
runs those in its threadpool, so when the generator spins waiting for the next millisecond
(while holding its lock) it blocks a worker thread and not the event loop.
"""


@id_router.get("/generate", response_model=GenerateIdResponse)
def generate_id(id_service: IdService = Depends(get_id_service)):
  """Generates a single snowflake id"""
  try:
    return {"id": id_service.generate_id()}
  except ClockRegression as e:
    app_logger.error(f"Error generating id: {str(e)}")
    raise HTTPException(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      detail=f"Failed to generate ID: {str(e)}",
    )


@id_router.get("/generate/{count}", response_model=GenerateIdsResponse)
def generate_ids(count: int, id_service: IdService = Depends(get_id_service)):
  """Generates a batch of `count` snowflake ids, between 1 and 10000"""
  if not (1 <= count <= MAX_BATCH_SIZE):
    app_logger.warning(f"Rejected batch request with count '{count}'")
    raise HTTPException(
      status_code=status.HTTP_400_BAD_REQUEST,
      detail=f"count must be between 1 and {MAX_BATCH_SIZE}",
    )

  try:
    ids, duration_us = id_service.generate_ids(count)
  except ClockRegression as e:
    app_logger.error(f"Error generating a batch of {count} ids: {str(e)}")
    raise HTTPException(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      detail=f"Failed to generate IDs: {str(e)}",
    )

  return {
    "count": len(ids),
    "duration_ms": duration_us / 1000,
    "ids": ids,
  }


@id_router.get("/parse/{snowflake_id}", response_model=ParsedId)
async def parse_id(snowflake_id: int, id_service: IdService = Depends(get_id_service)):
  """Decodes a snowflake id into its timestamp, datacenter id, machine id and sequence"""
  if not (INT64_MIN <= snowflake_id <= INT64_MAX):
    raise HTTPException(
      status_code=status.HTTP_400_BAD_REQUEST,
      detail="id must be a signed 64-bit integer",
    )
  return id_service.parse_id(snowflake_id)


@id_router.get("/health", response_model=HealthResponse)
async def health():
  return {"status": "healthy", "timestamp": datetime.now(timezone.utc)}


@id_router.get("/stats", response_model=StatsResponse)
async def stats(id_service: IdService = Depends(get_id_service)):
  """Identity and limits of the generator behind this instance"""
  return id_service.stats()
