from datetime import datetime as dt
from typing import List
from pydantic import BaseModel


# #----------------------------------
# Snowflake models
# # ---------------------------------
class ParsedId(BaseModel):
  """Data model representing a snowflake id decoded back into its fields.

  timestamp is the absolute Unix timestamp in milliseconds (epoch already added back),
  and datetime is that same timestamp as an ISO-8601 UTC string.
  """

  id: int
  timestamp: int
  datetime: str
  datacenter_id: int
  machine_id: int
  sequence: int


# #----------------------------------
# Id router models
# # ---------------------------------
class GenerateIdResponse(BaseModel):
  id: int


class GenerateIdsResponse(BaseModel):
  """Response for a batch of ids. duration_ms is how long generating the batch took."""

  count: int
  duration_ms: float
  ids: List[int]


class StatsResponse(BaseModel):
  datacenter_id: int
  machine_id: int
  max_sequence: int
  twitter_epoch: int


class HealthResponse(BaseModel):
  status: str
  timestamp: dt  # FastAPI converts this to an ISO format string
