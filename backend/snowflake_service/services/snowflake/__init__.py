from .errors import ClockRegression, InvalidConfiguration, SnowflakeError
from .snowflake_generator import (
  MAX_DATACENTER_ID,
  MAX_MACHINE_ID,
  MAX_SEQUENCE,
  TWITTER_EPOCH,
  SnowflakeGenerator,
  parse_id,
)

# Now we get: from snowflake_service.services.snowflake import SnowflakeGenerator
__all__ = [
  "ClockRegression",
  "InvalidConfiguration",
  "SnowflakeError",
  "SnowflakeGenerator",
  "parse_id",
  "TWITTER_EPOCH",
  "MAX_DATACENTER_ID",
  "MAX_MACHINE_ID",
  "MAX_SEQUENCE",
]
