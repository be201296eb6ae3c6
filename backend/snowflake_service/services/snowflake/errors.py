class SnowflakeError(Exception):
  """Base class for everything the snowflake generator raises"""


class InvalidConfiguration(SnowflakeError, ValueError):
  """Raised when the generator is built with an identity field outside its bit range.

  This only happens once, at construction. If you see this, the service shouldn't
  start at all, since a generator with a bad datacenter/machine id could overlap with
  the id space of another instance.
  """

  def __init__(self, field: str, value: int, max_value: int):
    self.field = field
    self.value = value
    self.max_value = max_value
    super().__init__(f"{field} must be between 0 and {max_value}, got {value}")


class ClockRegression(SnowflakeError):
  """Raised by next_id() when the wall clock is earlier than the last timestamp we used.

  The generator never retries or makes up a timestamp. It's up to the caller to
  decide whether to wait and retry or surface it as a clock-skew alarm.
  """

  def __init__(self, milliseconds: int):
    self.milliseconds = milliseconds
    super().__init__(
      f"Clock moved backwards. Refusing to generate ID for {milliseconds} milliseconds"
    )
