import threading, time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from snowflake_service.types import ParsedId
from .errors import ClockRegression, InvalidConfiguration

# Twitter epoch: Nov 04, 2010, 01:42:54 UTC (in milliseconds)
TWITTER_EPOCH = 1288834974657

'''
##### Bit layout #####
[ 1 unused | 41 timestamp | 5 datacenter_id | 5 machine_id | 12 sequence ]

The max values are given by 1 * 2^{bits} - 1. The shifts are positional offsets,
sequence sits at the bottom so it needs no shift, machine_id sits right above it,
then datacenter_id, then the timestamp takes everything that's left.
'''
DATACENTER_ID_BITS = 5
MACHINE_ID_BITS = 5
SEQUENCE_BITS = 12

MAX_DATACENTER_ID = (1 << DATACENTER_ID_BITS) - 1  # 31
MAX_MACHINE_ID = (1 << MACHINE_ID_BITS) - 1  # 31
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1  # 4095

MACHINE_ID_SHIFT = SEQUENCE_BITS  # 12
DATACENTER_ID_SHIFT = SEQUENCE_BITS + MACHINE_ID_BITS  # 17
TIMESTAMP_SHIFT = SEQUENCE_BITS + MACHINE_ID_BITS + DATACENTER_ID_BITS  # 22

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def current_timestamp() -> int:
  """Get the current wall-clock timestamp in milliseconds"""
  return int(time.time() * 1000)


def parse_id(snowflake_id: int, epoch: int = TWITTER_EPOCH) -> ParsedId:
  """Decodes a snowflake id back into its fields.

  This is the exact inverse of the packing in next_id(): shift each field back down
  and mask it with the same bit width. We don't validate that the id was actually
  made by a generator with this epoch, any integer decodes to *something*.
  """
  timestamp = (snowflake_id >> TIMESTAMP_SHIFT) + epoch
  datacenter_id = (snowflake_id >> DATACENTER_ID_SHIFT) & MAX_DATACENTER_ID
  machine_id = (snowflake_id >> MACHINE_ID_SHIFT) & MAX_MACHINE_ID
  sequence = snowflake_id & MAX_SEQUENCE

  # Note: timedelta instead of datetime.fromtimestamp() so that pre-1970 timestamps
  # (negative ids) still render on every platform.
  decoded_at = _UNIX_EPOCH + timedelta(milliseconds=timestamp)

  return ParsedId(
    id=snowflake_id,
    timestamp=timestamp,
    datetime=decoded_at.strftime("%Y-%m-%dT%H:%M:%SZ"),
    datacenter_id=datacenter_id,
    machine_id=machine_id,
    sequence=sequence,
  )


class SnowflakeGenerator:
  def __init__(
    self,
    datacenter_id: int,
    machine_id: int,
    epoch: int = TWITTER_EPOCH,
    clock: Optional[Callable[[], int]] = None,
  ):
    """
    Generates Twitter-style Snowflake IDs

    64-bit structure:
    - 1 bit: unused (always 0), so ids stay positive as signed 64-bit ints
    - 41 bits: timestamp (milliseconds since custom epoch)
    - 5 bits: datacenter id
    - 5 bits: machine id
    - 12 bits: sequence number

    Note:
    - Identity Assignment: Every running generator needs its own (datacenter_id, machine_id)
      pair. We don't coordinate that here, it comes from config. Two instances with the same
      pair can and will collide.
    - Clock skew/backwards time: If the system clock goes backwards (NTP correction, someone
      changing the time, a VM getting paused) we fail fast with ClockRegression instead of
      waiting or inventing a timestamp.
    - Sequence Overflow: 12 bits gives 0..4095, so 4096 ids per millisecond. Once we run out
      we spin until the next millisecond.

    Args:
      datacenter_id: 0..31
      machine_id: 0..31
      epoch: custom epoch in milliseconds subtracted from the wall clock
      clock: zero-argument callable returning the wall clock in milliseconds. Defaults to
        time.time(), tests pass a fake one to freeze time.
    """
    if not (0 <= datacenter_id <= MAX_DATACENTER_ID):
      raise InvalidConfiguration("datacenter_id", datacenter_id, MAX_DATACENTER_ID)
    if not (0 <= machine_id <= MAX_MACHINE_ID):
      raise InvalidConfiguration("machine_id", machine_id, MAX_MACHINE_ID)

    self.datacenter_id = datacenter_id
    self.machine_id = machine_id
    self.epoch = epoch
    self._clock = clock or current_timestamp

    '''
    ##### Runtime state #####
    The lock makes sure only one thread at a time generates an ID. Without it two threads
    could read the same millisecond and bump the sequence to the same value, which gives
    the same UID (collisions!). It only protects a single Python process though, separate
    processes need separate identities.

    last_timestamp tracks the last millisecond we generated an ID for. -1 means we haven't
    generated anything yet. It lets us know whether to increment the sequence or reset it,
    and to detect time going backwards.
    '''
    self.lock = threading.Lock()
    self.last_timestamp = -1
    self.sequence = 0

  def _current_timestamp(self) -> int:
    return self._clock()

  def _wait_next_millisecond(self, last_timestamp: int) -> int:
    """Busy-polls the clock and returns the first timestamp after last_timestamp"""
    timestamp = self._current_timestamp()
    while timestamp <= last_timestamp:
      timestamp = self._current_timestamp()
    return timestamp

  def next_id(self) -> int:
    """Generates a unique Snowflake ID

    Raises:
      ClockRegression: The clock is behind the last timestamp we used. State isn't touched.
    """
    with self.lock:
      timestamp = self._current_timestamp()

      if timestamp < self.last_timestamp:
        raise ClockRegression(self.last_timestamp - timestamp)

      if timestamp == self.last_timestamp:
        '''
        ## Same millisecond as the last ID
        Increment the sequence and keep only the lowest 12 bits. 4095 + 1 = 0b1_0000_0000_0000,
        AND-ing with 0b1111_1111_1111 gives 0, which is the only time it wraps. A wrap means
        4096 IDs already went out this millisecond, so we hold the lock and wait for the next one.
        '''
        self.sequence = (self.sequence + 1) & MAX_SEQUENCE
        if self.sequence == 0:
          timestamp = self._wait_next_millisecond(self.last_timestamp)
      else:
        # New millisecond, so reset the sequence number to zero
        self.sequence = 0

      self.last_timestamp = timestamp

      snowflake_id = (
        ((timestamp - self.epoch) << TIMESTAMP_SHIFT)
        | (self.datacenter_id << DATACENTER_ID_SHIFT)
        | (self.machine_id << MACHINE_ID_SHIFT)
        | self.sequence
      )
      return snowflake_id

  def parse_id(self, snowflake_id: int) -> ParsedId:
    """Decodes an id using this generator's epoch. Doesn't touch the lock."""
    return parse_id(snowflake_id, self.epoch)
