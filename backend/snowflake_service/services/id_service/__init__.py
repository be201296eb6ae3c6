from .id_service import (
  MAX_BATCH_SIZE,
  IdService,
  get_id_service,
  init_id_service,
)

__all__ = ["IdService", "get_id_service", "init_id_service", "MAX_BATCH_SIZE"]
