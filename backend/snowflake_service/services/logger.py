import logging
import os
from logging.handlers import RotatingFileHandler

app_logger = logging.getLogger("snowflake-id-service")
logging.basicConfig(level=logging.INFO)

formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

# Prevent duplicate logs if this module gets imported multiple times
if not app_logger.handlers:
  # Console handler
  console_handler = logging.StreamHandler()
  console_handler.setLevel(logging.DEBUG)
  console_handler.setFormatter(formatter)

  # Add handlers to logger
  app_logger.addHandler(console_handler)

app_logger.setLevel(logging.INFO)

# Optional: prevent log propagation to root logger
app_logger.propagate = False


def set_debug(is_debug: bool):
  app_logger.setLevel(logging.DEBUG if is_debug else logging.INFO)


def configure_file_logging(log_path: str, log_filename: str):
  """Also write logs to {log_path}/{log_filename}. Does nothing if log_path is empty.

  Note: The file rotates at 5MB and keeps 2 backups so a long running generator
  doesn't fill the disk.
  """
  if not log_path:
    return None

  file_path = os.path.abspath(os.path.join(log_path, log_filename))
  for handler in app_logger.handlers:
    if isinstance(handler, RotatingFileHandler) and handler.baseFilename == file_path:
      return handler

  os.makedirs(log_path, exist_ok=True)
  file_handler = RotatingFileHandler(
    file_path, maxBytes=5 * 1024 * 1024, backupCount=2, encoding="utf-8"
  )
  file_handler.setFormatter(formatter)
  app_logger.addHandler(file_handler)
  return file_handler
