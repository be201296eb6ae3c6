# Environment variables for the generator identity, the HTTP server and logging
import os
from pydantic_settings import BaseSettings
from snowflake_service.services.logger import app_logger
from dotenv import load_dotenv

load_dotenv()

def get_env_with_logging(key: str, default: str = None) -> str:
    """Get environment variable with logging"""
    value = os.getenv(key, default)
    if not value:
        app_logger.warning(f"Environment variable '{key}' not found, using default: {default}")
        value = default
    return value

class Settings(BaseSettings):
  """
  Note: The generator never reads this object on its own. It's built once at startup
  and the identity fields are handed to the generator explicitly (see init_id_service).
  Each running instance needs a unique (DATACENTER_ID, MACHINE_ID) pair, nothing
  here checks that for you.
  """

  # Generator identity, both 0..31. Range is validated by the generator itself.
  DATACENTER_ID: int = get_env_with_logging("DATACENTER_ID", "0")
  MACHINE_ID: int = get_env_with_logging("MACHINE_ID", "0")

  IS_DEBUG: bool = get_env_with_logging("IS_DEBUG", "false")

  # HTTP server
  HOST: str = get_env_with_logging("HOST", "0.0.0.0")
  HTTP_PORT: int = get_env_with_logging("HTTP_PORT", "8080")

  # Logging; leave LOG_PATH empty to only log to the console
  LOG_PATH: str = os.getenv("LOG_PATH", "")
  LOG_FILENAME: str = os.getenv("LOG_FILENAME", "app.log")

  # Generates 10,000 ids at startup and logs the throughput
  RUN_STARTUP_BENCHMARK: bool = get_env_with_logging("RUN_STARTUP_BENCHMARK", "true")

  ENVIRONMENT: str = get_env_with_logging("ENVIRONMENT", "DEVELOPMENT")

settings = Settings()
