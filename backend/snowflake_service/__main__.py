import uvicorn
from snowflake_service.config import settings

if __name__ == "__main__":
  # NOTE: A single instance can hand out at most 4096 new ids per millisecond.
  # Keep workers at 1; every worker process would need its own MACHINE_ID.
  uvicorn.run(
    "snowflake_service:app",
    host=settings.HOST,
    port=settings.HTTP_PORT,
    reload=settings.IS_DEBUG,
  )
