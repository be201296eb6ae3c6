from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .config import settings
from .services.logger import app_logger, configure_file_logging, set_debug
from .services.id_service import init_id_service

# Import the routes
from .routes.id_router import id_router


docs_description = """
## Welcome to the Snowflake ID Service Developer Docs!
Generates unique, roughly time-ordered 64-bit ids and decodes them back into their
timestamp, datacenter id, machine id and sequence.
"""

@asynccontextmanager
async def startup_event(app: FastAPI):

  # Start up
  set_debug(settings.IS_DEBUG)
  configure_file_logging(settings.LOG_PATH, settings.LOG_FILENAME)

  # Raises InvalidConfiguration for a bad identity, which stops the app from starting
  id_service = init_id_service(settings)
  if settings.RUN_STARTUP_BENCHMARK:
    id_service.run_benchmark()

  yield

  # Shutdown
  app_logger.info("Shutting down Snowflake ID Service...")

app = FastAPI(
  lifespan=startup_event,
  description=docs_description,
  title="Snowflake ID Service Developer Docs",
  version="1.0.0",
)  # Create FastAPI app with this startup event

app.add_middleware(
  CORSMiddleware,
  allow_origins=["*"],
  allow_methods=["GET"],
  allow_headers=["*"],
)

@app.exception_handler(HTTPException)
async def custom_http_exception_handler(request: Request, exc: HTTPException):
  """Middleware that uniformalizes how errors are sent back to the client."""
  err_content = {"status_code": exc.status_code, "message": exc.detail}
  return JSONResponse(
    status_code=exc.status_code,
    content=err_content,
  )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
  """Bad path params (e.g. /generate/abc) are a 400 with the same shape as other errors."""
  errors = exc.errors()
  param = errors[0]["loc"][-1] if errors and errors[0].get("loc") else "request"
  return JSONResponse(
    status_code=400,
    content={"status_code": 400, "message": f"invalid {param} parameter"},
  )


app.include_router(id_router, tags=["ids"])
