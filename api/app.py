"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.routes import health, ids
from config import load_config
from core.errors import ClockRegressionError, IdGeneratorError
from core.health import HealthChecker, check_event_loop, create_clock_check, create_generator_check
from idgen import IdGenerator
from internal.logging import StructuredLogger, get_logger, parse_level
from utils.crash import create_async_handler


def create_app(config=None, clock=None):
    """Create the ID service around a single generator.

    The generator is built here, once, and handed to the routes and health
    checks. Invalid node identity or layout fails app creation.
    """
    config = config or load_config()

    StructuredLogger.configure(min_level=parse_level(config.logging.level))
    logger_instance = get_logger()

    generator_config = config.generator
    generator = IdGenerator(
        datacenter_id=generator_config.datacenter_id,
        worker_id=generator_config.worker_id,
        epoch=generator_config.epoch,
        layout=generator_config.layout(),
        clock=clock,
    )
    health_checker = HealthChecker()
    health_checker.register("event_loop", check_event_loop, critical=True)
    health_checker.register("clock", create_clock_check(generator), critical=True)
    health_checker.register("generator", create_generator_check(generator), critical=False)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger_instance.info("Application starting", version="1.0.0",
                             datacenter_id=generator.datacenter_id, worker_id=generator.worker_id)
        loop = asyncio.get_running_loop()
        loop.set_exception_handler(create_async_handler(logger_instance))
        yield
        logger_instance.info("Application shutdown complete", issued=generator.issued)

    app = FastAPI(
        title="Snowflake ID service",
        version="1.0.0",
        description="64-bit time-ordered unique identifiers",
        lifespan=lifespan,
    )
    app.state.generator = generator
    app.state.health_checker = health_checker

    @app.exception_handler(IdGeneratorError)
    async def id_error_handler(request: Request, exc: IdGeneratorError):
        status_code = 503 if isinstance(exc, ClockRegressionError) else 500
        logger_instance.warn("id request failed", error=exc, path=request.url.path, error_id=exc.error_id)
        return JSONResponse(content=exc.to_dict(), status_code=status_code)

    app.include_router(ids.router)
    app.include_router(health.router)

    return app
