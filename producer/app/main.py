from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from loguru import logger

from producer.app.composition import create_app_dependencies
from producer.app.config.settings import Settings
from producer.app.core import SERVICE_NAME
from producer.app.core.logging import configure_logging
from producer.app.routers.health import health_router
from producer.app.routers.values import values_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()
    configure_logging(settings.log_level, json=settings.log_json)
    logger.bind(service_name=SERVICE_NAME, event="producer_starting").info("")
    deps = create_app_dependencies(settings)
    try:
        await deps.connect()
    except Exception as e:
        logger.exception("broker connect failed: {}", e)
        raise

    app.state.settings = deps.settings
    app.state.connection = deps.connection
    app.state.declaration = deps.declaration
    try:
        yield
    finally:
        logger.bind(service_name=SERVICE_NAME, event="producer_stopping").info("")
        await deps.close()


app = FastAPI(
    title="Values Producer",
    description="Publishes string values onto a RabbitMQ queue.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(values_router)


def main() -> None:
    settings = Settings()
    uvicorn.run("producer.app.main:app", host=settings.http_host, port=settings.http_port)


if __name__ == "__main__":
    main()
