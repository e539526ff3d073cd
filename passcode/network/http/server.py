from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.middleware.errors import ServerErrorMiddleware

from passcode import settings
from passcode.common.exceptions import (
    APIException,
    InternalException,
    api_exception_handler,
    inbound_validation_exception_handler,
    internal_exception_handler,
)
from passcode.network.database.middleware import HTTPSessionManagerMiddleware
from passcode.network.http.router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f'{app.title} is ready!')
    logger.info(f'check out API docs here: {settings.HOST}/docs')
    yield
    logger.info('💀 Shutting down!')


server = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    openapi_url=f'{settings.API_PREFIX}/openapi.json' if settings.IS_LOCAL else None,
    generate_unique_id_function=lambda route: route.name,
    lifespan=lifespan,
    redirect_slashes=False,
    version='0.1.0',
    docs_url='/docs' if settings.IS_LOCAL else None,
    redoc_url='/redoc' if settings.IS_LOCAL else None,
    separate_input_output_schemas=False,
)

# Middlewares are inserted(0) last will run first!
# Handle database session for request lifecycle
server.add_middleware(HTTPSessionManagerMiddleware, commit_on_success=True)

if settings.DEBUG:
    # This serves up traceback responses
    server.add_middleware(ServerErrorMiddleware, debug=True)

# Custom exception handler
server.exception_handler(RequestValidationError)(inbound_validation_exception_handler)
server.exception_handler(InternalException)(internal_exception_handler)
server.exception_handler(APIException)(api_exception_handler)

server.include_router(api_router, prefix=settings.API_PREFIX)
