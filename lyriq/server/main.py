"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lyriq.core.database import init_db
from lyriq.core.logging_config import get_logger, setup_logging
from lyriq.core.monitoring import initialize_logfire

from .api.v1 import (
    ai_agents,
    calls,
    catalog,
    chat,
    companies,
    dashboard,
    health,
    human_agents,
    integrations,
    knowledge_base,
    webhooks,
    workflow_executions,
    workflows,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.deps import close_clients

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Startup verifies the database; a failure is logged and the server keeps
    running so health checks still answer. Shutdown closes the pooled HTTP
    clients of the workflow bridge and VAPI.
    """
    try:
        logger.info(f"Starting up {constant.PROJECT_NAME}...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME}...")
    await close_clients()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Lyriq Contact Center API

    Backend of a multi-tenant AI contact center. It manages AI voice agents and human agents,
    routes Twilio calls, answers website chat from a knowledge base, runs outbound workflows
    on the orchestration bridge and synchronises CRM and helpdesk integrations.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
app.include_router(catalog.router, prefix=f"{constant.API_V1_STR}/catalog", tags=["catalog"])
app.include_router(companies.router, prefix=f"{constant.API_V1_STR}/companies", tags=["companies"])
app.include_router(ai_agents.router, prefix=f"{constant.API_V1_STR}/ai-agents", tags=["ai-agents"])
app.include_router(human_agents.router, prefix=f"{constant.API_V1_STR}/human-agents", tags=["human-agents"])
app.include_router(knowledge_base.router, prefix=f"{constant.API_V1_STR}/knowledge-base", tags=["knowledge-base"])
app.include_router(workflows.router, prefix=f"{constant.API_V1_STR}/workflows", tags=["workflows"])
app.include_router(
    workflow_executions.router,
    prefix=f"{constant.API_V1_STR}/workflow-executions",
    tags=["workflow-executions"],
)
app.include_router(integrations.router, prefix=f"{constant.API_V1_STR}/integrations", tags=["integrations"])
app.include_router(calls.router, prefix=f"{constant.API_V1_STR}/calls", tags=["calls"])
app.include_router(chat.router, prefix=f"{constant.API_V1_STR}/chat", tags=["chat"])
app.include_router(dashboard.router, prefix=f"{constant.API_V1_STR}/dashboard", tags=["dashboard"])
