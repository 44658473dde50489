"""FastAPI application entrypoint."""

from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lead_dispatch.adapters.inbound.http.error_handlers import register_error_handlers
from lead_dispatch.adapters.inbound.http.routes import router
from lead_dispatch.infrastructure.config.settings import settings
from lead_dispatch.infrastructure.wiring.dependencies import close_outbound_clients

# Load environment variables from .env file
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close outbound connections on shutdown."""
    yield
    await close_outbound_clients()


app = FastAPI(
    title="Lead Dispatch Service",
    description="Finds or creates CRM leads and follow-up tasks, and triggers outbound calls",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_error_handlers(app)
app.include_router(router)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
