import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rates_oracle.services.ledger_client import create_ledger_client
from rates_oracle.services.rate_submitter import RateSubmitter
from rates_oracle.api import routes
from rates_oracle.utils.config import Config
from rates_oracle.utils.logger import setup_logging

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""

    # Startup
    setup_logging(Config.LOG_LEVEL)
    logger.info("Currencies Oracle Starting...")

    # Validate config
    Config.validate()

    # Initialize services once; every request shares them
    ledger_client = create_ledger_client(Config)
    rate_submitter = RateSubmitter.from_config(ledger_client, Config)

    # Inject into routes
    routes.ledger_client = ledger_client
    routes.rate_submitter = rate_submitter

    logger.info("FastAPI server started")

    yield

    # Shutdown
    logger.info("Shutting down...")

# Create FastAPI app
app = FastAPI(
    title="Currencies Oracle API",
    description="Submits currency exchange rates to the currencies contract",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routes
app.include_router(routes.router, prefix="/api", tags=["rates"])

@app.get("/")
async def root():
    return {
        "message": "Currencies Oracle API",
        "docs": "/docs",
        "health": "/api/health"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
