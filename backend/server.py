from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
import uuid
from contextlib import asynccontextmanager
from database import database
from routes import auth, clients, sites, hosting, mobile_apps, developer_accounts, notifications, dashboard

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.jobstores.mongodb import MongoDBJobStore

# Load environment variables
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

REMINDER_HOUR_UTC = int(os.environ.get('REMINDER_HOUR_UTC', '9'))

# Scheduler with MongoDB job store so the reminder job survives restarts
mongo_url = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
db_name = os.environ.get('DB_NAME', 'agency_renewal_desk')

jobstores = {}
if os.environ.get('PYTEST_RUNNING'):
    logger.info("PYTEST_RUNNING set, using memory job store")
else:
    try:
        from pymongo import MongoClient
        mongo_client = MongoClient(mongo_url)
        jobstores = {
            'default': MongoDBJobStore(
                database=db_name,
                collection='scheduled_jobs',
                client=mongo_client
            )
        }
        logger.info(f"MongoDB job store configured: {db_name}.scheduled_jobs")
    except Exception as e:
        logger.warning(f"Failed to configure MongoDB job store, using memory store: {e}")

scheduler = AsyncIOScheduler(jobstores=jobstores)

from job_runner import run_daily_reminders

# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Agency Renewal Desk API")
    await database.connect()

    # Renewal reminders once a day
    scheduler.add_job(
        run_daily_reminders,
        CronTrigger(hour=REMINDER_HOUR_UTC, minute=0),
        id="daily_reminders",
        name="Daily Renewal Reminders",
        replace_existing=True
    )

    scheduler.start()
    logger.info("Background job scheduler started")

    yield

    # Shutdown
    logger.info("Shutting down Agency Renewal Desk API")
    scheduler.shutdown(wait=False)
    logger.info("Background job scheduler stopped")
    await database.close()

# Create FastAPI app
app = FastAPI(
    title="Agency Renewal Desk API",
    description="Renewal tracking for agency sites, hosting accounts and mobile apps",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(clients.router)
app.include_router(sites.router)
app.include_router(hosting.router)
app.include_router(mobile_apps.router)
app.include_router(developer_accounts.router)
app.include_router(notifications.router)
app.include_router(dashboard.router)

# Root endpoint
@app.get("/api")
async def root():
    return {
        "service": "Agency Renewal Desk",
        "version": "1.0.0",
        "status": "operational"
    }

# Health check
@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "development")
    }

# Validation error handler: log request_id + errors (loc path)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    errors = exc.errors()
    logger.warning(
        "Validation failed request_id=%s path=%s errors=%s",
        request_id,
        request.url.path,
        [(e.get("loc"), e.get("msg"), e.get("type")) for e in errors],
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(errors), "request_id": request_id},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8001,
        reload=os.getenv("ENVIRONMENT") == "development"
    )
