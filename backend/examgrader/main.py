"""
ExamGrader Backend - Main FastAPI Application

AI-assisted grading of timed exams and monthly progress reports.
Version: 1.0
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from .config.settings import settings
from .gemini_wrapper import GeminiClient
from .routes.exam_routes import create_exam_routes
from .routes.grading_routes import create_grading_routes
from .routes.report_routes import create_report_routes
from .routes.user_routes import create_user_routes

# Setup logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


async def create_indexes(db: AsyncIOMotorDatabase):
    """Create database indexes. The unique ones back the duplicate checks."""
    try:
        # Users
        await db.users.create_index("user_id", unique=True)
        await db.users.create_index("email", unique=True)

        # Exams
        await db.exams.create_index("exam_id", unique=True)
        await db.exams.create_index("created_by")

        # Submissions
        await db.submissions.create_index("submission_id", unique=True)
        await db.submissions.create_index([("student_id", 1), ("exam_id", 1)], unique=True)
        await db.submissions.create_index([("student_id", 1), ("submission_time", 1)])

        # Monthly reports
        await db.monthly_reports.create_index("report_id", unique=True)
        await db.monthly_reports.create_index(
            [("student_id", 1), ("month", 1), ("year", 1)], unique=True
        )

    except Exception as e:
        logger.warning(f"Index creation warning: {e}")
        # Don't fail startup if indexes already exist


def setup_routes(app: FastAPI, db: AsyncIOMotorDatabase, llm_client):
    """Setup all API routes."""
    app.include_router(create_user_routes(db))
    app.include_router(create_exam_routes(db))
    app.include_router(create_grading_routes(db, llm_client))
    app.include_router(create_report_routes(db, llm_client))
    logger.info("✅ Routes registered")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup/shutdown."""
    client = None

    # STARTUP
    if app.state.db is None:
        logger.info("🚀 ExamGrader Backend Starting Up...")

        try:
            # Validate settings
            settings.validate()
            logger.info("✅ Settings validated")

            # Connect to MongoDB
            client = AsyncIOMotorClient(
                settings.MONGODB_URL,
                maxPoolSize=50,
                serverSelectionTimeoutMS=5000
            )

            # Test connection
            await client.server_info()
            app.state.db = client[settings.DATABASE_NAME]
            logger.info(f"✅ Connected to MongoDB: {settings.DATABASE_NAME}")

            # Create indexes
            await create_indexes(app.state.db)
            logger.info("✅ Database indexes created")

            if app.state.llm is None:
                app.state.llm = GeminiClient()
                logger.info(f"✅ Gemini client ready: {app.state.llm.model_name}")

            setup_routes(app, app.state.db, app.state.llm)
            logger.info("✅ Application startup complete")

        except Exception as e:
            logger.error(f"❌ Startup failed: {e}")
            raise

    yield

    # SHUTDOWN
    if client is not None:
        logger.info("🛑 Shutting down...")
        client.close()
        logger.info("✅ Database connection closed")


def create_app(db: AsyncIOMotorDatabase = None, llm_client=None) -> FastAPI:
    """
    Build the application.

    With ``db`` given (tests, scripts) routes are registered immediately and
    the lifespan handler does not connect to MongoDB.
    """
    app = FastAPI(
        title="ExamGrader API",
        description="AI-assisted exam grading and monthly progress reports",
        version=VERSION,
        lifespan=lifespan
    )
    app.state.db = db
    app.state.llm = llm_client

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint
    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": VERSION,
            "database": "connected" if app.state.db is not None else "disconnected"
        }

    # Root endpoint
    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "app": "ExamGrader",
            "version": VERSION,
            "docs": "/docs",
            "health": "/api/health"
        }

    if db is not None:
        setup_routes(app, db, llm_client)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "examgrader.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
