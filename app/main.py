from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import Base, engine

# Import models so SQLAlchemy registers tables for create_all().
import app.models.persona  # noqa: F401
import app.models.conversation  # noqa: F401
import app.models.message  # noqa: F401

# Routes
from app.api.routes import chat, conversations, health, models, personas

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up: initializing database...")
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized (environment=%s)", settings.ENVIRONMENT)
    if not settings.OPENROUTER_API_KEY:
        logger.warning("OPENROUTER_API_KEY is not set; chat requests will fail until it is configured.")

    yield
    logger.info("Shutting down...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, prefix=f"{settings.API_V1_STR}/chat", tags=["Chat Relay"])
# Same relay under the serverless-function path the web client already calls.
app.include_router(chat.router, prefix="/functions/v1/chat", tags=["Chat Relay"], include_in_schema=False)
app.include_router(conversations.router, prefix=f"{settings.API_V1_STR}/conversations", tags=["Conversations"])
app.include_router(personas.router, prefix=f"{settings.API_V1_STR}/personas", tags=["Personas"])
app.include_router(models.router, prefix=f"{settings.API_V1_STR}/models", tags=["Models"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def read_root():
    return {"status": "success", "message": f"Welcome to {settings.PROJECT_NAME} API"}
