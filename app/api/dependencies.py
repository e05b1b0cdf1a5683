from typing import Generator

from fastapi import Depends

from app.core.config import Settings, settings as app_settings
from app.core.database import SessionLocal
from app.services.completion_client import CompletionClient


def get_db() -> Generator:
    """
    Dependency Injection function to get a database session.
    It ensures the database connection is closed after the request is finished.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_settings() -> Settings:
    return app_settings


def get_completion_client(settings: Settings = Depends(get_settings)) -> Generator:
    client = CompletionClient.from_settings(settings)
    try:
        yield client
    finally:
        client.close()
