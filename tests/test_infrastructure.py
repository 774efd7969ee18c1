import logging

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from lawnops.database import register_slow_query_logging
from lawnops.security_headers import SecurityHeadersMiddleware


def test_slow_queries_are_logged(caplog):
    engine = create_engine("sqlite://")
    register_slow_query_logging(engine, threshold=-1)

    with caplog.at_level(logging.WARNING, logger="lawnops.database"):
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    assert "Slow query" in caplog.text


def test_security_headers_skip_excluded_paths():
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health"])

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/clients")
    async def clients():
        return []

    client = TestClient(app)
    protected = client.get("/clients")
    excluded = client.get("/health")

    assert protected.headers["X-Frame-Options"] == "DENY"
    assert protected.headers["Cache-Control"] == "no-store"
    assert "X-Frame-Options" not in excluded.headers
