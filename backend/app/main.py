# backend/app/main.py
from fastapi import FastAPI

from backend.app.api.emails import router as emails_router
from tradie_mail.config.logging_setup import configure_logging
from tradie_mail.config.settings import load_settings

configure_logging(load_settings().log_level)

app = FastAPI(title="tradie-mail API")
app.include_router(emails_router, prefix="/api")


@app.get("/api/health", include_in_schema=False)
def health() -> dict:
    return {"ok": True}
