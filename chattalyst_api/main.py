from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from chattalyst_api.config import settings
from chattalyst_api.database import get_db
from chattalyst_api.logging_config import setup_logging
from chattalyst_api.models import AgentSession, Conversation, Customer, FailedDispatch, Message
from chattalyst_api.routers import sessions, webhook

setup_logging(settings.log_level)

app = FastAPI(
    title="Chattalyst Webhook API",
    description="WhatsApp webhook ingestion and AI agent session handling",
    version="0.1.0",
)

cors_origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
if not cors_origins:
    cors_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(webhook.router)
app.include_router(sessions.router)


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/db-check")
def db_check(db: Session = Depends(get_db)):
    return {
        "status": "ok",
        "customers": db.query(Customer).count(),
        "conversations": db.query(Conversation).count(),
        "messages": db.query(Message).count(),
        "active_sessions": db.query(AgentSession).filter(AgentSession.status == "active").count(),
        "failed_dispatches": db.query(FailedDispatch).count(),
    }
