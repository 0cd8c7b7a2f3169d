"""FastAPI application entry point."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from gamenight.config import settings
from gamenight.database import init_db

# Import routers
from gamenight.routers import users, games, events, participants

# Import all models so Base.metadata knows about them
import gamenight.models  # noqa: F401

app = FastAPI(
    title="Game Night",
    description="Group consensus on dates and board games for game nights",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(games.router, prefix="/api/games", tags=["Games"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(participants.router, prefix="/api/participants", tags=["Participants"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        init_db()


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
