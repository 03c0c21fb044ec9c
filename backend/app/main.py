from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from routes.sessions import router as sessions_router
from routes.voting_ws import router as voting_router

app = FastAPI(title="Planning Poker API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(get_settings().cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(sessions_router, prefix="/api")
app.include_router(voting_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
