"""FastAPI application entry - Quiz flow decision engine."""

from . import config
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import router

config.configure_logging()

app = FastAPI(
    title="Quiz Flow Engine",
    description="Conditional flow decisions, response branching and scenario tests for quizzes",
    version="0.1.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


@app.get("/")
async def root():
    return {"service": "quiz-flow-engine", "docs": "/docs"}
