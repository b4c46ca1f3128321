import os
from pathlib import Path

from dotenv import load_dotenv

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")

from handlers.brand_memory_handler import router as brand_memory_router
from handlers.brief_handler import router as brief_router
from handlers.health_handler import router as health_router
from handlers.pack_handler import router as pack_router
from handlers.usage_handler import router as usage_router
from utils.log_config import configure_logging

configure_logging()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
    ).split(",")
    if origin.strip()
]

app = FastAPI(title="Creative Studio Backend")


app.include_router(health_router)
app.include_router(brand_memory_router)
app.include_router(brief_router)
app.include_router(pack_router)
app.include_router(usage_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
