import os
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mailaction.app.config import Config

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
numeric_level = getattr(logging, LOG_LEVEL, logging.INFO)

logging.basicConfig(
    level=numeric_level,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

from mailaction.controller import *

routers = [
    message_router,
]

for r in routers:
    app.include_router(r)
