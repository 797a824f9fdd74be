import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv())


class Config:
    API_URL = os.getenv("API_URL", "http://127.0.0.1:8080")
    API_TOKEN = os.getenv("API_TOKEN")
    API_TIMEOUT = float(os.getenv("API_TIMEOUT", "10"))
    CORS_ORIGINS = [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ]
