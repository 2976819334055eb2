"""Run FastAPI backend. Use from project root: python run_backend.py"""
import uvicorn
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "backend"))
from customer_hub.config import get_settings  # noqa: E402

settings = get_settings()
uvicorn.run("customer_hub.main:app", host=settings.api_host, port=settings.api_port, reload=True)
