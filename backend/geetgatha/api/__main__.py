"""API server entry point for python -m geetgatha.api"""
import uvicorn
from geetgatha.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "geetgatha.api.app:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
    )
