"""Lance le backend avec uvicorn sur `settings.HOST` / `settings.PORT`."""
import uvicorn

from insider.config.settings import settings

if __name__ == "__main__":
    uvicorn.run("insider.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
