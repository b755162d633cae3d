import os
import uvicorn

from iqol.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "iqol.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
        workers=int(os.environ.get("WEB_CONCURRENCY", 2)) if settings.is_production else 1,
    )
