"""
Run the CSR reporting API with `python -m app`.
"""
import uvicorn
from app.core.config import settings
from app.core.logging import logger

def main():
    api = settings.api
    logger.info(f"Serving {api.title} {api.version} on {api.host}:{api.port} ({settings.environment.value})")
    uvicorn.run(
        "app.main:app",
        host=api.host,
        port=api.port,
        reload=settings.debug,
        log_level=settings.logging.level.lower(),
        access_log=False,
    )

if __name__ == "__main__":
    main()
