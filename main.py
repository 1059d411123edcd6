"""
SQL Auto-Fix API server

Usage:
    python main.py
    # OR
    uvicorn sqlautofix.api.app:app --reload
"""

from pathlib import Path

import uvicorn
from loguru import logger

project_root = Path(__file__).parent


def main():
    """Start the FastAPI development server"""
    logger.info("="*80)
    logger.info("SQL Auto-Fix - API Server")
    logger.info("="*80)
    logger.info("Server will be available at: http://localhost:8000")
    logger.info("API Documentation: http://localhost:8000/docs")
    logger.info("Health Check: http://localhost:8000/health")
    logger.info("Auto-fix: POST http://localhost:8000/api/sql/fix")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "sqlautofix.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "sqlautofix")]
    )


if __name__ == "__main__":
    main()
