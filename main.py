import os
import uvicorn
import logging
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Settings for running
PORT = int(os.getenv('PORT', 5050))
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL = os.getenv('LOG_LEVEL', 'info').lower()

# Import FastAPI app
from app import app

# Expose application for Gunicorn
application = app

logger = logging.getLogger("aistream")

if __name__ == "__main__":
    logger.info(f"🚀 Starting server on port {PORT}, debug={DEBUG}")

    # Group membership and history live in this process, so a single worker
    uvicorn.run(
        "app:app",
        host="0.0.0.0",
        port=PORT,
        log_level=LOG_LEVEL,
        reload=DEBUG,
        workers=1,
        timeout_keep_alive=120,
    )
