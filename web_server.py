"""Web server entry point for the TaskVault API"""

import signal
import sys

import uvicorn

# Load environment variables from .env file BEFORE importing anything else
from dotenv import load_dotenv
load_dotenv()

from taskvault.utils.config import load_settings
from taskvault.utils.exceptions import ConfigError
from taskvault_web.main import create_app


def cleanup_handler(signum, frame):
    """Handle shutdown signals (SIGTERM)."""
    sys.exit(0)


if __name__ == "__main__":
    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    host = settings.web.host or "0.0.0.0"
    port = settings.web.port or 8000

    signal.signal(signal.SIGTERM, cleanup_handler)

    print("Starting TaskVault API...")
    print(f"Local server will be available at: http://localhost:{port}")

    try:
        uvicorn.run(create_app(settings), host=host, port=port, reload=False)
    except KeyboardInterrupt:
        print("\nShutting down...")
