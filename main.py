"""
Run with:   python main.py
Or `uvicorn main:app --port 8000` if you prefer the CLI.
"""

import dotenv
import uvicorn

# Load environment variables from .env file and override existing ones
dotenv.load_dotenv(override=True)

from starlette_statsd.app import create_app  # noqa: E402
from starlette_statsd.config import get_settings  # noqa: E402

settings = get_settings()
app = create_app(settings)

if __name__ == "__main__":

    # For reload to work, we need to use an import string instead of the app object
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
