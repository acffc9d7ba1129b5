"""Start the PharmaCare API with uvicorn. HOST/PORT come from the environment."""
import os
import signal
import sys

import uvicorn

from pharmacare.core.config import settings


def handle_signal(sig, frame):
    print(f"\nReceived signal {sig}, shutting down...")
    sys.exit(0)


if __name__ == "__main__":
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)
    print("=" * 50)
    print(f"  PharmaCare Backend ({settings.ENVIRONMENT})")
    print("=" * 50)
    uvicorn.run(
        "pharmacare.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.DEBUG and os.getenv("RELOAD", "0") == "1",
    )
