#!/usr/bin/env python3
"""Main entry point for the worker"""

import os
import sys

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    import uvicorn
    from config import settings
    from pool_metrics.web.app import app

    port = int(os.getenv("PORT", settings.PORT))

    uvicorn.run(
        app,
        host="0.0.0.0",
        port=port,
        log_level=settings.LOG_LEVEL.lower(),
        access_log=False
    )
