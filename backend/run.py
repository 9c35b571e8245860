#!/usr/bin/env python3
# backend/run.py
"""
Local development server.

Reads DATABASE_URL and friends from the environment / .env like the app
does; defaults to the fake calendar provider so no Google credentials are
needed.
"""
import os
from pathlib import Path
import sys

backend_dir = Path(__file__).parent
sys.path.insert(0, str(backend_dir))
os.chdir(backend_dir)

os.environ.setdefault("CALENDAR_PROVIDER", "fake")

import uvicorn

if __name__ == "__main__":
    print("Starting booking API on http://localhost:8000 (docs at /docs)")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
