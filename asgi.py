"""
asgi.py -- Application assembly for the RecordKeeper mock API.

The API process is the only thing assembled here; the terminal client
(main.py) is a separate process that talks to it over HTTP.

Run with:  uvicorn asgi:app --reload --port 3001
           python asgi.py            (host/port from HOST / PORT, default 127.0.0.1:3001)
"""

import uvicorn

from api.main import app
from core.config import get_settings

__all__ = ["app"]


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
