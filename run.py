#!/usr/bin/env python3
"""
Run script for the Trolley Seal backend
"""
import uvicorn

from trolleyseal.config.settings import settings
from trolleyseal.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
