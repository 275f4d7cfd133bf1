#!/usr/bin/env python

"""
Time Entry Parser - Main Entry Point

Serves the parse/save API. The task catalog is imported at startup and the
configured Ollama model turns free-text time tracking into structured entries.

Usage:
    python main.py

Requirements:
    - Python 3.10+
    - A running Ollama server (see config/settings.example.yaml)
"""

import logging
import sys

import uvicorn

from timeparser.api import create_app
from timeparser.infra.config import get_settings


def main():
    """Main entry point"""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
