#!/usr/bin/env python3
"""
Transfer System Entry Point

Starts the FastAPI server with configuration read from TRANSFER_SYSTEM_*
environment variables (or a .env file).
"""

import sys

from transfer_system.api import run_server
from transfer_system.config import load_config


if __name__ == "__main__":
    config = load_config()
    print("Starting Transfer System...")
    print(f"API available at: http://localhost:{config.api_port}")
    print(f"Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server(config)
    except KeyboardInterrupt:
        print("\nShutting down Transfer System...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
