"""Main entry point for running the Autorest FastAPI application."""

from autorest.server import main

if __name__ == "__main__":
    main()
