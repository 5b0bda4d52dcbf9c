"""Application wiring: settings, auth and the FastAPI app factory."""
