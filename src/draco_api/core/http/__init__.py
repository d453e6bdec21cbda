"""FastAPI adapters for the authorization layer."""
