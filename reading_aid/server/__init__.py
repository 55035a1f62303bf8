"""HTTP API layer (FastAPI) over the text tools and reader settings."""
