"""
Serving — FastAPI application exposing upload and ask endpoints.

The application lifespan is the composition root: it builds the embedding
provider and index manager once and shares them with every request.
"""
