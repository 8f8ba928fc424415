"""External API clients package."""
from app.api.serpapi_client import SerpApiClient

__all__ = ["SerpApiClient"]
