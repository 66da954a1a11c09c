"""HTTP surface — FT-style /__health, /__gtg and /__about endpoints."""

from .routes import health_router
from .server import create_app
