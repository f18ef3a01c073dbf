"""
API module for the quote service.
Provides the FastAPI-based REST API for quote submission and moderation.
"""

__all__ = ['app', 'routes', 'models', 'middleware', 'dependencies']
