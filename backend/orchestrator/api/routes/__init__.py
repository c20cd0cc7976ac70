"""API route modules"""
from .review import router as review_router

__all__ = ["review_router"]
