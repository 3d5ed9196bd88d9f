"""
Main page routes
"""
from .main_routes import main_bp

__all__ = ['main_bp']
