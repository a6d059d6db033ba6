"""
API blueprints
"""
from .excel_routes import excel_bp
from .process_routes import process_bp

__all__ = ['excel_bp', 'process_bp']
