"""
Services package initialization
"""
from .ai_service import AIService, EnrichmentClient, build_enrichment_client
from .row_processor import RowProcessor

__all__ = ['AIService', 'EnrichmentClient', 'build_enrichment_client', 'RowProcessor']
