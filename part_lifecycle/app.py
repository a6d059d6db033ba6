"""
Main Flask Application
"""
from flask import Flask
from flask_cors import CORS

from . import config
from .api import excel_bp, process_bp
from .services.ai_service import EnrichmentClient, build_enrichment_client
from .services.analysis_logger import run_log_subscriber
from .services.row_processor import RowProcessor


def create_app(processor: RowProcessor = None, enrichment_client: EnrichmentClient = None) -> Flask:
    """
    Build the Flask app around a single RowProcessor

    Args:
        processor: Processor to serve; built from enrichment_client if omitted
        enrichment_client: Client for a new processor; defaults to the configured backend
    """
    config.configure_logging(config.LOG_LEVEL)

    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = config.MAX_UPLOAD_MB * 1024 * 1024
    CORS(app)

    if processor is None:
        processor = RowProcessor(enrichment_client or build_enrichment_client())
        if config.RUN_LOG_ENABLED:
            processor.subscribe(run_log_subscriber)
    app.extensions['row_processor'] = processor

    app.register_blueprint(excel_bp, url_prefix='/api/excel')
    app.register_blueprint(process_bp, url_prefix='/api/process')

    return app


def main():
    app = create_app()
    app.run(host=config.HOST, port=config.PORT, threaded=True)


if __name__ == "__main__":
    main()
