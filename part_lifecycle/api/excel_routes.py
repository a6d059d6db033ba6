"""
Excel API Routes - Handle part list upload and enriched result export
"""
from io import BytesIO

import structlog
from flask import Blueprint, current_app, jsonify, request, send_file

from ..config import ALLOWED_EXTENSIONS
from ..exceptions import PartLifecycleError
from ..services.excel_service import EXCEL_MIMETYPE, export_filename, export_records_to_excel, parse_parts_file

logger = structlog.get_logger(__name__)

excel_bp = Blueprint('excel', __name__)


def _processor():
    return current_app.extensions['row_processor']


@excel_bp.route('/upload', methods=['POST'])
def upload_excel():
    """
    Upload an Excel file and load its parts for processing
    POST /api/excel/upload

    Request:
        - multipart/form-data with 'file' field

    Response:
        {
            "success": true,
            "total": 2,
            "records": [
                {
                    "part": "ABC123",
                    "website": "vendor.com",
                    "link": "Pending",
                    "lifecycle": "Pending",
                    "datasheet": "Pending",
                    "status": "pending",
                    "error": null
                },
                ...
            ]
        }
    """
    if 'file' not in request.files:
        return jsonify({"success": False, "error": "No file provided"}), 400

    file = request.files['file']

    if file.filename == '':
        return jsonify({"success": False, "error": "No file selected"}), 400

    # Check file extension
    if not file.filename.lower().endswith(ALLOWED_EXTENSIONS):
        return jsonify({"success": False, "error": "Invalid file type. Please upload .xlsx or .xls file"}), 400

    processor = _processor()
    if processor.is_running:
        return jsonify({"success": False, "error": "Processing is running. Stop it before uploading a new file"}), 409

    try:
        records = parse_parts_file(file.read(), file.filename)
        processor.load(records)
    except PartLifecycleError as e:
        return jsonify({"success": False, "error": str(e)}), 400
    except Exception as e:
        logger.exception("upload_failed", filename=file.filename)
        return jsonify({"success": False, "error": str(e)}), 500

    snapshot = processor.snapshot()
    return jsonify({
        "success": True,
        "total": snapshot['total'],
        "records": snapshot['records'],
    })


@excel_bp.route('/export', methods=['GET'])
def export_excel():
    """
    Export enriched parts to Excel
    GET /api/excel/export

    Response:
        Excel file download (Part_Analysis_<YYYY-MM-DD>.xlsx)
    """
    processor = _processor()
    if not processor.is_done:
        return jsonify({"success": False, "error": "Export is available once every part has been processed"}), 409

    try:
        excel_content = export_records_to_excel(processor.records)
    except Exception as e:
        logger.exception("export_failed")
        return jsonify({"success": False, "error": str(e)}), 500

    return send_file(
        BytesIO(excel_content),
        mimetype=EXCEL_MIMETYPE,
        as_attachment=True,
        download_name=export_filename()
    )
