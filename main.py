from datetime import date
from flask import Flask, request, jsonify
from flask_cors import CORS
from plan_engine import PlanProcessor
from plan_engine.exceptions import ValidationError
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (dashboard and payments apps call the API cross-origin)
CORS(app)

DUE_SOON_WINDOW_DAYS = int(os.environ.get("DUE_SOON_WINDOW_DAYS", 5))
CASH_FLOW_DAYS = int(os.environ.get("CASH_FLOW_DAYS", 90))
TOP_COLLEGES_LIMIT = int(os.environ.get("TOP_COLLEGES_LIMIT", 5))

# Initialize the plan processor
processor = PlanProcessor(due_soon_window_days=DUE_SOON_WINDOW_DAYS)


def _agency_summary(input_data):
    input_data.setdefault("days", CASH_FLOW_DAYS)
    input_data.setdefault("top_n", TOP_COLLEGES_LIMIT)
    return processor.agency_summary_from_dict(input_data)


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Payment Plan Engine API",
        "version": "1.0",
        "endpoints": {
            "generate_installments": "/generate_installments [POST]",
            "record_payment": "/record_payment [POST]",
            "plan_summary": "/plan_summary [POST]",
            "agency_summary": "/agency_summary [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def _handle(operation, label):
    """Run a processor operation on the JSON body and map engine errors to responses."""
    try:
        input_data = request.get_json(force=True, silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        # The engine never reads the clock; the API supplies "today" when the caller doesn't
        input_data.setdefault("as_of", date.today().isoformat())

        logger.info(f"Processing {label}")
        result = operation(input_data)
        logger.info(f"{label} processed successfully")

        return jsonify(result), 200

    except ValidationError as e:
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "errors": [e.to_dict()],
            "status": "validation_failed"
        }), 400

    except (ValueError, KeyError, TypeError) as e:
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


@app.route("/generate_installments", methods=["POST"])
def generate_installments():
    """Generate a draft installment schedule preview (nothing is persisted)"""
    return _handle(processor.generate_from_dict, "installment generation")


@app.route("/record_payment", methods=["POST"])
def record_payment():
    """Apply a payment to an installment and return the updated row"""
    return _handle(processor.record_payment_from_dict, "payment recording")


@app.route("/plan_summary", methods=["POST"])
def plan_summary():
    """Plan progress and live installment statuses"""
    return _handle(processor.plan_summary_from_dict, "plan summary")


@app.route("/agency_summary", methods=["POST"])
def agency_summary():
    """Agency dashboard figures"""
    return _handle(_agency_summary, "agency summary")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
