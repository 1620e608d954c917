"""
AWS Lambda handler for the Payment Plan Engine API.

This is the production entry point for AWS Lambda deployments.
For local development, use main.py (Flask app) instead.
"""

import base64
import json
import logging
import os
from datetime import date

from plan_engine import PlanProcessor
from plan_engine.exceptions import ValidationError

# Configure logging
logger = logging.getLogger()
logger.setLevel(logging.INFO)

# Environment (dev, staging, prod)
ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")
DUE_SOON_WINDOW_DAYS = int(os.environ.get("DUE_SOON_WINDOW_DAYS", 5))
CASH_FLOW_DAYS = int(os.environ.get("CASH_FLOW_DAYS", 90))
TOP_COLLEGES_LIMIT = int(os.environ.get("TOP_COLLEGES_LIMIT", 5))

# Initialize processor (reused across warm invocations)
processor = PlanProcessor(due_soon_window_days=DUE_SOON_WINDOW_DAYS)


def agency_summary_with_defaults(data):
    """Dashboard summary using the deployment's projection window and top-N."""
    data.setdefault("days", CASH_FLOW_DAYS)
    data.setdefault("top_n", TOP_COLLEGES_LIMIT)
    return processor.agency_summary_from_dict(data)


# CORS headers for API Gateway
CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,Authorization",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
}

POST_ROUTES = {
    "/generate_installments": processor.generate_from_dict,
    "/record_payment": processor.record_payment_from_dict,
    "/plan_summary": processor.plan_summary_from_dict,
    "/agency_summary": agency_summary_with_defaults,
}


def lambda_handler(event, context):
    """
    Main Lambda entry point.

    Handles API Gateway events for:
    - GET /health
    - GET /api
    - POST /generate_installments, /record_payment, /plan_summary, /agency_summary
    - OPTIONS (CORS preflight)
    """
    # Handle CORS preflight
    http_method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method", "")
    if http_method == "OPTIONS":
        return {"statusCode": 200, "headers": CORS_HEADERS, "body": ""}

    # Get path (supports both REST API and HTTP API formats)
    path = event.get("path") or event.get("rawPath", "")

    if path == "/health" and http_method == "GET":
        return handle_health()
    elif path == "/api" and http_method == "GET":
        return handle_api_info()
    elif path in POST_ROUTES and http_method == "POST":
        return handle_operation(event, POST_ROUTES[path], path)
    else:
        return _response(404, {"error": "Not found", "path": path})


def _response(status_code, body):
    return {"statusCode": status_code, "headers": CORS_HEADERS, "body": json.dumps(body)}


def handle_health():
    """Health check endpoint."""
    return _response(200, {"status": "healthy", "environment": ENVIRONMENT})


def handle_api_info():
    """API information endpoint."""
    return _response(
        200,
        {
            "status": "ok",
            "message": "Payment Plan Engine API",
            "version": "1.0",
            "environment": ENVIRONMENT,
            "runtime": "AWS Lambda",
            "endpoints": {path: "[POST]" for path in POST_ROUTES} | {"/health": "[GET]"},
        },
    )


def handle_operation(event, operation, path):
    """Run one engine operation on the request body."""
    try:
        body = event.get("body", "")
        if isinstance(body, str):
            if not body:
                return _response(400, {"error": "No input data provided", "status": "failed"})
            # Handle base64 encoded body (API Gateway)
            if event.get("isBase64Encoded"):
                body = base64.b64decode(body).decode("utf-8")
            input_data = json.loads(body)
        else:
            input_data = body

        if not isinstance(input_data, dict):
            return _response(400, {"error": "Request body must be a JSON object", "status": "failed"})

        # The engine never reads the clock; the API supplies "today" when the caller doesn't
        input_data.setdefault("as_of", date.today().isoformat())

        logger.info(f"Processing {path}")
        result = operation(input_data)
        logger.info(f"Processed {path} successfully")

        return _response(200, result)

    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {str(e)}")
        return _response(400, {"error": f"Invalid JSON: {str(e)}", "status": "failed"})

    except ValidationError as e:
        logger.error(f"Validation error: {str(e)}")
        return _response(
            400,
            {"error": f"Validation error: {str(e)}", "errors": [e.to_dict()], "status": "validation_failed"},
        )

    except (ValueError, KeyError, TypeError) as e:
        # Malformed input that did not reach the engine's validators
        logger.error(f"Validation error: {str(e)}")
        return _response(400, {"error": f"Validation error: {str(e)}", "status": "validation_failed"})

    except Exception as e:
        # Unexpected errors - log details but return generic message to avoid information disclosure
        logger.error(f"Unexpected processing error: {str(e)}", exc_info=True)
        return _response(500, {"error": "An unexpected error occurred during processing", "status": "failed"})
