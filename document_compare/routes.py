"""
Document Comparison Flask Routes
================================
API endpoints exposing the comparison pipeline to a presentation layer.

v2.0.0: Structural tree comparison (mutual views, detailed report)
"""

import time
from functools import wraps
from flask import Blueprint, request, jsonify, g

from config_logging import (
    StructuredLogger, get_logger, DocCompareError, ValidationError
)
from .differ import DocumentDiffer
from .models import DocumentNode, empty_tree

logger = get_logger('document_compare')

# Create blueprint
dc_blueprint = Blueprint('document_compare', __name__)


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def _correlation_id() -> str:
    return getattr(g, 'correlation_id', 'unknown')


def handle_dc_errors(f):
    """
    Decorator for standardized API error handling in Document Compare routes.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            # Log slow operations
            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow DC API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except DocCompareError as e:
            if e.status_code < 500:
                logger.warning(f"{e.code} in {f.__name__}: {e}")
            else:
                logger.error(f"{e.code} in {f.__name__}: {e}")
            return jsonify(e.to_dict(correlation_id=_correlation_id())), e.status_code
        except Exception as e:
            logger.exception(f"Unexpected error in {f.__name__}: {e}")
            error = DocCompareError('An unexpected error occurred', code='INTERNAL_ERROR')
            return jsonify(error.to_dict(correlation_id=_correlation_id())), 500

    return decorated


@dc_blueprint.before_request
def assign_correlation_id():
    """Tag every request (and its log lines) with a fresh correlation id."""
    g.correlation_id = StructuredLogger.new_correlation_id()


# =============================================================================
# REQUEST PARSING
# =============================================================================

def _parse_tree(data: dict, side: str) -> DocumentNode:
    """Convert one side of the request body to a DocumentNode; null is empty."""
    raw = data.get(side)
    if raw is None:
        return empty_tree()
    try:
        return DocumentNode.from_dict(raw)
    except KeyError as e:
        raise ValidationError(f"Malformed {side} document: missing {e}", field=side)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Malformed {side} document: {e}", field=side)


def _parse_request():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object with 'left' and 'right' trees")
    return _parse_tree(data, 'left'), _parse_tree(data, 'right')


# =============================================================================
# API ENDPOINTS
# =============================================================================

@dc_blueprint.route('/compare', methods=['POST'])
@handle_dc_errors
def compare():
    """
    Compare two document trees.

    Request body:
        { left: <tree>, right: <tree> }

    Returns:
        {
            success: true,
            result: {
                leftView, rightView,
                summary: { additions, deletions, changes },
                detailed: { lines, tables, images },
                alignment, changes, degraded, error, stage_failures
            }
        }
    """
    left, right = _parse_request()

    result = DocumentDiffer().compare(left, right)

    logger.info(
        f"Compared documents: {result.summary.additions} additions, "
        f"{result.summary.deletions} deletions"
    )

    return jsonify({
        'success': True,
        'result': result.to_dict()
    })


@dc_blueprint.route('/report', methods=['POST'])
@handle_dc_errors
def report():
    """
    Generate the detailed comparison report only.

    Request body:
        { left: <tree>, right: <tree> }

    Returns:
        { success: true, detailed: { lines, tables, images } }
    """
    left, right = _parse_request()

    detailed = DocumentDiffer().report(left, right)

    return jsonify({
        'success': True,
        'detailed': detailed.to_dict()
    })
