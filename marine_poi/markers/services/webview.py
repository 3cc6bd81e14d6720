"""
WebView result dispatcher.

Classifies a webview envelope by its ``resultType`` and routes it to the
marker or review parser.
"""

import logging

from .fields import get_string, load_document
from .marker_parser import RawJson, parse_marker_webview_response
from .review_parser import parse_review_webview_response
from .schemas import WebViewResult, WebViewResultType

logger = logging.getLogger(__name__)

MARKER_RESULT_TYPES = frozenset({"SUCCESS", "DELETE"})
REVIEW_RESULT_TYPES = frozenset({"REVIEWSUCCESS", "REVIEWDELETE", "REVIEWFLAGGED"})


def parse_webview_response(raw: RawJson) -> WebViewResult:
    """
    Parse a webview envelope.

    Returns:
        WebViewResult of MARKER_UPDATE or REVIEW_UPDATE carrying the decoded
        record, ERROR when the envelope or its payload is invalid, or UNKNOWN
        for an unrecognized resultType
    """
    document = load_document(raw)
    if not isinstance(document, dict):
        logger.warning("Webview response is not a JSON object")
        return WebViewResult(result_type=WebViewResultType.ERROR)

    result_type = get_string(document, "resultType")
    if result_type is None:
        logger.warning("Webview response has no resultType")
        return WebViewResult(result_type=WebViewResultType.ERROR)
    result_type = result_type.upper()

    if result_type in MARKER_RESULT_TYPES:
        result = parse_marker_webview_response(document)
        if result.failed:
            logger.warning(f"Webview marker update failed: {result.reason}")
            return WebViewResult(result_type=WebViewResultType.ERROR)
        return WebViewResult(
            result_type=WebViewResultType.MARKER_UPDATE, marker=result.value
        )

    if result_type in REVIEW_RESULT_TYPES:
        result = parse_review_webview_response(document)
        if result.failed:
            logger.warning(f"Webview review update failed: {result.reason}")
            return WebViewResult(result_type=WebViewResultType.ERROR)
        return WebViewResult(
            result_type=WebViewResultType.REVIEW_UPDATE, review=result.value
        )

    if result_type == "ERROR":
        logger.info("Webview reported an error")
        return WebViewResult(result_type=WebViewResultType.ERROR)

    logger.warning(f"Unknown webview resultType '{result_type}'")
    return WebViewResult(result_type=WebViewResultType.UNKNOWN)
