"""
Tests for webview result classification.
"""

from django.test import SimpleTestCase

from markers.services.schemas import WebViewResultType
from markers.services.webview import parse_webview_response
from tests.payloads import encode, marker_json, review_json


class TestWebviewDispatch(SimpleTestCase):
    """Test routing of webview envelopes to the marker and review decoders."""

    def test_marker_update(self):
        result = parse_webview_response(encode({"resultType": "SUCCESS", "data": marker_json()}))

        self.assertEqual(result.result_type, WebViewResultType.MARKER_UPDATE)
        self.assertEqual(result.marker.marker.id, 4612287)
        self.assertIsNone(result.review)

    def test_marker_delete(self):
        result = parse_webview_response(encode({"resultType": "Delete", "data": "4612287"}))

        self.assertEqual(result.result_type, WebViewResultType.MARKER_UPDATE)
        self.assertTrue(result.marker.marker.is_deleted)

    def test_review_updates(self):
        envelopes = [
            {"resultType": "REVIEWSUCCESS", "data": review_json()},
            {"resultType": "reviewdelete", "data": {"idStr": "990001"}},
            {"resultType": "ReviewFlagged", "data": {"idStr": 990001}},
        ]
        for envelope in envelopes:
            result = parse_webview_response(encode(envelope))

            self.assertEqual(result.result_type, WebViewResultType.REVIEW_UPDATE)
            self.assertEqual(result.review.review.id, 990001)
            self.assertIsNone(result.marker)

    def test_delegate_failure_is_error(self):
        """Test that a failed marker or review payload classifies as an error."""
        envelopes = [
            {"resultType": "SUCCESS", "data": marker_json(poiType="Lighthouse")},
            {"resultType": "DELETE"},
            {"resultType": "REVIEWSUCCESS", "data": review_json(rating=None)},
            {"resultType": "REVIEWFLAGGED", "data": {}},
        ]
        for envelope in envelopes:
            result = parse_webview_response(encode(envelope))
            self.assertEqual(result.result_type, WebViewResultType.ERROR, envelope)

    def test_error_result(self):
        result = parse_webview_response(encode({"resultType": "error", "data": None}))
        self.assertEqual(result.result_type, WebViewResultType.ERROR)

    def test_unknown_result_type(self):
        with self.assertLogs("markers.services.webview", level="WARNING"):
            result = parse_webview_response(encode({"resultType": "PENDING"}))

        self.assertEqual(result.result_type, WebViewResultType.UNKNOWN)

    def test_malformed_envelope_is_error(self):
        for raw in (b"not json", encode([]), encode({"data": {}}), encode({"resultType": 1})):
            result = parse_webview_response(raw)
            self.assertEqual(result.result_type, WebViewResultType.ERROR, raw)
