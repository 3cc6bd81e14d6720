"""
Tests for the update orchestrator.
"""

from django.test import SimpleTestCase

from markers.services.repository import DatabaseRepository
from markers.services.schemas import TileCoordinate
from markers.services.update_service import UpdateService
from tests.payloads import encode, marker_json, review_json


class RecordingRepository:
    """In-memory repository recording every apply call."""

    def __init__(self, result=True):
        self.result = result
        self.marker_calls = []
        self.review_calls = []

    def apply_marker_updates(self, markers, tile=None):
        self.marker_calls.append((list(markers), tile))
        return self.result

    def apply_review_updates(self, reviews, tile=None):
        self.review_calls.append((list(reviews), tile))
        return self.result


class TestSingleRecordUpdates(SimpleTestCase):
    """Test create, move, vote and webview processing."""

    def setUp(self):
        self.repository = RecordingRepository()
        self.service = UpdateService(self.repository)

    def test_default_repository(self):
        self.assertIsInstance(UpdateService().repository, DatabaseRepository)

    def test_create_marker(self):
        success, marker_id = self.service.process_create_marker_response(
            encode(marker_json())
        )

        self.assertTrue(success)
        self.assertEqual(marker_id, 4612287)
        markers, tile = self.repository.marker_calls[0]
        self.assertEqual(len(markers), 1)
        self.assertIsNone(tile)
        self.assertEqual(markers[0].marker.last_updated, 0)
        self.assertEqual(markers[0].marker.name, "Annapolis Harbor Marina")

    def test_create_marker_failure(self):
        success, marker_id = self.service.process_create_marker_response(
            encode(marker_json(poiType="Lighthouse"))
        )

        self.assertFalse(success)
        self.assertIsNone(marker_id)
        self.assertEqual(self.repository.marker_calls, [])

    def test_create_marker_repository_failure(self):
        service = UpdateService(RecordingRepository(result=False))
        self.assertEqual(
            service.process_create_marker_response(encode(marker_json())), (False, None)
        )

    def test_move_marker_resets_last_updated(self):
        self.assertTrue(self.service.process_move_marker_response(encode(marker_json())))

        markers, tile = self.repository.marker_calls[0]
        self.assertEqual(markers[0].marker.last_updated, 0)
        self.assertIsNone(tile)

    def test_move_marker_failure(self):
        self.assertFalse(self.service.process_move_marker_response(b"[]"))
        self.assertEqual(self.repository.marker_calls, [])

    def test_vote_resets_last_updated(self):
        """Test that a vote response is stored with last-updated reset to zero."""
        raw = encode(review_json(dateLastModified="2019-01-02T03:04:05Z", votes=9))

        self.assertTrue(self.service.process_vote_for_review_response(raw))

        reviews, tile = self.repository.review_calls[0]
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0].review.last_updated, 0)
        self.assertEqual(reviews[0].review.votes, 9)
        self.assertIsNone(tile)

    def test_vote_failure_does_not_persist(self):
        self.assertFalse(
            self.service.process_vote_for_review_response(encode(review_json(title=None)))
        )
        self.assertEqual(self.repository.review_calls, [])

    def test_webview_marker_update(self):
        raw = encode({"resultType": "SUCCESS", "data": marker_json()})

        self.assertTrue(self.service.process_webview_response(raw))
        markers, tile = self.repository.marker_calls[0]
        self.assertEqual(markers[0].marker.last_updated, 0)
        self.assertIsNone(tile)

    def test_webview_review_delete(self):
        raw = encode({"resultType": "REVIEWDELETE", "data": {"idStr": "990001"}})

        self.assertTrue(self.service.process_webview_response(raw))
        reviews, _ = self.repository.review_calls[0]
        self.assertTrue(reviews[0].review.is_deleted)

    def test_webview_error_and_unknown(self):
        for result_type in ("ERROR", "PENDING"):
            raw = encode({"resultType": result_type})
            self.assertFalse(self.service.process_webview_response(raw))

        self.assertEqual(self.repository.marker_calls, [])
        self.assertEqual(self.repository.review_calls, [])

    def test_webview_reports_repository_failure(self):
        service = UpdateService(RecordingRepository(result=False))
        raw = encode({"resultType": "SUCCESS", "data": marker_json()})
        self.assertFalse(service.process_webview_response(raw))


class TestSyncUpdates(SimpleTestCase):
    """Test tile sync processing."""

    def setUp(self):
        self.repository = RecordingRepository()
        self.service = UpdateService(self.repository)
        self.tile = TileCoordinate(x=12, y=40)

    def test_sync_markers_keeps_timestamps_and_tile(self):
        raw = encode([marker_json(idStr="1"), marker_json(idStr="2")])

        self.assertEqual(self.service.process_sync_markers_response(raw, self.tile), (True, 2))

        markers, tile = self.repository.marker_calls[0]
        self.assertEqual(tile, self.tile)
        self.assertEqual([m.marker.last_updated for m in markers], [1527067801] * 2)

    def test_sync_markers_empty_batch_skips_repository(self):
        self.assertEqual(self.service.process_sync_markers_response(b"[]", self.tile), (True, 0))
        self.assertEqual(self.repository.marker_calls, [])

    def test_sync_markers_failure(self):
        raw = encode([marker_json(idStr="1"), marker_json(idStr="2", status=None)])

        self.assertEqual(self.service.process_sync_markers_response(raw, self.tile), (False, 0))
        self.assertEqual(self.repository.marker_calls, [])

    def test_sync_markers_repository_failure(self):
        service = UpdateService(RecordingRepository(result=False))
        raw = encode([marker_json()])
        self.assertEqual(service.process_sync_markers_response(raw, self.tile), (False, 0))

    def test_sync_reviews(self):
        raw = encode([review_json(idStr="11"), review_json(idStr="12", status="Deleted")])

        self.assertEqual(self.service.process_sync_reviews_response(raw, self.tile), (True, 2))

        reviews, tile = self.repository.review_calls[0]
        self.assertEqual(tile, self.tile)
        self.assertTrue(reviews[1].review.is_deleted)

    def test_sync_reviews_empty_and_failed(self):
        self.assertEqual(self.service.process_sync_reviews_response(b"[]", self.tile), (True, 0))
        self.assertEqual(
            self.service.process_sync_reviews_response(b"{}", self.tile), (False, 0)
        )
        self.assertEqual(self.repository.review_calls, [])
