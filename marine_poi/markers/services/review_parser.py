"""
Review response parser.

Decodes user reviews returned by the review sync, vote and webview
endpoints into ReviewRecordCollection instances.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from .fields import (
    ListPolicy,
    decode_array,
    get_datetime_epoch,
    get_flexible_uint64,
    get_sint32,
    get_string,
    load_document,
)
from .marker_parser import RawJson, StatusReadPolicy, read_deleted_status
from .schemas import DecodeResult, ReviewPhoto, ReviewRecord, ReviewRecordCollection

logger = logging.getLogger(__name__)

REVIEW_STATUS_POLICY = StatusReadPolicy.NON_ABORTING

# Review field -> (JSON key, accessor); all required
REQUIRED_FIELDS = (
    ("marker_id", "poiIdStr", get_flexible_uint64),
    ("captain", "captainName", get_string),
    ("visit_date", "dateVisited", get_string),
    ("rating", "rating", get_sint32),
    ("text", "text", get_string),
    ("title", "title", get_string),
    ("votes", "votes", get_sint32),
)


def _parse_review_photo(node: Any) -> Optional[ReviewPhoto]:
    ordinal = get_sint32(node, "ordinal")
    download_url = get_string(node, "downloadUrl")
    if ordinal is None or download_url is None:
        return None
    return ReviewPhoto(ordinal=ordinal, download_url=download_url)


def _failure(
    reason: str, review: Dict[str, Any]
) -> DecodeResult[ReviewRecordCollection]:
    return DecodeResult.failure(
        reason, ReviewRecordCollection(review=ReviewRecord(**review))
    )


def parse_review(
    node: Any, status_policy: StatusReadPolicy = REVIEW_STATUS_POLICY
) -> DecodeResult[ReviewRecordCollection]:
    """
    Decode a single review object.

    A deleted review stops after the header. When the photo list is present
    every photo must decode or the review fails.
    """
    review: Dict[str, Any] = {}

    if not isinstance(node, dict):
        return _failure("review is not a JSON object", review)

    review_id = get_flexible_uint64(node, "idStr")
    if review_id is None:
        return _failure("missing or invalid idStr", review)
    review["id"] = review_id

    is_deleted = read_deleted_status(node)
    status_ok = is_deleted is not None
    if status_ok:
        review["is_deleted"] = is_deleted
    elif status_policy is StatusReadPolicy.BLOCKING:
        return _failure(f"review {review_id}: missing status", review)

    last_updated = get_datetime_epoch(node, "dateLastModified")
    if last_updated is not None:
        review["last_updated"] = last_updated

    if not status_ok:
        return _failure(f"review {review_id}: missing status", review)
    if last_updated is None:
        return _failure(f"review {review_id}: invalid dateLastModified", review)

    if is_deleted:
        logger.debug(f"Review {review_id} is deleted")
        return DecodeResult.success(ReviewRecordCollection(review=ReviewRecord(**review)))

    for attribute, key, accessor in REQUIRED_FIELDS:
        value = accessor(node, key)
        if value is None:
            return _failure(f"review {review_id}: missing or invalid {key}", review)
        review[attribute] = value

    response = get_string(node, "response")
    if response is not None:
        review["response"] = response

    photos: Tuple[ReviewPhoto, ...] = ()
    if "photos" in node:
        decoded = decode_array(
            node["photos"], _parse_review_photo, ListPolicy.ALL_OR_NOTHING, "review photo"
        )
        if decoded is None:
            return _failure(f"review {review_id}: invalid photos", review)
        photos = tuple(decoded)

    return DecodeResult.success(
        ReviewRecordCollection(review=ReviewRecord(**review), photos=photos)
    )


def parse_review_sync_response(
    raw: RawJson,
) -> DecodeResult[Tuple[ReviewRecordCollection, ...]]:
    """
    Parse a review sync response.

    The response is a JSON array of review objects. One undecodable element
    fails the whole batch and no reviews are returned.
    """
    document = load_document(raw)
    if not isinstance(document, list):
        return DecodeResult.failure("review sync response is not a JSON array", ())

    reviews = []
    for index, item in enumerate(document):
        result = parse_review(item)
        if result.failed:
            logger.warning(
                f"Rejecting review sync batch, element {index} failed: {result.reason}"
            )
            return DecodeResult.failure(f"element {index}: {result.reason}", ())
        reviews.append(result.value)

    logger.info(f"Parsed {len(reviews)} reviews from sync response")
    return DecodeResult.success(tuple(reviews))


def parse_vote_for_review_response(raw: RawJson) -> DecodeResult[ReviewRecordCollection]:
    """
    Parse the response to a vote-for-review request.
    """
    document = load_document(raw)
    if not isinstance(document, dict):
        return DecodeResult.failure("vote response is not a JSON object")
    return parse_review(document)


def parse_review_webview_response(
    document: Any,
) -> DecodeResult[ReviewRecordCollection]:
    """
    Parse a review webview envelope.

    ``REVIEWSUCCESS`` carries a full review in ``data``; ``REVIEWDELETE`` and
    ``REVIEWFLAGGED`` carry only ``data.idStr`` and mark the review deleted.
    """
    result_type = get_string(document, "resultType")
    if result_type is None:
        return DecodeResult.failure("missing resultType")
    result_type = result_type.upper()

    data = document.get("data") if isinstance(document, dict) else None
    has_data = isinstance(document, dict) and "data" in document

    if result_type == "REVIEWSUCCESS":
        if not has_data:
            return DecodeResult.failure("webview REVIEWSUCCESS without data")
        return parse_review(data)

    if result_type in ("REVIEWDELETE", "REVIEWFLAGGED"):
        review_id = get_flexible_uint64(data, "idStr")
        if review_id is None:
            return DecodeResult.failure(f"webview {result_type} without a review id")
        return DecodeResult.success(
            ReviewRecordCollection(review=ReviewRecord(id=review_id, is_deleted=True))
        )

    if result_type == "ERROR":
        return DecodeResult.failure("webview reported an error")

    logger.warning(f"Unknown review webview resultType '{result_type}'")
    return DecodeResult.failure(f"unknown resultType '{result_type}'")
