"""
Tests for marker response decoding.
"""

from django.test import SimpleTestCase

from markers.services.lookups import MarkerType, UnitType
from markers.services.marker_parser import (
    extract_contact_channels,
    parse_create_marker_response,
    parse_marker,
    parse_marker_sync_response,
    parse_marker_webview_response,
    parse_move_marker_response,
    parse_section,
)
from markers.services.schemas import NO_PROGRAM_TIER
from tests.payloads import encode, marker_json

SEMICIRCLES_PER_DEGREE = 2**31 / 180


class TestParseMarker(SimpleTestCase):
    """Test decoding of a single marker object."""

    def test_full_marker(self):
        """Test that every header field and section is decoded."""
        result = parse_marker(marker_json())

        self.assertTrue(result.ok)
        collection = result.value
        marker = collection.marker
        self.assertEqual(marker.id, 4612287)
        self.assertEqual(marker.last_updated, 1527067801)
        self.assertEqual(marker.marker_type, MarkerType.MARINA)
        self.assertFalse(marker.is_deleted)
        self.assertEqual(marker.geohash, 1234567890123)
        self.assertEqual(marker.search_filter, 8)
        self.assertEqual(marker.name, "Annapolis Harbor Marina")

        self.assertEqual(collection.meta.section_title, 101)
        self.assertEqual(collection.meta.section_note_json, '{"value":"Call ahead"}')

    def test_position_round_trips_within_one_semicircle(self):
        """Test semicircle position against the degrees it was encoded from."""
        for latitude, longitude in ((38.9784, -76.4922), (-33.8568, 151.2153), (0.0, 0.0)):
            node = marker_json(mapLocation={"latitude": latitude, "longitude": longitude})
            marker = parse_marker(node).value.marker

            self.assertLessEqual(abs(marker.latitude - latitude * SEMICIRCLES_PER_DEGREE), 1)
            self.assertLessEqual(abs(marker.longitude - longitude * SEMICIRCLES_PER_DEGREE), 1)

    def test_present_sections_only(self):
        """Test that a section is set if and only if its key was present."""
        collection = parse_marker(marker_json()).value

        self.assertIsNotNone(collection.address)
        self.assertIsNotNone(collection.contact)
        self.assertIsNotNone(collection.fuel)
        for absent in ("amenities", "business", "business_program", "dockage",
                       "moorings", "navigation", "retail", "services"):
            self.assertIsNone(getattr(collection, absent), absent)

    def test_empty_section_is_attached_with_defaults(self):
        collection = parse_marker(
            marker_json(dockage={}, businessProgram={}, amenity={})
        ).value

        self.assertIsNotNone(collection.dockage)
        self.assertEqual(collection.dockage.section_title, 0)
        self.assertEqual(collection.dockage.distance_unit, UnitType.UNKNOWN)
        self.assertEqual(collection.business_program.program_tier, NO_PROGRAM_TIER)
        self.assertIsNotNone(collection.amenities)

    def test_fuel_section_fields(self):
        fuel = parse_marker(marker_json()).value.fuel

        self.assertEqual(fuel.section_title, 104)
        self.assertEqual(fuel.currency, "USD")
        self.assertEqual(fuel.diesel_price, 4.25)
        self.assertEqual(fuel.gas_price, 5.1)
        self.assertEqual(fuel.distance_unit, UnitType.FEET)
        self.assertEqual(fuel.volume_unit, UnitType.GALLON)

    def test_malformed_section_fields_do_not_fail_marker(self):
        """Test that bad fields inside a section keep their defaults."""
        node = marker_json(
            fuel={
                "titleTextHandle": "104",
                "dieselPrice": "4.25",
                "gasPrice": 5,
                "distanceUnit": "Furlong",
                "currency": "EUR",
            }
        )
        result = parse_marker(node)

        self.assertTrue(result.ok)
        fuel = result.value.fuel
        self.assertEqual(fuel.section_title, 0)
        self.assertEqual(fuel.diesel_price, 0.0)
        self.assertEqual(fuel.gas_price, 0.0)
        self.assertEqual(fuel.distance_unit, UnitType.UNKNOWN)
        self.assertEqual(fuel.currency, "EUR")

    def test_contact_channels(self):
        contact = parse_marker(marker_json()).value.contact

        self.assertEqual(contact.section_title, 103)
        self.assertEqual(contact.phone, "+1 410 555 0100")
        self.assertEqual(contact.vhf_channel, "16")
        self.assertIn("harbor@example.com", contact.attribute_fields_json)

    def test_business_program_section(self):
        node = marker_json(
            businessProgram={"programTier": 2, "competitorAd": {"headline": "Best fuel"}}
        )
        program = parse_marker(node).value.business_program

        self.assertEqual(program.program_tier, 2)
        self.assertEqual(program.competitor_ad_json, '{"headline":"Best fuel"}')

    def test_business_photos_skip_invalid_elements(self):
        """Test that one bad photo is dropped and the marker still decodes."""
        node = marker_json(
            businessPhotos=[
                {"ordinal": 0, "downloadUrl": "https://photos.example.com/a.jpg"},
                {"downloadUrl": "https://photos.example.com/b.jpg"},
            ]
        )
        result = parse_marker(node)

        self.assertTrue(result.ok)
        photos = result.value.business_photos
        self.assertEqual(len(photos), 1)
        self.assertEqual(photos[0].ordinal, 0)
        self.assertEqual(photos[0].download_url, "https://photos.example.com/a.jpg")

    def test_competitors_skip_invalid_elements(self):
        node = marker_json(
            competitors=[
                "4612300",
                {"ordinal": 0, "competitorPoiIdStr": "4612288"},
                {"ordinal": 1, "competitorPoiIdStr": "not a number"},
                {"ordinal": 2, "competitorPoiIdStr": 18446744073709551615},
            ]
        )
        competitors = parse_marker(node).value.competitors

        self.assertEqual([c.competitor_id for c in competitors], [4612288, 2**64 - 1])

    def test_owned_lists_empty_when_absent_or_not_arrays(self):
        collection = parse_marker(marker_json(businessPhotos=None, competitors={})).value

        self.assertEqual(collection.business_photos, ())
        self.assertEqual(collection.competitors, ())

    def test_identifier_as_number_or_string(self):
        as_text = parse_marker(marker_json(idStr="18446744073709551615")).value
        as_number = parse_marker(marker_json(idStr=18446744073709551615)).value

        self.assertEqual(as_text.marker.id, 2**64 - 1)
        self.assertEqual(as_text.marker.id, as_number.marker.id)

    def test_search_filter_defaults_to_zero(self):
        for value in (None, "abc", -3):
            result = parse_marker(marker_json(searchFilterStr=value))
            self.assertTrue(result.ok)
            self.assertEqual(result.value.marker.search_filter, 0)


class TestParseMarkerShortCircuit(SimpleTestCase):
    """Test the ordered short-circuit rules of marker decoding."""

    def test_deleted_marker_stops_after_header(self):
        """Test that a deleted marker carries only the header fields."""
        result = parse_marker(marker_json(status="Deleted"))

        self.assertTrue(result.ok)
        collection = result.value
        self.assertTrue(collection.marker.is_deleted)
        self.assertEqual(collection.marker.id, 4612287)
        self.assertEqual(collection.marker.last_updated, 1527067801)
        self.assertEqual(collection.marker.marker_type, MarkerType.MARINA)
        self.assertEqual(collection.marker.name, "")
        self.assertEqual(collection.marker.latitude, 0)
        for section in ("address", "contact", "fuel"):
            self.assertIsNone(getattr(collection, section), section)
        self.assertEqual(collection.business_photos, ())
        self.assertEqual(collection.competitors, ())

    def test_deleted_marker_without_location_succeeds(self):
        result = parse_marker(
            marker_json(status="Deleted", mapLocation=None, pointOfInterest=None)
        )
        self.assertTrue(result.ok)

    def test_status_compare_is_case_sensitive(self):
        result = parse_marker(marker_json(status="deleted"))

        self.assertTrue(result.ok)
        self.assertFalse(result.value.marker.is_deleted)

    def test_unknown_type_fails_with_unknown_value(self):
        """Test that both the failure and the Unknown type are observable."""
        result = parse_marker(marker_json(poiType="Lighthouse"))

        self.assertTrue(result.failed)
        self.assertEqual(result.value.marker.marker_type, MarkerType.UNKNOWN)
        self.assertEqual(result.value.marker.id, 4612287)

    def test_airport_type_decodes_as_unknown(self):
        result = parse_marker(marker_json(poiType="Airport"))

        self.assertTrue(result.ok)
        self.assertEqual(result.value.marker.marker_type, MarkerType.UNKNOWN)

    def test_missing_status_fails(self):
        result = parse_marker(marker_json(status=None))

        self.assertTrue(result.failed)
        self.assertIn("status", result.reason)
        self.assertEqual(result.value.marker.id, 4612287)

    def test_required_header_fields(self):
        for key in ("idStr", "dateLastModified", "poiType", "mapLocation",
                    "geohashStr", "pointOfInterest"):
            result = parse_marker(marker_json(**{key: None}))
            self.assertTrue(result.failed, key)

    def test_invalid_timestamp_fails(self):
        self.assertTrue(parse_marker(marker_json(dateLastModified="23/05/2018")).failed)

    def test_integer_coordinates_fail(self):
        """Test that location values must be JSON doubles."""
        result = parse_marker(marker_json(mapLocation={"latitude": 38, "longitude": -76.5}))
        self.assertTrue(result.failed)

    def test_missing_name_fails_with_partial_meta(self):
        node = marker_json(pointOfInterest={"titleTextHandle": 101})
        result = parse_marker(node)

        self.assertTrue(result.failed)
        self.assertEqual(result.value.meta.section_title, 101)

    def test_section_note_is_optional(self):
        node = marker_json(pointOfInterest={"titleTextHandle": 101, "name": "Cove"})
        result = parse_marker(node)

        self.assertTrue(result.ok)
        self.assertEqual(result.value.meta.section_note_json, "")

    def test_non_object_fails(self):
        for node in ([], "marker", 42, None):
            self.assertTrue(parse_marker(node).failed)


class TestContactChannels(SimpleTestCase):
    """Test the second-stage decode of contact attribute fields."""

    def test_extracts_known_handles(self):
        text = (
            '[{"fieldTextHandle":25,"value":"68"},'
            '{"fieldTextHandle":24,"value":"555-0100"},'
            '{"fieldTextHandle":26,"value":"ignored"}]'
        )
        self.assertEqual(extract_contact_channels(text), ("555-0100", "68"))

    def test_tolerates_bad_input(self):
        self.assertEqual(extract_contact_channels(""), ("", ""))
        self.assertEqual(extract_contact_channels("not json"), ("", ""))
        self.assertEqual(extract_contact_channels('{"fieldTextHandle":24}'), ("", ""))
        self.assertEqual(
            extract_contact_channels('[1, {"fieldTextHandle":"24","value":"x"},'
                                     '{"fieldTextHandle":24,"value":7}]'),
            ("", ""),
        )

    def test_contact_section_without_attribute_fields(self):
        contact = parse_section({"titleTextHandle": 9}, "contact")

        self.assertEqual(contact.section_title, 9)
        self.assertEqual(contact.phone, "")
        self.assertEqual(contact.vhf_channel, "")


class TestMarkerResponses(SimpleTestCase):
    """Test the create, move and sync response decoders."""

    def test_create_and_move_responses(self):
        for parse in (parse_create_marker_response, parse_move_marker_response):
            result = parse(encode(marker_json()))
            self.assertTrue(result.ok)
            self.assertEqual(result.value.marker.id, 4612287)

    def test_out_of_range_coordinate_fails(self):
        raw = encode(marker_json()).replace(b"38.9784", b"1e400")

        self.assertTrue(parse_create_marker_response(raw).failed)
        self.assertTrue(parse_marker_sync_response(b"[" + raw + b"]").failed)

    def test_large_finite_coordinate_saturates(self):
        node = marker_json(mapLocation={"latitude": 1e300, "longitude": -1e300})
        marker = parse_marker(node).value.marker

        self.assertEqual(marker.latitude, 2**31 - 1)
        self.assertEqual(marker.longitude, -(2**31))

    def test_deeply_nested_response_fails(self):
        raw = b"[" * 100000 + b"]" * 100000

        self.assertTrue(parse_create_marker_response(raw).failed)
        self.assertTrue(parse_marker_sync_response(raw).failed)

    def test_single_response_must_be_object(self):
        self.assertTrue(parse_create_marker_response(encode([marker_json()])).failed)
        self.assertTrue(parse_move_marker_response(b"{broken").failed)

    def test_sync_batch(self):
        markers = [marker_json(idStr=str(n)) for n in (1, 2, 3)]
        markers.append(marker_json(idStr="4", status="Deleted"))
        result = parse_marker_sync_response(encode(markers))

        self.assertTrue(result.ok)
        self.assertEqual([m.marker.id for m in result.value], [1, 2, 3, 4])
        self.assertTrue(result.value[3].marker.is_deleted)

    def test_sync_batch_is_all_or_nothing(self):
        """Test that one bad element rejects the whole batch."""
        markers = [marker_json(idStr="1"), marker_json(idStr="2", poiType="Lighthouse")]
        result = parse_marker_sync_response(encode(markers))

        self.assertTrue(result.failed)
        self.assertEqual(result.value, ())
        self.assertIn("element 1", result.reason)

    def test_sync_batch_rejects_non_object_elements(self):
        result = parse_marker_sync_response(encode([marker_json(), "marker"]))
        self.assertTrue(result.failed)

    def test_sync_empty_and_non_array(self):
        self.assertEqual(parse_marker_sync_response(b"[]").value, ())
        self.assertTrue(parse_marker_sync_response(encode(marker_json())).failed)


class TestMarkerWebview(SimpleTestCase):
    """Test the marker webview envelope decoder."""

    def test_success_decodes_data(self):
        for result_type in ("SUCCESS", "success", "Success"):
            result = parse_marker_webview_response(
                {"resultType": result_type, "data": marker_json()}
            )
            self.assertTrue(result.ok, result_type)
            self.assertEqual(result.value.marker.name, "Annapolis Harbor Marina")

    def test_success_with_invalid_data_fails(self):
        result = parse_marker_webview_response(
            {"resultType": "SUCCESS", "data": marker_json(geohashStr=None)}
        )
        self.assertTrue(result.failed)
        self.assertTrue(parse_marker_webview_response({"resultType": "SUCCESS"}).failed)

    def test_delete_reads_identifier_only(self):
        for data in ("4612287", 4612287):
            result = parse_marker_webview_response({"resultType": "delete", "data": data})

            self.assertTrue(result.ok)
            self.assertEqual(result.value.marker.id, 4612287)
            self.assertTrue(result.value.marker.is_deleted)
            self.assertIsNone(result.value.address)

    def test_delete_without_identifier_fails(self):
        self.assertTrue(parse_marker_webview_response({"resultType": "DELETE"}).failed)
        self.assertTrue(
            parse_marker_webview_response({"resultType": "DELETE", "data": {}}).failed
        )

    def test_error_and_unknown_fail(self):
        for result_type in ("ERROR", "REVIEWSUCCESS", "PENDING"):
            result = parse_marker_webview_response(
                {"resultType": result_type, "data": marker_json()}
            )
            self.assertTrue(result.failed, result_type)
