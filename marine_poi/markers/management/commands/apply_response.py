"""
Management command to decode saved service responses and apply them.

Usage:
    python manage.py apply_response create-marker responses/create.json
    python manage.py apply_response sync-markers tile_*.json --tile 12 40
    python manage.py apply_response export manifest.json --dry-run --verbose
"""

import glob
import logging
import time
from pathlib import Path
from typing import List, Optional

from django.core.management.base import BaseCommand, CommandError, CommandParser

from markers.services.marker_parser import (
    parse_create_marker_response,
    parse_marker_sync_response,
    parse_move_marker_response,
)
from markers.services.response_parser import (
    parse_export_response,
    parse_sync_status_response,
    parse_tiles_by_bounding_boxes_response,
)
from markers.services.review_parser import (
    parse_review_sync_response,
    parse_vote_for_review_response,
)
from markers.services.schemas import DecodeResult, TileCoordinate, WebViewResultType
from markers.services.update_service import UpdateService
from markers.services.webview import parse_webview_response

logger = logging.getLogger(__name__)

# Kinds applied through UpdateService, with the decoder used for --dry-run
PERSISTING_KINDS = {
    "create-marker": parse_create_marker_response,
    "move-marker": parse_move_marker_response,
    "sync-markers": parse_marker_sync_response,
    "sync-reviews": parse_review_sync_response,
    "vote-review": parse_vote_for_review_response,
    "webview": None,
}

DECODE_ONLY_KINDS = {
    "export": parse_export_response,
    "sync-status": parse_sync_status_response,
    "tiles": parse_tiles_by_bounding_boxes_response,
}

TILE_KINDS = ("sync-markers", "sync-reviews")


class Command(BaseCommand):
    """
    Management command to apply marker and review responses from files.
    """

    help = "Decode saved marker, review or tile responses and apply them"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.stats = {
            "files_seen": 0,
            "files_applied": 0,
            "files_rejected": 0,
            "records": 0,
        }
        self.start_time = None
        self.dry_run = False
        self.service: Optional[UpdateService] = None

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "kind",
            choices=sorted({**PERSISTING_KINDS, **DECODE_ONLY_KINDS}),
            help="Type of response stored in the files",
        )

        parser.add_argument(
            "paths",
            nargs="+",
            type=str,
            help="Response files or glob patterns",
        )

        parser.add_argument(
            "--tile",
            nargs=2,
            type=int,
            metavar=("X", "Y"),
            help="Tile the sync response was requested for",
        )

        parser.add_argument(
            "--dry-run",
            action="store_true",
            default=False,
            help="Decode only, do not save to database",
        )

        parser.add_argument(
            "--verbose",
            action="store_true",
            default=False,
            help="Enable verbose debug logging",
        )

    def handle(self, *args, **options) -> None:
        self.start_time = time.time()
        self.dry_run = options["dry_run"]
        kind = options["kind"]

        if options["verbose"]:
            logging.getLogger("markers").setLevel(logging.DEBUG)
            self.stdout.write("Verbose logging enabled")

        tile = None
        if options["tile"]:
            tile = TileCoordinate(x=options["tile"][0], y=options["tile"][1])
        elif kind in TILE_KINDS:
            raise CommandError(f"{kind} requires --tile X Y")

        files = self._discover_files(options["paths"])
        if not files:
            raise CommandError("No response files found")

        if self.dry_run and kind in PERSISTING_KINDS:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No data will be saved"))
        elif kind in PERSISTING_KINDS:
            self.service = UpdateService()

        for file_path in files:
            raw = file_path.read_bytes()
            self.stdout.write(f"Processing: {file_path}")

            if kind in DECODE_ONLY_KINDS:
                applied = self._decode_only(kind, raw)
            elif self.dry_run:
                applied = self._dry_run(kind, raw)
            else:
                applied = self._apply(kind, raw, tile)

            if applied:
                self.stats["files_applied"] += 1
            else:
                self.stats["files_rejected"] += 1
                self.stdout.write(self.style.ERROR(f"Rejected: {file_path}"))

        self._print_summary(kind)

    def _discover_files(self, paths: List[str]) -> List[Path]:
        files = []

        for path_str in paths:
            if "*" in path_str or "?" in path_str:
                matches = [Path(match) for match in sorted(glob.glob(path_str))]
                files.extend(match for match in matches if match.is_file())
            elif Path(path_str).is_file():
                files.append(Path(path_str))
            else:
                self.stdout.write(self.style.WARNING(f"Path not found: {path_str}"))

        self.stats["files_seen"] = len(files)
        return files

    def _apply(self, kind: str, raw: bytes, tile: Optional[TileCoordinate]) -> bool:
        if kind == "create-marker":
            success, marker_id = self.service.process_create_marker_response(raw)
            if success:
                self.stdout.write(f"Created marker {marker_id}")
            count = 1 if success else 0
        elif kind == "move-marker":
            success = self.service.process_move_marker_response(raw)
            count = 1 if success else 0
        elif kind == "sync-markers":
            success, count = self.service.process_sync_markers_response(raw, tile)
        elif kind == "sync-reviews":
            success, count = self.service.process_sync_reviews_response(raw, tile)
        elif kind == "vote-review":
            success = self.service.process_vote_for_review_response(raw)
            count = 1 if success else 0
        else:
            success = self.service.process_webview_response(raw)
            count = 1 if success else 0

        self.stats["records"] += count
        return success

    def _dry_run(self, kind: str, raw: bytes) -> bool:
        if kind == "webview":
            result = parse_webview_response(raw)
            self.stdout.write(f"Webview result: {result.result_type.value}")
            ok = result.result_type in (
                WebViewResultType.MARKER_UPDATE,
                WebViewResultType.REVIEW_UPDATE,
            )
            self.stats["records"] += 1 if ok else 0
            return ok

        result = PERSISTING_KINDS[kind](raw)
        return self._report(result)

    def _decode_only(self, kind: str, raw: bytes) -> bool:
        result = DECODE_ONLY_KINDS[kind](raw)

        if result.ok and kind == "export":
            for export_file in result.value:
                self.stdout.write(
                    f"  tile {export_file.tile}: {export_file.url} "
                    f"({export_file.size} bytes, md5 {export_file.md5})"
                )
        elif result.ok and kind == "sync-status":
            for tile, operation in sorted(result.value.items()):
                self.stdout.write(
                    f"  tile {tile}: markers {operation.marker_update_type.name}, "
                    f"reviews {operation.review_update_type.name}"
                )
        elif result.ok:
            for tile in sorted(result.value):
                self.stdout.write(f"  tile {tile}")

        return self._report(result)

    def _report(self, result: DecodeResult) -> bool:
        if result.failed:
            logger.warning(f"Decode failed: {result.reason}")
            self.stdout.write(self.style.ERROR(f"Decode failed: {result.reason}"))
            return False

        value = result.value
        count = len(value) if isinstance(value, (tuple, dict, frozenset)) else 1
        self.stats["records"] += count
        self.stdout.write(f"Decoded {count} records")
        return True

    def _print_summary(self, kind: str) -> None:
        duration = time.time() - self.start_time

        self.stdout.write("\n" + "=" * 60)
        self.stdout.write(self.style.SUCCESS(f"APPLY RESPONSE SUMMARY ({kind})"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"Files seen:       {self.stats['files_seen']}")
        self.stdout.write(f"Files applied:    {self.stats['files_applied']}")
        self.stdout.write(f"Files rejected:   {self.stats['files_rejected']}")
        self.stdout.write(f"Records:          {self.stats['records']}")

        if self.dry_run or kind in DECODE_ONLY_KINDS:
            self.stdout.write(
                f"\n{self.style.WARNING('Decode only - No database changes made')}"
            )

        self.stdout.write(f"\nDuration:         {duration:.2f} seconds")
        self.stdout.write("=" * 60)

        if self.stats["files_rejected"] > 0:
            self.stdout.write(
                self.style.WARNING(
                    f"Completed with {self.stats['files_rejected']} rejected files. "
                    "Check logs for details."
                )
            )
        else:
            self.stdout.write(self.style.SUCCESS("Completed successfully!"))
