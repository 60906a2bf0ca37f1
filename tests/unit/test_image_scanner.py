"""
Tests unitarios del escaneo del bucket de imagenes.
"""
import pytest

from tapes.application.services.image_scanner import (
    ImageMetadataError,
    classify_filename,
    parse_image_metadata,
    scan_images,
)
from tapes.domain.entities import ImageKind, ImageMetadata, Rejected, SyncWarning
from tapes.shared.exceptions import TransportError


class TestParseImageMetadata:
    """Tests para parse_image_metadata."""

    def test_valid_metadata(self, gallery_md):
        metadata = parse_image_metadata(gallery_md(color="#FFF", rotated="true"))

        assert metadata == ImageMetadata(width=640, height=480, color="#fff", rotated=True)

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"Width": None}, "metadata value 'Width' is required"),
            ({"Width": "foo"}, "metadata value 'Width' must be an integer (got 'foo')"),
            ({"Width": "-50"}, "metadata value 'Width' must be positive (got -50)"),
            ({"Height": "0"}, "metadata value 'Height' must be positive (got 0)"),
            ({"Color": None}, "metadata value 'Color' is required"),
            ({"Color": "blue"}, "metadata value 'Color' must be a hex color (got 'blue')"),
            ({"Rotated": None}, "metadata value 'Rotated' is required"),
            ({"Rotated": "maybe"}, "metadata value 'Rotated' must be a bool (got 'maybe')"),
            ({"Rotated": "True"}, "metadata value 'Rotated' must be a bool (got 'True')"),
        ],
    )
    def test_invalid_metadata(self, gallery_md, overrides, message):
        raw = gallery_md()
        for key, value in overrides.items():
            if value is None:
                del raw[key]
            else:
                raw[key] = value

        with pytest.raises(ImageMetadataError) as exc_info:
            parse_image_metadata(raw)
        assert str(exc_info.value) == message

    def test_width_is_validated_before_color(self):
        with pytest.raises(ImageMetadataError) as exc_info:
            parse_image_metadata({"Height": "1", "Color": "nope", "Rotated": "false"})
        assert "'Width'" in str(exc_info.value)


class TestClassifyFilename:
    def test_invalid_name_becomes_warning(self):
        outcome = classify_filename("readme.md")

        assert isinstance(outcome, Rejected)
        assert outcome.warning.location == "readme.md"
        assert str(outcome.warning).startswith("readme.md: not a valid image filename")


class TestScanImages:
    """Tests para scan_images."""

    def test_groups_images_by_tape_in_order(self, make_bucket, gallery_md):
        bucket = make_bucket(
            {
                "0002_b.jpg": gallery_md(),
                "0002_thumb.jpg": {},
                "0001_thumb.jpg": {},
                "0002_a.jpg": gallery_md(width="100"),
                "0001_a.jpg": gallery_md(),
            }
        )

        result = scan_images(bucket)

        assert result.warnings == []
        assert list(result.images_by_tape) == [1, 2]
        tape_two = result.get(2)
        assert tape_two.thumbnail.filename == "0002_thumb.jpg"
        assert [i.gallery_index for i in tape_two.gallery] == [0, 1]
        assert tape_two.gallery[0].metadata.width == 100
        assert [i.filename for i in result.images] == [
            "0001_thumb.jpg",
            "0001_a.jpg",
            "0002_thumb.jpg",
            "0002_a.jpg",
            "0002_b.jpg",
        ]

    def test_thumbnails_do_not_fetch_metadata(self, make_bucket, gallery_md):
        bucket = make_bucket({"0001_thumb.jpg": {}, "0001_a.jpg": gallery_md()})

        scan_images(bucket)

        assert bucket.metadata_requests == ["0001_a.jpg"]

    def test_invalid_filename_does_not_block_other_tapes(self, make_bucket, gallery_md):
        bucket = make_bucket(
            {"0001_thumb.jpg": {}, "0001_a.jpg": gallery_md(), "0001_a.png": {}}
        )

        result = scan_images(bucket)

        assert list(result.images_by_tape) == [1]
        assert len(result.warnings) == 1
        assert result.warnings[0].location == "0001_a.png"

    def test_bad_metadata_invalidates_whole_tape(self, make_bucket, gallery_md):
        bucket = make_bucket(
            {
                "0003_thumb.jpg": {},
                "0003_a.jpg": gallery_md(),
                "0003_b.jpg": gallery_md(color="blue"),
                "0004_thumb.jpg": {},
                "0004_a.jpg": gallery_md(),
            }
        )

        result = scan_images(bucket)

        assert result.get(3) is None
        assert list(result.images_by_tape) == [4]
        assert result.warnings == [
            SyncWarning(
                location="0003_b.jpg",
                message="metadata value 'Color' must be a hex color (got 'blue')",
            )
        ]

    def test_thumbnail_only_tape_is_incomplete(self, make_bucket):
        result = scan_images(make_bucket({"0005_thumb.jpg": {}}))

        assert result.images_by_tape == {}
        assert result.warnings == [
            SyncWarning(
                location="0005_thumb.jpg",
                message="tape 5 has thumbnail image but no accompanying gallery image(s)",
            )
        ]

    def test_gallery_only_tape_is_incomplete(self, make_bucket, gallery_md):
        result = scan_images(make_bucket({"0006_b.jpg": gallery_md(), "0006_a.jpg": gallery_md()}))

        assert result.images_by_tape == {}
        assert result.warnings == [
            SyncWarning(
                location="0006_a.jpg",
                message="tape 6 has gallery image(s) but no accompanying thumbnail image",
            )
        ]

    def test_filenames_are_case_sensitive(self, make_bucket, gallery_md):
        # Un thumbnail con mayusculas no cuenta: la cinta queda incompleta
        result = scan_images(
            make_bucket({"0007_THUMB.jpg": {}, "0007_a.jpg": gallery_md()})
        )

        assert result.images_by_tape == {}
        assert [w.location for w in result.warnings] == ["0007_THUMB.jpg", "0007_a.jpg"]

    def test_listing_failure_is_transport_error(self, make_bucket):
        bucket = make_bucket(list_error=RuntimeError("denied"))

        with pytest.raises(TransportError) as exc_info:
            scan_images(bucket)
        assert exc_info.value.message == "failed to list filenames from storage bucket: denied"

    def test_metadata_fetch_failure_aborts_scan(self, make_bucket, gallery_md):
        bucket = make_bucket(
            {"0001_thumb.jpg": {}, "0001_a.jpg": gallery_md(), "0001_b.jpg": gallery_md()},
            metadata_errors={"0001_a.jpg": TimeoutError("timed out")},
        )

        with pytest.raises(TransportError) as exc_info:
            scan_images(bucket)
        assert exc_info.value.message == (
            "failed to get metadata for image file 0001_a.jpg: timed out"
        )
        # Se aborta de inmediato, sin seguir pidiendo metadata
        assert bucket.metadata_requests == ["0001_a.jpg"]

    def test_gallery_images_keep_their_kind(self, make_bucket, gallery_md):
        result = scan_images(make_bucket({"0001_thumb.jpg": {}, "0001_a.jpg": gallery_md()}))

        group = result.get(1)
        assert group.thumbnail.kind == ImageKind.THUMBNAIL
        assert group.gallery[0].kind == ImageKind.GALLERY

    def test_duplicate_thumbnail_invalidates_tape(self, make_bucket, gallery_md):
        bucket = make_bucket({"0008_thumb.jpg": {}, "0008_a.jpg": gallery_md()})
        # Listado con un key repetido
        bucket.list_filenames = lambda: ["0008_thumb.jpg", "0008_a.jpg", "0008_thumb.jpg"]

        result = scan_images(bucket)

        assert result.images_by_tape == {}
        assert result.warnings == [
            SyncWarning(
                location="0008_thumb.jpg",
                message="duplicate thumbnail image for tape 8 (already have 0008_thumb.jpg)",
            )
        ]
