"""
Tests del merge inventario + imagenes.
"""
from tapes.application.services.image_scanner import ImageScanResult
from tapes.application.services.inventory_parser import InventoryResult
from tapes.application.services.reconciler import reconcile
from tapes.domain.entities import (
    Image,
    ImageKind,
    ImageMetadata,
    SyncWarning,
    Tape,
    TapeImages,
)


def _images(tape_id: int, count: int) -> TapeImages:
    metadata = ImageMetadata(width=640, height=480, color="#cccccc", rotated=False)
    return TapeImages(
        tape_id=tape_id,
        thumbnail=Image(f"{tape_id:04d}_thumb.jpg", tape_id, ImageKind.THUMBNAIL),
        gallery=tuple(
            Image(
                f"{tape_id:04d}_{chr(ord('a') + i)}.jpg",
                tape_id,
                ImageKind.GALLERY,
                gallery_index=i,
                metadata=metadata,
            )
            for i in range(count)
        ),
    )


class TestReconcile:
    """Tests para reconcile."""

    def test_admits_tapes_with_images(self):
        inventory = InventoryResult(
            tapes=[Tape(id=1, title="One", row_number=2), Tape(id=2, title="Two", row_number=3)],
            warnings=[],
        )
        scan = ImageScanResult(images_by_tape={1: _images(1, 2), 2: _images(2, 1)}, warnings=[])

        result = reconcile(inventory, scan)

        assert [e.tape.id for e in result.entries] == [1, 2]
        assert len(result.entries[0].gallery) == 2
        assert result.num_tapes == 2
        assert result.warnings == []

    def test_tape_without_images_is_dropped(self):
        inventory = InventoryResult(
            tapes=[Tape(id=1, title="One", row_number=2), Tape(id=2, title="Two", row_number=3)],
            warnings=[],
        )
        scan = ImageScanResult(images_by_tape={1: _images(1, 1)}, warnings=[])

        result = reconcile(inventory, scan)

        assert [e.tape.id for e in result.entries] == [1]
        assert result.warnings == [
            SyncWarning(location=3, message="tape 2 has no image files; ignoring it")
        ]

    def test_group_with_empty_gallery_is_dropped(self):
        inventory = InventoryResult(tapes=[Tape(id=4, title="Four", row_number=5)], warnings=[])
        scan = ImageScanResult(images_by_tape={4: _images(4, 0)}, warnings=[])

        result = reconcile(inventory, scan)

        assert result.entries == []
        assert str(result.warnings[0]) == "At row 5: tape 4 has no image files; ignoring it"

    def test_images_without_inventory_row_are_ignored(self):
        inventory = InventoryResult(tapes=[], warnings=[])
        scan = ImageScanResult(images_by_tape={9: _images(9, 1)}, warnings=[])

        result = reconcile(inventory, scan)

        assert result.entries == []
        assert result.warnings == []

    def test_warnings_are_concatenated_in_source_order(self):
        inventory_warning = SyncWarning(location=7, message="'title' value is required")
        scan_warning = SyncWarning(location="junk.txt", message="not a valid image filename")
        inventory = InventoryResult(tapes=[Tape(id=3, title="Three", row_number=4)], warnings=[inventory_warning])
        scan = ImageScanResult(images_by_tape={}, warnings=[scan_warning])

        result = reconcile(inventory, scan)

        assert result.warnings == [
            inventory_warning,
            scan_warning,
            SyncWarning(location=4, message="tape 3 has no image files; ignoring it"),
        ]
