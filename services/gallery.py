# services/gallery.py
import uuid
from dataclasses import dataclass, field
from typing import List, Tuple

VALID_TYPES = ("image/jpeg", "image/jpg", "image/png")
MAX_ORIGINAL_SIZE_MB = 30
# originals above this are flagged; they get compressed before upload anyway
MAX_SIZE_MB = 5
MIN_COUNT = 5
MAX_ANALYZE_COUNT = 8
TARGET_ANALYZE_SIZE_KB = 350
PREVIEW_COLUMNS = 6
PREVIEW_ROWS = 3
MAX_PREVIEW_COUNT = PREVIEW_COLUMNS * PREVIEW_ROWS


class ImageRejected(ValueError):
    pass


def target_bytes() -> int:
    return min(MAX_SIZE_MB * 1024 * 1024, TARGET_ANALYZE_SIZE_KB * 1024)


@dataclass
class ImageAsset:
    name: str
    content_type: str
    data: bytes
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def size_mb(self) -> float:
        return round(len(self.data) / 1024 / 1024, 2)


def validate_image(name: str, content_type: str, data: bytes) -> ImageAsset:
    if (content_type or "").lower() not in VALID_TYPES:
        raise ImageRejected("Only JPG, JPEG and PNG images are supported")
    if len(data) / 1024 / 1024 > MAX_ORIGINAL_SIZE_MB:
        raise ImageRejected(f"Each original image must be {MAX_ORIGINAL_SIZE_MB}MB or smaller")
    return ImageAsset(name=name, content_type=content_type, data=data)


@dataclass
class ImageGallery:
    images: List[ImageAsset] = field(default_factory=list)
    show_all: bool = False

    def add(self, files: List[Tuple[str, str, bytes]]) -> Tuple[List[ImageAsset], List[str]]:
        """Validate (name, content_type, data) triples; returns (added, rejection messages)."""
        added, errors = [], []
        for name, content_type, data in files:
            try:
                added.append(validate_image(name, content_type, data))
            except ImageRejected as e:
                errors.append(f"{name}: {e}")
        if added:
            self.images.extend(added)
            self.show_all = False
        return added, errors

    def remove(self, image_id: str) -> None:
        self.images = [img for img in self.images if img.id != image_id]
        if len(self.images) <= MAX_PREVIEW_COUNT:
            self.show_all = False

    def clear(self) -> None:
        self.images = []
        self.show_all = False

    @property
    def has_overflow(self) -> bool:
        return len(self.images) > MAX_PREVIEW_COUNT

    def visible(self) -> List[ImageAsset]:
        if self.show_all:
            return list(self.images)
        return self.images[:MAX_PREVIEW_COUNT]

    def rows(self) -> List[List[ImageAsset]]:
        shown = self.visible()
        return [shown[i:i + PREVIEW_COLUMNS] for i in range(0, len(shown), PREVIEW_COLUMNS)]

    def ready_for_analysis(self) -> bool:
        return len(self.images) >= MIN_COUNT

    def selected_for_analysis(self) -> List[ImageAsset]:
        return self.images[:MAX_ANALYZE_COUNT]

    def has_large_images(self, images: List[ImageAsset]) -> bool:
        return any(img.size_mb > MAX_SIZE_MB for img in images)
