"""Captured still frames."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from PIL import Image

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray


@dataclass(frozen=True)
class CapturedFrame:
    """Still image snapshot taken from a live camera stream.

    ``pixels`` is an HxWx3 RGB uint8 array owned by the frame.
    """

    pixels: NDArray[np.uint8]
    captured_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def to_image(self) -> Image.Image:
        """Return a Pillow copy of the frame."""
        return Image.fromarray(self.pixels)

    def to_jpeg(self, quality: int = 80) -> bytes:
        """Encode the frame as JPEG for re-display."""
        buffer = io.BytesIO()
        self.to_image().save(buffer, format="JPEG", quality=quality)
        return buffer.getvalue()
