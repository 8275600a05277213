"""
Adapter: Image Compressor — redimensiona e recodifica antes do upload.

Best-effort: qualquer falha devolve o buffer original (ratio = 1).
"""

import logging
from dataclasses import dataclass

from linkface.core.interfaces.image_codec import IImageCodec

logger = logging.getLogger(__name__)


@dataclass
class CompressionResult:
    buffer: bytes
    original_size: int
    compressed_size: int
    ratio: float


class ImageCompressor:
    """Compressão opcional; nunca bloqueia a submissão."""

    def __init__(
        self,
        codec: IImageCodec,
        max_width: int = 1920,
        max_height: int = 1920,
        quality: int = 85,
    ):
        self._codec = codec
        self._max_width = max_width
        self._max_height = max_height
        self._quality = quality

    def compress(self, buffer: bytes, mime_type: str) -> CompressionResult:
        original_size = len(buffer)
        if not self._codec.available:
            return self._passthrough(buffer)

        try:
            compressed = self._codec.resize_and_encode(
                buffer, mime_type, self._max_width, self._max_height, self._quality
            )
        except Exception as e:
            logger.warning(f"Image compression failed, keeping original: {e}")
            return self._passthrough(buffer)

        compressed_size = len(compressed)
        return CompressionResult(
            buffer=compressed,
            original_size=original_size,
            compressed_size=compressed_size,
            ratio=compressed_size / original_size if original_size else 1.0,
        )

    @staticmethod
    def _passthrough(buffer: bytes) -> CompressionResult:
        size = len(buffer)
        return CompressionResult(buffer=buffer, original_size=size, compressed_size=size, ratio=1.0)
