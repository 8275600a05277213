"""
Adapter: OpenCV Image Codec — decodifica, redimensiona e recodifica fotos.
"""

import cv2
import numpy as np

from linkface.core.interfaces.image_codec import IImageCodec


class OpenCVImageCodec(IImageCodec):
    """Codec baseado em OpenCV (cv2.imdecode / cv2.imencode)."""

    available = True

    def read_dimensions(self, data: bytes) -> tuple[int, int] | None:
        img = self._decode(data)
        if img is None:
            return None
        h, w = img.shape[:2]
        return int(w), int(h)

    def resize_and_encode(
        self,
        data: bytes,
        mime_type: str,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> bytes:
        img = self._decode(data)
        if img is None:
            raise ValueError("Não foi possível decodificar a imagem")

        # --- Redimensiona (fit inside, sem ampliar) ---
        h, w = img.shape[:2]
        scale = min(max_width / w, max_height / h, 1.0)
        if scale < 1.0:
            new_size = (max(1, round(w * scale)), max(1, round(h * scale)))
            img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

        # --- Recodifica pelo MIME type ---
        if "png" in mime_type:
            ext, params = ".png", [cv2.IMWRITE_PNG_COMPRESSION, 9]
        elif "webp" in mime_type:
            ext, params = ".webp", [cv2.IMWRITE_WEBP_QUALITY, quality]
        else:
            if img.ndim == 3 and img.shape[2] == 4:
                img = cv2.cvtColor(img, cv2.COLOR_BGRA2BGR)
            ext, params = ".jpg", [cv2.IMWRITE_JPEG_QUALITY, quality, cv2.IMWRITE_JPEG_OPTIMIZE, 1]

        ok, encoded = cv2.imencode(ext, img, params)
        if not ok:
            raise ValueError(f"Falha ao codificar imagem como {ext}")
        return encoded.tobytes()

    @staticmethod
    def _decode(data: bytes) -> np.ndarray | None:
        if not data:
            return None
        img_array = np.frombuffer(data, dtype=np.uint8)
        return cv2.imdecode(img_array, cv2.IMREAD_UNCHANGED)
