import base64

import cv2
import numpy as np

VALID_CPF = "529.982.247-25"
ADMIN_PASSWORD = "senha-de-teste"


def make_image(width: int = 400, height: int = 300, ext: str = ".png") -> bytes:
    """Imagem com ruído (não comprime a zero) codificada pelo OpenCV."""
    rng = np.random.default_rng(42)
    pixels = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    ok, encoded = cv2.imencode(ext, pixels)
    assert ok
    return encoded.tobytes()


def data_url(data: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
