"""
Adapter: Image Validator — checagens de segurança do upload da foto.

Ordem (para na primeira falha):
  1. Tamanho do base64 → antes de qualquer decode
  2. MIME type → allow-list
  3. Tamanho do buffer decodificado
  4. Dimensões mínimas → pulada se o codec não conseguir ler a imagem
"""

import logging
from dataclasses import dataclass

from linkface.core.interfaces.image_codec import IImageCodec

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_TYPES = ("image/jpeg", "image/png", "image/webp")


@dataclass
class ImageValidationResult:
    """Resultado da validação da imagem."""
    valid: bool
    error: str | None = None
    width: int | None = None
    height: int | None = None
    size: int | None = None
    mime_type: str | None = None


def _megabytes(n: int) -> int:
    return round(n / 1024 / 1024)


class ImageValidator:
    """Valida tamanho, tipo e dimensões da foto enviada."""

    def __init__(
        self,
        codec: IImageCodec,
        max_image_size: int = 5_242_880,
        max_base64_size: int = 7_000_000,
        min_dimension: int = 200,
        allowed_mime_types: list[str] | tuple[str, ...] = DEFAULT_ALLOWED_TYPES,
    ):
        self._codec = codec
        self._max_image_size = max_image_size
        self._max_base64_size = max_base64_size
        self._min_dimension = min_dimension
        self._allowed = list(allowed_mime_types)

    def check_encoded_size(self, encoded: str) -> str | None:
        """Retorna a mensagem de erro se o base64 exceder o limite."""
        if len(encoded.encode("utf-8")) > self._max_base64_size:
            return f"Imagem muito grande. Tamanho máximo: {_megabytes(self._max_base64_size)}MB"
        return None

    def check_mime_type(self, mime_type: str) -> str | None:
        if mime_type not in self._allowed:
            kinds = ", ".join(t.split("/")[-1] for t in self._allowed)
            return f"Tipo de arquivo não permitido. Use: {kinds}"
        return None

    def check_buffer_size(self, buffer: bytes) -> str | None:
        if len(buffer) > self._max_image_size:
            return f"Imagem muito grande. Tamanho máximo: {_megabytes(self._max_image_size)}MB"
        return None

    def check_dimensions(self, buffer: bytes) -> tuple[str | None, int | None, int | None]:
        """
        Dimensões mínimas. Se o codec não estiver disponível ou falhar,
        a checagem é pulada (disponibilidade > rigor).
        """
        if not self._codec.available:
            return None, None, None
        try:
            dims = self._codec.read_dimensions(buffer)
        except Exception as e:
            logger.warning(f"Dimension check skipped: {e}")
            return None, None, None
        if dims is None:
            return None, None, None

        width, height = dims
        if width < self._min_dimension or height < self._min_dimension:
            return (
                f"Imagem muito pequena. Dimensão mínima: {self._min_dimension}x{self._min_dimension}px. "
                f"Sua imagem: {width}x{height}px",
                width,
                height,
            )
        return None, width, height

    def validate(self, encoded: str, mime_type: str, buffer: bytes) -> ImageValidationResult:
        """Validação completa da imagem."""
        error = self.check_encoded_size(encoded)
        if error:
            return ImageValidationResult(valid=False, error=error)

        error = self.check_mime_type(mime_type)
        if error:
            return ImageValidationResult(valid=False, error=error)

        error = self.check_buffer_size(buffer)
        if error:
            return ImageValidationResult(valid=False, error=error)

        error, width, height = self.check_dimensions(buffer)
        if error:
            return ImageValidationResult(valid=False, error=error, width=width, height=height)

        return ImageValidationResult(
            valid=True,
            width=width,
            height=height,
            size=len(buffer),
            mime_type=mime_type,
        )
