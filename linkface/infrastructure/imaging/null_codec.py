"""
Adapter: Null Image Codec — usado quando não há codec de imagem disponível.
"""

from linkface.core.interfaces.image_codec import IImageCodec


class NullImageCodec(IImageCodec):
    """Sem capacidade de decode: dimensões desconhecidas, sem recodificação."""

    available = False

    def read_dimensions(self, data: bytes) -> tuple[int, int] | None:
        return None

    def resize_and_encode(
        self,
        data: bytes,
        mime_type: str,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> bytes:
        raise NotImplementedError("Nenhum codec de imagem configurado")
