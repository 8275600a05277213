"""
Contract: Image Codec

Capacidade opcional de decodificar/recodificar imagens. O validador e o
compressor recebem um codec explícito: `available=True` (OpenCV) ou
`available=False` (sem codec). Sem codec, a checagem de dimensões é
pulada e a compressão devolve o buffer original.
"""

from abc import ABC, abstractmethod


class IImageCodec(ABC):
    """Port: Image Codec."""

    available: bool = False

    @abstractmethod
    def read_dimensions(self, data: bytes) -> tuple[int, int] | None:
        """
        Lê (largura, altura) da imagem.

        Returns:
            Tupla ou None se não for possível decodificar.
        """
        ...

    @abstractmethod
    def resize_and_encode(
        self,
        data: bytes,
        mime_type: str,
        max_width: int,
        max_height: int,
        quality: int,
    ) -> bytes:
        """
        Redimensiona para caber em max_width x max_height (sem ampliar)
        e recodifica no formato indicado pelo MIME type.

        Raises:
            Exception em caso de falha de decode/encode.
        """
        ...
