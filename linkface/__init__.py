"""Link-Face — captura de nome, CPF e foto via links de indicação."""

__version__ = "1.0.0"
