"""Payment collection API with sequential ticket folios."""

__version__ = "0.1.0"
