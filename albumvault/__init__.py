"""AlbumVault: personal photo albums with metadata-aware photo ingestion."""

__version__ = "1.0.0"
