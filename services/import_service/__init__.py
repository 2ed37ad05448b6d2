"""Catalog-import collaborator for the file pipeline."""

from .import_service import CatalogImportError, CatalogImportService
from .local_metadata_extractor import LocalMetadataExtractor

__all__ = ['CatalogImportService', 'CatalogImportError', 'LocalMetadataExtractor']
