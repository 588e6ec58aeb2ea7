"""Completion vocabulary for DclLS."""
from .catalogue import Catalogue, CatalogueEntry, CatalogueError, load_catalogue

__all__ = ['Catalogue', 'CatalogueEntry', 'CatalogueError', 'load_catalogue']
