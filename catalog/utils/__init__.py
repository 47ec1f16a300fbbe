"""
Utility modules for the catalog service
"""
from .config_loader import CatalogConfig, configure_logging, load_catalog_config

__all__ = [
    'CatalogConfig',
    'configure_logging',
    'load_catalog_config',
]
