"""Pet profile collection and analytics service for Shopify customer metafields."""

__version__ = "0.1.0"
