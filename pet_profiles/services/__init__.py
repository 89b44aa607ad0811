"""Shopify-facing services: GraphQL client, collection, analytics, charts."""
