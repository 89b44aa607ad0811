"""
Pet Profiles - Main Entry Point

Serves the admin API behind the pet profile dashboard and the app-proxy
endpoint the customer-account profile block saves to. Profile data lives in
Shopify customer metafields and is read and written through the Admin
GraphQL API.
"""

import sys

import uvicorn

from pet_profiles.admin.app import create_app
from pet_profiles.config.settings import settings
from pet_profiles.services.shopify_graphql import ShopifyGraphQLClient
from pet_profiles.utils.logger import setup_logging, get_logger


logger = get_logger(__name__)


def main():
    """Entry point."""
    missing = settings.validate()
    if missing:
        logger.error("Missing required configuration", missing=missing)
        print(f"\n❌ Missing required environment variables: {', '.join(missing)}")
        print("Please copy .env.example to .env and fill in your credentials.\n")
        sys.exit(1)

    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.log_file,
    )
    logger.info(
        "Logging configured",
        level=settings.logging.level,
        profile_source=settings.collection.source,
    )

    client = ShopifyGraphQLClient(settings)
    app = create_app(client, settings)

    print(f"\n✅ Pet Profiles API at http://{settings.server.host}:{settings.server.port}/api/docs\n")
    try:
        uvicorn.run(app, host=settings.server.host, port=settings.server.port)
    except Exception as e:
        logger.error("Fatal error", error=str(e))
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
