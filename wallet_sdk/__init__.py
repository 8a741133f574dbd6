# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Wallet Objects SDK - A small Python client for the Google Wallet API.

The SDK wraps the handful of calls needed to issue passes through the
walletobjects REST API: creating classes, getting or creating objects,
signing "Save to Google Wallet" links, managing issuer accounts and
permissions, and inserting many objects at once with a batch request.

Core Features:
- **Async REST Client**: httpx based client authenticated with a service account
- **Save Links**: RS256 signed claim sets turned into save URLs
- **Batch Inserts**: Bulk object creation through the Google API client library
- **Pass Types**: Generic, offer, loyalty, gift card, event ticket, flight, transit

Quick Start:
    Create a class and an object, then print a save link::

        import asyncio
        from wallet_sdk.async_client import WalletClient
        from wallet_sdk.config import WalletConfig
        from wallet_sdk.save_link import SaveLink

        async def main():
            config = WalletConfig.from_env()
            client = WalletClient.from_config(config)

            print(await client.create_class(config.class_payload()))
            print(await client.get_or_create_object(
                config.object_id, config.object_payload()
            ))
            print(SaveLink.from_config(config).url([config.object_id]))

            await client.close()

        asyncio.run(main())

Module Organization:
    - **async_client**: Async REST client and API exceptions
    - **batch**: Batch object insertion with the generated client library
    - **cli**: Command line entry point
    - **config**: Configuration read from the environment
    - **credentials**: Service account loading and httpx authentication
    - **identifiers**: Object id construction
    - **metadata**: SDK version and HTTP header management
    - **object_type**: Supported pass types and their resource names
    - **payloads**: Request bodies for classes, objects, issuers and permissions
    - **save_link**: Signed save-to-wallet links

Configuration:
    Environment Variables:
    - **GOOGLE_APPLICATION_CREDENTIALS**: Path to the service account key file
    - **WALLET_ISSUER_ID**: Issuer account id
    - **WALLET_CLASS_ID**: Developer defined class id
    - **WALLET_USER_ID**: Developer defined user id, such as an email address
    - **WALLET_OBJECT_TYPE**: Pass type, defaults to ``generic``

Requirements:
    - Python 3.8 or higher
    - httpx for HTTP requests
    - google-auth for service account credentials
    - PyJWT and cryptography for save link signing
    - google-api-python-client for batch requests
"""
