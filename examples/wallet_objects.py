# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Wallet Objects - Issue a pass with the Google Wallet API from start to finish.

Workflow:
    1. **Class**: Create a class via the API (this can also be done in the
       business console)
    2. **Object**: Get the object for the configured user, creating it if it
       does not exist yet
    3. **Save Link**: Sign a JWT for the object and print the "Save" URL
    4. **Issuer**: Create a new Google Wallet issuer account
    5. **Permissions**: Update permissions for an existing issuer account
    6. **Batch**: Create three new objects from the class in a single batch

Every step prints the raw response body. Any API error ends the script.

Usage::

    export GOOGLE_APPLICATION_CREDENTIALS=/path/to/key.json
    export WALLET_ISSUER_ID=3388000000022141111
    python -m examples.wallet_objects
"""

import asyncio
import logging

from wallet_sdk.async_client import WalletClient
from wallet_sdk.batch import BatchInserter
from wallet_sdk.payloads import Permission, Role
from wallet_sdk.save_link import SaveLink

from .common import CONFIG, ISSUER_EMAIL, ISSUER_ID, ISSUER_NAME, LOG_LEVEL, OBJECT_ID


async def main():
    # Create authenticated HTTP client, using service account file.
    # :!:>auth
    client = WalletClient.from_config(CONFIG)  # <:!:auth

    try:
        # :!:>class
        class_response = await client.create_class(CONFIG.class_payload())
        print(f"class POST response: {class_response}")  # <:!:class

        # :!:>object
        object_response = await client.get_or_create_object(
            OBJECT_ID, CONFIG.object_payload()
        )
        print(f"object GET or POST response: {object_response}")  # <:!:object

        # :!:>jwt
        save_url = SaveLink.from_config(CONFIG).url([OBJECT_ID])
        print(save_url)  # <:!:jwt

        # :!:>createIssuer
        issuer_response = await client.create_issuer(ISSUER_NAME, ISSUER_EMAIL)
        print(f"issuer POST response: {issuer_response}")  # <:!:createIssuer

        # Copy entries as needed for each email that will need access
        # :!:>updatePermissions
        permissions = [Permission("email-address", Role.READER)]
        permissions_response = await client.update_permissions(ISSUER_ID, permissions)
        print(f"permissions PUT response: {permissions_response}")
        # <:!:updatePermissions
    finally:
        await client.close()

    # The batch uses its own client from the generated library
    # :!:>batch
    inserter = BatchInserter.from_config(CONFIG)
    results = inserter.insert_objects(3)
    for result in results:
        print(result)
    # <:!:batch


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL)
    asyncio.run(main())
