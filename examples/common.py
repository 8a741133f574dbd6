# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Common configuration for the Wallet Objects SDK examples.

Environment Variables:
    GOOGLE_APPLICATION_CREDENTIALS: Path to service account key file from Google Cloud Console
    WALLET_ISSUER_ID: The issuer ID being updated in this request
    WALLET_CLASS_ID: Developer-defined ID for the wallet class
    WALLET_USER_ID: Developer-defined ID for the user, such as an email address
    WALLET_OBJECT_TYPE: Pass type, defaults to generic
    WALLET_LOG_LEVEL: Logging level, defaults to WARNING
"""

import os

from wallet_sdk.config import WalletConfig

# :!:>setup
CONFIG = WalletConfig.from_env()

KEY_FILE_PATH = CONFIG.key_file_path
ISSUER_ID = CONFIG.issuer_id
CLASS_ID = CONFIG.class_id
USER_ID = CONFIG.user_id

# objectId - ID for the wallet object
#          - Format: `issuerId.identifier`
#          - Should only include alphanumeric characters, '.', '_', or '-'
#          - `identifier` is developer-defined and unique to the user
OBJECT_ID = CONFIG.object_id
# <:!:setup

# New issuer name and contact email address
ISSUER_NAME = os.getenv("WALLET_ISSUER_NAME", "name")
ISSUER_EMAIL = os.getenv("WALLET_ISSUER_EMAIL", "email-address")

LOG_LEVEL = os.getenv("WALLET_LOG_LEVEL", "WARNING").upper()
