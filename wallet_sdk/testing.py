# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""Fixtures shared by the embedded test suites."""

import json
from typing import Any, Dict, Tuple

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

TEST_CLIENT_EMAIL = "wallet-test@wallet-test.iam.gserviceaccount.com"


def write_service_account_key(path: str) -> Tuple[Dict[str, Any], bytes]:
    """Write a service account key file with a fresh RSA key.

    :return: The key file contents and the matching public key in PEM form.
    """
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    info = {
        "type": "service_account",
        "project_id": "wallet-test",
        "private_key_id": "0123456789abcdef",
        "private_key": private_pem,
        "client_email": TEST_CLIENT_EMAIL,
        "client_id": "100000000000000000000",
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    with open(path, "w") as file:
        json.dump(info, file)
    return info, public_pem
