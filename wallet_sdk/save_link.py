# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
"Save to Google Wallet" links.

A save link is ``https://pay.google.com/gp/v/save/{token}`` where ``token`` is
a JWT signed with the service account's private key (RS256). The claim set
names the objects to save:

    {
        "iss": "<service account email>",
        "aud": "google",
        "origins": ["www.example.com"],
        "typ": "savetowallet",
        "payload": {"genericObjects": [{"id": "<object id>"}]}
    }

The objects must already exist, or be created by the API when the link is
opened if their full definition is embedded instead of just their id.

Examples:
    Print a save link for the configured object::

        link = SaveLink.from_config(config)
        print(link.url([config.object_id]))
"""

from __future__ import annotations

import os
import tempfile
import unittest
from typing import Any, Dict, List, Optional, Sequence

import jwt

from .config import WalletConfig
from .credentials import ConfigurationError, ServiceAccountKey
from .object_type import ObjectType
from .testing import write_service_account_key

SAVE_URL = "https://pay.google.com/gp/v/save/"
AUDIENCE = "google"
TOKEN_TYPE = "savetowallet"


class SigningError(Exception):
    """The claim set could not be signed with the service account key"""


class SaveLink:
    """Signs claim sets with a service account key and builds save URLs."""

    key: ServiceAccountKey
    object_type: ObjectType
    origins: List[str]

    def __init__(
        self,
        key: ServiceAccountKey,
        object_type: ObjectType = ObjectType.GENERIC,
        origins: Optional[Sequence[str]] = None,
    ):
        self.key = key
        self.object_type = object_type
        self.origins = list(origins) if origins is not None else ["www.example.com"]

    @staticmethod
    def from_config(config: WalletConfig) -> SaveLink:
        """
        :raises ConfigurationError: If the key file cannot be read or lacks signing fields.
        """
        key = ServiceAccountKey.load(config.key_file_path)
        return SaveLink(key, config.object_type, config.origins)

    def claims(self, object_ids: Sequence[str]) -> Dict[str, Any]:
        return {
            "iss": self.key.client_email,
            "aud": AUDIENCE,
            "origins": list(self.origins),
            "typ": TOKEN_TYPE,
            "payload": {
                self.object_type.payload_key: [{"id": object_id} for object_id in object_ids]
            },
        }

    def token(self, object_ids: Sequence[str]) -> str:
        """
        Sign the claim set for ``object_ids``.

        :raises SigningError: If the private key is unusable.
        """
        try:
            return jwt.encode(
                self.claims(object_ids), self.key.private_key, algorithm="RS256"
            )
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            raise SigningError(
                f"Unable to sign save link for {self.key.client_email}: {e}"
            ) from e

    def url(self, object_ids: Sequence[str]) -> str:
        return f"{SAVE_URL}{self.token(object_ids)}"


OBJECT_ID = "3388000000022141111.user_example.com-test-class-id"


class Test(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.key_path = os.path.join(self.tempdir.name, "key.json")
        self.key_info, self.public_key = write_service_account_key(self.key_path)
        self.config = WalletConfig(key_file_path=self.key_path)

    def tearDown(self):
        self.tempdir.cleanup()

    def decode(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.public_key, algorithms=["RS256"], audience=AUDIENCE)

    def test_token_claims(self):
        link = SaveLink.from_config(self.config)
        claims = self.decode(link.token([OBJECT_ID]))
        self.assertEqual(claims["iss"], self.key_info["client_email"])
        self.assertEqual(claims["aud"], "google")
        self.assertEqual(claims["typ"], "savetowallet")
        self.assertEqual(claims["origins"], ["www.example.com"])
        self.assertEqual(claims["payload"], {"genericObjects": [{"id": OBJECT_ID}]})

    def test_url(self):
        link = SaveLink.from_config(self.config)
        url = link.url([OBJECT_ID])
        self.assertTrue(url.startswith("https://pay.google.com/gp/v/save/"))
        claims = self.decode(url[len(SAVE_URL) :])
        self.assertEqual(len(claims["payload"]["genericObjects"]), 1)

    def test_object_type_payload_key(self):
        key = ServiceAccountKey.load(self.key_path)
        link = SaveLink(key, ObjectType.FLIGHT, ["a.example.com"])
        claims = self.decode(link.token([OBJECT_ID, "other"]))
        self.assertEqual(
            claims["payload"], {"flightObjects": [{"id": OBJECT_ID}, {"id": "other"}]}
        )
        self.assertEqual(claims["origins"], ["a.example.com"])

    def test_missing_key_file(self):
        config = WalletConfig(key_file_path=os.path.join(self.tempdir.name, "none.json"))
        with self.assertRaises(ConfigurationError):
            SaveLink.from_config(config)

    def test_invalid_private_key(self):
        link = SaveLink(ServiceAccountKey("a@example.com", "not a key"))
        with self.assertRaises(SigningError):
            link.token([OBJECT_ID])
