# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Configuration for the Wallet Objects SDK.

All values can be read from environment variables, each with a fallback
default, and are then passed explicitly to every client and helper:

    GOOGLE_APPLICATION_CREDENTIALS: Path to the service account key file
    WALLET_ISSUER_ID: The issuer id being used for requests
    WALLET_CLASS_ID: Developer defined id for the wallet class
    WALLET_USER_ID: Developer defined id for the user, such as an email address
    WALLET_OBJECT_TYPE: Pass type (generic, offer, loyalty, giftCard, ...)
    WALLET_ORIGINS: Comma separated origins allowed to embed save links
    WALLET_API_URL: Base URL of the walletobjects REST API
    WALLET_LOG_LEVEL: Log level used by the CLI and examples

Examples:
    Read the environment::

        config = WalletConfig.from_env()
        print(config.object_id)

    Override a value::

        config = dataclasses.replace(WalletConfig.from_env(), user_id="someone@example.com")
"""

from __future__ import annotations

import os
import unittest
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from . import identifiers, payloads
from .object_type import ObjectType

DEFAULT_BASE_URL = "https://walletobjects.googleapis.com/walletobjects/v1"
DEFAULT_KEY_FILE_PATH = "/path/to/key.json"
DEFAULT_ISSUER_ID = "issuer-id"
DEFAULT_USER_ID = "user-id"
DEFAULT_ORIGINS = ["www.example.com"]


def default_class_id(object_type: ObjectType) -> str:
    return f"test-{object_type.value}-class-id"


@dataclass
class WalletConfig:
    """Settings shared by the REST client, save links and batch inserts.

    Attributes:
        key_file_path: Path to the service account key file
        issuer_id: Issuer account id
        class_id: Developer defined class id, without the issuer prefix
        user_id: Developer defined user id
        object_type: Pass type used for endpoint and payload names
        origins: Domains allowed to embed the save link
        base_url: Base URL of the REST API
        timeout: Request timeout in seconds
        http2: Enable HTTP/2 on the REST client
        class_payload_path: Optional JSON template for the class body
        object_payload_path: Optional JSON template for the object body
    """

    key_file_path: str = DEFAULT_KEY_FILE_PATH
    issuer_id: str = DEFAULT_ISSUER_ID
    class_id: str = default_class_id(ObjectType.GENERIC)
    user_id: str = DEFAULT_USER_ID
    object_type: ObjectType = ObjectType.GENERIC
    origins: List[str] = field(default_factory=lambda: list(DEFAULT_ORIGINS))
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    http2: bool = True
    class_payload_path: Optional[str] = None
    object_payload_path: Optional[str] = None

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> WalletConfig:
        """Build a configuration from environment variables, falling back to defaults."""
        environ = os.environ if environ is None else environ
        object_type = ObjectType.from_str(environ.get("WALLET_OBJECT_TYPE") or "generic")
        origins = [
            origin.strip()
            for origin in (environ.get("WALLET_ORIGINS") or "").split(",")
            if origin.strip()
        ]
        return WalletConfig(
            key_file_path=environ.get("GOOGLE_APPLICATION_CREDENTIALS")
            or DEFAULT_KEY_FILE_PATH,
            issuer_id=environ.get("WALLET_ISSUER_ID") or DEFAULT_ISSUER_ID,
            class_id=environ.get("WALLET_CLASS_ID") or default_class_id(object_type),
            user_id=environ.get("WALLET_USER_ID") or DEFAULT_USER_ID,
            object_type=object_type,
            origins=origins or list(DEFAULT_ORIGINS),
            base_url=(environ.get("WALLET_API_URL") or DEFAULT_BASE_URL).rstrip("/"),
        )

    @property
    def full_class_id(self) -> str:
        """Class id as the API expects it, ``issuerId.classId``."""
        return f"{self.issuer_id}.{self.class_id}"

    @property
    def object_id(self) -> str:
        return identifiers.object_id(self.issuer_id, self.user_id, self.class_id)

    def class_payload(self) -> Dict[str, Any]:
        if self.class_payload_path:
            return payloads.load_payload(
                self.class_payload_path,
                issuer_id=self.issuer_id,
                class_id=self.full_class_id,
            )
        return payloads.class_payload(self.object_type, self.full_class_id)

    def object_payload(
        self, object_id: Optional[str] = None, user_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Object body for ``object_id`` owned by ``user_id``, defaulting to this configuration's object."""
        object_id = object_id or self.object_id
        user_id = user_id or self.user_id
        if self.object_payload_path:
            return payloads.load_payload(
                self.object_payload_path,
                issuer_id=self.issuer_id,
                class_id=self.full_class_id,
                object_id=object_id,
                user_id=user_id,
            )
        return payloads.object_payload(self.object_type, self.full_class_id, object_id)


class Test(unittest.TestCase):
    def test_defaults(self):
        config = WalletConfig.from_env({})
        self.assertEqual(config.key_file_path, "/path/to/key.json")
        self.assertEqual(config.issuer_id, "issuer-id")
        self.assertEqual(config.class_id, "test-generic-class-id")
        self.assertEqual(config.user_id, "user-id")
        self.assertEqual(config.object_type, ObjectType.GENERIC)
        self.assertEqual(config.origins, ["www.example.com"])
        self.assertEqual(config.base_url, DEFAULT_BASE_URL)
        self.assertEqual(config.object_id, "issuer-id.user-id-test-generic-class-id")

    def test_from_env(self):
        config = WalletConfig.from_env(
            {
                "GOOGLE_APPLICATION_CREDENTIALS": "/tmp/key.json",
                "WALLET_ISSUER_ID": "3388000000022141111",
                "WALLET_CLASS_ID": "test-class-id",
                "WALLET_USER_ID": "user@example.com",
                "WALLET_OBJECT_TYPE": "eventTicket",
                "WALLET_ORIGINS": "a.example.com, b.example.com",
                "WALLET_API_URL": "http://localhost:8080/v1/",
            }
        )
        self.assertEqual(config.key_file_path, "/tmp/key.json")
        self.assertEqual(config.object_type, ObjectType.EVENT_TICKET)
        self.assertEqual(config.origins, ["a.example.com", "b.example.com"])
        self.assertEqual(config.base_url, "http://localhost:8080/v1")
        self.assertEqual(config.full_class_id, "3388000000022141111.test-class-id")
        self.assertEqual(
            config.object_id, "3388000000022141111.user_example.com-test-class-id"
        )

    def test_class_id_default_follows_object_type(self):
        config = WalletConfig.from_env({"WALLET_OBJECT_TYPE": "flight"})
        self.assertEqual(config.class_id, "test-flight-class-id")

    def test_payloads(self):
        config = WalletConfig(issuer_id="i", class_id="c", user_id="u")
        self.assertEqual(config.class_payload(), {"id": "i.c"})
        self.assertEqual(config.object_payload()["id"], "i.u-c")
        self.assertEqual(config.object_payload("i.other-c")["classId"], "i.c")
