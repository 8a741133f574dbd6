# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Asynchronous client for the walletobjects REST API.

:class:`WalletClient` issues authenticated JSON requests against the
walletobjects API for one pass type. Each method maps to a single HTTP call,
except :meth:`WalletClient.get_or_create_object` which falls back to a create
when the object does not exist yet.

Endpoints (relative to ``https://walletobjects.googleapis.com/walletobjects/v1``):
    - ``POST {type}Class/``: create a class
    - ``GET {type}Class/{classId}``: fetch a class
    - ``GET {type}Object/{objectId}``: fetch an object
    - ``POST {type}Object/``: create an object
    - ``POST issuer``: create an issuer account
    - ``GET|PUT permissions/{issuerId}``: read or replace issuer permissions

Examples:
    Get or create an object::

        from wallet_sdk.async_client import WalletClient
        from wallet_sdk.config import WalletConfig

        config = WalletConfig.from_env()
        client = WalletClient.from_config(config)
        body = await client.get_or_create_object(
            config.object_id, config.object_payload()
        )
        print(f"object GET or POST response: {body}")
        await client.close()

Error Handling:
    - ApiError: Any response with a status code >= 400 that is not handled
    - ResourceNotFound: A GET for a class or object returned 404

Note:
    There are no retries. Response bodies are returned as text, exactly as the
    API sent them.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import unittest
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from .config import WalletConfig
from .credentials import ConfigurationError, GoogleAuth, load_credentials
from .metadata import Metadata
from .object_type import ObjectType
from .payloads import Permission, Role, issuer_payload, permissions_payload
from .testing import write_service_account_key


class WalletClient:
    """Async client for one pass type of the walletobjects REST API.

    Attributes:
        base_url: Base URL of the REST API
        client: Underlying HTTP client, authenticated with the service account
        object_type: Pass type selecting the class and object collections
    """

    base_url: str
    client: httpx.AsyncClient
    object_type: ObjectType

    def __init__(
        self,
        base_url: str,
        object_type: ObjectType = ObjectType.GENERIC,
        auth: Optional[httpx.Auth] = None,
        timeout: float = 30.0,
        http2: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        :param base_url: Base URL of the REST API.
        :param object_type: Pass type used for class and object endpoints.
        :param auth: Authentication applied to every request, normally :class:`GoogleAuth`.
        :param timeout: Request timeout in seconds.
        :param http2: Enable HTTP/2.
        :param transport: Custom transport, e.g. ``httpx.MockTransport`` in tests.
        """
        self.base_url = base_url.rstrip("/")
        self.object_type = object_type
        headers = {Metadata.CLIENT_HEADER: Metadata.get_client_header_val()}
        self.client = httpx.AsyncClient(
            auth=auth,
            http2=http2,
            timeout=httpx.Timeout(timeout),
            headers=headers,
            transport=transport,
        )

    @staticmethod
    def from_config(
        config: WalletConfig, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> WalletClient:
        """
        Create a client authenticated with the configured service account.

        :raises ConfigurationError: If the key file is missing or malformed.
        """
        credentials = load_credentials(config.key_file_path)
        return WalletClient(
            config.base_url,
            config.object_type,
            GoogleAuth(credentials, timeout=config.timeout),
            config.timeout,
            config.http2,
            transport,
        )

    async def close(self):
        """Close the underlying HTTP client connection."""
        await self.client.aclose()

    #
    # Classes
    #

    async def create_class(self, payload: Dict[str, Any]) -> str:
        """
        Create a class. Sending the same class twice re-attempts creation.

        :param payload: Class body, passed through unmodified.
        :return: The response body.
        """
        response = await self._post(f"{self.object_type.class_resource}/", payload)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.text

    async def get_class(self, class_id: str) -> str:
        """
        Fetch a class by its full ``issuerId.classId``.

        :raises ResourceNotFound: If the class does not exist.
        """
        response = await self._get(f"{self.object_type.class_resource}/{class_id}")
        if response.status_code == 404:
            raise ResourceNotFound(response.text, class_id)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {class_id}", response.status_code)
        return response.text

    #
    # Objects
    #

    async def get_object(self, object_id: str) -> str:
        """
        Fetch an object.

        :raises ResourceNotFound: If the object does not exist.
        :raises ApiError: For any other error status.
        """
        response = await self._get(f"{self.object_type.object_resource}/{object_id}")
        if response.status_code == 404:
            raise ResourceNotFound(response.text, object_id)
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {object_id}", response.status_code)
        return response.text

    async def create_object(self, payload: Dict[str, Any]) -> str:
        response = await self._post(f"{self.object_type.object_resource}/", payload)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.text

    async def get_or_create_object(
        self, object_id: str, payload: Dict[str, Any]
    ) -> str:
        """
        Fetch an object, creating it from ``payload`` if the API reports it missing.

        Only a 404 triggers the create; every other error propagates. Two callers
        racing on the same id may both attempt the create.

        :return: The body of the GET, or of the POST if the object was created.
        """
        try:
            return await self.get_object(object_id)
        except ResourceNotFound:
            logging.info(f"Object {object_id} not found, creating it")
        return await self.create_object(payload)

    #
    # Issuers
    #

    async def create_issuer(self, name: str, email: str) -> str:
        """Create an issuer account with the given name and contact email."""
        response = await self._post("issuer", issuer_payload(name, email))
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response.text

    async def get_permissions(self, issuer_id: str) -> str:
        response = await self._get(f"permissions/{issuer_id}")
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {issuer_id}", response.status_code)
        return response.text

    async def update_permissions(
        self,
        issuer_id: str,
        permissions: Sequence[Union[Permission, Dict[str, Any]]],
    ) -> str:
        """
        Replace the permissions of an issuer account.

        :param issuer_id: The issuer account id.
        :param permissions: Every entry that should have access afterwards.
        :return: The response body.
        """
        response = await self._put(
            f"permissions/{issuer_id}", permissions_payload(issuer_id, permissions)
        )
        if response.status_code >= 400:
            raise ApiError(f"{response.text} - {issuer_id}", response.status_code)
        return response.text

    async def _get(self, endpoint: str) -> httpx.Response:
        logging.debug(f"GET {self.base_url}/{endpoint}")
        return await self.client.get(url=f"{self.base_url}/{endpoint}")

    async def _post(self, endpoint: str, data: Dict[str, Any]) -> httpx.Response:
        logging.debug(f"POST {self.base_url}/{endpoint}")
        return await self.client.post(url=f"{self.base_url}/{endpoint}", json=data)

    async def _put(self, endpoint: str, data: Dict[str, Any]) -> httpx.Response:
        logging.debug(f"PUT {self.base_url}/{endpoint}")
        return await self.client.put(url=f"{self.base_url}/{endpoint}", json=data)


class ApiError(Exception):
    """The API returned a non-success status code, e.g., >= 400"""

    status_code: int

    def __init__(self, message: str, status_code: int):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code


class ResourceNotFound(Exception):
    """The requested class or object was not found"""

    resource: str

    def __init__(self, message: str, resource: str):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.resource = resource


BASE_URL = "https://walletobjects.googleapis.com/walletobjects/v1"
OBJECT_ID = "3388000000022141111.user_example.com-test-class-id"


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests: List[httpx.Request] = []
        self.responses: Dict[str, httpx.Response] = {}

    async def asyncSetUp(self):
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            key = f"{request.method} {request.url.path}"
            return self.responses.get(key, httpx.Response(200, text='{"ok": true}'))

        self.client = WalletClient(BASE_URL, transport=httpx.MockTransport(handler))

    async def asyncTearDown(self):
        await self.client.close()

    def respond(self, method: str, path: str, status_code: int, text: str = "{}"):
        self.responses[f"{method} /walletobjects/v1/{path}"] = httpx.Response(
            status_code, text=text
        )

    def methods(self) -> List[str]:
        return [request.method for request in self.requests]

    async def test_create_class(self):
        payload = {"id": "3388000000022141111.test-class-id"}
        self.respond("POST", "genericClass/", 200, '{"id": "created"}')
        body = await self.client.create_class(payload)
        self.assertEqual(body, '{"id": "created"}')
        self.assertEqual(self.methods(), ["POST"])
        self.assertEqual(str(self.requests[0].url), f"{BASE_URL}/genericClass/")
        self.assertEqual(json.loads(self.requests[0].content), payload)

    async def test_create_class_error(self):
        self.respond("POST", "genericClass/", 409, "exists")
        with self.assertRaises(ApiError) as cm:
            await self.client.create_class({"id": "x"})
        self.assertEqual(cm.exception.status_code, 409)

    async def test_object_type_selects_endpoints(self):
        await self.client.close()
        self.client = WalletClient(
            BASE_URL,
            ObjectType.EVENT_TICKET,
            transport=httpx.MockTransport(
                lambda request: self.requests.append(request) or httpx.Response(200)
            ),
        )
        await self.client.create_class({})
        await self.client.get_object(OBJECT_ID)
        self.assertEqual(
            [request.url.path for request in self.requests],
            [
                "/walletobjects/v1/eventTicketClass/",
                f"/walletobjects/v1/eventTicketObject/{OBJECT_ID}",
            ],
        )

    async def test_get_class_not_found(self):
        self.respond("GET", "genericClass/i.c", 404)
        with self.assertRaises(ResourceNotFound) as cm:
            await self.client.get_class("i.c")
        self.assertEqual(cm.exception.resource, "i.c")

    async def test_get_or_create_object_existing(self):
        self.respond("GET", f"genericObject/{OBJECT_ID}", 200, '{"id": "existing"}')
        body = await self.client.get_or_create_object(OBJECT_ID, {"id": OBJECT_ID})
        self.assertEqual(body, '{"id": "existing"}')
        self.assertEqual(self.methods(), ["GET"])

    async def test_get_or_create_object_missing(self):
        payload = {"id": OBJECT_ID, "classId": "3388000000022141111.test-class-id"}
        self.respond("GET", f"genericObject/{OBJECT_ID}", 404)
        self.respond("POST", "genericObject/", 200, '{"id": "created"}')
        body = await self.client.get_or_create_object(OBJECT_ID, payload)
        self.assertEqual(body, '{"id": "created"}')
        self.assertEqual(self.methods(), ["GET", "POST"])
        self.assertEqual(str(self.requests[1].url), f"{BASE_URL}/genericObject/")
        self.assertEqual(json.loads(self.requests[1].content), payload)

    async def test_get_or_create_object_server_error(self):
        self.respond("GET", f"genericObject/{OBJECT_ID}", 500, "boom")
        with self.assertRaises(ApiError) as cm:
            await self.client.get_or_create_object(OBJECT_ID, {"id": OBJECT_ID})
        self.assertEqual(cm.exception.status_code, 500)
        self.assertEqual(self.methods(), ["GET"])

    async def test_get_or_create_object_forbidden(self):
        self.respond("GET", f"genericObject/{OBJECT_ID}", 403)
        with self.assertRaises(ApiError):
            await self.client.get_or_create_object(OBJECT_ID, {"id": OBJECT_ID})
        self.assertEqual(self.methods(), ["GET"])

    async def test_get_or_create_object_create_fails(self):
        self.respond("GET", f"genericObject/{OBJECT_ID}", 404)
        self.respond("POST", "genericObject/", 400, "invalid")
        with self.assertRaises(ApiError) as cm:
            await self.client.get_or_create_object(OBJECT_ID, {"id": OBJECT_ID})
        self.assertEqual(cm.exception.status_code, 400)
        self.assertEqual(self.methods(), ["GET", "POST"])

    async def test_create_issuer(self):
        await self.client.create_issuer("name", "email-address")
        self.assertEqual(self.methods(), ["POST"])
        self.assertEqual(str(self.requests[0].url), f"{BASE_URL}/issuer")
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"name": "name", "contactInfo": {"email": "email-address"}},
        )

    async def test_update_permissions(self):
        permissions = [
            Permission("owner@example.com", Role.OWNER),
            Permission("reader@example.com", Role.READER),
        ]
        await self.client.update_permissions("3388000000022141111", permissions)
        self.assertEqual(self.methods(), ["PUT"])
        self.assertEqual(
            str(self.requests[0].url), f"{BASE_URL}/permissions/3388000000022141111"
        )
        body = json.loads(self.requests[0].content)
        self.assertEqual(body["issuerId"], "3388000000022141111")
        self.assertEqual(body["permissions"], [p.to_dict() for p in permissions])

    async def test_update_permissions_error(self):
        self.respond("PUT", "permissions/3388000000022141111", 403)
        with self.assertRaises(ApiError):
            await self.client.update_permissions("3388000000022141111", [])

    async def test_get_permissions(self):
        self.respond("GET", "permissions/1", 200, '{"issuerId": "1"}')
        self.assertEqual(await self.client.get_permissions("1"), '{"issuerId": "1"}')

    async def test_sends_client_header(self):
        await self.client.get_permissions("1")
        self.assertEqual(
            self.requests[0].headers[Metadata.CLIENT_HEADER],
            Metadata.get_client_header_val(),
        )


class TestFromConfig(unittest.IsolatedAsyncioTestCase):
    async def test_missing_key_file(self):
        config = WalletConfig(key_file_path="/nonexistent/key.json")
        with self.assertRaises(ConfigurationError):
            WalletClient.from_config(config)

    async def test_authenticates_with_service_account(self):
        with tempfile.TemporaryDirectory() as tempdir:
            key_path = os.path.join(tempdir, "key.json")
            write_service_account_key(key_path)
            config = WalletConfig(key_file_path=key_path, object_type=ObjectType.OFFER)
            client = WalletClient.from_config(config)
        self.assertIsInstance(client.client.auth, GoogleAuth)
        self.assertEqual(client.client.auth.timeout, config.timeout)
        self.assertEqual(client.object_type, ObjectType.OFFER)
        self.assertEqual(client.base_url, config.base_url)
        await client.close()
