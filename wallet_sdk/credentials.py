# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Service account credentials for the walletobjects API.

Two things are read from a service account key file downloaded from the Google
Cloud Console:

- OAuth2 credentials (via google-auth) used to authenticate REST and batch
  requests with the ``wallet_object.issuer`` scope.
- The raw ``client_email`` and ``private_key`` fields used to sign save links.

Any problem with the key file surfaces as a :class:`ConfigurationError` before
a single request is sent.

Examples:
    Authenticate an httpx client::

        import httpx
        from wallet_sdk.credentials import GoogleAuth, load_credentials

        credentials = load_credentials("/path/to/key.json")
        client = httpx.AsyncClient(auth=GoogleAuth(credentials))

    Read the signing fields::

        key = ServiceAccountKey.load("/path/to/key.json")
        print(key.client_email)
"""

from __future__ import annotations

import asyncio
import functools
import json
import os
import tempfile
import threading
import unittest
import unittest.mock
from dataclasses import dataclass, field
from typing import Any, AsyncGenerator, Dict, Generator, List, Optional

import google.auth.credentials
import google.auth.transport
import google.auth.transport.requests
import google.oauth2.credentials
import httpx
from google.oauth2 import service_account

from .testing import write_service_account_key

WALLET_SCOPE = "https://www.googleapis.com/auth/wallet_object.issuer"


class ConfigurationError(Exception):
    """The SDK was configured with a missing or invalid value"""

    path: Optional[str]

    def __init__(self, message: str, path: Optional[str] = None):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.path = path


@dataclass
class ServiceAccountKey:
    """The fields of a service account key file needed for signing."""

    client_email: str
    private_key: str
    info: Dict[str, Any] = field(default_factory=dict, repr=False)

    @staticmethod
    def load(path: str) -> ServiceAccountKey:
        """Load the key file at ``path``.

        :raises ConfigurationError: If the file is missing, is not JSON, or lacks
            ``client_email`` or ``private_key``.
        """
        try:
            with open(path) as file:
                data = json.load(file)
        except (OSError, ValueError) as e:
            raise ConfigurationError(
                f"Unable to read service account key {path}: {e}", path
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Service account key {path} is not a JSON object", path
            )
        missing = [name for name in ("client_email", "private_key") if not data.get(name)]
        if missing:
            raise ConfigurationError(
                f"Service account key {path} is missing: {', '.join(missing)}", path
            )
        return ServiceAccountKey(data["client_email"], data["private_key"], data)


def load_credentials(
    path: str, scopes: Optional[List[str]] = None
) -> service_account.Credentials:
    """
    Create scoped OAuth2 credentials from a service account key file.

    :param path: Path to the service account key file.
    :param scopes: OAuth scopes, defaults to the wallet issuer scope.
    :return: google-auth service account credentials.
    :raises ConfigurationError: If the key file is missing or malformed.
    """
    key = ServiceAccountKey.load(path)
    try:
        return service_account.Credentials.from_service_account_info(
            key.info, scopes=scopes or [WALLET_SCOPE]
        )
    except ValueError as e:
        raise ConfigurationError(
            f"Unable to load service account credentials from {path}: {e}", path
        ) from e


class GoogleAuth(httpx.Auth):
    """httpx authentication that attaches a google-auth bearer token to each request.

    The credentials are refreshed whenever they are not valid, which covers both
    the first request and token expiry. google-auth refreshes over a blocking
    transport, so async clients run the refresh in the default executor.
    """

    def __init__(
        self,
        credentials: google.auth.credentials.Credentials,
        request: Optional[google.auth.transport.Request] = None,
        timeout: Optional[float] = None,
    ):
        """
        :param credentials: google-auth credentials to apply.
        :param request: Transport used to refresh, defaults to a requests session.
        :param timeout: Timeout in seconds for the token refresh request.
        """
        self.credentials = credentials
        self.timeout = timeout
        self._request = request

    def _refresh(self):
        if self._request is None:
            self._request = google.auth.transport.requests.Request()
        request = self._request
        if self.timeout is not None:
            request = functools.partial(request, timeout=self.timeout)
        self.credentials.refresh(request)

    def auth_flow(
        self, request: httpx.Request
    ) -> Generator[httpx.Request, httpx.Response, None]:
        if not self.credentials.valid:
            self._refresh()
        self.credentials.apply(request.headers)
        yield request

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> AsyncGenerator[httpx.Request, httpx.Response]:
        if not self.credentials.valid:
            await asyncio.get_running_loop().run_in_executor(None, self._refresh)
        self.credentials.apply(request.headers)
        yield request


class Test(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.key_path = os.path.join(self.tempdir.name, "key.json")
        self.key_info, _ = write_service_account_key(self.key_path)

    def tearDown(self):
        self.tempdir.cleanup()

    def test_load_key(self):
        key = ServiceAccountKey.load(self.key_path)
        self.assertEqual(key.client_email, self.key_info["client_email"])
        self.assertEqual(key.private_key, self.key_info["private_key"])

    def test_load_key_missing_file(self):
        path = os.path.join(self.tempdir.name, "missing.json")
        with self.assertRaises(ConfigurationError) as cm:
            ServiceAccountKey.load(path)
        self.assertEqual(cm.exception.path, path)

    def test_load_key_malformed(self):
        with open(self.key_path, "w") as file:
            file.write("{not json")
        with self.assertRaises(ConfigurationError):
            ServiceAccountKey.load(self.key_path)

    def test_load_key_missing_field(self):
        with open(self.key_path, "w") as file:
            json.dump({"client_email": "a@b.c"}, file)
        with self.assertRaises(ConfigurationError) as cm:
            ServiceAccountKey.load(self.key_path)
        self.assertIn("private_key", str(cm.exception))

    def test_load_credentials(self):
        credentials = load_credentials(self.key_path)
        self.assertEqual(
            credentials.service_account_email, self.key_info["client_email"]
        )
        self.assertEqual(list(credentials.scopes), [WALLET_SCOPE])

    def test_load_credentials_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_credentials(os.path.join(self.tempdir.name, "missing.json"))

    def test_load_credentials_malformed(self):
        with open(self.key_path, "w") as file:
            json.dump({"type": "service_account"}, file)
        with self.assertRaises(ConfigurationError):
            load_credentials(self.key_path)

    def test_auth_attaches_token(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("authorization"))
            return httpx.Response(200)

        credentials = google.oauth2.credentials.Credentials(token="token-1")
        client = httpx.Client(
            transport=httpx.MockTransport(handler), auth=GoogleAuth(credentials)
        )
        client.get("https://walletobjects.googleapis.com/walletobjects/v1/issuer")
        client.close()
        self.assertEqual(seen, ["Bearer token-1"])

    def test_auth_refreshes_invalid_credentials(self):
        credentials = unittest.mock.MagicMock(valid=False)
        credentials.apply.side_effect = lambda headers: headers.__setitem__(
            "authorization", "Bearer refreshed"
        )
        transport_request = unittest.mock.MagicMock()
        client = httpx.Client(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
            auth=GoogleAuth(credentials, transport_request),
        )
        response = client.get("https://example.com")
        client.close()
        credentials.refresh.assert_called_once_with(transport_request)
        self.assertEqual(response.request.headers["authorization"], "Bearer refreshed")

    def test_load_credentials_not_an_object(self):
        with open(self.key_path, "w") as file:
            json.dump([], file)
        with self.assertRaises(ConfigurationError) as cm:
            load_credentials(self.key_path)
        self.assertEqual(cm.exception.path, self.key_path)


class TestAsyncAuth(unittest.IsolatedAsyncioTestCase):
    def credentials(self) -> unittest.mock.MagicMock:
        credentials = unittest.mock.MagicMock(valid=False)
        credentials.apply.side_effect = lambda headers: headers.__setitem__(
            "authorization", "Bearer refreshed"
        )
        return credentials

    async def test_refresh_runs_off_the_event_loop(self):
        refresh_threads = []
        credentials = self.credentials()
        credentials.refresh.side_effect = lambda request: refresh_threads.append(
            threading.get_ident()
        )
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
            auth=GoogleAuth(credentials, unittest.mock.MagicMock()),
        )
        response = await client.get("https://example.com")
        await client.aclose()
        self.assertEqual(len(refresh_threads), 1)
        self.assertNotEqual(refresh_threads[0], threading.get_ident())
        self.assertEqual(response.request.headers["authorization"], "Bearer refreshed")

    async def test_refresh_uses_timeout(self):
        credentials = self.credentials()
        transport_request = unittest.mock.MagicMock()
        credentials.refresh.side_effect = lambda request: request(
            url="https://oauth2.googleapis.com/token", method="POST"
        )
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
            auth=GoogleAuth(credentials, transport_request, timeout=30.0),
        )
        await client.get("https://example.com")
        await client.aclose()
        transport_request.assert_called_once_with(
            url="https://oauth2.googleapis.com/token", method="POST", timeout=30.0
        )

    async def test_valid_credentials_are_not_refreshed(self):
        credentials = google.oauth2.credentials.Credentials(token="token-1")
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200)),
            auth=GoogleAuth(credentials),
        )
        response = await client.get("https://example.com")
        await client.aclose()
        self.assertEqual(response.request.headers["authorization"], "Bearer token-1")
