# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Command line interface for the Wallet Objects SDK.

Each command runs one step against the walletobjects API and prints the raw
response body, or the save URL, to standard output. ``demo`` runs every step
in order: class, object, save link, issuer, permissions and batch insert.

Configuration is read from the environment (see :mod:`wallet_sdk.config`) and
can be overridden with flags.

Usage::

    python -m wallet_sdk.cli create-class --key-file ./key.json --issuer-id 3388000000022141111
    python -m wallet_sdk.cli get-or-create-object --user-id user@example.com
    python -m wallet_sdk.cli save-link --object-type eventTicket
    python -m wallet_sdk.cli create-issuer --issuer-name "Example" --issuer-email owner@example.com
    python -m wallet_sdk.cli update-permissions --permission owner@example.com=OWNER
    python -m wallet_sdk.cli batch-insert --count 5
    python -m wallet_sdk.cli demo --issuer-name Example --issuer-email owner@example.com \\
        --permission owner@example.com=OWNER

Exit status is non-zero when configuration is invalid or the API returns an
error.
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import io
import json
import logging
import os
import sys
import tempfile
import unittest
import unittest.mock
from typing import Any, Callable, List, Optional

import google.oauth2.credentials
import httpx

from .async_client import WalletClient
from .batch import DEFAULT_BATCH_SIZE, BatchInserter, BatchResult
from .config import WalletConfig, default_class_id
from .credentials import ConfigurationError, load_credentials
from .object_type import ObjectType
from .payloads import Permission
from .save_link import SaveLink
from .testing import write_service_account_key

COMMANDS = [
    "create-class",
    "get-or-create-object",
    "save-link",
    "create-issuer",
    "update-permissions",
    "batch-insert",
    "demo",
]

# Commands that talk to the REST API
REST_COMMANDS = {
    "create-class",
    "get-or-create-object",
    "create-issuer",
    "update-permissions",
    "demo",
}


def argument_type(parse: Callable[[str], Any]) -> Callable[[str], Any]:
    """Adapt a parser raising ConfigurationError into an argparse type."""

    def parse_argument(value: str) -> Any:
        try:
            return parse(value)
        except ConfigurationError as e:
            raise argparse.ArgumentTypeError(str(e))

    return parse_argument


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Google Wallet objects CLI")
    parser.add_argument(
        "command", type=str, help="The command to execute", choices=COMMANDS
    )
    parser.add_argument(
        "--key-file",
        help="Path to the service account key file (GOOGLE_APPLICATION_CREDENTIALS)",
        type=str,
    )
    parser.add_argument(
        "--issuer-id", help="The issuer id (WALLET_ISSUER_ID)", type=str
    )
    parser.add_argument(
        "--class-id",
        help="Developer defined class id, without the issuer prefix (WALLET_CLASS_ID)",
        type=str,
    )
    parser.add_argument(
        "--user-id",
        help="Developer defined user id, such as an email address (WALLET_USER_ID)",
        type=str,
    )
    parser.add_argument(
        "--object-type",
        help="Pass type: " + ", ".join(t.value for t in ObjectType),
        type=argument_type(ObjectType.from_str),
    )
    parser.add_argument(
        "--class-payload", help="JSON template file for the class body", type=str
    )
    parser.add_argument(
        "--object-payload", help="JSON template file for the object body", type=str
    )
    parser.add_argument("--issuer-name", help="Name of the new issuer", type=str)
    parser.add_argument(
        "--issuer-email", help="Contact email of the new issuer", type=str
    )
    parser.add_argument(
        "--permission",
        help="Permission in format 'email=READER|WRITER|OWNER' (can be specified multiple times)",
        action="append",
        type=argument_type(Permission.from_str),
        default=[],
    )
    parser.add_argument(
        "--count",
        help="Number of objects to create in a batch",
        type=int,
        default=DEFAULT_BATCH_SIZE,
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (WALLET_LOG_LEVEL)",
        type=str.upper,
        default=os.getenv("WALLET_LOG_LEVEL", "WARNING").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return parser


def config_from_args(parsed_args: argparse.Namespace) -> WalletConfig:
    """Environment configuration with command line overrides applied."""
    config = WalletConfig.from_env()
    overrides: dict = {}
    if parsed_args.object_type is not None:
        overrides["object_type"] = parsed_args.object_type
        if not os.getenv("WALLET_CLASS_ID"):
            overrides["class_id"] = default_class_id(parsed_args.object_type)
    for field_name, value in [
        ("key_file_path", parsed_args.key_file),
        ("issuer_id", parsed_args.issuer_id),
        ("class_id", parsed_args.class_id),
        ("user_id", parsed_args.user_id),
        ("class_payload_path", parsed_args.class_payload),
        ("object_payload_path", parsed_args.object_payload),
    ]:
        if value is not None:
            overrides[field_name] = value
    return dataclasses.replace(config, **overrides)


def print_batch_results(results: List[BatchResult]):
    for result in results:
        if result.exception is not None:
            print(f"batch insert {result.request_id} failed: {result.exception}")
        else:
            print(f"batch insert {result.request_id} response: {json.dumps(result.response)}")


async def run(
    command: str,
    config: WalletConfig,
    parsed_args: argparse.Namespace,
    client: Optional[WalletClient],
):
    if command in ("create-class", "demo"):
        body = await client.create_class(config.class_payload())
        print(f"class POST response: {body}")

    if command in ("get-or-create-object", "demo"):
        body = await client.get_or_create_object(
            config.object_id, config.object_payload()
        )
        print(f"object GET or POST response: {body}")

    if command in ("save-link", "demo"):
        print(SaveLink.from_config(config).url([config.object_id]))

    if command in ("create-issuer", "demo"):
        if parsed_args.issuer_name and parsed_args.issuer_email:
            body = await client.create_issuer(
                parsed_args.issuer_name, parsed_args.issuer_email
            )
            print(f"issuer POST response: {body}")
        else:
            logging.warning("Skipping issuer creation, no issuer name and email given")

    if command in ("update-permissions", "demo"):
        if parsed_args.permission:
            body = await client.update_permissions(
                config.issuer_id, parsed_args.permission
            )
            print(f"permissions PUT response: {body}")
        else:
            logging.warning("Skipping permissions update, no permissions given")

    if command in ("batch-insert", "demo"):
        inserter = BatchInserter.from_config(config)
        print_batch_results(inserter.insert_objects(parsed_args.count))


async def main(args: List[str]):
    """Main entry point for the Wallet Objects CLI.

    Args:
        args: List of command-line arguments (typically from sys.argv[1:])

    Raises:
        SystemExit: On invalid arguments or configuration.
        ApiError: If the API rejects a request.
    """
    parser = build_parser()
    parsed_args = parser.parse_args(args)
    logging.basicConfig(level=parsed_args.log_level)

    if parsed_args.command == "create-issuer" and not (
        parsed_args.issuer_name and parsed_args.issuer_email
    ):
        parser.error("Missing required arguments '--issuer-name' and '--issuer-email'")
    if parsed_args.command == "update-permissions" and not parsed_args.permission:
        parser.error("Missing required argument '--permission'")
    if parsed_args.count < 0:
        parser.error("'--count' must not be negative")

    client = None
    try:
        config = config_from_args(parsed_args)
        if parsed_args.command in REST_COMMANDS:
            client = WalletClient.from_config(config)
        await run(parsed_args.command, config, parsed_args, client)
    except ConfigurationError as e:
        parser.error(str(e))
    finally:
        if client is not None:
            await client.close()


def entry_point():
    asyncio.run(main(sys.argv[1:]))


class Test(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.key_path = os.path.join(self.tempdir.name, "key.json")
        write_service_account_key(self.key_path)
        self.requests: List[httpx.Request] = []
        env = {
            "GOOGLE_APPLICATION_CREDENTIALS": self.key_path,
            "WALLET_ISSUER_ID": "3388000000022141111",
            "WALLET_CLASS_ID": "test-class-id",
            "WALLET_USER_ID": "user@example.com",
        }
        patcher = unittest.mock.patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.tempdir.cleanup()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET":
            return httpx.Response(404, text="not found")
        return httpx.Response(200, text=f'{{"path": "{request.url.path}"}}')

    async def run_cli(self, args: List[str]) -> str:
        real_from_config = WalletClient.from_config

        def from_config(config: WalletConfig) -> WalletClient:
            return real_from_config(config, httpx.MockTransport(self.handler))

        def issued_credentials(path: str) -> google.oauth2.credentials.Credentials:
            # Validate the key file, then skip the token exchange
            load_credentials(path)
            return google.oauth2.credentials.Credentials(token="test-token")

        output = io.StringIO()
        with unittest.mock.patch.object(
            WalletClient, "from_config", side_effect=from_config
        ), unittest.mock.patch(
            "wallet_sdk.async_client.load_credentials", side_effect=issued_credentials
        ), contextlib.redirect_stdout(output):
            await main(args)
        return output.getvalue()

    async def test_create_class(self):
        output = await self.run_cli(["create-class"])
        self.assertEqual(
            output, 'class POST response: {"path": "/walletobjects/v1/genericClass/"}\n'
        )
        self.assertEqual(
            json.loads(self.requests[0].content),
            {"id": "3388000000022141111.test-class-id"},
        )
        self.assertEqual(self.requests[0].headers["authorization"], "Bearer test-token")

    async def test_get_or_create_object(self):
        output = await self.run_cli(["get-or-create-object"])
        self.assertEqual([r.method for r in self.requests], ["GET", "POST"])
        self.assertEqual(
            self.requests[0].url.path,
            "/walletobjects/v1/genericObject/3388000000022141111.user_example.com-test-class-id",
        )
        self.assertTrue(output.startswith("object GET or POST response: "))

    async def test_save_link(self):
        output = await self.run_cli(["save-link", "--object-type", "offer"])
        self.assertTrue(output.startswith("https://pay.google.com/gp/v/save/"))
        self.assertEqual(self.requests, [])

    async def test_update_permissions(self):
        await self.run_cli(
            [
                "update-permissions",
                "--permission",
                "owner@example.com=owner",
                "--permission",
                "reader@example.com=READER",
            ]
        )
        self.assertEqual(self.requests[0].method, "PUT")
        self.assertEqual(
            json.loads(self.requests[0].content),
            {
                "issuerId": "3388000000022141111",
                "permissions": [
                    {"emailAddress": "owner@example.com", "role": "OWNER"},
                    {"emailAddress": "reader@example.com", "role": "READER"},
                ],
            },
        )

    async def test_invalid_role(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            await self.run_cli(["update-permissions", "--permission", "a@b.c=ADMIN"])

    async def test_create_issuer_requires_name(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            await self.run_cli(["create-issuer"])

    async def test_missing_key_file(self):
        with contextlib.redirect_stderr(io.StringIO()), self.assertRaises(SystemExit):
            await self.run_cli(["create-class", "--key-file", "/nonexistent.json"])
        self.assertEqual(self.requests, [])

    async def test_batch_insert(self):
        inserter = unittest.mock.MagicMock()
        inserter.insert_objects.return_value = [
            BatchResult("3388000000022141111.a-test-class-id", {"id": "a"}, None)
        ]
        with unittest.mock.patch.object(
            BatchInserter, "from_config", return_value=inserter
        ):
            output = await self.run_cli(["batch-insert", "--count", "1"])
        inserter.insert_objects.assert_called_once_with(1)
        self.assertEqual(
            output,
            'batch insert 3388000000022141111.a-test-class-id response: {"id": "a"}\n',
        )

    def test_config_from_args(self):
        parsed_args = build_parser().parse_args(
            ["save-link", "--object-type", "eventTicket", "--user-id", "other"]
        )
        config = config_from_args(parsed_args)
        self.assertEqual(config.object_type, ObjectType.EVENT_TICKET)
        # WALLET_CLASS_ID is set, so the class id is kept
        self.assertEqual(config.class_id, "test-class-id")
        self.assertEqual(config.object_id, "3388000000022141111.other-test-class-id")


if __name__ == "__main__":
    entry_point()
