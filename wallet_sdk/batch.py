# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Batch creation of wallet objects.

Objects are inserted through the generated walletobjects client from
google-api-python-client, which frames every insert into a single multipart
HTTP batch request. The client library reports each item separately; those
per-item results are returned exactly as reported, so some items may have
succeeded while others failed.

Examples:
    Create three objects for random users::

        from wallet_sdk.batch import BatchInserter
        from wallet_sdk.config import WalletConfig

        inserter = BatchInserter.from_config(WalletConfig.from_env())
        for result in inserter.insert_objects(3):
            print(result.request_id, result.exception or result.response)
"""

from __future__ import annotations

import os
import tempfile
import unittest
import unittest.mock
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from googleapiclient import discovery

from . import identifiers
from .config import WalletConfig
from .credentials import load_credentials
from .object_type import ObjectType

DEFAULT_BATCH_SIZE = 3


@dataclass
class BatchResult:
    """Outcome of one request in a batch, as reported by the client library."""

    request_id: str
    response: Optional[Dict[str, Any]]
    exception: Optional[Exception]


def build_service(config: WalletConfig) -> Any:
    """
    Build an authenticated walletobjects v1 service.

    :raises ConfigurationError: If the key file is missing or malformed.
    """
    credentials = load_credentials(config.key_file_path)
    return discovery.build(
        "walletobjects", "v1", credentials=credentials, cache_discovery=False
    )


class BatchInserter:
    """Inserts freshly generated objects of the configured class in one batch."""

    config: WalletConfig
    service: Any

    def __init__(self, config: WalletConfig, service: Any):
        self.config = config
        self.service = service

    @staticmethod
    def from_config(config: WalletConfig) -> BatchInserter:
        return BatchInserter(config, build_service(config))

    def insert_objects(self, count: int = DEFAULT_BATCH_SIZE) -> List[BatchResult]:
        """
        Add ``count`` new objects, each for a new random user, to one batch and execute it.

        :return: One result per request, in the order the client library reported them.
        """
        results: List[BatchResult] = []

        def callback(request_id: str, response: Any, exception: Optional[Exception]):
            results.append(BatchResult(request_id, response, exception))

        batch = self.service.new_batch_http_request(callback=callback)
        resource = getattr(self.service, self.config.object_type.batch_resource)()
        for _ in range(count):
            user_id = identifiers.random_user_id()
            object_id = identifiers.object_id(
                self.config.issuer_id, user_id, self.config.class_id
            )
            batch.add(
                resource.insert(body=self.config.object_payload(object_id, user_id)),
                request_id=object_id,
            )
        batch.execute()
        return results


class Test(unittest.TestCase):
    def setUp(self):
        self.config = WalletConfig(
            issuer_id="3388000000022141111", class_id="test-class-id"
        )
        self.service = unittest.mock.MagicMock()
        self.batch = self.service.new_batch_http_request.return_value
        self.service.genericobject.return_value.insert.side_effect = (
            lambda body: ("insert", body["id"])
        )

    def added_ids(self) -> List[str]:
        return [c.kwargs["request_id"] for c in self.batch.add.call_args_list]

    def test_insert_objects(self):
        BatchInserter(self.config, self.service).insert_objects(3)

        object_ids = self.added_ids()
        self.assertEqual(len(object_ids), 3)
        self.assertEqual(len(set(object_ids)), 3)
        for object_id in object_ids:
            self.assertTrue(object_id.startswith("3388000000022141111."))
            self.assertTrue(object_id.endswith("-test-class-id"))
        self.assertEqual(
            [c.args[0] for c in self.batch.add.call_args_list],
            [("insert", object_id) for object_id in object_ids],
        )
        self.batch.execute.assert_called_once_with()
        # Every add happens before the single execute
        self.assertEqual(self.batch.mock_calls[-1], unittest.mock.call.execute())

    def test_payload_class_id(self):
        BatchInserter(self.config, self.service).insert_objects(1)
        body = self.service.genericobject.return_value.insert.call_args.kwargs["body"]
        self.assertEqual(body["classId"], "3388000000022141111.test-class-id")
        self.assertEqual(body["id"], self.added_ids()[0])

    def test_template_user_id_matches_object_id(self):
        with tempfile.TemporaryDirectory() as tempdir:
            path = os.path.join(tempdir, "object.json")
            with open(path, "w") as file:
                file.write(
                    '{"id": "$object_id", "classId": "$class_id", "userId": "$user_id"}'
                )
            self.config.object_payload_path = path
            BatchInserter(self.config, self.service).insert_objects(2)

        insert = self.service.genericobject.return_value.insert
        bodies = [c.kwargs["body"] for c in insert.call_args_list]
        self.assertEqual(len(bodies), 2)
        for body in bodies:
            self.assertNotEqual(body["userId"], self.config.user_id)
            self.assertEqual(
                body["id"],
                identifiers.object_id("3388000000022141111", body["userId"], "test-class-id"),
            )
        self.assertNotEqual(bodies[0]["userId"], bodies[1]["userId"])

    def test_object_type_selects_resource(self):
        self.config.object_type = ObjectType.GIFT_CARD
        self.service.giftcardobject.return_value.insert.return_value = "insert"
        BatchInserter(self.config, self.service).insert_objects(2)
        self.assertEqual(self.service.giftcardobject.return_value.insert.call_count, 2)
        self.service.genericobject.assert_not_called()

    def test_results_are_passed_through(self):
        failure = Exception("409 conflict")

        def execute():
            callback = self.service.new_batch_http_request.call_args.kwargs["callback"]
            callback("a", {"id": "a"}, None)
            callback("b", None, failure)

        self.batch.execute.side_effect = execute
        results = BatchInserter(self.config, self.service).insert_objects(2)
        self.assertEqual(
            results,
            [BatchResult("a", {"id": "a"}, None), BatchResult("b", None, failure)],
        )

    def test_zero_count_still_executes_once(self):
        results = BatchInserter(self.config, self.service).insert_objects(0)
        self.assertEqual(results, [])
        self.batch.add.assert_not_called()
        self.batch.execute.assert_called_once_with()
