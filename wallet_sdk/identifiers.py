# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Identifier helpers for wallet objects.

Object ids have the form ``issuerId.identifier`` and may only contain
alphanumeric characters, ``.``, ``_`` or ``-``. The identifier used here is the
sanitized user id followed by the class id, so the same user gets the same
object for a given class.

Examples:
    Build an object id from an email address::

        >>> object_id("3388000000022141111", "user@example.com", "test-class-id")
        '3388000000022141111.user_example.com-test-class-id'
"""

import re
import unittest
import uuid

# Characters allowed in the user portion of an object id
_INVALID_CHARS = re.compile(r"[^\w.-]", re.IGNORECASE | re.ASCII)
_VALID_OBJECT_ID = re.compile(r"^[A-Za-z0-9._-]*$")


def sanitize_user_id(user_id: str) -> str:
    """Replace every character that is not a word character, '.' or '-' with '_'."""
    return _INVALID_CHARS.sub("_", user_id)


def object_id(issuer_id: str, user_id: str, class_id: str) -> str:
    """
    Derive the object id for a user and class.

    Inputs are not validated; collisions between users whose ids sanitize to
    the same string are the caller's responsibility.

    :param issuer_id: The issuer account id.
    :param user_id: Developer defined id for the user, such as an email address.
    :param class_id: Developer defined id of the wallet class.
    :return: ``{issuer_id}.{sanitized user_id}-{class_id}``
    """
    return f"{issuer_id}.{sanitize_user_id(user_id)}-{class_id}"


def random_user_id() -> str:
    """A fresh user id for generated objects, e.g. in batch inserts."""
    return uuid.uuid4().hex


class Test(unittest.TestCase):
    def test_object_id(self):
        self.assertEqual(
            object_id("3388000000022141111", "user@example.com", "test-class-id"),
            "3388000000022141111.user_example.com-test-class-id",
        )

    def test_sanitize_keeps_allowed_characters(self):
        self.assertEqual(sanitize_user_id("A-b.c_9"), "A-b.c_9")

    def test_sanitize_keeps_dots_in_email(self):
        self.assertEqual(sanitize_user_id("user@example.com"), "user_example.com")

    def test_sanitize_replaces_everything_else(self):
        for user_id in ["a b", "a/b", "a+b", "a:b", "é", "a\nb", "a@b!c#d"]:
            sanitized = sanitize_user_id(user_id)
            self.assertEqual(len(sanitized), len(user_id))
            self.assertRegex(sanitized, _VALID_OBJECT_ID)

    def test_empty_inputs(self):
        self.assertEqual(object_id("", "", ""), ".-")

    def test_random_user_id(self):
        first = random_user_id()
        second = random_user_id()
        self.assertNotEqual(first, second)
        self.assertEqual(sanitize_user_id(first), first)
