# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Pass types supported by the walletobjects API.

Every pass type shares the same request shapes but uses its own collection
names. The :class:`ObjectType` enum maps a type to each of those names so the
rest of the SDK can stay generic:

    ============  =================  ==================  ====================
    Type          Class resource     Object resource     Save-token key
    ============  =================  ==================  ====================
    generic       genericClass       genericObject       genericObjects
    eventTicket   eventTicketClass   eventTicketObject   eventTicketObjects
    ============  =================  ==================  ====================

Examples:
    Resolve endpoint names::

        from wallet_sdk.object_type import ObjectType

        object_type = ObjectType.from_str("eventTicket")
        object_type.class_resource   # "eventTicketClass"
        object_type.batch_resource   # "eventticketobject"
"""

from __future__ import annotations

import unittest
from enum import Enum

from .credentials import ConfigurationError


class ObjectType(str, Enum):
    GENERIC = "generic"
    OFFER = "offer"
    LOYALTY = "loyalty"
    GIFT_CARD = "giftCard"
    EVENT_TICKET = "eventTicket"
    FLIGHT = "flight"
    TRANSIT = "transit"

    @staticmethod
    def from_str(value: str) -> ObjectType:
        """Parse a pass type, accepting any letter case and ``-``/``_`` separators."""
        normalized = value.replace("-", "").replace("_", "").lower()
        for object_type in ObjectType:
            if object_type.value.lower() == normalized:
                return object_type
        supported = ", ".join(t.value for t in ObjectType)
        raise ConfigurationError(
            f"Unknown object type {value!r}, expected one of: {supported}"
        )

    @property
    def capitalized(self) -> str:
        """Type name with a leading capital, as used in generated class names."""
        return self.value[0].upper() + self.value[1:]

    @property
    def class_resource(self) -> str:
        return f"{self.value}Class"

    @property
    def object_resource(self) -> str:
        return f"{self.value}Object"

    @property
    def payload_key(self) -> str:
        """Key of the object list inside a save-to-wallet claim payload."""
        return f"{self.value}Objects"

    @property
    def batch_resource(self) -> str:
        """Resource name on the generated walletobjects client, e.g. ``giftcardobject``."""
        return f"{self.value.lower()}object"

    def __str__(self) -> str:
        return self.value


class Test(unittest.TestCase):
    def test_resource_names(self):
        object_type = ObjectType.EVENT_TICKET
        self.assertEqual(object_type.class_resource, "eventTicketClass")
        self.assertEqual(object_type.object_resource, "eventTicketObject")
        self.assertEqual(object_type.payload_key, "eventTicketObjects")
        self.assertEqual(object_type.batch_resource, "eventticketobject")
        self.assertEqual(object_type.capitalized, "EventTicket")

    def test_from_str(self):
        self.assertEqual(ObjectType.from_str("generic"), ObjectType.GENERIC)
        self.assertEqual(ObjectType.from_str("giftCard"), ObjectType.GIFT_CARD)
        self.assertEqual(ObjectType.from_str("gift_card"), ObjectType.GIFT_CARD)
        self.assertEqual(ObjectType.from_str("EVENT-TICKET"), ObjectType.EVENT_TICKET)

    def test_from_str_unknown(self):
        with self.assertRaises(ConfigurationError):
            ObjectType.from_str("boardingPass")
