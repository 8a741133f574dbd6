# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Request bodies for the walletobjects API.

Class and object payloads are free-form JSON documents. This module provides a
minimal default for each pass type and a way to load custom payloads from JSON
template files. Templates may reference ``$issuer_id``, ``$class_id``,
``$object_id`` and ``$user_id``, which are substituted before the text is
parsed. Unknown placeholders are left as they are.

Examples:
    Default payloads::

        from wallet_sdk.object_type import ObjectType
        from wallet_sdk import payloads

        body = payloads.object_payload(
            ObjectType.GENERIC, "3388000000022141111.test-class", "3388000000022141111.user-test-class"
        )

    A custom template file ``object.json``::

        {"id": "$object_id", "classId": "$class_id", "state": "ACTIVE"}

    loaded with::

        body = payloads.load_payload("object.json", object_id=..., class_id=...)

    Permissions::

        body = payloads.permissions_payload(
            "3388000000022141111",
            [Permission("owner@example.com", Role.OWNER)],
        )
"""

from __future__ import annotations

import json
import os
import string
import tempfile
import unittest
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .credentials import ConfigurationError
from .object_type import ObjectType

LOGO_URI = (
    "https://storage.googleapis.com/wallet-lab-tools-codelab-artifacts-public/pass_google_logo.jpg"
)


class Role(str, Enum):
    """Access levels that can be granted on an issuer account."""

    READER = "READER"
    WRITER = "WRITER"
    OWNER = "OWNER"

    @staticmethod
    def from_str(value: str) -> Role:
        try:
            return Role(value.strip().upper())
        except ValueError:
            supported = ", ".join(role.value for role in Role)
            raise ConfigurationError(
                f"Unknown role {value!r}, expected one of: {supported}"
            ) from None


@dataclass
class Permission:
    email_address: str
    role: Role

    @staticmethod
    def from_str(value: str) -> Permission:
        """Parse ``email=ROLE``, as accepted on the command line."""
        email_address, sep, role = value.rpartition("=")
        if not sep or not email_address:
            raise ConfigurationError(
                f"Invalid permission {value!r}, expected email=READER|WRITER|OWNER"
            )
        return Permission(email_address, Role.from_str(role))

    def to_dict(self) -> Dict[str, str]:
        return {"emailAddress": self.email_address, "role": self.role.value}


def _localized(value: str) -> Dict[str, Any]:
    return {"defaultValue": {"language": "en-US", "value": value}}


def _image(description: str) -> Dict[str, Any]:
    return {
        "sourceUri": {"uri": LOGO_URI},
        "contentDescription": _localized(description),
    }


def _barcode(object_id: str) -> Dict[str, Any]:
    return {"type": "QR_CODE", "value": object_id}


_CLASS_FIELDS: Dict[ObjectType, Callable[[], Dict[str, Any]]] = {
    ObjectType.GENERIC: lambda: {},
    ObjectType.OFFER: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
        "title": "Offer title",
        "provider": "Provider name",
        "redemptionChannel": "ONLINE",
    },
    ObjectType.LOYALTY: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
        "programName": "Program name",
        "programLogo": _image("Logo description"),
    },
    ObjectType.GIFT_CARD: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
    },
    ObjectType.EVENT_TICKET: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
        "eventName": _localized("Event name"),
    },
    ObjectType.FLIGHT: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
        "localScheduledDepartureDateTime": "2023-07-02T15:30:00",
        "flightHeader": {
            "carrier": {"carrierIataCode": "LX"},
            "flightNumber": "123",
        },
        "origin": {"airportIataCode": "LAX", "terminal": "1", "gate": "A2"},
        "destination": {"airportIataCode": "SFO", "terminal": "2", "gate": "C3"},
    },
    ObjectType.TRANSIT: lambda: {
        "issuerName": "Issuer name",
        "reviewStatus": "UNDER_REVIEW",
        "transitType": "BUS",
        "logo": _image("Logo description"),
    },
}

_OBJECT_FIELDS: Dict[ObjectType, Callable[[], Dict[str, Any]]] = {
    ObjectType.GENERIC: lambda: {
        "genericType": "GENERIC_TYPE_UNSPECIFIED",
        "hexBackgroundColor": "#4285f4",
        "logo": _image("Logo description"),
        "cardTitle": _localized("Generic card title"),
        "header": _localized("Generic header"),
    },
    ObjectType.OFFER: lambda: {
        "state": "ACTIVE",
        "validTimeInterval": {
            "start": {"date": "2023-06-12T23:20:50.52Z"},
            "end": {"date": "2023-12-12T23:20:50.52Z"},
        },
    },
    ObjectType.LOYALTY: lambda: {
        "state": "ACTIVE",
        "accountId": "Account id",
        "accountName": "Account name",
        "loyaltyPoints": {"label": "Points", "balance": {"int": 800}},
    },
    ObjectType.GIFT_CARD: lambda: {
        "state": "ACTIVE",
        "cardNumber": "Card number",
        "pin": "1234",
        "balance": {"micros": 20000000, "currencyCode": "USD"},
    },
    ObjectType.EVENT_TICKET: lambda: {
        "state": "ACTIVE",
        "seatInfo": {
            "seat": _localized("42"),
            "row": _localized("G3"),
            "section": _localized("5"),
            "gate": _localized("A"),
        },
        "ticketHolderName": "Ticket holder name",
        "ticketNumber": "Ticket number",
    },
    ObjectType.FLIGHT: lambda: {
        "state": "ACTIVE",
        "passengerName": "Passenger name",
        "reservationInfo": {"confirmationCode": "Confirmation code"},
        "boardingAndSeatingInfo": {"boardingGroup": "B", "seatNumber": "42"},
    },
    ObjectType.TRANSIT: lambda: {
        "state": "ACTIVE",
        "passengerType": "SINGLE_PASSENGER",
        "passengerNames": "Passenger names",
        "tripType": "ONE_WAY",
        "ticketLeg": {
            "originStationCode": "LA",
            "originName": _localized("Origin name"),
            "destinationStationCode": "SFO",
            "destinationName": _localized("Destination name"),
            "departureDateTime": "2020-04-12T16:20:50.52Z",
            "arrivalDateTime": "2020-04-12T20:20:50.52Z",
        },
    },
}


def class_payload(object_type: ObjectType, class_id: str) -> Dict[str, Any]:
    """Default class body for ``object_type``. ``class_id`` is the full ``issuerId.classId``."""
    payload: Dict[str, Any] = {"id": class_id}
    payload.update(_CLASS_FIELDS[object_type]())
    return payload


def object_payload(
    object_type: ObjectType, class_id: str, object_id: str
) -> Dict[str, Any]:
    """Default object body for ``object_type``. ``class_id`` is the full ``issuerId.classId``."""
    payload: Dict[str, Any] = {"id": object_id, "classId": class_id}
    payload.update(_OBJECT_FIELDS[object_type]())
    payload["barcode"] = _barcode(object_id)
    return payload


def issuer_payload(name: str, email: str) -> Dict[str, Any]:
    return {"name": name, "contactInfo": {"email": email}}


def permissions_payload(
    issuer_id: str, permissions: Sequence[Union[Permission, Dict[str, Any]]]
) -> Dict[str, Any]:
    """
    Body for replacing the permissions of an issuer.

    :param issuer_id: The issuer account id.
    :param permissions: Permission entries. Plain dicts are sent exactly as given.
    """
    entries: List[Dict[str, Any]] = [
        p.to_dict() if isinstance(p, Permission) else p for p in permissions
    ]
    return {"issuerId": issuer_id, "permissions": entries}


def load_payload(path: str, **values: Optional[str]) -> Dict[str, Any]:
    """
    Load a JSON payload template, substituting ``$name`` placeholders from ``values``.

    :raises ConfigurationError: If the file cannot be read or is not valid JSON
        after substitution.
    """
    try:
        with open(path) as file:
            text = file.read()
    except OSError as e:
        raise ConfigurationError(f"Unable to read payload {path}: {e}", path) from e
    substitutions = {key: value for key, value in values.items() if value is not None}
    text = string.Template(text).safe_substitute(substitutions)
    try:
        return json.loads(text)
    except ValueError as e:
        raise ConfigurationError(f"Payload {path} is not valid JSON: {e}", path) from e


class Test(unittest.TestCase):
    def test_default_payloads_cover_every_type(self):
        for object_type in ObjectType:
            klass = class_payload(object_type, "issuer.class")
            obj = object_payload(object_type, "issuer.class", "issuer.user-class")
            self.assertEqual(klass["id"], "issuer.class")
            self.assertEqual(obj["id"], "issuer.user-class")
            self.assertEqual(obj["classId"], "issuer.class")
            # Payloads must serialize as JSON
            json.dumps(klass)
            json.dumps(obj)

    def test_default_payloads_are_fresh(self):
        first = object_payload(ObjectType.GENERIC, "i.c", "i.a-c")
        first["logo"]["sourceUri"]["uri"] = "changed"
        second = object_payload(ObjectType.GENERIC, "i.c", "i.b-c")
        self.assertEqual(second["logo"]["sourceUri"]["uri"], LOGO_URI)

    def test_issuer_payload(self):
        self.assertEqual(
            issuer_payload("name", "email-address"),
            {"name": "name", "contactInfo": {"email": "email-address"}},
        )

    def test_permissions_payload_round_trip(self):
        permissions = [
            Permission("reader@example.com", Role.READER),
            {"emailAddress": "owner@example.com", "role": "OWNER"},
        ]
        payload = permissions_payload("3388000000022141111", permissions)
        parsed = json.loads(json.dumps(payload))
        self.assertEqual(parsed["issuerId"], "3388000000022141111")
        self.assertEqual(
            parsed["permissions"],
            [
                {"emailAddress": "reader@example.com", "role": "READER"},
                {"emailAddress": "owner@example.com", "role": "OWNER"},
            ],
        )

    def test_role_from_str(self):
        self.assertEqual(Role.from_str("writer"), Role.WRITER)
        with self.assertRaises(ConfigurationError):
            Role.from_str("ADMIN")

    def test_permission_from_str(self):
        self.assertEqual(
            Permission.from_str("a=b@example.com=owner"),
            Permission("a=b@example.com", Role.OWNER),
        )
        with self.assertRaises(ConfigurationError):
            Permission.from_str("user@example.com")

    def test_load_payload(self):
        with tempfile.TemporaryDirectory() as tempdir:
            path = os.path.join(tempdir, "object.json")
            with open(path, "w") as file:
                file.write(
                    '{"id": "$object_id", "classId": "$class_id", "note": "$$5 off $other"}'
                )
            payload = load_payload(path, object_id="i.u-c", class_id="i.c", user_id=None)
        self.assertEqual(
            payload, {"id": "i.u-c", "classId": "i.c", "note": "$5 off $other"}
        )

    def test_load_payload_invalid(self):
        with tempfile.TemporaryDirectory() as tempdir:
            path = os.path.join(tempdir, "object.json")
            with open(path, "w") as file:
                file.write("{")
            with self.assertRaises(ConfigurationError):
                load_payload(path)
            with self.assertRaises(ConfigurationError):
                load_payload(os.path.join(tempdir, "missing.json"))
