import re
import typing

from behave import then, use_step_matcher, when

from wallet_sdk.identifiers import object_id

# Use regular expressions
use_step_matcher("re")


@when(r'I derive the object id for user "(?P<user_id>[^"]*)"')
def when_derive_object_id(context: typing.Any, user_id: str):
    context.output = object_id(context.issuer_id, user_id, context.class_id)


@then("the result should only contain valid object id characters")
def then_valid_object_id(context: typing.Any):
    assert re.fullmatch(r"[A-Za-z0-9._-]*", context.output), context.output


@then(r'the class resource should be "(?P<expected>[^"]*)"')
def then_class_resource(context: typing.Any, expected: str):
    assert context.object_type.class_resource == expected


@then(r'the object resource should be "(?P<expected>[^"]*)"')
def then_object_resource(context: typing.Any, expected: str):
    assert context.object_type.object_resource == expected


@then(r'the save token key should be "(?P<expected>[^"]*)"')
def then_payload_key(context: typing.Any, expected: str):
    assert context.object_type.payload_key == expected
