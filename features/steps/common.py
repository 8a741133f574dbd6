import typing

from behave import given, then, use_step_matcher

from wallet_sdk.object_type import ObjectType

# Use regular expressions
use_step_matcher("re")


@given(r'issuer "(?P<issuer_id>[^"]*)" and class "(?P<class_id>[^"]*)"')
def given_issuer_and_class(context: typing.Any, issuer_id: str, class_id: str):
    context.issuer_id = issuer_id
    context.class_id = class_id


@given(r'object type "(?P<object_type>[^"]*)"')
def given_object_type(context: typing.Any, object_type: str):
    context.object_type = ObjectType.from_str(object_type)


@then(r'the result should be string "(?P<expected_value>[^"]*)"')
def then_result(context: typing.Any, expected_value: str):
    assert context.output == expected_value, (
        "Expected " + expected_value + " but got " + str(context.output)
    )
