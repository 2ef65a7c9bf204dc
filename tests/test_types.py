import pytest

from oapi_typegen.config import CompatibilityOptions, Configuration
from oapi_typegen.errors import ExtensionError
from oapi_typegen.types import (
    Property,
    RepresentationMode,
    TypeDescriptor,
    gen_fields_from_properties,
    representation_mode,
)


def _prop(**kwargs):
    kwargs.setdefault("json_name", "id")
    kwargs.setdefault("schema", TypeDescriptor(go_type="string"))
    return Property(**kwargs)


def test_required_read_only_fields_are_pointers_unless_disabled():
    prop = _prop(required=True, read_only=True)
    config = Configuration()
    assert representation_mode(prop, config) is RepresentationMode.OPTIONAL_POINTER
    assert gen_fields_from_properties([prop], config) == ['    Id *string `json:"id,omitempty"`']

    config = Configuration(compatibility=CompatibilityOptions(disable_required_readonly_as_pointer=True))
    assert representation_mode(prop, config) is RepresentationMode.VALUE
    assert gen_fields_from_properties([prop], config) == ['    Id string `json:"id"`']


def test_field_extensions():
    config = Configuration()
    props = [
        _prop(json_name="a", extensions={"x-go-type-skip-optional-pointer": True}),
        _prop(json_name="b", extensions={"x-go-json-ignore": True}),
        _prop(json_name="c", required=True, extensions={"x-oapi-codegen-extra-tags": {"validate": "required"}}),
        _prop(json_name="d", extensions={"x-go-name": "Delta", "x-omitempty": False}),
    ]
    assert gen_fields_from_properties(props, config) == [
        '    A string `json:"a,omitempty"`',
        '    B *string `json:"-"`',
        '    C string `json:"c" validate:"required"`',
        '    Delta *string `json:"d"`',
    ]


def test_descriptions_and_deprecation_comments():
    config = Configuration()
    props = [
        _prop(json_name="a", description="first field"),
        _prop(json_name="b", deprecated=True, extensions={"x-deprecated-reason": "use a"}),
    ]
    assert gen_fields_from_properties(props, config) == [
        '// A first field\n    A *string `json:"a,omitempty"`',
        '// Deprecated: use a\n    B *string `json:"b,omitempty"`',
    ]


def test_extension_errors_carry_the_field_path():
    config = Configuration()
    prop = _prop(json_name="id", extensions={"x-omitempty": "yes"}, path=("Pet", "id"))
    with pytest.raises(ExtensionError) as excinfo:
        gen_fields_from_properties([prop], config)
    assert excinfo.value.path == ("Pet", "id")

    prop = _prop(json_name="id", extensions={"x-go-name": 7})
    with pytest.raises(ExtensionError, match="^id: invalid value for 'x-go-name'"):
        gen_fields_from_properties([prop], config)
