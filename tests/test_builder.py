"""Tests for DocumentBuilder and dereferencing."""
import pytest

from swagger_forge import BuilderSettings, DocumentBuilder, build_document
from swagger_forge.exceptions import DereferenceError
from swagger_forge.models.endpoint import Endpoint
from swagger_forge.models.nodes import alternatives, number, obj, string
from swagger_forge.schema_gen.builder import dereference, resolve_pointer


@pytest.fixture
def calculator() -> Endpoint:
    return Endpoint(
        path="/sum",
        method="put",
        description="Add two numbers",
        tags=["api"],
        validate={"payload": obj({
            "a": number(required=True, description="the first number"),
            "b": number(required=True, description="the second number"),
            "operator": string(required=True, default="+", description="the operator i.e. + - / or *"),
            "equals": number(required=True, description="the result of the sum"),
        })},
    )


def test_document_shell(calculator):
    document = build_document([calculator])
    assert document["swagger"] == "2.0"
    assert document["basePath"] == "/"
    assert "x-alt-definitions" not in document
    assert "consumes" not in document


def test_calculator_definition(calculator):
    document = DocumentBuilder().build([calculator])
    model = document["definitions"]["Model 1"]
    assert list(document["definitions"]) == ["Model 1"]
    assert sorted(model["required"]) == ["a", "b", "equals", "operator"]
    assert model["properties"]["operator"]["default"] == "+"
    assert document["paths"]["/sum"]["put"]["parameters"] == [
        {"name": "body", "in": "body", "schema": {"$ref": "#/definitions/Model 1"}},
    ]


def test_builds_do_not_share_pools(calculator):
    builder = DocumentBuilder()
    other = Endpoint(path="/other", method="post", validate={"payload": obj({"x": string()})})
    first = builder.build([other, calculator])
    second = builder.build([calculator])
    assert set(first["definitions"]) == {"Model 1", "Model 2"}
    assert list(second["definitions"]) == ["Model 1"]
    assert second["definitions"]["Model 1"] == first["definitions"]["Model 2"]


def test_document_content_types():
    settings = BuilderSettings(consumes=["application/json"], produces=["application/json", "text/plain"])
    document = DocumentBuilder(settings).build([Endpoint(path="/x")])
    assert document["consumes"] == ["application/json"]
    assert document["produces"] == ["application/json", "text/plain"]


def test_alternate_definitions_are_emitted():
    payload = alternatives(obj({"a": string()}, label="A"), obj({"b": number()}, label="B"), label="Either")
    document = build_document([Endpoint(path="/x", method="post", validate={"payload": payload})])
    assert set(document["x-alt-definitions"]) == {"A", "B"}


def test_diagnostics_callback_receives_messages(diagnostics):
    DocumentBuilder(log=diagnostics).build([Endpoint(path="/x", validate={"query": string()})])
    assert diagnostics.with_tag("error")


def test_dereferenced_build(calculator):
    document = DocumentBuilder(BuilderSettings(de_reference=True)).build([calculator])
    assert "definitions" not in document
    (param,) = document["paths"]["/sum"]["put"]["parameters"]
    assert param["schema"]["type"] == "object"
    assert param["schema"]["properties"]["operator"]["default"] == "+"


def test_dereference_keeps_sibling_keys():
    document = {
        "definitions": {"A": {"type": "string"}},
        "x-alt-definitions": {"B": {"type": "number"}},
        "paths": {"/x": {"get": {"schema": {"$ref": "#/definitions/A", "x-alternatives": [
            {"$ref": "#/x-alt-definitions/B"},
        ]}}}},
    }
    out = dereference(document)
    assert out == {"paths": {"/x": {"get": {"schema": {
        "type": "string",
        "x-alternatives": [{"type": "number"}],
    }}}}}
    # the input is left alone
    assert document["paths"]["/x"]["get"]["schema"]["$ref"] == "#/definitions/A"


def test_dereference_nested_pointers():
    document = {
        "definitions": {
            "Outer": {"type": "object", "properties": {"inner": {"$ref": "#/definitions/Inner"}}},
            "Inner": {"type": "number"},
        },
        "paths": {"/x": {"$ref": "#/definitions/Outer"}},
    }
    assert dereference(document)["paths"]["/x"] == {"type": "object", "properties": {"inner": {"type": "number"}}}


def test_dereference_detects_cycles():
    document = {
        "definitions": {"Node": {"type": "object", "properties": {"next": {"$ref": "#/definitions/Node"}}}},
        "paths": {"/x": {"$ref": "#/definitions/Node"}},
    }
    with pytest.raises(DereferenceError) as info:
        dereference(document)
    assert info.value.pointer == "#/definitions/Node"


def test_dereference_unresolvable_pointer():
    with pytest.raises(DereferenceError) as info:
        dereference({"paths": {"/x": {"$ref": "#/definitions/Missing"}}})
    assert info.value.pointer == "#/definitions/Missing"


def test_dereference_rejects_non_documents():
    with pytest.raises(DereferenceError):
        dereference(["not", "a", "document"])


def test_resolve_pointer_escapes():
    document = {"paths": {"/a/b": {"get": {"x~y": 1}}}, "list": [10, 20]}
    assert resolve_pointer(document, "#/paths/~1a~1b/get/x~0y") == 1
    assert resolve_pointer(document, "#/list/1") == 20
    with pytest.raises(KeyError):
        resolve_pointer(document, "http://example.com/schema")
