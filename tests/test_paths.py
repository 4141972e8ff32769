"""Tests for PathBuilder: endpoints in, operations and definition pools out."""
import pytest

from swagger_forge.config import BuilderSettings, PathReplacement
from swagger_forge.models.endpoint import Endpoint
from swagger_forge.models.nodes import alternatives, array, file, number, obj, string
from swagger_forge.schema_gen.paths import FORM_URLENCODED, HIDDEN_MODEL, MULTIPART_FORM, PathBuilder


def build(endpoints, diagnostics=None, **settings):
    return PathBuilder(BuilderSettings(**settings), diagnostics).build(endpoints)


def test_simple_get_operation(diagnostics):
    endpoint = Endpoint(
        path="/users/{id}",
        method="get",
        description="Get a user",
        validate={"params": obj({"id": string(required=True)})},
    )
    out = build([endpoint], diagnostics)
    assert out["paths"] == {
        "/users/{id}": {
            "get": {
                "summary": "Get a user",
                "operationId": "getUsersId",
                "tags": ["users"],
                "parameters": [{"type": "string", "name": "id", "in": "path", "required": True}],
                "responses": {"default": {"schema": {"type": "string"}, "description": "Successful"}},
            }
        }
    }
    assert diagnostics.entries == []


def test_wildcard_method_expands():
    out = build([Endpoint(path="/ping", method="*")])
    assert sorted(out["paths"]["/ping"]) == ["delete", "get", "patch", "post", "put"]


def test_method_list():
    out = build([Endpoint(path="/ping", method=["get", "POST"])])
    assert sorted(out["paths"]["/ping"]) == ["get", "post"]


def test_json_payload_is_one_body_parameter():
    endpoint = Endpoint(path="/sum", method="post", validate={"payload": obj({"a": number(required=True)})})
    out = build([endpoint])
    operation = out["paths"]["/sum"]["post"]
    assert operation["parameters"] == [{"name": "body", "in": "body", "schema": {"$ref": "#/definitions/Model 1"}}]
    assert out["definitions"]["Model 1"] == {
        "type": "object",
        "properties": {"a": {"type": "number"}},
        "required": ["a"],
    }
    assert "consumes" not in operation


def test_form_payload():
    endpoint = Endpoint(
        path="/login",
        method="post",
        validate={"payload": obj({"user": string(required=True), "tags": array(string())})},
        options={"payloadType": "form"},
    )
    operation = build([endpoint])["paths"]["/login"]["post"]
    assert operation["consumes"] == [FORM_URLENCODED]
    assert operation["parameters"] == [
        {"type": "string", "name": "user", "in": "formData", "required": True},
        {"type": "array", "items": {"type": "string"}, "collectionFormat": "multi", "name": "tags", "in": "formData"},
    ]


def test_form_payload_setting_applies_to_all_routes():
    endpoint = Endpoint(path="/login", method="post", validate={"payload": obj({"user": string()})})
    operation = build([endpoint], payload_type="form")["paths"]["/login"]["post"]
    assert operation["parameters"][0]["in"] == "formData"


def test_file_upload_sets_multipart():
    endpoint = Endpoint(
        path="/upload",
        method="post",
        validate={"payload": obj({"file": file(required=True)})},
        options={"payloadType": "form"},
    )
    operation = build([endpoint])["paths"]["/upload"]["post"]
    assert operation["consumes"] == [MULTIPART_FORM]
    assert operation["parameters"] == [{
        "type": "file",
        "x-meta": {"swaggerType": "file"},
        "name": "file",
        "in": "formData",
        "required": True,
    }]


def test_explicit_consumes_and_produces_win():
    endpoint = Endpoint(
        path="/upload",
        method="post",
        validate={"payload": obj({"file": file()})},
        options={"payloadType": "form", "consumes": ["application/octet-stream"], "produces": ["text/plain"]},
    )
    operation = build([endpoint])["paths"]["/upload"]["post"]
    assert operation["consumes"] == ["application/octet-stream"]
    assert operation["produces"] == ["text/plain"]


def test_document_wide_consumes():
    endpoint = Endpoint(path="/x", method="post", validate={"payload": obj({"a": string()})},
                        options={"payloadType": "form"})
    operation = build([endpoint], consumes=["application/json"])["paths"]["/x"]["post"]
    assert operation["consumes"] == ["application/json"]


def test_content_type_header_removes_consumes():
    endpoint = Endpoint(
        path="/x",
        method="post",
        validate={
            "headers": obj({"Content-Type": string()}),
            "payload": obj({"a": string()}),
        },
        options={"payloadType": "form"},
    )
    operation = build([endpoint])["paths"]["/x"]["post"]
    assert "consumes" not in operation
    assert operation["parameters"][0] == {"type": "string", "name": "Content-Type", "in": "header"}


def test_accept_header_becomes_produces():
    endpoint = Endpoint(
        path="/report",
        validate={"headers": obj({
            "accept": string(valid=["application/json", "application/pdf"], default="application/pdf"),
            "x-token": string(),
        })},
    )
    operation = build([endpoint])["paths"]["/report"]["get"]
    assert operation["produces"] == ["application/pdf", "application/json"]
    assert [param["name"] for param in operation["parameters"]] == ["x-token"]


def test_accept_header_kept_when_disabled():
    endpoint = Endpoint(path="/report", validate={"headers": obj({"accept": string(valid=["application/json"])})})
    operation = build([endpoint], accept_to_produce=False)["paths"]["/report"]["get"]
    assert "produces" not in operation
    assert operation["parameters"][0]["name"] == "accept"


def test_parameter_order_is_header_path_query_body():
    endpoint = Endpoint(
        path="/items/{id}",
        method="put",
        validate={
            "headers": obj({"x-token": string()}),
            "params": obj({"id": number(required=True)}),
            "query": obj({"dry": string()}),
            "payload": obj({"name": string()}),
        },
    )
    operation = build([endpoint])["paths"]["/items/{id}"]["put"]
    assert [param["in"] for param in operation["parameters"]] == ["header", "path", "query", "body"]


def test_optional_path_parameter(diagnostics):
    endpoint = Endpoint(path="/files/{name?}", validate={"params": obj({"name": string()})})
    out = build([endpoint], diagnostics)
    assert "/files/{name}" in out["paths"]
    (param,) = out["paths"]["/files/{name}"]["get"]["parameters"]
    assert "required" not in param
    assert len(diagnostics.with_tag("warning")) == 1


def test_path_parameter_required_from_template(diagnostics):
    endpoint = Endpoint(path="/files/{name}", validate={"params": obj({"name": string()})})
    (param,) = build([endpoint], diagnostics)["paths"]["/files/{name}"]["get"]["parameters"]
    assert param["required"] is True
    assert diagnostics.entries == []


def test_custom_payload_validator_becomes_hidden_model(diagnostics):
    endpoint = Endpoint(path="/x", method="post", validate={"payload": lambda value: value})
    out = build([endpoint], diagnostics)
    operation = out["paths"]["/x"]["post"]
    assert operation["parameters"] == [{"name": "body", "in": "body", "schema": {"$ref": f"#/definitions/{HIDDEN_MODEL}"}}]
    assert out["definitions"][HIDDEN_MODEL] == {"type": "object"}
    assert len(diagnostics.with_tag("warning")) == 1


def test_custom_query_validator_becomes_hidden_field(diagnostics):
    endpoint = Endpoint(path="/x", validate={"query": lambda value: value})
    operation = build([endpoint], diagnostics)["paths"]["/x"]["get"]
    assert operation["parameters"] == [{"type": "string", "name": HIDDEN_MODEL, "in": "query"}]


def test_custom_params_validator_is_removed(diagnostics):
    endpoint = Endpoint(path="/x/{id}", validate={"params": lambda value: value})
    operation = build([endpoint], diagnostics)["paths"]["/x/{id}"]["get"]
    assert "parameters" not in operation
    assert len(diagnostics.with_tag("error")) == 1


def test_non_object_location_validator_is_reported(diagnostics):
    endpoint = Endpoint(path="/x", validate={"query": string()})
    operation = build([endpoint], diagnostics)["paths"]["/x"]["get"]
    assert "parameters" not in operation
    (message,) = diagnostics.with_tag("error")
    assert "query" in message


def test_bool_validator_is_ignored(diagnostics):
    endpoint = Endpoint(path="/x", validate={"query": True})
    assert "parameters" not in build([endpoint], diagnostics)["paths"]["/x"]["get"]
    assert diagnostics.entries == []


def test_mapping_validator_with_types():
    endpoint = Endpoint(path="/search", validate={"query": {"limit": int, "q": str}})
    operation = build([endpoint])["paths"]["/search"]["get"]
    assert operation["parameters"] == [
        {"type": "integer", "name": "limit", "in": "query"},
        {"type": "string", "name": "q", "in": "query"},
    ]


def test_options_validate_overrides_route_validation():
    endpoint = Endpoint(
        path="/x",
        validate={"query": obj({"a": string()})},
        options={"validate": {"query": obj({"b": string()})}},
    )
    operation = build([endpoint])["paths"]["/x"]["get"]
    assert [param["name"] for param in operation["parameters"]] == ["b"]


def test_base_path_and_grouping():
    endpoint = Endpoint(path="/api/users/{id}", validate={"params": obj({"id": string(required=True)})})
    out = build([endpoint], base_path="/api", path_prefix_size=2)
    operation = out["paths"]["/users/{id}"]["get"]
    assert operation["tags"] == ["users"]
    assert operation["operationId"] == "getUsersId"


def test_explicit_groups():
    out = build([Endpoint(path="/users", groups=["people"])])
    assert out["paths"]["/users"]["get"]["tags"] == ["people"]


def test_tags_grouping():
    endpoint = Endpoint(path="/users", tags=["api", "users", "admin"])
    operation = build([endpoint], grouping="tags")["paths"]["/users"]["get"]
    assert operation["tags"] == ["users", "admin"]


def test_path_replacements():
    replacement = PathReplacement(replace_in="endpoints", pattern=r"/v\d+", replacement="")
    out = build([Endpoint(path="/v1/users/v2")], path_replacements=[replacement])
    assert list(out["paths"]) == ["/users"]


def test_group_replacements_only_affect_tags():
    replacement = PathReplacement(replace_in="groups", pattern=r"^/v\d+", replacement="")
    out = build([Endpoint(path="/v1/users")], path_replacements=[replacement])
    assert out["paths"]["/v1/users"]["get"]["tags"] == ["users"]


def test_operation_options():
    endpoint = Endpoint(
        path="/users",
        notes=["First line", "Second line"],
        options={
            "id": "listUsers",
            "order": 2,
            "deprecated": True,
            "security": [{"jwt": []}],
            "x-code-samples": [{"lang": "shell", "source": "curl /users"}],
        },
    )
    operation = build([endpoint])["paths"]["/users"]["get"]
    assert operation["operationId"] == "listUsers"
    assert operation["description"] == "First line<br/><br/>Second line"
    assert operation["x-order"] == 2
    assert operation["deprecated"] is True
    assert operation["security"] == [{"jwt": []}]
    assert operation["x-code-samples"] == [{"lang": "shell", "source": "curl /users"}]


def test_response_schema_and_status():
    endpoint = Endpoint(
        path="/users",
        response_schema=array(obj({"id": string()}, label="User"), label="Users"),
        response_status={404: obj({"message": string()}, label="NotFound", description="No users")},
    )
    out = build([endpoint])
    responses = out["paths"]["/users"]["get"]["responses"]
    assert responses["200"] == {"schema": {"$ref": "#/definitions/Users"}, "description": "Successful"}
    assert responses["404"] == {"schema": {"$ref": "#/definitions/NotFound"}, "description": "No users"}
    assert set(out["definitions"]) == {"User", "Users", "NotFound"}


def test_user_responses_from_options():
    endpoint = Endpoint(
        path="/users",
        options={"responses": {201: {"description": "Created", "schema": obj({"id": string()}, label="Created")}}},
    )
    responses = build([endpoint])["paths"]["/users"]["get"]["responses"]
    assert responses == {"201": {"description": "Created", "schema": {"$ref": "#/definitions/Created"}}}


def test_shared_node_across_routes_is_defined_once():
    shared = obj({"id": string(required=True)}, label="Item")
    endpoints = [
        Endpoint(path="/a", method="post", validate={"payload": shared}),
        Endpoint(path="/b", method="post", validate={"payload": shared}),
    ]
    out = build(endpoints)
    assert list(out["definitions"]) == ["Item"]
    assert out["paths"]["/a"]["post"]["parameters"] == out["paths"]["/b"]["post"]["parameters"]


def test_distinct_schemas_with_same_label_are_renamed():
    endpoints = [
        Endpoint(path="/a", method="post", validate={"payload": obj({"x": string()}, label="Body")}),
        Endpoint(path="/b", method="post", validate={"payload": obj({"y": string()}, label="Body")}),
    ]
    out = build(endpoints, definition_prefix="useLabel")
    assert set(out["definitions"]) == {"Body", "Body 1"}


def test_union_payload_fills_both_pools():
    payload = obj({
        "pet": alternatives(obj({"name": string()}, label="Dog"), obj({"wings": number()}, label="Bird"), label="Alt"),
    }, label="Payload")
    endpoint = Endpoint(path="/pets", method="post", validate={"payload": payload})
    out = build([endpoint])
    assert out["definitions"]["Payload"]["properties"]["pet"] == {
        "$ref": "#/definitions/Alt",
        "x-alternatives": [{"$ref": "#/x-alt-definitions/Dog"}, {"$ref": "#/x-alt-definitions/Bird"}],
    }
    assert set(out["x-alt-definitions"]) == {"Dog", "Bird"}


@pytest.mark.parametrize("method, path, expected", [
    ("GET", "/users", "getUsers"),
    ("post", "/users/{id}/posts", "postUsersIdPosts"),
    ("DELETE", "/", "delete"),
])
def test_operation_ids(method, path, expected):
    out = build([Endpoint(path=path, method=method)])
    ((operation,),) = [list(ops.values()) for ops in out["paths"].values()]
    assert operation["operationId"] == expected


@pytest.mark.parametrize("location", ["query", "headers"])
def test_location_with_only_forbidden_fields_has_no_parameters(location):
    endpoint = Endpoint(path="/q", validate={location: obj({"x": string(forbidden=True)})})
    assert "parameters" not in build([endpoint])["paths"]["/q"]["get"]


def test_base_path_only_strips_whole_segments():
    out = build([Endpoint(path="/apiary/hives"), Endpoint(path="/api/hives")], base_path="/api")
    assert set(out["paths"]) == {"/apiary/hives", "/hives"}
