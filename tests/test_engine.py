"""End-to-end tests for the validation pipeline."""

import copy
from concurrent.futures import ThreadPoolExecutor

from rtschema.model.types import Kind, Origin
from rtschema.registry.builtins import default_registry
from rtschema.schema.engine import SchemaEngine, validate_schema
from rtschema.schema.failures import Rule

RECIPE_STATUS = "https://radapp.io/schemas/v1#RecipeStatus"
OUTPUT_RESOURCE = "https://radapp.io/schemas/v1#OutputResource"


def _container_schema() -> dict:
    """A realistic accepted schema touching every kind."""
    return {
        "type": "object",
        "description": "A containerized workload.",
        "properties": {
            "image": {"type": "string", "description": "Container image.", "minLength": 1},
            "replicas": {"type": "integer", "minimum": 0, "default": 1},
            "cpu": {"type": "number", "exclusiveMinimum": 0},
            "public": {"type": "boolean"},
            "ports": {"type": "array", "items": {"type": "integer", "minimum": 1}},
            "env": {"type": "object", "additionalProperties": {"type": "string"}},
            "resources": {"type": "array", "items": {"$ref": OUTPUT_RESOURCE}},
            "recipe": {"$ref": RECIPE_STATUS, "description": "Recipe status.", "readOnly": True},
            "probe": {
                "type": "object",
                "properties": {
                    "path": {"type": "string"},
                    "intervalSeconds": {"type": "integer", "maximum": 300},
                },
                "required": ["path"],
            },
        },
        "required": ["image"],
    }


SAMPLE_SCHEMAS = [
    _container_schema(),
    {"type": "object"},
    {"type": "object", "properties": {"a": {"type": "object", "properties": {"b": {"type": "string"}}}}},
    {"type": "object", "properties": {"m": {"type": "object", "additionalProperties": {"type": "array", "items": {"type": "string"}}}}},
]


# --- Scenarios ---


def test_enum_property_is_accepted():
    schema = {
        "type": "object",
        "properties": {"size": {"type": "string", "enum": ["S", "M", "L", "XL"]}},
        "required": ["size"],
    }
    result = validate_schema(schema, default_registry())
    assert result.passed, [str(f) for f in result.failures]

    root = result.descriptor
    assert root.kind == Kind.OBJECT
    assert root.property_names == ["size"]
    size = root.properties["size"]
    assert size.required is True
    assert size.type.kind == Kind.STRING
    assert size.type.validation["enum"] == ["S", "M", "L", "XL"]


def test_properties_and_additional_properties_is_ambiguous():
    schema = {
        "type": "object",
        "properties": {"a": {"type": "string"}},
        "additionalProperties": {"type": "string"},
    }
    result = validate_schema(schema, default_registry())
    assert not result.passed
    assert result.descriptor is None
    assert [(f.rule, f.path) for f in result.failures] == [(Rule.AMBIGUOUS_OBJECT_SHAPE, ())]


def test_array_without_items_is_rejected():
    result = validate_schema({"type": "object", "properties": {"tags": {"type": "array"}}}, default_registry())
    assert result.failures_for(Rule.ARRAY_ITEM_TYPE_REQUIRED)


def test_one_of_at_depth_is_rejected():
    schema = {
        "type": "object",
        "properties": {
            "spec": {
                "type": "object",
                "properties": {"source": {"oneOf": [{"type": "string"}, {"type": "integer"}]}},
            }
        },
    }
    result = validate_schema(schema, default_registry())
    failures = result.failures_for(Rule.POLYMORPHISM_NOT_ALLOWED)
    assert [f.path for f in failures] == [("properties", "spec", "properties", "source")]
    assert failures[0].dotted_path == "properties.spec.properties.source"


def test_registry_reference_is_accepted_and_shared():
    registry = default_registry()
    schema = {"type": "object", "properties": {"status": {"$ref": RECIPE_STATUS}}}
    result = validate_schema(schema, registry)
    assert result.passed

    status = result.descriptor.properties["status"].type
    assert status.origin == Origin.referenced(RECIPE_STATUS)
    assert str(status.origin) == "referenced(RecipeStatus)"
    assert status == registry.resolve(RECIPE_STATUS)
    assert status is registry.resolve(RECIPE_STATUS)


def test_map_shaped_object_is_accepted():
    schema = {"type": "object", "properties": {"labels": {"type": "object", "additionalProperties": {"type": "string"}}}}
    result = validate_schema(schema, default_registry())
    assert result.passed
    labels = result.descriptor.properties["labels"].type
    assert labels.kind == Kind.MAP
    assert labels.element_type.kind == Kind.STRING
    assert labels.properties == {}


# --- Pipeline behavior ---


def test_malformed_input_is_fatal():
    result = validate_schema("not a schema", default_registry())
    assert result.fatal
    assert result.descriptor is None
    assert [f.rule for f in result.failures] == [Rule.MALFORMED_INPUT]


def test_validator_and_resolver_failures_are_batched():
    schema = {
        "type": "object",
        "properties": {
            "tags": {"type": "array"},
            "status": {"$ref": "https://radapp.io/schemas/v1#Missing"},
            "external": {"$ref": "https://example.com/schemas#Thing"},
        },
    }
    result = validate_schema(schema, default_registry())
    assert result.rules == {
        Rule.ARRAY_ITEM_TYPE_REQUIRED,
        Rule.UNKNOWN_REFERENCE,
        Rule.DISALLOWED_REFERENCE,
    }


def test_required_true_is_reported_with_the_rest():
    schema = {
        "type": "object",
        "properties": {
            "tags": {"type": "array"},
            "poly": {"oneOf": [{"type": "string"}, {"type": "integer"}]},
            "name": {"type": "string", "required": True},
        },
    }
    result = validate_schema(schema, default_registry())
    assert not result.fatal
    assert [(f.rule, f.path) for f in result.failures] == [
        (Rule.ARRAY_ITEM_TYPE_REQUIRED, ("properties", "tags")),
        (Rule.POLYMORPHISM_NOT_ALLOWED, ("properties", "poly")),
        (Rule.TYPE_REQUIRED, ("properties", "poly")),
        (Rule.INCOMPATIBLE_VALIDATION_ATTRIBUTE, ("properties", "name")),
    ]


def test_non_exclusive_ref_is_not_resolved():
    schema = {"type": "object", "properties": {"a": {"$ref": "https://radapp.io/schemas/v1#Missing", "type": "string"}}}
    result = validate_schema(schema, default_registry())
    assert result.rules == {Rule.REF_MUST_BE_EXCLUSIVE}


def test_cycle_through_document_id():
    registry = default_registry()
    schema = {"type": "object", "properties": {"self": {"$ref": RECIPE_STATUS}}}
    result = validate_schema(schema, registry, document_id=RECIPE_STATUS)
    assert result.rules == {Rule.CYCLIC_REFERENCE}


def test_declaration_order_is_preserved():
    result = validate_schema(_container_schema(), default_registry())
    assert result.descriptor.property_names == list(_container_schema()["properties"])


def test_ref_property_metadata_stays_on_the_property():
    registry = default_registry()
    result = validate_schema(_container_schema(), registry)
    recipe = result.descriptor.properties["recipe"]
    assert recipe.description == "Recipe status."
    assert recipe.read_only is True
    assert recipe.type is registry.resolve(RECIPE_STATUS)


def test_validation_values_are_copied():
    schema = {"type": "object", "properties": {"size": {"type": "string", "enum": ["S", "M"]}}}
    result = validate_schema(schema, default_registry())
    schema["properties"]["size"]["enum"].append("XL")
    assert result.descriptor.properties["size"].type.validation["enum"] == ["S", "M"]


# --- Properties over accepted schemas ---


def test_accepted_trees_hold_the_invariants():
    registry = default_registry()
    for schema in SAMPLE_SCHEMAS:
        result = validate_schema(schema, registry)
        assert result.passed, [str(f) for f in result.failures]
        assert result.descriptor.kind == Kind.OBJECT

        for descriptor in result.descriptor.walk():
            assert isinstance(descriptor.kind, Kind)
            if descriptor.kind == Kind.OBJECT:
                assert descriptor.element_type is None
            if descriptor.kind == Kind.MAP:
                assert descriptor.properties == {}
                assert descriptor.element_type is not None
            if descriptor.kind == Kind.ARRAY:
                assert descriptor.element_type is not None
            if descriptor.kind.is_scalar:
                assert descriptor.properties == {} and descriptor.element_type is None


def test_revalidation_is_idempotent():
    registry = default_registry()
    for schema in SAMPLE_SCHEMAS:
        first = validate_schema(schema, registry)
        second = validate_schema(copy.deepcopy(schema), registry)
        assert second.failures == []
        assert second.descriptor == first.descriptor


def test_canonical_schema_round_trips():
    registry = default_registry()
    for schema in SAMPLE_SCHEMAS:
        first = validate_schema(schema, registry)
        again = validate_schema(first.descriptor.to_schema(), registry)
        assert again.passed, [str(f) for f in again.failures]
        assert again.descriptor == first.descriptor


def test_concurrent_passes_agree():
    engine = SchemaEngine(default_registry())
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: engine.validate(_container_schema()), range(16)))
    assert all(r.passed for r in results)
    assert all(r.descriptor == results[0].descriptor for r in results)


def test_result_summary():
    result = SchemaEngine(default_registry()).validate({"type": "string"}, document_id="Test/things@v1")
    assert result.summary() == "[FAIL] Test/things@v1 1 failure(s)"
