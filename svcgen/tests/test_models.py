"""Tests for DeclarationBuilder."""

import copy
import logging

import pytest

from svcgen.codegen.models import DeclarationBuilder, iter_operations
from svcgen.config import DocumentConfig
from svcgen.exceptions import CyclicReferenceError, SchemaResolutionError

from .fixtures import PETSTORE_SPEC, SWAGGER_PARAMS_SPEC


def build(document: dict, **options) -> DeclarationBuilder:
    return DeclarationBuilder(document, DocumentConfig(source='openapi.json', **options))


def by_name(declarations):
    return {d.type_name: d for d in declarations}


def ref(name: str) -> dict:
    return {'$ref': f'#/components/schemas/{name}'}


class TestIterOperations:
    """Tests for iter_operations."""

    def test_method_order(self):
        """Test that operations are walked in path order, then get/put/post/delete/patch."""
        document = {
            'paths': {
                '/a': {'patch': {}, 'post': {}, 'get': {}},
                '/b': {'delete': {}, 'put': {}, 'head': {}},
            }
        }

        operations = [(op.path, op.method) for op in iter_operations(document)]

        assert operations == [
            ('/a', 'get'),
            ('/a', 'post'),
            ('/a', 'patch'),
            ('/b', 'put'),
            ('/b', 'delete'),
        ]


class TestDeclarationBuilder:
    """Tests for the declaration list of a document."""

    def test_declarations_are_sorted(self):
        """Test that declarations are sorted by type name."""
        names = [d.type_name for d in build(PETSTORE_SPEC).get_interface_tp()]

        assert names == [
            'NewPet',
            'Pet',
            'Pets',
            'Status',
            'deletePetParams',
            'listPetsParams',
            'showPetByIdParams',
        ]

    def test_object_properties(self):
        """Test that object properties carry types and schema-level required flags."""
        pet = by_name(build(PETSTORE_SPEC).get_interface_tp())['Pet']

        assert pet.kind == 'object'
        assert [(p.name, p.type, p.required) for p in pet.properties] == [
            ('id', 'number', True),
            ('name', 'string', True),
            ('tag', 'string', False),
            ('status', 'API.Status', False),
        ]
        assert pet.properties[1].description == 'The pet name'

    def test_property_level_required_is_ignored(self):
        """Test that only the schema-level required list marks declaration properties."""
        document = {
            'components': {
                'schemas': {
                    'Item': {
                        'type': 'object',
                        'properties': {'code': {'type': 'string', 'required': True}},
                    }
                }
            }
        }

        item = by_name(build(document).get_interface_tp())['Item']

        assert item.properties[0].required is False

    def test_all_of_composition(self):
        """Test that allOf yields a reference parent and the inline properties."""
        new_pet = by_name(build(PETSTORE_SPEC).get_interface_tp())['NewPet']

        assert new_pet.kind == 'object'
        assert new_pet.parents == ('Pet',)
        assert [p.name for p in new_pet.properties] == ['extra']

    def test_array_of_reference(self):
        """Test that arrays of references become RefName[] aliases."""
        pets = by_name(build(PETSTORE_SPEC).get_interface_tp())['Pets']

        assert pets.kind == 'alias'
        assert pets.type == 'Pet[]'

    def test_array_of_inline_items_degrades(self):
        """Test that arrays of non-reference items become any[]."""
        document = {
            'components': {
                'schemas': {'Tags': {'type': 'array', 'items': {'type': 'string'}}}
            }
        }

        assert by_name(build(document).get_interface_tp())['Tags'].type == 'any[]'

    def test_reference_and_primitive_aliases(self):
        """Test that pure references and primitives become type aliases."""
        document = {
            'components': {
                'schemas': {
                    'Id': {'type': 'integer', 'format': 'int64'},
                    'Pet': {'type': 'object', 'properties': {'id': {'type': 'integer'}}},
                    'PetAlias': {'$ref': '#/components/schemas/Pet'},
                    'Anything': {'type': 'object'},
                }
            }
        }

        declarations = by_name(build(document).get_interface_tp())

        assert declarations['Id'].type == 'number'
        assert declarations['PetAlias'].type == 'API.Pet'
        assert declarations['Anything'].type == 'Record<string, any>'

    def test_dangling_reference_alias_raises(self):
        """Test that an alias to a missing component schema is rejected."""
        document = {'components': {'schemas': {'Alias': ref('Missing')}}}

        with pytest.raises(SchemaResolutionError):
            build(document).get_interface_tp()

    def test_cyclic_reference_alias_raises(self):
        """Test that aliases pointing at each other are rejected."""
        document = {'components': {'schemas': {'A': ref('B'), 'B': ref('A')}}}

        with pytest.raises(CyclicReferenceError):
            build(document).get_interface_tp()

    def test_string_literal_enum(self):
        """Test the default literal-union enum style."""
        status = by_name(build(PETSTORE_SPEC).get_interface_tp())['Status']

        assert status.kind == 'alias'
        assert status.type == '"available" | "pending" | "sold"'
        assert status.is_enum is False

    def test_string_literal_enum_is_deduplicated(self):
        """Test that repeated enum values collapse, keeping first-seen order."""
        document = {'components': {'schemas': {'Letter': {'enum': ['A', 'B', 'A']}}}}

        letter = by_name(build(document).get_interface_tp())['Letter']

        assert letter.type == '"A" | "B"'

    def test_string_literal_enum_aliases(self):
        """Test the extra key and value literals of 'Key(label)=value' enums."""
        document = {
            'components': {
                'schemas': {'State': {'enum': ['Active(enabled)=1', 'Closed(done)=x']}}
            }
        }

        state = by_name(build(document).get_interface_tp())['State']

        assert state.type == (
            '"Active(enabled)=1" | "Closed(done)=x" | "Active" | "active" '
            '| "Closed" | "closed" | 1 | x'
        )

    def test_enum_style(self):
        """Test the TypeScript enum style."""
        document = {'components': {'schemas': {'Color': {'enum': ['RED', 'GREEN']}}}}

        color = by_name(build(document, enum_style='enum').get_interface_tp())['Color']

        assert color.kind == 'enum'
        assert color.is_enum is True
        assert color.type == '{RED="RED",GREEN="GREEN"}'

    def test_operation_params_declaration(self):
        """Test the Params declaration built for an operation with parameters."""
        params = by_name(build(PETSTORE_SPEC).get_interface_tp())['listPetsParams']

        assert params.kind == 'object'
        assert params.type == 'Record<string, any>'
        assert [(p.name, p.type, p.required) for p in params.properties] == [
            ('limit', 'number', False),
            ('status', '"available" | "pending" | "sold"', False),
        ]

    def test_path_item_and_swagger_parameters(self):
        """Test that path-item parameters and Swagger 2 parameters are declared."""
        declarations = by_name(build(SWAGGER_PARAMS_SPEC).get_interface_tp())

        params = declarations['getOrdersByOrderIdParams']

        assert [(p.name, p.type, p.required) for p in params.properties] == [
            ('orderId', 'number', True),
            ('expand', 'boolean', False),
            ('X-Tenant', 'string', True),
        ]

    def test_referenced_parameters_are_resolved(self):
        """Test that $ref parameters are resolved before being declared."""
        document = {
            'paths': {
                '/items': {
                    'get': {
                        'operationId': 'listItems',
                        'parameters': [{'$ref': '#/components/parameters/Page'}],
                    }
                }
            },
            'components': {
                'parameters': {
                    'Page': {'name': 'page', 'in': 'query', 'schema': {'type': 'integer'}}
                }
            },
        }

        params = by_name(build(document).get_interface_tp())['listItemsParams']

        assert params.properties[0].name == 'page'
        assert params.properties[0].type == 'number'

    def test_duplicate_names_are_kept_with_warning(self, caplog):
        """Test that colliding type names are both emitted and a warning is logged."""
        document = {
            'components': {
                'schemas': {
                    'user-info': {'type': 'object', 'properties': {'a': {'type': 'string'}}},
                    'user_info': {'type': 'object', 'properties': {'b': {'type': 'string'}}},
                }
            }
        }

        with caplog.at_level(logging.WARNING, logger='svcgen.codegen.models'):
            declarations = build(document).get_interface_tp()

        assert [d.type_name for d in declarations] == ['userInfo', 'userInfo']
        assert [d.properties[0].name for d in declarations] == ['a', 'b']
        assert "'userInfo' is generated more than once" in caplog.text

    def test_deterministic_and_read_only(self):
        """Test that two runs are identical and the document is not mutated."""
        document = copy.deepcopy(PETSTORE_SPEC)

        first = build(document).get_interface_tp()
        second = build(document).get_interface_tp()

        assert first == second
        assert document == PETSTORE_SPEC

    def test_empty_namespace(self):
        """Test declarations without a namespace."""
        declarations = by_name(build(PETSTORE_SPEC, namespace='').get_interface_tp())

        assert declarations['Pet'].properties[3].type == 'Status'
