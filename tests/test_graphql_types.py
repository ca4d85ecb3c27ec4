#
# This source file is part of the EdgeDB open source project.
#
# Copyright 2024-present MagicStack Inc. and the EdgeDB authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#



import unittest

import graphql
from graphql import GraphQLList, GraphQLNonNull, GraphQLObjectType

from collgraph import errors
from collgraph import graphql as c_graphql
from collgraph import schema as s_schema

from . import configs


def compile_schema(raw, accessor=None):
    if accessor is None:
        accessor = configs.StubAccessor()
    cfg = s_schema.load_config(raw)
    return c_graphql.GQLCoreSchema(cfg, accessor)


class TestSchemaCompilation(unittest.TestCase):

    def test_graphql_types_root_fields(self):
        gqlcore = compile_schema(configs.user_order_config())
        query = gqlcore.graphql_schema.query_type

        self.assertEqual(
            set(query.fields), {'user_collection', 'order_collection'})

        field = query.fields['user_collection']
        self.assertIsInstance(field.type, GraphQLNonNull)
        self.assertIsInstance(field.type.of_type, GraphQLList)
        item = field.type.of_type.of_type
        self.assertIsInstance(item, GraphQLNonNull)
        self.assertEqual(item.of_type.name, 'user_collection')

        # Scalar fields become optional filter arguments.
        self.assertEqual(
            set(field.args), {'user_id', 'first_name', 'last_name'})
        self.assertIs(field.args['user_id'].type, graphql.GraphQLString)

    def test_graphql_types_object_types(self):
        gqlcore = compile_schema(configs.user_order_config())
        schema = gqlcore.graphql_schema

        users = schema.get_type('user_collection')
        self.assertIsInstance(users, GraphQLObjectType)
        self.assertEqual(users.description, 'generated from schema user')
        self.assertEqual(
            list(users.fields),
            ['user_id', 'first_name', 'last_name', 'order_connection'])
        self.assertIsInstance(users.fields['user_id'].type, GraphQLNonNull)

        # Record schema names are not exposed as type names.
        self.assertIsNone(schema.get_type('user'))

    def test_graphql_types_connection_fields(self):
        accessor = configs.StubAccessor(arguments={
            '1:N': [
                {'name': 'limit', 'type': 'int'},
                {'name': 'offset', 'type': 'long'},
            ],
        })
        gqlcore = compile_schema(configs.user_order_config(), accessor)
        schema = gqlcore.graphql_schema

        many = schema.get_type('user_collection').fields['order_connection']
        self.assertIsInstance(many.type, GraphQLNonNull)
        self.assertIsInstance(many.type.of_type, GraphQLList)
        self.assertEqual(
            many.type.of_type.of_type.of_type.name, 'order_collection')
        self.assertEqual(
            set(many.args),
            {'order_id', 'user_id', 'description', 'limit', 'offset'})
        self.assertIs(many.args['limit'].type, graphql.GraphQLInt)
        self.assertIs(many.args['offset'].type, c_graphql.GraphQLLong)

        one = schema.get_type('order_collection').fields['user_connection']
        self.assertIsInstance(one.type, GraphQLNonNull)
        self.assertEqual(one.type.of_type.name, 'user_collection')
        self.assertEqual(
            set(one.args), {'user_id', 'first_name', 'last_name'})

    def test_graphql_types_declaration_order(self):
        # A connection may point at a collection declared later.
        raw = configs.user_order_config()
        raw['collections'] = dict(reversed(list(raw['collections'].items())))
        gqlcore = compile_schema(raw)
        self.assertIsNotNone(
            gqlcore.graphql_schema.get_type('order_collection'))

    def test_graphql_types_self_reference(self):
        raw = {
            'schemas': {
                'node': {
                    'type': 'record',
                    'name': 'node',
                    'fields': [
                        {'name': 'id', 'type': 'long'},
                        {'name': 'parent_id', 'type': 'long'},
                    ],
                },
            },
            'collections': {
                'node_collection': {
                    'schema_name': 'node',
                    'connections': [{
                        'type': '1:1',
                        'name': 'parent',
                        'destination_collection': 'node_collection',
                        'parts': [{'source_field': 'parent_id',
                                   'destination_field': 'id'}],
                    }],
                },
            },
        }
        schema = compile_schema(raw).graphql_schema
        node = schema.get_type('node_collection')
        self.assertIs(node.fields['parent'].type.of_type, node)

    def test_graphql_types_dangling_connection(self):
        raw = configs.user_order_config()
        raw['collections']['user_collection']['connections'][0][
            'destination_collection'] = 'nowhere'
        with self.assertRaisesRegex(
                errors.DanglingConnectionError, "'nowhere'"):
            compile_schema(raw)

    def test_graphql_types_schema_name_mismatch(self):
        raw = configs.user_order_config()
        raw['schemas']['user']['name'] = 'person'
        with self.assertRaises(errors.SchemaNameMismatchError):
            compile_schema(raw)

    def test_graphql_types_enum(self):
        raw = configs.user_order_config()
        raw['schemas']['user']['fields'].append({
            'name': 'color',
            'type': {'type': 'enum', 'name': 'color', 'symbols': ['R']},
        })
        with self.assertRaises(errors.EnumNotImplementedError):
            compile_schema(raw)

    def test_graphql_types_unrecognized_scalar(self):
        raw = configs.user_order_config()
        raw['schemas']['user']['fields'].append(
            {'name': 'weight', 'type': 'double'})
        with self.assertRaises(errors.UnrecognizedTypeError):
            compile_schema(raw)

    def test_graphql_types_array_and_nested_record(self):
        raw = configs.user_order_config()
        address = {
            'type': 'record',
            'name': 'address',
            'fields': [
                {'name': 'city', 'type': 'string'},
            ],
        }
        raw['schemas']['user']['fields'].extend([
            {'name': 'tags', 'type': {'type': 'array', 'items': 'string'}},
            {'name': 'home', 'type': address},
            {'name': 'work', 'type': address},
        ])
        gqlcore = compile_schema(raw)
        schema = gqlcore.graphql_schema

        users = schema.get_type('user_collection')
        tags = users.fields['tags'].type
        self.assertIsInstance(tags, GraphQLNonNull)
        self.assertIsInstance(tags.of_type, GraphQLList)
        self.assertIs(tags.of_type.of_type.of_type, graphql.GraphQLString)

        address_type = schema.get_type('address')
        self.assertIsInstance(address_type, GraphQLObjectType)
        self.assertIs(users.fields['home'].type.of_type, address_type)
        self.assertIs(users.fields['work'].type.of_type, address_type)

        # Only scalar fields filter.
        root = schema.query_type.fields['user_collection']
        self.assertNotIn('tags', root.args)
        self.assertNotIn('home', root.args)

    def test_graphql_types_nested_record_clash(self):
        raw = configs.user_order_config()
        raw['schemas']['user']['fields'].append({
            'name': 'other',
            'type': {
                'type': 'record',
                'name': 'order_collection',
                'fields': [{'name': 'x', 'type': 'int'}],
            },
        })
        with self.assertRaises(errors.DuplicateNameError):
            compile_schema(raw)

    def test_graphql_types_reserved_collection_name(self):
        raw = configs.user_order_config()
        raw['collections']['Query'] = {'schema_name': 'user'}
        with self.assertRaises(errors.DuplicateNameError):
            compile_schema(raw)

    def test_graphql_types_accessor_argument_errors(self):
        accessor = configs.StubAccessor(arguments={
            '1:N': [{'name': 'where', 'type': {'type': 'array',
                                               'items': 'int'}}],
        })
        with self.assertRaises(errors.UnsupportedArgumentTypeError):
            compile_schema(configs.user_order_config(), accessor)

        accessor = configs.StubAccessor(arguments={
            '1:N': [{'name': 'limit', 'type': 'double'}],
        })
        with self.assertRaises(errors.UnsupportedScalarTypeError):
            compile_schema(configs.user_order_config(), accessor)

        accessor = configs.StubAccessor(arguments={
            '1:N': [{'name': 'user_id', 'type': 'string'}],
        })
        with self.assertRaisesRegex(errors.DuplicateNameError, 'clash'):
            compile_schema(configs.user_order_config(), accessor)

    def test_graphql_types_declaration_order_kept(self):
        names = [f'coll_{c}' for c in 'qwertyuiop']
        fields = [f'field_{c}' for c in 'zxcvbnmlkj']
        raw = {
            'schemas': {
                'rec': {
                    'type': 'record',
                    'name': 'rec',
                    'fields': [{'name': f, 'type': 'string'} for f in fields],
                },
            },
            'collections': {name: {'schema_name': 'rec'} for name in names},
        }
        schema = compile_schema(raw).graphql_schema

        self.assertEqual(list(schema.query_type.fields), names)
        for name in names:
            with self.subTest(collection=name):
                root = schema.query_type.fields[name]
                self.assertEqual(list(root.args), fields)
                self.assertEqual(
                    list(schema.get_type(name).fields), fields)

        sdl = graphql.print_schema(schema)
        self.assertIn(
            'coll_q(' + ', '.join(f'{f}: String' for f in fields) + ')',
            sdl)

    def test_graphql_types_print_schema(self):
        cfg = s_schema.load_config(configs.user_order_config())
        engine = c_graphql.GraphQLEngine(cfg, configs.StubAccessor())
        sdl = engine.print_schema()
        self.assertIn('type user_collection', sdl)
        self.assertIn('order_connection', sdl)
        self.assertIn(
            'user_collection(user_id: String, first_name: String, '
            'last_name: String): [user_collection!]!',
            sdl)
