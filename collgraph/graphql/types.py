#
# This source file is part of the EdgeDB open source project.
#
# Copyright 2018-present MagicStack Inc. and the EdgeDB authors.
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


from __future__ import annotations
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
)

from functools import partial
import logging
import re

import graphql
from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLSchema,
    get_nullable_type,
    is_scalar_type,
)

from collgraph import errors
from collgraph import schema as s_schema
from collgraph.common import debug

from . import registry as g_registry
from . import resolvers as g_resolvers
from . import scalars as g_scalars


'''
This module maps a collection graph configuration onto GraphQL types.

Every collection becomes an object type named after the collection
(not after its record schema) and a root query field of the same name
returning a list of such objects.  Record fields become fields of the
object type; the scalar ones also become optional filter arguments,
both of the root field and of every connection field leading to the
collection.

Connections become fields too: a one-to-one connection is typed as
the destination object itself, a one-to-many connection as a list of
destination objects.  Besides the destination filter arguments a
connection field takes the extra arguments the accessor declares for
the connection type, e.g. pagination controls.

Connection targets are looked up through the type registry when the
schema is assembled, so collections can refer to each other in any
order, including cycles.
'''


logger = logging.getLogger('collgraph.graphql')

GQL_NAME_RE = re.compile(r'^[_a-zA-Z][_a-zA-Z0-9]*$')

# Names the assembled schema uses itself.
RESERVED_TYPE_NAMES = frozenset({
    'Query', 'Mutation', 'Subscription',
    'Int', 'Float', 'String', 'Boolean', 'ID', 'Long',
})


class ConvertedType(NamedTuple):

    type: GraphQLOutputType
    args: Dict[str, GraphQLArgument]
    # Only set for records.
    schema_name: Optional[str]


class ConnectionField(NamedTuple):

    connection: s_schema.Connection
    destination: g_registry.TypeSlot
    extra_args: Dict[str, GraphQLArgument]
    resolver: g_resolvers.ConnectionResolver


def _check_name(name: str, what: str) -> None:
    if not GQL_NAME_RE.match(name) or name.startswith('__'):
        raise errors.ConfigurationError(
            f'{what} {name!r} is not a valid GraphQL name')


class GQLCoreSchema:

    _connection_fields: Dict[str, List[ConnectionField]]

    def __init__(self, config: s_schema.Config, accessor: Any) -> None:
        '''Create a graphql schema based on a collection configuration.'''

        self.config = config
        self.accessor = accessor
        self.registry = g_registry.TypeRegistry()
        self._connection_fields = {}

        for name in config.collection_names:
            _check_name(name, 'collection name')
            if name in RESERVED_TYPE_NAMES:
                raise errors.DuplicateNameError(
                    f'collection name {name!r} is reserved')
            self.registry.allocate(name, is_collection=True)

        self._define_types()
        self._check_connection_args()

        query = GraphQLObjectType(
            name='Query',
            fields=self.get_root_fields(),
        )

        # get a sorted list of types relevant for the Schema
        types = sorted(
            (slot.object_type for slot in self.registry.filled()),
            key=lambda x: x.name,
        )
        self._gql_schema = GraphQLSchema(query=query, types=types)

        schema_errors = graphql.validate_schema(self._gql_schema)
        if schema_errors:
            raise errors.CompileError(
                f'invalid GraphQL schema: {schema_errors[0].message}')

        if debug.flags.graphql_compile:
            debug.header('GraphQL Schema')
            debug.print(graphql.print_schema(self._gql_schema))

        logger.info(
            'compiled GraphQL schema with %d collection(s)',
            len(config.collections))

    @property
    def graphql_schema(self) -> GraphQLSchema:
        return self._gql_schema

    def _define_types(self) -> None:
        for coll in self.config.iter_collections():
            schema = self.config.schemas[coll.schema_name]
            converted = self.convert_type(schema, collection=coll)
            if converted.schema_name != coll.schema_name:
                raise errors.SchemaNameMismatchError(
                    f'top-level schema name does not match the name in '
                    f'the schema itself: {coll.schema_name!r} vs '
                    f'{converted.schema_name!r}')

    def convert_type(
        self,
        schema: s_schema.Schema,
        *,
        collection: Optional[s_schema.Collection] = None,
    ) -> ConvertedType:
        if isinstance(schema, s_schema.RecordSchema):
            return self._convert_record(schema, collection)

        elif isinstance(schema, s_schema.EnumSchema):
            raise errors.EnumNotImplementedError(
                f'enum schemas are not implemented: {schema.name!r}')

        elif isinstance(schema, s_schema.ArraySchema):
            item = self.convert_type(schema.items)
            return ConvertedType(
                GraphQLNonNull(GraphQLList(item.type)), {}, None)

        else:
            target = g_scalars.try_convert_scalar(schema)
            if target is None:
                raise errors.UnrecognizedTypeError(
                    f'unrecognized schema type: {schema!r}')
            return ConvertedType(target, {}, None)

    def convert_record_fields(
        self,
        fields: Sequence[s_schema.RecordField],
    ) -> Tuple[Dict[str, GraphQLField], Dict[str, GraphQLArgument]]:
        '''Convert record fields to GraphQL fields and filter arguments.'''

        res = {}
        args = {}
        for field in fields:
            if not isinstance(field.name, str):
                raise errors.MalformedFieldError(
                    f'field name must be a string, got '
                    f'{type(field.name).__name__} (field {field!r})')
            _check_name(field.name, 'field name')

            target = self.convert_type(field.type).type
            res[field.name] = GraphQLField(target)

            nullable = get_nullable_type(target)
            # Only scalars can be used to filter.
            if is_scalar_type(nullable):
                args[field.name] = GraphQLArgument(nullable)

        return res, args

    def _convert_record(
        self,
        record: s_schema.RecordSchema,
        collection: Optional[s_schema.Collection],
    ) -> ConvertedType:
        if collection is not None:
            name = collection.name
            slot = self.registry[name]
        else:
            name = record.name
            _check_name(name, 'record name')
            if name in RESERVED_TYPE_NAMES:
                raise errors.DuplicateNameError(
                    f'record name {name!r} is reserved')
            slot = self.registry.allocate(name)
            if slot.is_collection:
                raise errors.DuplicateNameError(
                    f'nested record {name!r} has the same name as '
                    f'a collection')
            if slot.is_filled:
                if slot.source != record:
                    raise errors.DuplicateNameError(
                        f'record name {name!r} is used for different '
                        f'record schemas')
                return ConvertedType(slot.type, dict(slot.args), record.name)

        fields, args = self.convert_record_fields(record.fields)

        gql_fields: Any
        if collection is not None and collection.connections:
            self._connection_fields[name] = [
                self._make_connection_field(collection, conn)
                for conn in collection.connections
            ]
            gql_fields = partial(self.get_fields, name, fields)
        else:
            gql_fields = fields

        objtype = GraphQLObjectType(
            name=name,
            description=f'generated from schema {record.name}',
            fields=gql_fields,
        )
        gqltype = GraphQLNonNull(objtype)
        slot.fill(gqltype, args, record)

        return ConvertedType(gqltype, args, record.name)

    def _make_connection_field(
        self,
        collection: s_schema.Collection,
        conn: s_schema.Connection,
    ) -> ConnectionField:
        _check_name(conn.name, 'connection name')

        if not self.registry.is_collection(conn.destination_collection):
            raise errors.DanglingConnectionError(
                f'connection {conn.name!r} of {collection.name!r} refers '
                f'to unknown collection {conn.destination_collection!r}')

        return ConnectionField(
            connection=conn,
            destination=self.registry[conn.destination_collection],
            extra_args=self.convert_accessor_args(conn.type),
            resolver=g_resolvers.ConnectionResolver(
                conn, collection.name, self.accessor),
        )

    def convert_accessor_args(
        self,
        connection_type: s_schema.ConnectionType,
    ) -> Dict[str, GraphQLArgument]:
        args = {}
        for decl in self.accessor.arguments(connection_type.value):
            if not isinstance(decl, Mapping):
                raise errors.ConfigurationError(
                    f'accessor argument must be an object, got {decl!r}')
            name = decl.get('name')
            if not isinstance(name, str):
                raise errors.MalformedFieldError(
                    f'accessor argument name must be a string, got '
                    f'{type(name).__name__} (argument {decl!r})')
            _check_name(name, 'argument name')

            schema = s_schema.parse_schema(decl.get('type'))
            if not isinstance(schema, s_schema.ScalarSchema):
                raise errors.UnsupportedArgumentTypeError(
                    f'accessor argument {name!r} must be of a scalar type')

            target = g_scalars.convert_scalar(schema)
            args[name] = GraphQLArgument(get_nullable_type(target))

        return args

    def _check_connection_args(self) -> None:
        for coll_name, conn_fields in self._connection_fields.items():
            for cf in conn_fields:
                clashes = set(cf.destination.args) & set(cf.extra_args)
                if clashes:
                    raise errors.DuplicateNameError(
                        f'accessor arguments of connection '
                        f'{cf.connection.name!r} of {coll_name!r} clash '
                        f'with fields of {cf.destination.name!r}: '
                        f'{", ".join(sorted(clashes))}')

    def get_fields(
        self,
        typename: str,
        record_fields: Dict[str, GraphQLField],
    ) -> Dict[str, GraphQLField]:
        fields = dict(record_fields)

        for cf in self._connection_fields.get(typename, ()):
            conn = cf.connection
            target: GraphQLOutputType = cf.destination.type
            if not conn.is_singular:
                target = GraphQLNonNull(GraphQLList(target))

            args = dict(cf.destination.args)
            args.update(cf.extra_args)

            fields[conn.name] = GraphQLField(
                target,
                args=args,
                resolve=cf.resolver,
                description=(
                    f'{conn.type.value} connection to '
                    f'{conn.destination_collection}'
                ),
            )

        return fields

    def get_root_fields(self) -> Dict[str, GraphQLField]:
        fields = {}
        for name in self.config.collection_names:
            slot = self.registry[name]
            fields[name] = GraphQLField(
                GraphQLNonNull(GraphQLList(slot.type)),
                args=dict(slot.args),
                resolve=g_resolvers.CollectionResolver(name, self.accessor),
            )
        return fields
