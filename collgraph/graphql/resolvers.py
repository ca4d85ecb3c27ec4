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


'''Field resolvers backed by an accessor.

Root fields fetch a collection with the query arguments as the
filter.  Connection fields join a parent object to its destination
collection: the filter is built from the connection key parts, so
every key part maps one field of the parent onto one field of the
destination.  A connection is resolved separately for each parent
object the query reaches.
'''


from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Sequence

import logging

from graphql import GraphQLResolveInfo

from collgraph import errors
from collgraph import schema as s_schema
from collgraph.accessor import base as a_base


logger = logging.getLogger('collgraph.graphql')


def _drop_nulls(args: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in args.items() if v is not None}


def _check_objects(objs: Any, collection_name: str) -> Sequence[Any]:
    if (
        not isinstance(objs, Sequence)
        or isinstance(objs, (str, bytes))
    ):
        raise errors.AccessorError(
            f'objects received from an accessor for {collection_name!r} '
            f'must be a sequence, got {type(objs).__name__}')
    return objs


def get_key_value(parent: Any, field_name: str) -> Any:
    if isinstance(parent, Mapping):
        return parent[field_name]
    try:
        return getattr(parent, field_name)
    except AttributeError:
        raise KeyError(field_name) from None


class CollectionResolver:
    """Resolve a root field: fetch objects of one collection."""

    __slots__ = ('collection_name', 'accessor')

    def __init__(self, collection_name: str, accessor: Any) -> None:
        self.collection_name = collection_name
        self.accessor = accessor

    def __repr__(self) -> str:
        return f'<CollectionResolver {self.collection_name!r}>'

    def __call__(
        self,
        root: Any,
        info: Optional[GraphQLResolveInfo],
        **args: Any,
    ) -> Sequence[Any]:
        filter = _drop_nulls(args)
        objs = self.accessor.select(
            None, self.collection_name, None, filter, {})
        objs = _check_objects(objs, self.collection_name)
        logger.debug(
            'fetched %d object(s) of %s', len(objs), self.collection_name)
        return objs


class ConnectionResolver:
    """Resolve a connection field of one object.

    The resolver is bound to one connection of one source collection
    and to the accessor.  The composite key filter is computed from
    the parent object for each call.
    """

    __slots__ = ('connection', 'source_collection', 'accessor', '_source')

    def __init__(
        self,
        connection: s_schema.Connection,
        source_collection: str,
        accessor: Any,
    ) -> None:
        self.connection = connection
        self.source_collection = source_collection
        self.accessor = accessor
        self._source = a_base.SelectSource(
            collection_name=source_collection,
            connection_name=connection.name,
        )

    def __repr__(self) -> str:
        return (
            f'<ConnectionResolver {self.source_collection}.'
            f'{self.connection.name} -> '
            f'{self.connection.destination_collection}>'
        )

    def build_filter(self, parent: Any) -> Dict[str, Any]:
        filter = {}
        for part in self.connection.parts:
            try:
                value = get_key_value(parent, part.source_field)
            except (KeyError, TypeError):
                raise errors.MissingKeyFieldError(
                    f'object of {self.source_collection!r} has no key '
                    f'field {part.source_field!r} required by connection '
                    f'{self.connection.name!r}') from None
            filter[part.destination_field] = value
        return filter

    def __call__(
        self,
        parent: Any,
        info: Optional[GraphQLResolveInfo],
        **args: Any,
    ) -> Any:
        conn = self.connection
        filter = self.build_filter(parent)
        objs = self.accessor.select(
            parent,
            conn.destination_collection,
            self._source,
            filter,
            _drop_nulls(args),
        )
        objs = _check_objects(objs, conn.destination_collection)

        logger.debug(
            'connection %s.%s matched %d object(s)',
            self.source_collection, conn.name, len(objs))

        if conn.is_singular:
            if len(objs) != 1:
                raise errors.CardinalityViolationError(
                    f'expected one matching object for connection '
                    f'{conn.name!r} of {self.source_collection!r}, '
                    f'got {len(objs)}',
                    count=len(objs),
                )
            return objs[0]
        else:
            return objs
