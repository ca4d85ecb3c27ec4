#
# This source file is part of the EdgeDB open source project.
#
# Copyright 2008-present MagicStack Inc. and the EdgeDB authors.
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


"""Data model of a collection graph configuration.

A configuration is a set of record schemas and a set of collections.
Each collection is bound to one record schema and declares zero or
more connections to other collections.  Schemas are classified once,
when the configuration is loaded, into one of the shapes below.
"""


from __future__ import annotations
from typing import Iterator, Optional, Tuple, Union

import dataclasses
import enum

import immutables


__all__ = (
    'ConnectionType', 'ScalarSchema', 'EnumSchema', 'ArraySchema',
    'RecordField', 'RecordSchema', 'Schema', 'KeyPart', 'Connection',
    'Collection', 'Config',
)


class ConnectionType(str, enum.Enum):

    ONE_TO_ONE = '1:1'
    ONE_TO_MANY = '1:N'


@dataclasses.dataclass(frozen=True)
class ScalarSchema:
    kind: str


@dataclasses.dataclass(frozen=True)
class EnumSchema:
    name: Optional[str]
    symbols: Tuple[str, ...]


@dataclasses.dataclass(frozen=True)
class ArraySchema:
    items: Schema


@dataclasses.dataclass(frozen=True)
class RecordField:
    name: str
    type: Schema


@dataclasses.dataclass(frozen=True)
class RecordSchema:
    name: str
    fields: Tuple[RecordField, ...]

    def get_field(self, name: str) -> Optional[RecordField]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)


Schema = Union[ScalarSchema, EnumSchema, ArraySchema, RecordSchema]


@dataclasses.dataclass(frozen=True)
class KeyPart:
    source_field: str
    destination_field: str


@dataclasses.dataclass(frozen=True)
class Connection:
    type: ConnectionType
    name: str
    destination_collection: str
    parts: Tuple[KeyPart, ...]
    index_name: Optional[str] = None

    @property
    def is_singular(self) -> bool:
        return self.type is ConnectionType.ONE_TO_ONE


@dataclasses.dataclass(frozen=True)
class Collection:
    name: str
    schema_name: str
    connections: Tuple[Connection, ...] = ()

    def get_connection(self, name: str) -> Optional[Connection]:
        for conn in self.connections:
            if conn.name == name:
                return conn
        return None


@dataclasses.dataclass(frozen=True)
class Config:
    schemas: immutables.Map[str, Schema]
    collections: immutables.Map[str, Collection]
    # Declaration order; the maps iterate in hash order.
    collection_names: Tuple[str, ...]

    def iter_collections(self) -> Iterator[Collection]:
        for name in self.collection_names:
            yield self.collections[name]

    def get_record(self, collection_name: str) -> RecordSchema:
        coll = self.collections[collection_name]
        schema = self.schemas[coll.schema_name]
        assert isinstance(schema, RecordSchema), \
            f'collection {collection_name!r} is not bound to a record'
        return schema
