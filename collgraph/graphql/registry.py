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


'''Named slots for compiled GraphQL types.

Collections may refer to each other regardless of the order in which
they are declared.  Every collection gets an empty slot before any
type is compiled; connection fields hold on to the slot of their
destination and only dereference it once the whole registry is
filled, which is when graphql-core evaluates the field thunks while
building the schema.

A filled slot is only ever replaced as a whole (type, arguments and
source schema together), never updated piecemeal.
'''


from __future__ import annotations
from typing import Dict, Iterator, Optional, Tuple

import types

from graphql import GraphQLArgument, GraphQLNonNull, GraphQLObjectType

from collgraph import schema as s_schema


class TypeSlot:

    __slots__ = ('name', 'is_collection', '_value')

    _value: Optional[Tuple[
        GraphQLNonNull,
        types.MappingProxyType[str, GraphQLArgument],
        s_schema.RecordSchema,
    ]]

    def __init__(self, name: str, *, is_collection: bool = False) -> None:
        self.name = name
        self.is_collection = is_collection
        self._value = None

    def __repr__(self) -> str:
        state = 'filled' if self.is_filled else 'empty'
        return f'<TypeSlot {self.name!r} {state}>'

    @property
    def is_filled(self) -> bool:
        return self._value is not None

    def fill(
        self,
        gqltype: GraphQLNonNull,
        args: Dict[str, GraphQLArgument],
        source: s_schema.RecordSchema,
    ) -> None:
        self._value = (gqltype, types.MappingProxyType(dict(args)), source)

    def _get(self):
        if self._value is None:
            raise AssertionError(f'type slot {self.name!r} is not filled')
        return self._value

    @property
    def type(self) -> GraphQLNonNull:
        return self._get()[0]

    @property
    def object_type(self) -> GraphQLObjectType:
        return self._get()[0].of_type

    @property
    def args(self) -> types.MappingProxyType[str, GraphQLArgument]:
        return self._get()[1]

    @property
    def source(self) -> s_schema.RecordSchema:
        return self._get()[2]


class TypeRegistry:

    def __init__(self) -> None:
        self._slots: Dict[str, TypeSlot] = {}

    def __getitem__(self, name: str) -> TypeSlot:
        return self._slots[name]

    def allocate(self, name: str, *, is_collection: bool = False) -> TypeSlot:
        slot = self._slots.get(name)
        if slot is None:
            slot = self._slots[name] = TypeSlot(
                name, is_collection=is_collection)
        return slot

    def is_collection(self, name: str) -> bool:
        slot = self._slots.get(name)
        return slot is not None and slot.is_collection

    def filled(self) -> Iterator[TypeSlot]:
        return (slot for slot in self._slots.values() if slot.is_filled)
