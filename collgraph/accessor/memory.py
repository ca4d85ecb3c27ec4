#
# This source file is part of the EdgeDB open source project.
#
# Copyright 2016-present MagicStack Inc. and the EdgeDB authors.
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


"""In-memory accessor over plain Python objects.

Objects live in per-collection spaces.  A space can declare hash
indexes over tuples of fields; a select whose filter covers all the
fields of an index is answered from that index, anything else is a
full scan in insertion order.
"""


from __future__ import annotations
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
)

import logging

from collgraph import errors
from collgraph import schema as s_schema
from collgraph.common import debug

from . import base


logger = logging.getLogger('collgraph.accessor')

PAGINATION_ARGS: Tuple[Mapping[str, str], ...] = (
    {'name': 'limit', 'type': 'int'},
    {'name': 'offset', 'type': 'long'},
)


class Index:

    __slots__ = ('name', 'fields', 'unique', 'primary', '_entries')

    def __init__(
        self,
        name: str,
        fields: Sequence[str],
        *,
        unique: bool = False,
        primary: bool = False,
    ) -> None:
        self.name = name
        self.fields = tuple(fields)
        self.unique = unique or primary
        self.primary = primary
        self._entries: Dict[Tuple[Any, ...], List[int]] = {}

    def key(self, obj: Mapping[str, Any]) -> Tuple[Any, ...]:
        return tuple(obj.get(f) for f in self.fields)

    def covered_by(self, filter: Mapping[str, Any]) -> bool:
        return all(f in filter for f in self.fields)

    def get(self, key: Tuple[Any, ...]) -> List[int]:
        return self._entries.get(key, [])

    def add(self, key: Tuple[Any, ...], rowid: int) -> None:
        self._entries.setdefault(key, []).append(rowid)

    def remove(self, key: Tuple[Any, ...], rowid: int) -> None:
        rowids = self._entries.get(key)
        if rowids is None:
            return
        rowids.remove(rowid)
        if not rowids:
            del self._entries[key]


class Space:

    def __init__(
        self,
        name: str,
        record: s_schema.RecordSchema,
        indexes: Iterable[Index] = (),
    ) -> None:
        self.name = name
        self.record = record
        self.field_names = frozenset(record.field_names())
        self.indexes: Dict[str, Index] = {idx.name: idx for idx in indexes}
        self.primary: Optional[Index] = None
        for idx in self.indexes.values():
            if idx.primary:
                self.primary = idx
        self._rows: Dict[int, Dict[str, Any]] = {}
        self._next_rowid = 0

    def __len__(self) -> int:
        return len(self._rows)

    def replace(self, obj: Mapping[str, Any]) -> None:
        unknown = set(obj) - self.field_names
        if unknown:
            raise errors.AccessorError(
                f'object for {self.name!r} has unknown fields: '
                f'{", ".join(sorted(unknown))}')

        row = dict(obj)
        rowid: Optional[int] = None
        if self.primary is not None:
            existing = self.primary.get(self.primary.key(row))
            if existing:
                rowid = existing[0]

        for idx in self.indexes.values():
            if not idx.unique or idx is self.primary:
                continue
            for other in idx.get(idx.key(row)):
                if other != rowid:
                    raise errors.AccessorError(
                        f'duplicate key {idx.key(row)!r} in unique index '
                        f'{idx.name!r} of {self.name!r}')

        if rowid is None:
            rowid = self._next_rowid
            self._next_rowid += 1
        else:
            old = self._rows[rowid]
            for idx in self.indexes.values():
                idx.remove(idx.key(old), rowid)

        self._rows[rowid] = row
        for idx in self.indexes.values():
            idx.add(idx.key(row), rowid)

    def scan(self, filter: Mapping[str, Any]) -> Iterator[Dict[str, Any]]:
        index = self._choose_index(filter)
        if index is not None:
            rowids = sorted(index.get(index.key(filter)))
            candidates: Iterable[Dict[str, Any]] = (
                self._rows[rowid] for rowid in rowids)
        else:
            candidates = self._rows.values()

        for row in candidates:
            if all(row.get(k) == v for k, v in filter.items()):
                yield row

    def _choose_index(
        self,
        filter: Mapping[str, Any],
    ) -> Optional[Index]:
        best = None
        for idx in self.indexes.values():
            if not idx.covered_by(filter):
                continue
            if best is None or (idx.unique and not best.unique):
                best = idx
        return best


class MemoryAccessor(base.Accessor):
    """Accessor storing collection objects in memory.

    *indexes* maps a collection name to its index declarations::

        {
            'user_collection': {
                'user_id_index': {
                    'fields': ['user_id'],
                    'unique': True,
                    'primary': True,
                },
            },
        }
    """

    def __init__(
        self,
        config: s_schema.Config,
        indexes: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> None:
        self._config = config
        indexes = indexes or {}

        unknown = set(indexes) - set(config.collections)
        if unknown:
            raise errors.ConfigurationError(
                f'indexes declared for unknown collections: '
                f'{", ".join(sorted(unknown))}')

        self._spaces: Dict[str, Space] = {}
        for name in config.collection_names:
            record = config.get_record(name)
            self._spaces[name] = Space(
                name, record,
                self._parse_indexes(name, record, indexes.get(name, {})))

        self._check_connection_indexes()

    @staticmethod
    def _parse_indexes(
        coll_name: str,
        record: s_schema.RecordSchema,
        raw: Mapping[str, Any],
    ) -> List[Index]:
        result = []
        has_primary = False
        for index_name, decl in raw.items():
            fields = decl.get('fields')
            if not isinstance(fields, list) or not fields:
                raise errors.ConfigurationError(
                    f'index {index_name!r} of {coll_name!r} must declare '
                    f'a non-empty list of fields')
            for field in fields:
                if record.get_field(field) is None:
                    raise errors.ConfigurationError(
                        f'index {index_name!r} of {coll_name!r} refers to '
                        f'unknown field {field!r}')

            primary = bool(decl.get('primary', False))
            if primary and has_primary:
                raise errors.ConfigurationError(
                    f'collection {coll_name!r} declares more than one '
                    f'primary index')
            has_primary = has_primary or primary

            result.append(Index(
                index_name, fields,
                unique=bool(decl.get('unique', False)),
                primary=primary,
            ))
        return result

    def _check_connection_indexes(self) -> None:
        for coll in self._config.iter_collections():
            for conn in coll.connections:
                if conn.index_name is None:
                    continue
                dest = self._spaces.get(conn.destination_collection)
                if dest is None:
                    continue
                index = dest.indexes.get(conn.index_name)
                if index is None:
                    raise errors.ConfigurationError(
                        f'connection {conn.name!r} of {coll.name!r} uses '
                        f'unknown index {conn.index_name!r} of '
                        f'{conn.destination_collection!r}')
                dest_fields = tuple(p.destination_field for p in conn.parts)
                if index.fields[:len(dest_fields)] != dest_fields:
                    raise errors.ConfigurationError(
                        f'connection {conn.name!r} of {coll.name!r}: key '
                        f'parts {dest_fields!r} are not a prefix of index '
                        f'{conn.index_name!r} fields {index.fields!r}')

    def replace(self, collection_name: str, obj: Mapping[str, Any]) -> None:
        if not isinstance(obj, Mapping):
            raise errors.AccessorError(
                f'object for {collection_name!r} must be a mapping, '
                f'got {type(obj).__name__}')
        self._get_space(collection_name).replace(obj)

    def load(self, data: Mapping[str, Iterable[Mapping[str, Any]]]) -> None:
        for collection_name, objs in data.items():
            for obj in objs:
                self.replace(collection_name, obj)

    def count(self, collection_name: str) -> int:
        return len(self._get_space(collection_name))

    def arguments(
        self,
        connection_type: str,
    ) -> Sequence[Mapping[str, Any]]:
        if connection_type == s_schema.ConnectionType.ONE_TO_ONE:
            return ()
        return PAGINATION_ARGS

    def select(
        self,
        parent: Optional[Mapping[str, Any]],
        collection_name: str,
        from_: Optional[base.SelectSource],
        filter: Mapping[str, Any],
        args: Mapping[str, Any],
    ) -> Sequence[Mapping[str, Any]]:
        space = self._get_space(collection_name)
        if from_ is not None:
            self._check_source(from_, collection_name)

        conditions = dict(filter)
        limit = offset = None
        for name, value in args.items():
            if value is None:
                continue
            if name == 'limit':
                limit = self._check_bound('limit', value)
            elif name == 'offset':
                offset = self._check_bound('offset', value)
            elif name in space.field_names:
                if name in conditions and conditions[name] != value:
                    # Conflicts with the connection key: nothing matches.
                    return []
                conditions[name] = value
            else:
                raise errors.AccessorError(
                    f'unexpected argument {name!r} for {collection_name!r}')

        rows = space.scan(conditions)
        result = []
        skipped = 0
        for row in rows:
            if offset is not None and skipped < offset:
                skipped += 1
                continue
            if limit is not None and len(result) >= limit:
                break
            result.append(dict(row))

        if debug.flags.graphql_execute:
            debug.header('Accessor select')
            debug.print(
                f'{collection_name} from={from_} filter={conditions} '
                f'limit={limit} offset={offset} -> {len(result)} object(s)')

        origin = 'root' if from_ is None else from_.connection_name
        logger.debug(
            'select from %s (%s): %d object(s)',
            collection_name, origin, len(result))
        return result

    def _get_space(self, collection_name: str) -> Space:
        try:
            return self._spaces[collection_name]
        except KeyError:
            raise errors.AccessorError(
                f'unknown collection {collection_name!r}') from None

    def _check_source(
        self,
        from_: base.SelectSource,
        collection_name: str,
    ) -> None:
        source = self._config.collections.get(from_.collection_name)
        conn = source.get_connection(from_.connection_name) if source else None
        if conn is None or conn.destination_collection != collection_name:
            raise errors.AccessorError(
                f'no connection {from_.connection_name!r} from '
                f'{from_.collection_name!r} to {collection_name!r}')

    @staticmethod
    def _check_bound(name: str, value: Any) -> int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise errors.AccessorError(
                f'{name} must be an integer, got {type(value).__name__}')
        if value < 0:
            raise errors.AccessorError(
                f'{name} must not be negative, got {value}')
        return value
