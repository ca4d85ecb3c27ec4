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


from __future__ import annotations
from typing import Any, Dict, List, Mapping, Set

import json
import logging
import os

import immutables

from collgraph import errors

from . import objects as so


logger = logging.getLogger('collgraph.schema')


def _describe(raw: Any) -> str:
    try:
        return json.dumps(raw, sort_keys=True)
    except (TypeError, ValueError):
        return repr(raw)


def parse_schema(raw: Any) -> so.Schema:
    """Classify an avro-like schema descriptor."""

    if isinstance(raw, str):
        if raw in {'record', 'enum', 'array'}:
            raise errors.ConfigurationError(
                f'complex type {raw!r} must be declared as an object')
        return so.ScalarSchema(kind=raw)

    if isinstance(raw, list):
        raise errors.UnsupportedFeatureError(
            f'union schemas are not supported: {_describe(raw)}')

    if not isinstance(raw, Mapping):
        raise errors.ConfigurationError(
            f'unrecognized schema descriptor: {_describe(raw)}')

    kind = raw.get('type')

    if kind == 'record':
        return _parse_record(raw)

    elif kind == 'enum':
        symbols = raw.get('symbols', ())
        if not isinstance(symbols, list):
            raise errors.ConfigurationError(
                f'enum symbols must be a list: {_describe(raw)}')
        return so.EnumSchema(
            name=raw.get('name'), symbols=tuple(symbols))

    elif kind == 'array':
        if 'items' not in raw:
            raise errors.ConfigurationError(
                f'array schema must declare items: {_describe(raw)}')
        return so.ArraySchema(items=parse_schema(raw['items']))

    elif isinstance(kind, str):
        # {"type": "long"} is an alternative spelling of "long".
        return parse_schema(kind)

    else:
        raise errors.ConfigurationError(
            f'unrecognized schema descriptor: {_describe(raw)}')


def _parse_record(raw: Mapping[str, Any]) -> so.RecordSchema:
    name = raw.get('name')
    if not isinstance(name, str):
        raise errors.ConfigurationError(
            f'record name must be a string, got {type(name).__name__} '
            f'(schema {_describe(raw)})')

    raw_fields = raw.get('fields')
    if not isinstance(raw_fields, list):
        raise errors.ConfigurationError(
            f'record fields must be a list, got '
            f'{type(raw_fields).__name__} (schema {_describe(raw)})')

    fields: List[so.RecordField] = []
    seen: Set[str] = set()
    for raw_field in raw_fields:
        if not isinstance(raw_field, Mapping):
            raise errors.MalformedFieldError(
                f'field of record {name!r} must be an object, '
                f'got {_describe(raw_field)}')

        fname = raw_field.get('name')
        if not isinstance(fname, str):
            raise errors.MalformedFieldError(
                f'field name must be a string, got {type(fname).__name__} '
                f'(schema {_describe(raw_field)})')
        if fname in seen:
            raise errors.DuplicateNameError(
                f'record {name!r} declares field {fname!r} more than once')
        if 'type' not in raw_field:
            raise errors.MalformedFieldError(
                f'field {fname!r} of record {name!r} has no type')

        seen.add(fname)
        fields.append(
            so.RecordField(name=fname, type=parse_schema(raw_field['type'])))

    return so.RecordSchema(name=name, fields=tuple(fields))


def _parse_connection(
    coll_name: str,
    raw: Any,
) -> so.Connection:
    if not isinstance(raw, Mapping):
        raise errors.ConfigurationError(
            f'connection of collection {coll_name!r} must be an object, '
            f'got {_describe(raw)}')

    raw_type = raw.get('type')
    try:
        conn_type = so.ConnectionType(raw_type)
    except ValueError:
        raise errors.ConfigurationError(
            f'connection type must be 1:1 or 1:N, got {raw_type!r} '
            f'(collection {coll_name!r})') from None

    name = raw.get('name')
    if not isinstance(name, str):
        raise errors.ConfigurationError(
            f'connection name must be a string, got {type(name).__name__} '
            f'(collection {coll_name!r})')

    dest = raw.get('destination_collection')
    if not isinstance(dest, str):
        raise errors.ConfigurationError(
            f'destination_collection of connection {name!r} must be '
            f'a string, got {type(dest).__name__}')

    raw_parts = raw.get('parts')
    if not isinstance(raw_parts, list) or not raw_parts:
        raise errors.ConfigurationError(
            f'parts of connection {name!r} must be a non-empty list')

    parts = []
    for raw_part in raw_parts:
        if not isinstance(raw_part, Mapping):
            raise errors.ConfigurationError(
                f'key part of connection {name!r} must be an object, '
                f'got {_describe(raw_part)}')
        src = raw_part.get('source_field')
        dst = raw_part.get('destination_field')
        if not isinstance(src, str) or not isinstance(dst, str):
            raise errors.ConfigurationError(
                f'key part of connection {name!r} must have string '
                f'source_field and destination_field, '
                f'got {_describe(raw_part)}')
        parts.append(so.KeyPart(source_field=src, destination_field=dst))

    index_name = raw.get('index_name')
    if index_name is not None and not isinstance(index_name, str):
        raise errors.ConfigurationError(
            f'index_name of connection {name!r} must be a string')

    return so.Connection(
        type=conn_type,
        name=name,
        destination_collection=dest,
        parts=tuple(parts),
        index_name=index_name,
    )


def _parse_collection(name: str, raw: Any) -> so.Collection:
    if not isinstance(raw, Mapping):
        raise errors.ConfigurationError(
            f'collection {name!r} must be an object, got {_describe(raw)}')

    schema_name = raw.get('schema_name')
    if not isinstance(schema_name, str):
        raise errors.ConfigurationError(
            f'schema_name of collection {name!r} must be a string')

    raw_conns = raw.get('connections') or []
    if not isinstance(raw_conns, list):
        raise errors.ConfigurationError(
            f'connections of collection {name!r} must be a list')

    conns = []
    seen: Set[str] = set()
    for raw_conn in raw_conns:
        conn = _parse_connection(name, raw_conn)
        if conn.name in seen:
            raise errors.DuplicateNameError(
                f'collection {name!r} declares connection {conn.name!r} '
                f'more than once')
        seen.add(conn.name)
        conns.append(conn)

    return so.Collection(
        name=name, schema_name=schema_name, connections=tuple(conns))


def _check_connections(
    schemas: Mapping[str, so.Schema],
    collections: Mapping[str, so.Collection],
) -> None:
    for coll in collections.values():
        source = schemas[coll.schema_name]
        assert isinstance(source, so.RecordSchema)

        for conn in coll.connections:
            if source.get_field(conn.name) is not None:
                raise errors.DuplicateNameError(
                    f'connection {conn.name!r} of collection {coll.name!r} '
                    f'clashes with a field of record {source.name!r}')

            for part in conn.parts:
                if source.get_field(part.source_field) is None:
                    raise errors.ConfigurationError(
                        f'connection {conn.name!r} of collection '
                        f'{coll.name!r} refers to unknown source field '
                        f'{part.source_field!r}')

            # Unknown destinations are reported by the type compiler.
            dest = collections.get(conn.destination_collection)
            if dest is None:
                continue
            dest_schema = schemas[dest.schema_name]
            assert isinstance(dest_schema, so.RecordSchema)
            for part in conn.parts:
                if dest_schema.get_field(part.destination_field) is None:
                    raise errors.ConfigurationError(
                        f'connection {conn.name!r} of collection '
                        f'{coll.name!r} refers to unknown destination '
                        f'field {part.destination_field!r} of '
                        f'{conn.destination_collection!r}')


def load_config(raw: Mapping[str, Any]) -> so.Config:
    if not isinstance(raw, Mapping):
        raise errors.ConfigurationError(
            f'configuration must be an object, got {type(raw).__name__}')

    raw_schemas = raw.get('schemas')
    if not isinstance(raw_schemas, Mapping):
        raise errors.ConfigurationError(
            'configuration must contain a "schemas" object')

    raw_collections = raw.get('collections')
    if not isinstance(raw_collections, Mapping):
        raise errors.ConfigurationError(
            'configuration must contain a "collections" object')

    schemas: Dict[str, so.Schema] = {}
    for name, raw_schema in raw_schemas.items():
        schemas[name] = parse_schema(raw_schema)

    collections: Dict[str, so.Collection] = {}
    for name, raw_coll in raw_collections.items():
        coll = _parse_collection(name, raw_coll)
        schema = schemas.get(coll.schema_name)
        if schema is None:
            raise errors.ConfigurationError(
                f'collection {name!r} refers to unknown schema '
                f'{coll.schema_name!r}')
        if not isinstance(schema, so.RecordSchema):
            raise errors.ConfigurationError(
                f'schema {coll.schema_name!r} of collection {name!r} '
                f'must be a record')
        collections[name] = coll

    _check_connections(schemas, collections)

    logger.debug(
        'loaded %d schemas and %d collections',
        len(schemas), len(collections))

    return so.Config(
        schemas=immutables.Map(schemas),
        collections=immutables.Map(collections),
        collection_names=tuple(collections),
    )


def load_config_file(path: os.PathLike[str] | str) -> so.Config:
    with open(path, 'rt') as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise errors.ConfigurationError(
                f'could not parse configuration file {str(path)!r}: {e}'
            ) from e

    return load_config(raw)
