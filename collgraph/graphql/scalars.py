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
from typing import Any, Dict, Optional

from graphql import (
    GraphQLInt,
    GraphQLNonNull,
    GraphQLScalarType,
    GraphQLString,
)
from graphql.language import ast as gql_ast
from graphql.pyutils import Undefined

from collgraph import errors
from collgraph import schema as s_schema


def coerce_long(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError(f"Long cannot represent a boolean value: {value}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and not value.is_integer():
        raise TypeError(f"Long cannot represent non-integer value: {value}")
    return int(value)


def parse_long_literal(
    ast: gql_ast.Node,
    _variables: Optional[Dict[str, Any]] = None,
) -> Any:
    if isinstance(ast, gql_ast.IntValueNode):
        return int(ast.value)
    else:
        # Undefined makes validation reject the literal.
        return Undefined


GraphQLLong = GraphQLScalarType(
    name="Long",
    description="The `Long` scalar type represents non-fractional signed "
                "whole numeric values without a fixed bit width.",
    serialize=coerce_long,
    parse_value=coerce_long,
    parse_literal=parse_long_literal,
)


SCALAR_KINDS_MAP = {
    'int': GraphQLInt,
    'long': GraphQLLong,
    'string': GraphQLString,
}


def _get_kind(schema: Any) -> Optional[str]:
    if isinstance(schema, s_schema.ScalarSchema):
        return schema.kind
    elif isinstance(schema, str):
        return schema
    else:
        return None


def try_convert_scalar(schema: Any) -> Optional[GraphQLNonNull]:
    """Return a non-null GraphQL scalar for *schema* or None.

    *schema* is either a classified ``ScalarSchema`` or a raw kind
    name as found in accessor argument declarations.
    """
    kind = _get_kind(schema)
    gqltype = SCALAR_KINDS_MAP.get(kind) if kind is not None else None
    if gqltype is None:
        return None
    return GraphQLNonNull(gqltype)


def convert_scalar(schema: Any) -> GraphQLNonNull:
    target = try_convert_scalar(schema)
    if target is None:
        raise errors.UnsupportedScalarTypeError(
            f'unrecognized scalar type: {_describe(schema)}')
    return target


def _describe(schema: Any) -> str:
    if isinstance(schema, s_schema.ScalarSchema):
        return repr(schema.kind)
    return repr(schema)
