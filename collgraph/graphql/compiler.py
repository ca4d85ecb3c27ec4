#
# This source file is part of the EdgeDB open source project.
#
# Copyright 2019-present MagicStack Inc. and the EdgeDB authors.
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
from typing import Any, Dict, Mapping, Optional, Tuple

import logging

import graphql
from graphql.language import ast as gql_ast

from collgraph import errors
from collgraph import schema as s_schema
from collgraph.common import debug
from collgraph.common import log

from . import types as gt


logger = logging.getLogger('collgraph.graphql')


def _get_loc(err: graphql.GraphQLError) -> Tuple[Optional[int], Optional[int]]:
    if err.locations:
        return err.locations[0].line, err.locations[0].column
    return None, None


def parse_text(query: str) -> gql_ast.DocumentNode:
    try:
        return graphql.parse(query)
    except graphql.GraphQLError as err:
        line, col = _get_loc(err)
        raise errors.QuerySyntaxError(
            err.message, line=line, col=col) from None


def get_operation(
    document: gql_ast.DocumentNode,
) -> gql_ast.OperationDefinitionNode:
    operations = [
        d for d in document.definitions
        if isinstance(d, gql_ast.OperationDefinitionNode)
    ]
    if len(operations) != 1:
        raise errors.MultiOperationDocumentError(
            f'expected exactly one operation in the query document, '
            f'got {len(operations)}')

    operation = operations[0]
    if operation.operation is not graphql.OperationType.QUERY:
        raise errors.UnsupportedOperationKindError(
            f'expected a query operation, got '
            f'{operation.operation.value}')

    if operation.name is None:
        raise errors.MissingOperationNameError(
            'the query operation must be named')

    return operation


def convert_execution_error(
    err: graphql.GraphQLError,
) -> errors.CollGraphError:
    if isinstance(err.original_error, errors.CollGraphError):
        return err.original_error

    line, col = _get_loc(err)
    details = None
    if err.path:
        details = 'at ' + '.'.join(str(p) for p in err.path)
    return errors.ExecutionError(
        err.message, line=line, col=col, details=details)


class CompiledQuery:
    """A parsed and validated query bound to a GraphQL schema.

    The same compiled query can be executed any number of times with
    different variables.
    """

    __slots__ = ('_gqlcore', '_document', '_operation_name')

    def __init__(
        self,
        gqlcore: gt.GQLCoreSchema,
        document: gql_ast.DocumentNode,
        operation_name: str,
    ) -> None:
        self._gqlcore = gqlcore
        self._document = document
        self._operation_name = operation_name

    def __repr__(self) -> str:
        return f'<CompiledQuery {self._operation_name!r}>'

    @property
    def operation_name(self) -> str:
        return self._operation_name

    @property
    def document(self) -> gql_ast.DocumentNode:
        return self._document

    @property
    def graphql_schema(self) -> graphql.GraphQLSchema:
        return self._gqlcore.graphql_schema

    def execute(
        self,
        variables: Optional[Mapping[str, Any]] = None,
        *,
        root_value: Any = None,
    ) -> Dict[str, Any]:
        if variables is None:
            variables = {}
        elif not isinstance(variables, Mapping):
            raise errors.InvalidVariablesError(
                f'variables must be a mapping, got '
                f'{type(variables).__name__}')

        with log.operation_context(self._operation_name):
            logger.debug('executing with variables: %s', sorted(variables))
            result = graphql.execute_sync(
                self._gqlcore.graphql_schema,
                self._document,
                root_value={} if root_value is None else root_value,
                variable_values=dict(variables),
                operation_name=self._operation_name,
            )

        if result.errors:
            err = result.errors[0]
            exc = convert_execution_error(err)
            if exc is err.original_error:
                raise exc
            raise exc from err

        assert result.data is not None
        return result.data


def compile_query(gqlcore: gt.GQLCoreSchema, query: str) -> CompiledQuery:
    if not isinstance(query, str):
        raise errors.QueryDocumentError(
            f'query must be a string, got {type(query).__name__}')

    document = parse_text(query)
    operation = get_operation(document)
    assert operation.name is not None
    operation_name = operation.name.value

    validation_errors = graphql.validate(gqlcore.graphql_schema, document)
    if validation_errors:
        err = validation_errors[0]
        line, col = _get_loc(err)
        raise errors.QueryValidationError(
            err.message,
            line=line,
            col=col,
            graphql_errors=validation_errors,
        )

    if debug.flags.graphql_compile:
        debug.header(f'GraphQL Query: {operation_name}')
        debug.print(graphql.print_ast(document))

    logger.debug('compiled query %r', operation_name)
    return CompiledQuery(gqlcore, document, operation_name)


class GraphQLEngine:
    """Compiled GraphQL schema of a collection graph.

    The schema is built eagerly for all collections when the engine
    is created; use ``compile()`` to get reusable query handles.
    """

    def __init__(self, config: s_schema.Config, accessor: Any) -> None:
        for method in ('select', 'arguments'):
            if not callable(getattr(accessor, method, None)):
                raise errors.ConfigurationError(
                    f'accessor must provide a {method}() method')

        self._config = config
        self._accessor = accessor
        self._gqlcore = gt.GQLCoreSchema(config, accessor)

    @property
    def config(self) -> s_schema.Config:
        return self._config

    @property
    def accessor(self) -> Any:
        return self._accessor

    @property
    def graphql_schema(self) -> graphql.GraphQLSchema:
        return self._gqlcore.graphql_schema

    def print_schema(self) -> str:
        return graphql.print_schema(self._gqlcore.graphql_schema)

    def compile(self, query: str) -> CompiledQuery:
        return compile_query(self._gqlcore, query)


def new(cfg: Mapping[str, Any]) -> GraphQLEngine:
    """Create an engine from ``{schemas, collections, accessor}``."""

    if not isinstance(cfg, Mapping):
        raise errors.ConfigurationError(
            f'configuration must be an object, got {type(cfg).__name__}')

    accessor = cfg.get('accessor')
    if accessor is None:
        raise errors.ConfigurationError(
            'configuration must contain an accessor')

    config = s_schema.load_config(cfg)
    return GraphQLEngine(config, accessor)
