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


from __future__ import annotations
from typing import Any, List, Optional

from .base import CollGraphError


__all__ = (
    'CollGraphError',
    'ConfigurationError',
    'MalformedFieldError',
    'DanglingConnectionError',
    'DuplicateNameError',
    'UnsupportedFeatureError',
    'EnumNotImplementedError',
    'UnsupportedArgumentTypeError',
    'CompileError',
    'UnsupportedScalarTypeError',
    'UnrecognizedTypeError',
    'SchemaNameMismatchError',
    'QueryDocumentError',
    'QuerySyntaxError',
    'MultiOperationDocumentError',
    'UnsupportedOperationKindError',
    'MissingOperationNameError',
    'QueryValidationError',
    'ExecutionError',
    'AccessorError',
    'CardinalityViolationError',
    'InvalidVariablesError',
    'MissingKeyFieldError',
)


class ConfigurationError(CollGraphError):
    _code = 0x_01_00_00_00


class MalformedFieldError(ConfigurationError):
    _code = 0x_01_00_00_01


class DanglingConnectionError(ConfigurationError):
    _code = 0x_01_00_00_02


class DuplicateNameError(ConfigurationError):
    _code = 0x_01_00_00_03


class UnsupportedFeatureError(CollGraphError):
    _code = 0x_02_00_00_00


class EnumNotImplementedError(UnsupportedFeatureError):
    _code = 0x_02_00_00_01


class UnsupportedArgumentTypeError(UnsupportedFeatureError):
    _code = 0x_02_00_00_02


class CompileError(CollGraphError):
    _code = 0x_03_00_00_00


class UnsupportedScalarTypeError(CompileError):
    _code = 0x_03_00_00_01


class UnrecognizedTypeError(CompileError):
    _code = 0x_03_00_00_02


class SchemaNameMismatchError(CompileError):
    _code = 0x_03_00_00_03


class QueryDocumentError(CollGraphError):
    _code = 0x_04_00_00_00


class QuerySyntaxError(QueryDocumentError):
    _code = 0x_04_00_00_01


class MultiOperationDocumentError(QueryDocumentError):
    _code = 0x_04_00_00_02


class UnsupportedOperationKindError(QueryDocumentError):
    _code = 0x_04_00_00_03


class MissingOperationNameError(QueryDocumentError):
    _code = 0x_04_00_00_04


class QueryValidationError(CollGraphError):
    _code = 0x_05_00_00_00

    def __init__(
        self,
        msg: Optional[str] = None,
        *,
        graphql_errors: Optional[List[Any]] = None,
        **kwargs: Any,
    ):
        super().__init__(msg, **kwargs)
        self.graphql_errors = list(graphql_errors or ())


class ExecutionError(CollGraphError):
    _code = 0x_06_00_00_00


class AccessorError(ExecutionError):
    _code = 0x_06_00_00_01


class CardinalityViolationError(ExecutionError):
    _code = 0x_06_00_00_02

    def __init__(
        self,
        msg: Optional[str] = None,
        *,
        count: int,
        **kwargs: Any,
    ):
        super().__init__(msg, **kwargs)
        self.count = count


class InvalidVariablesError(ExecutionError):
    _code = 0x_06_00_00_03


class MissingKeyFieldError(ExecutionError):
    _code = 0x_06_00_00_04
