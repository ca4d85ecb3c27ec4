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

from collgraph import errors
from collgraph.errors import base as errors_base


class ErrorsTests(unittest.TestCase):

    def test_errors_hierarchy(self):
        for name in errors.__all__:
            cls = getattr(errors, name)
            with self.subTest(error=name):
                self.assertTrue(issubclass(cls, errors.CollGraphError))
                if cls is not errors.CollGraphError:
                    self.assertIs(
                        errors_base.CollGraphErrorMeta
                        .get_error_class_from_code(cls.get_code()),
                        cls)

        self.assertTrue(issubclass(
            errors.DanglingConnectionError, errors.ConfigurationError))
        self.assertTrue(issubclass(
            errors.CardinalityViolationError, errors.ExecutionError))
        self.assertTrue(issubclass(
            errors.MissingOperationNameError, errors.QueryDocumentError))

    def test_errors_to_json(self):
        err = errors.QuerySyntaxError(
            'unexpected token', line=3, col=7, hint='check braces')
        self.assertEqual(err.to_json(), {
            'message': 'unexpected token',
            'type': 'QuerySyntaxError',
            'code': errors.QuerySyntaxError.get_code(),
            'hint': 'check braces',
            'line': 3,
            'col': 7,
        })
        self.assertEqual(err.line, 3)
        self.assertIsNone(err.details)

        err = errors.AccessorError('boom')
        self.assertEqual(err.line, -1)
        self.assertEqual(set(err.to_json()), {'message', 'type', 'code'})

    def test_errors_base_not_instantiable(self):
        with self.assertRaises(RuntimeError):
            errors.CollGraphError('nope')

        with self.assertRaises(RuntimeError):
            class Bad(errors.CollGraphError):
                pass

    def test_errors_cardinality_count(self):
        err = errors.CardinalityViolationError('two', count=2)
        self.assertEqual(err.count, 2)
