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


"""Configurations shared by the test suites."""


import copy

from collgraph import accessor as c_accessor


_USER_ORDER_SCHEMAS = {
    'user': {
        'type': 'record',
        'name': 'user',
        'fields': [
            {'name': 'user_id', 'type': 'string'},
            {'name': 'first_name', 'type': 'string'},
            {'name': 'last_name', 'type': 'string'},
        ],
    },
    'order': {
        'type': 'record',
        'name': 'order',
        'fields': [
            {'name': 'order_id', 'type': 'string'},
            {'name': 'user_id', 'type': 'string'},
            {'name': 'description', 'type': 'string'},
        ],
    },
}

_USER_ORDER_COLLECTIONS = {
    'user_collection': {
        'schema_name': 'user',
        'connections': [
            {
                'type': '1:N',
                'name': 'order_connection',
                'destination_collection': 'order_collection',
                'parts': [
                    {'source_field': 'user_id',
                     'destination_field': 'user_id'},
                ],
                'index_name': 'user_id_index',
            },
        ],
    },
    'order_collection': {
        'schema_name': 'order',
        'connections': [
            {
                'type': '1:1',
                'name': 'user_connection',
                'destination_collection': 'user_collection',
                'parts': [
                    {'source_field': 'user_id',
                     'destination_field': 'user_id'},
                ],
                'index_name': 'user_id_index',
            },
        ],
    },
}

USER_ORDER_INDEXES = {
    'user_collection': {
        'user_id_index': {
            'fields': ['user_id'],
            'unique': True,
            'primary': True,
        },
    },
    'order_collection': {
        'order_id_index': {
            'fields': ['order_id'],
            'unique': True,
            'primary': True,
        },
        'user_id_index': {
            'fields': ['user_id'],
        },
    },
}

USER_ORDER_DATA = {
    'user_collection': [
        {'user_id': 'user_id_1', 'first_name': 'Ivan',
         'last_name': 'Ivanov'},
        {'user_id': 'user_id_2', 'first_name': 'Vasiliy',
         'last_name': 'Pupkin'},
    ],
    'order_collection': [
        {'order_id': 'order_id_1', 'user_id': 'user_id_1',
         'description': 'first order of Ivan'},
        {'order_id': 'order_id_2', 'user_id': 'user_id_1',
         'description': 'second order of Ivan'},
        {'order_id': 'order_id_3', 'user_id': 'user_id_2',
         'description': 'first order of Vasiliy'},
    ],
}


_COMPOUND_SCHEMAS = {
    'user': {
        'type': 'record',
        'name': 'user',
        'fields': [
            {'name': 'user_str', 'type': 'string'},
            {'name': 'user_num', 'type': 'long'},
            {'name': 'first_name', 'type': 'string'},
        ],
    },
    'order': {
        'type': 'record',
        'name': 'order',
        'fields': [
            {'name': 'order_str', 'type': 'string'},
            {'name': 'order_num', 'type': 'long'},
            {'name': 'user_str', 'type': 'string'},
            {'name': 'user_num', 'type': 'long'},
        ],
    },
}

_COMPOUND_COLLECTIONS = {
    'user_collection': {
        'schema_name': 'user',
        'connections': [
            {
                'type': '1:N',
                'name': 'order_connection',
                'destination_collection': 'order_collection',
                'parts': [
                    {'source_field': 'user_str',
                     'destination_field': 'user_str'},
                    {'source_field': 'user_num',
                     'destination_field': 'user_num'},
                ],
            },
        ],
    },
    'order_collection': {
        'schema_name': 'order',
        'connections': [
            {
                'type': '1:1',
                'name': 'user_connection',
                'destination_collection': 'user_collection',
                'parts': [
                    {'source_field': 'user_str',
                     'destination_field': 'user_str'},
                    {'source_field': 'user_num',
                     'destination_field': 'user_num'},
                ],
            },
        ],
    },
}


def user_order_config():
    return {
        'schemas': copy.deepcopy(_USER_ORDER_SCHEMAS),
        'collections': copy.deepcopy(_USER_ORDER_COLLECTIONS),
    }


def compound_config():
    return {
        'schemas': copy.deepcopy(_COMPOUND_SCHEMAS),
        'collections': copy.deepcopy(_COMPOUND_COLLECTIONS),
    }


class StubAccessor(c_accessor.Accessor):
    """Return canned objects per collection and record every call."""

    def __init__(self, objects=None, arguments=None):
        self.objects = objects or {}
        self.extra_arguments = arguments or {}
        self.calls = []

    def select(self, parent, collection_name, from_, filter, args):
        self.calls.append(
            (parent, collection_name, from_, dict(filter), dict(args)))
        objs = self.objects.get(collection_name, [])
        if callable(objs):
            return objs(parent, filter, args)
        return objs

    def arguments(self, connection_type):
        return self.extra_arguments.get(connection_type, ())
