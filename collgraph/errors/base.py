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

from typing import Any, Optional, Type, Dict


__all__ = (
    'CollGraphError',
)


class CollGraphErrorMeta(type):
    _error_map: Dict[int, Type[CollGraphError]] = {}
    _name_map: Dict[str, Type[CollGraphError]] = {}

    def __new__(mcls, name, bases, dct):
        cls = super().__new__(mcls, name, bases, dct)

        assert name not in mcls._name_map
        mcls._name_map[name] = cls

        code = dct.get('_code')
        if code is not None:
            assert code not in mcls._error_map, \
                f'duplicate error code {code:#x} ({name})'
            mcls._error_map[code] = cls

        return cls

    def __init__(cls, name, bases, dct):
        if cls._code is None and cls.__module__ != __name__:
            # We don't want any CollGraphError subclasses to not
            # have a code.
            raise RuntimeError(
                'direct subclassing of CollGraphError is prohibited; '
                'subclass one of its subclasses in collgraph.errors')

    @classmethod
    def get_error_class_from_code(mcls, code: int) -> Type[CollGraphError]:
        return mcls._error_map[code]


class CollGraphError(Exception, metaclass=CollGraphErrorMeta):

    _code: Optional[int] = None
    _attrs: Dict[int, str]

    def __init__(
        self,
        msg: Optional[str] = None,
        *,
        hint: Optional[str] = None,
        details: Optional[str] = None,
        line: Optional[int] = None,
        col: Optional[int] = None,
    ):
        if type(self) is CollGraphError:
            raise RuntimeError(
                'CollGraphError is not supposed to be instantiated directly')

        self._attrs = {}
        self.set_linecol(line, col)
        self.set_hint_and_details(hint, details)

        super().__init__(msg)

    @classmethod
    def get_code(cls):
        if cls._code is None:
            raise RuntimeError(
                f'error code is not set (type: {cls.__name__})')
        return cls._code

    def to_json(self) -> Dict[str, Any]:
        err_dct: Dict[str, Any] = {
            'message': str(self),
            'type': str(type(self).__name__),
            'code': self.get_code(),
        }
        for name, field in _JSON_FIELDS.items():
            if field in self._attrs:
                val: Any = self._attrs[field]
                if field in _INT_FIELDS:
                    val = int(val)
                err_dct[name] = val

        return err_dct

    def set_linecol(self, line: Optional[int], col: Optional[int]):
        if line is not None:
            self._attrs[FIELD_LINE_START] = str(line)
        if col is not None:
            self._attrs[FIELD_COLUMN_START] = str(col)

    def set_hint_and_details(self, hint, details=None):
        if hint is not None:
            self._attrs[FIELD_HINT] = hint
        if details is not None:
            self._attrs[FIELD_DETAILS] = details

    @property
    def line(self):
        return int(self._attrs.get(FIELD_LINE_START, -1))

    @property
    def col(self):
        return int(self._attrs.get(FIELD_COLUMN_START, -1))

    @property
    def hint(self):
        return self._attrs.get(FIELD_HINT)

    @property
    def details(self):
        return self._attrs.get(FIELD_DETAILS)


FIELD_HINT = 0x_00_01
FIELD_DETAILS = 0x_00_02

FIELD_LINE_START = 0x_FF_F3
FIELD_COLUMN_START = 0x_FF_F4

_INT_FIELDS = {
    FIELD_LINE_START,
    FIELD_COLUMN_START,
}

_JSON_FIELDS = {
    'hint': FIELD_HINT,
    'details': FIELD_DETAILS,
    'line': FIELD_LINE_START,
    'col': FIELD_COLUMN_START,
}
