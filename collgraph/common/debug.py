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


"""Debug flags and output facilities.

An example code using this module:

    if debug.flags.graphql_compile:
        debug.header('GraphQL Schema')
        debug.print(graphql.print_schema(schema))

Use `debug.header()` and `debug.print()` functions as opposed to using
'print' built-in directly.  This gives us flexibility to redirect debug
output if needed.
"""


from __future__ import annotations

import builtins
import contextlib
import os
import time
import warnings

# Don't import anything from "collgraph.*" as it will wreck coverage.


__all__ = ()  # Don't.


ENV_PREFIX = 'COLLGRAPH_DEBUG_'


class FlagsMeta(type):
    def __new__(mcls, name, bases, dct):
        flags = {}
        for flagname, flag in dct.items():
            if not isinstance(flag, Flag):
                continue
            flag.name = flagname
            flags[flagname] = flag
            dct[flagname] = False

        dct['_items'] = flags
        return super().__new__(mcls, name, bases, dct)

    def __iter__(cls):
        return iter(cls._items.values())


class Flag:
    def __init__(self, *, doc: str):
        self.name = None
        self.doc = doc


class flags(metaclass=FlagsMeta):
    graphql_compile = Flag(
        doc="Dump the assembled GraphQL schema and compiled query documents.")

    graphql_execute = Flag(
        doc="Print accessor calls and their results during GraphQL "
            "execution.")

    print_locals = Flag(
        doc="Include values of local variables in tracebacks.")


@contextlib.contextmanager
def timeit(title='block'):
    st = time.monotonic()
    try:
        yield
    finally:
        print(f'{title} took {time.monotonic() - st:.4f}s')


def header(*args):
    print('=' * 80)
    print(*args)
    print('=' * 80)


def print(*args):
    builtins.print(*args)


def init_debug_flags(environ=None):
    if environ is None:
        environ = os.environ

    for env_name, env_val in environ.items():
        if not env_name.startswith(ENV_PREFIX):
            continue

        name = env_name[len(ENV_PREFIX):].lower()
        if not hasattr(flags, name):
            warnings.warn(f'Unknown debug flag: {env_name!r}', stacklevel=2)
            continue

        if env_val.strip() in {'', '0'}:
            continue

        setattr(flags, name, True)


init_debug_flags()
