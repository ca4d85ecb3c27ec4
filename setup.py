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


import pathlib
import re

import setuptools


ROOT_PATH = pathlib.Path(__file__).parent.resolve()

RUNTIME_DEPS = [
    'graphql-core>=3.2,<3.3',
    'immutables>=0.18',
    'click>=8.0',
]

TEST_DEPS = [
    'pytest>=7',
]


def _version():
    init = ROOT_PATH / 'collgraph' / '__init__.py'
    with open(init, 'rt') as f:
        m = re.search(r"^__version__ = '([^']+)'", f.read(), re.M)
    if m is None:
        raise RuntimeError(f'unable to find __version__ in {init}')
    return m.group(1)


setuptools.setup(
    name='collgraph',
    version=_version(),
    description='GraphQL queries over collections of connected objects',
    license='Apache License, Version 2.0',
    python_requires='>=3.9',
    packages=setuptools.find_packages(
        include=['collgraph', 'collgraph.*']),
    install_requires=RUNTIME_DEPS,
    extras_require={
        'test': TEST_DEPS,
    },
    entry_points={
        'console_scripts': [
            'collgraph = collgraph.cli:main',
        ],
    },
)
