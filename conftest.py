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



from collgraph.common import debug


def pytest_addoption(parser):
    parser.addoption(
        "--collgraph-debug", dest="collgraph_debug", action="append",
        help="enable debug flags (comma-separated), e.g. graphql_compile")


def pytest_configure(config):
    sd = config.getvalue('collgraph_debug')
    if not sd:
        return

    for d in sd:
        for name in d.split(","):
            name = name.strip()
            if not name:
                continue
            if not hasattr(debug.flags, name):
                raise ValueError(f'unknown debug flag: {name!r}')
            setattr(debug.flags, name, True)
