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
from typing import Any, Mapping, NamedTuple, Optional, Sequence

import abc


class SelectSource(NamedTuple):
    """Where a connection fetch comes from.

    Passed to ``Accessor.select()`` as *from_* for every fetch made while
    resolving a connection; root-level fetches pass ``None`` instead.
    """

    collection_name: str
    connection_name: str


class Accessor(abc.ABC):
    """Data retrieval backend used by the GraphQL resolvers.

    The compiled schema never touches storage directly: every root
    field and every connection field is resolved with a single call
    to ``select()``.
    """

    @abc.abstractmethod
    def select(
        self,
        parent: Optional[Mapping[str, Any]],
        collection_name: str,
        from_: Optional[SelectSource],
        filter: Mapping[str, Any],
        args: Mapping[str, Any],
    ) -> Sequence[Mapping[str, Any]]:
        """Return objects of *collection_name* matching *filter*.

        *parent* is the object a connection is resolved for (None at
        the top level), *args* holds any additional arguments passed
        by the query: extra filtering and the pagination controls
        declared by ``arguments()``.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def arguments(
        self,
        connection_type: str,
    ) -> Sequence[Mapping[str, Any]]:
        """Declare extra arguments of connections of *connection_type*.

        Each argument is a mapping with ``name`` and ``type`` keys, the
        type being a scalar schema descriptor such as ``"int"``.
        """
        raise NotImplementedError
