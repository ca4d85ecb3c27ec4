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


from __future__ import annotations

import contextlib
import contextvars
import logging


current_operation = contextvars.ContextVar(
    "current_operation", default="-")


class CollGraphLogger(logging.Logger):

    def makeRecord(
        self,
        name,
        level,
        fn,
        lno,
        msg,
        args,
        exc_info,
        func=None,
        extra=None,
        sinfo=None,
    ):
        # Unlike the standard Logger class, we allow overwriting
        # all attributes of the log record with stuff from *extra*.
        factory = logging.getLogRecordFactory()
        rv = factory(name, level, fn, lno, msg, args, exc_info, func, sinfo)
        rv.__dict__["operation"] = current_operation.get()
        if extra is not None:
            rv.__dict__.update(extra)
        return rv


class OperationFilter(logging.Filter):
    # Loggers created before early_setup() are plain logging.Logger
    # instances and do not stamp records.

    def filter(self, record):
        if not hasattr(record, "operation"):
            record.operation = current_operation.get()
        return True


@contextlib.contextmanager
def operation_context(name: str):
    token = current_operation.set(name)
    try:
        yield
    finally:
        current_operation.reset(token)


def early_setup():
    logging.setLoggerClass(CollGraphLogger)


def setup_logging(level: int = logging.WARNING) -> None:
    early_setup()
    root = logging.getLogger('collgraph')
    for old in list(root.handlers):
        if getattr(old, '_collgraph_handler', False):
            root.removeHandler(old)

    handler = logging.StreamHandler()
    handler._collgraph_handler = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter(
        '%(levelname)s %(name)s [%(operation)s]: %(message)s'))
    handler.addFilter(OperationFilter())
    root.addHandler(handler)
    root.setLevel(level)
