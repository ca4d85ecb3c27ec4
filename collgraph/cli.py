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
from typing import Any, Dict, Tuple

import contextlib
import json
import logging
import traceback

import click

from collgraph import accessor as c_accessor
from collgraph import errors
from collgraph import graphql as c_graphql
from collgraph import schema as s_schema
from collgraph.common import debug
from collgraph.common import log


logger = logging.getLogger('collgraph.cli')


def _load_json(path: str, what: str) -> Any:
    try:
        with click.open_file(path, 'rt') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f'could not parse {what} {path!r}: {e}')


def _make_engine(
    config_path: str,
    data_path: str | None,
) -> c_graphql.GraphQLEngine:
    raw = _load_json(config_path, 'configuration')
    if not isinstance(raw, dict):
        raise click.ClickException('configuration must be a JSON object')

    config = s_schema.load_config(raw)
    accessor = c_accessor.MemoryAccessor(config, raw.get('indexes'))
    if data_path is not None:
        data = _load_json(data_path, 'data file')
        if not isinstance(data, dict):
            raise click.ClickException('data file must be a JSON object')
        accessor.load(data)
        for name in data:
            logger.info(
                'loaded %d object(s) into %s', accessor.count(name), name)

    return c_graphql.GraphQLEngine(config, accessor)


def _parse_vars(
    variables: str | None,
    var: Tuple[str, ...],
) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    if variables is not None:
        try:
            parsed = json.loads(variables)
        except json.JSONDecodeError as e:
            raise click.BadParameter(
                f'not valid JSON: {e}', param_hint='--variables')
        if not isinstance(parsed, dict):
            raise click.BadParameter(
                'must be a JSON object', param_hint='--variables')
        result.update(parsed)

    for item in var:
        name, sep, value = item.partition('=')
        if not sep or not name:
            raise click.BadParameter(
                f'expected NAME=VALUE, got {item!r}', param_hint='--var')
        try:
            result[name] = json.loads(value)
        except json.JSONDecodeError:
            # Bare words are strings.
            result[name] = value

    return result


@click.group(context_settings=dict(help_option_names=['-h', '--help']))
@click.option('--debug', is_flag=True, help='Enable debug logging.')
def cli(debug: bool):
    """Query collections of objects with GraphQL."""
    log.setup_logging(logging.DEBUG if debug else logging.WARNING)


@cli.command('schema')
@click.argument('config', type=click.Path(exists=True, dir_okay=False))
def schema(config: str):
    """Print the GraphQL schema of a configuration."""
    try:
        engine = _make_engine(config, None)
    except errors.CollGraphError as e:
        raise click.ClickException(str(e))
    click.echo(engine.print_schema())


@cli.command('query')
@click.argument('config', type=click.Path(exists=True, dir_okay=False))
@click.argument('query', type=click.Path(allow_dash=True, dir_okay=False))
@click.option('--data', type=click.Path(exists=True, dir_okay=False),
              help='JSON object mapping collection names to objects.')
@click.option('--variables', help='Query variables as a JSON object.')
@click.option('--var', multiple=True, metavar='NAME=VALUE',
              help='A single query variable; may be repeated.')
def query(
    config: str,
    query: str,
    data: str | None,
    variables: str | None,
    var: Tuple[str, ...],
):
    """Run a GraphQL QUERY (a file, or - for stdin)."""
    query_vars = _parse_vars(variables, var)

    with click.open_file(query, 'rt') as f:
        text = f.read()

    timer: Any = contextlib.nullcontext()
    if debug.flags.graphql_execute:
        timer = debug.timeit('query execution')

    try:
        engine = _make_engine(config, data)
        compiled = engine.compile(text)
        with timer:
            result = compiled.execute(query_vars)
    except errors.CollGraphError as e:
        if debug.flags.print_locals:
            tb = traceback.TracebackException.from_exception(
                e, capture_locals=True)
            debug.header('Traceback')
            debug.print(''.join(tb.format()))
        logger.debug('query failed', exc_info=True)
        raise click.ClickException(f'{type(e).__name__}: {e}')

    click.echo(json.dumps(result, indent=2))


def main():
    cli()
