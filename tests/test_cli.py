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



import json
import os
import tempfile
import unittest

from click.testing import CliRunner

from collgraph import cli

from . import configs


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

        raw = configs.user_order_config()
        raw['indexes'] = configs.USER_ORDER_INDEXES
        self.config = self.write('config.json', json.dumps(raw))
        self.data = self.write(
            'data.json', json.dumps(configs.USER_ORDER_DATA))
        self.query = self.write('query.graphql', '''
            query user_by_order($order_id: String) {
                order_collection(order_id: $order_id) {
                    description
                    user_connection { first_name }
                }
            }
        ''')
        self.runner = CliRunner()

    def write(self, name, text):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'wt') as f:
            f.write(text)
        return path

    def test_cli_schema(self):
        result = self.runner.invoke(cli.cli, ['schema', self.config])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('type order_collection', result.output)
        self.assertIn('type Query', result.output)

    def test_cli_query(self):
        result = self.runner.invoke(cli.cli, [
            'query', self.config, self.query,
            '--data', self.data,
            '--var', 'order_id=order_id_3',
        ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output), {
            'order_collection': [{
                'description': 'first order of Vasiliy',
                'user_connection': {'first_name': 'Vasiliy'},
            }],
        })

    def test_cli_query_logs_loaded_data(self):
        with self.assertLogs('collgraph.cli', level='INFO') as cm:
            result = self.runner.invoke(cli.cli, [
                'query', self.config, self.query,
                '--data', self.data,
                '--var', 'order_id=order_id_1',
            ])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(
            'INFO:collgraph.cli:loaded 2 object(s) into user_collection',
            cm.output)
        self.assertIn(
            'INFO:collgraph.cli:loaded 3 object(s) into order_collection',
            cm.output)

    def test_cli_query_stdin(self):
        with open(self.query, 'rt') as f:
            text = f.read()
        result = self.runner.invoke(
            cli.cli,
            ['query', self.config, '-', '--data', self.data,
             '--variables', '{"order_id": "order_id_2"}'],
            input=text,
        )
        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(result.output)
        self.assertEqual(
            data['order_collection'][0]['description'],
            'second order of Ivan')

    def test_cli_query_error(self):
        query = self.write('bad.graphql', '{ order_collection { x } }')
        result = self.runner.invoke(
            cli.cli, ['query', self.config, query])
        self.assertEqual(result.exit_code, 1)
        self.assertIn('MissingOperationNameError', result.output)

    def test_cli_bad_variables(self):
        result = self.runner.invoke(cli.cli, [
            'query', self.config, self.query, '--variables', '[1]'])
        self.assertEqual(result.exit_code, 2)
        self.assertIn('JSON object', result.output)

        result = self.runner.invoke(cli.cli, [
            'query', self.config, self.query, '--var', 'order_id'])
        self.assertEqual(result.exit_code, 2)
        self.assertIn('NAME=VALUE', result.output)

    def test_cli_bad_config(self):
        config = self.write('broken.json', '{"schemas": {}}')
        result = self.runner.invoke(cli.cli, ['schema', config])
        self.assertEqual(result.exit_code, 1)
        self.assertIn('collections', result.output)


class TestParseVars(unittest.TestCase):

    def test_cli_parse_vars(self):
        self.assertEqual(
            cli._parse_vars('{"a": 1}', ('b=2', 'c=word', 'a=3')),
            {'a': 3, 'b': 2, 'c': 'word'})
        self.assertEqual(cli._parse_vars(None, ()), {})
