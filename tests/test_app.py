#!/usr/bin/env python3
"""
Tests for configuration loading, logging setup and the command-line front end.

Run with:
    python -m pytest tests/test_app.py
"""
import contextlib
import io
import json
import logging
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grindom import app
from grindom.config import ENV_OVERRIDES, load_config
from grindom.models import OrderStatus
from grindom.repositories import PayloadRepository

NO_ENV = {name: '' for name in ENV_OVERRIDES}


class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _path(self, name: str) -> str:
        return os.path.join(self.tmp, name)

    def _write_config(self, data) -> str:
        path = self._path('config.json')
        with open(path, 'w') as f:
            json.dump(data, f)
        return path


class TestLoadConfig(TmpDirMixin):

    def test_missing_file_gives_defaults(self):
        with patch.dict(os.environ, NO_ENV):
            config = load_config(self._path('nope.json'))
        self.assertEqual(config.currency_code, 'USD')
        self.assertEqual(config.log_level, 'WARNING')
        self.assertEqual(config.analytics_period_days, 30)
        self.assertEqual(config.data_file, 'grindomapp.data.json')

    def test_file_values(self):
        path = self._write_config({'data_dir': self.tmp, 'currency_code': 'eur',
                                   'log_level': 'debug', 'analytics_period_days': 7})
        with patch.dict(os.environ, NO_ENV):
            config = load_config(path)
        self.assertEqual(config.currency_code, 'EUR')
        self.assertEqual(config.log_level, 'DEBUG')
        self.assertEqual(config.analytics_period_days, 7)
        self.assertEqual(config.data_path, os.path.join(self.tmp, 'grindomapp.data.json'))

    def test_environment_overrides_file(self):
        path = self._write_config({'currency_code': 'EUR', 'data_dir': '/nowhere'})
        env = dict(NO_ENV, GRINDOM_CURRENCY='gbp', GRINDOM_DATA_DIR=self.tmp)
        with patch.dict(os.environ, env):
            config = load_config(path)
        self.assertEqual(config.currency_code, 'GBP')
        self.assertEqual(config.data_dir, self.tmp)

    def test_invalid_values_fall_back(self):
        path = self._write_config({'log_level': 'LOUD', 'analytics_period_days': 0,
                                   'currency_code': 'JPY', 'unknown_key': 1})
        with patch.dict(os.environ, NO_ENV):
            with self.assertLogs('grindom.config', level='WARNING'):
                config = load_config(path)
        self.assertEqual(config.log_level, 'WARNING')
        self.assertEqual(config.analytics_period_days, 30)
        self.assertEqual(config.currency_code, 'JPY')

    def test_unreadable_file_gives_defaults(self):
        path = self._path('config.json')
        with open(path, 'w') as f:
            f.write('{broken')
        with patch.dict(os.environ, NO_ENV):
            with self.assertLogs('grindom.config', level='WARNING'):
                config = load_config(path)
        self.assertEqual(config.currency_code, 'USD')


class TestSetupLogging(unittest.TestCase):

    def test_idempotent(self):
        logger = app.setup_logging('INFO')
        app.setup_logging('DEBUG')
        streams = [h for h in logger.handlers
                   if isinstance(h, logging.StreamHandler)
                   and not isinstance(h, logging.FileHandler)]
        self.assertEqual(len(streams), 1)
        self.assertEqual(logger.level, logging.DEBUG)
        app.setup_logging('WARNING')

    def test_unknown_level_defaults_to_warning(self):
        self.assertEqual(app.setup_logging('chatty').level, logging.WARNING)


@patch('grindom.app.init', lambda **kwargs: None)
class TestCli(TmpDirMixin):

    def setUp(self):
        super().setUp()
        self.config_path = self._write_config({'data_dir': self.tmp})
        self.env = patch.dict(os.environ, NO_ENV)
        self.env.start()
        self.addCleanup(self.env.stop)

    def run_cli(self, *argv):
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = app.main(['--config', self.config_path] + list(argv))
        return code, out.getvalue()

    def repo(self) -> PayloadRepository:
        return PayloadRepository(self._path('grindomapp.data.json'))

    def test_board_seeds_on_first_run(self):
        code, out = self.run_cli('board')
        self.assertEqual(code, 0)
        self.assertIn('In Progress', out)
        self.assertIn('Anna', out)
        self.assertTrue(self.repo().exists())

    def test_add_client_then_list(self):
        self.assertEqual(self.run_cli('add-client', 'Dana', '--note', 'VIP')[0], 0)
        code, out = self.run_cli('clients', '--search', 'vip')
        self.assertEqual(code, 0)
        self.assertIn('Dana', out)
        self.assertNotIn('Mark', out)

    def test_add_client_empty_name_fails(self):
        code, out = self.run_cli('add-client', '  ')
        self.assertEqual(code, 1)
        self.assertIn('Error', out)

    def test_add_order_and_advance(self):
        code, _ = self.run_cli('add-order', 'mark', 'photo', '--price', '80',
                               '--date', '2026-03-01T10:00')
        self.assertEqual(code, 0)
        order = next(o for o in self.repo().load().orders if o.price == 80)
        self.assertEqual(order.status, OrderStatus.NEW)

        self.assertEqual(self.run_cli('advance', str(order.id)[:8])[0], 0)
        stored = next(o for o in self.repo().load().orders if o.id == order.id)
        self.assertEqual(stored.status, OrderStatus.IN_PROGRESS)

        self.assertEqual(self.run_cli('move', str(order.id), 'Done')[0], 0)
        stored = next(o for o in self.repo().load().orders if o.id == order.id)
        self.assertEqual(stored.status, OrderStatus.DONE)

    def test_add_order_unknown_template(self):
        code, out = self.run_cli('add-order', 'Anna', 'Massage')
        self.assertEqual(code, 1)
        self.assertIn('Massage', out)

    def test_delete_client_cascades(self):
        self.run_cli('board')
        code, out = self.run_cli('delete-client', 'Sofia')
        self.assertEqual(code, 0)
        self.assertIn('1 order(s)', out)
        payload = self.repo().load()
        self.assertEqual(len(payload.clients), 2)
        self.assertEqual(len(payload.orders), 2)

    def test_analytics(self):
        code, out = self.run_cli('analytics', '--period', '7')
        self.assertEqual(code, 0)
        self.assertIn('last 7d', out)
        self.assertIn('Photo', out)
        self.assertIn('$70.00', out)

    def test_templates(self):
        code, out = self.run_cli('templates')
        self.assertEqual(code, 0)
        self.assertIn('Consulting', out)

    def test_reset(self):
        self.run_cli('board')
        code, _ = self.run_cli('reset')
        self.assertEqual(code, 0)
        self.assertFalse(self.repo().exists())


if __name__ == '__main__':
    unittest.main()
