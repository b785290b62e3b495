#!/usr/bin/env python3
"""
Unit tests for the JSON persistence layer.

Run with:
    python -m pytest tests/test_repository.py
"""
import datetime
import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from grindom.models import Client, Order, OrderStatus, Payload
from grindom.repositories import PayloadRepository

UTC = datetime.timezone.utc
WHEN = datetime.datetime(2026, 3, 1, 10, 30, 15, tzinfo=UTC)


class TmpDirMixin(unittest.TestCase):
    """Creates a fresh temp directory for each test."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _path(self, name: str) -> str:
        return os.path.join(self.tmp, name)


def sample_payload() -> Payload:
    anna = Client(name='Anna', note='Prefers short style', created_at=WHEN)
    mark = Client(name='Mark', created_at=WHEN, is_archived=True)
    orders = [
        Order(client_id=anna.id, service_name='Haircut', service_icon='scissors',
              service_color_hex='#FFA500', price=30, date=WHEN,
              status=OrderStatus.DONE, created_at=WHEN),
        Order(client_id=mark.id, service_name='Photo', price=70.5,
              date=WHEN + datetime.timedelta(days=1), note='outdoor',
              status=OrderStatus.CANCELED, created_at=WHEN),
    ]
    return Payload(clients=[anna, mark], orders=orders, seeded_at=WHEN)


class TestPayloadRepositoryLoadSave(TmpDirMixin):

    def _make(self, name='data.json'):
        return PayloadRepository(self._path(name))

    def test_round_trip(self):
        repo = self._make()
        payload = sample_payload()
        self.assertTrue(repo.save(payload))
        self.assertEqual(repo.load(), payload)

    def test_persisted_across_instances(self):
        payload = sample_payload()
        self._make().save(payload)
        loaded = self._make().load()
        self.assertEqual({c.id for c in loaded.clients}, {c.id for c in payload.clients})
        self.assertEqual({o.id for o in loaded.orders}, {o.id for o in payload.orders})

    def test_file_format(self):
        repo = self._make()
        repo.save(sample_payload())
        with open(repo.path, encoding='utf-8') as f:
            text = f.read()
        doc = json.loads(text)
        self.assertEqual(list(doc), ['clients', 'orders', 'seededAt'])
        self.assertEqual(list(doc['orders'][0]), sorted(doc['orders'][0]))
        self.assertEqual(doc['orders'][0]['status'], 'Done')
        self.assertTrue(doc['seededAt'].startswith('2026-03-01T10:30:15'))
        self.assertIn('\n  "clients"', text)

    def test_save_is_deterministic(self):
        repo = self._make()
        payload = sample_payload()
        repo.save(payload)
        with open(repo.path, 'rb') as f:
            first = f.read()
        repo.save(payload)
        with open(repo.path, 'rb') as f:
            self.assertEqual(f.read(), first)

    def test_save_leaves_no_temp_files(self):
        repo = self._make()
        repo.save(sample_payload())
        self.assertEqual(os.listdir(self.tmp), ['data.json'])

    def test_save_creates_missing_directory(self):
        repo = PayloadRepository(os.path.join(self.tmp, 'nested', 'dir', 'data.json'))
        self.assertTrue(repo.save(sample_payload()))
        self.assertTrue(repo.exists())

    def test_save_failure_returns_false(self):
        repo = self._make()
        with patch('grindom.repositories.base.os.replace', side_effect=OSError('disk full')):
            with self.assertLogs('grindom.repository', level='ERROR'):
                self.assertFalse(repo.save(sample_payload()))
        self.assertFalse(repo.exists())
        self.assertEqual(os.listdir(self.tmp), [])

    def test_failed_save_keeps_previous_file(self):
        repo = self._make()
        original = sample_payload()
        repo.save(original)
        with patch('grindom.repositories.base.os.replace', side_effect=OSError('boom')):
            with self.assertLogs('grindom.repository', level='ERROR'):
                repo.save(Payload())
        self.assertEqual(repo.load(), original)


class TestPayloadRepositorySeed(TmpDirMixin):

    def _make(self):
        return PayloadRepository(self._path('data.json'))

    def test_missing_file_seeds(self):
        payload = self._make().load()
        self.assertEqual(len(payload.clients), 3)
        self.assertEqual(len(payload.orders), 3)
        self.assertIsNotNone(payload.seeded_at)

    def test_seed_is_persisted_and_reread_identically(self):
        repo = self._make()
        first = repo.load()
        self.assertTrue(repo.exists())
        self.assertEqual(repo.load(), first)

    def test_seed_contents(self):
        now = datetime.datetime(2026, 5, 10, 12, 0, tzinfo=UTC)
        payload = self._make().seed(now=now)
        self.assertEqual([c.name for c in payload.clients], ['Anna', 'Mark', 'Sofia'])
        self.assertEqual([o.status for o in payload.orders],
                         [OrderStatus.NEW, OrderStatus.IN_PROGRESS, OrderStatus.DONE])
        self.assertEqual([o.service_name for o in payload.orders],
                         ['Haircut', 'Manicure', 'Photo'])
        self.assertEqual([o.price for o in payload.orders], [30, 25, 70])
        self.assertEqual(payload.orders[1].date, now - datetime.timedelta(days=1))
        client_ids = {c.id for c in payload.clients}
        self.assertTrue(all(o.client_id in client_ids for o in payload.orders))

    def test_corrupt_file_falls_back_to_seed(self):
        repo = self._make()
        with open(repo.path, 'w') as f:
            f.write('NOT JSON')
        with self.assertLogs('grindom.repository', level='WARNING'):
            payload = repo.load()
        self.assertEqual(len(payload.clients), 3)

    def test_malformed_payload_falls_back_to_seed(self):
        repo = self._make()
        with open(repo.path, 'w') as f:
            json.dump({'clients': [{'name': ''}], 'orders': []}, f)
        with self.assertLogs('grindom.repository', level='WARNING'):
            payload = repo.load()
        self.assertEqual(len(payload.orders), 3)

    def test_clear(self):
        repo = self._make()
        repo.load()
        self.assertTrue(repo.clear())
        self.assertFalse(repo.exists())

    def test_clear_missing_returns_false(self):
        self.assertFalse(self._make().clear())


if __name__ == '__main__':
    unittest.main()
