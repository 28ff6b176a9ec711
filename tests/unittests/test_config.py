#!/usr/bin/env python3

import os
import tempfile
import unittest

from osmocom.utils import b2h

from uiccsim.app import AppType
from uiccsim.config import load_card_config, card_from_dict, card_keys_from_dict
from uiccsim.exceptions import ConfigError

TEST_CONFIG = os.path.join(os.path.dirname(__file__), 'card_test.yaml')

KEYS = {
    'ki': '465b5ce8b199b49faa5f0a2ee238a6bc',
    'opc': 'cd63cb71954a9f4e48a5994e37a02baf',
    'sqn': 'ff9bb4d0b607',
}

class TestLoadConfig(unittest.TestCase):
    def test_load(self):
        card = load_card_config(TEST_CONFIG)
        self.assertEqual(b2h(card.keys.sqn), 'ff9bb4d0b607')
        apps = list(card.applications)
        self.assertEqual(len(apps), 2)
        self.assertEqual(apps[0].app_type, AppType.USIM)
        self.assertEqual(apps[1].app_type, AppType.ISIM)
        self.assertEqual(apps[1].label, 'IMS')
        self.assertIsNone(apps[0].fs)
        self.assertEqual(apps[1].fs.file_access('176,28418,0,0,2'), (True, '144,0,800F'))

    def test_not_yaml(self):
        with tempfile.NamedTemporaryFile('w', suffix='.yaml', delete=False) as f:
            f.write('ki: [unterminated\n')
        try:
            with self.assertRaises(ConfigError):
                load_card_config(f.name)
        finally:
            os.unlink(f.name)

class TestCardKeys(unittest.TestCase):
    def test_op(self):
        d = dict(KEYS)
        del d['opc']
        d['op'] = 'cdc202d5123e20f62b6d676ac72cb318'
        keys = card_keys_from_dict(d)
        self.assertEqual(b2h(keys.opc), 'cd63cb71954a9f4e48a5994e37a02baf')

    def test_op_and_opc(self):
        d = dict(KEYS, op='cdc202d5123e20f62b6d676ac72cb318')
        with self.assertRaises(ConfigError):
            card_keys_from_dict(d)

    def test_missing(self):
        for name in KEYS:
            d = dict(KEYS)
            del d[name]
            with self.assertRaises(ConfigError):
                card_keys_from_dict(d)

    def test_wrong_length(self):
        with self.assertRaises(ConfigError):
            card_keys_from_dict(dict(KEYS, ki='465b5ce8b199b49faa5f0a2ee238a6'))
        with self.assertRaises(ConfigError):
            card_keys_from_dict(dict(KEYS, sqn='ff9bb4d0b6'))

    def test_not_hex(self):
        with self.assertRaises(ConfigError):
            card_keys_from_dict(dict(KEYS, opc='xd63cb71954a9f4e48a5994e37a02baf'))

    def test_unquoted_number(self):
        with self.assertRaises(ConfigError):
            card_keys_from_dict(dict(KEYS, sqn=123456789012))

    def test_read_only(self):
        keys = card_keys_from_dict(KEYS)
        with self.assertRaises(AttributeError):
            keys.sqn = b'\x00' * 6
        self.assertNotIn(KEYS['ki'], repr(keys))

class TestApplications(unittest.TestCase):
    def test_type_names(self):
        card = card_from_dict(dict(KEYS, applications=[
            {'aid': 'a0000000871002', 'type': 'usim'},
            {'aid': 'a0000000871004', 'type': 'ISim'},
            {'aid': 'a0000000090001', 'type': 'foo'},
            {'aid': 'a0000000090002'}]))
        self.assertEqual([a.app_type for a in card.applications],
                         [AppType.USIM, AppType.ISIM, AppType.UNKNOWN, AppType.UNKNOWN])

    def test_no_applications(self):
        card = card_from_dict(dict(KEYS))
        self.assertEqual(len(card.applications), 0)

    def test_invalid_aid(self):
        with self.assertRaises(ConfigError):
            card_from_dict(dict(KEYS, applications=[{'aid': 'a000'}]))
        with self.assertRaises(ConfigError):
            card_from_dict(dict(KEYS, applications=[{'type': 'USIM'}]))

    def test_invalid_files(self):
        with self.assertRaises(ConfigError):
            card_from_dict(dict(KEYS, applications=[{'aid': 'a0000000871004', 'files': {'6f02': 'zz'}}]))
        with self.assertRaises(ConfigError):
            card_from_dict(dict(KEYS, applications=[{'aid': 'a0000000871004', 'files': {6702: '00'}}]))

    def test_not_a_mapping(self):
        with self.assertRaises(ConfigError):
            card_from_dict(['ki'])

if __name__ == "__main__":
    unittest.main()
