#!/usr/bin/env python3

import unittest

from uiccsim.app import AppType, CardApplication
from uiccsim.card import CardKeys, SimulatedCard
from uiccsim.exceptions import ChannelLimitReached, ChannelNotFound, UnknownApplication
from uiccsim.runtime import RuntimeState, MAX_LOGICAL_CHANNELS, SESSION_ID_BASE, SESSION_ID_MAX

AIDS = ['a0000000871002', 'a0000000871004', 'a0000000090001', 'a0000000090002',
        'a0000000090003', 'a0000000090004']

def make_card() -> SimulatedCard:
    keys = CardKeys('465b5ce8b199b49faa5f0a2ee238a6bc', 'cd63cb71954a9f4e48a5994e37a02baf', 'ff9bb4d0b607')
    apps = [CardApplication(AIDS[0], AppType.USIM), CardApplication(AIDS[1], AppType.ISIM)]
    apps += [CardApplication(aid) for aid in AIDS[2:]]
    return SimulatedCard(keys, apps)

class TestRuntimeState(unittest.TestCase):
    def setUp(self):
        self.rs = RuntimeState(make_card())

    def test_first_session_id(self):
        self.assertEqual(self.rs.open_channel(AIDS[1]), SESSION_ID_BASE)
        self.assertEqual(SESSION_ID_BASE, 257)

    def test_channel_limit(self):
        ids = [self.rs.open_channel(aid) for aid in AIDS[:MAX_LOGICAL_CHANNELS]]
        self.assertEqual(len(set(ids)), MAX_LOGICAL_CHANNELS)
        with self.assertRaises(ChannelLimitReached):
            self.rs.open_channel(AIDS[4])
        self.rs.close_channel(ids[2])
        session_id = self.rs.open_channel(AIDS[5])
        self.assertNotIn(session_id, [ids[0], ids[1], ids[3]])
        self.assertEqual(self.rs.lookup(session_id).aid, AIDS[5])

    def test_lookup(self):
        session_id = self.rs.open_channel('a0000000871004')
        lchan = self.rs.lookup(session_id)
        self.assertEqual(lchan.session_id, session_id)
        self.assertEqual(lchan.app.app_type, AppType.ISIM)

    def test_partial_aid(self):
        session_id = self.rs.open_channel('A000000087')
        self.assertEqual(self.rs.lookup(session_id).aid, AIDS[0])

    def test_unknown_application(self):
        with self.assertRaises(UnknownApplication):
            self.rs.open_channel('a0000000ff')
        self.assertEqual(len(self.rs.lchan), 0)

    def test_close_unknown(self):
        self.rs.close_channel(1234)
        with self.assertRaises(ChannelNotFound):
            self.rs.lookup(1234)

    def test_close_idempotent(self):
        session_id = self.rs.open_channel(AIDS[0])
        self.rs.close_channel(session_id)
        self.rs.close_channel(session_id)
        with self.assertRaises(ChannelNotFound):
            self.rs.lookup(session_id)

    def test_session_id_wrap(self):
        first = self.rs.open_channel(AIDS[0])
        self.rs._next_session_id = SESSION_ID_MAX
        self.assertEqual(self.rs.open_channel(AIDS[1]), SESSION_ID_MAX)
        # 257 is still in use and must be skipped
        self.assertEqual(first, SESSION_ID_BASE)
        self.assertEqual(self.rs.open_channel(AIDS[2]), SESSION_ID_BASE + 1)

    def test_independent_lines(self):
        card = make_card()
        rs1 = RuntimeState(card)
        rs2 = RuntimeState(card)
        self.assertEqual(rs1.open_channel(AIDS[0]), SESSION_ID_BASE)
        self.assertEqual(rs2.open_channel(AIDS[0]), SESSION_ID_BASE)
        rs1.close_channel(SESSION_ID_BASE)
        self.assertEqual(rs2.lookup(SESSION_ID_BASE).aid, AIDS[0])

    def test_reset(self):
        session_id = self.rs.open_channel(AIDS[0])
        self.rs.reset()
        with self.assertRaises(ChannelNotFound):
            self.rs.lookup(session_id)

if __name__ == "__main__":
    unittest.main()
