#!/usr/bin/env python3

import asyncio
import unittest

from uiccsim.app import AppType, CardApplication
from uiccsim.card import CardKeys, SimulatedCard
from uiccsim.transport import AtLineDiscipline
from uiccsim.transport.tcp import AtTcpServer

ISIM_AID = 'a0000000871004ff49ff0589'

def make_card() -> SimulatedCard:
    keys = CardKeys('465b5ce8b199b49faa5f0a2ee238a6bc', 'cd63cb71954a9f4e48a5994e37a02baf', 'ff9bb4d0b607')
    return SimulatedCard(keys, [CardApplication(ISIM_AID, AppType.ISIM)])

class TestAtLineDiscipline(unittest.TestCase):
    def setUp(self):
        self.line = AtLineDiscipline(make_card())

    def test_at(self):
        self.assertEqual(self.line.feed(b'AT\r'), b'\r\nOK\r\n')

    def test_ccho(self):
        self.assertEqual(self.line.feed(b'AT+CCHO="%s"\r\n' % ISIM_AID.encode()),
                         b'\r\n+CCHO: 257\r\n\r\nOK\r\n')

    def test_unsupported(self):
        self.assertEqual(self.line.feed(b'ATI\r'), b'\r\nERROR\r\n')

    def test_partial_lines(self):
        self.assertEqual(self.line.feed(b'AT+CCHO=a000'), b'')
        self.assertEqual(self.line.feed(b'0000871004\rAT+CCHC=257\rAT+CC'), b'\r\n+CCHO: 257\r\n\r\nOK\r\n\r\nOK\r\n')
        self.assertEqual(self.line.rs.lchan, {})

    def test_empty_lines(self):
        self.assertEqual(self.line.feed(b'\r\n\r\n'), b'')

    def test_close(self):
        self.line.feed(b'AT+CCHO=a0000000871004\r')
        self.line.close()
        self.assertEqual(self.line.rs.lchan, {})

class TestAtTcpServer(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = AtTcpServer(make_card(), '127.0.0.1', 0)
        await self.server.start()

    async def asyncTearDown(self):
        await self.server.stop()

    async def _xceive(self, reader, writer, cmd: bytes) -> bytes:
        writer.write(cmd + b'\r')
        await writer.drain()
        rsp = b''
        while not (rsp.endswith(b'OK\r\n') or rsp.endswith(b'ERROR\r\n')):
            rsp += await asyncio.wait_for(reader.read(1024), timeout=5)
        return rsp

    async def test_channels_per_connection(self):
        r1, w1 = await asyncio.open_connection('127.0.0.1', self.server.port)
        r2, w2 = await asyncio.open_connection('127.0.0.1', self.server.port)
        try:
            self.assertEqual(await self._xceive(r1, w1, b'AT+CCHO=a0000000871004'), b'\r\n+CCHO: 257\r\n\r\nOK\r\n')
            self.assertEqual(await self._xceive(r2, w2, b'AT+CCHO=a0000000871004'), b'\r\n+CCHO: 257\r\n\r\nOK\r\n')
            self.assertEqual(await self._xceive(r1, w1, b'AT+CCHC=257'), b'\r\nOK\r\n')
            self.assertEqual(await self._xceive(r2, w2, b'AT+CGLA=257,10,"a088008011"'),
                             b'\r\n+CGLA: 4,"6E00"\r\n\r\nOK\r\n')
        finally:
            w1.close()
            w2.close()
            await w1.wait_closed()
            await w2.wait_closed()

if __name__ == "__main__":
    unittest.main()
