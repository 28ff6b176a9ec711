# -*- coding: utf-8 -*-

""" uiccsim: AT command interface on a TCP socket
"""

#
# (C) 2024 by sysmocom - s.f.m.c. GmbH
# All Rights Reserved
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 2 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.
#

import argparse
import asyncio

from uiccsim.card import SimulatedCard
from uiccsim.log import UiccSimLogger
from uiccsim.transport import AtLineDiscipline

log = UiccSimLogger.get("TRANSPORT")


class AtTcpServer:
    """TCP server handing out one AT command line per connection.  All
    connections share the card, each has its own logical channels."""

    def __init__(self, card: SimulatedCard, host: str = '127.0.0.1', port: int = 12345):
        self.card = card
        self.host = host
        self.port = port
        self.clients = set()
        self._server = None

    def __str__(self):
        return "tcp:%s:%u" % (self.host, self.port)

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        peer = writer.get_extra_info('peername')
        line = AtLineDiscipline(self.card, name='%s' % (peer,))
        self.clients.add(line)
        log.info('Client %s connected', line)
        try:
            while True:
                data = await reader.read(1024)
                if not data:
                    break
                rsp = line.feed(data)
                if rsp:
                    writer.write(rsp)
                    await writer.drain()
        except ConnectionError as exc:
            log.info('Client %s: %s', line, exc)
        finally:
            log.info('Client %s disconnected', line)
            line.close()
            self.clients.discard(line)
            writer.close()

    async def start(self):
        self._server = await asyncio.start_server(self.handle_client, self.host, self.port)
        sockname = self._server.sockets[0].getsockname()
        self.port = sockname[1]
        log.info('Serving AT commands on %s', self)

    async def stop(self):
        if self._server:
            self._server.close()
            await self._server.wait_closed()
            self._server = None

    async def serve_forever(self):
        if not self._server:
            await self.start()
        async with self._server:
            await self._server.serve_forever()

    @staticmethod
    def argparse_add_args(arg_parser: argparse.ArgumentParser):
        tcp_group = arg_parser.add_argument_group('TCP AT server')
        tcp_group.add_argument('--bind', dest='host', default='127.0.0.1',
                               help='Local address to bind the AT command server to')
        tcp_group.add_argument('-p', '--port', type=int, default=12345,
                               help='TCP port of the AT command server (0 picks a free one)')
