# -*- coding: utf-8 -*-

""" uiccsim: AT command line transport base
"""

#
# Copyright (C) 2009-2010  Sylvain Munaut <tnt@246tNt.com>
# Copyright (C) 2021-2023 Harald Welte <laforge@osmocom.org>
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

from typing import List

from uiccsim.at_commands import AtCommandHandler, RSP_OK, RSP_ERROR
from uiccsim.card import SimulatedCard
from uiccsim.log import UiccSimLogger
from uiccsim.runtime import RuntimeState

log = UiccSimLogger.get("TRANSPORT")


class AtLineDiscipline:
    """One AT command line towards a simulated card: owns the logical channel
    state of the client and turns request lines into framed response bytes."""

    def __init__(self, card: SimulatedCard, name: str = 'at'):
        self.name = name
        self.rs = RuntimeState(card)
        self.handler = AtCommandHandler(self.rs)
        self._rx_buf = b''

    def __str__(self):
        return self.name

    def handle_line(self, line: str) -> List[str]:
        """Return the response lines for a single request line."""
        line = line.strip()
        if not line:
            return []
        if line.upper() == 'AT':
            return [RSP_OK]
        rsp = self.handler.process(line)
        if rsp is None:
            log.debug('%s: unsupported command %s', self, line)
            return [RSP_ERROR]
        return rsp

    def feed(self, data: bytes) -> bytes:
        """Feed received bytes, return the framed responses of all complete lines."""
        self._rx_buf += data
        out = b''
        while True:
            idx = min((i for i in (self._rx_buf.find(b'\r'), self._rx_buf.find(b'\n')) if i >= 0),
                      default=-1)
            if idx < 0:
                break
            raw, self._rx_buf = self._rx_buf[:idx], self._rx_buf[idx+1:]
            line = raw.decode('ascii', errors='replace')
            for rsp in self.handle_line(line):
                out += b'\r\n' + rsp.encode('ascii') + b'\r\n'
        return out

    def close(self):
        """Drop the logical channels of this line, e.g. on disconnect."""
        self.rs.reset()
        self._rx_buf = b''
