# -*- coding: utf-8 -*-

# Copyright (C) 2020 Vadim Yanitskiy <axilirator@gmail.com>
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
import serial

from uiccsim.card import SimulatedCard
from uiccsim.log import UiccSimLogger
from uiccsim.transport import AtLineDiscipline

log = UiccSimLogger.get("TRANSPORT")


class SerialAtPort:
    """Serve the AT command interface of a simulated card on a serial port
    (a real UART, a USB serial adapter or one side of a pty pair)."""
    name = "serial AT command port (3GPP TS 27.007)"

    def __init__(self, card: SimulatedCard, device: str = '/dev/ttyUSB0', baudrate: int = 115200,
                 timeout: float = 0.5):
        self._sl = serial.Serial(device, baudrate, timeout=timeout)
        self._device = device
        self.line = AtLineDiscipline(card, name=device)

    def __del__(self):
        if hasattr(self, '_sl'):
            self._sl.close()

    def __str__(self):
        return "serial:%s" % self._device

    def poll(self) -> int:
        """Read what is pending on the port and answer all complete command lines.

        Returns:
                number of bytes written in response
        """
        data = self._sl.read(max(1, self._sl.in_waiting))
        if not data:
            return 0
        rsp = self.line.feed(data)
        if rsp:
            log.debug('%s: Tx %s', self, rsp)
            self._sl.write(rsp)
        return len(rsp)

    def run(self):
        log.info('Serving AT commands on %s', self)
        try:
            while True:
                self.poll()
        except serial.SerialException as exc:
            log.error('%s: %s', self, exc)
            raise
        finally:
            self.line.close()

    @staticmethod
    def argparse_add_args(arg_parser: argparse.ArgumentParser):
        serial_group = arg_parser.add_argument_group('Serial AT port', """Answer AT commands on a serial
device, e.g. one end of a pty pair created with socat, the other end being used by the modem software.""")
        serial_group.add_argument('-d', '--device', metavar='DEV', default='/dev/ttyUSB0',
                                  help='Serial device to serve AT commands on')
        serial_group.add_argument('-b', '--baud', dest='baudrate', type=int, metavar='BAUD', default=115200,
                                  help='Baud rate of the serial device')
