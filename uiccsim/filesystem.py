# coding=utf-8
"""File system collaborator of a card application, as used by AT+CRLA.

The logical channel layer does not know anything about files: it hands the
textual file access command (everything after the session id of AT+CRLA) to
the FileSystemBase of the application the channel was opened for.
"""

# (C) 2024 by sysmocom - s.f.m.c. GmbH
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

import abc
import threading
from typing import Dict, Optional, Tuple

from osmocom.utils import h2b, b2h, is_hex, Hexstr

from uiccsim.log import UiccSimLogger

log = UiccSimLogger.get("FS")

# 3GPP TS 27.007 8.18 <command> values
CMD_READ_BINARY = 176
CMD_UPDATE_BINARY = 214

# status words, rendered as decimal <sw1>,<sw2> pairs like AT+CRSM does
SW_OK = (0x90, 0x00)
SW_WRONG_LENGTH = (0x67, 0x00)
SW_FILE_NOT_FOUND = (0x6a, 0x82)
SW_WRONG_OFFSET = (0x6b, 0x00)
SW_INS_NOT_SUPPORTED = (0x6d, 0x00)


class FileSystemBase(abc.ABC):
    """Interface of the file system collaborator of a card application."""

    @abc.abstractmethod
    def file_access(self, command: str) -> Tuple[bool, str]:
        """Execute a textual file access command.

        Args:
                command : '<command>,<fileid>,<P1>,<P2>,<P3>[,<data>]' (decimal numbers, hex data)
        Returns:
                tuple of (ok, response); ok is False when the command could not be parsed at all,
                response is '<sw1>,<sw2>[,<hex data>]' otherwise.
        """


def _sw_response(sw: Tuple[int, int], data: Hexstr = '') -> str:
    if data:
        return '%u,%u,%s' % (sw[0], sw[1], data.upper())
    return '%u,%u' % sw


class TransparentFileSystem(FileSystemBase):
    """A flat set of transparent EFs kept in memory."""

    def __init__(self, files: Optional[Dict[Hexstr, Hexstr]] = None):
        """
        Args:
                files : dict of file contents (hex string) indexed by the file identifier (4 hex digits)
        """
        self._files = {}
        for fid, content in (files or {}).items():
            self._files[int(str(fid), 16)] = bytearray(h2b(content))
        self._lock = threading.Lock()

    def __str__(self):
        return '%s(%s)' % (self.__class__.__name__, ','.join(['%04x' % f for f in self._files]))

    def read_binary(self, fid: int, offset: int, length: int) -> Tuple[Tuple[int, int], Hexstr]:
        with self._lock:
            content = self._files.get(fid)
            if content is None:
                return SW_FILE_NOT_FOUND, ''
            if offset < 0 or offset > len(content):
                return SW_WRONG_OFFSET, ''
            if length == 0:
                length = len(content) - offset
            if offset + length > len(content):
                return SW_WRONG_LENGTH, ''
            return SW_OK, b2h(content[offset:offset + length])

    def update_binary(self, fid: int, offset: int, data: bytes) -> Tuple[int, int]:
        with self._lock:
            content = self._files.get(fid)
            if content is None:
                return SW_FILE_NOT_FOUND
            if offset < 0 or offset + len(data) > len(content):
                return SW_WRONG_OFFSET
            content[offset:offset + len(data)] = data
            return SW_OK

    def file_access(self, command: str) -> Tuple[bool, str]:
        params = [p.strip().strip('"') for p in command.split(',')]
        try:
            cmd, fid, p1, p2, p3 = [int(p) for p in params[0:5]]
        except ValueError:
            log.debug('Cannot parse file access command: %s', command)
            return False, ''
        data = params[5] if len(params) > 5 else ''
        # P1, P2 and P3 are single bytes
        if not (0 <= p1 <= 0xff and 0 <= p2 <= 0xff):
            return True, _sw_response(SW_WRONG_OFFSET)
        if not 0 <= p3 <= 0xff:
            return True, _sw_response(SW_WRONG_LENGTH)
        if data and not is_hex(data):
            return False, ''
        offset = (p1 << 8) | p2
        log.debug('File access: command=%u, fid=%04x, offset=%u, length=%u', cmd, fid, offset, p3)

        if cmd == CMD_READ_BINARY:
            sw, rsp = self.read_binary(fid, offset, p3)
            return True, _sw_response(sw, rsp)
        if cmd == CMD_UPDATE_BINARY:
            data = h2b(data)
            if len(data) != p3:
                return True, _sw_response(SW_WRONG_LENGTH)
            return True, _sw_response(self.update_binary(fid, offset, data))
        return True, _sw_response(SW_INS_NOT_SUPPORTED)
