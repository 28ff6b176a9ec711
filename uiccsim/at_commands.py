# -*- coding: utf-8 -*-

""" uiccsim: 3GPP TS 27.007 UICC logical channel commands (AT+CUAD, +CCHO, +CCHC, +CGLA, +CRLA)
"""

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

from typing import List, Optional

from uiccsim.apdu import encode_sw
from uiccsim.exceptions import ProtocolError, CardStatusError, CipherUnavailable
from uiccsim.exceptions import ChannelLimitReached, ChannelNotFound, UnknownApplication
from uiccsim.log import UiccSimLogger
from uiccsim.runtime import RuntimeState

log = UiccSimLogger.get("ATCMD")

RSP_OK = 'OK'
RSP_ERROR = 'ERROR'


def _unquote(s: str) -> str:
    return s.strip().replace('"', '')


def _session_id(s: str) -> int:
    try:
        return int(_unquote(s))
    except ValueError as exc:
        raise ProtocolError('Invalid session id: %s' % s) from exc


class AtCommandHandler:
    """Serve the UICC logical channel AT commands of one AT command line.

    process() returns the response lines for the handled commands and None
    for every other command, so that the caller may pass it on.  A card
    level failure (status word) is a successful AT transaction; ERROR is only
    used for syntax errors, unknown sessions and channel exhaustion."""

    def __init__(self, rs: RuntimeState):
        """
        Args:
                rs : the logical channel state of this command line
        """
        self.rs = rs
        self._commands = {
            '+CUAD': self._cmd_cuad,
            '+CCHO': self._cmd_ccho,
            '+CCHC': self._cmd_cchc,
            '+CGLA': self._cmd_cgla,
            '+CRLA': self._cmd_crla,
        }

    def process(self, line: str) -> Optional[List[str]]:
        """Process a single AT command line.

        Returns:
                list of response lines (the last one being OK or ERROR), or None
                if this is not one of the commands handled here
        """
        cmd = line.strip()
        if not cmd.startswith('AT'):
            return None
        for name, handler in self._commands.items():
            if not cmd.startswith('AT' + name):
                continue
            args = cmd[len('AT' + name):]
            if args and not args.startswith('='):
                continue
            log.debug('Received AT command: %s', cmd)
            if '=?' in args:
                return [RSP_OK]
            try:
                rsp = handler(args[1:] if args else None)
            except ProtocolError as exc:
                log.debug('AT%s syntax error: %s', name, exc)
                rsp = [RSP_ERROR]
            log.debug('Response: %s', rsp)
            return rsp
        return None

    def _cmd_cuad(self, args: Optional[str]) -> List[str]:
        if args:
            raise ProtocolError('AT+CUAD takes no parameters')
        return ['+CUAD: %s' % self.rs.card.applications.ef_dir().upper(), RSP_OK]

    def _cmd_ccho(self, args: Optional[str]) -> List[str]:
        if args is None or not _unquote(args):
            raise ProtocolError('AT+CCHO requires an AID')
        aid = _unquote(args)
        try:
            session_id = self.rs.open_channel(aid)
        except (UnknownApplication, ChannelLimitReached) as exc:
            log.info('AT+CCHO=%s failed: %s', aid, exc)
            return [RSP_ERROR]
        return ['+CCHO: %u' % session_id, RSP_OK]

    def _cmd_cchc(self, args: Optional[str]) -> List[str]:
        if args is None:
            raise ProtocolError('AT+CCHC requires a session id')
        self.rs.close_channel(_session_id(args))
        return [RSP_OK]

    def _cmd_cgla(self, args: Optional[str]) -> List[str]:
        if args is None:
            raise ProtocolError('AT+CGLA requires parameters')
        params = args.split(',')
        if len(params) < 3:
            raise ProtocolError('AT+CGLA requires <sessionid>,<length>,<command>')
        session_id = _session_id(params[0])
        apdu = _unquote(params[2])
        try:
            lchan = self.rs.lookup(session_id)
        except ChannelNotFound as exc:
            log.info('AT+CGLA: %s', exc)
            return [RSP_ERROR]

        try:
            rsp = lchan.authenticate(apdu)
        except CardStatusError as exc:
            log.info('AT+CGLA on %s: %s', lchan, exc)
            rsp = encode_sw(exc.sw)
        except CipherUnavailable as exc:
            log.error('AT+CGLA on %s: authentication aborted: %s', lchan, exc)
            return [RSP_ERROR]
        return ['+CGLA: %u,"%s"' % (len(rsp), rsp), RSP_OK]

    def _cmd_crla(self, args: Optional[str]) -> List[str]:
        if args is None:
            raise ProtocolError('AT+CRLA requires parameters')
        params = args.split(',', 1)
        if len(params) < 2:
            raise ProtocolError('AT+CRLA requires <sessionid>,<command>,...')
        session_id = _session_id(params[0])
        try:
            lchan = self.rs.lookup(session_id)
        except ChannelNotFound as exc:
            log.info('AT+CRLA: %s', exc)
            return [RSP_ERROR]
        if lchan.app.fs is None:
            log.info('AT+CRLA: %s has no file system', lchan.app)
            return [RSP_ERROR]

        ok, rsp = lchan.file_access(params[1])
        if not ok:
            return [RSP_OK]
        return ['+CRLA: %s' % rsp, RSP_OK]
