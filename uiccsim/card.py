# -*- coding: utf-8 -*-

""" uiccsim: the simulated card - key material and AUTHENTICATE execution
"""

#
# Copyright (C) 2017 Intel Corporation
# Copyright (C) 2024 sysmocom - s.f.m.c. GmbH
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

from typing import List, Tuple

from osmocom.utils import h2b, b2h, is_hex, Hexstr

from uiccsim.apdu import ApduHeader, CommandKind, StatusWord, classify, APDU_HEADER_HEXLEN
from uiccsim.apdu import parse_gsm_auth_cmd, parse_umts_auth_cmd
from uiccsim.apdu import encode_gsm_auth_rsp, encode_umts_auth_ok_rsp, encode_umts_auth_sync_rsp
from uiccsim.app import CardApplication, ApplicationRegistry
from uiccsim.comp128 import comp128v1
from uiccsim.exceptions import CardStatusError, InvalidLength, ConfigError
from uiccsim.log import UiccSimLogger
from uiccsim.milenage import Milenage, UmtsAuthResult, UmtsStatus

log = UiccSimLogger.get("CARD")


def _key_field(name: str, value: Hexstr, length: int) -> bytes:
    if not is_hex(value):
        raise ConfigError('%s is not a hex string' % name)
    b = bytes(h2b(value))
    if len(b) != length:
        raise InvalidLength(name, length, len(b))
    return b


class CardKeys:
    """Subscriber key material of one simulated card.  Read-only once created."""

    __slots__ = ('_ki', '_opc', '_sqn')

    def __init__(self, ki: Hexstr, opc: Hexstr, sqn: Hexstr):
        """
        Args:
                ki : 32 hex digits subscriber key
                opc : 32 hex digits operator variant configuration field
                sqn : 12 hex digits sequence number stored on the card
        """
        object.__setattr__(self, '_ki', _key_field('Ki', ki, 16))
        object.__setattr__(self, '_opc', _key_field('OPc', opc, 16))
        object.__setattr__(self, '_sqn', _key_field('SQN', sqn, 6))

    def __setattr__(self, name, value):
        raise AttributeError('%s is read-only' % self.__class__.__name__)

    @property
    def ki(self) -> bytes:
        return self._ki

    @property
    def opc(self) -> bytes:
        return self._opc

    @property
    def sqn(self) -> bytes:
        return self._sqn

    def __repr__(self):
        # never print the keys themselves
        return '%s(sqn=%s)' % (self.__class__.__name__, b2h(self._sqn))


class SimulatedCard:
    """A simulated UICC: immutable key material, the configured applications
    and the execution of AUTHENTICATE commands.  It holds no per-client
    state, one instance can be shared by several RuntimeState."""

    def __init__(self, keys: CardKeys, applications: List[CardApplication]):
        self.keys = keys
        self.applications = ApplicationRegistry(applications)
        self._milenage = Milenage(keys.ki, keys.opc)
        self._handlers = {
            CommandKind.GSM_AUTH: self._handle_gsm_auth,
            CommandKind.UMTS_AUTH: self._handle_umts_auth,
        }

    def __str__(self):
        return 'SimulatedCard(%s)' % ', '.join([str(a) for a in self.applications])

    def gsm_authenticate(self, rand: bytes) -> Tuple[bytes, bytes]:
        """Run A3/A8 (COMP128-1): returns (SRES, Kc)."""
        return comp128v1(self.keys.ki, rand)

    def umts_authenticate(self, rand: bytes, autn: bytes) -> UmtsAuthResult:
        """Run the USIM side of AKA (Milenage) against the stored SQN."""
        return self._milenage.authenticate(self.keys.sqn, rand, autn)

    def _handle_gsm_auth(self, header: ApduHeader, data: Hexstr) -> Hexstr:
        rand = parse_gsm_auth_cmd(header, data)
        sres, kc = self.gsm_authenticate(rand)
        return encode_gsm_auth_rsp(sres, kc)

    def _handle_umts_auth(self, header: ApduHeader, data: Hexstr) -> Hexstr:
        rand, autn = parse_umts_auth_cmd(header, data)
        result = self.umts_authenticate(rand, autn)
        log.debug('3G authentication with RAND %s: %s', b2h(rand), result.status.name)
        if result.status == UmtsStatus.OK:
            return encode_umts_auth_ok_rsp(result.res, result.ck, result.ik)
        if result.status == UmtsStatus.SYNC_FAILURE:
            return encode_umts_auth_sync_rsp(result.auts)
        raise CardStatusError(StatusWord.APPLICATION_ERROR, 'authentication error, incorrect MAC')

    def authenticate(self, app: CardApplication, apdu: Hexstr) -> Hexstr:
        """Execute an AUTHENTICATE command APDU in the context of an application.

        Args:
                app : application the logical channel was opened for
                apdu : the command APDU as hex string (header and command data)
        Returns:
                response data as hex string
        Raises:
                CardStatusError : the card rejects the command with a status word
                ProtocolError : the APDU is not even a syntactically valid hex string
                CipherUnavailable : the AES backend failed
        """
        header = ApduHeader.from_hex(apdu)
        kind = classify(header, app.app_type)
        log.debug('%s on %s: %s', kind.name, app, header)
        return self._handlers[kind](header, apdu[APDU_HEADER_HEXLEN:])
