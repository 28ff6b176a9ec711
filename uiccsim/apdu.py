# -*- coding: utf-8 -*-

"""
AUTHENTICATE command of 3GPP TS 31.102 / 31.103 as seen by the simulated card
"""

# Copyright (C) 2022 Harald Welte <laforge@osmocom.org>
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

import enum
from typing import Dict

from construct import Struct, Int8ub, Bytes, Const, Prefixed, GreedyBytes, Terminated, this
from construct import ConstructError
from osmocom.utils import h2b, b2h, is_hex, Hexstr

from uiccsim.app import AppType
from uiccsim.exceptions import CardStatusError, ProtocolError

APDU_HEADER_HEXLEN = 10


class StatusWord(enum.IntEnum):
    """Status words reported by the card for an AUTHENTICATE it does not execute."""
    UNSUPPORTED_CLASS = 0x6E00
    UNSUPPORTED_INSTRUCTION = 0x6D00
    INCORRECT_PARAMETERS = 0x6A86
    WRONG_LENGTH = 0x6700
    # TS 31.102 7.3.1: authentication error, incorrect MAC / application specific
    APPLICATION_ERROR = 0x9862
    UNKNOWN = 0xFFFF


class CommandKind(enum.Enum):
    GSM_AUTH = 0
    UMTS_AUTH = 1


INS_AUTHENTICATE = 0x88
# TS 31.102 7.1.1.1: authentication context in P2
P2_GSM_CONTEXT = 0x80
P2_UMTS_CONTEXT = 0x81
LC_GSM = 0x11
LC_UMTS = 0x22

_construct_header = Struct('cla'/Int8ub, 'ins'/Int8ub, 'p1'/Int8ub, 'p2'/Int8ub, 'lc'/Int8ub)

_cs_cmd_gsm = Struct('_rand_len'/Int8ub, 'rand'/Bytes(this._rand_len), Terminated)
_cs_cmd_3g = Struct('_rand_len'/Int8ub, 'rand'/Bytes(this._rand_len),
                    '_autn_len'/Int8ub, 'autn'/Bytes(this._autn_len), Terminated)

_cs_rsp_gsm = Struct('sres'/Prefixed(Int8ub, GreedyBytes), 'kc'/Prefixed(Int8ub, GreedyBytes))
_rsp_3g_ok = Struct(Const(b'\xdb'), 'res'/Prefixed(Int8ub, GreedyBytes),
                    'ck'/Prefixed(Int8ub, GreedyBytes), 'ik'/Prefixed(Int8ub, GreedyBytes))
_rsp_3g_sync = Struct(Const(b'\xdc'), 'auts'/Prefixed(Int8ub, GreedyBytes))


class ApduHeader:
    """The five header bytes CLA, INS, P1, P2 and Lc of a command APDU."""

    def __init__(self, cla: int, ins: int, p1: int, p2: int, lc: int):
        self.cla = cla
        self.ins = ins
        self.p1 = p1
        self.p2 = p2
        self.lc = lc

    def __str__(self):
        return 'CLA=%02X INS=%02X P1=%02X P2=%02X Lc=%02X' % (self.cla, self.ins, self.p1, self.p2, self.lc)

    @classmethod
    def from_hex(cls, apdu: Hexstr) -> 'ApduHeader':
        if len(apdu) < APDU_HEADER_HEXLEN or not is_hex(apdu[:APDU_HEADER_HEXLEN]):
            raise ProtocolError('Malformed APDU header: %s' % apdu)
        d = _construct_header.parse(h2b(apdu[:APDU_HEADER_HEXLEN]))
        return cls(d.cla, d.ins, d.p1, d.p2, d.lc)


def classify(header: ApduHeader, app_type: AppType) -> CommandKind:
    """Decide which authentication the command asks for.

    The checks are made in a fixed order and the first failing one determines
    the status word, even if later ones would fail too.

    Args:
            header : parsed APDU header
            app_type : type of the application the logical channel was opened for
    Returns:
            CommandKind
    Raises:
            CardStatusError carrying the status word of the first failing check
    """
    if header.cla != 0x00:
        raise CardStatusError(StatusWord.UNSUPPORTED_CLASS, 'class not supported')
    if header.ins != INS_AUTHENTICATE:
        raise CardStatusError(StatusWord.UNSUPPORTED_INSTRUCTION, 'instruction not supported')
    if header.p1 != 0x00:
        raise CardStatusError(StatusWord.INCORRECT_PARAMETERS, 'incorrect parameters P1-P2')

    if header.p2 == P2_GSM_CONTEXT:
        if header.lc != LC_GSM:
            raise CardStatusError(StatusWord.WRONG_LENGTH, 'wrong length')
        if app_type not in (AppType.USIM, AppType.ISIM):
            raise CardStatusError(StatusWord.APPLICATION_ERROR, 'GSM context not supported by %s' % app_type.name)
        return CommandKind.GSM_AUTH
    if header.p2 == P2_UMTS_CONTEXT:
        if header.lc != LC_UMTS:
            raise CardStatusError(StatusWord.WRONG_LENGTH, 'wrong length')
        if app_type != AppType.ISIM:
            raise CardStatusError(StatusWord.APPLICATION_ERROR, '3G context not supported by %s' % app_type.name)
        return CommandKind.UMTS_AUTH
    raise CardStatusError(StatusWord.UNKNOWN, 'unknown authentication context')


def _parse_body(cs: Struct, header: ApduHeader, data: Hexstr) -> Dict:
    if data and not is_hex(data):
        raise ProtocolError('Malformed APDU data: %s' % data)
    body = h2b(data)
    # case 4 command: the command data may be followed by a single Le byte
    if len(body) not in (header.lc, header.lc + 1):
        raise CardStatusError(StatusWord.WRONG_LENGTH, 'Lc does not match command data')
    try:
        return cs.parse(body[:header.lc])
    except ConstructError as exc:
        raise CardStatusError(StatusWord.WRONG_LENGTH, str(exc)) from exc


def parse_gsm_auth_cmd(header: ApduHeader, data: Hexstr) -> bytes:
    """Parse the command data of a GSM context AUTHENTICATE: returns RAND."""
    d = _parse_body(_cs_cmd_gsm, header, data)
    if len(d.rand) != 16:
        raise CardStatusError(StatusWord.WRONG_LENGTH, 'RAND must be 16 bytes')
    return bytes(d.rand)


def parse_umts_auth_cmd(header: ApduHeader, data: Hexstr):
    """Parse the command data of a 3G context AUTHENTICATE: returns (RAND, AUTN)."""
    d = _parse_body(_cs_cmd_3g, header, data)
    if len(d.rand) != 16 or len(d.autn) != 16:
        raise CardStatusError(StatusWord.WRONG_LENGTH, 'RAND and AUTN must be 16 bytes')
    return bytes(d.rand), bytes(d.autn)


def encode_gsm_auth_rsp(sres: bytes, kc: bytes) -> Hexstr:
    return b2h(_cs_rsp_gsm.build({'sres': sres, 'kc': kc})).upper()


def encode_umts_auth_ok_rsp(res: bytes, ck: bytes, ik: bytes) -> Hexstr:
    return b2h(_rsp_3g_ok.build({'res': res, 'ck': ck, 'ik': ik})).upper()


def encode_umts_auth_sync_rsp(auts: bytes) -> Hexstr:
    return b2h(_rsp_3g_sync.build({'auts': auts})).upper()


def encode_sw(sw: int) -> Hexstr:
    return '%04X' % sw
