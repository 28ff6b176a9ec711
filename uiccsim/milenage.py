# -*- coding: utf-8 -*-

""" uiccsim: 3GPP Milenage algorithm set (TS 35.206) and the USIM side of AKA
"""

#
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

import enum
from typing import Optional, Tuple

from osmocom.utils import b2h

from uiccsim.crypto import aes_encrypt_block, xor_bytes
from uiccsim.exceptions import InvalidLength
from uiccsim.log import UiccSimLogger

log = UiccSimLogger.get("MILENAGE")

# TS 35.206 4.1: rotation amounts r1..r5 (here in bytes) and constants c1..c5
# (only the last byte is non-zero).
R1, R2, R3, R4, R5 = 8, 0, 4, 8, 12
C1, C2, C3, C4, C5 = 0x00, 0x01, 0x02, 0x04, 0x08

AUTN_LEN = 16
AUTS_LEN = 14


def _check_len(name: str, value: bytes, length: int):
    if len(value) != length:
        raise InvalidLength(name, length, len(value))


def _rot(x: bytes, r: int) -> bytes:
    """Cyclically rotate the 128 bit value x by r bytes towards the most significant byte."""
    return bytes(x[(i + r) % 16] for i in range(16))


def _wipe(*bufs: bytearray):
    for buf in bufs:
        buf[:] = bytes(len(buf))


class Milenage:
    """The Milenage functions f1, f1*, f2..f5, f5* for one subscriber (Ki, OPc)."""

    def __init__(self, ki: bytes, opc: bytes):
        _check_len('Ki', ki, 16)
        _check_len('OPc', opc, 16)
        self._ki = bytes(ki)
        self._opc = bytes(opc)

    def _temp(self, rand: bytes) -> bytearray:
        _check_len('RAND', rand, 16)
        return bytearray(aes_encrypt_block(self._ki, xor_bytes(rand, self._opc)))

    def _out(self, temp: bytes, r: int, c: int) -> bytearray:
        """OUTn = E[rot(TEMP xor OPc, rn) xor cn]K xor OPc, for n = 2..5"""
        tmp = bytearray(_rot(xor_bytes(temp, self._opc), r))
        tmp[15] ^= c
        out = bytearray(xor_bytes(aes_encrypt_block(self._ki, tmp), self._opc))
        _wipe(tmp)
        return out

    def _out1(self, temp: bytes, sqn: bytes, amf: bytes) -> bytearray:
        """OUT1 = E[TEMP xor rot(IN1 xor OPc, r1) xor c1]K xor OPc"""
        _check_len('SQN', sqn, 6)
        _check_len('AMF', amf, 2)
        in1 = bytes(sqn) + bytes(amf) + bytes(sqn) + bytes(amf)
        tmp = bytearray(xor_bytes(temp, _rot(xor_bytes(in1, self._opc), R1)))
        tmp[15] ^= C1
        out1 = bytearray(xor_bytes(aes_encrypt_block(self._ki, tmp), self._opc))
        _wipe(tmp)
        return out1

    def f1(self, rand: bytes, sqn: bytes, amf: bytes) -> bytes:
        """Network authentication function: returns MAC-A (8 bytes)."""
        temp = self._temp(rand)
        out1 = self._out1(temp, sqn, amf)
        mac_a = bytes(out1[0:8])
        _wipe(temp, out1)
        return mac_a

    def f1star(self, rand: bytes, sqn: bytes, amf: bytes) -> bytes:
        """Re-synchronisation message authentication function: returns MAC-S (8 bytes)."""
        temp = self._temp(rand)
        out1 = self._out1(temp, sqn, amf)
        mac_s = bytes(out1[8:16])
        _wipe(temp, out1)
        return mac_s

    def f2345(self, rand: bytes) -> Tuple[bytes, bytes, bytes, bytes]:
        """Returns a tuple of (RES, CK, IK, AK)."""
        temp = self._temp(rand)
        out2 = self._out(temp, R2, C2)
        out3 = self._out(temp, R3, C3)
        out4 = self._out(temp, R4, C4)
        res, ak = bytes(out2[8:16]), bytes(out2[0:6])
        ck, ik = bytes(out3), bytes(out4)
        _wipe(temp, out2, out3, out4)
        return res, ck, ik, ak

    def f5star(self, rand: bytes) -> bytes:
        """Re-synchronisation anonymity key function: returns AK* (6 bytes)."""
        temp = self._temp(rand)
        out5 = self._out(temp, R5, C5)
        ak_star = bytes(out5[0:6])
        _wipe(temp, out5)
        return ak_star

    def authenticate(self, sqn_stored: bytes, rand: bytes, autn: bytes) -> 'UmtsAuthResult':
        """Verify AUTN and compute the card's answer to a 3G AUTHENTICATE.

        The SQN is checked before MAC-A: a sequence number mismatch always
        results in a re-synchronisation (AUTS), a matching SQN with a wrong
        MAC-A in INVALID_MAC.  Nothing is retried.

        Args:
                sqn_stored : 6 bytes sequence number stored on the card
                rand : 16 bytes random challenge
                autn : 16 bytes authentication token (SQN^AK || AMF || MAC-A)
        Returns:
                UmtsAuthResult
        """
        _check_len('SQN', sqn_stored, 6)
        _check_len('AUTN', autn, AUTN_LEN)
        amf = bytes(autn[6:8])
        temp = self._temp(rand)
        try:
            out2 = self._out(temp, R2, C2)
            ak = bytes(out2[0:6])
            sqn = xor_bytes(autn[0:6], ak)

            if sqn != bytes(sqn_stored):
                log.debug('SQN mismatch: received %s, stored %s', b2h(sqn), b2h(sqn_stored))
                _wipe(out2)
                out5 = self._out(temp, R5, C5)
                conc_sqn_ms = xor_bytes(sqn_stored, out5[0:6])
                _wipe(out5)
                # TS 33.102 6.3.3: MAC-S is computed over SQN_MS with a dummy AMF of all zeros
                out1 = self._out1(temp, sqn_stored, b'\x00\x00')
                auts = conc_sqn_ms + bytes(out1[8:16])
                _wipe(out1)
                return UmtsAuthResult(UmtsStatus.SYNC_FAILURE, auts=auts)

            out1 = self._out1(temp, sqn, amf)
            mac_a = bytes(out1[0:8])
            _wipe(out1)
            if mac_a != bytes(autn[8:16]):
                log.debug('MAC-A mismatch for RAND %s', b2h(rand))
                _wipe(out2)
                return UmtsAuthResult(UmtsStatus.INVALID_MAC)

            res = bytes(out2[8:16])
            _wipe(out2)
            out3 = self._out(temp, R3, C3)
            out4 = self._out(temp, R4, C4)
            result = UmtsAuthResult(UmtsStatus.OK, res=res, ck=bytes(out3), ik=bytes(out4))
            _wipe(out3, out4)
            return result
        finally:
            _wipe(temp)


class UmtsStatus(enum.Enum):
    OK = 0
    INVALID_MAC = 1
    SYNC_FAILURE = 2


class UmtsAuthResult:
    """Outcome of a 3G authentication.  Only the fields belonging to the
    status are set: RES/CK/IK for OK, AUTS for SYNC_FAILURE, none for
    INVALID_MAC."""

    def __init__(self, status: UmtsStatus, res: Optional[bytes] = None, ck: Optional[bytes] = None,
                 ik: Optional[bytes] = None, auts: Optional[bytes] = None):
        self.status = status
        self.res = res
        self.ck = ck
        self.ik = ik
        self.auts = auts

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, self.status.name)


def umts_authenticate(ki: bytes, opc: bytes, sqn_stored: bytes, rand: bytes, autn: bytes) -> UmtsAuthResult:
    """Run the USIM side of UMTS AKA, see Milenage.authenticate()."""
    return Milenage(ki, opc).authenticate(sqn_stored, rand, autn)
