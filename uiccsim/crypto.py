# -*- coding: utf-8 -*-

""" uiccsim: AES-128 single block service used by Milenage
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

from osmocom.utils import h2b, b2h, Hexstr

from uiccsim.exceptions import CipherUnavailable, InvalidLength
from uiccsim.log import UiccSimLogger

log = UiccSimLogger.get("CRYPTO")

AES_BLOCK_SIZE = 16


def aes_encrypt_block(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt exactly one block with AES-128 in ECB mode.

    A new cipher object is created for every call, key schedules are never
    kept across calls.

    Args:
            key : 16 bytes AES key
            plaintext : 16 bytes input block
    Returns:
            16 bytes cipher text
    """
    if len(key) != AES_BLOCK_SIZE:
        raise InvalidLength('AES key', AES_BLOCK_SIZE, len(key))
    if len(plaintext) != AES_BLOCK_SIZE:
        raise InvalidLength('AES block', AES_BLOCK_SIZE, len(plaintext))
    try:
        from Cryptodome.Cipher import AES
    except ImportError as exc:
        log.error('AES backend cannot be loaded: %s', exc)
        raise CipherUnavailable('AES backend cannot be loaded: %s' % exc) from exc
    try:
        aes = AES.new(bytes(key), AES.MODE_ECB)
        return aes.encrypt(bytes(plaintext))
    except (ValueError, TypeError, OSError) as exc:
        log.error('AES backend failure: %s', exc)
        raise CipherUnavailable('AES backend failure: %s' % exc) from exc


def xor_bytes(a: bytes, b: bytes) -> bytes:
    """XOR two byte strings of equal length."""
    if len(a) != len(b):
        raise ValueError('cannot XOR %u bytes with %u bytes' % (len(a), len(b)))
    try:
        # pylint: disable=no-name-in-module
        from Cryptodome.Util.strxor import strxor
    except ImportError as exc:
        raise CipherUnavailable('Cryptodome cannot be loaded: %s' % exc) from exc
    return strxor(bytes(a), bytes(b))


def derive_milenage_opc(ki_hex: Hexstr, op_hex: Hexstr) -> Hexstr:
    """
    Run the milenage algorithm to calculate OPC from Ki and OP
    """
    ki_bytes = h2b(ki_hex)
    op_bytes = h2b(op_hex)
    if len(op_bytes) != AES_BLOCK_SIZE:
        raise InvalidLength('OP', AES_BLOCK_SIZE, len(op_bytes))
    opc_bytes = aes_encrypt_block(ki_bytes, op_bytes)
    return b2h(xor_bytes(opc_bytes, op_bytes))
