# -*- coding: utf-8 -*-

""" uiccsim: Exceptions
"""

#
# Copyright (C) 2009-2010  Sylvain Munaut <tnt@246tNt.com>
# Copyright (C) 2021 Harald Welte <laforge@osmocom.org>
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


class CipherUnavailable(Exception):
    """The AES backend could not be loaded or initialized."""


class InvalidLength(ValueError):
    """A fixed-width protocol field has the wrong length."""

    def __init__(self, name: str, expected: int, actual: int):
        """
        Args:
                name : name of the field (e.g. 'RAND')
                expected : expected length in bytes
                actual : actual length in bytes
        """
        super().__init__(name, expected, actual)
        self.name = name
        self.expected = expected
        self.actual = actual

    def __str__(self):
        return "%s must be %u bytes, got %u" % (self.name, self.expected, self.actual)


class ProtocolError(Exception):
    """Malformed AT command or command parameters."""


class ConfigError(Exception):
    """Invalid simulated card configuration."""


class UnknownApplication(Exception):
    """No configured application matches the requested AID."""


class ChannelLimitReached(Exception):
    """All logical channels are in use."""


class ChannelNotFound(KeyError):
    """No logical channel is open under the given session id."""

    def __init__(self, session_id: int):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self):
        return "No logical channel open with session id %d" % self.session_id


class CardStatusError(Exception):
    """Raised when the card answers a command with an error status word."""

    def __init__(self, sw: int, rs=None):
        """
        Args:
                sw : the status word the card responds with
                rs : optional status word description
        """
        self.sw = sw
        self.rs = rs

    @property
    def sw_hex(self) -> str:
        return '%04X' % self.sw

    def __str__(self):
        if self.rs:
            return "Card status %s: %s" % (self.sw_hex, self.rs)
        return "Card status %s" % self.sw_hex
