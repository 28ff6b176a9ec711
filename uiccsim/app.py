# -*- coding: utf-8 -*-

""" uiccsim: card applications (USIM, ISIM, ...) selectable by AID
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

import enum
from typing import Optional, List

from construct import Struct, Const, Prefixed, GreedyBytes, Int8ub
from construct import Optional as COptional
from osmocom.utils import h2b, b2h, is_hex, Hexstr

from uiccsim.exceptions import ConfigError, UnknownApplication
from uiccsim.filesystem import FileSystemBase


class AppType(enum.Enum):
    USIM = 'USIM'
    ISIM = 'ISIM'
    UNKNOWN = 'UNKNOWN'

    @classmethod
    def from_str(cls, s: str) -> 'AppType':
        """Parse the application type as found in the card configuration ('USim', 'isim', ...)."""
        try:
            return cls(str(s).upper())
        except ValueError:
            return cls.UNKNOWN


# TS 102 221 13.1: application template as found in EF.DIR
_construct_app_template = Struct(Const(b'\x61'),
                                 'body'/Prefixed(Int8ub, Struct(Const(b'\x4f'),
                                                                'aid'/Prefixed(Int8ub, GreedyBytes),
                                                                'label'/COptional(Struct(Const(b'\x50'),
                                                                    'value'/Prefixed(Int8ub, GreedyBytes))))))


class CardApplication:
    """An application on the simulated card, identified by its AID."""

    def __init__(self, aid: Hexstr, app_type: AppType = AppType.UNKNOWN, label: Optional[str] = None,
                 fs: Optional[FileSystemBase] = None):
        """
        Args:
                aid : application identifier (hex string, 5..16 bytes)
                app_type : type of the application
                label : optional application label
                fs : optional file system collaborator used for AT+CRLA
        """
        if not is_hex(aid, minlen=10, maxlen=32):
            raise ConfigError('Invalid AID: %s' % aid)
        self.aid = aid.lower()
        self.app_type = app_type
        self.label = label
        self.fs = fs

    def __str__(self):
        return '%s(%s)' % (self.app_type.name, self.aid)

    def __repr__(self):
        return '%s(aid=%s, type=%s)' % (self.__class__.__name__, self.aid, self.app_type.name)

    def matches(self, aid: Hexstr) -> bool:
        """Does the (possibly partial, ISO 7816-4 style right-truncated) AID select this application?"""
        aid = aid.lower()
        return len(aid) > 0 and self.aid.startswith(aid)

    def to_ef_dir_record(self) -> bytes:
        """Encode the application template as found in an EF.DIR record."""
        label = None
        if self.label:
            label = {'value': self.label.encode('utf-8')}
        return _construct_app_template.build({'body': {'aid': bytes(h2b(self.aid)), 'label': label}})


class ApplicationRegistry:
    """The read-only list of applications configured on a card."""

    def __init__(self, applications: List[CardApplication]):
        self._applications = tuple(applications)

    def __iter__(self):
        return iter(self._applications)

    def __len__(self):
        return len(self._applications)

    def find(self, aid: Hexstr) -> CardApplication:
        """Find the first configured application selected by a (partial) AID."""
        for app in self._applications:
            if app.matches(aid):
                return app
        raise UnknownApplication('No application with AID %s' % aid)

    def ef_dir(self) -> Hexstr:
        """All application templates, concatenated as they are returned by AT+CUAD."""
        return b2h(b''.join(app.to_ef_dir_record() for app in self._applications))
