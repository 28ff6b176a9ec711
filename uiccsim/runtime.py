# coding=utf-8
"""Representation of the runtime state of one AT command line talking to a
simulated card: the logical channels (sessions) opened towards its applications.
"""

# (C) 2021 by Harald Welte <laforge@osmocom.org>
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

import threading
from typing import Tuple

from osmocom.utils import Hexstr

from uiccsim.app import CardApplication
from uiccsim.exceptions import ChannelLimitReached, ChannelNotFound
from uiccsim.log import UiccSimLogger

log = UiccSimLogger.get("RUNTIME")

MAX_LOGICAL_CHANNELS = 4
SESSION_ID_BASE = 257
SESSION_ID_MAX = 0xffff


class RuntimeState:
    """Represent the logical channels one client has opened on a simulated card.

    This is the only place session ids are minted.  Every AT command line
    (serial port, TCP connection, ...) gets its own RuntimeState; the card
    itself is shared."""

    def __init__(self, card: 'SimulatedCard', max_channels: int = MAX_LOGICAL_CHANNELS):
        """
        Args:
                card : SimulatedCard instance
                max_channels : number of logical channels that may be open at the same time
        """
        self.card = card
        self.max_channels = max_channels
        self.lchan = {}
        self._next_session_id = SESSION_ID_BASE
        self._lock = threading.Lock()

    def _allocate_session_id(self) -> int:
        # caller holds the lock; the id space is far larger than max_channels
        while True:
            session_id = self._next_session_id
            if self._next_session_id >= SESSION_ID_MAX:
                self._next_session_id = SESSION_ID_BASE
            else:
                self._next_session_id += 1
            if session_id not in self.lchan:
                return session_id

    def open_channel(self, aid: Hexstr) -> int:
        """Open a logical channel to the application selected by a (partial) AID.

        Returns:
                the session id of the new channel
        Raises:
                UnknownApplication : no configured application matches
                ChannelLimitReached : all logical channels are in use
        """
        app = self.card.applications.find(aid)
        with self._lock:
            if len(self.lchan) >= self.max_channels:
                log.warning('Cannot open channel to %s: %u channels already open', app, len(self.lchan))
                raise ChannelLimitReached('all %u logical channels in use' % self.max_channels)
            session_id = self._allocate_session_id()
            self.lchan[session_id] = RuntimeLchan(session_id, app, self)
        log.info('Opened logical channel %u to %s', session_id, app)
        return session_id

    def close_channel(self, session_id: int):
        """Close a logical channel.  Closing a channel that is not open is not an error."""
        with self._lock:
            lchan = self.lchan.pop(session_id, None)
        if lchan:
            log.info('Closed logical channel %u to %s', session_id, lchan.app)
        else:
            log.debug('Close of unknown logical channel %u ignored', session_id)

    def lookup(self, session_id: int) -> 'RuntimeLchan':
        """Find an open logical channel by its session id."""
        with self._lock:
            lchan = self.lchan.get(session_id)
        if lchan is None:
            raise ChannelNotFound(session_id)
        return lchan

    def reset(self):
        """Close all logical channels, e.g. when the client disconnects."""
        with self._lock:
            self.lchan = {}


class RuntimeLchan:
    """Represent the runtime state of a logical channel with a card."""

    def __init__(self, session_id: int, app: CardApplication, rs: RuntimeState):
        self.session_id = session_id
        self.app = app
        self.rs = rs

    def __str__(self):
        return 'lchan %u (%s)' % (self.session_id, self.app)

    @property
    def aid(self) -> Hexstr:
        return self.app.aid

    def authenticate(self, apdu: Hexstr) -> Hexstr:
        """Execute an AUTHENTICATE command APDU on this channel."""
        return self.rs.card.authenticate(self.app, apdu)

    def file_access(self, command: str) -> Tuple[bool, str]:
        """Pass a textual file access command to the application's file system."""
        if self.app.fs is None:
            return False, ''
        return self.app.fs.file_access(command)
