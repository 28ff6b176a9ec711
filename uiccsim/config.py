# coding=utf-8
"""Loading of the simulated card configuration.

A card is described by a YAML document holding the card individual key
material and the list of applications:

    ki:  465b5ce8b199b49faa5f0a2ee238a6bc
    opc: cd63cb71954a9f4e48a5994e37a02baf
    sqn: ff9bb4d0b607
    applications:
      - aid: a0000000871004ff49ff0589
        type: ISIM
        label: IMS
        files:
          6f02: 800f...

Instead of 'opc' the operator variant 'op' may be given, OPc is then
derived from Ki and OP.
"""

# (C) 2021-2025 by Sysmocom s.f.m.c. GmbH
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

from typing import List

import yaml

from uiccsim.app import AppType, CardApplication
from uiccsim.card import CardKeys, SimulatedCard
from uiccsim.crypto import derive_milenage_opc
from uiccsim.exceptions import ConfigError, InvalidLength
from uiccsim.filesystem import TransparentFileSystem
from uiccsim.log import UiccSimLogger

log = UiccSimLogger.get("CONFIG")


def _hex_attr(d: dict, name: str) -> str:
    value = d.get(name)
    if value is None:
        raise ConfigError("Card configuration lacks '%s'" % name)
    # YAML turns an all-digit SQN into an integer
    if isinstance(value, int):
        raise ConfigError("'%s' must be given as quoted hex string" % name)
    return str(value).strip()


def card_keys_from_dict(d: dict) -> CardKeys:
    """Create the CardKeys from the 'ki', 'opc'/'op' and 'sqn' attributes."""
    ki = _hex_attr(d, 'ki')
    if 'opc' in d and 'op' in d:
        raise ConfigError("Card configuration must contain either 'opc' or 'op', not both")
    try:
        if 'op' in d:
            opc = derive_milenage_opc(ki, _hex_attr(d, 'op'))
        else:
            opc = _hex_attr(d, 'opc')
        return CardKeys(ki, opc, _hex_attr(d, 'sqn'))
    except (InvalidLength, ValueError) as exc:
        raise ConfigError('Invalid card key material: %s' % exc) from exc


def applications_from_list(apps: list) -> List[CardApplication]:
    result = []
    for a in apps or []:
        if not isinstance(a, dict) or 'aid' not in a:
            raise ConfigError('Application without AID: %s' % a)
        fs = None
        files = a.get('files')
        if files:
            if any(isinstance(x, int) for x in list(files.keys()) + list(files.values())):
                raise ConfigError('File ids and contents of application %s must be quoted hex strings' % a['aid'])
            try:
                fs = TransparentFileSystem({str(fid): str(content) for fid, content in files.items()})
            except ValueError as exc:
                raise ConfigError('Invalid file content of application %s: %s' % (a['aid'], exc)) from exc
        app = CardApplication(str(a['aid']), AppType.from_str(a.get('type', 'UNKNOWN')),
                              label=a.get('label'), fs=fs)
        log.debug('Configured application %s', app)
        result.append(app)
    return result


def card_from_dict(d: dict) -> SimulatedCard:
    """Create a SimulatedCard from an already parsed configuration."""
    if not isinstance(d, dict):
        raise ConfigError('Card configuration must be a mapping')
    return SimulatedCard(card_keys_from_dict(d), applications_from_list(d.get('applications', [])))


def load_card_config(config_file: str) -> SimulatedCard:
    """Read a YAML card configuration file and create the SimulatedCard from it."""
    log.info('Card configuration file: %s', config_file)
    with open(config_file) as cfg:
        try:
            d = yaml.load(cfg, Loader=yaml.FullLoader)
        except yaml.YAMLError as exc:
            raise ConfigError('Cannot parse %s: %s' % (config_file, exc)) from exc
    return card_from_dict(d)
