#!/usr/bin/env python3

# Simulate the UICC authentication functions of a mobile phone's SIM behind
# the 3GPP TS 27.007 AT command interface (AT+CUAD/CCHO/CCHC/CGLA/CRLA)
#
# (C) 2021-2025 by sysmocom - s.f.m.c. GmbH
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

import sys
import asyncio
import argparse
import logging, colorlog

import cmd2
from cmd2 import style
from packaging import version

from uiccsim.config import load_card_config
from uiccsim.exceptions import ConfigError
from uiccsim.log import UiccSimLogger
from uiccsim.transport import AtLineDiscipline
from uiccsim.transport.serial import SerialAtPort
from uiccsim.transport.tcp import AtTcpServer

log_format='%(log_color)s%(levelname)-8s%(reset)s %(name)s: %(message)s'
colorlog.basicConfig(level=logging.INFO, format = log_format)
logger = colorlog.getLogger()

LOG_COLORS = {logging.WARN: "\033[33m", logging.ERROR: "\033[31m", logging.CRITICAL: "\033[31m"}


class UiccSimShell(cmd2.Cmd):
    """Interactive console: every line that is not a shell command is passed
    to the AT command handler of the simulated card."""
    CUSTOM_CATEGORY = 'uicc-sim Commands'
    BANNER = """Welcome to uicc-sim!
Type AT commands (e.g. AT+CUAD, AT+CCHO="a0000000871002") to talk to the simulated card."""

    def __init__(self, line: AtLineDiscipline):
        if version.parse(cmd2.__version__) < version.parse("2.0.0"):
            kwargs = {'use_ipython': False}
        else:
            kwargs = {'include_ipy': False}
        # pylint: disable=unexpected-keyword-arg
        super().__init__(persistent_history_file='~/.uicc_sim_history', allow_cli_args=False,
                         auto_load_commands=False, **kwargs)
        self.intro = style(self.BANNER, bold=True)
        self.prompt = 'uicc-sim> '
        self.default_category = 'uicc-sim built-in commands'
        self.line = line

    def default(self, statement: cmd2.Statement):
        for rsp in self.line.handle_line(statement.raw):
            self.poutput(rsp)

    @cmd2.with_category(CUSTOM_CATEGORY)
    def do_channels(self, _):
        """List the open logical channels"""
        for session_id, lchan in sorted(self.line.rs.lchan.items()):
            self.poutput('%u: %s' % (session_id, lchan.app))

    @cmd2.with_category(CUSTOM_CATEGORY)
    def do_applications(self, _):
        """List the applications of the simulated card"""
        for app in self.line.rs.card.applications:
            self.poutput(repr(app))

    @cmd2.with_category(CUSTOM_CATEGORY)
    def do_reset(self, _):
        """Close all logical channels"""
        self.line.rs.reset()

    def do_eof(self, _: argparse.Namespace) -> bool:
        self.poutput("")
        return self.do_quit('')


option_parser = argparse.ArgumentParser(description='Simulated UICC behind a 3GPP TS 27.007 AT command interface',
                                        formatter_class=argparse.ArgumentDefaultsHelpFormatter)
global_group = option_parser.add_argument_group('General Options')
global_group.add_argument('-c', '--config', required=True,
                          help='YAML file describing the simulated card (keys, SQN, applications)')
global_group.add_argument('-v', '--verbose', action='store_true', default=False,
                          help='Enable debug output')

subparsers = option_parser.add_subparsers(help='AT command interface', dest='mode', required=True)

parser_serial = subparsers.add_parser('serial', help='Serve AT commands on a serial device')
SerialAtPort.argparse_add_args(parser_serial)

parser_tcp = subparsers.add_parser('tcp', help='Serve AT commands to TCP clients')
AtTcpServer.argparse_add_args(parser_tcp)

parser_shell = subparsers.add_parser('shell', help='Interactive AT command console')


if __name__ == '__main__':

    opts = option_parser.parse_args()

    UiccSimLogger.setup(print, LOG_COLORS)
    if opts.verbose:
        UiccSimLogger.set_verbose(True)
        UiccSimLogger.set_level(logging.DEBUG)
        logger.setLevel(logging.DEBUG)

    try:
        card = load_card_config(opts.config)
    except (ConfigError, OSError) as e:
        logger.error('Cannot load card configuration: %s', e)
        sys.exit(2)
    logger.info('Simulating %s', card)

    if opts.mode == 'serial':
        port = SerialAtPort(card, opts.device, opts.baudrate)
        port.run()
    elif opts.mode == 'tcp':
        server = AtTcpServer(card, opts.host, opts.port)
        try:
            asyncio.run(server.serve_forever())
        except KeyboardInterrupt:
            logger.info('Terminating')
    elif opts.mode == 'shell':
        app = UiccSimShell(AtLineDiscipline(card, name='shell'))
        UiccSimLogger.setup(app.poutput, LOG_COLORS)
        sys.exit(app.cmdloop())
    else:
        raise ValueError("unsupported mode %s" % opts.mode)
