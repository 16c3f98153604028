#! /usr/bin/env python
#
# Replay a captured IRC session through ircstate.
#
# The log holds one raw line received from the server per line, as
# captured by a client's raw log. At the end, the channels and their
# members are printed, along with the WHO requests the state issued.
#
# % ./replay.py session.log
# #python (3 users)
#   @alice
#   +bob
#   bot

import argparse
import sys

import jaraco.logging

import ircstate
from ircstate.state import State, QueuedTransport


def get_args():
    parser = argparse.ArgumentParser()
    parser.add_argument(
        'log', type=argparse.FileType('r'), nargs='?', default=sys.stdin,
        help="file of raw server lines (default: stdin)",
    )
    parser.add_argument(
        '-n', '--nickname',
        help="our nickname, if the log starts after RPL_WELCOME",
    )
    parser.add_argument(
        '--version', action='version', version=ircstate._get_version()
    )
    jaraco.logging.add_arguments(parser)
    return parser.parse_args()


def format_member(state, channel, nick):
    prefix = state.features.prefix
    mode = prefix.highest(channel.privileges(nick))
    user = state.users[nick]
    away = " (away)" if user.away else ""
    return "  {}{}{}".format(prefix.modes.get(mode, ''), user.nick, away)


def main():
    args = get_args()
    jaraco.logging.setup(args)

    transport = QueuedTransport()
    state = State(nickname=args.nickname, transport=transport)
    for line in args.log:
        state.process_line(line.rstrip('\r\n'))

    for name, channel in sorted(state.channels.items()):
        print("{} ({} users)".format(channel.name, len(channel.users)))
        for nick in sorted(channel.users):
            print(format_member(state, channel, nick))
    for command, target in transport.requests:
        print("requested:", command, target)


if __name__ == '__main__':
    main()
