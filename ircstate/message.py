"""
Parsing of raw server lines into events.

>>> event = parse(':alice!a@example.com JOIN #test')
>>> print(event)
type: join, source: alice!a@example.com, target: #test, arguments: []
>>> event.source.nick
'alice'

Numerics are translated into readable event types, and message tags
are skipped.

>>> parse('@time=12:00 :irc.example.net 005 bot CHANTYPES=# :are supported').type
'featurelist'
"""

import re

from . import events

_line_pattern = re.compile(
    r"^(@[^ ]* )?(:(?P<source>[^ ]+) +)?(?P<command>[^ ]+)( *(?P<params> .+))?"
)


def split_params(params):
    """
    Split the parameters of a line, the trailing one being introduced
    by a colon and possibly containing spaces.

    >>> split_params(None)
    []
    >>> split_params(' 353 bot = #test :@alice +bob')
    ['353', 'bot', '=', '#test', '@alice +bob']
    >>> split_params(' #test bob :')
    ['#test', 'bob', '']
    """
    if not params:
        return []
    middle, colon, trailing = params.partition(' :')
    result = middle.split()
    if colon:
        result.append(trailing)
    return result


class NickMask(str):
    """
    The source of an event, ``nick!user@host`` for users and a bare
    name for servers.

    >>> mask = NickMask('carol!c@carol.example.com')
    >>> mask.nick, mask.user, mask.host
    ('carol', 'c', 'carol.example.com')
    >>> server = NickMask('irc.example.net')
    >>> server.nick, server.user, server.host
    ('irc.example.net', None, None)
    """

    def _split(self):
        nick, _, userhost = self.partition('!')
        user, _, host = userhost.partition('@')
        return nick, user or None, host or None

    @property
    def nick(self):
        return self._split()[0]

    @property
    def user(self):
        return self._split()[1]

    @property
    def host(self):
        return self._split()[2]


class Event:
    """
    A server message handed to :meth:`ircstate.state.State.handle`.

    >>> print(Event('kick', 'op!o@host', '#channel', ['victim']))
    type: kick, source: op!o@host, target: #channel, arguments: ['victim']
    """

    def __init__(self, type, source, target, arguments=None):
        self.type = type
        self.source = source
        self.target = target
        self.arguments = arguments if arguments is not None else []

    def __str__(self):
        tmpl = "type: {type}, source: {source}, target: {target}, arguments: {arguments}"
        return tmpl.format(**vars(self))


def parse(line):
    """
    Parse one line from the server into an Event, or None if the line
    isn't a protocol message.

    The first argument of every command but QUIT is its target.

    >>> event = parse(':op!o@host KICK #test bob :bye')
    >>> event.target, event.arguments
    ('#test', ['bob', 'bye'])
    >>> parse(':bob!b@host QUIT :gone').arguments
    ['gone']
    >>> parse('')
    """
    match = _line_pattern.match(line)
    if not match:
        return None
    source = match.group('source')
    command = events.Code.lookup(match.group('command'))
    arguments = split_params(match.group('params'))
    target = None
    if command != 'quit' and arguments:
        target, arguments = arguments[0], arguments[1:]
    return Event(str(command), source and NickMask(source), target, arguments)
