"""
Session state of an IRC client.

A ``State`` is fed every event received from one server connection, in
order, and keeps track of what the server supports and who is where.

>>> state = State()
>>> for line in [
...         ':irc.example.net 001 bot :Welcome',
...         ':irc.example.net 005 bot CHANTYPES=# PREFIX=(ov)@+ :are supported',
...         ':bot!b@example.com JOIN #test',
...         ':irc.example.net 353 bot = #test :bot @alice +bob',
...         ]:
...     state.process_line(line)
>>> sorted(state.channels['#TEST'].users)
['alice', 'bob', 'bot']
>>> state.channels['#test'].is_oper('Alice')
True
>>> state.is_channel('&test')
False
"""

import abc
import collections
import logging

from . import message
from .features import FeatureSet
from .membership import MembershipStore
from .modes import ModeClass, parse_modes

log = logging.getLogger(__name__)


class StateError(Exception):
    "An error in tracking the session state"


class MalformedEvent(StateError, ValueError):
    "An event lacked the arguments its type requires"


class Transport(metaclass=abc.ABCMeta):
    """
    Where the state sends the requests it needs to fill itself in. A
    ServerConnection from the irc library satisfies this interface.
    """

    @abc.abstractmethod
    def who(self, target):
        """
        Request a WHO for a channel or nick. Delivery isn't required
        for the state to stay consistent.
        """


class NullTransport(Transport):
    def who(self, target):
        log.debug("Not requesting WHO %s; no transport", target)


class QueuedTransport(Transport):
    """
    A transport keeping its requests for the host to send.

    >>> transport = QueuedTransport()
    >>> transport.who('#test')
    >>> transport.requests.popleft()
    ('WHO', '#test')
    """

    def __init__(self):
        self.requests = collections.deque()

    def who(self, target):
        self.requests.append(('WHO', target))


class State:
    """
    The state of a session, as seen by the client whose nick is
    ``nickname``.

    Attributes:

        features -- The FeatureSet announced by the server.

        store -- The MembershipStore of users and channels shared with
            the client.

        user_modes -- The client's own user modes.
    """

    def __init__(self, nickname=None, transport=None):
        self.nickname = nickname
        self.transport = transport or NullTransport()
        self.features = FeatureSet()
        self.store = MembershipStore(normalize=self.normalize, is_self=self.is_self)
        self.user_modes = set()

    def reset(self):
        self.features.reset()
        self.store.clear()
        self.user_modes = set()

    @property
    def casemapping(self):
        return self.features.casemapping

    def normalize(self, name):
        return self.casemapping.normalize(name)

    def lower(self, name):
        return self.casemapping.lower(name)

    def upper(self, name):
        return self.casemapping.upper(name)

    def isupport(self, name):
        return self.features.get(name)

    def is_channel(self, name):
        return self.features.is_channel(name)

    def is_self(self, nick):
        """
        Check whether a nick is the client's own, under the server's
        case mapping.

        >>> State('[Bot]').is_self('{bot}')
        True
        >>> State().is_self('bot')
        False
        """
        if self.nickname is None or nick is None:
            return False
        fold = self.casemapping.fold
        return fold(nick) == fold(self.nickname)

    def user_in_channel(self, user, channel):
        return self.store.user_in_channel(user, channel)

    def in_channel(self, channel):
        "Check whether the client itself is in a channel."
        return self.nickname is not None and self.user_in_channel(self.nickname, channel)

    @property
    def channels(self):
        return self.store.channels

    @property
    def users(self):
        return self.store.users

    def process_line(self, line):
        """
        Parse a raw line from the server and handle the resulting event.
        """
        event = message.parse(line)
        if event is None:
            return None
        return self.handle(event)

    def handle(self, event):
        """
        Apply an event to the state. Events of types that don't affect
        the state are ignored, and so are malformed events.
        """
        handler = getattr(self, '_on_' + event.type, None)
        if handler is None:
            return None
        log.debug("Handling %s", event)
        try:
            return handler(event)
        except MalformedEvent as exc:
            log.warning("Ignoring malformed %s event: %s", event.type, exc)
            return None

    @staticmethod
    def _arguments(event, count):
        if len(event.arguments) < count:
            raise MalformedEvent(
                "expected {count} arguments, got {event.arguments!r}".format(
                    count=count, event=event
                )
            )
        return event.arguments[:count]

    @staticmethod
    def _target(event):
        if not event.target:
            raise MalformedEvent("no target")
        return event.target

    @staticmethod
    def _source_nick(event):
        if not event.source:
            raise MalformedEvent("no source")
        return message.NickMask(event.source).nick

    # RPL_WELCOME
    def _on_welcome(self, event):
        self.nickname = self._target(event)
        log.info("Registered as %s", self.nickname)
        self.reset()

    # RPL_MYINFO
    def _on_myinfo(self, event):
        server, version, umodes = self._arguments(event, 3)
        self.features.load_user_modes(umodes)

    # RPL_ISUPPORT
    def _on_featurelist(self, event):
        # the last argument is "are supported by this server"
        self.features.apply(event.arguments[:-1])

    # RPL_WHOREPLY
    def _on_whoreply(self, event):
        # :kenny.chatspike.net 352 guest #test grawity broken.symlink
        #   *.chatspike.net grawity H@%+ :0 Mantas M.
        channel, username, host, server, nick, flags = self._arguments(event, 6)

        away = flags[:1] == 'G'
        if flags[:1] in ('H', 'G'):
            flags = flags[1:]

        if channel != '*' and self.in_channel(channel):
            user, ch = self.store.ensure_user_in_channel(nick, channel)
            ch.set_privileges(nick, self.features.prefix.modes_for(flags))
        else:
            user = self.store.get_user(nick)
        if user is None:
            log.debug("WHO reply for %s, who shares no channel with us", nick)
            return

        user.away = away
        user.username = username
        user.host = host

    def _on_endofwho(self, event):
        log.debug("End of WHO for %s", event.arguments[:1])

    # RPL_NAMREPLY
    def _on_namreply(self, event):
        """
        event.arguments[0] == "@" for secret channels,
                          "*" for private channels,
                          "=" for others (public channels)
        event.arguments[1] == channel
        event.arguments[2] == nick list
        """
        ch_type, channel, nick_list = self._arguments(event, 3)

        if channel == '*':
            # User is not in any visible channel
            # http://tools.ietf.org/html/rfc2812#section-3.2.5
            return
        prefix = self.features.prefix
        for name in nick_list.split():
            prefixes, nick = prefix.strip(name)
            if not nick:
                continue
            user, ch = self.store.ensure_user_in_channel(nick, channel)
            ch.set_privileges(nick, prefix.modes_for(prefixes))

    def _on_endofnames(self, event):
        log.debug("End of NAMES for %s", event.arguments[:1])

    def _on_join(self, event):
        channel = self._target(event)
        nick = self._source_nick(event)

        if self.is_self(nick):
            log.info("Joined %s", channel)
            self.store.ensure_user_in_channel(nick, channel)
            # fetch everyone already there
            self.transport.who(channel)
            return

        if not self.in_channel(channel):
            log.warning("Ignoring %s joining %s, a channel we're not in", nick, channel)
            return

        log.debug("%s joined %s", nick, channel)
        user, ch = self.store.ensure_user_in_channel(nick, channel)
        mask = message.NickMask(event.source)
        user.username = mask.user or user.username
        user.host = mask.host or user.host
        self.transport.who(nick)

    def _on_part(self, event):
        channel = self._target(event)
        nick = self._source_nick(event)
        if self.is_self(nick):
            log.info("Left %s", channel)
        else:
            log.debug("%s left %s", nick, channel)
        self.store.ensure_user_not_in_channel(nick, channel)

    def _on_kick(self, event):
        channel = self._target(event)
        nick, = self._arguments(event, 1)
        if self.is_self(nick):
            log.info("Kicked from %s", channel)
        else:
            log.debug("%s was kicked from %s", nick, channel)
        self.store.ensure_user_not_in_channel(nick, channel)

    def _on_quit(self, event):
        nick = self._source_nick(event)
        if self.is_self(nick):
            log.warning("Our own QUIT was received")
        else:
            log.debug("%s has quit", nick)
        self.store.remove_user(nick)

    def _on_nick(self, event):
        before = self._source_nick(event)
        after = self._target(event)
        if self.is_self(before):
            log.info("Nick changed from %s to %s", before, after)
            self.nickname = after
        else:
            log.debug("%s is now known as %s", before, after)
        self.store.rename_user(before, after)

    def _on_mode(self, event):
        """
        Interpret a MODE command and apply it to the channel, or to the
        client's own user modes. Returns the list of ModeChange.
        """
        target = self._target(event)
        mode_string, = self._arguments(event, 1)
        is_channel = self.is_channel(target)
        changes = parse_modes(
            is_channel,
            mode_string,
            event.arguments[1:],
            self.features.chanmodes,
            self.features.prefix,
        )
        if is_channel:
            self._apply_channel_modes(target, changes)
        elif self.is_self(target):
            self._apply_user_modes(changes)
        return changes

    # the irc library reports user mode changes separately
    _on_umode = _on_mode

    def _apply_channel_modes(self, target, changes):
        channel = self.store.get_channel(target)
        if channel is None:
            log.debug("Ignoring modes on %s, a channel we're not in", target)
            return

        for change in changes:
            log.debug("%s: %s%s %s", channel.name, change.sign, change.mode, change.argument)
            adding = change.sign == '+'
            if change.mode_class is ModeClass.PERMISSION:
                update = channel.add_privilege if adding else channel.remove_privilege
                update(change.argument, change.mode)
            elif change.mode_class is ModeClass.LIST:
                update = channel.add_to_list if adding else channel.remove_from_list
                update(change.mode, change.argument)
            elif adding:
                channel.set_mode(change.mode, change.argument)
            else:
                channel.clear_mode(change.mode)

    def _apply_user_modes(self, changes):
        for change in changes:
            if change.sign == '+':
                self.user_modes.add(change.mode)
            else:
                self.user_modes.discard(change.mode)
