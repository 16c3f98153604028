"""
The users and channels the bot can see, and who is where.

Every user in ``MembershipStore.users`` shares at least one channel with
the bot, and every channel in ``MembershipStore.channels`` is one the bot
is in. Both sides of the relation are kept in step:

>>> store = MembershipStore(is_self=lambda nick: nick == 'bot')
>>> _ = store.ensure_user_in_channel('bot', '#Test')
>>> _ = store.ensure_user_in_channel('Alice', '#test')
>>> store.user_in_channel('alice', '#TEST')
True
>>> sorted(store.users['ALICE'].channels)
['#test']
>>> store.ensure_user_not_in_channel('bot', '#test')
>>> store.channels, store.users
({}, {})
"""

import collections
import logging

from . import strings
from .dict import IRCDict

log = logging.getLogger(__name__)


class User:
    """
    A user sharing at least one channel with the bot.
    """

    def __init__(self, nick):
        self.nick = nick
        self.away = False
        self.username = None
        self.host = None
        self.channels = set()
        "normalized names of the channels shared with the bot"

    def __repr__(self):
        return '<User {self.nick} channels={channels}>'.format(
            self=self, channels=sorted(self.channels)
        )


class Channel:
    """
    A class for keeping information about an IRC channel.
    """

    def __init__(self, name, normalize=strings.RFC1459.normalize):
        self.name = name
        self.users = IRCDict(normalize=normalize)
        "members, each mapped to the privilege modes held here"
        self.modes = {}
        self.lists = collections.defaultdict(set)

    def __repr__(self):
        return '<Channel {self.name} users={users}>'.format(
            self=self, users=sorted(self.users)
        )

    def has_user(self, nick):
        """Check whether the channel has a user."""
        return nick in self.users

    def privileges(self, nick):
        """Return the privilege modes (e.g. 'o', 'v') a member holds."""
        return frozenset(self.users.get(nick, ()))

    def set_privileges(self, nick, modes):
        if nick in self.users:
            self.users[nick] = set(modes)

    def add_privilege(self, nick, mode):
        if nick in self.users:
            self.users[nick].add(mode)

    def remove_privilege(self, nick, mode):
        if nick in self.users:
            self.users[nick].discard(mode)

    def is_oper(self, nick):
        """Check whether a user has operator status in the channel."""
        return 'o' in self.privileges(nick)

    def is_voiced(self, nick):
        """Check whether a user has voice mode set in the channel."""
        return 'v' in self.privileges(nick)

    def set_mode(self, mode, value=None):
        """Set a setting mode, with its value if it takes one."""
        self.modes[mode] = value

    def clear_mode(self, mode):
        self.modes.pop(mode, None)

    def has_mode(self, mode):
        return mode in self.modes

    def add_to_list(self, mode, entry):
        self.lists[mode].add(entry)

    def remove_from_list(self, mode, entry):
        self.lists[mode].discard(entry)

    def limit(self):
        return self.modes.get('l')

    def key(self):
        return self.modes.get('k')


class MembershipStore:
    """
    The user/channel graph.

    ``normalize`` folds names into keys, and ``is_self`` tells whether a
    nick is the bot's own; both are consulted on every call so that they
    follow the session as it changes.
    """

    def __init__(self, normalize=strings.RFC1459.normalize, is_self=None):
        self.normalize = normalize
        self.is_self = is_self or (lambda nick: False)
        self.clear()

    def clear(self):
        self.users = IRCDict(normalize=self._normalize)
        self.channels = IRCDict(normalize=self._normalize)

    def _normalize(self, name):
        return self.normalize(name)

    def get_user(self, name):
        return self.users.get(name)

    def get_channel(self, name):
        return self.channels.get(name)

    def ensure_user(self, name):
        user = self.users.get(name)
        if user is None:
            user = self.users[name] = User(name)
        return user

    def ensure_channel(self, name):
        channel = self.channels.get(name)
        if channel is None:
            channel = self.channels[name] = Channel(name, self._normalize)
        return channel

    def ensure_user_in_channel(self, user, channel):
        """
        Record ``user`` as a member of ``channel``, creating either as
        needed. Existing privileges are kept.
        """
        u = self.ensure_user(user)
        c = self.ensure_channel(channel)
        c.users.setdefault(user, set())
        u.channels.add(self.normalize(channel))
        return u, c

    def ensure_user_not_in_channel(self, user, channel):
        """
        Remove ``user`` from ``channel``. A user left without channels is
        forgotten. When the user is the bot, every other member is
        removed as well and the channel itself is forgotten.
        """
        c = self.channels.get(channel)
        u = self.users.get(user)
        if c is not None:
            c.users.pop(user, None)
        if u is not None:
            u.channels.discard(self.normalize(channel))
            if not u.channels:
                del self.users[user]

        if c is None or not self.is_self(user):
            return

        log.debug("Tearing down %s", c.name)
        for nick in list(c.users):
            self.ensure_user_not_in_channel(nick, channel)
        del self.channels[channel]

    def rename_user(self, old, new):
        """
        Re-key a user under a new nick. An unknown user is created under
        the new nick.
        """
        user = self.users.pop(old, None)
        if user is None:
            log.debug("Rename of unknown user %s to %s", old, new)
            return self.ensure_user(new)

        if self.normalize(old) != self.normalize(new) and new in self.users:
            log.warning("Dropping stale user %s replaced by %s", new, old)
            self._forget_user(new)

        user.nick = new
        self.users[new] = user
        for name in user.channels:
            members = self.channels[name].users
            members[new] = members.pop(old, set())
        return user

    def _forget_user(self, name):
        user = self.users.pop(name)
        for channel in user.channels:
            self.channels[channel].users.pop(name, None)

    def remove_user(self, name):
        user = self.users.get(name)
        if user is None:
            return
        # removing the last channel forgets the user
        for channel in sorted(user.channels):
            self.ensure_user_not_in_channel(name, channel)

    def user_in_channel(self, user, channel):
        c = self.channels.get(channel)
        return c is not None and user in c.users

    def is_consistent(self):
        """
        Check that both sides of the user/channel relation agree.
        """
        memberships = {
            (nick, name) for name, channel in self.channels.items()
            for nick in channel.users
        }
        channels_of = {
            (nick, name) for nick, user in self.users.items()
            for name in user.channels
        }
        return memberships == channels_of
