import logging

from more_itertools import consume

from . import strings
from .dict import IRCDict
from .modes import ModeClassifier, PrefixTable

log = logging.getLogger(__name__)


# https://tools.ietf.org/html/draft-brocklesby-irc-isupport-03
defaults = IRCDict(
    CASEMAPPING='rfc1459',
    CHANNELLEN='200',
    CHANTYPES='#&',
    EXCEPTS='',
    IDCHAN='',
    INVEX='',
    MODES='3',
    NICKLEN='9',
    PREFIX='(ov)@+',
    SAFELIST='',
    STATUSMSG='',
    STD='',
    TARGMAX='',
)

default_user_modes = 'Oiorw'
"user modes assumed until the server sends RPL_MYINFO"


class FeatureSet:
    """
    An implementation of features as loaded from an ISUPPORT server directive.

    Values are kept as announced; the tokens describing channel types,
    channel modes, membership prefixes and the case mapping also
    rebuild the structures derived from them.

    >>> f = FeatureSet()
    >>> f.load(['target', 'PREFIX=(abc)+-/', 'your message sir'])
    >>> f.prefix.prefixes == {'+': 'a', '-': 'b', '/': 'c'}
    True

    Order of prefix is relevant, so it is retained.

    >>> tuple(f.prefix.prefixes)
    ('+', '-', '/')

    >>> f.load_feature('CHANMODES=foo,bar,baz')
    >>> f.get('chanmodes')
    'foo,bar,baz'
    >>> f.chanmodes.classify('z')
    <ModeClass.LIMIT: 'C'>

    Negating a feature restores its default.

    >>> f.load_feature('-PREFIX')
    >>> f.prefix
    <PrefixTable (ov)@+>
    """

    def __init__(self):
        self.casemapping = strings.RFC1459
        self._values = IRCDict(normalize=self.normalize)
        self.reset()

    def normalize(self, name):
        return self.casemapping.normalize(name)

    def reset(self):
        "forget everything announced and return to the defaults"
        self._values.clear()
        self.casemapping = strings.RFC1459
        self.chanmodes = ModeClassifier()
        self.chantypes = frozenset()
        self.prefix = PrefixTable()
        self.load_user_modes(default_user_modes)
        self.apply('-' + name for name in defaults)

    def get(self, name, default=None):
        """
        Return the announced value of a feature, else its default.

        >>> f = FeatureSet()
        >>> f.get('nicklen')
        '9'
        >>> f.get('NETWORK')
        >>> f.load_feature('NETWORK=Example')
        >>> f.get('network')
        'Example'
        >>> f.load_feature('WHOX')
        >>> f.get('WHOX')
        ''
        """
        if name in self._values:
            return self._values[name]
        return defaults.get(self.normalize(name), default)

    def __contains__(self, name):
        return name in self._values or self.normalize(name) in defaults

    def load(self, arguments):
        "Load the values from RPL_ISUPPORT arguments, nick and trailing text included"
        self.apply(arguments[1:-1])

    def apply(self, features):
        "Load each of a sequence of ISUPPORT tokens"
        consume(map(self.load_feature, features))

    def load_feature(self, feature):
        name, sep, value = feature.partition('=')
        name = self.normalize(name)

        # negating
        negated = name.startswith('-')
        if negated:
            name = name[1:]
        if not name:
            return

        if negated:
            self._values.pop(name, None)
        else:
            self._values[name] = value

        updater = getattr(self, '_update_' + name, None)
        if updater is not None:
            updater(self.get(name, ''))

    def load_user_modes(self, modes):
        "user mode letters, as announced by RPL_MYINFO"
        self.umodes = frozenset(modes)

    def is_channel(self, name):
        """
        Check if a name is a channel name under the announced CHANTYPES.

        >>> f = FeatureSet()
        >>> f.is_channel('#foo'), f.is_channel('&foo'), f.is_channel('!foo')
        (True, True, False)
        >>> f.is_channel('')
        False
        """
        return bool(name) and name[0] in self.chantypes

    def _update_casemapping(self, value):
        self.casemapping = strings.lookup(value)

    def _update_chanmodes(self, value):
        self.chanmodes = ModeClassifier.from_chanmodes(value)

    def _update_chantypes(self, value):
        self.chantypes = frozenset(value)

    def _update_prefix(self, value):
        table = PrefixTable.parse(value)
        if table is None:
            log.warning("Ignoring malformed PREFIX %r", value)
            table = PrefixTable()
        self.prefix = table
