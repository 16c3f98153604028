"""
Channel mode classification and MODE string interpretation.

Servers describe their channel modes in four classes through the
CHANMODES ISUPPORT token, and their membership privileges through the
PREFIX token. Both are needed to know which mode characters of a MODE
command consume an argument.
"""

import collections
import enum
import re


class ModeClass(enum.Enum):
    LIST = 'A'
    "Adds or removes an entry of a list; always has an argument."

    KEY = 'B'
    "Changes a setting; always has an argument."

    LIMIT = 'C'
    "Changes a setting; has an argument only when set."

    SETTING = 'D'
    "Changes a setting; never has an argument."

    PERMISSION = 'prefix'
    "Grants or revokes a membership privilege; the argument is a nick."

    USER = 'user'
    "A user mode flag."

    UNKNOWN = None

    def takes_argument(self, sign):
        """
        >>> ModeClass.LIMIT.takes_argument('+')
        True
        >>> ModeClass.LIMIT.takes_argument('-')
        False
        """
        if self is ModeClass.LIMIT:
            return sign == '+'
        return self in (ModeClass.LIST, ModeClass.KEY, ModeClass.PERMISSION)


class ModeClassifier:
    """
    The four channel mode classes announced by CHANMODES.

    >>> classifier = ModeClassifier.from_chanmodes('beI,k,l,imnpst')
    >>> classifier.classify('I')
    <ModeClass.LIST: 'A'>
    >>> classifier.classify('t')
    <ModeClass.SETTING: 'D'>

    Groups beyond the fourth are ignored and missing groups are empty.

    >>> ModeClassifier.from_chanmodes('b,k,l,imnt,XYZ').classify('X')
    <ModeClass.UNKNOWN: None>
    >>> ModeClassifier.from_chanmodes('b,k').limit_modes
    frozenset()
    """

    classes = ModeClass.LIST, ModeClass.KEY, ModeClass.LIMIT, ModeClass.SETTING

    def __init__(self, list_modes='', key_modes='', limit_modes='', setting_modes=''):
        self.list_modes = frozenset(list_modes)
        self.key_modes = frozenset(key_modes)
        self.limit_modes = frozenset(limit_modes)
        self.setting_modes = frozenset(setting_modes)

    @classmethod
    def from_chanmodes(cls, value):
        return cls(*value.split(',')[:4])

    @property
    def groups(self):
        return self.list_modes, self.key_modes, self.limit_modes, self.setting_modes

    def classify(self, mode, prefix=None):
        """
        Classify a channel mode character. The classes are checked in
        order, so a character announced in two groups takes the first.
        Characters in none of them are checked against the ``prefix``
        table's modes.

        >>> classifier = ModeClassifier('b', 'k', 'l', 'n')
        >>> classifier.classify('o', PrefixTable.parse('(ov)@+'))
        <ModeClass.PERMISSION: 'prefix'>
        >>> classifier.classify('o')
        <ModeClass.UNKNOWN: None>
        """
        for mode_class, group in zip(self.classes, self.groups):
            if mode in group:
                return mode_class
        if prefix is not None and mode in prefix.modes:
            return ModeClass.PERMISSION
        return ModeClass.UNKNOWN

    def __eq__(self, other):
        return isinstance(other, ModeClassifier) and self.groups == other.groups

    def __repr__(self):
        return '<ModeClassifier {}>'.format(
            ','.join(''.join(sorted(group)) for group in self.groups)
        )


class PrefixTable:
    """
    The bijection between membership prefixes and privilege modes
    announced by PREFIX. Order is relevant (most powerful first), so it
    is retained.

    >>> table = PrefixTable.parse('(qaohv)~&@%+')
    >>> table.prefixes['@']
    'o'
    >>> table.modes['o']
    '@'
    >>> tuple(table.prefixes)
    ('~', '&', '@', '%', '+')
    """

    pattern = re.compile(r'\(([^)]*)\)(.*)')

    def __init__(self, pairs=()):
        self.modes = collections.OrderedDict()
        self.prefixes = collections.OrderedDict()
        for mode, prefix in pairs:
            self.modes[mode] = prefix
            self.prefixes[prefix] = mode

    @classmethod
    def parse(cls, value):
        """
        Parse a PREFIX value, returning None if it is malformed.

        >>> PrefixTable.parse('(ov)@')
        >>> PrefixTable.parse('ov@+')
        >>> PrefixTable.parse('(oo)@+')
        >>> len(PrefixTable.parse('()').modes)
        0
        """
        match = cls.pattern.fullmatch(value)
        if not match:
            return None
        modes, prefixes = match.groups()
        unique = len(set(modes)) == len(modes) and len(set(prefixes)) == len(prefixes)
        if len(modes) != len(prefixes) or not unique:
            return None
        return cls(zip(modes, prefixes))

    def __len__(self):
        return len(self.modes)

    def __eq__(self, other):
        return isinstance(other, PrefixTable) and self.modes == other.modes

    def __repr__(self):
        return '<PrefixTable ({}){}>'.format(
            ''.join(self.modes), ''.join(self.prefixes)
        )

    def strip(self, name):
        """
        Split leading prefix characters off a name.

        >>> PrefixTable.parse('(ov)@+').strip('@+alice')
        ('@+', 'alice')
        >>> PrefixTable.parse('(ov)@+').strip('carol')
        ('', 'carol')
        """
        nick = name.lstrip(''.join(self.prefixes))
        return name[: len(name) - len(nick)], nick

    def modes_for(self, prefixes):
        """
        Resolve prefix characters to privilege modes, ignoring any that
        aren't known.

        >>> sorted(PrefixTable.parse('(ov)@+').modes_for('*@+'))
        ['o', 'v']
        """
        return {self.prefixes[char] for char in prefixes if char in self.prefixes}

    def rank(self, mode):
        """
        The position of a privilege mode, 0 being the most powerful.

        >>> PrefixTable.parse('(ov)@+').rank('v')
        1
        """
        return list(self.modes).index(mode)

    def highest(self, modes):
        """
        Return the most powerful of the privilege modes given, or None.

        >>> table = PrefixTable.parse('(qaohv)~&@%+')
        >>> table.highest({'v', 'h'})
        'h'
        >>> table.highest(set())
        """
        known = [mode for mode in modes if mode in self.modes]
        return min(known, key=self.rank, default=None)


ModeChange = collections.namedtuple(
    'ModeChange', ('mode_class', 'sign', 'mode', 'argument')
)


def parse_modes(is_channel, mode_string, arguments, classifier=None, prefix=None):
    """
    Interpret a MODE command, returning a list of ModeChange.

    >>> classifier = ModeClassifier('beI', 'k', 'l', 'imnpst')
    >>> prefix = PrefixTable.parse('(ov)@+')
    >>> for change in parse_modes(
    ...         True, '+o-v', ['alice', 'bob'], classifier, prefix):
    ...     print(change.sign, change.mode, change.argument)
    + o alice
    - v bob

    Limit modes only take an argument when set.

    >>> [change.argument for change in parse_modes(
    ...     True, '-l+l', ['10'], classifier, prefix)]
    [None, '10']

    A mode short of its argument is skipped without affecting the rest.

    >>> [change.mode for change in parse_modes(
    ...     True, '+kt', [], classifier, prefix)]
    ['t']

    Unknown modes are ignored, and user targets only have flags.

    >>> parse_modes(True, '+X', ['x'], classifier, prefix)
    []
    >>> [(change.mode_class.name, change.mode) for change in parse_modes(
    ...     False, '+i-w', ['ignored'])]
    [('USER', 'i'), ('USER', 'w')]

    >>> parse_modes(True, '', [])
    []
    """
    classifier = classifier or ModeClassifier()
    arguments = collections.deque(arguments)
    changes = []
    sign = '+'
    for mode in mode_string:
        if mode in '+-':
            sign = mode
            continue
        if not is_channel:
            changes.append(ModeChange(ModeClass.USER, sign, mode, None))
            continue
        mode_class = classifier.classify(mode, prefix)
        if mode_class is ModeClass.UNKNOWN:
            continue
        argument = None
        if mode_class.takes_argument(sign):
            if not arguments:
                continue
            argument = arguments.popleft()
        changes.append(ModeChange(mode_class, sign, mode, argument))
    return changes
