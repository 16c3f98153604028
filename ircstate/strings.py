"""
Server-declared case mappings.

IRC servers announce, through the CASEMAPPING ISUPPORT token, which
characters fold to which when comparing nicknames and channel names.
Only the ASCII ranges named by each scheme are folded; everything else
(including non-ASCII letters) is left alone.

>>> RFC1459.lower('Nick[^]')
'nick{~}'
>>> STRICT_RFC1459.lower('Nick[^]')
'nick{^}'
>>> ASCII.lower('Nick[^]')
'nick[^]'
"""

from jaraco.text import FoldedCase


class CaseMapping:
    """
    A case mapping folding the characters ``first`` through ``last``
    (inclusive) onto the characters 32 code points above them.

    >>> ASCII.upper('foo{bar}')
    'FOO{BAR}'
    >>> RFC1459.upper('foo{bar}~')
    'FOO[BAR]^'
    """

    def __init__(self, name, first, last):
        self.name = name
        upper_chars = ''.join(map(chr, range(ord(first), ord(last) + 1)))
        lower_chars = ''.join(chr(ord(c) + 32) for c in upper_chars)
        self._lower = str.maketrans(upper_chars, lower_chars)
        self._upper = str.maketrans(lower_chars, upper_chars)
        self.folded = type(
            'IRCFoldedCase', (IRCFoldedCase,), dict(casemapping=self)
        )

    def __repr__(self):
        return '<CaseMapping {self.name}>'.format(self=self)

    def lower(self, name):
        return name.translate(self._lower)

    def upper(self, name):
        return name.translate(self._upper)

    normalize = lower

    def fold(self, name):
        """
        Return the name as a string comparing case-insensitively under
        this mapping.

        >>> RFC1459.fold('[Bot]') == RFC1459.fold('{bot}')
        True
        >>> ASCII.fold('[Bot]') == ASCII.fold('{bot}')
        False
        """
        return self.folded(name)


class IRCFoldedCase(FoldedCase):
    """
    A version of FoldedCase that honors a server case mapping
    (RFC 1459 unless bound to another through ``CaseMapping.fold``).

    >>> IRCFoldedCase('Foo^').lower()
    'foo~'

    >>> IRCFoldedCase('[this]') == IRCFoldedCase('{THIS}')
    True

    >>> IRCFoldedCase('[This]').casefold()
    '{this}'

    Letters outside ASCII are not folded.

    >>> IRCFoldedCase('ÉTÉ').lower()
    'ÉtÉ'

    >>> IRCFoldedCase().lower()
    ''
    """

    casemapping = None

    def lower(self):
        return self.casemapping.lower(str(self))

    def casefold(self):
        """
        Ensure cached superclass value doesn't supersede.

        >>> ob = IRCFoldedCase('[This]')
        >>> ob.casefold()
        '{this}'
        >>> ob.casefold()
        '{this}'
        """
        return self.casemapping.lower(str(self))

    def __setattr__(self, key, val):
        if key == 'casefold':
            return
        return super().__setattr__(key, val)


ASCII = CaseMapping('ascii', 'A', 'Z')
STRICT_RFC1459 = CaseMapping('strict-rfc1459', 'A', ']')
RFC1459 = CaseMapping('rfc1459', 'A', '^')

IRCFoldedCase.casemapping = RFC1459

mappings = {mapping.name: mapping for mapping in (ASCII, STRICT_RFC1459, RFC1459)}


def lookup(name):
    """
    Return the case mapping for a CASEMAPPING value, falling back to
    rfc1459 for unknown or missing values.

    >>> lookup('ascii')
    <CaseMapping ascii>
    >>> lookup('rfc7613')
    <CaseMapping rfc1459>
    >>> lookup(None)
    <CaseMapping rfc1459>
    """
    return mappings.get(name, RFC1459)


def lower(name, casemapping=None):
    return lookup(casemapping).lower(name)


def upper(name, casemapping=None):
    return lookup(casemapping).upper(name)
