from jaraco.collections import KeyTransformingDict

from . import strings


class IRCDict(KeyTransformingDict):
    """
    A dictionary of names whose keys are normalized by a server case
    mapping (RFC 1459 unless another normalizer is supplied).

    >>> d = IRCDict({'[This]': 'that'}, A='foo')

    Keys are stored normalized:

    >>> sorted(d.keys())
    ['a', '{this}']

    And can be referenced with a different case

    >>> d['A'] == 'foo'
    True

    >>> d['{THIS}'] == 'that'
    True

    >>> '{thiS]' in d
    True

    This should work for operations like delete and pop as well.

    >>> d.pop('A') == 'foo'
    True
    >>> del d['{This}']
    >>> len(d)
    0

    Another normalizer may be bound to the instance:

    >>> d = IRCDict(normalize=strings.ASCII.lower)
    >>> d['[Foo]'] = 1
    >>> '{foo}' in d
    False
    """

    def __init__(self, *args, normalize=strings.RFC1459.lower, **kwargs):
        self.normalize = normalize
        super().__init__(*args, **kwargs)

    def transform_key(self, key):
        if isinstance(key, str):
            key = self.normalize(key)
        return key
