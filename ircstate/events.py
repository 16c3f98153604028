from importlib.resources import files

from jaraco.text import clean, drop_comment, lines_from


class Code(str):
    def __new__(cls, code, name):
        return super().__new__(cls, name)

    def __init__(self, code, name):
        self.code = code

    def __int__(self):
        return int(self.code)

    @staticmethod
    def lookup(command) -> 'Code':
        """
        Lookup a command by numeric or by name.

        >>> Code.lookup('005')
        'featurelist'
        >>> Code.lookup('005').code
        '005'
        >>> int(Code.lookup('namreply'))
        353

        If a command is supplied that's an unrecognized name or code,
        a Code object is still returned.

        >>> fallback = Code.lookup('JOIN')
        >>> fallback
        'join'
        >>> fallback.code
        'join'
        >>> Code.lookup('999')
        '999'
        """
        fallback = Code(command.lower(), command.lower())
        return numeric.get(command, _by_name.get(command.lower(), fallback))


_codes = [
    Code(*line.split())
    for line in map(drop_comment, clean(lines_from(files(__package__) / 'codes.txt')))
]


numeric = {code.code: code for code in _codes}

_by_name = {v: v for v in numeric.values()}
