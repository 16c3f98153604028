import pytest

from ircstate.state import State, QueuedTransport

collect_ignore = ["setup.py"]


@pytest.fixture
def transport():
    return QueuedTransport()


@pytest.fixture
def state(transport):
    """
    A State registered as 'bot' on a server announcing the common
    ISUPPORT tokens.
    """
    state = State(transport=transport)
    state.process_line(':irc.example.net 001 bot :Welcome to the network')
    state.process_line(
        ':irc.example.net 005 bot CASEMAPPING=rfc1459 CHANTYPES=#& '
        'CHANMODES=beI,k,l,imnpst PREFIX=(ov)@+ :are supported by this server'
    )
    return state


@pytest.fixture
def joined(state, transport):
    """
    The state after the bot joined #test, where alice and bob are.
    """
    state.process_line(':bot!b@example.com JOIN #test')
    state.process_line(':irc.example.net 353 bot = #test :bot @alice +bob')
    state.process_line(':irc.example.net 366 bot #test :End of /NAMES list.')
    transport.requests.clear()
    return state
