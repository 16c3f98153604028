import logging

from ircstate import strings
from ircstate.message import Event, NickMask
from ircstate.modes import ModeClass
from ircstate.state import State, MalformedEvent


def members(state, channel):
    return sorted(state.channels[channel].users)


class TestWelcome(object):

    def test_sets_nickname(self, state):
        assert state.nickname == 'bot'
        assert state.is_self('BOT')

    def test_resets_everything(self, joined):
        joined.process_line(':irc.example.net 005 bot NETWORK=Example :are supported')
        joined.process_line(':irc.example.net 001 bot2 :Welcome again')
        assert joined.nickname == 'bot2'
        assert joined.channels == {}
        assert joined.users == {}
        assert joined.isupport('NETWORK') is None
        assert joined.isupport('PREFIX') == '(ov)@+'
        assert not joined.features.chanmodes.groups[0]

    def test_malformed_welcome_ignored(self, state):
        state.handle(Event('welcome', 'irc.example.net', None, []))
        assert state.nickname == 'bot'


class TestFeatures(object):

    def test_isupport(self, state):
        assert state.isupport('chanmodes') == 'beI,k,l,imnpst'
        assert state.isupport('NICKLEN') == '9'
        assert state.isupport('NETWORK') is None

    def test_casemapping_applies_to_names(self, state):
        state.process_line(':irc.example.net 005 bot CASEMAPPING=ascii :are supported')
        assert state.normalize('Nick[^]') == 'nick[^]'
        assert state.casemapping is strings.ASCII
        assert state.upper('nick{}') == 'NICK{}'
        assert state.lower('NICK[]') == 'nick[]'

    def test_is_channel(self, state):
        assert state.is_channel('#test')
        assert state.is_channel('&local')
        assert not state.is_channel('alice')
        assert not state.is_channel('')

    def test_myinfo(self, state):
        state.process_line(':irc.example.net 004 bot irc.example.net ircd-1.0 DQRSZagiow biklmnopstv')
        assert state.features.umodes == frozenset('DQRSZagiow')


class TestJoin(object):

    def test_self_join_requests_channel_who(self, state, transport):
        state.process_line(':bot!b@example.com JOIN #test')
        assert state.user_in_channel('bot', '#test')
        assert list(transport.requests) == [('WHO', '#test')]

    def test_other_join_requests_nick_who(self, joined, transport):
        joined.process_line(':carol!c@carol.example.com JOIN #test')
        assert joined.user_in_channel('carol', '#test')
        assert joined.users['carol'].host == 'carol.example.com'
        assert list(transport.requests) == [('WHO', 'carol')]

    def test_join_elsewhere_ignored(self, joined, transport):
        joined.process_line(':carol!c@example.com JOIN #elsewhere')
        assert 'carol' not in joined.users
        assert '#elsewhere' not in joined.channels
        assert not transport.requests

    def test_join_without_source_ignored(self, joined, caplog):
        with caplog.at_level(logging.WARNING):
            joined.handle(Event('join', None, '#test'))
        assert 'malformed join' in caplog.text
        assert members(joined, '#test') == ['alice', 'bob', 'bot']


class TestNames(object):

    def test_names(self, joined):
        assert members(joined, '#test') == ['alice', 'bob', 'bot']
        for nick in ('alice', 'bob'):
            assert joined.users[nick].channels == {'#test'}
        channel = joined.channels['#test']
        assert channel.privileges('alice') == {'o'}
        assert channel.privileges('bob') == {'v'}
        assert channel.privileges('bot') == set()

    def test_multi_prefix(self, joined):
        joined.process_line(':irc.example.net 353 bot = #test :@+carol')
        assert joined.channels['#test'].privileges('carol') == {'o', 'v'}

    def test_names_on_fresh_session(self, state):
        state.process_line(':irc.example.net 353 bot = #test :@alice +bob carol')
        assert members(state, '#test') == ['alice', 'bob', 'carol']
        for nick in ('alice', 'bob', 'carol'):
            assert state.user_in_channel(nick, '#test')
            assert state.users[nick].channels == {'#test'}
        channel = state.channels['#test']
        assert channel.privileges('alice') == {'o'}
        assert channel.privileges('bob') == {'v'}
        assert state.store.is_consistent()

    def test_names_star_channel(self, joined):
        joined.handle(Event('namreply', 'irc.example.net', 'bot', ['*', '*', 'nick']))
        assert 'nick' not in joined.users

    def test_short_namreply(self, joined):
        joined.handle(Event('namreply', 'irc.example.net', 'bot', ['=']))
        assert members(joined, '#test') == ['alice', 'bob', 'bot']


class TestWho(object):

    def test_whoreply(self, joined):
        joined.process_line(
            ':irc.example.net 352 bot #test al alice.example.com '
            'irc.example.net alice G*@+ :0 Alice A.'
        )
        alice = joined.users['alice']
        assert alice.away
        assert alice.username == 'al'
        assert alice.host == 'alice.example.com'
        assert joined.channels['#test'].privileges('alice') == {'o', 'v'}

    def test_here(self, joined):
        joined.users['bob'].away = True
        joined.process_line(
            ':irc.example.net 352 bot #test b host irc.example.net bob H :0 Bob')
        assert not joined.users['bob'].away
        assert joined.channels['#test'].privileges('bob') == set()

    def test_whoreply_adds_member(self, joined):
        joined.process_line(
            ':irc.example.net 352 bot #test c host irc.example.net carol H@ :0 C')
        assert joined.user_in_channel('carol', '#test')
        assert joined.channels['#test'].is_oper('carol')

    def test_whoreply_elsewhere(self, joined):
        joined.process_line(
            ':irc.example.net 352 bot #other c host irc.example.net carol G :0 C')
        assert 'carol' not in joined.users
        joined.process_line(
            ':irc.example.net 352 bot #other b host irc.example.net bob G :0 B')
        assert joined.users['bob'].away
        assert not joined.user_in_channel('bob', '#other')


class TestDepartures(object):

    def test_part(self, joined):
        joined.process_line(':alice!a@example.com PART #test :bye')
        assert not joined.user_in_channel('alice', '#test')
        assert 'alice' not in joined.users
        assert joined.store.is_consistent()

    def test_kick(self, joined):
        joined.process_line(':alice!a@example.com KICK #test bob :out')
        assert 'bob' not in joined.users
        assert members(joined, '#test') == ['alice', 'bot']

    def test_self_part(self, joined):
        joined.process_line(':bot!b@example.com PART #test')
        assert '#test' not in joined.channels
        assert 'alice' not in joined.users
        assert 'bob' not in joined.users

    def test_self_kick_keeps_other_channels(self, joined):
        joined.process_line(':bot!b@example.com JOIN #other')
        joined.process_line(':irc.example.net 353 bot = #other :bot alice')
        joined.process_line(':alice!a@example.com KICK #test Bot :out')
        assert '#test' not in joined.channels
        assert 'bob' not in joined.users
        assert joined.users['alice'].channels == {'#other'}
        assert joined.store.is_consistent()

    def test_quit(self, joined):
        joined.process_line(':bot!b@example.com JOIN #other')
        joined.process_line(':alice!a@example.com JOIN #other')
        joined.process_line(':alice!a@example.com QUIT :gone')
        assert 'alice' not in joined.users
        assert members(joined, '#test') == ['bob', 'bot']
        assert members(joined, '#other') == ['bot']

    def test_self_quit(self, joined):
        joined.process_line(':bot!b@example.com QUIT :shutting down')
        assert joined.channels == {}
        assert joined.users == {}

    def test_kick_without_nick(self, joined):
        joined.handle(Event('kick', NickMask('op!o@host'), '#test', []))
        assert members(joined, '#test') == ['alice', 'bob', 'bot']


class TestNick(object):

    def test_other_nick(self, joined):
        joined.process_line(':alice!a@example.com NICK :alicia')
        assert joined.nickname == 'bot'
        assert members(joined, '#test') == ['alicia', 'bob', 'bot']
        assert joined.channels['#test'].is_oper('alicia')

    def test_self_nick(self, joined):
        joined.process_line(':bot!b@example.com JOIN #b')
        joined.process_line(':bot!b@example.com NICK new')
        assert joined.nickname == 'new'
        assert 'bot' not in joined.users
        assert joined.users['new'].channels == {'#test', '#b'}
        assert members(joined, '#test') == ['alice', 'bob', 'new']
        assert members(joined, '#b') == ['new']
        # the renamed bot still owns its channels
        joined.process_line(':new!b@example.com PART #test')
        assert '#test' not in joined.channels

    def test_unknown_nick(self, joined):
        joined.process_line(':ghost!g@example.com NICK spirit')
        assert 'spirit' in joined.users
        assert 'ghost' not in joined.users
        assert not joined.users['spirit'].channels


class TestMode(object):

    def test_permission_changes(self, joined):
        changes = joined.process_line(':alice!a@example.com MODE #test +o-v bob bob')
        assert [(c.mode_class, c.sign, c.mode, c.argument) for c in changes] == [
            (ModeClass.PERMISSION, '+', 'o', 'bob'),
            (ModeClass.PERMISSION, '-', 'v', 'bob'),
        ]
        assert joined.channels['#test'].privileges('bob') == {'o'}

    def test_channel_settings(self, joined):
        joined.process_line(':alice!a@example.com MODE #test +ntlk-i 5 sekrit')
        channel = joined.channels['#test']
        assert channel.has_mode('n') and channel.has_mode('t')
        assert channel.limit() == '5'
        assert channel.key() == 'sekrit'
        joined.process_line(':alice!a@example.com MODE #test -lk sekrit')
        assert channel.limit() is None
        assert channel.key() is None

    def test_lists(self, joined):
        joined.process_line(':alice!a@example.com MODE #test +bb *!*@a *!*@b')
        joined.process_line(':alice!a@example.com MODE #test -b *!*@a')
        assert joined.channels['#test'].lists['b'] == {'*!*@b'}

    def test_starved_mode(self, joined):
        changes = joined.process_line(':alice!a@example.com MODE #test +om bob')
        assert [c.mode for c in changes] == ['o', 'm']
        changes = joined.process_line(':alice!a@example.com MODE #test +o')
        assert changes == []

    def test_unknown_channel(self, joined):
        changes = joined.process_line(':x!x@example.com MODE #other +m')
        assert [c.mode for c in changes] == ['m']
        assert '#other' not in joined.channels

    def test_own_user_modes(self, joined):
        joined.process_line(':bot MODE bot :+iw')
        joined.process_line(':bot MODE bot :-w')
        assert joined.user_modes == {'i'}

    def test_other_user_modes_ignored(self, joined):
        joined.process_line(':alice MODE alice :+i')
        assert joined.user_modes == set()

    def test_umode_event(self, joined):
        joined.handle(Event('umode', NickMask('bot'), 'bot', ['+x']))
        assert joined.user_modes == {'x'}

    def test_missing_mode_string(self, joined):
        assert joined.handle(Event('mode', NickMask('a'), '#test', [])) is None


class TestInvariants(object):

    def test_cross_references_hold(self, joined):
        lines = [
            ':bot!b@example.com JOIN #two',
            ':irc.example.net 353 bot = #two :bot alice carol',
            ':carol!c@example.com JOIN #test',
            ':alice!a@example.com NICK alicia',
            ':bob!b@example.com PART #test',
            ':alicia!a@example.com KICK #two carol',
            ':carol!c@example.com QUIT :bye',
            ':bot!b@example.com NICK bot_',
            ':bot_!b@example.com PART #two',
        ]
        for line in lines:
            joined.process_line(line)
            assert joined.store.is_consistent(), line
        assert members(joined, '#test') == ['alicia', 'bot_']
        assert '#two' not in joined.channels


class TestProcessing(object):

    def test_unhandled_events(self, joined):
        assert joined.process_line(':alice!a@example.com PRIVMSG #test :hi') is None
        assert joined.process_line('') is None

    def test_end_of_lists(self, joined):
        joined.process_line(':irc.example.net 315 bot #test :End of /WHO list.')
        joined.process_line(':irc.example.net 366 bot #test :End of /NAMES list.')

    def test_malformed_event_is_value_error(self):
        assert issubclass(MalformedEvent, ValueError)

    def test_state_without_transport(self):
        state = State()
        state.process_line(':irc.example.net 001 bot :Welcome')
        state.process_line(':bot!b@example.com JOIN #test')
        assert state.in_channel('#test')
