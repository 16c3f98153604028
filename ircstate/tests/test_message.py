from ircstate import message


class TestParse(object):

    def test_tagged_line(self):
        event = message.parse('@account=alice;time=x :alice!a@h PRIVMSG #test :hi there')
        assert event.type == 'privmsg'
        assert event.source.nick == 'alice'
        assert event.target == '#test'
        assert event.arguments == ['hi there']

    def test_numeric_names(self):
        event = message.parse(':irc.example.net 353 bot = #test :@alice +bob carol')
        assert event.type == 'namreply'
        assert event.target == 'bot'
        assert event.arguments == ['=', '#test', '@alice +bob carol']

    def test_server_source(self):
        event = message.parse(':irc.example.net 001 bot :Welcome')
        assert event.source.nick == 'irc.example.net'
        assert event.source.user is None

    def test_no_source(self):
        event = message.parse('PING :irc.example.net')
        assert event.source is None
        assert event.target == 'irc.example.net'

    def test_quit_has_no_target(self):
        event = message.parse(':bob!b@h QUIT')
        assert event.target is None
        assert event.arguments == []
