from core.conversation import Conversation, ListenerConversation
from core.models import Message
from utils.matching import MatchResult


async def test_reply_mentions_sender_in_channel(connection):
    m = Message(raw_text="!hi", user="U2", channel="C1")
    conv = Conversation(MatchResult(), m, connection)
    await conv.reply("hello %s, you are %d", "bob", 42)
    assert [r.text for r in connection.sent] == ["<@U2>: hello bob, you are 42"]
    assert connection.sent[0].channel == "C1"
    assert m.text == "!hi"


async def test_reply_in_direct_channel(connection):
    m = Message(raw_text="hi", user="U2", channel="D1")
    await ListenerConversation(m, connection).reply("100% sure")
    assert [r.text for r in connection.sent] == ["100% sure"]


def test_parameters(connection):
    m = Message(raw_text="add 1 2", user="U2", channel="C1")
    conv = Conversation(MatchResult(params={"a": "1", "who": "me"}), m, connection)
    assert conv.integer("a") == 1
    assert conv.string("who") == "me"
