from core.commands import Command, CommandRegistry
from core.models import Message


def msg(text: str) -> Message:
    return Message(raw_text=text, user="U2", channel="C1")


async def test_every_matching_command_runs(scheduler, connection):
    seen = []

    async def record(tag, conv):
        seen.append((tag, dict(conv.match.params)))

    registry = CommandRegistry()
    registry.register(Command("hello {name}", lambda c: record("a", c)))
    registry.register(Command("bye", lambda c: record("b", c)))
    registry.register(Command("hello {who}", lambda c: record("c", c)))

    assert registry.search(msg("hello world"), scheduler, connection)
    assert len(scheduler.pending) == 2
    await scheduler.run_all()
    assert seen == [("a", {"name": "world"}), ("c", {"who": "world"})]


async def test_no_match_schedules_nothing(scheduler, connection):
    registry = CommandRegistry()
    registry.register(Command("hello {name}", lambda c: None))
    assert not registry.search(msg("hello"), scheduler, connection)
    assert scheduler.pending == []


async def test_search_does_not_wait_for_handlers(scheduler, connection):
    async def handler(conv):
        raise AssertionError("must not run during the pass")

    registry = CommandRegistry()
    registry.register(Command("ping", handler))
    assert registry.search(msg("ping"), scheduler, connection)
    assert scheduler.names == ["command:ping"]


async def test_subclassed_command(scheduler, connection):
    class Echo(Command):
        def __init__(self):
            super().__init__("echo {text}", description="Echo text")

        async def handle(self, conversation):
            await conversation.reply(conversation.string("text"))

    registry = CommandRegistry()
    registry.register(Echo())
    registry.search(msg("echo hi there"), scheduler, connection)
    await scheduler.run_all()
    assert [m.text for m in connection.sent] == ["<@U2>: hi there"]


def test_help_text_lists_commands_in_order():
    registry = CommandRegistry()
    registry.register(Command("hello {name}", description="Say hello"))
    registry.register(Command("ping"))
    registry.register(Command("add {a:integer} {b:integer}", description="Add"))

    assert registry.help_text() == (
        "I can support you with those features:\n\n"
        "`hello {name}` *–* Say hello\n"
        "`ping`\n"
        "`add {a:integer} {b:integer}` *–* Add\n"
    )


def test_registry_appends_keep_existing_snapshot():
    registry = CommandRegistry()
    registry.register(Command("one"))
    snapshot = iter(registry)
    registry.register(Command("two"))
    assert [c.pattern for c in snapshot] == ["one"]
    assert [c.pattern for c in registry] == ["one", "two"]
    assert len(registry) == 2
