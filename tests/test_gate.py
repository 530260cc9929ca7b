"""Tests for the authorization gate."""

from conftest import GROUP_ID, USER_ID
from yummyecho.communication import messages
from yummyecho.gate import AuthorizationGate, InboundEvent, command_tail, extract_command


def _private(command, user_id=USER_ID):
    return InboundEvent(chat_type="private", chat_id=user_id, user_id=user_id, command=command)


def _group(command, chat_type="supergroup"):
    return InboundEvent(chat_type=chat_type, chat_id=GROUP_ID, user_id=USER_ID, command=command)


class TestExtractCommand:
    def test_plain(self):
        assert extract_command("/eco 5 hola") == "eco"

    def test_bot_suffix_and_case(self):
        assert extract_command("/ECO_STOP@YummyBot") == "eco_stop"

    def test_addressed_to_other_bot(self):
        assert extract_command("/eco@OtherBot 5 hola", "YummyBot") is None
        assert extract_command("/eco@yummybot 5 hola", "YummyBot") == "eco"

    def test_not_a_command(self):
        assert extract_command("hola") is None
        assert extract_command("") is None
        assert extract_command(None) is None
        assert extract_command("/") is None


class TestPrivateStage:
    async def test_exempt_commands_skip_store(self, store, mirror):
        gate = AuthorizationGate(store, mirror)
        for command in ("start", "help", "solicitar_activacion"):
            decision = await gate.check(_private(command))
            assert decision.allowed
        assert store.reads == 0

    async def test_unactivated_user_denied(self, store, mirror):
        gate = AuthorizationGate(store, mirror)
        decision = await gate.check(_private("reporte"))
        assert not decision.allowed
        assert decision.stage == "private"
        assert decision.reply == messages.USER_NOT_ACTIVATED

    async def test_activated_user_allowed_with_one_read(self, store, mirror):
        store.users[USER_ID] = True
        gate = AuthorizationGate(store, mirror)
        decision = await gate.check(_private("reporte"))
        assert decision.allowed
        assert store.reads == 1

    async def test_activation_visible_on_next_event(self, store, mirror):
        """No caching: a concurrent activation takes effect immediately."""
        gate = AuthorizationGate(store, mirror)
        assert not (await gate.check(_private("reporte"))).allowed
        store.users[USER_ID] = True
        assert (await gate.check(_private("reporte"))).allowed


class TestGroupStage:
    async def test_password_and_start_exempt(self, store, mirror):
        gate = AuthorizationGate(store, mirror)
        assert (await gate.check(_group("clave"))).allowed
        assert (await gate.check(_group("start", chat_type="group"))).allowed
        assert store.reads == 0

    async def test_unactivated_group_denied(self, store, mirror):
        gate = AuthorizationGate(store, mirror)
        decision = await gate.check(_group("eco"))
        assert not decision.allowed
        assert decision.stage == "group"
        assert decision.reply == messages.GROUP_NOT_ACTIVATED

    async def test_activated_group_refreshes_mirror(self, store, mirror):
        store.groups[GROUP_ID] = True
        gate = AuthorizationGate(store, mirror)
        assert not mirror.is_activated(GROUP_ID)
        decision = await gate.check(_group("eco"))
        assert decision.allowed
        assert mirror.is_activated(GROUP_ID)

    async def test_mirror_is_not_trusted(self, store, mirror):
        """A stale mirror entry never grants access."""
        await mirror.mark_activated(GROUP_ID)
        gate = AuthorizationGate(store, mirror)
        assert not (await gate.check(_group("cadena"))).allowed


class TestGateMisc:
    async def test_non_command_passes(self, store, mirror):
        gate = AuthorizationGate(store, mirror)
        assert (await gate.check(_group(None))).allowed
        assert (await gate.check(_private(None))).allowed
        assert store.reads == 0

    async def test_store_failure_denies_without_raising(self, store, mirror):
        store.fail_reads = True
        gate = AuthorizationGate(store, mirror)
        decision = await gate.check(_group("eco"))
        assert not decision.allowed
        assert decision.stage == "store"
        assert decision.reply

    async def test_unknown_command_not_gated(self, store, mirror):
        """Commands the bot has no handler for get no activation notice."""
        gate = AuthorizationGate(store, mirror)
        assert (await gate.check(_group("weather"))).allowed
        assert (await gate.check(_private("weather"))).allowed
        assert store.reads == 0


class TestCommandTail:
    def test_keeps_newlines_and_spacing(self):
        assert command_tail("/cadena Hola\n  a   todos") == "Hola\n  a   todos"

    def test_empty(self):
        assert command_tail("/cadena") == ""
        assert command_tail(None) == ""
