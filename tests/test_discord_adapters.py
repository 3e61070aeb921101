import asyncio
from pathlib import Path
from types import SimpleNamespace

import discord
import pytest

from hornbotx_bot.discord import voice as voice_module
from hornbotx_bot.discord.guilds import DiscordGuildDirectory
from hornbotx_bot.discord.voice import DiscordVoiceConnection, DiscordVoiceGateway
from hornbotx_bot.main import BotDeps, HornBot
from hornbotx_bot.settings import BotSettings
from hornbotx_core.ports.voice import VoiceConnectError, VoicePresence, VoiceTransportError
from hornbotx_core.use_cases.build_play_request import PlayRequestBuilder
from hornbotx_core.use_cases.play_command import PlayCommandInput
from hornbotx_core.use_cases.route_command import CommandRouter


class FakeClient:
    def __init__(self, *guilds) -> None:
        self._guilds = {guild.id: guild for guild in guilds}

    def get_guild(self, guild_id: int):
        return self._guilds.get(guild_id)


class FakeVoiceWebSocket:
    def __init__(self) -> None:
        self.states: list[discord.SpeakingState] = []

    async def speak(self, state: discord.SpeakingState) -> None:
        self.states.append(state)


class FakeVoiceClient:
    def __init__(self, *, fail_send: bool = False, guild=None) -> None:
        self.channel = SimpleNamespace(id=5)
        self.guild = guild
        self.ws = FakeVoiceWebSocket()
        self.connected = True
        self.packets: list[bytes] = []
        self.moved_to: list = []
        self.disconnected = False
        self._fail_send = fail_send

    def is_connected(self) -> bool:
        return self.connected

    def send_audio_packet(self, data: bytes, *, encode: bool = True) -> None:
        assert encode is False
        if self._fail_send:
            raise OSError("socket closed")
        self.packets.append(data)

    async def move_to(self, channel) -> None:
        self.moved_to.append(channel)
        self.channel = channel

    async def disconnect(self) -> None:
        self.disconnected = True


class StaleVoiceClient:
    def __init__(self) -> None:
        self.force_disconnects: list[bool] = []

    async def disconnect(self, *, force: bool = False) -> None:
        self.force_disconnects.append(force)


class FakeVoiceChannel(discord.VoiceChannel):
    """A real VoiceChannel type (for isinstance checks) with a scripted connect."""

    def __init__(self, channel_id: int, *, joined_client=None, error: Exception | None = None) -> None:
        self.id = channel_id
        self.connect_calls: list[dict] = []
        self._joined_client = joined_client
        self._error = error

    async def connect(self, **kwargs):
        self.connect_calls.append(kwargs)
        if self._error is not None:
            raise self._error
        return self._joined_client


def guild_with(*channels, guild_id: int = 1, voice_client=None) -> SimpleNamespace:
    by_id = {channel.id: channel for channel in channels}
    return SimpleNamespace(id=guild_id, get_channel=by_id.get, voice_client=voice_client)


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0
        self.sleeps: list[float] = []

    def time(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay


def test_guild_directory_collects_voice_presences() -> None:
    general = SimpleNamespace(id=10, voice_states={1: object(), 2: object()})
    afk = SimpleNamespace(id=11, voice_states={3: object()})
    stage = SimpleNamespace(id=12, voice_states={4: object()})
    guild = SimpleNamespace(id=99, voice_channels=[general, afk], stage_channels=[stage], afk_channel=afk)

    state = DiscordGuildDirectory(FakeClient(guild)).voice_state(99)

    assert state.guild_id == 99
    assert state.afk_channel_id == 11
    assert state.presences == (
        VoicePresence(user_id=1, channel_id=10),
        VoicePresence(user_id=2, channel_id=10),
        VoicePresence(user_id=3, channel_id=11),
        VoicePresence(user_id=4, channel_id=12),
    )
    assert state.channel_of(4) == 12
    assert state.channel_of(5) is None


def test_guild_directory_unknown_guild() -> None:
    assert DiscordGuildDirectory(FakeClient()).voice_state(1) is None


@pytest.mark.asyncio
async def test_connection_sends_frames_between_speaking_updates() -> None:
    voice_client = FakeVoiceClient()
    connection = DiscordVoiceConnection(voice_client)

    await connection.set_speaking(True)
    for frame in (b"f1", b"f2", b"f3"):
        await connection.send_frame(frame)
    await connection.set_speaking(False)
    await connection.disconnect()

    assert connection.channel_id == 5
    assert voice_client.packets == [b"f1", b"f2", b"f3"]
    assert voice_client.ws.states == [discord.SpeakingState.voice, discord.SpeakingState.none]
    assert voice_client.disconnected


@pytest.mark.asyncio
async def test_send_failure_is_a_transport_error() -> None:
    connection = DiscordVoiceConnection(FakeVoiceClient(fail_send=True))

    with pytest.raises(VoiceTransportError):
        await connection.send_frame(b"f1")


@pytest.mark.asyncio
async def test_send_after_disconnect_is_a_transport_error() -> None:
    voice_client = FakeVoiceClient()
    voice_client.connected = False
    connection = DiscordVoiceConnection(voice_client)

    assert not connection.is_ready()
    with pytest.raises(VoiceTransportError):
        await connection.send_frame(b"f1")


@pytest.mark.asyncio
async def test_join_unknown_guild_is_a_connect_error() -> None:
    with pytest.raises(VoiceConnectError):
        await DiscordVoiceGateway(FakeClient()).join(guild_id=1, channel_id=2)


@pytest.mark.asyncio
async def test_join_non_voice_channel_is_a_connect_error() -> None:
    text_channel = SimpleNamespace(id=2)
    guild = SimpleNamespace(id=1, get_channel=lambda channel_id: text_channel, voice_client=None)

    with pytest.raises(VoiceConnectError):
        await DiscordVoiceGateway(FakeClient(guild)).join(guild_id=1, channel_id=2)


@pytest.mark.asyncio
async def test_join_replaces_stale_client_and_connects_deafened() -> None:
    joined = FakeVoiceClient()
    channel = FakeVoiceChannel(5, joined_client=joined)
    stale = StaleVoiceClient()
    client = FakeClient(guild_with(channel, voice_client=stale))

    connection = await DiscordVoiceGateway(client, timeout=12.0).join(guild_id=1, channel_id=5)

    assert stale.force_disconnects == [True]
    assert channel.connect_calls == [{"timeout": 12.0, "self_deaf": True}]
    assert connection.channel_id == 5
    assert connection.is_ready()


@pytest.mark.asyncio
async def test_join_failure_is_a_connect_error() -> None:
    channel = FakeVoiceChannel(5, error=discord.ClientException("Already connected to a voice channel."))

    with pytest.raises(VoiceConnectError):
        await DiscordVoiceGateway(FakeClient(guild_with(channel))).join(guild_id=1, channel_id=5)


@pytest.mark.asyncio
async def test_switch_channel_moves_voice_client() -> None:
    target = FakeVoiceChannel(7)
    voice_client = FakeVoiceClient(guild=guild_with(target))
    connection = DiscordVoiceConnection(voice_client)

    await connection.switch_channel(7)

    assert voice_client.moved_to == [target]
    assert connection.channel_id == 7


@pytest.mark.asyncio
async def test_switch_to_non_voice_channel_is_a_connect_error() -> None:
    voice_client = FakeVoiceClient(guild=guild_with(SimpleNamespace(id=8)))
    connection = DiscordVoiceConnection(voice_client)

    with pytest.raises(VoiceConnectError):
        await connection.switch_channel(8)
    assert voice_client.moved_to == []


@pytest.mark.asyncio
async def test_frames_are_paced_to_twenty_milliseconds(monkeypatch: pytest.MonkeyPatch) -> None:
    clock = FakeClock()
    monkeypatch.setattr(
        voice_module,
        "asyncio",
        SimpleNamespace(get_running_loop=lambda: clock, sleep=clock.sleep, TimeoutError=asyncio.TimeoutError),
    )
    connection = DiscordVoiceConnection(FakeVoiceClient())

    await connection.set_speaking(True)
    for frame in (b"f1", b"f2", b"f3"):
        await connection.send_frame(frame)
    assert clock.sleeps == pytest.approx([0.02, 0.02])

    # Running late: the next frame goes out immediately.
    clock.now += 1.0
    await connection.send_frame(b"f4")
    assert len(clock.sleeps) == 2

    # A new speaking burst restarts the frame clock.
    await connection.set_speaking(False)
    await connection.set_speaking(True)
    await connection.send_frame(b"f5")
    assert len(clock.sleeps) == 2


class RecordingPlayCommand:
    def __init__(self) -> None:
        self.inputs: list[PlayCommandInput] = []

    async def execute(self, data: PlayCommandInput) -> None:
        self.inputs.append(data)


def chat_message(*, bot: bool = False, guild_id: int | None = 1) -> SimpleNamespace:
    return SimpleNamespace(
        id=30,
        content="!airhorn",
        author=SimpleNamespace(id=10, bot=bot),
        channel=SimpleNamespace(id=20),
        guild=SimpleNamespace(id=guild_id) if guild_id is not None else None,
    )


@pytest.fixture
def bot(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> HornBot:
    monkeypatch.chdir(tmp_path)
    return HornBot(
        settings=BotSettings(DISCORD_TOKEN="token"),
        deps=BotDeps(router=CommandRouter([]), builder=PlayRequestBuilder()),
        intents=discord.Intents.none(),
    )


@pytest.mark.asyncio
async def test_on_message_forwards_guild_messages(bot: HornBot) -> None:
    recorder = RecordingPlayCommand()
    bot.play_command = recorder

    await bot.on_message(chat_message())

    assert recorder.inputs == [
        PlayCommandInput(guild_id=1, channel_id=20, message_id=30, author_id=10, content="!airhorn")
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message",
    [
        pytest.param(chat_message(bot=True), id="from-bot"),
        pytest.param(chat_message(guild_id=None), id="direct-message"),
    ],
)
async def test_on_message_ignores_bots_and_direct_messages(bot: HornBot, message: SimpleNamespace) -> None:
    recorder = RecordingPlayCommand()
    bot.play_command = recorder

    await bot.on_message(message)

    assert recorder.inputs == []
