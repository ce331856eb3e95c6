# -*- coding: utf-8 -*-
"""
@Time    : 2025/7/17 11:30
@Author  : QIN2DIM
@GitHub  : https://github.com/QIN2DIM
@Desc    : Tests for the filter, detection and fan-out pipeline
"""
import pytest

from conftest import FakeProvider, make_message
from models import ContextBlock, DividerBlock, HeaderBlock
from translators.exceptions import RateLimited, ServiceUnavailable, StructuredOutputError
from translators.models import BatchItem, BatchTranslation
from triggers.auto_translation import DispatchEngine, IdempotencyCache, TranslationCache
from triggers.auto_translation.node import GENERIC_FAILURE_MESSAGE

HELLO_TEAM = "Hello team, great work today"


def _engine(provider, clock=None, **kwargs) -> DispatchEngine:
    if clock is not None:
        kwargs.setdefault("cache", TranslationCache(clock=clock))
        kwargs.setdefault("deduplicator", IdempotencyCache(clock=clock))
    return DispatchEngine(provider, **kwargs)


class TestFilter:

    @pytest.mark.asyncio
    async def test_four_characters_are_ignored(self):
        provider = FakeProvider()
        engine = _engine(provider)

        assert await engine.dispatch(make_message("Hey!")) is None
        assert provider.calls == []
        assert engine.stats()["skipped"] == 1

    @pytest.mark.asyncio
    async def test_mentions_do_not_count_towards_length(self):
        provider = FakeProvider()
        engine = _engine(provider)

        assert await engine.dispatch(make_message("@relay_bot hi")) is None
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_thread_replies_are_ignored(self):
        provider = FakeProvider()
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM, thread_parent_id=7)) is None
        assert provider.calls == []

    @pytest.mark.asyncio
    async def test_bot_messages_are_ignored(self):
        provider = FakeProvider()
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM, is_automated=True)) is None
        assert await engine.dispatch(make_message(None, message_id=43)) is None
        assert provider.calls == []

    def test_clean_text(self):
        assert DispatchEngine.clean_text("@relay_bot   Hello   team") == "Hello team"
        assert DispatchEngine.clean_text("mail me at me@example.com") == "mail me at me@example.com"
        assert DispatchEngine.clean_text(None) == ""


class TestProbeDispatch:

    @pytest.mark.asyncio
    async def test_hello_team_scenario(self):
        provider = FakeProvider(detected="EN")
        engine = _engine(provider)

        payload = await engine.dispatch(make_message(HELLO_TEAM))

        assert payload.thread_root_id == 42
        assert [s.language.code for s in payload.sections] == ["PT-BR", "ES"]
        assert [s.body for s in payload.sections] == [f"<PT-BR> {HELLO_TEAM}", f"<ES> {HELLO_TEAM}"]
        assert isinstance(payload.blocks[0], HeaderBlock)
        assert isinstance(payload.blocks[1], DividerBlock)
        assert isinstance(payload.blocks[-1], ContextBlock)
        assert payload.blocks[-1].text == "🔠 Original: 🇺🇸 English"
        assert payload.text == "Translation available: 🇧🇷 Portuguese, 🇪🇸 Spanish"
        assert provider.calls == [(HELLO_TEAM, "EN"), (HELLO_TEAM, "PT-BR"), (HELLO_TEAM, "ES")]

    @pytest.mark.asyncio
    async def test_probe_result_is_reused(self):
        provider = FakeProvider(detected="ES")
        engine = _engine(provider)

        payload = await engine.dispatch(make_message("Hola equipo, buen trabajo"))

        assert [s.language.code for s in payload.sections] == ["PT-BR", "EN"]
        assert provider.calls == [
            ("Hola equipo, buen trabajo", "EN"),
            ("Hola equipo, buen trabajo", "PT-BR"),
        ]
        assert payload.sections[1].body == "<EN> Hola equipo, buen trabajo"

    @pytest.mark.asyncio
    async def test_probe_reuse_can_be_disabled(self):
        provider = FakeProvider(detected="ES")
        engine = _engine(provider, reuse_probe_result=False)

        await engine.dispatch(make_message("Hola equipo, buen trabajo"))

        assert [lang for _, lang in provider.calls] == ["EN", "PT-BR", "EN"]

    @pytest.mark.asyncio
    async def test_regional_portuguese_is_normalized(self):
        provider = FakeProvider(detected="pt")
        engine = _engine(provider)

        payload = await engine.dispatch(make_message("Bom dia a todos"))

        assert payload.source_language.code == "PT-BR"
        assert [s.language.code for s in payload.sections] == ["EN", "ES"]
        assert [lang for _, lang in provider.calls] == ["EN", "ES"]

    @pytest.mark.asyncio
    async def test_unknown_source_sends_nothing(self):
        provider = FakeProvider(detected="DE")
        engine = _engine(provider)

        assert await engine.dispatch(make_message("Guten Morgen zusammen")) is None
        assert len(provider.calls) == 1
        assert engine.stats()["no_targets"] == 1

    @pytest.mark.asyncio
    async def test_detection_failure_is_silent(self):
        provider = FakeProvider(failures={"EN": ServiceUnavailable("boom", status_code=503)})
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM)) is None
        assert len(provider.calls) == 1
        assert engine.stats()["detection_failures"] == 1

    @pytest.mark.asyncio
    async def test_missing_detected_language_is_detection_failure(self):
        provider = FakeProvider(detected="")
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM)) is None
        assert engine.stats()["detection_failures"] == 1


class TestFanOut:

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_policy_order(self):
        provider = FakeProvider(
            detected="EN", failures={"PT-BR": RateLimited("slow down")}, delays={"PT-BR": 0.05}
        )
        engine = _engine(provider)

        payload = await engine.dispatch(make_message(HELLO_TEAM))

        first, second = payload.sections
        assert first.language.code == "PT-BR"
        assert first.failed is True
        assert first.body == RateLimited.user_message
        assert second.language.code == "ES"
        assert second.failed is False
        assert second.body == f"<ES> {HELLO_TEAM}"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_generic_section(self):
        provider = FakeProvider(detected="EN", failures={"ES": KeyError("translations")})
        engine = _engine(provider)

        payload = await engine.dispatch(make_message(HELLO_TEAM))

        assert payload.sections[1].failed is True
        assert payload.sections[1].body == GENERIC_FAILURE_MESSAGE
        assert payload.sections[0].failed is False

    @pytest.mark.asyncio
    async def test_redelivery_produces_one_reply(self, clock):
        provider = FakeProvider(detected="EN")
        engine = _engine(provider, clock)

        assert await engine.dispatch(make_message(HELLO_TEAM)) is not None
        assert await engine.dispatch(make_message(HELLO_TEAM)) is None
        assert len(provider.calls) == 3
        assert engine.stats()["duplicates"] == 1

    @pytest.mark.asyncio
    async def test_cache_serves_repeated_text(self, clock):
        provider = FakeProvider(detected="EN")
        engine = _engine(provider, clock)

        await engine.dispatch(make_message(HELLO_TEAM, message_id=1))
        payload = await engine.dispatch(make_message(HELLO_TEAM, message_id=2))

        assert [lang for _, lang in provider.calls] == ["EN", "PT-BR", "ES", "EN"]
        assert [s.body for s in payload.sections] == [f"<PT-BR> {HELLO_TEAM}", f"<ES> {HELLO_TEAM}"]
        assert engine.stats()["cache"]["hits"] == 2

    @pytest.mark.asyncio
    async def test_cache_expires(self, clock):
        provider = FakeProvider(detected="EN")
        cache = TranslationCache(ttl_seconds=900, clock=clock)
        engine = _engine(provider, cache=cache)

        await engine.dispatch(make_message(HELLO_TEAM, message_id=1))
        clock.advance(901)
        await engine.dispatch(make_message(HELLO_TEAM, message_id=2))

        assert engine.cache is cache
        assert len(provider.calls) == 6

    @pytest.mark.asyncio
    async def test_cache_is_cleared_when_full(self, clock):
        provider = FakeProvider(detected="EN")
        cache = TranslationCache(max_entries=3, clock=clock)
        engine = _engine(provider, cache=cache)

        await engine.dispatch(make_message(HELLO_TEAM, message_id=1))
        assert len(cache) == 2

        await engine.dispatch(make_message("Thanks everyone for coming", message_id=2))
        assert len(cache) == 0

        await engine.dispatch(make_message(HELLO_TEAM, message_id=3))
        assert [lang for _, lang in provider.calls[-3:]] == ["EN", "PT-BR", "ES"]

    @pytest.mark.asyncio
    async def test_injected_dedup_window_is_used(self, clock):
        provider = FakeProvider(detected="EN")
        dedup = IdempotencyCache(ttl_seconds=5, clock=clock)
        engine = _engine(provider, deduplicator=dedup)

        assert engine.deduplicator is dedup
        assert await engine.dispatch(make_message(HELLO_TEAM)) is not None

        clock.advance(5)
        assert await engine.dispatch(make_message(HELLO_TEAM)) is not None
        assert engine.stats()["duplicates"] == 0

    @pytest.mark.asyncio
    async def test_emoji_survive_translation(self):
        provider = FakeProvider(detected="EN")
        engine = _engine(provider)

        payload = await engine.dispatch(make_message("Great work team 🎉"))

        assert provider.calls[0] == ("Great work team [[EMOJI_0]]", "EN")
        assert payload.sections[0].body == "<PT-BR> Great work team 🎉"


class TestBatchDispatch:

    @pytest.mark.asyncio
    async def test_single_call_answers_everything(self):
        batch = BatchTranslation(
            source_language="EN",
            items=[
                BatchItem(lang="pt", text="Olá equipe, ótimo trabalho hoje"),
                BatchItem(lang="ES", text="Hola equipo, buen trabajo hoy"),
            ],
        )
        provider = FakeProvider(batch=True, batch_result=batch)
        engine = _engine(provider)

        payload = await engine.dispatch(make_message(HELLO_TEAM))

        assert provider.batch_calls == [HELLO_TEAM]
        assert provider.calls == []
        assert [s.language.code for s in payload.sections] == ["PT-BR", "ES"]
        assert payload.sections[0].body == "Olá equipe, ótimo trabalho hoje"

    @pytest.mark.asyncio
    async def test_missing_language_becomes_failed_section(self):
        batch = BatchTranslation(
            source_language="EN", items=[BatchItem(lang="ES", text="Hola equipo")]
        )
        provider = FakeProvider(batch=True, batch_result=batch)
        engine = _engine(provider)

        payload = await engine.dispatch(make_message(HELLO_TEAM))

        assert payload.sections[0].failed is True
        assert payload.sections[0].body == StructuredOutputError.user_message
        assert payload.sections[1].body == "Hola equipo"

    @pytest.mark.asyncio
    async def test_unusable_answer_is_detection_failure(self):
        provider = FakeProvider(batch=True, batch_result=None)
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM)) is None
        assert engine.stats()["detection_failures"] == 1

    @pytest.mark.asyncio
    async def test_provider_error_is_detection_failure(self):
        provider = FakeProvider(batch=True, failures={"*": RateLimited()})
        engine = _engine(provider)

        assert await engine.dispatch(make_message(HELLO_TEAM)) is None
