"""
Stage illustrator tests.

`sleep` is injected so pauses are recorded instead of waited on.
"""

import asyncio
import logging

from apps.plant.illustrator import CancellationToken, StageIllustrator, StageState
from apps.plant.models import LifeCycleStage
from libs.llm_gemini import InlineImage, TransportError


class RecordingGenerator:
    def __init__(self, outcomes=None, on_call=None):
        self.outcomes = outcomes or {}
        self.on_call = on_call
        self.calls = []

    async def __call__(self, plant_name, stage_name):
        self.calls.append((plant_name, stage_name))
        if self.on_call:
            self.on_call(plant_name, stage_name)
        outcome = self.outcomes.get(stage_name, "ok")
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            return None
        return InlineImage("image/png", f"{plant_name}:{stage_name}".encode())


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


STAGES = ["Seedling", "Vegetative", "Flowering"]


def _stages(names):
    return [LifeCycleStage(stage_name=n, duration="1 week", description=n) for n in names]


def test_sequential_with_skip_and_delay_only_after_success():
    gen = RecordingGenerator(outcomes={"Vegetative": None})
    sleep = RecordingSleep()
    ill = StageIllustrator(gen, delay_seconds=2.0, sleep=sleep)

    asyncio.run(ill.run("Basil", STAGES, CancellationToken()))

    assert [c[1] for c in gen.calls] == STAGES
    # pause after stage 0 only: stage 1 was skipped, stage 2 is last
    assert sleep.calls == [2.0]
    assert set(ill.images) == {0, 2}
    assert ill.states == {
        0: StageState.ILLUSTRATED,
        1: StageState.SKIPPED,
        2: StageState.ILLUSTRATED,
    }


def test_pause_between_each_success():
    gen = RecordingGenerator()
    sleep = RecordingSleep()
    ill = StageIllustrator(gen, delay_seconds=2.0, sleep=sleep)

    asyncio.run(ill.run("Basil", STAGES, CancellationToken()))

    assert sleep.calls == [2.0, 2.0]
    assert len(ill.images) == 3


def test_failed_call_is_treated_as_skip():
    gen = RecordingGenerator(outcomes={"Seedling": TransportError("quota")})
    sleep = RecordingSleep()
    ill = StageIllustrator(gen, delay_seconds=2.0, sleep=sleep)

    asyncio.run(ill.run("Basil", STAGES, CancellationToken()))

    assert len(gen.calls) == 3
    assert ill.states[0] == StageState.SKIPPED
    assert 0 not in ill.images
    # success at stage 1 pauses, stage 2 is last
    assert sleep.calls == [2.0]


def test_cancel_after_first_stage_stops_further_requests():
    token = CancellationToken()
    gen = RecordingGenerator()

    async def _cancel_during_pause(seconds):
        token.cancel()

    ill = StageIllustrator(gen, delay_seconds=2.0, sleep=_cancel_during_pause)
    asyncio.run(ill.run("Basil", STAGES, token))

    assert [c[1] for c in gen.calls] == ["Seedling"]
    assert set(ill.images) == {0}


def test_result_landing_after_cancel_is_dropped():
    token = CancellationToken()
    gen = RecordingGenerator(on_call=lambda plant, stage: token.cancel())
    ill = StageIllustrator(gen, delay_seconds=2.0, sleep=RecordingSleep())

    asyncio.run(ill.run("Basil", STAGES, token))

    assert len(gen.calls) == 1
    assert ill.images == {}
    assert ill.states[0] == StageState.PENDING


def test_cached_stages_are_not_requested_again():
    gen = RecordingGenerator()
    ill = StageIllustrator(gen, delay_seconds=0, sleep=RecordingSleep())
    ill.images[0] = InlineImage("image/png", b"cached")
    ill.images[2] = InlineImage("image/png", b"cached")

    asyncio.run(ill.run("Basil", STAGES, CancellationToken()))

    assert [c[1] for c in gen.calls] == ["Vegetative"]


def test_restart_with_new_name_reuses_cache():
    gen = RecordingGenerator(outcomes={"Flowering": None})
    ill = StageIllustrator(gen, delay_seconds=0, sleep=RecordingSleep())

    async def _scenario():
        await ill.restart("Basil", _stages(STAGES))
        first_calls = list(gen.calls)
        await ill.restart("Húng quế", _stages(STAGES))
        return first_calls

    first_calls = asyncio.run(_scenario())

    assert len(first_calls) == 3
    # stages 0 and 1 are cached; only the skipped stage is asked for again
    assert gen.calls[3:] == [("Húng quế", "Flowering")]
    assert ill.plant_name == "Húng quế"


def test_restart_with_same_name_keeps_running_pass():
    gen = RecordingGenerator()
    ill = StageIllustrator(gen, delay_seconds=0, sleep=RecordingSleep())

    async def _scenario():
        first = ill.restart("Basil", _stages(STAGES))
        second = ill.restart("Basil", _stages(STAGES))
        await first
        return first, second

    first, second = asyncio.run(_scenario())

    assert first is second
    assert len(gen.calls) == 3


def test_snapshot_reports_states_and_data_urls():
    gen = RecordingGenerator(outcomes={"Vegetative": None})
    ill = StageIllustrator(gen, delay_seconds=0, sleep=RecordingSleep())

    async def _scenario():
        await ill.restart("Basil", _stages(STAGES))

    asyncio.run(_scenario())
    snap = ill.snapshot()

    assert snap["plant_name"] == "Basil"
    assert [s["state"] for s in snap["stages"]] == ["illustrated", "skipped", "illustrated"]
    assert snap["stages"][0]["image"].startswith("data:image/png;base64,")
    assert snap["stages"][1]["image"] is None


class GatedGenerator:
    """Each request blocks until its gate is opened; tracks concurrency."""

    def __init__(self):
        self.calls = []
        self.gates = []
        self.outstanding = 0
        self.max_outstanding = 0

    async def __call__(self, plant_name, stage_name):
        self.calls.append((plant_name, stage_name))
        gate = asyncio.Event()
        self.gates.append(gate)
        self.outstanding += 1
        self.max_outstanding = max(self.max_outstanding, self.outstanding)
        try:
            await gate.wait()
        finally:
            self.outstanding -= 1
        return InlineImage("image/png", f"{plant_name}:{stage_name}".encode())


async def _settle():
    for _ in range(20):
        await asyncio.sleep(0)


def test_restart_waits_for_cancelled_request_before_next_one():
    gen = GatedGenerator()
    ill = StageIllustrator(gen, delay_seconds=0, sleep=RecordingSleep())
    stages = _stages(["Seedling", "Vegetative"])

    async def _scenario():
        ill.restart("Basil", stages)
        await _settle()
        assert gen.calls == [("Basil", "Seedling")]

        ill.restart("Mint", stages)
        await _settle()
        # the Basil request is still in flight, so Mint has not asked yet
        assert len(gen.calls) == 1

        gen.gates[0].set()
        await _settle()
        assert gen.calls[1] == ("Mint", "Seedling")

        gen.gates[1].set()
        await _settle()
        gen.gates[2].set()
        await ill.task

    asyncio.run(_scenario())

    assert gen.max_outstanding == 1
    assert ill.images[0].data == b"Mint:Seedling"
    assert ill.states == {0: StageState.ILLUSTRATED, 1: StageState.ILLUSTRATED}


def test_dropped_result_does_not_clobber_newer_stage_state():
    token = CancellationToken()
    ill = StageIllustrator(None, delay_seconds=0, sleep=RecordingSleep())

    def _newer_pass_finishes_first(plant, stage):
        token.cancel()
        ill.images[0] = InlineImage("image/png", b"newer")
        ill.states[0] = StageState.ILLUSTRATED

    ill._generate = RecordingGenerator(on_call=_newer_pass_finishes_first)
    asyncio.run(ill.run("Basil", STAGES, token))

    assert ill.images[0].data == b"newer"
    assert ill.states[0] == StageState.ILLUSTRATED


def test_unexpected_failure_in_pass_is_logged(caplog):
    async def _broken(plant_name, stage_name):
        raise RuntimeError("bad payload")

    ill = StageIllustrator(_broken, delay_seconds=0, sleep=RecordingSleep())

    async def _scenario():
        task = ill.restart("Basil", _stages(STAGES))
        await asyncio.wait({task})
        await asyncio.sleep(0)

    with caplog.at_level(logging.ERROR, logger="apps.plant.illustrator"):
        asyncio.run(_scenario())

    assert "Stage illustration pass crashed" in caplog.text
    assert "bad payload" in caplog.text
