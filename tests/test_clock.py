import asyncio

from skillmap.layout.clock import AnimationClock, FrameThrottle, run_animation


class FakeTime:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


class TestFrameThrottle:
    def test_first_frame_always_emits(self):
        assert FrameThrottle(40).should_emit(0.0)

    def test_at_most_one_frame_per_interval(self):
        throttle = FrameThrottle(40)
        emitted = [t for t in range(0, 200, 10) if throttle.should_emit(float(t))]
        assert emitted == [0, 50, 100, 150]

    def test_reset(self):
        throttle = FrameThrottle(40)
        throttle.should_emit(0.0)
        assert not throttle.should_emit(10.0)
        throttle.reset()
        assert throttle.should_emit(10.0)

    def test_negative_interval_treated_as_zero(self):
        throttle = FrameThrottle(-5)
        assert throttle.should_emit(1.0)
        assert throttle.should_emit(2.0)


class TestAnimationClock:
    def test_elapsed_ms(self):
        fake = FakeTime()
        clock = AnimationClock(now=fake)
        fake.now += 1.5
        assert clock.elapsed_ms() == 1500.0

    def test_restart(self):
        fake = FakeTime()
        clock = AnimationClock(now=fake)
        fake.now += 2
        clock.restart()
        assert clock.elapsed_ms() == 0.0


class TestRunAnimation:
    def test_stops_when_event_set(self):
        frames = []

        async def scenario():
            stop = asyncio.Event()

            def on_frame(elapsed):
                frames.append(elapsed)
                if len(frames) == 3:
                    stop.set()

            return await run_animation(on_frame, stop, interval_ms=1)

        count = asyncio.run(scenario())
        assert count == 3
        assert frames == sorted(frames)

    def test_throttled_by_clock(self):
        fake = FakeTime()
        clock = AnimationClock(now=fake)
        seen = []

        async def scenario():
            stop = asyncio.Event()

            def on_frame(elapsed):
                seen.append(elapsed)

            task = asyncio.create_task(run_animation(on_frame, stop, interval_ms=1, clock=clock))
            # the fake clock never advances, so only the first tick gets through
            for _ in range(5):
                await asyncio.sleep(0.005)
            stop.set()
            return await task

        assert asyncio.run(scenario()) == 1
        assert seen == [0.0]

    def test_already_stopped(self):
        async def scenario():
            stop = asyncio.Event()
            stop.set()
            return await run_animation(lambda _: None, stop)

        assert asyncio.run(scenario()) == 0
