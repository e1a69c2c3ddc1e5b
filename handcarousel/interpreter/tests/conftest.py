import pytest

from handcarousel.core.types import CarouselItem, Classification, Eligibility, GestureSample, PointerPoint
from handcarousel.interpreter.state_machine import CarouselEngine


class RecordingNavigator:
    def __init__(self):
        self.calls = []

    def go(self, target):
        self.calls.append(target)


class RecordingFeedback:
    def __init__(self):
        self.calls = []

    def on_grab(self):
        self.calls.append("grab")

    def on_swipe(self):
        self.calls.append("swipe")

    def on_drop(self):
        self.calls.append("drop")

    def on_rejected(self):
        self.calls.append("rejected")

    def count(self, cue):
        return self.calls.count(cue)


def make_items(n=5, selectable=(2,)):
    items = []
    for i in range(n):
        if i in selectable:
            items.append(CarouselItem(id=f"item{i}", title=f"Item {i}",
                                      eligibility=Eligibility.SELECTABLE,
                                      activation_target=f"/play/{i}"))
        else:
            items.append(CarouselItem(id=f"item{i}", title=f"Item {i}"))
    return items


def sample(t, x=0.5, y=0.5, label=Classification.OPEN):
    return GestureSample(hand_x=x, hand_y=y, classification=label, t_ms=t)


def closed(t, x=0.5, y=0.5):
    return sample(t, x, y, Classification.CLOSED)


def pt(x, y, t):
    return PointerPoint(x=x, y=y, t_ms=t)


@pytest.fixture
def nav():
    return RecordingNavigator()


@pytest.fixture
def fx():
    return RecordingFeedback()


@pytest.fixture
def make_engine(nav, fx):
    def _make(n=5, selectable=(2,), **kw):
        return CarouselEngine(make_items(n, selectable), navigation=nav, feedback=fx,
                              clock=lambda: 0.0, **kw)
    return _make
