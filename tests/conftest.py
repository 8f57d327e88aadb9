import pytest

from models import Category, Project, Span, TimelineSpan


def make_item(span_id, app, start, end, title='', categories=(), projects=()):
    return TimelineSpan(
        span=Span(id=span_id, app_name=app, window_title=title, start_at=start, end_at=end),
        categories=tuple(Category(*c) for c in categories),
        projects=tuple(Project(*p) for p in projects),
    )


@pytest.fixture
def three_spans():
    """A(0,100,X,[]), B(100,250,Y,[Work]), C(200,260,X,[Work, Life])"""
    return [
        make_item(1, 'X', 0, 100),
        make_item(2, 'Y', 100, 250, categories=[(1, 'Work', '#22c55e')]),
        make_item(3, 'X', 200, 260, categories=[(1, 'Work', '#22c55e'), (2, 'Life', '')]),
    ]


class ManualRunner:
    """Store runner that holds requests until the test completes them."""

    def __init__(self):
        self.pending = []

    def __call__(self, work, done):
        self.pending.append((work, done))

    def complete(self, index=0):
        work, done = self.pending.pop(index)
        try:
            result = work()
        except Exception as e:
            done(None, e)
            return
        done(result, None)

    def fail(self, error, index=0):
        _, done = self.pending.pop(index)
        done(None, error)


class FakeScheduler:
    """Stands in for a Tk widget's after/after_cancel."""

    def __init__(self):
        self.jobs = {}
        self._next_id = 0

    def after(self, ms, callback):
        self._next_id += 1
        job = f"after#{self._next_id}"
        self.jobs[job] = (ms, callback)
        return job

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def fire_all(self):
        for job in list(self.jobs):
            _, callback = self.jobs.pop(job)
            callback()


@pytest.fixture
def manual_runner():
    return ManualRunner()


@pytest.fixture
def scheduler():
    return FakeScheduler()
