"""Deferred & Promise — tests for states, listeners, producers and the Promise view.

Tests cover:
    - Fresh Deferred is pending; resolve/reject are final and fire once
    - Late listeners replay the remembered outcome
    - notify repeats while pending, is a no-op after settlement
    - Default firing context is the Deferred; *_with overrides it
    - always, initializer, ids
    - Promise view is read-only, cached, idempotent; promise(obj) copies the surface
"""

import logging

import pytest

from deferred.core.callback_list import current_context
from deferred.core.deferred import PROMISE_FUNCTIONS, Deferred, Promise
from deferred.core.errors import InvalidInitializerError
from deferred.core.protocols import Thenable


def test_fresh_deferred_is_pending():
    d = Deferred()
    assert d.state() == "pending"
    assert d.is_resolved() is False
    assert d.is_rejected() is False


def test_second_resolve_is_noop(recorder):
    d = Deferred()
    d.done(recorder)
    d.resolve(1, 2)
    d.resolve(3, 4)
    assert recorder.args == [(1, 2)]
    assert d.state() == "resolved"
    assert d.is_resolved()


def test_late_done_fires_immediately(recorder):
    d = Deferred().resolve(5)
    d.done(recorder)
    assert recorder.args == [(5,)]


def test_reject_after_resolve_is_noop(make_recorder):
    done, fail = make_recorder(), make_recorder()
    d = Deferred().done(done).fail(fail)
    d.resolve("ok")
    d.reject("late")
    assert d.state() == "resolved"
    assert fail.calls == []
    assert done.args == [("ok",)]


def test_reject_fires_fail_once(recorder):
    d = Deferred().fail(recorder)
    d.reject("err")
    d.reject("again")
    d.resolve("nope")
    assert recorder.args == [("err",)]
    assert d.is_rejected()
    assert not d.is_resolved()


def test_notify_repeats_while_pending(recorder):
    d = Deferred().progress(recorder)
    d.notify(10)
    d.notify(20)
    assert recorder.args == [(10,), (20,)]
    assert d.state() == "pending"


def test_late_progress_gets_last_notification(recorder):
    d = Deferred()
    d.notify(1)
    d.notify(2)
    d.progress(recorder)
    assert recorder.args == [(2,)]


def test_notify_after_settlement_is_noop(recorder):
    d = Deferred().progress(recorder)
    d.resolve()
    d.notify(1)
    assert recorder.calls == []
    assert d.state() == "resolved"


def test_default_context_is_the_deferred(recorder):
    d = Deferred().done(recorder)
    d.resolve("v")
    assert recorder.calls == [(d, ("v",))]


def test_with_variants_set_context(make_recorder):
    done, progress = make_recorder(), make_recorder()
    d = Deferred().done(done).progress(progress)
    d.notify_with("p-ctx", 1)
    d.resolve_with("r-ctx", 2)
    assert progress.calls == [("p-ctx", (1,))]
    assert done.calls == [("r-ctx", (2,))]


def test_reject_with_sets_context(recorder):
    d = Deferred().fail(recorder)
    d.reject_with("ctx", "e")
    assert recorder.calls == [("ctx", ("e",))]


def test_producers_return_the_deferred():
    d = Deferred()
    assert d.notify(1) is d
    assert d.resolve() is d
    assert d.reject() is d


def test_always_fires_on_resolve(recorder):
    Deferred().always(recorder).resolve("a")
    assert recorder.args == [("a",)]


def test_always_fires_on_reject(recorder):
    Deferred().always(recorder).reject("b")
    assert recorder.args == [("b",)]


def test_initializer_receives_deferred_as_arg_and_context():
    seen = []

    def init(dfd):
        seen.append((dfd, current_context()))
        dfd.resolve("from init")

    d = Deferred(init)
    assert seen == [(d, d)]
    assert d.is_resolved()
    assert current_context() is None


def test_non_callable_initializer_rejected(caplog):
    with caplog.at_level(logging.WARNING, logger="deferred.core.deferred"):
        with pytest.raises(InvalidInitializerError) as exc_info:
            Deferred("nope")
    deferred_id = exc_info.value.context.deferred_id
    assert deferred_id is not None
    record = caplog.records[-1]
    assert record.error_code == "INVALID_INITIALIZER"
    assert record.deferred_id == deferred_id


def test_ids_increase():
    first, second = Deferred(), Deferred()
    assert second.id > first.id


def test_listener_on_deferred_returns_deferred(recorder):
    d = Deferred()
    assert d.done(recorder) is d
    assert d.fail(recorder) is d
    assert d.progress(recorder) is d
    assert d.always(recorder) is d


# ─── Promise view ─────────────────────────────────────────────────


def test_promise_is_cached_and_idempotent():
    d = Deferred()
    p = d.promise()
    assert isinstance(p, Promise)
    assert d.promise() is p
    assert p.promise() is p


def test_promise_has_no_producer_surface():
    p = Deferred().promise()
    for name in ("resolve", "resolve_with", "reject", "reject_with", "notify", "notify_with"):
        assert not hasattr(p, name)


def test_promise_listeners_return_promise(recorder):
    d = Deferred()
    p = d.promise()
    assert p.done(recorder) is p
    assert p.fail(recorder) is p
    assert p.progress(recorder) is p
    assert p.always(recorder) is p
    d.resolve(1)
    assert recorder.args == [(1,), (1,)]


def test_promise_reflects_state():
    d = Deferred()
    p = d.promise()
    assert p.state() == "pending"
    d.reject()
    assert p.state() == "rejected"
    assert p.is_rejected()
    assert not p.is_resolved()


def test_deferred_and_promise_are_thenable():
    d = Deferred()
    assert isinstance(d, Thenable)
    assert isinstance(d.promise(), Thenable)


def test_promise_obj_copies_consumer_surface(recorder):
    class Job:
        pass

    d = Deferred()
    job = Job()
    assert d.promise(job) is job
    for name in PROMISE_FUNCTIONS:
        assert callable(getattr(job, name))
    assert not hasattr(job, "resolve")
    job.done(recorder)
    d.resolve("finished")
    assert recorder.args == [("finished",)]
    assert job.state() == "resolved"
    assert job.promise() is job


def test_promise_view_hides_its_deferred():
    p = Deferred().promise()
    assert not hasattr(p, "_deferred")
    assert not hasattr(p, "deferred")


def test_decorated_obj_answers_promise_with_itself():
    class Job:
        pass

    job = Deferred().promise(Job())
    assert job.promise() is job
    assert job.promise().promise() is job
