from notifier.core.listeners import NotifyResult, current_notification
from notifier.core.signals import Signal


class DummySettings:
    log_level = "INFO"
    recursive_rule = "warn"
    duplicate_policy = "return"
    default_emitter = "serial"
    replay = False


def make_signal(**kwargs):
    return Signal(project_settings=DummySettings(), **kwargs)


def test_notify_returns_value_record():
    listener = make_signal().listen(lambda x: x * 2)
    assert listener.notify(21) == NotifyResult(value=42)


def test_notify_once_listener_removes_itself_first():
    signal = make_signal()
    seen = []
    listener = signal.listen_once(lambda: seen.append(signal.is_listened()))
    result = listener.notify()
    assert seen == [False]
    assert result.removed is True
    assert result.remove_reason == "once"
    assert listener.notify().removed is False


def test_notify_false_is_a_stop():
    result = make_signal().listen(lambda: False).notify()
    assert result.stopped is True
    assert result.stop_reason == "returned false"
    assert result.value is False


def test_notify_records_explicit_stop():
    signal = make_signal()

    def listener():
        signal.stop("enough")
        return "value"

    result = signal.listen(listener).notify()
    assert result.stopped is True
    assert result.stop_reason == "enough"
    assert result.value == "value"


def test_notify_records_self_removal():
    signal = make_signal()
    holder = {}
    holder["listener"] = signal.listen(lambda: holder["listener"].remove("self"))
    result = holder["listener"].notify()
    assert result.removed is True
    assert result.remove_reason == "self"


def test_notify_disabled_listener_is_prevented():
    calls = []
    listener = make_signal().listen(calls.append)
    listener.disable()
    result = listener.notify(1)
    assert result.prevented is True
    assert result.prevented_reason == "disabled"
    assert calls == []


def test_notification_scope_is_reset_after_notify():
    signal = make_signal()
    inside = []
    signal.listen(lambda: inside.append(current_notification())).notify()
    assert inside[0] is not None
    assert current_notification() is None


def test_listener_repr():
    def on_event():
        pass

    signal = make_signal()
    listener = signal.listen_once(on_event)
    assert "on_event" in repr(listener)
    assert "once" in repr(listener)
    listener.remove()
    assert "removed" in repr(listener)
