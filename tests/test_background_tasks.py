from fastapi import BackgroundTasks

from app.background.tasks import enqueue_task, run_logged


def test_enqueue_defers_the_call():
    calls = []
    background_tasks = BackgroundTasks()

    enqueue_task(background_tasks, lambda *args, **kwargs: calls.append((args, kwargs)), 7, reason="created")

    assert calls == []
    task = background_tasks.tasks[0]
    assert task.func(*task.args, **task.kwargs) is True
    assert calls == [((7,), {"reason": "created"})]


def test_failing_job_is_logged_not_raised(caplog):
    def broken(appointment_id):
        raise RuntimeError(f"smtp down for {appointment_id}")

    with caplog.at_level("ERROR", logger="app.background.tasks"):
        assert run_logged(broken, 3) is False

    assert "background task" in caplog.text
    assert "smtp down for 3" in caplog.text
