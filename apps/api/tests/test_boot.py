"""Tests for master/worker bootstrap."""

import asyncio
import multiprocessing

import httpx
import pytest

from campra.boot import master, worker
from campra.boot.worker import LISTEN_FAILED_MESSAGE, READY_MESSAGE, WorkerStartupError


def _record_boot_steps(monkeypatch, container, calls, *, http_error=None):
    async def fake_init_db(_container):
        calls.append("db")

    async def fake_init_moderation(_container):
        calls.append("moderation")

    async def fake_start_http_server(_container, sock=None):
        calls.append("http")
        if http_error is not None:
            raise http_error

        async def serve():
            calls.append("serving")

        return object(), asyncio.create_task(serve())

    async def fake_stop():
        calls.append("queue stopped")

    monkeypatch.setattr(worker, "init_db", fake_init_db)
    monkeypatch.setattr(worker, "init_moderation", fake_init_moderation)
    monkeypatch.setattr(worker, "start_http_server", fake_start_http_server)
    monkeypatch.setattr(container.queue, "start", lambda: calls.append("queue"))
    monkeypatch.setattr(container.queue, "stop", fake_stop)


# =============================================================================
# Worker
# =============================================================================

@pytest.mark.asyncio
async def test_worker_boots_in_order_then_reports_ready(container, monkeypatch):
    calls = []
    _record_boot_steps(monkeypatch, container, calls)
    reader, writer = multiprocessing.Pipe(duplex=False)

    await worker.run_worker(container, ready_conn=writer)

    assert reader.recv() == READY_MESSAGE
    assert calls == ["db", "moderation", "http", "queue", "serving", "queue stopped"]


@pytest.mark.asyncio
async def test_worker_reports_listen_failure(container, monkeypatch):
    calls = []
    _record_boot_steps(monkeypatch, container, calls, http_error=OSError("address in use"))
    reader, writer = multiprocessing.Pipe(duplex=False)

    with pytest.raises(OSError):
        await worker.run_worker(container, ready_conn=writer)

    assert reader.recv() == LISTEN_FAILED_MESSAGE
    assert "queue" not in calls


@pytest.mark.asyncio
async def test_worker_database_failure_stops_boot(container, monkeypatch):
    calls = []
    _record_boot_steps(monkeypatch, container, calls)

    async def broken_init_db(_container):
        raise RuntimeError("database down")

    monkeypatch.setattr(worker, "init_db", broken_init_db)
    reader, writer = multiprocessing.Pipe(duplex=False)

    with pytest.raises(RuntimeError):
        await worker.run_worker(container, ready_conn=writer)

    assert calls == []
    assert not reader.poll(0)


@pytest.mark.asyncio
async def test_init_moderation_uses_container_moderator(container):
    await worker.init_moderation(container)

    # nothing configured in meta
    assert not container.moderator.is_available()


@pytest.mark.asyncio
async def test_start_http_server_serves_app_on_shared_socket(container):
    sock = master.bind_socket("127.0.0.1", 0)
    port = sock.getsockname()[1]
    try:
        server, task = await worker.start_http_server(container, sock=sock)
        assert server.started

        async with httpx.AsyncClient(trust_env=False) as client:
            response = await client.get(f"http://127.0.0.1:{port}/health")
        assert response.status_code == 200

        server.should_exit = True
        await asyncio.wait_for(task, timeout=5)
    finally:
        sock.close()


# =============================================================================
# Master
# =============================================================================

def test_wait_for_ready_accepts_ready():
    reader, writer = multiprocessing.Pipe(duplex=False)
    writer.send(READY_MESSAGE)

    master.wait_for_ready(reader, 1, worker_name="w0")


def test_wait_for_ready_listen_failed():
    reader, writer = multiprocessing.Pipe(duplex=False)
    writer.send(LISTEN_FAILED_MESSAGE)

    with pytest.raises(WorkerStartupError, match="failed to start its HTTP server"):
        master.wait_for_ready(reader, 1, worker_name="w0")


def test_wait_for_ready_times_out():
    reader, _writer = multiprocessing.Pipe(duplex=False)

    with pytest.raises(WorkerStartupError, match="did not report ready"):
        master.wait_for_ready(reader, 0.01, worker_name="w0")


def test_wait_for_ready_worker_exited():
    reader, writer = multiprocessing.Pipe(duplex=False)
    writer.close()

    with pytest.raises(WorkerStartupError, match="exited before reporting ready"):
        master.wait_for_ready(reader, 1, worker_name="w0")


def test_wait_for_ready_unexpected_message():
    reader, writer = multiprocessing.Pipe(duplex=False)
    writer.send("hello")

    with pytest.raises(WorkerStartupError, match="unexpected message"):
        master.wait_for_ready(reader, 1, worker_name="w0")


class FakeProcess:
    """Stands in for a worker process; sends the next queued message when started."""

    messages: list[str] = []
    started: list["FakeProcess"] = []

    def __init__(self, target, kwargs, name):
        self.target = target
        self.kwargs = kwargs
        self.name = name
        self.alive = False
        self.terminated = False

    def start(self):
        self.alive = True
        FakeProcess.started.append(self)
        self.kwargs["ready_conn"].send(FakeProcess.messages.pop(0))

    def is_alive(self):
        return self.alive

    def terminate(self):
        self.terminated = True
        self.alive = False

    def join(self, timeout=None):
        pass


class FakeContext:
    Pipe = staticmethod(multiprocessing.Pipe)
    Process = FakeProcess


@pytest.fixture
def fake_ctx(monkeypatch):
    monkeypatch.setattr("campra.core.config.os.cpu_count", lambda: 8)
    FakeProcess.messages = []
    FakeProcess.started = []
    return FakeContext()


def test_spawn_workers_waits_for_each_ready(settings, fake_ctx):
    settings.CLUSTER_LIMIT = 3
    FakeProcess.messages = [READY_MESSAGE] * 3

    workers = master.spawn_workers(settings, sock=object(), ctx=fake_ctx)

    assert [process.name for process in workers] == [
        "campra-worker-0",
        "campra-worker-1",
        "campra-worker-2",
    ]
    assert workers[0].target is worker.worker_main
    assert workers[0].kwargs["settings"] is settings


def test_spawn_workers_aborts_and_terminates_on_failure(settings, fake_ctx):
    settings.CLUSTER_LIMIT = 3
    FakeProcess.messages = [READY_MESSAGE, LISTEN_FAILED_MESSAGE, READY_MESSAGE]

    with pytest.raises(WorkerStartupError):
        master.spawn_workers(settings, sock=object(), ctx=fake_ctx)

    assert len(FakeProcess.started) == 3
    assert all(process.terminated for process in FakeProcess.started)


def test_spawn_workers_starts_all_before_waiting(settings, fake_ctx, monkeypatch):
    settings.CLUSTER_LIMIT = 3
    FakeProcess.messages = [READY_MESSAGE] * 3
    started_at_wait = []
    wait = master.wait_for_ready

    def recording_wait(conn, timeout, *, worker_name):
        started_at_wait.append(len(FakeProcess.started))
        wait(conn, timeout, worker_name=worker_name)

    monkeypatch.setattr(master, "wait_for_ready", recording_wait)

    master.spawn_workers(settings, sock=object(), ctx=fake_ctx)

    assert started_at_wait == [3, 3, 3]


def test_spawn_workers_capped_at_cpu_count(settings, fake_ctx):
    settings.CLUSTER_LIMIT = 32
    FakeProcess.messages = [READY_MESSAGE] * 8

    workers = master.spawn_workers(settings, sock=object(), ctx=fake_ctx)

    assert len(workers) == 8


def test_master_runs_in_process_when_clustering_disabled(settings, monkeypatch):
    settings.DISABLE_CLUSTERING = True
    calls = []
    monkeypatch.setattr(master, "connect_db", lambda s: calls.append("db"))
    monkeypatch.setattr(master, "worker_main", lambda settings: calls.append(("worker", settings)))
    monkeypatch.setattr(master, "spawn_workers", lambda *a, **kw: pytest.fail("should not spawn"))

    master.master_main(settings)

    assert calls == ["db", ("worker", settings)]


def test_master_initialization_failure_is_fatal(settings, monkeypatch):
    def broken_connect(_settings):
        raise RuntimeError("database down")

    monkeypatch.setattr(master, "connect_db", broken_connect)
    monkeypatch.setattr(master, "bind_socket", lambda *a: pytest.fail("should not bind"))

    with pytest.raises(RuntimeError):
        master.master_main(settings)


def test_bind_socket_is_inheritable():
    sock = master.bind_socket("127.0.0.1", 0)
    try:
        assert sock.getsockname()[1] > 0
        assert sock.get_inheritable()
    finally:
        sock.close()


def test_cluster_size(settings, monkeypatch):
    monkeypatch.setattr("campra.core.config.os.cpu_count", lambda: 8)

    settings.CLUSTER_LIMIT = 2
    assert settings.cluster_size == 2

    settings.CLUSTER_LIMIT = 0
    assert settings.cluster_size == 8

    settings.CLUSTER_LIMIT = 16
    assert settings.cluster_size == 8
