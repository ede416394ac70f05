import threading
import time

from PySide6.QtCore import QCoreApplication

from conftest import FakeClient
from rapflow.core.errors import UpstreamError
from rapflow.core.generation import GenerationController, Phase
from rapflow.core.models import GenerationRequest
from rapflow.ui.workers.generation_worker import GenerationWorker

REQUEST = GenerationRequest("City nights", "Gritty", "short")


def pump_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        QCoreApplication.processEvents()
        time.sleep(0.01)
    return predicate()


def finished_generating(controller):
    return lambda: controller.state.phase is not Phase.GENERATING


class ThreadRecordingClient(FakeClient):
    def generate(self, request, profile):
        self.thread = threading.current_thread()
        return super().generate(request, profile)


class SlowClient:
    def __init__(self, delay):
        self.delay = delay
        self.started = threading.Event()

    def generate(self, request, profile):
        self.started.set()
        time.sleep(self.delay)
        return "late bar\nlater bar"


class RecordingFactory:
    def __init__(self):
        self.workers = []

    def __call__(self, *args, **kwargs):
        worker = GenerationWorker(*args, **kwargs)
        self.workers.append(worker)
        return worker


def test_default_worker_delivers_lyrics_on_the_main_thread():
    client = ThreadRecordingClient(text="a\nb")
    controller = GenerationController(client)
    handled_on = []
    controller.stateChanged.connect(lambda s: handled_on.append(threading.current_thread()))

    controller.submit(REQUEST)

    assert pump_until(finished_generating(controller))
    assert controller.state.phase is Phase.READY
    assert controller.document.lines == ("a", "b")
    assert client.thread is not threading.main_thread()
    assert set(handled_on) == {threading.main_thread()}
    controller.shutdown()


def test_default_worker_reports_client_errors():
    client = FakeClient(error=UpstreamError("Failed to generate lyrics", detail="read timed out"))
    controller = GenerationController(client, expose_details=True)

    controller.submit(REQUEST)

    assert pump_until(finished_generating(controller))
    assert controller.state.phase is Phase.ERROR
    assert controller.state.message == "Failed to generate lyrics"
    assert controller.state.detail == "read timed out"
    controller.shutdown()


def test_shutdown_waits_for_running_worker_and_drops_its_result():
    client = SlowClient(delay=0.3)
    factory = RecordingFactory()
    controller = GenerationController(client, worker_factory=factory)

    controller.submit(REQUEST)
    assert client.started.wait(2.0)

    controller.shutdown()

    assert factory.workers[0].isFinished()
    pump_until(lambda: False, timeout=0.1)
    assert controller.document is None


def test_bounded_shutdown_returns_before_slow_worker():
    client = SlowClient(delay=0.5)
    factory = RecordingFactory()
    controller = GenerationController(client, worker_factory=factory)
    controller.submit(REQUEST)
    assert client.started.wait(2.0)

    began = time.monotonic()
    controller.shutdown(timeout_ms=20)
    assert time.monotonic() - began < 0.4
    assert factory.workers[0].isRunning()

    # let the thread end before the controller is collected
    assert factory.workers[0].wait(5000)


def test_shutdown_without_workers_is_harmless():
    controller = GenerationController(FakeClient())
    controller.shutdown()
    controller.shutdown()
    assert controller.state.phase is Phase.IDLE
