import queue

from shair.model import Device, FilePreview
from shair.tui.messages import (
    DownloadProgressMsg,
    KeyMsg,
    ReceivingDoneMsg,
    UploadProgressMsg,
)
from shair.tui.transfer import ReceivingModel, SendingModel, render_file_list


def filled(*items):
    q = queue.Queue()
    for item in items:
        q.put(item)
    return q


def test_render_empty_list():
    assert render_file_list("Receiving Files", []) == "Receiving Files\n\nNo files to display.\n"


def test_render_lists_files_in_order():
    text = render_file_list("Sending Files", [FilePreview("a.txt", 1000), FilePreview("b.txt", 5)])
    assert text.startswith("Sending Files\n\n")
    assert "   1. a.txt" in text
    assert "   2. b.txt" in text
    assert text.index("a.txt") < text.index("b.txt")
    assert "1.0 kB" in text
    assert text.endswith("\nTotal files: 2\n")


def test_receiving_accumulates_until_done():
    model = ReceivingModel(Device(name="bob"), [FilePreview("a", 7)], filled(3, 4, None))
    msg = model.init()()
    assert msg == DownloadProgressMsg(3)
    msg = model.update(msg)()
    assert msg == DownloadProgressMsg(4)
    msg = model.update(msg)()
    assert msg == ReceivingDoneMsg(received=7)
    assert model.done is True
    assert model.update(msg) is None


def test_receiving_update_starts_listening_once():
    model = ReceivingModel(None, [], filled(2))
    cmd = model.update(KeyMsg("x"))
    assert cmd() == DownloadProgressMsg(2)
    assert model.update(KeyMsg("x")) is None
    assert model.received == 2


def test_receiving_view_has_title():
    model = ReceivingModel(None, [FilePreview("a", 1)], queue.Queue())
    assert model.view().startswith("Receiving Files\n\n")


def test_sending_reports_progress_then_stops():
    model = SendingModel(Device(name="alice"), [FilePreview("a", 5)], filled(5, None))
    msg = model.init()()
    assert msg == UploadProgressMsg(5)
    assert model.update(msg)() is None
    assert model.done is True
    assert model.sent == 5
    assert model.update(UploadProgressMsg(1)) is None


def test_sending_view_has_title():
    model = SendingModel(None, [], queue.Queue())
    assert model.view() == "Sending Files\n\nNo files to display.\n"