import queue

from shair.errors import ErrorCode, ShairError
from shair.model import (
    Device,
    FilePreview,
    LocalInfo,
    PeerStatus,
    PeerUpdate,
    SvcType,
    TransferRequest,
)
from shair.tui.messages import (
    ChangePageListToInputMsg,
    ChangePageListToReceivingMsg,
    ErrMsg,
    KeyMsg,
    PeerUpdateMsg,
    ReceivingDoneMsg,
    SendingDoneMsg,
    TransferRequestMsg,
)
from shair.tui.peers import BASE_FOOTER, ListModel


def device(name, ip="10.0.0.2", port=8085):
    return Device(name=name, discovered_on=SvcType.LOCAL, local_info=LocalInfo(ip, port))


def with_peers(*names):
    model = ListModel()
    peers = [device(n) for n in names]
    for p in peers:
        model.update(PeerUpdateMsg(PeerUpdate(p, PeerStatus.DISCOVERED)))
    return model, peers


def request_msg(sender_name="bob", previews=None):
    req = TransferRequest(
        sender=Device(name=sender_name),
        file_previews=previews or [FilePreview("a", 1), FilePreview("b", 2)],
    )
    return req, TransferRequestMsg(req)


def test_discovered_peers_are_listed_in_view():
    model, _ = with_peers("alpha")
    lines = model.view().split("\n")
    assert "Device" in lines[0]
    assert lines[1].startswith(">")
    for part in ("alpha", "Local", "10.0.0.2", "8085"):
        assert part in lines[1]
    assert model.view().endswith(BASE_FOOTER)


def test_removed_peer_disappears():
    model, peers = with_peers("alpha", "beta")
    model.update(PeerUpdateMsg(PeerUpdate(peers[0], PeerStatus.REMOVED)))
    assert model.peers == [peers[1]]
    assert "alpha" not in model.view()


def test_cursor_moves_within_bounds():
    model, _ = with_peers("alpha", "beta")
    model.update(KeyMsg("k"))
    assert model.cursor == 0
    model.update(KeyMsg("j"))
    model.update(KeyMsg("down"))
    assert model.cursor == 1
    model.update(KeyMsg("up"))
    assert model.cursor == 0


def test_enter_selects_peer_under_cursor():
    model, peers = with_peers("alpha", "beta")
    model.update(KeyMsg("j"))
    cmd = model.update(KeyMsg("enter"))
    assert cmd() == ChangePageListToInputMsg(peers[1])


def test_enter_without_peers_does_nothing():
    model = ListModel()
    assert model.update(KeyMsg("enter")) is None


def test_transfer_request_shows_prompt_and_accept():
    model = ListModel()
    req, msg = request_msg()
    model.update(msg)
    assert model.view().endswith(" (y/n) bob wants to transfer 2 files")
    cmd = model.update(KeyMsg("y"))
    assert req.accept.get_nowait() is True
    out = cmd()
    assert isinstance(out, ChangePageListToReceivingMsg)
    assert out.file_previews == req.file_previews
    assert out.progress is req.progress
    assert out.sender is req.sender
    assert model.additional_msg_footer == ""
    assert model.update(KeyMsg("y")) is None


def test_transfer_request_reject():
    model = ListModel()
    req, msg = request_msg()
    model.update(msg)
    assert model.update(KeyMsg("n")) is None
    assert req.accept.get_nowait() is False
    assert model.transfer_request.accept is None
    assert req.accept.empty()


def test_y_without_request_does_nothing():
    model = ListModel()
    assert model.update(KeyMsg("y")) is None


def test_rejection_error_names_peer():
    model, _ = with_peers("alpha")
    model.update(ErrMsg(ShairError(ErrorCode.TRANSFER_REJECTED, "cannot send file")))
    assert model.view().endswith(" --- alpha didn't accept the files")


def test_other_error_shows_its_text():
    model = ListModel()
    model.update(ErrMsg(RuntimeError("boom")))
    assert model.view().endswith(" --- boom ")


def test_sending_done_footer():
    model = ListModel()
    model.update(SendingDoneMsg())
    assert model.view().endswith(" --- transfer done")


def test_receiving_done_footers():
    model = ListModel()
    model.update(ReceivingDoneMsg(received=3, expected=3))
    assert model.view().endswith(" --- files received")
    model.update(ReceivingDoneMsg(received=2, expected=3))
    assert model.view().endswith(" --- transfer incomplete")


def test_peer_without_ip_renders_nil():
    model = ListModel()
    model.update(PeerUpdateMsg(PeerUpdate(Device(name="x"), PeerStatus.DISCOVERED)))
    assert "<nil>" in model.view()
    assert isinstance(model.transfer_request.accept, (queue.Queue, type(None)))
    assert model.init() is None