import pytest

from shair.errors import ErrorCode, ShairError


def test_str_joins_message_and_underlying():
    err = ShairError(ErrorCode.SEND_FILE, "cannot send file", OSError("boom"))
    assert str(err) == "cannot send file: boom"


def test_str_without_underlying_is_message():
    err = ShairError(ErrorCode.UNEXPECTED, "failed to read confirmation bit")
    assert str(err) == "failed to read confirmation bit"


def test_code_is_kept_and_catchable():
    err = ShairError(ErrorCode.TRANSFER_REJECTED, "cannot send file")
    with pytest.raises(ShairError) as info:
        raise err
    assert info.value is err
    assert info.value.code is ErrorCode.TRANSFER_REJECTED
    assert info.value.underlying is None
    assert str(info.value) == "cannot send file"


def test_error_code_messages_through_error():
    rejected = ShairError(ErrorCode.TRANSFER_REJECTED, "cannot send file")
    assert str(rejected.code) == "Target rejected the file transfer"
    stat = ShairError(ErrorCode.STAT_FILE, "cannot open file x")
    assert stat.code.value == "Received an invalid file path"
    dropped = ShairError(ErrorCode.CONNECTION_DROPPED, "lost")
    assert dropped.code.value == "Tcp connexion dropped"


def test_underlying_is_exposed():
    cause = ValueError("bad")
    err = ShairError(ErrorCode.STAT_FILE, "cannot open file x", cause)
    assert err.underlying is cause
    assert err.message == "cannot open file x"