from sshproto.errors import ErrorKind, SendError, SshError


def test_plain_message():
    err = SshError(ErrorKind.NO_COMMON_MAC)
    assert str(err) == "No common MAC algorithm"
    assert err.kind is ErrorKind.NO_COMMON_MAC
    assert err.detail is None


def test_key_changed_carries_line():
    err = SshError(ErrorKind.KEY_CHANGED, 7)
    assert str(err) == "Key changed, line 7"
    assert err.detail == 7


def test_channel_open_failure_message():
    err = SshError(ErrorKind.CHANNEL_OPEN_FAILURE, "ConnectFailed")
    assert str(err) == "Failed to open channel (ConnectFailed)"


def test_detail_appended_when_no_placeholder():
    err = SshError(ErrorKind.INCONSISTENT, "bad state")
    assert str(err).startswith("Inconsistent state of the protocol")
    assert str(err).endswith("bad state")


def test_hup_error_message_and_kind():
    err = SshError(ErrorKind.HUP)
    assert isinstance(err, Exception)
    assert err.kind is ErrorKind.HUP
    assert str(err) == "Connection closed by the remote side"


def test_send_error_message():
    assert str(SendError()) == "Could not reach the event loop"


def test_plain_kind_messages_unique():
    kinds = [
        ErrorKind.NO_COMMON_MAC,
        ErrorKind.INCONSISTENT,
        ErrorKind.HUP,
    ]
    messages = [str(SshError(kind)) for kind in kinds]
    assert messages == [
        "No common MAC algorithm",
        "Inconsistent state of the protocol",
        "Connection closed by the remote side",
    ]
    assert len(messages) == len(set(messages))