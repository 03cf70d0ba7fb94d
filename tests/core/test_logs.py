from solwallet.core.logs import LogBuffer, mask


def test_log_buffer_redacts_base58() -> None:
    buffer = LogBuffer()
    entry = buffer.record("wallet", "Unlocked VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")
    assert "VkgX…y2GK" in entry.message
    assert "VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK" not in entry.message


def test_redaction_can_be_disabled() -> None:
    buffer = LogBuffer(redaction_enabled=False)
    entry = buffer.record("transfer", "Sent to VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")
    assert entry.message.endswith("VkgXGe7czUXXcWzeWgt6H9VxLJhqioU5AnqRC1Ry2GK")


def test_log_buffer_recent_filters_and_limits() -> None:
    buffer = LogBuffer(max_entries=5)
    buffer.record("wallet", "w1")
    buffer.record("network", "n1")
    buffer.record("wallet", "w2")
    buffer.record("transfer", "t1")
    recent_wallet = buffer.recent(category="wallet", limit=5)
    assert [entry.message for entry in recent_wallet] == ["w1", "w2"]
    assert [entry.message for entry in buffer.recent(limit=2)] == ["w2", "t1"]
    assert buffer.recent(limit=0) == []
    latest = buffer.latest()
    assert latest is not None and latest.message == "t1"


def test_log_buffer_is_bounded() -> None:
    buffer = LogBuffer(max_entries=2)
    for index in range(4):
        buffer.record("system", f"m{index}")
    assert [entry.message for entry in buffer.recent()] == ["m2", "m3"]


def test_log_buffer_normalizes_invalid_inputs() -> None:
    buffer = LogBuffer()
    entry = buffer.record("custom", "message", severity="verbose")
    assert entry.category == "system"
    assert entry.severity == "info"


def test_subscribers_receive_entries() -> None:
    buffer = LogBuffer()
    seen: list[str] = []
    buffer.subscribe(lambda entry: seen.append(entry.message))
    buffer.record("accounts", "scan complete")
    assert seen == ["scan complete"]


def test_mask_short_tokens() -> None:
    assert mask("abc") == "••••"
    assert mask("abcdefghijkl") == "abcd…ijkl"
