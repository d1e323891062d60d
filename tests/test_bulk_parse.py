from equipdash.core.mac import parse_bulk, split_bulk


def test_example_input():
    result = parse_bulk("AA:BB:CC:DD:EE:FF, 11:22:33:44:55:66\nGGHHIIJJKKLL")

    assert result.valid == ["AA:BB:CC:DD:EE:FF", "11:22:33:44:55:66"]
    assert len(result.invalid) == 1
    assert result.invalid[0].raw == "GGHHIIJJKKLL"
    assert "hexadecimal" in result.invalid[0].reason


def test_separators():
    text = "aabbccddeeff|112233445566\r\n00-11-22-33-44-55   00.11.22.33.44.66"
    assert parse_bulk(text).valid == [
        "AA:BB:CC:DD:EE:FF",
        "11:22:33:44:55:66",
        "00:11:22:33:44:55",
        "00:11:22:33:44:66",
    ]


def test_bare_hex_gets_colons():
    assert split_bulk("c85a9fc7b9c0") == ["c8:5a:9f:c7:b9:c0"]


def test_wrong_digit_count():
    result = parse_bulk("AA:BB:CC:DD:EE\nAA:BB:CC:DD:EE:FF:00")
    assert result.valid == []
    assert [t.raw for t in result.invalid] == ["AA:BB:CC:DD:EE", "AA:BB:CC:DD:EE:FF:00"]


def test_duplicates_kept_and_empty_input():
    assert parse_bulk("aabbccddeeff\naabbccddeeff").valid == ["AA:BB:CC:DD:EE:FF"] * 2
    assert parse_bulk("").valid == []
    assert parse_bulk(None).invalid == []
