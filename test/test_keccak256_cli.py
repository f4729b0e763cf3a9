import pytest
from rich.console import Console

import keccak256_cli
from keccak256_cli import get_chunk_size, get_encoding, get_workers, hash_all, hex_to_bytes, main

ABC_HEX = "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45"
EMPTY_HEX = "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("KECCAK_CHUNK_SIZE", "KECCAK_WORKERS", "KECCAK_ENCODING"):
        monkeypatch.delenv(name, raising=False)

    # wide enough that table rows are never folded
    monkeypatch.setattr(keccak256_cli, "console", Console(width=200))
    monkeypatch.setattr(keccak256_cli, "err_console", Console(width=200, stderr=True))


def test_config_defaults():
    assert get_chunk_size() == 8192
    assert get_workers() == 1
    assert get_encoding() == "utf-8"


@pytest.mark.parametrize(
    "name, value, getter",
    [
        ("KECCAK_CHUNK_SIZE", "0", get_chunk_size),
        ("KECCAK_CHUNK_SIZE", "lots", get_chunk_size),
        ("KECCAK_WORKERS", "-2", get_workers),
        ("KECCAK_ENCODING", "klingon-8", get_encoding),
    ],
)
def test_config_errors(monkeypatch, name: str, value: str, getter):
    monkeypatch.setenv(name, value)

    with pytest.raises(ValueError):
        getter()


@pytest.mark.parametrize(
    "hexstr, expected",
    [
        ("616263", b"abc"),
        ("0x616263", b"abc"),
        ("0x", b""),
        ("", b""),
    ],
)
def test_hex_to_bytes(hexstr: str, expected: bytes):
    assert hex_to_bytes(hexstr) == expected


def test_hex_to_bytes_invalid():
    with pytest.raises(ValueError):
        hex_to_bytes("0xzz")


def test_hash_all_no_inputs():
    assert hash_all(keccak256_cli.make_hasher("text"), [], 1) == []
    assert hash_all(keccak256_cli.make_hasher("text"), [], 4) == []


def test_hash_all_keeps_order():
    inputs = [str(i) for i in range(20)]
    hasher = keccak256_cli.make_hasher("text")

    assert hash_all(hasher, inputs, 4) == hash_all(hasher, inputs, 1)


def test_text(capsys):
    main(["abc"])
    assert capsys.readouterr().out.strip() == ABC_HEX


def test_text_undecodable_argument(capsys):
    # a lone 0xff byte on the command line
    main(["\udcff"])
    assert capsys.readouterr().out.strip() == keccak256_cli.keccak256_raw(b"\xff")


def test_text_after_double_dash(capsys):
    main(["--", "-x"])
    assert capsys.readouterr().out.strip() == keccak256_cli.keccak256_string("-x")


def test_hex(capsys):
    main(["-x", "0x616263"])
    assert capsys.readouterr().out.strip() == ABC_HEX


def test_file(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("KECCAK_CHUNK_SIZE", "2")
    path = tmp_path / "abc.txt"
    path.write_bytes(b"abc")

    main(["--file", str(path)])
    assert capsys.readouterr().out.strip() == ABC_HEX


def test_many_files(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("KECCAK_WORKERS", "8")
    paths = []
    for name, content in [("abc.txt", b"abc"), ("empty.txt", b"")]:
        path = tmp_path / name
        path.write_bytes(content)
        paths.append(str(path))

    main(["-f"] + paths)

    captured = capsys.readouterr()
    assert ABC_HEX in captured.out
    assert EMPTY_HEX in captured.out
    assert "warn:" in captured.err


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-f", str(tmp_path / "nope.bin")])

    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error:" in captured.err


def test_bad_hex(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["-x", "xyz"])

    assert excinfo.value.code == 1
    assert "not a hex string" in capsys.readouterr().err


def test_bad_config(monkeypatch, capsys):
    monkeypatch.setenv("KECCAK_WORKERS", "none")

    with pytest.raises(SystemExit) as excinfo:
        main(["abc"])

    assert excinfo.value.code == 1
    assert "KECCAK_WORKERS" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv, code",
    [
        ([], 2),
        (["-f"], 2),
        (["-f", "-x", "abc"], 2),
        (["--bogus", "abc"], 2),
        (["-h"], 0),
    ],
)
def test_usage(argv: list[str], code: int, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(argv)

    assert excinfo.value.code == code
    captured = capsys.readouterr()
    assert "usage:" in captured.out + captured.err
