import io
import json
import subprocess
from unittest import mock

import pytest

from ethlink.compiler import (
    Artifact,
    Solidity,
    Vyper,
    download_solidity,
    new_compiler,
)


def completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(
        args=[], returncode=returncode, stdout=stdout, stderr=stderr
    )


SOLC_OUTPUT = json.dumps(
    {
        "contracts": {
            "<stdin>:foo": {"abi": "[]", "bin": "6080", "bin-runtime": "6081"},
            "<stdin>:bar": {"abi": [], "bin": "6082", "bin-runtime": "6083"},
        },
        "version": "0.5.5",
    }
)


def test_new_compiler_known_and_unknown():
    solc = new_compiler("solidity", "solc")
    assert isinstance(solc, Solidity)
    assert solc.path == "solc"
    assert isinstance(new_compiler("vyper", "vyper"), Vyper)
    with pytest.raises(ValueError, match="unknown compiler 'rust'"):
        new_compiler("rust", "rustc")


def test_compile_code_rejects_empty():
    with pytest.raises(ValueError, match="code is empty"):
        Solidity("solc").compile_code("")


def test_compile_rejects_no_files():
    with pytest.raises(ValueError, match="no input files"):
        Solidity("solc").compile()


@mock.patch("ethlink.compiler.subprocess.run")
def test_compile_code_inline(run):
    run.return_value = completed(SOLC_OUTPUT)
    code = "pragma solidity >0.0.0;\ncontract foo{}\ncontract bar{}\n"

    output = Solidity("solc").compile_code(code)

    names = {name.removeprefix("<stdin>:") for name in output}
    assert names == {"foo", "bar"}
    assert output["<stdin>:foo"] == Artifact(abi="[]", bin="6080", bin_runtime="6081")
    assert output["<stdin>:bar"].abi == "[]"
    args, kwargs = run.call_args
    assert args[0] == ["solc", "--combined-json", "bin,bin-runtime,abi", "-"]
    assert kwargs["input"] == code


@mock.patch("ethlink.compiler.subprocess.run")
def test_compile_files(run):
    run.return_value = completed(SOLC_OUTPUT)
    output = Solidity("solc").compile("ballot.sol", "simple_auction.sol")
    assert len(output) == 2
    args, kwargs = run.call_args
    assert args[0][-2:] == ["ballot.sol", "simple_auction.sol"]
    assert "-" not in args[0]
    assert kwargs["input"] is None


@mock.patch("ethlink.compiler.subprocess.run")
def test_compile_failure_reports_stderr(run):
    run.return_value = completed(returncode=1, stderr="syntax error")
    with pytest.raises(RuntimeError, match="failed to compile: syntax error"):
        Solidity("solc").compile_code("contract {")


@mock.patch("ethlink.compiler.subprocess.run")
def test_missing_executable(run):
    run.side_effect = FileNotFoundError("no such file")
    with pytest.raises(RuntimeError, match="failed to compile"):
        Solidity("solc").compile("a.sol")


@mock.patch("ethlink.compiler.subprocess.run")
def test_vyper_compile(run):
    abi = [{"name": "bid", "type": "function", "inputs": []}]
    run.return_value = completed(
        json.dumps(
            {
                "version": "0.1.0",
                "auction.v.py": {"abi": abi, "bytecode": "0x01", "bytecode_runtime": "0x02"},
                "crowdfund.v.py": {"abi": [], "bytecode": "0x03", "bytecode_runtime": "0x04"},
            }
        )
    )

    output = new_compiler("vyper", "vyper").compile("auction.v.py", "crowdfund.v.py")

    assert len(output) == 2
    assert "version" not in output
    auction = output["auction.v.py"]
    assert (auction.bin, auction.bin_runtime) == ("0x01", "0x02")
    assert json.loads(auction.abi) == abi
    assert run.call_args.args[0] == [
        "vyper", "-f", "combined_json", "auction.v.py", "crowdfund.v.py"
    ]


@mock.patch("ethlink.compiler.subprocess.run")
def test_vyper_missing_bytecode(run):
    run.return_value = completed(json.dumps({"a.vy": {"abi": []}}))
    with pytest.raises(ValueError):
        Vyper("vyper").compile("a.vy")


def test_download_rejects_file_destination(tmp_path):
    target = tmp_path / "file"
    target.write_text("x")
    with pytest.raises(FileExistsError, match="dst is a file"):
        download_solidity("0.5.5", target, False)


def _fake_release(*args, **kwargs):
    reply = mock.MagicMock()
    reply.__enter__.return_value = io.BytesIO(b"solc-binary")
    return reply


@mock.patch("ethlink.compiler.urllib.request.urlopen", side_effect=_fake_release)
def test_download_named_by_version(urlopen, tmp_path):
    dst1 = tmp_path / "one"
    download_solidity("0.5.5", dst1, True)
    assert not (dst1 / "solidity").exists()
    assert (dst1 / "solidity-0.5.5").read_bytes() == b"solc-binary"
    assert "v0.5.5" in urlopen.call_args.args[0]

    dst2 = tmp_path / "two"
    download_solidity("0.5.5", dst2, False)
    assert (dst2 / "solidity").read_bytes() == b"solc-binary"
    assert not (dst2 / "solidity-0.5.5").exists()