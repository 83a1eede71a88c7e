"""Running the Solidity and Vyper compilers and collecting their artifacts."""

from __future__ import annotations

import abc
import json
import shutil
import subprocess
import tempfile
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, Union

__all__ = [
    "Artifact",
    "Compiler",
    "Solidity",
    "Vyper",
    "new_compiler",
    "download_solidity",
]

SOLC_RELEASE_URL = (
    "https://github.com/ethereum/solidity/releases/download/v{version}/solc-static-linux"
)


@dataclass
class Artifact:
    """A contract produced by a compiler."""

    abi: str = ""
    bin: str = ""
    bin_runtime: str = ""


class Compiler(abc.ABC):
    """A contract compiler."""

    @abc.abstractmethod
    def compile(self, *files: str) -> dict[str, Artifact]:
        """Compile the given files and return the artifacts by contract name."""


def _run(path: str, args: Sequence[str], stdin: Optional[str] = None) -> str:
    try:
        proc = subprocess.run(
            [path, *args],
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise RuntimeError(f"failed to compile: {exc}") from exc
    if proc.returncode != 0:
        raise RuntimeError(f"failed to compile: {proc.stderr}")
    return proc.stdout


def _lookup(obj: dict[str, Any], key: str, default: Any = None) -> Any:
    if key in obj:
        return obj[key]
    lowered = key.lower()
    for name, value in obj.items():
        if name.lower() == lowered:
            return value
    return default


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), sort_keys=True)


class Solidity(Compiler):
    """The solc compiler found at ``path``."""

    def __init__(self, path: str):
        self.path = path

    def compile_code(self, code: str) -> dict[str, Artifact]:
        """Compile source code passed on standard input."""
        if not code:
            raise ValueError("code is empty")
        return self._compile(code, ())

    def compile(self, *files: str) -> dict[str, Artifact]:
        if not files:
            raise ValueError("no input files")
        return self._compile(None, files)

    def _compile(self, code: Optional[str], files: Sequence[str]) -> dict[str, Artifact]:
        args = ["--combined-json", "bin,bin-runtime,abi"]
        if code:
            args.append("-")
        args.extend(files)

        output = json.loads(_run(self.path, args, code))
        if not isinstance(output, dict):
            raise ValueError("unexpected compiler output")
        contracts = _lookup(output, "contracts") or {}
        artifacts = {}
        for name, entry in contracts.items():
            artifacts[name] = Artifact(
                abi=_as_text(_lookup(entry, "abi")),
                bin=_as_text(_lookup(entry, "bin")),
                bin_runtime=_as_text(entry.get("bin-runtime")),
            )
        return artifacts


class Vyper(Compiler):
    """The vyper compiler found at ``path``."""

    def __init__(self, path: str):
        self.path = path

    def compile(self, *files: str) -> dict[str, Artifact]:
        output = json.loads(_run(self.path, ["-f", "combined_json", *files]))
        if not isinstance(output, dict):
            raise ValueError("unexpected compiler output")
        artifacts = {}
        for name, contract in output.items():
            if name == "version":
                continue
            if not isinstance(contract, dict):
                raise ValueError(f"unexpected output for contract {name}")
            bytecode = contract.get("bytecode")
            runtime = contract.get("bytecode_runtime")
            if not isinstance(bytecode, str) or not isinstance(runtime, str):
                raise ValueError(f"missing bytecode for contract {name}")
            artifacts[name] = Artifact(
                abi=json.dumps(contract.get("abi"), separators=(",", ":"), sort_keys=True),
                bin=bytecode,
                bin_runtime=runtime,
            )
        return artifacts


_COMPILERS: dict[str, Callable[[str], Compiler]] = {
    "solidity": Solidity,
    "vyper": Vyper,
}


def new_compiler(name: str, path: str) -> Compiler:
    """Create the compiler called ``name`` ("solidity" or "vyper") at ``path``."""
    factory = _COMPILERS.get(name)
    if factory is None:
        raise ValueError(f"unknown compiler '{name}'")
    return factory(path)


def download_solidity(version: str, dst: Union[str, Path], rename_dst: bool) -> None:
    """Download the static solc release ``version`` into the directory ``dst``.

    The binary is named ``solidity``, or ``solidity-<version>`` when
    ``rename_dst`` is true.
    """
    url = SOLC_RELEASE_URL.format(version=version)
    dst = Path(dst)
    if dst.exists():
        if not dst.is_dir():
            raise FileExistsError("dst is a file")
    else:
        try:
            dst.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OSError(f"cannot create dst path: {exc}") from exc

    name = "solidity"
    if rename_dst:
        name += "-" + version

    with tempfile.TemporaryDirectory(prefix="solc-") as tmp:
        path = Path(tmp) / name
        with urllib.request.urlopen(url) as reply, open(path, "wb") as out:
            shutil.copyfileobj(reply, out)
        path.chmod(0o755)
        shutil.move(str(path), str(dst / name))