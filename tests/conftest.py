"""
Shared fixtures for appbin tests.

The fake toolchain is a small Python script installed under the three
arm-none-eabi tool names. It mimics just enough of gcc, objcopy and size to
drive the pipeline end to end, and appends every invocation to calls.log so
tests can assert stage ordering.
"""

import logging
import stat
import sys
from pathlib import Path

import pytest

FAKE_TOOL = r'''
import os
import sys
from pathlib import Path

ELF_HEADER = b"\x7fELF" + b"\x00" * 60

tool = Path(sys.argv[0]).name.replace("arm-none-eabi-", "")
args = sys.argv[1:]

with open(os.environ["FAKE_TOOLCHAIN_LOG"], "a") as log:
    log.write(tool + " " + " ".join(args) + "\n")

fail = os.environ.get("FAKE_TOOLCHAIN_FAIL", "")
if fail == tool or (tool == "gcc" and fail == ("compile" if "-c" in args else "link")):
    if os.environ.get("FAKE_TOOLCHAIN_SIGNAL"):
        os.kill(os.getpid(), int(os.environ["FAKE_TOOLCHAIN_SIGNAL"]))
    sys.stderr.write("fake " + tool + ": forced failure\n")
    sys.exit(int(os.environ.get("FAKE_TOOLCHAIN_EXIT", "1")))


def value_after(flag):
    return args[args.index(flag) + 1]


if tool == "gcc" and "-c" in args:
    for include in [a[2:] for a in args if a.startswith("-I")]:
        if not Path(include).is_dir():
            sys.stderr.write("fatal error: include dir " + include + " not found from " + os.getcwd() + "\n")
            sys.exit(1)
    source = Path(value_after("-c"))
    text = source.read_bytes()
    if b"#error" in text:
        sys.stderr.write(str(source) + ":1:2: error: #error\n")
        sys.exit(1)
    Path(value_after("-o")).write_bytes(b"OBJ" + text)
elif tool == "gcc":
    script = next(a[2:] for a in args if a.startswith("-T"))
    map_file = next(a[len("-Wl,-Map="):] for a in args if a.startswith("-Wl,-Map="))
    output = value_after("-o")
    inputs = [a for a in args[args.index(output) + 1:]]
    for path in [script] + inputs:
        if not Path(path).exists():
            sys.stderr.write("ld: cannot find " + path + "\n")
            sys.exit(1)
    payload = b"".join(Path(p).read_bytes() for p in inputs)
    Path(output).write_bytes(ELF_HEADER + payload + b"\x00SYMTAB" * 8)
    Path(map_file).write_text("Memory Configuration\n" + "\n".join(inputs) + "\n")
elif tool == "objcopy":
    elf, out = args[-2], args[-1]
    data = Path(elf).read_bytes()
    body = data[len(ELF_HEADER):].split(b"\x00SYMTAB")[0]
    Path(out).write_bytes(body)
elif tool == "size":
    elf = Path(args[-1])
    print(elf.name + "  :")
    print("section   size   addr")
    print(".text     %d   0" % (elf.stat().st_size - len(ELF_HEADER)))
    print(".data     4      536870912")
    print(".bss      16     536870916")
    print("Total     %d" % (elf.stat().st_size + 20))
'''


class FakeToolchain:
    """Handle on an installed fake toolchain."""

    def __init__(self, bin_dir: Path, log_path: Path):
        self.bin_dir = bin_dir
        self.log_path = log_path

    def calls(self):
        """Tool names in invocation order (gcc split into compile/link)."""
        if not self.log_path.exists():
            return []
        names = []
        for line in self.log_path.read_text().splitlines():
            tool, _, rest = line.partition(" ")
            if tool == "gcc":
                tool = "compile" if " -c " in f" {rest} " else "link"
            names.append(tool)
        return names


@pytest.fixture
def fake_toolchain(tmp_path, monkeypatch):
    """Install fake arm-none-eabi-{gcc,objcopy,size} into a private bin dir."""
    if sys.platform == "win32":
        pytest.skip("fake toolchain relies on shebang scripts")

    bin_dir = tmp_path / "toolchain" / "bin"
    bin_dir.mkdir(parents=True)

    for tool in ("gcc", "objcopy", "size"):
        script = bin_dir / f"arm-none-eabi-{tool}"
        script.write_text(f"#!{sys.executable}\n{FAKE_TOOL}")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log_path = tmp_path / "calls.log"
    monkeypatch.setenv("FAKE_TOOLCHAIN_LOG", str(log_path))
    monkeypatch.delenv("FAKE_TOOLCHAIN_FAIL", raising=False)
    monkeypatch.delenv("FAKE_TOOLCHAIN_EXIT", raising=False)
    monkeypatch.delenv("FAKE_TOOLCHAIN_SIGNAL", raising=False)
    return FakeToolchain(bin_dir, log_path)


@pytest.fixture
def app_project(tmp_path):
    """Create the classic layout: firmware/c-userspace/c-output + firmware/kernel/appbins."""
    firmware = tmp_path / "firmware"
    project = firmware / "c-userspace" / "c-output"
    appbins = firmware / "kernel" / "appbins"
    project.mkdir(parents=True)
    appbins.mkdir(parents=True)

    (project / "test.c").write_text("void entry(void) { for (;;) {} }\n")
    (project / "link.x").write_text("MEMORY { FLASH : ORIGIN = 0x00000000, LENGTH = 64K }\n")
    (project / "libc_userspace.a").write_bytes(b"!<arch>\nLIBC")
    return project


@pytest.fixture(autouse=True)
def reset_cli_logging():
    """Drop handlers installed by setup_logging so they never outlive capsys."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_appbin", False):
            root.removeHandler(handler)
