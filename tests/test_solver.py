# -*- coding: utf-8 -*-
# tests/test_solver.py

import json
import os
import sys

import pytest

from sv.errors import PreferencesError
from sv.solver import Preferences, build_mpi_cmd, run_program, run_solver
from sv.solver import mpi
from sv.solver.monitor import early_stop, tail_lines
from sv.solver.preferences import NODE
from sv.solver.run import RC_EARLY_STOP, RC_NOT_FOUND, RC_START_FAILED, RC_TIMEOUT

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="shell scripts")


def _script(directory, name, body):
    path = directory / name
    path.write_text("#!/bin/sh\n" + body + "\n")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def bin_dir(tmp_path, monkeypatch):
    """Directory holding fake executables; it is the only entry on PATH."""
    d = tmp_path / "bin"
    d.mkdir()
    monkeypatch.setenv("PATH", str(d))
    for name in ("SVPRE_BIN", "SVSOLVER_BIN", "SVPOST_BIN"):
        monkeypatch.delenv(name, raising=False)
    return d


@pytest.fixture
def fake_mpiexec(bin_dir):
    return _script(bin_dir, "mpiexec",
                   'if [ "$1" = "--version" ]; then echo "HYDRA build details:"; '
                   'echo "Version: 4.1 (MPICH)"; exit 0; fi\n'
                   'shift 2\nexec "$@"')


# --------------------
# MPI
# --------------------
def test_implementation_from_banner():
    assert mpi.implementation_from_banner("mpirun (Open MPI) 4.1.2") == mpi.OPENMPI
    assert mpi.implementation_from_banner("HYDRA build details:") == mpi.MPICH
    assert mpi.implementation_from_banner("Intel(R) MPI Library") == mpi.UNKNOWN
    assert mpi.implementation_from_banner("") == mpi.UNKNOWN


def test_build_mpi_cmd_serial_and_missing(bin_dir):
    assert build_mpi_cmd("mpiexec", 1) == []
    assert build_mpi_cmd("mpiexec", "x") == []
    assert build_mpi_cmd("mpiexec", 4) == []


@posix_only
def test_build_mpi_cmd_with_launcher(fake_mpiexec):
    assert build_mpi_cmd("", 4) == [fake_mpiexec, "-n", "4"]
    assert build_mpi_cmd("no-such-mpirun", 2) == [fake_mpiexec, "-n", "2"]
    assert mpi.find_mpiexec(mpi.UNKNOWN_BINARY) == fake_mpiexec
    assert mpi.detect_implementation(fake_mpiexec) == mpi.MPICH
    assert mpi.detect_implementation(mpi.UNKNOWN_BINARY) == mpi.UNKNOWN


# --------------------
# Preferences
# --------------------
def test_preferences_defaults_without_launcher(tmp_path, bin_dir):
    prefs = Preferences(str(tmp_path / "prefs.json"))
    assert prefs.use_mpi() is True
    assert prefs.get_mpiexec_path() == mpi.UNKNOWN_BINARY
    assert prefs.get_mpi_implementation() == mpi.UNKNOWN
    assert prefs.get_executable("svsolver") == mpi.UNKNOWN_BINARY
    assert not (tmp_path / "prefs.json").exists()


@posix_only
def test_preferences_detect_locations(tmp_path, bin_dir, fake_mpiexec):
    solver = _script(bin_dir, "svsolver", "echo solver")
    prefs = Preferences(str(tmp_path / "prefs.json"))
    assert prefs.get_mpiexec_path() == fake_mpiexec
    assert prefs.get_mpi_implementation() == mpi.MPICH
    assert prefs.get_executable("svsolver") == solver
    assert prefs.get_executable("svpre") == mpi.UNKNOWN_BINARY


def test_preferences_save_and_load(tmp_path, bin_dir):
    store = tmp_path / "prefs.json"
    store.write_text(json.dumps({"other.node": {"a": 1}}))
    prefs = Preferences(str(store), detect=False)
    prefs.set("svpre_path", " /opt/sv/svpre ")
    prefs.set("mpi_implementation", mpi.OPENMPI)
    prefs._values["mpiexec_path"] = "/opt/mpi/mpiexec"
    prefs.save()

    data = json.loads(store.read_text())
    assert data["other.node"] == {"a": 1}
    assert data[NODE]["svpre_path"] == "/opt/sv/svpre"
    assert data[NODE]["mpiexec_path"] == "/opt/mpi/mpiexec"

    back = Preferences(str(store), detect=False)
    assert back.get("svpre_path") == "/opt/sv/svpre"
    assert back.get_mpi_implementation() == mpi.OPENMPI


def test_preferences_keep_launcher_when_mpi_disabled(tmp_path, bin_dir):
    store = tmp_path / "prefs.json"
    store.write_text(json.dumps({NODE: {"mpiexec_path": "/opt/mpi/mpiexec"}}))
    prefs = Preferences(str(store), detect=False)
    prefs.set_use_mpi(False)
    prefs._values["mpiexec_path"] = "/elsewhere/mpiexec"
    prefs.save()
    node = json.loads(store.read_text())[NODE]
    assert node["use_mpi"] is False
    assert node["mpiexec_path"] == "/opt/mpi/mpiexec"


def test_preferences_errors(tmp_path, bin_dir, caplog):
    prefs = Preferences(str(tmp_path / "prefs.json"), detect=False)
    with pytest.raises(PreferencesError, match=r"^get\(\) Unknown preference 'threads'"):
        prefs.get("threads")
    with pytest.raises(PreferencesError, match="Unknown MPI implementation 'LAM'"):
        prefs.set("mpi_implementation", "LAM")
    with pytest.raises(PreferencesError, match="use_mpi argument is not a bool"):
        prefs.set_use_mpi("yes")
    with pytest.raises(PreferencesError, match="Unknown solver executable 'svpost2'"):
        prefs.get_executable("svpost2")

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]")
    with pytest.raises(PreferencesError, match="is not a JSON object"):
        Preferences(str(bad))
    bad.write_text("{")
    with pytest.raises(PreferencesError, match="Unable to read the preferences file"):
        Preferences(str(bad))

    extra = tmp_path / "extra.json"
    extra.write_text(json.dumps({NODE: {"gpu": True}}))
    Preferences(str(extra), detect=False)
    assert "Ignoring unknown key 'gpu'" in caplog.text


# --------------------
# Monitor
# --------------------
def test_monitor_helpers():
    lines = ["step {}\n".format(i) for i in range(10)]
    assert tail_lines(lines, n_tail=2) == "step 8\nstep 9"
    assert not early_stop(lines)
    assert early_stop(["NaN residual", "ok", "nan", "Solver DIVERGED"], max_bad=3)


# --------------------
# Runner
# --------------------
@posix_only
def test_run_program_output_and_return_code(tmp_path):
    script = _script(tmp_path, "job.sh", 'echo "out $1"; echo err >&2; exit 3')
    rc, out, err = run_program([script, "a"], str(tmp_path))
    assert rc == 3
    assert out == "out a\n"
    assert err == "err\n"


@posix_only
def test_run_program_timeout_and_early_stop(tmp_path):
    slow = _script(tmp_path, "slow.sh", "sleep 5")
    rc, _, err = run_program([slow], str(tmp_path), timeout_s=0.3)
    assert rc == RC_TIMEOUT
    assert "Timed out" in err

    bad = _script(tmp_path, "bad.sh", "echo nan; echo NaN; echo diverged; sleep 5")
    rc, out, err = run_program([bad], str(tmp_path), early_stop_max=3)
    assert rc == RC_EARLY_STOP
    assert "Early-stop" in err

    rc, out, _ = run_program([_script(tmp_path, "nan.sh", "echo nan; echo nan; echo nan")],
                             str(tmp_path), early_stop_max=0)
    assert rc == 0
    assert out.count("nan") == 3


def test_run_program_start_failures(tmp_path):
    rc, _, err = run_program(["true"], str(tmp_path / "missing"))
    assert rc == RC_START_FAILED
    assert "Job directory not found" in err
    rc, _, err = run_program([str(tmp_path / "nothing")], str(tmp_path))
    assert rc == RC_START_FAILED


def test_run_solver_not_found(tmp_path, bin_dir):
    prefs = Preferences(str(tmp_path / "prefs.json"))
    rc, _, err = run_solver("svmesh", [], str(tmp_path), preferences=prefs)
    assert rc == RC_NOT_FOUND
    assert "Unknown solver program 'svmesh'" in err
    rc, _, err = run_solver("svpre", ["x.svpre"], str(tmp_path), preferences=prefs)
    assert rc == RC_NOT_FOUND
    assert "Executable not found" in err


@posix_only
def test_run_solver_mpi_and_serial(tmp_path, bin_dir, fake_mpiexec):
    _script(bin_dir, "svsolver", 'echo "ranks $#: $@"')
    _script(bin_dir, "svpre", 'echo "pre $1"')
    prefs = Preferences(str(tmp_path / "prefs.json"))

    rc, out, _ = run_solver("svsolver", ["solver.inp"], str(tmp_path), nprocs=4,
                            preferences=prefs)
    assert rc == 0
    assert out == "ranks 1: solver.inp\n"

    rc, out, _ = run_solver("svpre", ["cyl.svpre"], str(tmp_path), nprocs=4, preferences=prefs)
    assert (rc, out) == (0, "pre cyl.svpre\n")

    prefs.set_use_mpi(False)
    rc, out, _ = run_solver("svsolver", ["solver.inp"], str(tmp_path), nprocs=4,
                            preferences=prefs)
    assert rc == 0


@posix_only
def test_run_solver_missing_launcher(tmp_path, bin_dir):
    _script(bin_dir, "svsolver", "echo solver")
    prefs = Preferences(str(tmp_path / "prefs.json"))
    rc, _, err = run_solver("svsolver", [], str(tmp_path), nprocs=2, preferences=prefs)
    assert rc == RC_NOT_FOUND
    assert "MPI launcher not found" in err
    assert os.path.isdir(str(tmp_path))
