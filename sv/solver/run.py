# -*- coding: utf-8 -*-
# sv/solver/run.py

"""
Project: sv
Date: 10/18/2026

Purpose
-------
Launcher for the simulation executables (svpre, svsolver, svpost), serial or under MPI.
Executes the program in the job directory, streams stdout/stderr and returns
(returncode, stdout, stderr) with optional timeout and early-stop control.

Main Tasks
----------
    1. Resolve the executable (preferences, <NAME>_BIN, PATH).
    2. Compose the command for serial or MPI execution (`mpiexec -n N svsolver ...`).
    3. Run it, capture output, enforce timeout/early-stop and report the return code.

Notes
-----
- Return code conventions: 124 timeout, 125 early stop, 127 executable or MPI launcher
  not found, 2 job directory or process start failure.
- Only svsolver runs under MPI; svpre and svpost are always serial.
- On POSIX the child starts a new process group so MPI ranks are terminated together.
"""

import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
import time
from collections import deque
from typing import List, Optional, Sequence, Tuple

from .monitor import FAILURE_PATTERNS, count_hits, tail_lines
from .mpi import build_mpi_cmd
from .preferences import Preferences

logger = logging.getLogger(__name__)

RC_START_FAILED = 2
RC_TIMEOUT = 124
RC_EARLY_STOP = 125
RC_NOT_FOUND = 127

SOLVER_PROGRAMS = ("svpre", "svsolver", "svpost")
_MPI_PROGRAMS = ("svsolver",)


def _reader_thread(stream, sink_full: List[str], sink_tail: deque,
                   stop_evt: threading.Event, patterns: Tuple[str, ...], max_bad: int,
                   bad_counter: List[int]) -> None:
    """
    Mirror a text stream into `sink_full`/`sink_tail` and set `stop_evt` once
    `max_bad` lines matched `patterns`. `bad_counter` is a one-item list shared
    with the caller.
    """
    try:
        for line in iter(stream.readline, ""):
            sink_full.append(line)
            sink_tail.append(line)
            bad_counter[0] += count_hits(line, patterns)
            if max_bad > 0 and bad_counter[0] >= max_bad:
                stop_evt.set()
                break
            if stop_evt.is_set():
                break
    finally:
        stream.close()


def _terminate(proc: subprocess.Popen) -> None:
    try:
        if sys.platform != "win32":
            os.killpg(os.getpgid(proc.pid), signal.SIGTERM)
        else:
            proc.kill()
    except (OSError, ProcessLookupError) as e:
        logger.debug("[Runner] Terminate failed: %s", e)


def run_program(cmd: Sequence[str],
                workdir: str,
                timeout_s: Optional[float] = None,
                env: Optional[dict] = None,
                *,
                tail_n: int = 200,
                early_stop_patterns: Tuple[str, ...] = FAILURE_PATTERNS,
                early_stop_max: int = 3) -> Tuple[int, str, str]:
    """
    Run `cmd` in `workdir`, stream stdout/stderr and return (rc, stdout, stderr).

    `early_stop_max=0` disables pattern-based termination.
    """
    if not os.path.isdir(workdir):
        return (RC_START_FAILED, "", "Job directory not found: {}".format(workdir))

    pats = tuple(p.lower() for p in early_stop_patterns)
    max_bad = int(early_stop_max)
    stop_evt = threading.Event()

    out_full = []  # type: List[str]
    err_full = []  # type: List[str]
    out_tail = deque(maxlen=int(tail_n))
    err_tail = deque(maxlen=int(tail_n))
    out_bad = [0]
    err_bad = [0]

    logger.info("[Runner] %s (cwd=%s)", " ".join(cmd), workdir)
    try:
        preexec = os.setsid if sys.platform != "win32" else None
        proc = subprocess.Popen(
            list(cmd),
            cwd=workdir,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            universal_newlines=True,
            bufsize=1,
            env=env,
            preexec_fn=preexec,
        )
    except OSError as e:
        return (RC_START_FAILED, "", "Failed to start process: {}".format(e))

    t_out = threading.Thread(target=_reader_thread, daemon=True,
                             args=(proc.stdout, out_full, out_tail, stop_evt, pats, max_bad, out_bad))
    t_err = threading.Thread(target=_reader_thread, daemon=True,
                             args=(proc.stderr, err_full, err_tail, stop_evt, pats, max_bad, err_bad))
    t_out.start()
    t_err.start()

    rc = None
    timed_out = False
    start = time.time()
    try:
        while True:
            rc = proc.poll()
            if rc is not None or stop_evt.is_set():
                break
            if timeout_s is not None and (time.time() - start) > float(timeout_s):
                timed_out = True
                break
            time.sleep(0.05)
    except KeyboardInterrupt:
        stop_evt.set()
    finally:
        if proc.poll() is None:
            _terminate(proc)
        t_out.join(timeout=1.0)
        t_err.join(timeout=1.0)
        try:
            proc.wait(timeout=1.0)
        except subprocess.TimeoutExpired:
            proc.kill()

    stdout = "".join(out_full)
    stderr = "".join(err_full)
    if rc is None and timed_out:
        rc = RC_TIMEOUT
        stderr += "\n[runner] Timed out after {} s.\n".format(timeout_s)
    elif rc is None and stop_evt.is_set():
        rc = RC_EARLY_STOP
        stderr += ("\n[runner] Early-stop triggered after {} pattern hits.\n"
                   .format(max(out_bad[0], err_bad[0])))
    if rc is None:
        rc = proc.returncode if proc.returncode is not None else 0

    if rc != 0:
        logger.warning("[Runner] '%s' exited with %d. stderr tail:\n%s",
                       os.path.basename(cmd[0]), rc, tail_lines(err_tail, n_tail=20))
    return (int(rc), stdout, stderr)


def run_solver(program: str,
               args: Sequence[str],
               workdir: str,
               nprocs: int = 1,
               preferences: Optional[Preferences] = None,
               timeout_s: Optional[float] = None,
               env: Optional[dict] = None,
               **kwargs) -> Tuple[int, str, str]:
    """
    Run svpre, svsolver or svpost in `workdir`.

    Parameters
    ----------
    program : str
        One of "svpre", "svsolver", "svpost".
    args : Sequence[str]
        Program arguments (e.g. ["cylinder.svpre"] or ["solver.inp"]).
    nprocs : int
        MPI ranks for svsolver; requires `use_mpi` in the preferences when > 1.
    preferences : Preferences, optional
        Source of executable and launcher paths; a fresh store is loaded when omitted.

    Returns
    -------
    (rc, stdout, stderr)
    """
    if program not in SOLVER_PROGRAMS:
        return (RC_NOT_FOUND, "", "Unknown solver program '{}'. Valid names are: {}."
                .format(program, ", ".join(SOLVER_PROGRAMS)))
    prefs = preferences if preferences is not None else Preferences()

    exe = prefs.get_executable(program)
    if not exe or not shutil.which(exe):
        return (RC_NOT_FOUND, "", "Executable not found: {}".format(exe or program))

    cmd = [exe] + [str(a) for a in args]
    n = int(nprocs or 1)
    if program in _MPI_PROGRAMS and n > 1:
        if not prefs.use_mpi():
            logger.warning("[Runner] MPI is disabled in the preferences; running %s serially.",
                           program)
        else:
            prefix = build_mpi_cmd(prefs.get_mpiexec_path(), n)
            if not prefix:
                return (RC_NOT_FOUND, "", "MPI launcher not found (tried: {}, mpiexec, mpirun)"
                        .format(prefs.get_mpiexec_path()))
            cmd = prefix + cmd
    return run_program(cmd, workdir, timeout_s=timeout_s, env=env, **kwargs)
