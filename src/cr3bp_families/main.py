"""
Computes the six libration point orbit families of the Earth-Moon system.

Each (libration point, orbit type) pair is an independent continuation job;
the jobs run in parallel, one worker each, and every job writes its own pair
of files once its family is complete.
"""

import logging
import multiprocessing
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from cr3bp_families.config import OUTPUT_DIR
from cr3bp_families.core.system import EARTH_MOON
from cr3bp_families.continuation.engine import ContinuationEngine, ContinuationSettings
from cr3bp_families.dynamics.propagator import propagate_full_period
from cr3bp_families.logging_config import setup_logging, setup_worker_logging, start_log_listener
from cr3bp_families.orbits.base import OrbitType
from cr3bp_families.orbits.corrector import OrbitCorrector
from cr3bp_families.orbits.initial_guess import InitialGuessProvider
from cr3bp_families.orbits.stability import is_still_valid_family_member
from cr3bp_families.utils.io import write_family

logger = logging.getLogger(__name__)

ALL_JOBS = (
    (1, OrbitType.HORIZONTAL),
    (2, OrbitType.HORIZONTAL),
    (1, OrbitType.VERTICAL),
    (2, OrbitType.VERTICAL),
    (1, OrbitType.HALO),
    (2, OrbitType.HALO),
)


@dataclass(frozen=True)
class JobSummary:
    """Outcome of one continuation job."""

    libration_point: int
    orbit_type: OrbitType
    members: int = 0
    termination: str = None
    files: tuple = ()
    error: str = None

    @property
    def succeeded(self):
        return self.error is None


def run_job(libration_point, orbit_type, output_dir, settings=None, system=None):
    """
    Trace one family and write its two files.

    Parameters
    ----------
    libration_point : int
        Libration point index (1 or 2)
    orbit_type : OrbitType or str
        Family to trace
    output_dir : str or Path
        Directory receiving the files
    settings : ContinuationSettings, optional
    system : PhysicalSystemConfig, optional
        Defaults to the Earth-Moon system

    Returns
    -------
    JobSummary
    """
    settings = settings or ContinuationSettings()
    system = system or EARTH_MOON

    engine = ContinuationEngine(
        libration_point, orbit_type, system,
        guess_provider=InitialGuessProvider(system.mass_parameter),
        corrector=OrbitCorrector(),
        propagator=propagate_full_period,
        classifier=is_still_valid_family_member,
        settings=settings,
    )
    result = engine.run()
    files = write_family(result.family, libration_point, engine.orbit_type, output_dir)

    return JobSummary(
        libration_point=libration_point,
        orbit_type=engine.orbit_type,
        members=len(result.family),
        termination=result.termination.value,
        files=tuple(str(f) for f in files),
    )


def run_all_jobs(output_dir=OUTPUT_DIR, settings=None, system=None, jobs=ALL_JOBS,
                 executor_factory=ProcessPoolExecutor):
    """
    Run continuation jobs in parallel, one worker per job.

    A job that raises is logged and reported as failed; the other jobs are
    not affected.

    Returns
    -------
    list of JobSummary
        One summary per job, in the order of `jobs`
    """
    jobs = list(jobs)
    summaries = {}
    with executor_factory(max_workers=max(len(jobs), 1)) as executor:
        futures = {
            executor.submit(run_job, L_i, orbit_type, output_dir, settings, system): (L_i, orbit_type)
            for L_i, orbit_type in jobs
        }
        for future in as_completed(futures):
            L_i, orbit_type = futures[future]
            try:
                summary = future.result()
            except Exception as e:
                logger.exception("L%s %s: job failed", L_i, orbit_type)
                summary = JobSummary(libration_point=L_i, orbit_type=orbit_type,
                                     error=f"{type(e).__name__}: {e}")
            else:
                logger.info("L%s %s: %d members (%s)", L_i, orbit_type, summary.members, summary.termination)
            summaries[(L_i, orbit_type)] = summary

    return [summaries[job] for job in jobs]


def main():
    setup_logging()
    output_dir = Path(OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)

    # Workers log through the queue; only this process writes the log files
    log_queue = multiprocessing.Queue(-1)
    listener = start_log_listener(log_queue)
    try:
        summaries = run_all_jobs(output_dir, executor_factory=partial(
            ProcessPoolExecutor, initializer=setup_worker_logging, initargs=(log_queue,)))
    finally:
        listener.stop()

    failed = [s for s in summaries if not s.succeeded]
    for summary in failed:
        logger.error("L%s %s: %s", summary.libration_point, summary.orbit_type, summary.error)
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
