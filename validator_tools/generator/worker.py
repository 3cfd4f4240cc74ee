"""Exit generation workers and the progress reporter."""

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path

from .types import ExitTask, GenerationRunState, PrepFile
from ..beacon.config import BeaconConfig
from ..exceptions import GenerationTaskError, ValidatorToolsError
from ..exits.filename import encode_exit_filename
from ..log import ContextAdapter
from ..metrics import exits_generated, generation_queue_size

logger = logging.getLogger(__name__)


def write_exit_file(path: Path, output: bytes) -> None:
    path.write_bytes(output)
    path.chmod(0o600)


async def process_task(
    task: ExitTask,
    work_dir: Path,
    signer,
    beacon_config: BeaconConfig,
    withdrawal_credentials: str,
    output_dir: Path,
    log: ContextAdapter,
) -> Path:
    """Write the preparation context, sign, and store the result verbatim."""
    log.debug(f"Processing validator index {task.validator_index}")

    prep = PrepFile.for_task(task, beacon_config, withdrawal_credentials)
    await asyncio.to_thread(prep.write, work_dir)
    output = await signer.sign(task.keystore_path, work_dir, log)

    out_file = output_dir / encode_exit_filename(task.validator_index, task.pubkey)
    await asyncio.to_thread(write_exit_file, out_file, output)

    log.debug(f"Completed validator index {task.validator_index}")
    return out_file


async def worker(
    worker_id: int,
    tasks: asyncio.Queue,
    errors: asyncio.Queue,
    run_state: GenerationRunState,
    signer,
    beacon_config: BeaconConfig,
    withdrawal_credentials: str,
    output_dir: Path,
    log: ContextAdapter,
) -> None:
    """Drain ``tasks`` until it is empty or a task fails.

    The queue is filled before any worker starts, so an empty queue means
    there is no more work. On failure the worker reports one error and stops;
    the other workers keep draining. The worker's scratch directory is removed
    however it exits.
    """
    log = log.bind(worker=worker_id)

    try:
        work_dir = Path(tempfile.mkdtemp(prefix=f"ethdo-worker-{worker_id}-"))
    except OSError as e:
        errors.put_nowait(GenerationTaskError(worker_id, e))
        return

    log.debug(f"Worker started with temp dir: {work_dir}")
    try:
        while True:
            try:
                task = tasks.get_nowait()
            except asyncio.QueueEmpty:
                return
            generation_queue_size.set(tasks.qsize())

            try:
                await process_task(
                    task, work_dir, signer, beacon_config,
                    withdrawal_credentials, output_dir, log,
                )
            except (ValidatorToolsError, OSError) as e:
                log.error(f"Failed for validator index {task.validator_index}: {e}")
                errors.put_nowait(GenerationTaskError(worker_id, e, task.validator_index))
                return
            finally:
                tasks.task_done()

            run_state.task_done()
            exits_generated.inc()
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)
        log.debug("Worker stopped")


async def report_progress(run_state: GenerationRunState, interval: float, log: ContextAdapter) -> None:
    """Log a progress line every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        log.info(run_state.progress_line())
