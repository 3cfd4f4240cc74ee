"""Bulk voluntary exit generation across keystores and validator indices."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

from .signer import EthdoSigner
from .types import ExitTask, GenerationRunState
from .worker import report_progress, worker
from ..beacon.client import BeaconClient
from ..beacon.config import BeaconConfig, fetch_beacon_config
from ..config import GeneratorConfig
from ..keystore import read_keystore_pubkey, unlock_keystore
from ..log import ContextAdapter, get_logger
from ..metrics import generation_queue_size, keystores_processed
from ..utils import strip_0x

logger = logging.getLogger(__name__)


class VoluntaryExitGenerator:
    """Signs one exit per (keystore, validator index) with a pool of workers.

    For every keystore, ``iterations`` exits are produced for the indices
    right after the resolved start index. Output files are named
    ``<index>-<pubkey>.json`` so a run can be repeated with any worker count
    and yields the same set of files.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        client: BeaconClient,
        signer: Optional[EthdoSigner] = None,
        log: Optional[logging.Logger | logging.LoggerAdapter] = None,
    ):
        self.config = config
        self.client = client
        self.signer = signer or EthdoSigner(config.signer_binary, config.passphrase)
        self.log = get_logger(__name__, log)
        self.run_state = GenerationRunState(iterations=config.iterations)

        self.log.info("Creating new Generator")
        self.log.info(f"Output dir: {config.output_dir}")
        self.log.info(f"Withdrawal creds: {config.withdrawal_credentials}")
        self.log.info(f"Beacon URL: {config.beacon_url}")
        self.log.info(f"Iterations: {config.iterations}")
        if config.explicit_start_index:
            self.log.info(f"Start index: {config.index_start + config.index_offset}")
        self.log.info(f"Number of workers: {config.workers}")

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_dir)

    def set_total_keystores(self, total: int) -> None:
        self.run_state.total_keystores = max(total, 0)
        self.log.info(f"Total keystores to process: {self.run_state.total_keystores}")

    async def get_validator_start_index(self) -> int:
        """Index after which new exits start.

        An explicit start index wins; otherwise the highest index in the head
        state is used. The offset is added in both cases.
        """
        if self.config.explicit_start_index:
            return self.config.index_start + self.config.index_offset

        latest = await self.client.get_latest_validator_index("head")
        return latest + self.config.index_offset

    async def fetch_beacon_config(self) -> BeaconConfig:
        """Live genesis/fork/domain values, with the operator's override applied."""
        beacon_config = await fetch_beacon_config(self.client)
        if self.config.domain_bls_to_execution_change:
            beacon_config.bls_to_execution_change_domain_type = self.config.domain_bls_to_execution_change
        beacon_config.validate()
        return beacon_config

    async def check_passphrase(self, keystores: Sequence[Path]) -> None:
        """Decrypt every keystore once so a wrong passphrase fails before signing."""
        for keystore_path in keystores:
            await asyncio.to_thread(unlock_keystore, keystore_path, self.config.passphrase)
        self.log.info(f"Passphrase unlocks all {len(keystores)} keystores")

    def build_tasks(self, keystore_path: Path, pubkey: str, start_index: int) -> asyncio.Queue:
        """Queue holding every task for one keystore, filled before any worker runs."""
        tasks: asyncio.Queue = asyncio.Queue(maxsize=self.config.iterations)
        for i in range(1, self.config.iterations + 1):
            tasks.put_nowait(ExitTask(
                validator_index=start_index + i,
                pubkey=pubkey,
                keystore_path=keystore_path,
            ))
        generation_queue_size.set(tasks.qsize())
        return tasks

    async def generate_exits(self, keystore_path: str | Path, beacon_config: BeaconConfig, start_index: int) -> None:
        """Generate ``iterations`` exits for one keystore.

        Raises:
            ParseError: If the keystore has no pubkey
            GenerationTaskError: The first error any worker reported
        """
        keystore_num = self.run_state.start_keystore()
        log = self.log.bind(keystore=keystore_num)

        log.info(f"Processing keystore {keystore_num}/{self.run_state.total_keystores}: {keystore_path}")
        log.info(f"Start index: {start_index}")

        abs_keystore_path = Path(keystore_path).resolve()
        pubkey = read_keystore_pubkey(abs_keystore_path)
        log.info(f"Pubkey: {pubkey}")

        tasks = self.build_tasks(abs_keystore_path, "0x" + strip_0x(pubkey), start_index)
        await self.process_exit_tasks(tasks, beacon_config, log)

        keystores_processed.inc()
        log.info(f"Exit generation completed for keystore {keystore_num}/{self.run_state.total_keystores}")

    async def process_exit_tasks(self, tasks: asyncio.Queue, beacon_config: BeaconConfig, log: ContextAdapter) -> None:
        """Run the worker pool over ``tasks`` and wait for every worker."""
        num_workers = self.config.workers
        errors: asyncio.Queue = asyncio.Queue(maxsize=num_workers)

        reporter = asyncio.create_task(
            report_progress(self.run_state, self.config.progress_interval, log)
        )
        try:
            await asyncio.gather(*(
                worker(
                    worker_id=i,
                    tasks=tasks,
                    errors=errors,
                    run_state=self.run_state,
                    signer=self.signer,
                    beacon_config=beacon_config,
                    withdrawal_credentials=self.config.withdrawal_credentials,
                    output_dir=self.output_dir,
                    log=log,
                )
                for i in range(num_workers)
            ))
        finally:
            reporter.cancel()
            try:
                await reporter
            except asyncio.CancelledError:
                pass

        if not errors.empty():
            first = errors.get_nowait()
            log.error(f"Worker error encountered: {first}")
            raise first

    async def run(self, keystores: Sequence[str | Path]) -> int:
        """Generate exits for every keystore, in order.

        Returns:
            Number of exits written
        """
        keystores = [Path(k) for k in keystores]
        self.set_total_keystores(len(keystores))

        if self.config.check_passphrase:
            await self.check_passphrase(keystores)

        start_index = await self.get_validator_start_index()
        beacon_config = await self.fetch_beacon_config()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.log.info("Beacon configuration fetched successfully")
        self.log.info(f"Latest validator index on chain: {start_index}")
        self.log.info(f"Using {self.config.workers} workers for parallel processing")
        self.log.info(f"Processing {len(keystores)} keystores")

        for keystore_path in keystores:
            await self.generate_exits(keystore_path, beacon_config, start_index)

        total = len(keystores) * self.config.iterations
        self.log.info(f"Processing complete. Processed {self.config.iterations} iterations for each keystore.")
        return total
