"""
PipelineExecutor - High-level analysis orchestrator.

Reads every input file, runs the four-pion analysis on it and writes one
ROOT output file per run holding the candidate tables and all histograms.

Output layout under the run directory:
    <output_filename>     - TTrees signalData, bkgroundData, MCgen,
                            SignalMCreco and one directory per registry
    logs/selection_stats.json
    plots/                - PNG summaries of the key spectra
"""

import json
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from typing import Optional

import uproot
from tqdm import tqdm

from domain.config import AnalysisConfig
from pipeline.analysis import RhoTo4PiAnalysis
from services.analysis.statistics_plotter import StatisticsPlotter
from services.parsing import schemas
from services.parsing.event_reader import EventReader


class PipelineExecutor:
    """
    High-level pipeline executor.

    Responsible for:
    1. Running one RhoTo4PiAnalysis per input file, in parallel when
       configured
    2. Merging the per-file results
    3. Writing the ROOT output, the statistics JSON and the plots
    """

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        tree_names = [config.input.tree_name]
        tree_names += [name for name in schemas.DEFAULT_TREE_NAMES if name != config.input.tree_name]
        self.reader = EventReader(tree_names=tree_names, step_size=config.input.step_size)
        self.failed_files: list[str] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, run_dir: str) -> RhoTo4PiAnalysis:
        """
        Analyse all input files and write the outputs into `run_dir`.

        Returns:
            The merged analysis holding histograms, records and statistics
        """
        files = list(self.config.input.files)
        self.logger.info(f"Analysing {len(files)} input files with {self.config.input.threads} threads")

        result = self.process_files(files)
        for stats in result.statistics.values():
            stats.finish()

        os.makedirs(run_dir, exist_ok=True)
        output_path = self.write_output(result, run_dir)
        self.save_stats(result, run_dir)
        if self.config.make_plots:
            self.generate_plots(result, run_dir)

        self._log_results(result, output_path)
        return result

    def process_files(self, files: list[str]) -> RhoTo4PiAnalysis:
        """Run the analysis over `files` and merge the per-file results."""
        merged = RhoTo4PiAnalysis(self.config)
        self.failed_files = []
        if not files:
            self.logger.warning("No input files configured")
            return merged

        threads = min(self.config.input.threads, len(files))
        with ThreadPoolExecutor(max_workers=threads) as executor:
            future_to_file = {
                executor.submit(self.process_file, file_path): file_path
                for file_path in files
            }
            with self._create_progress_bar(len(files)) as pbar:
                for future in as_completed(future_to_file):
                    file_path = future_to_file[future]
                    analysis = future.result()
                    if analysis is None:
                        self.failed_files.append(file_path)
                    else:
                        merged.merge(analysis)
                    if pbar is not None:
                        pbar.update(1)
                        pbar.set_postfix({"failed": len(self.failed_files)})

        if self.failed_files:
            self.logger.warning(f"{len(self.failed_files)} files could not be read")
        return merged

    def process_file(self, file_path: str) -> Optional[RhoTo4PiAnalysis]:
        """
        Analyse one file with a fresh analysis instance.

        Returns:
            The filled analysis, or None if the file could not be read
        """
        start = time.time()
        analysis = RhoTo4PiAnalysis(self.config)

        if self._needs_events():
            events = self.reader.read_file(file_path)
            if events is None:
                return None
            for event in events:
                analysis.process(event)

        if self.config.do_fast:
            arrays = self.reader.read_arrays(file_path)
            if arrays is None:
                return None
            analysis.process_fast(arrays)

        self.logger.debug(f"Processed {file_path} in {time.time() - start:.2f}s")
        return analysis

    def write_output(self, analysis: RhoTo4PiAnalysis, run_dir: str) -> str:
        """Write candidate tables and histograms into one ROOT file."""
        output_path = os.path.join(run_dir, self.config.output_filename)
        with uproot.recreate(output_path) as root_file:
            for sink in analysis.sinks:
                sink.write_to(root_file)
            for registry in self._enabled_registries(analysis):
                registry.write(root_file)
        self.logger.info(f"Saved output to: {output_path}")
        return output_path

    def save_stats(self, analysis: RhoTo4PiAnalysis, run_dir: str) -> str:
        """Save selection statistics as JSON under <run_dir>/logs."""
        stats = {
            "run_name": self.config.run_name,
            "input_files": len(self.config.input.files),
            "failed_files": self.failed_files,
            "selection": {
                key: value.to_dict()
                for key, value in analysis.statistics.items()
            },
        }

        logs_dir = os.path.join(run_dir, "logs")
        os.makedirs(logs_dir, exist_ok=True)
        stats_path = os.path.join(logs_dir, "selection_stats.json")

        with open(stats_path, "w") as f:
            json.dump(stats, f, indent=2, default=str)

        self.logger.info(f"Saved selection stats to: {stats_path}")
        return stats_path

    def generate_plots(self, analysis: RhoTo4PiAnalysis, run_dir: str) -> list:
        plotter = StatisticsPlotter(os.path.join(run_dir, "plots"))
        created_plots = plotter.create_all_plots(
            self._enabled_registries(analysis),
            {key: value.to_dict() for key, value in analysis.statistics.items()},
        )
        if created_plots:
            self.logger.info(f"Created {len(created_plots)} plots:")
            for p in created_plots:
                self.logger.info(f"  - {p}")
        else:
            self.logger.info("No plots generated (insufficient data)")
        return created_plots

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _needs_events(self) -> bool:
        config = self.config
        return config.do_data or config.do_mc_reco or config.do_mc_gen or config.do_tof_qa

    @staticmethod
    def _enabled_registries(analysis: RhoTo4PiAnalysis) -> list:
        return [registry for registry in analysis.registries if len(registry) > 0]

    def _create_progress_bar(self, total: int):
        if self.config.input.show_progress_bar:
            return tqdm(
                total=total,
                desc="Analysing files",
                unit="file",
                dynamic_ncols=True,
                mininterval=1
            )
        return nullcontext()

    def _log_results(self, analysis: RhoTo4PiAnalysis, output_path: str):
        self.logger.info("=" * 60)
        self.logger.info("ANALYSIS SUMMARY")
        self.logger.info("=" * 60)
        for key, stats in analysis.statistics.items():
            if stats.events_seen == 0 and stats.generated_events == 0:
                continue
            self.logger.info(
                f"{key}: {stats.events_seen} events, {stats.signal} signal, "
                f"{stats.background} background ({stats.acceptance:.2f}% emitted)"
            )
        self.logger.info(f"Output: {output_path}")
        self.logger.info("=" * 60)
