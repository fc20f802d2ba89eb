"""
Integration tests for the executor and the command-line entry point.
"""

import json
import os
from dataclasses import replace

import uproot
import yaml

import main
from domain.config import AnalysisConfig
from pipeline.executor import PipelineExecutor
from utils.paths import create_timestamped_run_dir, expand_input_paths

from conftest import SIGNAL_MOMENTA, SMALL_BINNING
from test_event_reader import write_event_file

BACKGROUND_MOMENTA = [(q, px, py, pz) for q, (_, px, py, pz) in zip((1, 1, 1, -1), SIGNAL_MOMENTA)]


def _config(files, **overrides) -> AnalysisConfig:
    config = AnalysisConfig(binning=SMALL_BINNING, make_plots=False, **overrides)
    config = config.with_input_files(files)
    return replace(config, input=replace(config.input, show_progress_bar=False))


class TestPipelineExecutor:
    """Tests for PipelineExecutor."""

    def test_run_writes_outputs(self, tmp_path):
        """Test a full run writes tables, histograms and statistics."""
        input_path = write_event_file(
            str(tmp_path / "input.root"),
            [SIGNAL_MOMENTA, BACKGROUND_MOMENTA, SIGNAL_MOMENTA[:3]],
        )
        run_dir = str(tmp_path / "run")
        executor = PipelineExecutor(_config([input_path]))
        result = executor.run(run_dir)

        assert result.statistics["data"].signal == 1
        assert result.statistics["data"].background == 1

        with uproot.open(os.path.join(run_dir, "analysis_results.root")) as root_file:
            assert root_file["signalData"].num_entries == 1
            assert root_file["bkgroundData"].num_entries == 1
            assert "fourPionCosThetaPair1" in root_file["signalData"].keys()
            assert "fourPionCosThetaPair1" not in root_file["bkgroundData"].keys()
            assert "histosData/EventCounts" in root_file
            assert "MCgen" not in root_file

        with open(os.path.join(run_dir, "logs", "selection_stats.json")) as f:
            stats = json.load(f)
        assert stats["selection"]["data"]["events_seen"] == 3
        assert stats["selection"]["data"]["rejected_track_count"] == 1
        assert stats["failed_files"] == []

    def test_multiple_files_are_merged(self, tmp_path):
        """Test per-file results from several threads are combined."""
        files = [
            write_event_file(str(tmp_path / f"input_{i}.root"), [SIGNAL_MOMENTA])
            for i in range(3)
        ]
        config = _config(files)
        config = replace(config, input=replace(config.input, threads=3, show_progress_bar=False))
        result = PipelineExecutor(config).process_files(files)

        assert len(result.signal_sink) == 3
        assert result.histos_data.entries("invMass_event_0charge_WTS_PID_Pi_domainA") == 3

    def test_unreadable_file_is_skipped(self, tmp_path):
        """Test a broken input is logged and skipped while the rest is processed."""
        good = write_event_file(str(tmp_path / "good.root"), [SIGNAL_MOMENTA])
        bad = str(tmp_path / "missing.root")
        executor = PipelineExecutor(_config([good, bad]))
        result = executor.process_files([good, bad])

        assert executor.failed_files == [bad]
        assert len(result.signal_sink) == 1

    def test_fast_path_run(self, tmp_path):
        """Test the fast path fills its histograms from the same files."""
        input_path = write_event_file(str(tmp_path / "input.root"), [SIGNAL_MOMENTA, BACKGROUND_MOMENTA])
        executor = PipelineExecutor(_config([input_path], do_data=False, do_fast=True))
        result = executor.process_files([input_path])

        assert result.histos_fast.entries("4PionMassFull") == 1
        assert len(result.signal_sink) == 0

    def test_plots_created(self, tmp_path):
        """Test plots are written when enabled."""
        input_path = write_event_file(str(tmp_path / "input.root"), [SIGNAL_MOMENTA, BACKGROUND_MOMENTA])
        config = AnalysisConfig(binning=SMALL_BINNING, make_plots=True).with_input_files([input_path])
        run_dir = str(tmp_path / "run")
        PipelineExecutor(config).run(run_dir)

        plots = sorted(os.listdir(os.path.join(run_dir, "plots")))
        assert "01_selection_flow.png" in plots
        assert "02_four_pion_spectra_histosData.png" in plots


class TestPaths:
    """Tests for path utilities."""

    def test_timestamped_run_dir(self, tmp_path):
        """Test run directories carry the run name and exist."""
        run_dir = create_timestamped_run_dir(str(tmp_path), "rho4pi")
        assert os.path.isdir(run_dir)
        assert os.path.basename(run_dir).startswith("rho4pi_")

    def test_expand_input_paths(self, tmp_path):
        """Test globs expand sorted and unmatched patterns pass through."""
        for name in ("b.root", "a.root"):
            (tmp_path / name).write_bytes(b"")
        pattern = str(tmp_path / "*.root")
        files = expand_input_paths([pattern, "root://server//file.root", pattern])
        assert files == [
            str(tmp_path / "a.root"),
            str(tmp_path / "b.root"),
            "root://server//file.root",
        ]


class TestMain:
    """Tests for the command-line entry point."""

    def test_dry_run(self, tmp_path):
        """Test --dry-run validates the config and exits cleanly."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"processes": {"do_data": True}}))
        assert main.main(["--config", str(config_path), "--dry-run"]) == 0

    def test_invalid_config_fails(self, tmp_path):
        """Test an invalid config returns exit code 1."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({"run_metadata": {"output_filename": "out.csv"}}))
        assert main.main(["--config", str(config_path), "--dry-run"]) == 1

    def test_missing_config_fails(self, tmp_path):
        """Test a missing config file returns exit code 1."""
        assert main.main(["--config", str(tmp_path / "nope.yaml"), "--dry-run"]) == 1

    def test_full_run(self, tmp_path):
        """Test a run driven from the command line."""
        input_path = write_event_file(str(tmp_path / "input.root"), [SIGNAL_MOMENTA])
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.safe_dump({
            "run_metadata": {"make_plots": False},
            "input": {"show_progress_bar": False},
            "binning": {"n_bins_pt": 20, "n_bins_invariant_mass": 20, "n_bins_rapidity": 20},
        }))
        run_dir = tmp_path / "run"

        exit_code = main.main([
            "--config", str(config_path),
            "--input", input_path,
            "--run-dir", str(run_dir),
            "--log-level", "WARNING",
        ])
        assert exit_code == 0
        assert (run_dir / "analysis_results.root").exists()

    def test_parse_args_defaults(self):
        """Test default arguments."""
        args = main.parse_args([])
        assert args.config == "config.yaml"
        assert args.log_level == "INFO"
        assert args.dry_run is False
        assert args.input is None
