"""
Statistics plotter for analysis output.

Generates separate visualization categories:
1. Selection Flow        – events per selection outcome and process
2. Four-Pion Spectra     – invariant mass, pT and rapidity per registry
3. Collins-Soper Angles  – φ and cos θ per pion pairing
4. Fast Spectra          – columnar four-pion mass, pT and rapidity
"""

import logging
from pathlib import Path
from typing import Optional, Dict, List
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for servers
import matplotlib.pyplot as plt
import numpy as np

from services.aggregation.histograms import HistogramRegistry

OUTCOME_COUNTERS = [
    "rejected_vertex_z",
    "rejected_no_mc_collision",
    "rejected_gap",
    "rejected_contributors",
    "rejected_track_count",
    "background",
    "signal",
]


class StatisticsPlotter:
    """
    Creates separated plot categories from analysis histograms and counters.
    """

    # Consistent color palette
    COLORS = {
        'success': '#27ae60',
        'failure': '#e74c3c',
        'primary': '#2980b9',
        'secondary': '#8e44ad',
        'accent': '#f39c12',
        'info': '#16a085',
        'text_dark': '#2c3e50',
        'grid': '#bdc3c7',
    }

    DOMAIN_COLORS = {
        'domainA': '#2980b9',
        'domainB': '#f39c12',
        'domainC': '#8e44ad',
    }

    def __init__(self, output_dir: str):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger(self.__class__.__name__)
        plt.style.use('seaborn-v0_8-whitegrid')

    # =========================================================================
    # PLOT 1: Selection Flow
    # =========================================================================
    def plot_selection_flow(
        self,
        selection_stats: Dict[str, dict],
        save_name: str = "01_selection_flow.png",
    ) -> Optional[Path]:
        """Horizontal bars of event outcomes, one panel per process."""
        processes = {
            key: stats for key, stats in selection_stats.items()
            if self._safe_float(stats.get('events_seen', 0)) > 0
        }
        if not processes:
            return None
        self.logger.info("Generating selection flow plot...")

        fig, axes = plt.subplots(1, len(processes), figsize=(7 * len(processes), 6), squeeze=False)
        fig.suptitle('Event Selection Flow', fontsize=20, fontweight='bold',
                     color=self.COLORS['text_dark'])

        for ax, (key, stats) in zip(axes[0], processes.items()):
            counts = [self._safe_float(stats.get(name, 0)) for name in OUTCOME_COUNTERS]
            colors = [self.COLORS['failure']] * 5 + [self.COLORS['accent'], self.COLORS['success']]
            bars = ax.barh(OUTCOME_COUNTERS, counts, color=colors, edgecolor='white')
            for bar, count in zip(bars, counts):
                if count > 0:
                    ax.text(bar.get_width(), bar.get_y() + bar.get_height() / 2,
                            f" {int(count):,}", va='center', fontsize=10)
            ax.set_title(f"{key} ({stats.get('acceptance', '0%')} emitted)",
                         fontsize=13, fontweight='bold', pad=10)
            ax.set_xlabel('Events')

        output_path = self.output_dir / save_name
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    # =========================================================================
    # PLOT 2: Four-Pion Spectra
    # =========================================================================
    def plot_four_pion_spectra(
        self,
        registry: HistogramRegistry,
        pid_tag: Optional[str] = None,
    ) -> Optional[Path]:
        """Candidate mass per pT domain plus event pT, for neutral and charged candidates."""
        if pid_tag is None:
            tags = [k[len("pT_event_0charge_"):] for k in registry.keys() if k.startswith("pT_event_0charge_")]
            if not tags:
                return None
            pid_tag = tags[0]
        mass_keys = [k for k in registry.keys() if k.startswith("invMass_event_")]
        if not mass_keys or not any(registry.entries(k) > 0 for k in mass_keys):
            return None
        self.logger.info(f"Generating four-pion spectra for {registry.name}...")

        fig, axes = plt.subplots(2, 2, figsize=(16, 11))
        fig.suptitle(f'Four-Pion Candidates ({registry.name})', fontsize=20, fontweight='bold',
                     color=self.COLORS['text_dark'])

        for row, charge in enumerate(("0charge", "non0charge")):
            ax = axes[row][0]
            for domain, color in self.DOMAIN_COLORS.items():
                key = f"invMass_event_{charge}_{pid_tag}_{domain}"
                if key in registry:
                    self._draw_1d(ax, registry, key, label=domain, color=color)
            ax.set_title(f'Invariant Mass, {charge}', fontsize=13, fontweight='bold', pad=10)
            ax.set_xlabel(r'$m_{4\pi}$ [GeV/$c^2$]')
            ax.legend()

            ax = axes[row][1]
            key = f"pT_event_{charge}_{pid_tag}"
            if key in registry:
                self._draw_1d(ax, registry, key, color=self.COLORS['primary'])
            ax.set_title(f'Event pT, {charge}', fontsize=13, fontweight='bold', pad=10)
            ax.set_xlabel(r'$p_T$ [GeV/$c$]')

        output_path = self.output_dir / f"02_four_pion_spectra_{registry.name}.png"
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    # =========================================================================
    # PLOT 3: Collins-Soper Angles
    # =========================================================================
    def plot_collins_soper(self, registry: HistogramRegistry, prefix: str = "") -> Optional[Path]:
        keys = [f"{prefix}CS_costheta_pair_{i}" for i in (1, 2)]
        if not all(k in registry for k in keys) or not any(registry.entries(k) > 0 for k in keys):
            return None
        self.logger.info(f"Generating Collins-Soper plot for {registry.name}...")

        fig, axes = plt.subplots(2, 3, figsize=(20, 11))
        fig.suptitle(f'Collins-Soper Angles ({registry.name})', fontsize=20, fontweight='bold',
                     color=self.COLORS['text_dark'])

        for row, pair in enumerate((1, 2)):
            self._draw_1d(axes[row][0], registry, f"{prefix}CS_phi_pair_{pair}", color=self.COLORS['info'])
            axes[row][0].set_title(f'$\\phi_{{CS}}$ pair {pair}', fontsize=13, fontweight='bold', pad=10)
            self._draw_1d(axes[row][1], registry, f"{prefix}CS_costheta_pair_{pair}", color=self.COLORS['secondary'])
            axes[row][1].set_title(f'cos $\\theta_{{CS}}$ pair {pair}', fontsize=13, fontweight='bold', pad=10)

            histogram = registry.get(f"{prefix}phi_cosTheta_pair_{pair}")
            x_edges, y_edges = (axis.edges for axis in histogram.axes)
            axes[row][2].pcolormesh(x_edges, y_edges, histogram.values().T, cmap='viridis')
            axes[row][2].set_xlabel(r'$\phi$')
            axes[row][2].set_ylabel(r'cos $\theta$')
            axes[row][2].set_title(f'$\\phi$ vs cos $\\theta$ pair {pair}', fontsize=13, fontweight='bold', pad=10)

        output_path = self.output_dir / f"03_collins_soper_{registry.name}.png"
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    # =========================================================================
    # PLOT 4: Fast Spectra
    # =========================================================================
    def plot_fast_spectra(
        self,
        registry: HistogramRegistry,
        save_name: str = "04_fast_spectra.png",
    ) -> Optional[Path]:
        keys = ["4PionMassFull", "4PionMassWithCut", "4PionPt", "4PionRapidity"]
        if not all(k in registry for k in keys) or registry.entries("4PionMassFull") == 0:
            return None
        self.logger.info("Generating fast spectra plot...")

        fig, axes = plt.subplots(2, 2, figsize=(16, 11))
        fig.suptitle('Four-Pion Fast Spectra', fontsize=20, fontweight='bold',
                     color=self.COLORS['text_dark'])
        for ax, key in zip(axes.flat, keys):
            self._draw_1d(ax, registry, key, color=self.COLORS['primary'])
            ax.set_title(key, fontsize=13, fontweight='bold', pad=10)

        output_path = self.output_dir / save_name
        plt.savefig(output_path, dpi=150, bbox_inches='tight', facecolor='white')
        plt.close(fig)
        self.logger.info(f"Saved: {output_path}")
        return output_path

    # =========================================================================
    # Orchestrator
    # =========================================================================
    def create_all_plots(
        self,
        registries: List[HistogramRegistry],
        selection_stats: Optional[Dict[str, dict]] = None,
    ) -> List[Path]:
        """
        Create all applicable plots based on available data.

        Args:
            registries: Histogram registries of the enabled processes
            selection_stats: Per-process SelectionStatistics.to_dict() output

        Returns:
            List of paths to created plots
        """
        self.logger.info("Creating all plots...")
        created_plots = []

        jobs = []
        if selection_stats:
            jobs.append(("selection flow", lambda: self.plot_selection_flow(selection_stats)))
        for registry in registries:
            if registry.name in ("histosData", "histosMCreco"):
                jobs.append((f"{registry.name} spectra", lambda r=registry: self.plot_four_pion_spectra(r)))
                jobs.append((f"{registry.name} angles", lambda r=registry: self.plot_collins_soper(r)))
            elif registry.name == "histosMCgen":
                jobs.append(("generated angles", lambda r=registry: self.plot_collins_soper(r, prefix="MCgen_")))
            elif registry.name == "histosFast":
                jobs.append(("fast spectra", lambda r=registry: self.plot_fast_spectra(r)))

        for label, job in jobs:
            try:
                path = job()
                if path:
                    created_plots.append(path)
            except Exception as e:
                self.logger.warning(f"Failed to create {label} plot: {e}")

        self.logger.info(f"Created {len(created_plots)} plots")
        return created_plots

    # =========================================================================
    # Helpers
    # =========================================================================
    @staticmethod
    def _draw_1d(ax, registry: HistogramRegistry, key: str, label: Optional[str] = None, color: Optional[str] = None):
        histogram = registry.get(key)
        values = histogram.values()
        edges = histogram.axes[0].edges
        if not np.any(values):
            StatisticsPlotter._empty_panel(ax, "No entries")
            return
        ax.stairs(values, edges, label=label, color=color, linewidth=1.5)
        ax.set_ylabel('Counts')

    @staticmethod
    def _safe_float(val) -> float:
        """Safely convert a value to float, handling strings like '12.5' or '100.0%'."""
        if isinstance(val, (int, float)):
            return float(val)
        if isinstance(val, str):
            try:
                return float(val.rstrip('%'))
            except ValueError:
                return 0.0
        return 0.0

    @staticmethod
    def _empty_panel(ax, message: str):
        """Render an empty panel with a placeholder message."""
        ax.text(0.5, 0.5, message, ha='center', va='center',
                transform=ax.transAxes, fontsize=13, color='#95a5a6',
                style='italic')
        ax.set_xticks([])
        ax.set_yticks([])
