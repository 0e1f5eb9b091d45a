"""
Synthesis Result Logger

This module provides persistence for H-infinity synthesis runs. Features
include:

- JSON-based storage of plant, controller and diagnostics with metadata
- Reproducibility tracking (configuration, timestamps, versions)
- CSV summary (one row per design) for external analysis tools
- Integrity verification via checksums of the controller matrices

Data Schema
-----------
{
    "metadata": {
        "timestamp": "2026-10-19T12:00:00",
        "version": "1.0.0",
        "config": { ... },
        "checksums": { "<name>": "<md5>" }
    },
    "designs": {
        "<name>": {
            "plant": {"A": [...], "B": [...], "C": [...], "D": [...],
                      "ncon": 2, "nmeas": 2},
            "controller": {"AK": [...], "BK": [...], "CK": [...], "DK": [...]},
            "gamma": 15.0,
            "rcond": {"control_transformation": ..., ...},
            "closed_loop_norm": 4.2,
            "stable": true,
            "workspace": {"ldwork": ..., ...}
        }
    }
}
"""

import csv
import hashlib
import json
import numpy as np
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


class NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy arrays."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, (np.bool_,)):
            return bool(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def _finite_or_str(value: float):
    """JSON has no inf/nan; store them as strings."""
    value = float(value)
    return value if np.isfinite(value) else str(value)


@dataclass
class LoggerConfig:
    """
    Configuration for the synthesis logger.

    Attributes
    ----------
    output_dir : Path
        Directory for saved data files
    base_filename : str
        Base name for output files
    save_json : bool
        Save JSON format
    save_csv : bool
        Save one-row-per-design CSV summary
    include_checksums : bool
        Add integrity checksums to metadata
    pretty_print : bool
        Format JSON with indentation
    version : str
        Data format version string
    """
    output_dir: Path = field(default_factory=lambda: Path('synthesis_results'))
    base_filename: str = 'hinf_synthesis'
    save_json: bool = True
    save_csv: bool = True
    include_checksums: bool = True
    pretty_print: bool = True
    version: str = '1.0.0'


class SynthesisLogger:
    """
    Data logger for H-infinity synthesis runs.

    Example Usage
    -------------
    >>> logger = SynthesisLogger(LoggerConfig(output_dir=Path('data')))
    >>> logger.add_result('sb10fd_example', plant, result)
    >>> logger.set_config(SynthesisConfig(gamma=15.0))
    >>> logger.save()
    """

    def __init__(self, config: Optional[LoggerConfig] = None):
        self.config = config or LoggerConfig()
        self._designs: Dict[str, Dict[str, Any]] = {}
        self._run_config: Optional[Dict] = None
        self._custom_metadata: Dict[str, Any] = {}
        self._start_time = datetime.now()

    def add_result(self, name: str, plant, result) -> None:
        """
        Add a synthesis result.

        Parameters
        ----------
        name : str
            Design identifier
        plant : PlantModel
            Plant the controller was designed for
        result : SynthesisResult
            Outcome of the synthesis
        """
        self._designs[name] = self._serialize_design(plant, result)

    def set_config(self, config: Any) -> None:
        """Set run configuration (dataclass or dict) for reproducibility."""
        if hasattr(config, '__dataclass_fields__'):
            self._run_config = asdict(config)
        elif isinstance(config, dict):
            self._run_config = config
        else:
            self._run_config = {'raw': str(config)}

    def add_metadata(self, key: str, value: Any) -> None:
        """Add custom metadata (must be JSON-serializable)."""
        self._custom_metadata[key] = value

    def save(self, suffix: Optional[str] = None) -> Dict[str, Path]:
        """
        Save all data to disk.

        Parameters
        ----------
        suffix : str, optional
            Optional suffix for filename

        Returns
        -------
        Dict[str, Path]
            Dictionary of format to saved file path
        """
        saved_files = {}

        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        timestamp = self._start_time.strftime('%Y%m%d_%H%M%S')
        base = f"{self.config.base_filename}_{timestamp}"
        if suffix:
            base = f"{base}_{suffix}"

        data = self.build_data_structure()

        if self.config.save_json:
            json_path = self.config.output_dir / f"{base}.json"
            self._save_json(data, json_path)
            saved_files['json'] = json_path

        if self.config.save_csv:
            csv_path = self.config.output_dir / f"{base}_summary.csv"
            self._save_csv(csv_path)
            saved_files['csv'] = csv_path

        return saved_files

    def build_data_structure(self) -> Dict[str, Any]:
        """Build complete data structure for serialization."""
        return {
            'metadata': self._build_metadata(),
            'designs': dict(self._designs),
        }

    def _build_metadata(self) -> Dict[str, Any]:
        metadata = {
            'timestamp': self._start_time.isoformat(),
            'version': self.config.version,
        }

        if self._run_config:
            metadata['config'] = self._run_config

        if self._custom_metadata:
            metadata['custom'] = self._custom_metadata

        if self.config.include_checksums:
            metadata['checksums'] = self._compute_checksums()

        return metadata

    def _serialize_design(self, plant, result) -> Dict[str, Any]:
        realization = result.realization
        return {
            'plant': {
                'A': plant.A.tolist(),
                'B': plant.B.tolist(),
                'C': plant.C.tolist(),
                'D': plant.D.tolist(),
                'ncon': plant.ncon,
                'nmeas': plant.nmeas,
            },
            'controller': {
                'AK': realization.AK.tolist(),
                'BK': realization.BK.tolist(),
                'CK': realization.CK.tolist(),
                'DK': realization.DK.tolist(),
            },
            'gamma': float(result.gamma),
            'rcond': result.rcond_report(),
            'closed_loop_norm': _finite_or_str(result.closed_loop_norm),
            'stable': result.stable,
            'workspace': result.workspace.to_dict(),
        }

    def _compute_checksums(self) -> Dict[str, str]:
        """md5 over the controller matrices of each design."""
        checksums = {}

        for name, design in self._designs.items():
            K = design['controller']
            combined = np.concatenate([
                np.asarray(K[key], dtype=float).ravel() for key in ('AK', 'BK', 'CK', 'DK')
            ])
            checksums[name] = hashlib.md5(combined.tobytes()).hexdigest()

        return checksums

    def _save_json(self, data: Dict, filepath: Path) -> None:
        indent = 2 if self.config.pretty_print else None

        with open(filepath, 'w') as f:
            json.dump(data, f, cls=NumpyEncoder, indent=indent)

        print(f"  [JSON] Saved: {filepath}")

    def _save_csv(self, filepath: Path) -> None:
        header = ['name', 'n', 'ncon', 'nmeas', 'gamma', 'closed_loop_norm', 'stable',
                  'rcond_control', 'rcond_measurement', 'rcond_x', 'rcond_y']

        with open(filepath, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(header)
            for name, design in self._designs.items():
                writer.writerow([
                    name,
                    len(design['controller']['AK']),
                    design['plant']['ncon'],
                    design['plant']['nmeas'],
                    design['gamma'],
                    design['closed_loop_norm'],
                    design['stable'],
                    *design['rcond'].values(),
                ])

        print(f"  [CSV]  Saved: {filepath}")


def load_results(filepath: Path) -> Dict[str, Any]:
    """
    Load a saved synthesis record.

    Controller and plant matrices are returned as numpy arrays.
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    for design in data.get('designs', {}).values():
        for group in ('plant', 'controller'):
            for key, value in design[group].items():
                if isinstance(value, list):
                    design[group][key] = np.array(value, dtype=float)

    return data
