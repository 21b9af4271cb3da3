"""
Results writing utilities for rankKernel.

Writes accuracy tables and a JSON summary for downstream reporting tools.
"""

from typing import Any, Dict, Optional, Union
import json
import re
from datetime import datetime
from pathlib import Path
import pandas as pd

from .results import RunReport
from ..utils.helpers import ensure_directory
from ..utils.logger import get_logger


def _safe_name(name: str) -> str:
    return re.sub(r'[^A-Za-z0-9_.-]+', '_', name).strip('_')


class ResultsWriter:
    """Writer for rankKernel run reports."""

    def __init__(self):
        self.logger = get_logger("ResultsWriter")

    def write(self, report: RunReport, output_dir: Union[str, Path],
              config: Optional[Dict[str, Any]] = None,
              curves: Optional[Dict[str, pd.DataFrame]] = None) -> Path:
        """
        Write a run report.

        Layout::

            output_dir/
              summary.csv
              summary.json
              accuracies/<dataset>__<model>.csv
              curves/<name>.csv

        Returns:
            Path of the JSON summary
        """
        output_dir = Path(output_dir)
        ensure_directory(output_dir / "accuracies")
        self.logger.info(f"Writing results to {output_dir}")

        report.summary_frame().to_csv(output_dir / "summary.csv", index=False)

        for (dataset, model), result in report.results.items():
            table = result.accuracies.to_frame()
            table['selected'] = table['grid_index'].to_numpy() == result.selected[table['fold'].to_numpy()]
            table.to_csv(output_dir / "accuracies" / f"{_safe_name(dataset)}__{_safe_name(model)}.csv",
                         index=False)

        if curves:
            ensure_directory(output_dir / "curves")
            for name, frame in curves.items():
                frame.to_csv(output_dir / "curves" / f"{_safe_name(name)}.csv", index=False)

        summary = {
            'generated': datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            'status': report.status,
            'config': config or {},
            'results': [result.to_dict() for result in report.results.values()],
            'failures': [vars(f) for f in report.failures],
        }
        summary_path = output_dir / "summary.json"
        with open(summary_path, 'w', encoding='utf-8') as f:
            json.dump(summary, f, indent=2, default=str)

        self.logger.info(f"Results written: {len(report.results)} results, status {report.status}")
        return summary_path
