"""Report container shared by the rental, sports and factory reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
import matplotlib.pyplot as plt


@dataclass
class Report:
    title: str
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    figures: Dict[str, Any] = field(default_factory=dict)
    models: Optional[pd.DataFrame] = None

    def print(self, max_rows: int = 15) -> None:
        print(f"\n{'='*80}")
        print(f"  {self.title.upper()}")
        print(f"{'='*80}")
        for name, table in self.tables.items():
            print(f"\n  -- {name} --")
            print(table.head(max_rows).to_string(float_format=lambda v: f"{v:,.2f}"))
        if self.models is not None:
            print("\n  -- Regression models --")
            print(self.models.to_string(float_format=lambda v: f"{v:,.3f}"))

    def save(self, out_dir) -> Path:
        """Write tables as CSV and figures as PNG under out_dir."""
        out = Path(out_dir)
        out.mkdir(parents=True, exist_ok=True)
        for name, table in self.tables.items():
            table.to_csv(out / f"{name}.csv")
        if self.models is not None:
            self.models.to_csv(out / "models.csv")
        for name, fig in self.figures.items():
            fig.savefig(out / f"{name}.png", dpi=120)
        return out

    def close(self) -> None:
        for fig in self.figures.values():
            plt.close(fig)
