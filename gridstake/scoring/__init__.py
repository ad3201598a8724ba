"""Accuracy scoring for energy-demand forecasts.

- Integer cycle and basis-point error math (``accuracy``)
- Oracle actuals and exactly-once verification (``engine``)
- Score-weighted reward allocation per region+cycle (``rewards``)
"""

from __future__ import annotations

__all__: list[str] = []
