"""NewsBrief - scheduled AI news briefings delivered by email"""

from __future__ import annotations

__version__ = "1.0.0"
