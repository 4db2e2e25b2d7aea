"""
Central configuration for the FinTrack engine.

Path resolution lives in fintrack.workspace.Workspace, which computes every
data location from a single root:
  1. Explicit --data-dir CLI option
  2. FINTRACK_DATA environment variable
  3. Current working directory
"""

from decimal import Decimal

DEFAULT_CURRENCY = "BRL"

# Monetary amounts are kept at cent precision, percentages at four places.
MONEY_PLACES = 2
PERCENTAGE_PLACES = 4

# Distributions whose percentages drift further than this from 1.0 are rejected.
PERCENTAGE_SUM_TOLERANCE = Decimal("0.01")

# Confirmations required before a merchant rule is applied without asking.
AUTO_APPLY_THRESHOLD = 1

# Fee-like items are deduplicated on description, amount and date only.
SPECIAL_ITEM_MARKERS = (
    "iof",
    "taxa",
    "tarifa",
    "fee",
    "charge",
    "cobrança",
    "despesa no exterior",
    "foreign transaction",
    "international fee",
    "currency conversion",
)

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#CCCCCC"
