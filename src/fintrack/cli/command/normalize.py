from __future__ import annotations

"""
Show the merchant key derived from raw statement descriptions.
"""

from rich.table import Table

from fintrack.services.merchant_normalization_service import MerchantNormalizationService

from .util import console


def run(*, descriptions: list[str]) -> int:
    """Print one row per description with its merchant key.

    Returns:
        Exit code (0 = every description has a key, 1 = at least one has none)
    """
    if not descriptions:
        console.print("[yellow]No descriptions given.[/]")
        return 1

    normalizer = MerchantNormalizationService()
    table = Table(title="Merchant keys")
    table.add_column("Description")
    table.add_column("Merchant key", style="bold cyan")

    missing = 0
    for description in descriptions:
        key = normalizer.normalize(description)
        if key is None:
            missing += 1
        table.add_row(description, key or "[dim](none)[/]")

    console.print(table)
    return 1 if missing else 0
