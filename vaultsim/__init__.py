"""Badge-guarded token vault simulation with sample financial and NFT components."""

__version__ = "0.1.0"
__all__ = [
    "amount",
    "resources",
    "regulated_token",
    "synthetics",
    "perp_futures",
    "magic_card",
    "sporting_event",
]