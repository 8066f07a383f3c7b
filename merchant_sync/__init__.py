"""Client-side data freshness and offline resilience for the merchant app."""
