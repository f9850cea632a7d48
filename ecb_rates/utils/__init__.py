"""Small helpers shared across ecb_rates."""
