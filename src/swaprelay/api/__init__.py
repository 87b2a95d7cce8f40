"""HTTP surface for the swap workflow."""
