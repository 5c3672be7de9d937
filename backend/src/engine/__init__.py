"""Pixel sort engine: grids, keys, permutations, direct sort, render."""
