import os

# experiments.py imports pyplot at module level; keep it off any display
os.environ.setdefault("MPLBACKEND", "Agg")
