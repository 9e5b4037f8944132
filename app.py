"""Streamlit Cloud entry point for Matchday Insights."""
import sys
from pathlib import Path

# Make the matchday package importable without installing it
sys.path.insert(0, str(Path(__file__).parent))

from matchday.ui.dashboard import main

if __name__ == "__main__":
    main()
