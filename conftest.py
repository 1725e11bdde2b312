# Put src/ (crawlcore, cli) and tests/ (shared fakes) on sys.path for the suite
import sys
from pathlib import Path
root = Path(__file__).parent
for extra in (root / "src", root / "tests"):
    if str(extra) not in sys.path:
        sys.path.insert(0, str(extra))
