import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from stepselect.pipeline import main                # noqa: E402

if __name__ == "__main__":
    main()
