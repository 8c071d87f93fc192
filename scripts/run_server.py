from __future__ import annotations

import os
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.classroom_attendance.classroom_attendance.main import create_app


def main() -> None:
    app = create_app()
    # The reloader would start a second scheduler in the child process.
    app.run(host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000")), use_reloader=False)


if __name__ == "__main__":
    main()
