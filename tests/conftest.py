import gzip

import pytest

SAMPLE_LINES = [
    "2025-05-15 14:25:00 INFO Server started on port 8080",
    "2025-05-15 14:25:01 DEBUG Loading configuration",
    "2025-05-15 14:25:02 WARNING Disk usage at 85%",
    "2025-05-15 14:26:10 ERROR Database connection timeout",
    "continuation line without timestamp",
    "2025-05-15 15:01:00 ERROR Request failed user=alice",
    "2025-05-15 15:02:00 CRITICAL Out of memory",
]


@pytest.fixture
def log_dir(tmp_path):
    """Directory with a plain file, a gzip file and a nested file."""
    root = tmp_path / "logs"
    (root / "nested").mkdir(parents=True)
    (root / "b.log").write_text("\n".join(SAMPLE_LINES[:4]) + "\n")
    with gzip.open(root / "a.log.gz", "wt", encoding="utf-8") as f:
        f.write("\n".join(SAMPLE_LINES[4:6]) + "\n")
    (root / "nested" / "c.log").write_text(SAMPLE_LINES[6] + "\n")
    return root
