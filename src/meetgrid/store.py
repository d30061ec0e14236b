import logging
from pathlib import Path

logger = logging.getLogger(__name__)

STATE_PATH = Path.home() / ".local" / "share" / "meetgrid" / "state.txt"


class FragmentStore:
    """Keeps the most recent share fragment on disk between runs."""

    def __init__(self, path: Path | None = None):
        self.path = path or STATE_PATH

    def load(self) -> str | None:
        """Read the stored fragment, or None if there is nothing usable."""
        if not self.path.exists():
            return None
        try:
            text = self.path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read state file %s: %s", self.path, exc)
            return None
        return text or None

    def save(self, fragment: str):
        """Persist the fragment via atomic temp-file swap."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(fragment + "\n")
        tmp_path.replace(self.path)
