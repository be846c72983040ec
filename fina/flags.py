import json
import logging
import os
from dataclasses import asdict, dataclass

logger = logging.getLogger(__name__)


@dataclass
class AppFlags:
    """The only state kept between sessions."""

    has_seen_tutorial: bool = False
    is_subscribed: bool = False

    @classmethod
    def load(cls, path: str) -> "AppFlags":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return cls()
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable flags file %s: %s", path, e)
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls(
            has_seen_tutorial=data.get("has_seen_tutorial") is True,
            is_subscribed=data.get("is_subscribed") is True,
        )

    def save(self, path: str) -> None:
        folder = os.path.dirname(path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f)

    def mark_tutorial_seen(self, path: str) -> None:
        self.has_seen_tutorial = True
        self.save(path)

    def subscribe(self, path: str) -> None:
        self.is_subscribed = True
        self.save(path)
