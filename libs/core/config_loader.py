import json
import logging
from typing import Any, Dict

from .project_paths import get_project_root

logger = logging.getLogger(__name__)


def load_root_config() -> Dict[str, Any]:
    """
    Load `config.json` from the project root (independent of the working directory).

    Note:
    - precedence (env > .env > config.json > default) is up to the caller
    - a malformed file is logged and treated as empty
    """
    config_path = get_project_root() / "config.json"
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config.json: %s", e)
        return {}
    return data if isinstance(data, dict) else {}
