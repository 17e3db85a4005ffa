import os
from dataclasses import dataclass, field
from typing import List, Optional

from libs.core.project_paths import get_project_root
from libs.llm_gemini.errors import ConfigurationError


@dataclass
class APIKeyManager:
    """
    API key loader (atomic capability).

    - candidate variable names are checked in order
    - real environment first, then the project root `.env`
    - keys passed explicitly come last
    """

    key_env_vars: List[str] = field(
        default_factory=lambda: ["GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY"]
    )
    keys: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        loaded = []
        loaded.extend(self._load_from_env(self.key_env_vars))
        loaded.extend(self._load_from_dotenv(self.key_env_vars))
        loaded.extend([k.strip() for k in self.keys if k and k.strip()])
        # dedupe, keep order
        self.keys = list(dict.fromkeys([k for k in loaded if k]))

    def _load_from_env(self, env_vars: List[str]) -> List[str]:
        out: List[str] = []
        for name in env_vars:
            v = os.getenv(name)
            if v and v.strip():
                out.append(v.strip())
        return out

    def _load_from_dotenv(self, env_vars: List[str]) -> List[str]:
        """
        Read the project root `.env` (not the working directory).

        Only simple KEY=VALUE lines are understood, and only the
        variables listed in env_vars are picked up.
        """
        env_path = get_project_root() / ".env"
        if not env_path.exists():
            return []

        content = env_path.read_text(encoding="utf-8", errors="ignore").splitlines()
        values: List[str] = []
        want = set(env_vars)
        for line in content:
            s = line.strip()
            if not s or s.startswith("#") or "=" not in s:
                continue
            k, v = s.split("=", 1)
            k = k.strip()
            if k not in want:
                continue
            v = v.strip().strip('"').strip("'")
            if v:
                values.append(v)
        return values

    def get_key(self) -> Optional[str]:
        return self.keys[0] if self.keys else None

    def require_key(self) -> str:
        key = self.get_key()
        if not key:
            raise ConfigurationError(
                "API key not found: set one of " + ", ".join(self.key_env_vars)
            )
        return key

    def available_count(self) -> int:
        return len(self.keys)


def get_default_api_key_manager() -> APIKeyManager:
    return APIKeyManager()
