"""Init generator -- writes ``config/rider_kick.yml`` from the active configuration."""

from __future__ import annotations

import yaml

from rider_kick.config import DEFAULT_CONFIG_FILE
from rider_kick.generators.base import BaseGenerator


class InitGenerator(BaseGenerator):
    """Persists the current configuration so later runs pick it up."""

    def generate(self) -> str:
        settings = yaml.safe_dump(
            self.config.as_yaml_dict(), sort_keys=False, default_flow_style=False
        )
        destination = DEFAULT_CONFIG_FILE.as_posix()
        self.template("init/rider_kick.yml.j2", destination, {"settings": settings.rstrip("\n")})
        return destination
